#app/api/v1/routers/usuarios.py
"""
Router para gestión de Usuarios (solo ADMIN; RH puede consultar).
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.policies import requiere
from app.db.session import get_db
from app.models.usuario import Usuario
from app.schemas.common import ErrorNegocioResponse
from app.schemas.usuario import (
    RoleRead,
    UsuarioCreate,
    UsuarioEliminadoResponse,
    UsuarioListResponse,
    UsuarioRead,
    UsuarioUpdate,
)
from app.services import usuario_service

router = APIRouter()


@router.get(
    "/roles",
    response_model=List[RoleRead],
    summary="Listar roles",
)
def list_roles(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("usuarios.roles")),
):
    return usuario_service.listar_roles(db)


@router.get(
    "",
    response_model=UsuarioListResponse,
    summary="Listar usuarios",
    description="Listado paginado; `query` busca por nombre o correo.",
)
def list_usuarios(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    query: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("usuarios.listar")),
):
    return usuario_service.listar_usuarios(db, query, page, page_size)


@router.post(
    "",
    response_model=UsuarioRead,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorNegocioResponse}, 409: {"model": ErrorNegocioResponse}},
    summary="Crear usuario",
)
def create_usuario(
    payload: UsuarioCreate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("usuarios.crear")),
):
    u = usuario_service.crear_usuario(db, payload, current_user.id)
    return usuario_service.serializar_usuario(u)


@router.put(
    "/{usuario_id}",
    response_model=UsuarioRead,
    responses={404: {"model": ErrorNegocioResponse}},
    summary="Actualizar usuario",
    description="Actualiza nombre, estado, contraseña o reemplaza la lista de roles.",
)
def update_usuario(
    usuario_id: int,
    payload: UsuarioUpdate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("usuarios.actualizar")),
):
    u = usuario_service.actualizar_usuario(db, usuario_id, payload, current_user.id)
    return usuario_service.serializar_usuario(u)


@router.delete(
    "/{usuario_id}",
    response_model=UsuarioEliminadoResponse,
    responses={404: {"model": ErrorNegocioResponse}},
    summary="Eliminar usuario",
    description="Si el usuario tiene registros asociados se desactiva en lugar de borrarse.",
)
def delete_usuario(
    usuario_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("usuarios.eliminar")),
):
    return usuario_service.eliminar_usuario(db, usuario_id, current_user)
