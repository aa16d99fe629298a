#app/api/v1/routers/areas.py
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.policies import requiere
from app.crud import area as crud_area
from app.db.session import get_db
from app.models.usuario import Usuario
from app.schemas.area import (
    AreaConCoordinadores,
    AreaCreate,
    AreaEliminadaResponse,
    AreaRead,
    AreaUpdate,
    AsignarCoordinadorRequest,
    CoordinadorRead,
)
from app.schemas.common import ErrorNegocioResponse
from app.services import area_service

router = APIRouter()


@router.get("/mis-areas", response_model=List[AreaRead], summary="Áreas del coordinador actual")
def mis_areas(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("areas.mis_areas")),
):
    return crud_area.list_areas_de_usuario(db, current_user.id)


@router.get("", response_model=List[AreaConCoordinadores], summary="Listar áreas con sus coordinadores")
def list_areas(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("areas.listar")),
):
    return [area_service.serializar_area(a, con_coordinadores=True) for a in crud_area.list_areas(db)]


@router.get("/{area_id}", response_model=AreaConCoordinadores, summary="Obtener área")
def get_area(
    area_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("areas.obtener")),
):
    return area_service.serializar_area(area_service.obtener_area(db, area_id), con_coordinadores=True)


@router.post(
    "",
    response_model=AreaRead,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorNegocioResponse}},
    summary="Crear área",
)
def create_area(
    payload: AreaCreate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("areas.crear")),
):
    return area_service.crear_area(db, payload, current_user.id)


@router.put("/{area_id}", response_model=AreaRead, summary="Actualizar área")
def update_area(
    area_id: int,
    payload: AreaUpdate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("areas.actualizar")),
):
    return area_service.actualizar_area(db, area_id, payload, current_user.id)


@router.delete(
    "/{area_id}",
    response_model=AreaEliminadaResponse,
    summary="Eliminar área",
    description="Si el área tiene coordinadores o cargas se desactiva en lugar de borrarse.",
)
def delete_area(
    area_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("areas.eliminar")),
):
    return area_service.eliminar_area(db, area_id, current_user.id)


# ==================== COORDINADORES ====================

@router.get("/{area_id}/coordinadores", response_model=List[CoordinadorRead], summary="Coordinadores del área")
def list_coordinadores(
    area_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("areas.coordinadores.listar")),
):
    return area_service.listar_coordinadores(db, area_id)


@router.post(
    "/{area_id}/coordinadores",
    response_model=CoordinadorRead,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorNegocioResponse}, 409: {"model": ErrorNegocioResponse}},
    summary="Asignar coordinador",
)
def asignar_coordinador(
    area_id: int,
    payload: AsignarCoordinadorRequest,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("areas.coordinadores.asignar")),
):
    return area_service.asignar_coordinador(db, area_id, payload.usuario_id, current_user.id)


@router.delete(
    "/{area_id}/coordinadores/{usuario_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Quitar coordinador",
)
def quitar_coordinador(
    area_id: int,
    usuario_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("areas.coordinadores.quitar")),
):
    area_service.quitar_coordinador(db, area_id, usuario_id, current_user.id)
