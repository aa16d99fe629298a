# app/api/v1/routers/auth.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.security import get_current_usuario
from app.db.session import get_db
from app.models.usuario import Usuario
from app.schemas.auth import LoginRequest, MeResponse, TokenResponse
from app.schemas.common import ErrorResponse
from app.services import usuario_service

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="Iniciar sesión",
    description="Valida correo y contraseña y regresa un JWT con vigencia de 8 horas.",
)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return usuario_service.autenticar(db, payload.correo, payload.password)


# Montado en /api/me desde el router principal
me_router = APIRouter()


@me_router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Usuario actual",
)
def me(usuario: Usuario = Depends(get_current_usuario)):
    return {"id": usuario.id, "nombre": usuario.nombre, "correo": usuario.correo, "roles": usuario.roles}
