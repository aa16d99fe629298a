#app/api/v1/routers/periodos.py
"""
Router de periodos de nómina y sus transiciones de estado.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.policies import requiere
from app.db.session import get_db
from app.models.usuario import Usuario
from app.schemas.common import ErrorNegocioResponse
from app.schemas.periodo import PeriodoCreate, PeriodoRead, PeriodoUpdate
from app.services import periodo_service

router = APIRouter()

RESPUESTAS_TRANSICION = {
    404: {"model": ErrorNegocioResponse, "description": "Periodo no encontrado"},
    409: {"model": ErrorNegocioResponse, "description": "Transición inválida o ya hay un periodo abierto"},
}


@router.get(
    "",
    response_model=List[PeriodoRead],
    summary="Listar periodos",
    description="Los coordinadores solo ven los periodos ABIERTOS.",
)
def list_periodos(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("periodos.listar")),
):
    return periodo_service.listar_periodos(db, current_user)


@router.get("/{periodo_id}", response_model=PeriodoRead, summary="Obtener periodo")
def get_periodo(
    periodo_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("periodos.obtener")),
):
    return periodo_service.obtener_periodo(db, periodo_id)


@router.post(
    "",
    response_model=PeriodoRead,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorNegocioResponse}, 409: {"model": ErrorNegocioResponse}},
    summary="Crear periodo",
    description="El periodo se crea en estado BORRADOR.",
)
def create_periodo(
    payload: PeriodoCreate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("periodos.crear")),
):
    return periodo_service.crear_periodo(db, payload, current_user.id)


@router.patch(
    "/{periodo_id}",
    response_model=PeriodoRead,
    responses=RESPUESTAS_TRANSICION,
    summary="Actualizar periodo",
    description="Nombre y fechas solo se pueden editar en BORRADOR.",
)
def update_periodo(
    periodo_id: int,
    payload: PeriodoUpdate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("periodos.actualizar")),
):
    return periodo_service.actualizar_periodo(db, periodo_id, payload, current_user.id)


# ==================== TRANSICIONES ====================

@router.patch("/{periodo_id}/abrir", response_model=PeriodoRead, responses=RESPUESTAS_TRANSICION,
              summary="Abrir periodo (BORRADOR -> ABIERTO)")
def abrir_periodo(
    periodo_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("periodos.abrir")),
):
    return periodo_service.abrir_periodo(db, periodo_id, current_user.id)


@router.patch("/{periodo_id}/cerrar", response_model=PeriodoRead, responses=RESPUESTAS_TRANSICION,
              summary="Cerrar periodo (ABIERTO -> CERRADO)")
def cerrar_periodo(
    periodo_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("periodos.cerrar")),
):
    return periodo_service.cerrar_periodo(db, periodo_id, current_user.id)


@router.patch("/{periodo_id}/reportar", response_model=PeriodoRead, responses=RESPUESTAS_TRANSICION,
              summary="Marcar periodo como reportado (CERRADO -> REPORTADO)")
def reportar_periodo(
    periodo_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("periodos.reportar")),
):
    return periodo_service.reportar_periodo(db, periodo_id, current_user.id)
