#app/api/v1/routers/carga_horas.py
"""
Router de carga de horas.

Flujo del coordinador: descargar plantilla, procesar el archivo para
previsualizar y confirmar las filas válidas.
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.core.policies import requiere
from app.db.session import get_db
from app.models.usuario import Usuario
from app.schemas.carga_horas import (
    CargaEliminadaResponse,
    CargaHorasListResponse,
    ConfirmarCargaRequest,
    ConfirmarCargaResponse,
    PreviewCargaResponse,
    ProcesarIndividualRequest,
)
from app.schemas.common import ErrorNegocioResponse
from app.services import carga_horas_service
from app.utils.archivos import leer_upload, respuesta_descarga
from app.utils.logger import logger

router = APIRouter()

RESPUESTAS_CONTEXTO = {
    403: {"model": ErrorNegocioResponse, "description": "El usuario no coordina el área"},
    404: {"model": ErrorNegocioResponse, "description": "Periodo o área no encontrados"},
    409: {"model": ErrorNegocioResponse, "description": "El periodo no está ABIERTO"},
}


@router.get(
    "/plantillas",
    responses=RESPUESTAS_CONTEXTO,
    summary="Descargar plantilla de carga de horas",
    description="Lista los docentes activos con materia, horas y costo vacíos y pagable = 1.",
)
def plantilla_carga(
    periodo_id: int = Query(...),
    area_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("carga_horas.plantilla")),
):
    contenido, nombre = carga_horas_service.generar_plantilla(db, current_user, periodo_id, area_id)
    return respuesta_descarga(contenido, nombre)


@router.post(
    "/procesar",
    response_model=PreviewCargaResponse,
    responses={**RESPUESTAS_CONTEXTO, 400: {"model": ErrorNegocioResponse}},
    summary="Previsualizar archivo de carga",
    description="Valida el archivo (CSV/XLSX/XLS) y regresa los datos normalizados y los errores por línea. No guarda cargas.",
)
async def procesar_archivo(
    archivo: UploadFile = File(...),
    periodo_id: int = Form(...),
    area_id: int = Form(...),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("carga_horas.procesar")),
):
    contenido = await leer_upload(archivo)
    logger.info("Procesando archivo de carga %s (periodo=%s, área=%s)", archivo.filename, periodo_id, area_id)
    return carga_horas_service.procesar_archivo(
        db, current_user, contenido, archivo.filename or "carga.xlsx", periodo_id, area_id
    )


@router.post(
    "/procesar-individual",
    response_model=PreviewCargaResponse,
    responses=RESPUESTAS_CONTEXTO,
    summary="Previsualizar un registro capturado a mano",
)
def procesar_individual(
    payload: ProcesarIndividualRequest,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("carga_horas.procesar_individual")),
):
    return carga_horas_service.procesar_individual(
        db, current_user, payload.dato.model_dump(), payload.periodo_id, payload.area_id
    )


@router.post(
    "/confirmar",
    response_model=ConfirmarCargaResponse,
    responses=RESPUESTAS_CONTEXTO,
    summary="Confirmar carga de horas",
    description="""
    Inserta o actualiza cada fila por su llave natural (docente, periodo, área, materia).

    - Las filas inválidas se reportan en `detalle_errores` sin detener el lote.
    - Una materia repetida para el mismo docente dentro del lote se rechaza.
    - Al actualizar un registro existente su `version` se incrementa.
    """,
)
def confirmar_carga(
    payload: ConfirmarCargaRequest,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("carga_horas.confirmar")),
):
    filas = [d.model_dump() for d in payload.datos]
    return carga_horas_service.confirmar_carga(db, current_user, filas, payload.periodo_id, payload.area_id)


@router.get(
    "",
    response_model=CargaHorasListResponse,
    responses={403: {"model": ErrorNegocioResponse}},
    summary="Listar cargas de un periodo y área",
)
def list_cargas(
    periodo_id: int = Query(...),
    area_id: int = Query(...),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    query: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("carga_horas.listar")),
):
    return carga_horas_service.listar_cargas(db, current_user, periodo_id, area_id, query, page, page_size)


@router.delete(
    "/{carga_id}",
    response_model=CargaEliminadaResponse,
    responses=RESPUESTAS_CONTEXTO,
    summary="Eliminar carga de horas",
)
def delete_carga(
    carga_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("carga_horas.eliminar")),
):
    return carga_horas_service.eliminar_carga(db, current_user, carga_id)
