#app/api/v1/routers/pagos.py
"""
Reportes de pagos (ADMIN / RH).
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.policies import requiere
from app.db.session import get_db
from app.models.usuario import Usuario
from app.schemas.common import ErrorNegocioResponse
from app.schemas.pago import ReportePagosResponse
from app.services import reporte_pagos
from app.utils.archivos import MEDIA_ZIP, respuesta_descarga
from app.utils.logger import logger

router = APIRouter()


@router.get(
    "/reporte",
    response_model=ReportePagosResponse,
    responses={400: {"model": ErrorNegocioResponse}, 404: {"model": ErrorNegocioResponse}},
    summary="Reporte de pagos paginado",
    description="`ordenar_por` acepta `area`, `docente` o `materia`.",
)
def reporte(
    periodo_id: int = Query(...),
    area_id: Optional[int] = Query(None),
    query: Optional[str] = Query(None),
    ordenar_por: str = Query("area"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=500, alias="pageSize"),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("pagos.reporte")),
):
    return reporte_pagos.reporte_paginado(db, periodo_id, area_id, query, ordenar_por, page, page_size)


# -----------------------------------------------------
# Exportaciones
# -----------------------------------------------------
@router.get("/exportar/excel", summary="Exportar pivote docente x área a Excel")
def exportar_excel(
    periodo_id: int = Query(...),
    area_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("pagos.exportar")),
):
    contenido, nombre = reporte_pagos.exportar_excel(db, periodo_id, area_id)
    logger.info("Reporte de pagos exportado por %s: %s", current_user.correo, nombre)
    return respuesta_descarga(contenido, nombre)


@router.get(
    "/exportar/areas/zip",
    responses={400: {"model": ErrorNegocioResponse}},
    summary="Exportar un libro por área en un ZIP",
)
def exportar_areas_zip(
    periodo_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("pagos.exportar")),
):
    contenido, nombre = reporte_pagos.exportar_areas_zip(db, periodo_id)
    logger.info("Reportes por área (zip) exportados por %s", current_user.correo)
    return respuesta_descarga(contenido, nombre, MEDIA_ZIP)


@router.get(
    "/exportar/areas/excel-multihojas",
    responses={400: {"model": ErrorNegocioResponse}},
    summary="Exportar una hoja por área en un solo libro",
)
def exportar_areas_multihojas(
    periodo_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("pagos.exportar")),
):
    contenido, nombre = reporte_pagos.exportar_areas_multihojas(db, periodo_id)
    logger.info("Reportes por área (multihojas) exportados por %s", current_user.correo)
    return respuesta_descarga(contenido, nombre)
