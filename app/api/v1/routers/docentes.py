#app/api/v1/routers/docentes.py
from typing import Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.core.policies import requiere, verificar_area
from app.db.session import get_db
from app.models.usuario import Usuario
from app.schemas.common import ErrorNegocioResponse
from app.schemas.docente import (
    DocenteCreate,
    DocenteEliminadoResponse,
    DocenteListResponse,
    DocenteRead,
    DocenteUpdate,
    ImportacionDocentesResponse,
)
from app.services import docente_service
from app.utils.archivos import leer_upload, respuesta_descarga
from app.utils.logger import logger

router = APIRouter()


@router.get(
    "",
    response_model=DocenteListResponse,
    summary="Listar docentes",
    description="Busca por código, nombre o RFC. Con `area_id` solo regresa docentes con cargas en esa área.",
)
def list_docentes(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    query: Optional[str] = Query(None),
    area_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("docentes.listar")),
):
    if area_id:
        verificar_area(db, current_user, "docentes.listar", area_id)
    return docente_service.listar_docentes(db, query, area_id, page, page_size)


# -----------------------------------------------------
# Plantilla e importación masiva
# -----------------------------------------------------
@router.get("/plantilla", summary="Descargar plantilla de docentes")
def plantilla_docentes(current_user: Usuario = Depends(requiere("docentes.plantilla"))):
    return respuesta_descarga(docente_service.generar_plantilla(), "plantilla_docentes.xlsx")


@router.post(
    "/import",
    response_model=ImportacionDocentesResponse,
    responses={400: {"model": ErrorNegocioResponse}},
    summary="Importar docentes desde CSV/XLSX",
    description="""
    Inserta o actualiza docentes por código interno.

    - Los códigos numéricos se rellenan con ceros a la izquierda.
    - Las filas con errores no detienen la importación; si hay errores se
      genera un reporte JSON cuya URL se regresa en `errores_archivo`.
    """,
)
async def importar_docentes(
    archivo: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("docentes.importar")),
):
    contenido = await leer_upload(archivo)
    logger.info("Importación de docentes %s por %s", archivo.filename, current_user.correo)
    return docente_service.importar_docentes(db, contenido, archivo.filename or "docentes.xlsx", current_user.id)


@router.get("/{docente_id}", response_model=DocenteRead, summary="Obtener docente")
def get_docente(
    docente_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("docentes.listar")),
):
    return docente_service.obtener_docente(db, docente_id)


@router.post(
    "",
    response_model=DocenteRead,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorNegocioResponse}, 409: {"model": ErrorNegocioResponse}},
    summary="Crear docente",
)
def create_docente(
    payload: DocenteCreate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("docentes.crear")),
):
    return docente_service.crear_docente(db, payload, current_user.id)


@router.put(
    "/{docente_id}",
    response_model=DocenteRead,
    responses={404: {"model": ErrorNegocioResponse}, 409: {"model": ErrorNegocioResponse}},
    summary="Actualizar docente",
)
def update_docente(
    docente_id: int,
    payload: DocenteUpdate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("docentes.actualizar")),
):
    return docente_service.actualizar_docente(db, docente_id, payload, current_user.id)


@router.delete("/{docente_id}", response_model=DocenteEliminadoResponse, summary="Eliminar docente")
def delete_docente(
    docente_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(requiere("docentes.eliminar")),
):
    return docente_service.eliminar_docente(db, docente_id, current_user.id)
