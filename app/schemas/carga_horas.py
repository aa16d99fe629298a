# app/schemas/carga_horas.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.schemas.common import PaginacionInfo


class FilaCargaHoras(BaseModel):
    """Fila de carga tal como llega del cliente; se valida en el servicio."""
    codigo_interno: Any = None
    nombre: Optional[Any] = None
    rfc: Optional[Any] = None
    materia: Any = None
    horas: Any = None
    costo_hora: Any = None
    pagable: Any = None
    linea: Optional[int] = None


class FilaCargaNormalizada(BaseModel):
    linea: Optional[int] = None
    codigo_interno: str
    nombre: Optional[str] = None
    rfc: Optional[str] = None
    materia: str
    horas: float
    costo_hora: float
    pagable: bool
    importe: float


class ErrorFila(BaseModel):
    linea: Optional[int] = None
    mensaje: str


class PreviewCargaResponse(BaseModel):
    datos: List[FilaCargaNormalizada]
    errores: List[ErrorFila] = []


class ProcesarIndividualRequest(BaseModel):
    dato: FilaCargaHoras
    periodo_id: int
    area_id: int


class ConfirmarCargaRequest(BaseModel):
    datos: List[FilaCargaHoras] = Field(..., min_length=1)
    periodo_id: int
    area_id: int


class ConfirmarCargaResponse(BaseModel):
    registrados: int
    errores: int
    detalle_errores: List[ErrorFila] = []
    mensaje: str


class CargaHorasRead(BaseModel):
    id: int
    periodo_id: int
    area_id: int
    docente_id: int
    codigo_interno: str
    nombre_docente: str
    rfc: str
    area: str
    materia_text: str
    horas: float
    costo_hora: float
    importe: float
    pagable: bool
    version: int
    actualizado_en: Optional[datetime] = None


class CargaHorasListResponse(BaseModel):
    data: List[CargaHorasRead]
    pagination: PaginacionInfo


class CargaEliminadaResponse(BaseModel):
    mensaje: str
    id: int
    data: Optional[Dict[str, Any]] = None
