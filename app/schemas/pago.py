# app/schemas/pago.py
from pydantic import BaseModel
from typing import List

from app.schemas.common import PaginacionInfo


class FilaReportePago(BaseModel):
    id: int
    periodo_id: int
    area_id: int
    area: str
    docente_id: int
    codigo_interno: str
    nombre_docente: str
    rfc: str
    materia_text: str
    horas: float
    costo_hora: float
    importe: float
    pagable: bool


class ReportePagosResponse(BaseModel):
    data: List[FilaReportePago]
    pagination: PaginacionInfo
