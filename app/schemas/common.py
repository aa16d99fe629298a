from pydantic import BaseModel
from typing import Any


class ErrorResponse(BaseModel):
    detail: Any


class ErrorNegocioDetalle(BaseModel):
    """Cuerpo de ``detail`` para errores de negocio."""
    code: str
    mensaje: str


class ErrorNegocioResponse(BaseModel):
    detail: ErrorNegocioDetalle


class PaginacionInfo(BaseModel):
    total: int
    page: int
    pageSize: int
    totalPages: int


class HealthResponse(BaseModel):
    status: str
    timestamp: str
