# app/schemas/docente.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from app.schemas.common import PaginacionInfo
from app.utils.normalizacion import normalizar_codigo_docente, normalizar_rfc


class DocenteBase(BaseModel):
    codigo_interno: str = Field(..., min_length=1, max_length=20, examples=["000123"])
    nombre: str = Field(..., min_length=2, max_length=200)
    rfc: str = Field(..., min_length=9, max_length=13, examples=["XAXX010101000"])

    @field_validator("codigo_interno")
    @classmethod
    def _codigo(cls, v: str) -> str:
        return normalizar_codigo_docente(v)

    @field_validator("rfc")
    @classmethod
    def _rfc(cls, v: str) -> str:
        return normalizar_rfc(v)

    @field_validator("nombre")
    @classmethod
    def _nombre(cls, v: str) -> str:
        return v.strip()


class DocenteCreate(DocenteBase):
    activo: bool = True


class DocenteUpdate(BaseModel):
    codigo_interno: Optional[str] = Field(None, min_length=1, max_length=20)
    nombre: Optional[str] = Field(None, min_length=2, max_length=200)
    rfc: Optional[str] = Field(None, min_length=9, max_length=13)
    activo: Optional[bool] = None

    @field_validator("codigo_interno")
    @classmethod
    def _codigo(cls, v: Optional[str]) -> Optional[str]:
        return normalizar_codigo_docente(v) if v is not None else v

    @field_validator("rfc")
    @classmethod
    def _rfc(cls, v: Optional[str]) -> Optional[str]:
        return normalizar_rfc(v) if v is not None else v


class DocenteRead(BaseModel):
    id: int
    codigo_interno: str
    nombre: str
    rfc: str
    activo: bool

    class Config:
        from_attributes = True


class DocenteListResponse(BaseModel):
    data: List[DocenteRead]
    pagination: PaginacionInfo


class DocenteEliminadoResponse(BaseModel):
    mensaje: str
    eliminado: bool
    desactivado: bool


class ErrorImportacion(BaseModel):
    linea: int
    codigo_interno: Optional[str] = None
    rfc: Optional[str] = None
    error: str


class ImportacionDocentesResponse(BaseModel):
    total: int
    insertados: int
    actualizados: int
    errores: List[ErrorImportacion]
    errores_archivo: Optional[str] = None
