# app/schemas/usuario.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from app.schemas.common import PaginacionInfo


class RoleRead(BaseModel):
    id: int
    nombre: str

    class Config:
        from_attributes = True


class UsuarioBase(BaseModel):
    nombre: str = Field(..., min_length=2, max_length=150)
    correo: EmailStr


class UsuarioCreate(UsuarioBase):
    password: str = Field(..., min_length=6)
    roles: List[str] = Field(..., min_length=1, examples=[["COORD"]])


class UsuarioUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=2, max_length=150)
    activo: Optional[bool] = None
    roles: Optional[List[str]] = Field(None, min_length=1)
    password: Optional[str] = Field(None, min_length=6)


class UsuarioRead(UsuarioBase):
    id: int
    activo: bool
    roles: List[str]
    creado_en: Optional[datetime] = None

    class Config:
        from_attributes = True


class UsuarioListResponse(BaseModel):
    data: List[UsuarioRead]
    pagination: PaginacionInfo


class UsuarioEliminadoResponse(BaseModel):
    mensaje: str
    eliminado: bool
    desactivado: bool
