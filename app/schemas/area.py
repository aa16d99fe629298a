# app/schemas/area.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional


class AreaBase(BaseModel):
    nombre: str = Field(..., min_length=3, max_length=150)


class AreaCreate(AreaBase):
    activo: bool = True


class AreaUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=3, max_length=150)
    activo: Optional[bool] = None


class CoordinadorRead(BaseModel):
    id: int
    nombre: str
    correo: EmailStr

    class Config:
        from_attributes = True


class AreaRead(AreaBase):
    id: int
    activo: bool

    class Config:
        from_attributes = True


class AreaConCoordinadores(AreaRead):
    coordinadores: List[CoordinadorRead] = []


class AsignarCoordinadorRequest(BaseModel):
    usuario_id: int


class AreaEliminadaResponse(BaseModel):
    mensaje: str
    eliminado: bool
    desactivado: bool
