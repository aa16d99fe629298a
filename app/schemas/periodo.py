# app/schemas/periodo.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import date

from app.models.periodo import EstadoPeriodo


class PeriodoBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100, examples=["2025-A"])
    fecha_inicio: date
    fecha_fin: date


class PeriodoCreate(PeriodoBase):
    pass


class PeriodoUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    fecha_inicio: Optional[date] = None
    fecha_fin: Optional[date] = None

    @model_validator(mode="after")
    def _algo_que_actualizar(self):
        if self.nombre is None and self.fecha_inicio is None and self.fecha_fin is None:
            raise ValueError("Debe indicar al menos un campo a actualizar")
        return self


class PeriodoRead(PeriodoBase):
    id: int
    estado: EstadoPeriodo

    class Config:
        from_attributes = True
