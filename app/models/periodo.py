# app/models/periodo.py
from sqlalchemy import Column, Integer, String, Date, Enum
from app.db.base import Base
import enum


class EstadoPeriodo(enum.Enum):
    """Ciclo de vida de un periodo de nómina: BORRADOR → ABIERTO → CERRADO → REPORTADO."""
    BORRADOR = "BORRADOR"
    ABIERTO = "ABIERTO"
    CERRADO = "CERRADO"
    REPORTADO = "REPORTADO"


class Periodo(Base):
    __tablename__ = "periodos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(100), unique=True, nullable=False)
    fecha_inicio = Column(Date, nullable=False)
    fecha_fin = Column(Date, nullable=False)
    estado = Column(Enum(EstadoPeriodo), default=EstadoPeriodo.BORRADOR, nullable=False, index=True)
