# app/models/carga_horas.py
"""
Modelo de carga de horas: horas impartidas por un docente en una materia,
dentro de un área y un periodo.

Llave natural: (docente, periodo, área, materia). Un reenvío actualiza el
registro e incrementa ``version`` en lugar de duplicarlo.
"""
from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base


class CargaHoras(Base):
    __tablename__ = "cargas_horas"
    __table_args__ = (
        UniqueConstraint("periodo_id", "area_id", "docente_id", "materia_text", name="uq_carga_llave_natural"),
        Index("ix_cargas_horas_periodo_area_docente", "periodo_id", "area_id", "docente_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    periodo_id = Column(Integer, ForeignKey("periodos.id"), nullable=False)
    area_id = Column(Integer, ForeignKey("areas.id"), nullable=False)
    docente_id = Column(Integer, ForeignKey("docentes.id"), nullable=False)
    materia_text = Column(String(255), nullable=False)
    horas = Column(Numeric(10, 2, asdecimal=True), nullable=False)
    costo_hora = Column(Numeric(10, 2, asdecimal=True), nullable=False,
                        comment="Forzado a 0 cuando pagable es falso")
    pagable = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, default=1, nullable=False,
                     comment="Se incrementa en cada actualización (informativo)")
    creado_por_id = Column(Integer, ForeignKey("usuarios.id"), nullable=False)
    creado_en = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    actualizado_en = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    docente = relationship("Docente", back_populates="cargas", lazy="joined")
    area = relationship("Area", back_populates="cargas", lazy="joined")
    periodo = relationship("Periodo", lazy="joined")
    creado_por = relationship("Usuario", lazy="select")

    @property
    def importe(self) -> Decimal:
        return Decimal(self.horas or 0) * Decimal(self.costo_hora or 0)
