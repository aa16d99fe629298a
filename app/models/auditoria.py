# app/models/auditoria.py
"""
Bitácora de auditoría. Solo se escribe; el sistema nunca la lee de vuelta.
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from app.db.base import Base


class Auditoria(Base):
    __tablename__ = "auditoria"

    id = Column(Integer, primary_key=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True, index=True)
    accion = Column(String(50), nullable=False, index=True)
    entidad = Column(String(50), nullable=False)
    entidad_id = Column(Integer, nullable=True)
    payload = Column(JSON, nullable=False)
    ts = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
