# app/models/docente.py
from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from app.db.base import Base


class Docente(Base):
    __tablename__ = "docentes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo_interno = Column(String(20), unique=True, nullable=False, index=True,
                            comment="Código interno de ancho fijo (relleno con ceros)")
    nombre = Column(String(200), nullable=False)
    rfc = Column(String(13), unique=True, nullable=False)
    activo = Column(Boolean, default=True, nullable=False)

    cargas = relationship("CargaHoras", back_populates="docente", lazy="noload")
