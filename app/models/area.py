# app/models/area.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base


class Area(Base):
    __tablename__ = "areas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(150), unique=True, nullable=False)
    activo = Column(Boolean, default=True, nullable=False)

    coord_areas = relationship("CoordArea", back_populates="area", lazy="selectin")
    cargas = relationship("CargaHoras", back_populates="area", lazy="noload")


class CoordArea(Base):
    """Asignación de un usuario COORD a un área."""
    __tablename__ = "coord_areas"
    __table_args__ = (
        UniqueConstraint("usuario_id", "area_id", name="uq_coord_area"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id"), nullable=False, index=True)
    area_id = Column(Integer, ForeignKey("areas.id"), nullable=False, index=True)

    usuario = relationship("Usuario", back_populates="coord_areas", lazy="joined")
    area = relationship("Area", back_populates="coord_areas", lazy="joined")
