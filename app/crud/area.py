# app/crud/area.py
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional

from app.models.area import Area, CoordArea
from app.models.carga_horas import CargaHoras


def get_area(db: Session, area_id: int) -> Optional[Area]:
    return db.query(Area).filter(Area.id == area_id).first()


def get_area_by_nombre(db: Session, nombre: str) -> Optional[Area]:
    return db.query(Area).filter(func.lower(Area.nombre) == nombre.lower()).first()


def list_areas(db: Session, solo_activas: bool = False) -> List[Area]:
    query = db.query(Area)
    if solo_activas:
        query = query.filter(Area.activo == True)  # noqa: E712
    return query.order_by(Area.nombre).all()


def list_areas_de_usuario(db: Session, usuario_id: int) -> List[Area]:
    return (
        db.query(Area)
        .join(CoordArea, CoordArea.area_id == Area.id)
        .filter(CoordArea.usuario_id == usuario_id, Area.activo == True)  # noqa: E712
        .order_by(Area.nombre)
        .all()
    )


def create_area(db: Session, nombre: str, activo: bool = True) -> Area:
    obj = Area(nombre=nombre, activo=activo)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def get_asignacion(db: Session, area_id: int, usuario_id: int) -> Optional[CoordArea]:
    return (
        db.query(CoordArea)
        .filter(CoordArea.area_id == area_id, CoordArea.usuario_id == usuario_id)
        .first()
    )


def list_coordinadores(db: Session, area_id: int) -> List[CoordArea]:
    return db.query(CoordArea).filter(CoordArea.area_id == area_id).all()


def asignar_coordinador(db: Session, area_id: int, usuario_id: int) -> CoordArea:
    obj = CoordArea(area_id=area_id, usuario_id=usuario_id)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def tiene_referencias(db: Session, area_id: int) -> bool:
    """Indica si el área tiene coordinadores o cargas de horas."""
    if db.query(CoordArea.id).filter(CoordArea.area_id == area_id).first():
        return True
    return db.query(CargaHoras.id).filter(CargaHoras.area_id == area_id).first() is not None
