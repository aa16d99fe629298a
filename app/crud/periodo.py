# app/crud/periodo.py
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional

from app.models.periodo import EstadoPeriodo, Periodo


def get_periodo(db: Session, periodo_id: int) -> Optional[Periodo]:
    return db.query(Periodo).filter(Periodo.id == periodo_id).first()


def get_periodo_by_nombre(db: Session, nombre: str) -> Optional[Periodo]:
    return db.query(Periodo).filter(func.lower(Periodo.nombre) == nombre.lower()).first()


def get_periodo_abierto(db: Session, excluir_id: Optional[int] = None) -> Optional[Periodo]:
    query = db.query(Periodo).filter(Periodo.estado == EstadoPeriodo.ABIERTO)
    if excluir_id is not None:
        query = query.filter(Periodo.id != excluir_id)
    return query.first()


def list_periodos(db: Session, estado: Optional[EstadoPeriodo] = None) -> List[Periodo]:
    query = db.query(Periodo)
    if estado is not None:
        query = query.filter(Periodo.estado == estado)
    return query.order_by(Periodo.fecha_inicio.desc(), Periodo.id.desc()).all()
