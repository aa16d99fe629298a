# app/crud/carga_horas.py
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from typing import List, Optional

from app.models.area import Area
from app.models.carga_horas import CargaHoras
from app.models.docente import Docente

# Criterios de orden aceptados por los listados
ORDENES = {
    "area": (Area.nombre, Docente.nombre, Docente.id, CargaHoras.materia_text),
    "docente": (Docente.nombre, Docente.id, Area.nombre, CargaHoras.materia_text),
    "materia": (CargaHoras.materia_text, Docente.nombre, Area.nombre),
}


def get_carga(db: Session, carga_id: int) -> Optional[CargaHoras]:
    return db.query(CargaHoras).filter(CargaHoras.id == carga_id).first()


def get_carga_por_llave(
    db: Session, periodo_id: int, area_id: int, docente_id: int, materia_text: str
) -> Optional[CargaHoras]:
    return (
        db.query(CargaHoras)
        .filter(
            CargaHoras.periodo_id == periodo_id,
            CargaHoras.area_id == area_id,
            CargaHoras.docente_id == docente_id,
            # la materia se compara sin distinguir mayúsculas en cualquier motor
            func.lower(CargaHoras.materia_text) == materia_text.lower(),
        )
        .first()
    )


def _consulta(db: Session, columnas, periodo_id: int, area_id: Optional[int], texto: Optional[str]):
    query = (
        db.query(*columnas)
        .select_from(CargaHoras)
        .join(Docente, Docente.id == CargaHoras.docente_id)
        .join(Area, Area.id == CargaHoras.area_id)
        .filter(CargaHoras.periodo_id == periodo_id)
    )
    if area_id:
        query = query.filter(CargaHoras.area_id == area_id)
    if texto:
        patron = f"%{texto.lower()}%"
        query = query.filter(
            or_(func.lower(Docente.nombre).like(patron), func.lower(CargaHoras.materia_text).like(patron))
        )
    return query


def count_cargas(db: Session, periodo_id: int, area_id: Optional[int] = None, texto: Optional[str] = None) -> int:
    return _consulta(db, [func.count(CargaHoras.id)], periodo_id, area_id, texto).scalar()


def list_cargas(
    db: Session,
    periodo_id: int,
    area_id: Optional[int] = None,
    texto: Optional[str] = None,
    ordenar_por: str = "area",
    skip: int = 0,
    limit: Optional[int] = None,
) -> List[CargaHoras]:
    """Cargas de un periodo (y área opcional) con docente y área cargados."""
    query = _consulta(db, [CargaHoras], periodo_id, area_id, texto)
    query = query.order_by(*ORDENES.get(ordenar_por, ORDENES["area"]), CargaHoras.id)
    if skip:
        query = query.offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()
