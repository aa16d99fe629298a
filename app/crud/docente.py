# app/crud/docente.py
from sqlalchemy.orm import Session
from sqlalchemy import func, or_, select
from typing import List, Optional

from app.models.carga_horas import CargaHoras
from app.models.docente import Docente


def get_docente(db: Session, docente_id: int) -> Optional[Docente]:
    return db.query(Docente).filter(Docente.id == docente_id).first()


def get_docente_by_codigo(db: Session, codigo_interno: str) -> Optional[Docente]:
    return db.query(Docente).filter(Docente.codigo_interno == codigo_interno).first()


def get_docente_by_rfc(db: Session, rfc: str) -> Optional[Docente]:
    return db.query(Docente).filter(Docente.rfc == rfc).first()


def get_docentes_by_codigos(db: Session, codigos: List[str]) -> List[Docente]:
    if not codigos:
        return []
    return db.query(Docente).filter(Docente.codigo_interno.in_(set(codigos))).all()


def _filtrar(db: Session, query, texto: Optional[str], area_id: Optional[int]):
    if texto:
        patron = f"%{texto.lower()}%"
        query = query.filter(
            or_(
                func.lower(Docente.codigo_interno).like(patron),
                func.lower(Docente.nombre).like(patron),
                func.lower(Docente.rfc).like(patron),
            )
        )
    if area_id:
        con_cargas = select(CargaHoras.docente_id).where(CargaHoras.area_id == area_id)
        query = query.filter(Docente.id.in_(con_cargas))
    return query


# -----------------------------------------------------
# Contar docentes (para paginación)
# -----------------------------------------------------
def count_docentes(db: Session, texto: Optional[str] = None, area_id: Optional[int] = None) -> int:
    return _filtrar(db, db.query(func.count(Docente.id)), texto, area_id).scalar()


def list_docentes(
    db: Session,
    skip: int = 0,
    limit: int = 10,
    texto: Optional[str] = None,
    area_id: Optional[int] = None,
) -> List[Docente]:
    query = _filtrar(db, db.query(Docente), texto, area_id)
    return query.order_by(Docente.nombre).offset(skip).limit(limit).all()


def list_docentes_activos(db: Session) -> List[Docente]:
    return db.query(Docente).filter(Docente.activo == True).order_by(Docente.nombre).all()  # noqa: E712


def create_docente(db: Session, data) -> Docente:
    obj = Docente(**data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def tiene_cargas(db: Session, docente_id: int) -> bool:
    return db.query(CargaHoras.id).filter(CargaHoras.docente_id == docente_id).first() is not None
