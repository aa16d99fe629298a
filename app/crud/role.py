# app/crud/role.py
from sqlalchemy.orm import Session
from app.models.usuario import Role
from typing import Iterable, List, Optional

def get_role_by_name(db: Session, nombre: str) -> Optional[Role]:
    return db.query(Role).filter(Role.nombre == nombre).first()

def get_roles_by_names(db: Session, nombres: Iterable[str]) -> List[Role]:
    nombres = list(set(nombres))
    if not nombres:
        return []
    return db.query(Role).filter(Role.nombre.in_(nombres)).all()

def list_roles(db: Session) -> List[Role]:
    return db.query(Role).order_by(Role.nombre).all()
