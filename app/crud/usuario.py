# app/crud/usuario.py
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from typing import List, Optional

from app.core.config import Roles
from app.models.area import CoordArea
from app.models.carga_horas import CargaHoras
from app.models.usuario import Role, Usuario, UsuarioRole


# -----------------------------------------------------
# Obtener usuario por ID
# -----------------------------------------------------
def get_usuario(db: Session, usuario_id: int) -> Optional[Usuario]:
    return db.query(Usuario).filter(Usuario.id == usuario_id).first()


# -----------------------------------------------------
# Obtener usuario por correo
# -----------------------------------------------------
def get_usuario_by_correo(db: Session, correo: str) -> Optional[Usuario]:
    return db.query(Usuario).filter(func.lower(Usuario.correo) == correo.lower()).first()


# -----------------------------------------------------
# Autenticar usuario
# -----------------------------------------------------
def authenticate(db: Session, correo: str, password: str) -> Optional[Usuario]:
    from app.core.security import verify_password
    usuario = get_usuario_by_correo(db, correo)
    if not usuario or not usuario.password_hash:
        return None
    if not verify_password(password, usuario.password_hash):
        return None
    return usuario


def _filtrar(query, texto: Optional[str]):
    if texto:
        patron = f"%{texto.lower()}%"
        query = query.filter(
            or_(func.lower(Usuario.nombre).like(patron), func.lower(Usuario.correo).like(patron))
        )
    return query


# -----------------------------------------------------
# Listar / contar usuarios
# -----------------------------------------------------
def count_usuarios(db: Session, texto: Optional[str] = None) -> int:
    return _filtrar(db.query(func.count(Usuario.id)), texto).scalar()


def list_usuarios(db: Session, skip: int = 0, limit: int = 10, texto: Optional[str] = None) -> List[Usuario]:
    return _filtrar(db.query(Usuario), texto).order_by(Usuario.nombre).offset(skip).limit(limit).all()


# -----------------------------------------------------
# Crear usuario
# -----------------------------------------------------
def create_usuario(db: Session, nombre: str, correo: str, password_hash: str, roles: List[Role]) -> Usuario:
    obj = Usuario(nombre=nombre, correo=correo, password_hash=password_hash, activo=True)
    for role in roles:
        obj.usuario_roles.append(UsuarioRole(role=role))
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def reemplazar_roles(usuario: Usuario, roles: List[Role]) -> None:
    """Deja exactamente ``roles``; las asignaciones que se conservan no se tocan."""
    nuevos = {r.id: r for r in roles}
    for ur in list(usuario.usuario_roles):
        if ur.role_id not in nuevos:
            usuario.usuario_roles.remove(ur)
    actuales = {ur.role_id for ur in usuario.usuario_roles}
    for role_id, role in nuevos.items():
        if role_id not in actuales:
            usuario.usuario_roles.append(UsuarioRole(role=role))


def count_admins_activos(db: Session) -> int:
    return (
        db.query(func.count(Usuario.id))
        .join(UsuarioRole, UsuarioRole.usuario_id == Usuario.id)
        .join(Role, Role.id == UsuarioRole.role_id)
        .filter(Role.nombre == Roles.ADMIN, Usuario.activo == True)  # noqa: E712
        .scalar()
    )


def tiene_referencias(db: Session, usuario_id: int) -> bool:
    """Indica si el usuario creó cargas o coordina alguna área."""
    if db.query(CargaHoras.id).filter(CargaHoras.creado_por_id == usuario_id).first():
        return True
    return db.query(CoordArea.id).filter(CoordArea.usuario_id == usuario_id).first() is not None
