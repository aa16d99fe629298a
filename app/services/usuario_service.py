"""
Gestión de usuarios y sus roles.
"""
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import Roles
from app.core.exceptions import DatosInvalidos, RecursoNoEncontrado, RegistroDuplicado
from app.core.security import create_access_token, hash_password
from app.crud import role as crud_role
from app.crud import usuario as crud_usuario
from app.models.usuario import Role, Usuario
from app.schemas.usuario import UsuarioCreate, UsuarioUpdate
from app.utils.auditoria import registrar_auditoria
from app.utils.logger import logger
from app.utils.paginacion import paginacion


def autenticar(db: Session, correo: str, password: str) -> Dict[str, str]:
    """
    Valida credenciales y emite un JWT.

    Credenciales incorrectas -> 401; usuario desactivado -> 403.
    """
    usuario = crud_usuario.authenticate(db, correo, password)
    if not usuario:
        logger.warning("Intento de login fallido para: %s", correo)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciales incorrectas")
    if not usuario.activo:
        logger.warning("Intento de login de usuario inactivo: %s", correo)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Usuario inactivo")

    token = create_access_token(usuario.id, usuario.correo, usuario.roles)
    logger.info("Usuario autenticado: %s", usuario.correo)
    return {"token": token, "token_type": "bearer"}


def obtener_usuario(db: Session, usuario_id: int) -> Usuario:
    usuario = crud_usuario.get_usuario(db, usuario_id)
    if not usuario:
        raise RecursoNoEncontrado("Usuario", usuario_id)
    return usuario


def serializar_usuario(usuario: Usuario) -> Dict[str, Any]:
    return {
        "id": usuario.id,
        "nombre": usuario.nombre,
        "correo": usuario.correo,
        "activo": usuario.activo,
        "roles": usuario.roles,
        "creado_en": usuario.creado_en,
    }


def listar_usuarios(db: Session, texto: Optional[str] = None, page: int = 1, page_size: int = 10) -> Dict[str, Any]:
    total = crud_usuario.count_usuarios(db, texto)
    usuarios = crud_usuario.list_usuarios(db, (page - 1) * page_size, page_size, texto)
    return {"data": [serializar_usuario(u) for u in usuarios], "pagination": paginacion(total, page, page_size)}


def _resolver_roles(db: Session, nombres: List[str]) -> List[Role]:
    nombres = [n.strip().upper() for n in nombres]
    roles = crud_role.get_roles_by_names(db, nombres)
    faltantes = sorted(set(nombres) - {r.nombre for r in roles})
    if faltantes:
        raise DatosInvalidos("Roles inexistentes: " + ", ".join(faltantes), roles=faltantes)
    return roles


def crear_usuario(db: Session, data: UsuarioCreate, actor_id: Optional[int]) -> Usuario:
    if crud_usuario.get_usuario_by_correo(db, data.correo):
        raise RegistroDuplicado(f"Ya existe un usuario con el correo {data.correo}", campo="correo")
    roles = _resolver_roles(db, data.roles)

    usuario = crud_usuario.create_usuario(
        db, data.nombre.strip(), data.correo.lower(), hash_password(data.password), roles
    )
    registrar_auditoria(
        db, actor_id, "CREAR", "Usuario", usuario.id,
        {"correo": usuario.correo, "roles": usuario.roles}, commit=True,
    )
    logger.info("Usuario creado: %s %s", usuario.correo, usuario.roles)
    return usuario


def _es_unico_admin(db: Session, usuario: Usuario) -> bool:
    return usuario.activo and usuario.tiene_rol(Roles.ADMIN) and crud_usuario.count_admins_activos(db) <= 1


def actualizar_usuario(db: Session, usuario_id: int, data: UsuarioUpdate, actor_id: Optional[int]) -> Usuario:
    usuario = obtener_usuario(db, usuario_id)
    cambios = data.model_dump(exclude_unset=True, exclude_none=True)

    pierde_admin = (
        ("roles" in cambios and Roles.ADMIN not in [r.upper() for r in cambios["roles"]])
        or cambios.get("activo") is False
    )
    if pierde_admin and _es_unico_admin(db, usuario):
        raise DatosInvalidos("No se puede quitar el rol ADMIN ni desactivar al único administrador")

    if "roles" in cambios:
        crud_usuario.reemplazar_roles(usuario, _resolver_roles(db, cambios.pop("roles")))
    if "password" in cambios:
        usuario.password_hash = hash_password(cambios.pop("password"))
    for campo, valor in cambios.items():
        setattr(usuario, campo, valor.strip() if isinstance(valor, str) else valor)

    registrar_auditoria(
        db, actor_id, "ACTUALIZAR", "Usuario", usuario.id,
        {"campos": sorted(data.model_dump(exclude_unset=True, exclude={"password"}).keys())},
    )
    db.commit()
    db.refresh(usuario)
    return usuario


def eliminar_usuario(db: Session, usuario_id: int, actor: Usuario) -> Dict[str, Any]:
    """
    Borra al usuario, o lo desactiva si creó cargas o coordina áreas.

    Un administrador no puede eliminarse a sí mismo si es el único ADMIN.
    """
    usuario = obtener_usuario(db, usuario_id)
    if usuario.id == actor.id and _es_unico_admin(db, usuario):
        raise DatosInvalidos("No puedes eliminar tu cuenta: eres el único administrador")

    if crud_usuario.tiene_referencias(db, usuario.id):
        usuario.activo = False
        registrar_auditoria(db, actor.id, "DESACTIVAR", "Usuario", usuario.id, {"correo": usuario.correo})
        db.commit()
        logger.info("Usuario desactivado: %s", usuario.correo)
        return {"mensaje": "Usuario desactivado: tiene registros asociados", "eliminado": False, "desactivado": True}

    registrar_auditoria(db, actor.id, "ELIMINAR", "Usuario", usuario.id, {"correo": usuario.correo})
    db.delete(usuario)
    db.commit()
    logger.info("Usuario eliminado: %s", usuario.correo)
    return {"mensaje": "Usuario eliminado", "eliminado": True, "desactivado": False}


def listar_roles(db: Session) -> List[Role]:
    return crud_role.list_roles(db)
