"""
Gestión de áreas y de la asignación de coordinadores.
"""
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import Roles
from app.core.exceptions import DatosInvalidos, RecursoNoEncontrado, RegistroDuplicado
from app.crud import area as crud_area
from app.crud import usuario as crud_usuario
from app.models.area import Area
from app.schemas.area import AreaCreate, AreaUpdate
from app.utils.auditoria import registrar_auditoria
from app.utils.logger import logger


def obtener_area(db: Session, area_id: int) -> Area:
    area = crud_area.get_area(db, area_id)
    if not area:
        raise RecursoNoEncontrado("Área", area_id)
    return area


def serializar_area(area: Area, con_coordinadores: bool = False) -> Dict:
    datos = {"id": area.id, "nombre": area.nombre, "activo": area.activo}
    if con_coordinadores:
        datos["coordinadores"] = [
            {"id": ca.usuario.id, "nombre": ca.usuario.nombre, "correo": ca.usuario.correo}
            for ca in area.coord_areas
        ]
    return datos


def crear_area(db: Session, data: AreaCreate, usuario_id: Optional[int]) -> Area:
    nombre = data.nombre.strip()
    if len(nombre) < 3:
        raise DatosInvalidos("El nombre del área debe tener al menos 3 caracteres")
    if crud_area.get_area_by_nombre(db, nombre):
        raise RegistroDuplicado(f"Ya existe un área con el nombre {nombre}", campo="nombre")

    area = crud_area.create_area(db, nombre, data.activo)
    registrar_auditoria(db, usuario_id, "CREAR", "Area", area.id, {"nombre": nombre}, commit=True)
    logger.info("Área creada: %s", nombre)
    return area


def actualizar_area(db: Session, area_id: int, data: AreaUpdate, usuario_id: Optional[int]) -> Area:
    area = obtener_area(db, area_id)
    cambios = data.model_dump(exclude_unset=True, exclude_none=True)
    if "nombre" in cambios:
        cambios["nombre"] = cambios["nombre"].strip()
        otra = crud_area.get_area_by_nombre(db, cambios["nombre"])
        if otra and otra.id != area.id:
            raise RegistroDuplicado(f"Ya existe un área con el nombre {cambios['nombre']}", campo="nombre")

    for campo, valor in cambios.items():
        setattr(area, campo, valor)
    registrar_auditoria(db, usuario_id, "ACTUALIZAR", "Area", area.id, cambios)
    db.commit()
    db.refresh(area)
    return area


def eliminar_area(db: Session, area_id: int, usuario_id: Optional[int]) -> Dict:
    """Desactiva el área si tiene coordinadores o cargas; si no, la borra."""
    area = obtener_area(db, area_id)
    if crud_area.tiene_referencias(db, area.id):
        area.activo = False
        registrar_auditoria(db, usuario_id, "DESACTIVAR", "Area", area.id, {"nombre": area.nombre})
        db.commit()
        logger.info("Área desactivada: %s", area.nombre)
        return {"mensaje": "Área desactivada: tiene coordinadores o cargas asociadas",
                "eliminado": False, "desactivado": True}

    registrar_auditoria(db, usuario_id, "ELIMINAR", "Area", area.id, {"nombre": area.nombre})
    db.delete(area)
    db.commit()
    logger.info("Área eliminada: %s", area.nombre)
    return {"mensaje": "Área eliminada", "eliminado": True, "desactivado": False}


def listar_coordinadores(db: Session, area_id: int) -> List[Dict]:
    obtener_area(db, area_id)
    return [
        {"id": ca.usuario.id, "nombre": ca.usuario.nombre, "correo": ca.usuario.correo}
        for ca in crud_area.list_coordinadores(db, area_id)
    ]


def asignar_coordinador(db: Session, area_id: int, coordinador_id: int, usuario_id: Optional[int]) -> Dict:
    area = obtener_area(db, area_id)
    coordinador = crud_usuario.get_usuario(db, coordinador_id)
    if not coordinador:
        raise RecursoNoEncontrado("Usuario", coordinador_id)
    if not coordinador.tiene_rol(Roles.COORD):
        raise DatosInvalidos("El usuario no tiene el rol COORD", usuario_id=coordinador_id)
    if crud_area.get_asignacion(db, area.id, coordinador.id):
        raise RegistroDuplicado("El usuario ya es coordinador de esta área", campo="usuario_id")

    crud_area.asignar_coordinador(db, area.id, coordinador.id)
    registrar_auditoria(
        db, usuario_id, "ASIGNAR_COORDINADOR", "Area", area.id,
        {"usuario_id": coordinador.id}, commit=True,
    )
    logger.info("Coordinador %s asignado al área %s", coordinador.correo, area.nombre)
    return {"id": coordinador.id, "nombre": coordinador.nombre, "correo": coordinador.correo}


def quitar_coordinador(db: Session, area_id: int, coordinador_id: int, usuario_id: Optional[int]) -> None:
    area = obtener_area(db, area_id)
    asignacion = crud_area.get_asignacion(db, area.id, coordinador_id)
    if not asignacion:
        raise RecursoNoEncontrado("Asignación de coordinador", coordinador_id)
    db.delete(asignacion)
    registrar_auditoria(db, usuario_id, "QUITAR_COORDINADOR", "Area", area.id, {"usuario_id": coordinador_id})
    db.commit()
