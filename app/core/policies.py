# app/core/policies.py
"""
Tabla declarativa de permisos.

Cada operación expuesta por la API tiene una entrada en ``POLITICAS`` con:

- ``roles``: conjunto de roles que pueden invocarla (vacío = cualquier
  usuario autenticado).
- ``area``: predicado de pertenencia al área sobre la que se opera:

  * ``ninguno``: no se revisa el área.
  * ``coordinador``: los usuarios COORD deben estar asignados al área;
    los roles en ``exentos`` (ADMIN y RH por omisión) no se revisan.
  * ``estricto``: el usuario debe ser coordinador asignado del área sin
    importar qué otros roles tenga.

Los routers nunca revisan roles a mano: declaran ``Depends(requiere("op"))``
y, cuando la operación tiene área, llaman a ``verificar_area``.
"""
import enum
from dataclasses import dataclass, field
from typing import Dict, FrozenSet

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import Roles
from app.core.exceptions import AccesoDenegado
from app.core.security import get_current_usuario
from app.models.area import CoordArea
from app.models.usuario import Usuario


class PredicadoArea(str, enum.Enum):
    NINGUNO = "ninguno"
    COORDINADOR = "coordinador"
    ESTRICTO = "estricto"


@dataclass(frozen=True)
class Politica:
    roles: FrozenSet[str] = frozenset()
    area: PredicadoArea = PredicadoArea.NINGUNO
    exentos: FrozenSet[str] = field(default_factory=lambda: frozenset({Roles.ADMIN, Roles.RH}))


_ADMIN = frozenset({Roles.ADMIN})
_ADMIN_RH = frozenset({Roles.ADMIN, Roles.RH})
_TODOS = frozenset(Roles.TODOS)
_COORD = frozenset({Roles.COORD})


POLITICAS: Dict[str, Politica] = {
    # Usuarios
    "usuarios.listar": Politica(_ADMIN_RH),
    "usuarios.roles": Politica(_ADMIN),
    "usuarios.crear": Politica(_ADMIN),
    "usuarios.actualizar": Politica(_ADMIN),
    "usuarios.eliminar": Politica(_ADMIN),
    # Áreas
    "areas.listar": Politica(),
    "areas.obtener": Politica(),
    "areas.mis_areas": Politica(_COORD),
    "areas.crear": Politica(_ADMIN),
    "areas.actualizar": Politica(_ADMIN),
    "areas.eliminar": Politica(_ADMIN),
    "areas.coordinadores.listar": Politica(),
    "areas.coordinadores.asignar": Politica(_ADMIN_RH),
    "areas.coordinadores.quitar": Politica(_ADMIN_RH),
    # Docentes
    "docentes.listar": Politica(_TODOS, PredicadoArea.COORDINADOR),
    "docentes.crear": Politica(_ADMIN_RH),
    "docentes.actualizar": Politica(_ADMIN_RH),
    "docentes.eliminar": Politica(_ADMIN_RH),
    "docentes.plantilla": Politica(_ADMIN_RH),
    "docentes.importar": Politica(_ADMIN_RH),
    # Periodos
    "periodos.listar": Politica(),
    "periodos.obtener": Politica(),
    "periodos.crear": Politica(_ADMIN_RH),
    "periodos.actualizar": Politica(_ADMIN_RH),
    "periodos.abrir": Politica(_ADMIN_RH),
    "periodos.cerrar": Politica(_ADMIN_RH),
    "periodos.reportar": Politica(_ADMIN_RH),
    # Carga de horas
    "carga_horas.plantilla": Politica(_TODOS, PredicadoArea.COORDINADOR),
    "carga_horas.procesar": Politica(_COORD, PredicadoArea.ESTRICTO),
    "carga_horas.procesar_individual": Politica(_COORD, PredicadoArea.ESTRICTO),
    "carga_horas.confirmar": Politica(_COORD, PredicadoArea.ESTRICTO),
    "carga_horas.listar": Politica(_TODOS, PredicadoArea.COORDINADOR),
    "carga_horas.eliminar": Politica(
        frozenset({Roles.ADMIN, Roles.COORD}), PredicadoArea.COORDINADOR, exentos=_ADMIN
    ),
    # Pagos
    "pagos.reporte": Politica(_ADMIN_RH),
    "pagos.exportar": Politica(_ADMIN_RH),
}


def es_coordinador_de(db: Session, usuario_id: int, area_id: int) -> bool:
    return (
        db.query(CoordArea.id)
        .filter(CoordArea.usuario_id == usuario_id, CoordArea.area_id == area_id)
        .first()
        is not None
    )


def verificar_roles(usuario: Usuario, operacion: str) -> None:
    politica = POLITICAS[operacion]
    if politica.roles and not usuario.tiene_rol(*politica.roles):
        raise AccesoDenegado(
            "No tienes permisos para realizar esta acción",
            roles_requeridos=sorted(politica.roles),
        )


def verificar_area(db: Session, usuario: Usuario, operacion: str, area_id: int) -> None:
    """Evalúa el predicado de área de ``operacion`` para ``usuario``."""
    politica = POLITICAS[operacion]
    if politica.area == PredicadoArea.NINGUNO:
        return
    if politica.area == PredicadoArea.COORDINADOR:
        if usuario.tiene_rol(*politica.exentos):
            return
        if not usuario.tiene_rol(Roles.COORD):
            raise AccesoDenegado("No tienes permisos para realizar esta acción")
    if not es_coordinador_de(db, usuario.id, area_id):
        raise AccesoDenegado(
            "No tienes permiso para acceder a esta área", area_id=area_id
        )


def requiere(operacion: str):
    """Dependencia FastAPI que aplica la política de roles de ``operacion``."""
    if operacion not in POLITICAS:
        raise KeyError(f"Operación sin política declarada: {operacion}")

    def _dependencia(usuario: Usuario = Depends(get_current_usuario)) -> Usuario:
        verificar_roles(usuario, operacion)
        return usuario

    return _dependencia
