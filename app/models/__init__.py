from app.db.base import Base

# Importa modelos para que se registren en Base.metadata
from .usuario import Usuario, Role, UsuarioRole
from .area import Area, CoordArea
from .docente import Docente
from .periodo import Periodo, EstadoPeriodo
from .carga_horas import CargaHoras
from .auditoria import Auditoria

__all__ = [
    "Usuario",
    "Role",
    "UsuarioRole",
    "Area",
    "CoordArea",
    "Docente",
    "Periodo",
    "EstadoPeriodo",
    "CargaHoras",
    "Auditoria",
    "Base",
]
