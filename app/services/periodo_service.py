"""
Ciclo de vida de los periodos de nómina.

Un periodo avanza por una sola ruta hacia adelante:

    BORRADOR --abrir--> ABIERTO --cerrar--> CERRADO --reportar--> REPORTADO

No hay saltos ni regresos, y a lo más un periodo puede estar ABIERTO en
todo el sistema. Cada transición exitosa queda en la bitácora de auditoría.
"""
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import Roles
from app.core.exceptions import (
    DatosInvalidos,
    PeriodoAbiertoExistente,
    PeriodoNoDisponible,
    RangoFechasInvalido,
    RecursoNoEncontrado,
    RegistroDuplicado,
    TransicionInvalida,
)
from app.crud import periodo as crud_periodo
from app.models.periodo import EstadoPeriodo, Periodo
from app.models.usuario import Usuario
from app.schemas.periodo import PeriodoCreate, PeriodoUpdate
from app.utils.auditoria import registrar_auditoria
from app.utils.logger import logger


# accion -> (estado requerido, estado destino, nombre de auditoría)
TRANSICIONES: Dict[str, Tuple[EstadoPeriodo, EstadoPeriodo, str]] = {
    "abrir": (EstadoPeriodo.BORRADOR, EstadoPeriodo.ABIERTO, "ABRIR"),
    "cerrar": (EstadoPeriodo.ABIERTO, EstadoPeriodo.CERRADO, "CERRAR"),
    "reportar": (EstadoPeriodo.CERRADO, EstadoPeriodo.REPORTADO, "REPORTAR"),
}


def obtener_periodo(db: Session, periodo_id: int) -> Periodo:
    periodo = crud_periodo.get_periodo(db, periodo_id)
    if not periodo:
        raise RecursoNoEncontrado("Periodo", periodo_id)
    return periodo


def obtener_periodo_abierto(db: Session, periodo_id: int) -> Periodo:
    """Regresa el periodo solo si admite cargas de horas (estado ABIERTO)."""
    periodo = obtener_periodo(db, periodo_id)
    if periodo.estado != EstadoPeriodo.ABIERTO:
        raise PeriodoNoDisponible(periodo.estado.value)
    return periodo


def listar_periodos(db: Session, usuario: Usuario) -> List[Periodo]:
    """Los coordinadores sin otro rol solo ven periodos abiertos."""
    if usuario.tiene_rol(Roles.COORD) and not usuario.tiene_rol(Roles.ADMIN, Roles.RH):
        return crud_periodo.list_periodos(db, estado=EstadoPeriodo.ABIERTO)
    return crud_periodo.list_periodos(db)


def crear_periodo(db: Session, data: PeriodoCreate, usuario_id: Optional[int]) -> Periodo:
    nombre = data.nombre.strip()
    if not nombre:
        raise DatosInvalidos("El nombre del periodo es requerido")
    if data.fecha_inicio > data.fecha_fin:
        raise RangoFechasInvalido(data.fecha_inicio, data.fecha_fin)
    if crud_periodo.get_periodo_by_nombre(db, nombre):
        raise RegistroDuplicado(f"Ya existe un periodo con el nombre {nombre}", campo="nombre")

    periodo = Periodo(
        nombre=nombre,
        fecha_inicio=data.fecha_inicio,
        fecha_fin=data.fecha_fin,
        estado=EstadoPeriodo.BORRADOR,
    )
    db.add(periodo)
    db.flush()
    registrar_auditoria(
        db, usuario_id, "CREAR", "Periodo", periodo.id,
        {"nombre": nombre, "fecha_inicio": data.fecha_inicio, "fecha_fin": data.fecha_fin},
    )
    db.commit()
    db.refresh(periodo)
    logger.info("Periodo creado: %s (id=%s)", periodo.nombre, periodo.id)
    return periodo


def actualizar_periodo(db: Session, periodo_id: int, data: PeriodoUpdate, usuario_id: Optional[int]) -> Periodo:
    """Nombre y fechas solo se pueden editar mientras el periodo es BORRADOR."""
    periodo = obtener_periodo(db, periodo_id)
    if periodo.estado != EstadoPeriodo.BORRADOR:
        raise TransicionInvalida("editar", periodo.estado.value, EstadoPeriodo.BORRADOR.value)

    cambios = data.model_dump(exclude_unset=True, exclude_none=True)
    if "nombre" in cambios:
        cambios["nombre"] = cambios["nombre"].strip()
        otro = crud_periodo.get_periodo_by_nombre(db, cambios["nombre"])
        if otro and otro.id != periodo.id:
            raise RegistroDuplicado(f"Ya existe un periodo con el nombre {cambios['nombre']}", campo="nombre")

    fecha_inicio = cambios.get("fecha_inicio", periodo.fecha_inicio)
    fecha_fin = cambios.get("fecha_fin", periodo.fecha_fin)
    if fecha_inicio > fecha_fin:
        raise RangoFechasInvalido(fecha_inicio, fecha_fin)

    for campo, valor in cambios.items():
        setattr(periodo, campo, valor)
    registrar_auditoria(db, usuario_id, "ACTUALIZAR", "Periodo", periodo.id, cambios)
    db.commit()
    db.refresh(periodo)
    return periodo


def transicionar(db: Session, periodo_id: int, accion: str, usuario_id: Optional[int]) -> Periodo:
    """
    Aplica una transición del ciclo de vida.

    Errores:
        RecursoNoEncontrado: el periodo no existe.
        TransicionInvalida: el periodo no está en el estado requerido.
        PeriodoAbiertoExistente: al abrir, ya hay otro periodo ABIERTO.
    """
    if accion not in TRANSICIONES:
        raise DatosInvalidos(f"Acción desconocida: {accion}")
    requerido, destino, accion_auditoria = TRANSICIONES[accion]

    periodo = obtener_periodo(db, periodo_id)
    if periodo.estado != requerido:
        logger.warning(
            "Transición %s rechazada para periodo %s: estado %s",
            accion, periodo.id, periodo.estado.value,
        )
        raise TransicionInvalida(accion, periodo.estado.value, requerido.value)

    if destino == EstadoPeriodo.ABIERTO:
        abierto = crud_periodo.get_periodo_abierto(db, excluir_id=periodo.id)
        if abierto:
            logger.warning("No se puede abrir %s: %s ya está abierto", periodo.nombre, abierto.nombre)
            raise PeriodoAbiertoExistente(abierto.id, abierto.nombre)

    anterior = periodo.estado
    periodo.estado = destino
    registrar_auditoria(
        db, usuario_id, accion_auditoria, "Periodo", periodo.id,
        {"estado_anterior": anterior.value, "estado_nuevo": destino.value},
    )
    db.commit()
    db.refresh(periodo)
    logger.info("Periodo %s: %s -> %s", periodo.nombre, anterior.value, destino.value)
    return periodo


def abrir_periodo(db: Session, periodo_id: int, usuario_id: Optional[int]) -> Periodo:
    return transicionar(db, periodo_id, "abrir", usuario_id)


def cerrar_periodo(db: Session, periodo_id: int, usuario_id: Optional[int]) -> Periodo:
    return transicionar(db, periodo_id, "cerrar", usuario_id)


def reportar_periodo(db: Session, periodo_id: int, usuario_id: Optional[int]) -> Periodo:
    return transicionar(db, periodo_id, "reportar", usuario_id)
