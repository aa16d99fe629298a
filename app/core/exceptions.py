# app/core/exceptions.py
"""
Excepciones de negocio tipadas.

Cada excepción lleva un ``code`` legible por máquina, el ``status_code``
HTTP con el que se expone y ``data`` estructurada que el cliente puede usar
para explicar el conflicto (por ejemplo el estado actual de un periodo).

Jerarquía:

    ErrorNegocio
    +-- RecursoNoEncontrado       (404)
    +-- DatosInvalidos            (400)
    |   +-- RangoFechasInvalido   (400)
    +-- ConflictoEstado           (409)
    |   +-- TransicionInvalida
    |   +-- PeriodoAbiertoExistente
    |   +-- PeriodoNoDisponible
    |   +-- RegistroDuplicado
    +-- AccesoDenegado            (403)

Los manejadores en ``app.core.error_handlers`` las convierten en
``{"detail": {"code": ..., "mensaje": ..., **data}}``.
"""
from typing import Any, Dict, Optional


class ErrorNegocio(Exception):
    code: str = "ERROR_NEGOCIO"
    status_code: int = 400

    def __init__(self, mensaje: str, **data: Any):
        super().__init__(mensaje)
        self.mensaje = mensaje
        self.data: Dict[str, Any] = data

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "mensaje": self.mensaje, **self.data}


class RecursoNoEncontrado(ErrorNegocio):
    code = "NO_ENCONTRADO"
    status_code = 404

    def __init__(self, entidad: str, identificador: Any = None):
        mensaje = f"{entidad} no encontrado"
        super().__init__(mensaje, entidad=entidad, id=identificador)


class DatosInvalidos(ErrorNegocio):
    code = "DATOS_INVALIDOS"
    status_code = 400


class RangoFechasInvalido(DatosInvalidos):
    code = "RANGO_FECHAS_INVALIDO"

    def __init__(self, fecha_inicio: Any, fecha_fin: Any):
        super().__init__(
            "La fecha de inicio debe ser anterior o igual a la fecha de fin",
            fecha_inicio=str(fecha_inicio),
            fecha_fin=str(fecha_fin),
        )


class ConflictoEstado(ErrorNegocio):
    code = "CONFLICTO"
    status_code = 409


class TransicionInvalida(ConflictoEstado):
    code = "TRANSICION_INVALIDA"

    def __init__(self, accion: str, estado_actual: str, estado_requerido: str):
        super().__init__(
            f"No se puede {accion} un periodo en estado {estado_actual}; "
            f"se requiere estado {estado_requerido}",
            estado_actual=estado_actual,
            estado_requerido=estado_requerido,
        )


class PeriodoAbiertoExistente(ConflictoEstado):
    code = "PERIODO_ABIERTO_EXISTENTE"

    def __init__(self, periodo_id: int, nombre: str):
        super().__init__(
            f"Ya existe un periodo abierto: {nombre}",
            periodo_abierto={"id": periodo_id, "nombre": nombre},
        )


class PeriodoNoDisponible(ConflictoEstado):
    """El periodo existe pero no admite cargas en su estado actual."""
    code = "PERIODO_NO_DISPONIBLE"

    def __init__(self, estado_actual: str):
        super().__init__(
            f"El periodo no está abierto (estado actual: {estado_actual})",
            estado_actual=estado_actual,
        )


class RegistroDuplicado(ConflictoEstado):
    code = "REGISTRO_DUPLICADO"

    def __init__(self, mensaje: str, campo: Optional[str] = None):
        super().__init__(mensaje, campo=campo)


class AccesoDenegado(ErrorNegocio):
    code = "ACCESO_DENEGADO"
    status_code = 403
