"""
Servicio de carga de horas.

Convierte filas crudas (de un archivo o capturadas a mano) en registros de
``CargaHoras``. El flujo tiene dos pasos:

1. **Previsualizar** (``procesar_archivo`` / ``procesar_individual``): se
   valida cada fila y se devuelven los datos normalizados junto con los
   errores por línea. No se escribe ninguna carga.
2. **Confirmar** (``confirmar_carga``): motor de conciliación. Cada fila se
   valida de nuevo y se inserta o actualiza por su llave natural
   (docente, periodo, área, materia). Los errores de una fila no detienen
   el lote; un error de base de datos revierte el lote completo.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.exceptions import PeriodoNoDisponible, RecursoNoEncontrado
from app.core.policies import verificar_area
from app.crud import carga_horas as crud_carga
from app.crud import docente as crud_docente
from app.models.carga_horas import CargaHoras
from app.models.docente import Docente
from app.models.periodo import EstadoPeriodo
from app.models.usuario import Usuario
from app.services import excel_importer
from app.services.area_service import obtener_area
from app.services.periodo_service import obtener_periodo_abierto
from app.utils.archivos import guardar_temporal
from app.utils.auditoria import registrar_auditoria
from app.utils.logger import logger
from app.utils.paginacion import paginacion
from app.utils.normalizacion import (
    a_texto,
    normalizar_codigo_docente,
    normalizar_rfc,
    parsear_numero,
    parsear_pagable,
)


class FilaInvalida(ValueError):
    """Una fila no pasa la validación; el mensaje se reporta al cliente."""


# Columnas Numeric(10, 2)
CENTAVOS = Decimal("0.01")
MAXIMO_NUMERICO = Decimal("99999999.99")


def _a_centavos(valor: Decimal, campo: str) -> Decimal:
    if abs(valor) > MAXIMO_NUMERICO:
        raise FilaInvalida(f"{campo} fuera de rango: el máximo es {MAXIMO_NUMERICO}")
    return valor.quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def validar_fila(fila: Dict[str, Any]) -> Dict[str, Any]:
    """
    Valida y normaliza una fila de carga de horas.

    Reglas:
        - ``codigo_interno`` y ``materia`` son requeridos.
        - ``horas`` debe ser un número mayor a 0.
        - ``costo_hora`` debe ser un número mayor o igual a 0.
        - Ambos se redondean a 2 decimales, igual que en la base, y no
          pueden exceder ``MAXIMO_NUMERICO``.
        - ``pagable`` acepta 0/1, booleanos y variantes sí/no.
        - Si la fila no es pagable, ``costo_hora`` se fuerza a 0.

    Raises:
        FilaInvalida: con el motivo legible del rechazo.
    """
    codigo = normalizar_codigo_docente(fila.get("codigo_interno"))
    if not codigo:
        raise FilaInvalida("Falta el código interno")

    materia = a_texto(fila.get("materia"))
    if not materia:
        raise FilaInvalida("Falta la materia")

    try:
        horas = _a_centavos(parsear_numero(fila.get("horas"), "Horas"), "Horas")
    except ValueError as e:
        raise FilaInvalida(str(e)) from e
    if horas <= 0:
        raise FilaInvalida("Las horas deben ser un número mayor a 0")

    try:
        costo_hora = _a_centavos(parsear_numero(fila.get("costo_hora"), "Costo por hora"), "Costo por hora")
    except ValueError as e:
        raise FilaInvalida(str(e)) from e
    if costo_hora < 0:
        raise FilaInvalida("El costo por hora no puede ser negativo")

    try:
        pagable = parsear_pagable(fila.get("pagable"))
    except ValueError as e:
        raise FilaInvalida(str(e)) from e

    if not pagable:
        costo_hora = Decimal("0")

    return {
        "linea": fila.get("linea"),
        "codigo_interno": codigo,
        "nombre": a_texto(fila.get("nombre")) or None,
        "rfc": normalizar_rfc(fila.get("rfc")) or None,
        "materia": materia,
        "horas": horas,
        "costo_hora": costo_hora,
        "pagable": pagable,
        "importe": horas * costo_hora,
    }


def _a_json(fila: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **fila,
        "horas": float(fila["horas"]),
        "costo_hora": float(fila["costo_hora"]),
        "importe": float(fila["importe"]),
    }


def _linea(fila: Dict[str, Any], indice: int) -> int:
    linea = fila.get("linea")
    if isinstance(linea, int):
        return linea
    return indice + 1


def _docentes_por_codigo(db: Session, filas: List[Dict[str, Any]]) -> Dict[str, Docente]:
    codigos = [normalizar_codigo_docente(f.get("codigo_interno")) for f in filas]
    return {d.codigo_interno: d for d in crud_docente.get_docentes_by_codigos(db, [c for c in codigos if c])}


def previsualizar(db: Session, filas: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Valida filas sin persistirlas y reporta errores por línea."""
    docentes = _docentes_por_codigo(db, filas)
    datos, errores = [], []
    for indice, fila in enumerate(filas):
        linea = _linea(fila, indice)
        try:
            valida = validar_fila(fila)
        except FilaInvalida as e:
            errores.append({"linea": linea, "mensaje": str(e)})
            continue
        if valida["codigo_interno"] not in docentes:
            errores.append({"linea": linea, "mensaje": f"Docente no encontrado: {valida['codigo_interno']}"})
            continue
        valida["linea"] = linea
        datos.append(_a_json(valida))
    return {"datos": datos, "errores": errores}


def _validar_contexto(db: Session, usuario: Usuario, operacion: str, periodo_id: int, area_id: int):
    periodo = obtener_periodo_abierto(db, periodo_id)
    area = obtener_area(db, area_id)
    verificar_area(db, usuario, operacion, area.id)
    return periodo, area


def generar_plantilla(db: Session, usuario: Usuario, periodo_id: int, area_id: int) -> Tuple[bytes, str]:
    """Plantilla xlsx con los docentes activos y pagable = 1 por omisión."""
    periodo, area = _validar_contexto(db, usuario, "carga_horas.plantilla", periodo_id, area_id)

    docentes = crud_docente.list_docentes_activos(db)
    if docentes:
        filas = [
            {"codigo_interno": d.codigo_interno, "nombre": d.nombre, "rfc": d.rfc, "pagable": 1}
            for d in docentes
        ]
    else:
        filas = [{
            "codigo_interno": "EJEMPLO", "nombre": "DOCENTE EJEMPLO", "rfc": "XAXX010101000",
            "materia": "MATERIA EJEMPLO", "horas": 10, "costo_hora": 100, "pagable": 1,
        }]

    contenido = excel_importer.generar_plantilla(excel_importer.MAPEO_CARGA_HORAS, filas)
    nombre = f"plantilla_carga_{area.nombre}_{periodo.nombre}.xlsx".replace(" ", "_")
    return contenido, nombre


def procesar_archivo(
    db: Session,
    usuario: Usuario,
    contenido: bytes,
    nombre_archivo: str,
    periodo_id: int,
    area_id: int,
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Previsualiza un archivo de carga de horas.

    Las filas con materia vacía se descartan sin reportarse: son los
    docentes de la plantilla a los que no se les asignaron horas.
    """
    _validar_contexto(db, usuario, "carga_horas.procesar", periodo_id, area_id)

    ruta = guardar_temporal(contenido, nombre_archivo)
    try:
        df = excel_importer.leer_tabla(ruta.read_bytes(), nombre_archivo)
    finally:
        ruta.unlink(missing_ok=True)

    filas = [
        f for f in excel_importer.parsear_filas(df, excel_importer.MAPEO_CARGA_HORAS)
        if a_texto(f.get("materia"))
    ]
    resultado = previsualizar(db, filas)

    registrar_auditoria(
        db, usuario.id, "PROCESAR_ARCHIVO_CARGA", "CargaHoras", None,
        {
            "periodo_id": periodo_id,
            "area_id": area_id,
            "registros_validos": len(resultado["datos"]),
            "errores": len(resultado["errores"]),
            "nombre_archivo": nombre_archivo,
        },
        commit=True,
    )
    logger.info(
        "Archivo %s procesado: %s válidos, %s con error",
        nombre_archivo, len(resultado["datos"]), len(resultado["errores"]),
    )
    return resultado


def procesar_individual(
    db: Session, usuario: Usuario, dato: Dict[str, Any], periodo_id: int, area_id: int
) -> Dict[str, List[Dict[str, Any]]]:
    _validar_contexto(db, usuario, "carga_horas.procesar_individual", periodo_id, area_id)
    return previsualizar(db, [dato])


def conciliar_lote(
    db: Session,
    filas: List[Dict[str, Any]],
    periodo_id: int,
    area_id: int,
    usuario_id: int,
) -> Dict[str, Any]:
    """
    Motor de conciliación: valida e inserta o actualiza cada fila.

    Todo el lote se escribe en una sola transacción. Las filas inválidas se
    acumulan en ``detalle_errores`` sin afectar a las demás; cualquier
    excepción de base de datos revierte el lote y se propaga.

    Dentro del lote, la primera aparición de un par (docente, materia)
    gana y las siguientes se rechazan como duplicadas. La materia se compara
    sin distinguir mayúsculas, igual que la búsqueda de la carga existente.
    """
    registrados = 0
    insertados = 0
    actualizados = 0
    detalle_errores: List[Dict[str, Any]] = []
    vistos = set()

    try:
        docentes = _docentes_por_codigo(db, filas)

        for indice, fila in enumerate(filas):
            linea = _linea(fila, indice)

            codigo = normalizar_codigo_docente(fila.get("codigo_interno"))
            docente = docentes.get(codigo)
            if not docente:
                detalle_errores.append({"linea": linea, "mensaje": f"Docente no encontrado: {codigo or '(vacío)'}"})
                continue

            try:
                valida = validar_fila(fila)
            except FilaInvalida as e:
                detalle_errores.append({"linea": linea, "mensaje": str(e)})
                continue

            llave = (docente.id, valida["materia"].lower())
            if llave in vistos:
                detalle_errores.append({
                    "linea": linea,
                    "mensaje": f"Registro duplicado en el lote: {docente.codigo_interno} - {valida['materia']}",
                })
                continue
            vistos.add(llave)

            carga = crud_carga.get_carga_por_llave(db, periodo_id, area_id, docente.id, valida["materia"])
            if carga:
                carga.horas = valida["horas"]
                carga.costo_hora = valida["costo_hora"]
                carga.pagable = valida["pagable"]
                carga.version = (carga.version or 1) + 1
                carga.creado_por_id = usuario_id
                actualizados += 1
            else:
                db.add(CargaHoras(
                    periodo_id=periodo_id,
                    area_id=area_id,
                    docente_id=docente.id,
                    materia_text=valida["materia"],
                    horas=valida["horas"],
                    costo_hora=valida["costo_hora"],
                    pagable=valida["pagable"],
                    version=1,
                    creado_por_id=usuario_id,
                ))
                insertados += 1
            db.flush()
            registrados += 1

        registrar_auditoria(
            db, usuario_id, "CARGA_HORAS", "CargaHoras", None,
            {
                "periodo_id": periodo_id,
                "area_id": area_id,
                "registrados": registrados,
                "insertados": insertados,
                "actualizados": actualizados,
                "errores": len(detalle_errores),
            },
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error al conciliar lote de carga (periodo=%s, área=%s)", periodo_id, area_id)
        raise

    errores = len(detalle_errores)
    mensaje = f"Se registraron {registrados} cargas de horas correctamente."
    if errores:
        mensaje += f" Hubo {errores} errores."
    logger.info(
        "Lote de carga periodo=%s área=%s: %s insertados, %s actualizados, %s errores",
        periodo_id, area_id, insertados, actualizados, errores,
    )
    return {
        "registrados": registrados,
        "errores": errores,
        "detalle_errores": detalle_errores,
        "mensaje": mensaje,
    }


def confirmar_carga(
    db: Session, usuario: Usuario, filas: List[Dict[str, Any]], periodo_id: int, area_id: int
) -> Dict[str, Any]:
    _validar_contexto(db, usuario, "carga_horas.confirmar", periodo_id, area_id)
    return conciliar_lote(db, filas, periodo_id, area_id, usuario.id)


def serializar_carga(carga: CargaHoras) -> Dict[str, Any]:
    return {
        "id": carga.id,
        "periodo_id": carga.periodo_id,
        "area_id": carga.area_id,
        "area": carga.area.nombre,
        "docente_id": carga.docente_id,
        "codigo_interno": carga.docente.codigo_interno,
        "nombre_docente": carga.docente.nombre,
        "rfc": carga.docente.rfc,
        "materia_text": carga.materia_text,
        "horas": float(carga.horas),
        "costo_hora": float(carga.costo_hora),
        "importe": float(carga.importe),
        "pagable": carga.pagable,
        "version": carga.version,
        "actualizado_en": carga.actualizado_en,
    }


def listar_cargas(
    db: Session,
    usuario: Usuario,
    periodo_id: int,
    area_id: int,
    texto: Optional[str] = None,
    page: int = 1,
    page_size: int = 10,
) -> Dict[str, Any]:
    obtener_area(db, area_id)
    verificar_area(db, usuario, "carga_horas.listar", area_id)

    total = crud_carga.count_cargas(db, periodo_id, area_id, texto)
    cargas = crud_carga.list_cargas(
        db, periodo_id, area_id, texto, ordenar_por="docente",
        skip=(page - 1) * page_size, limit=page_size,
    )
    return {"data": [serializar_carga(c) for c in cargas], "pagination": paginacion(total, page, page_size)}


def eliminar_carga(db: Session, usuario: Usuario, carga_id: int) -> Dict[str, Any]:
    """Borra una carga mientras su periodo siga ABIERTO."""
    carga = crud_carga.get_carga(db, carga_id)
    if not carga:
        raise RecursoNoEncontrado("Carga de horas", carga_id)
    if carga.periodo.estado != EstadoPeriodo.ABIERTO:
        raise PeriodoNoDisponible(carga.periodo.estado.value)
    verificar_area(db, usuario, "carga_horas.eliminar", carga.area_id)

    datos = serializar_carga(carga)
    registrar_auditoria(db, usuario.id, "ELIMINAR_CARGA", "CargaHoras", carga.id, datos)
    db.delete(carga)
    db.commit()
    logger.info("Carga %s eliminada por %s", carga_id, usuario.correo)
    return {"mensaje": "Carga de horas eliminada", "id": carga_id}
