"""
Reportes de pagos por periodo.

Todo se recalcula desde las cargas persistidas en cada petición:

- ``reporte_paginado``: listado plano de cargas con importe calculado.
- ``construir_pivote``: matriz docente x área con los importes sumados,
  total por docente y fila de totales por área. Es la estructura que se
  exporta en ``exportar_excel``.
- ``exportar_areas_zip`` / ``exportar_areas_multihojas``: detalle por área
  (docente, materia, horas, costo, importe) con subtotal por docente y
  total del área; las áreas sin cargas se omiten.

Las sumas se hacen con ``Decimal`` para que el total de cada docente en el
pivote sea exactamente la suma de los importes de sus cargas.
"""
import io
import re
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from app.core.exceptions import DatosInvalidos
from app.crud import area as crud_area
from app.crud import carga_horas as crud_carga
from app.models.carga_horas import CargaHoras
from app.models.periodo import Periodo
from app.services.area_service import obtener_area
from app.services.carga_horas_service import serializar_carga
from app.services.periodo_service import obtener_periodo
from app.utils.logger import logger
from app.utils.paginacion import paginacion


FORMATO_MONEDA = '"$"#,##0.00'
COLOR_ENCABEZADO = "FFD3D3D3"
CREADOR = "UMx RH"
ORDENES_VALIDOS = ("area", "docente", "materia")


@dataclass
class FilaPivote:
    docente_id: int
    codigo_interno: str
    nombre: str
    rfc: str
    importes: Dict[int, Decimal] = field(default_factory=dict)
    total: Decimal = Decimal("0")


@dataclass
class Pivote:
    areas: List[Tuple[int, str]]
    filas: List[FilaPivote]
    totales_por_area: Dict[int, Decimal]
    gran_total: Decimal


# -----------------------------------------------------
# Listado plano
# -----------------------------------------------------
def reporte_paginado(
    db: Session,
    periodo_id: int,
    area_id: Optional[int] = None,
    texto: Optional[str] = None,
    ordenar_por: str = "area",
    page: int = 1,
    page_size: int = 10,
) -> Dict[str, Any]:
    if ordenar_por not in ORDENES_VALIDOS:
        raise DatosInvalidos(
            f"ordenar_por debe ser uno de: {', '.join(ORDENES_VALIDOS)}", ordenar_por=ordenar_por
        )
    obtener_periodo(db, periodo_id)
    if area_id:
        obtener_area(db, area_id)

    total = crud_carga.count_cargas(db, periodo_id, area_id, texto)
    cargas = crud_carga.list_cargas(
        db, periodo_id, area_id, texto, ordenar_por=ordenar_por,
        skip=(page - 1) * page_size, limit=page_size,
    )
    filas = []
    for carga in cargas:
        fila = serializar_carga(carga)
        fila.pop("version")
        fila.pop("actualizado_en")
        filas.append(fila)
    return {"data": filas, "pagination": paginacion(total, page, page_size)}


# -----------------------------------------------------
# Pivote docente x área
# -----------------------------------------------------
def construir_pivote(db: Session, periodo_id: int, area_id: Optional[int] = None) -> Pivote:
    """
    Agrupa las cargas del periodo por docente y por área.

    Columnas: las áreas activas más cualquier área inactiva que tenga cargas
    en el periodo (o solo ``area_id`` si se indica), ordenadas por nombre.
    """
    cargas = crud_carga.list_cargas(db, periodo_id, area_id, ordenar_por="docente")

    if area_id:
        area = obtener_area(db, area_id)
        areas = [(area.id, area.nombre)]
    else:
        columnas = {a.id: a.nombre for a in crud_area.list_areas(db, solo_activas=True)}
        for carga in cargas:
            columnas.setdefault(carga.area_id, carga.area.nombre)
        areas = sorted(columnas.items(), key=lambda a: (a[1].lower(), a[0]))

    filas: Dict[int, FilaPivote] = {}
    totales = {aid: Decimal("0") for aid, _ in areas}
    for carga in cargas:
        fila = filas.get(carga.docente_id)
        if fila is None:
            fila = FilaPivote(
                docente_id=carga.docente_id,
                codigo_interno=carga.docente.codigo_interno,
                nombre=carga.docente.nombre,
                rfc=carga.docente.rfc,
            )
            filas[carga.docente_id] = fila
        importe = carga.importe
        fila.importes[carga.area_id] = fila.importes.get(carga.area_id, Decimal("0")) + importe
        fila.total += importe
        totales[carga.area_id] = totales.get(carga.area_id, Decimal("0")) + importe

    ordenadas = sorted(filas.values(), key=lambda f: (f.nombre.lower(), f.codigo_interno))
    return Pivote(
        areas=areas,
        filas=ordenadas,
        totales_por_area=totales,
        gran_total=sum((f.total for f in ordenadas), Decimal("0")),
    )


def pivote_a_dataframe(pivote: Pivote) -> pd.DataFrame:
    """Tabla del pivote con la fila TOTALES al final."""
    nombres = [nombre for _, nombre in pivote.areas]
    registros = []
    for fila in pivote.filas:
        registros.append(
            [fila.codigo_interno, fila.nombre, fila.rfc]
            + [float(fila.importes.get(aid, Decimal("0"))) for aid, _ in pivote.areas]
            + [float(fila.total)]
        )
    registros.append(
        ["", "TOTALES", ""]
        + [float(pivote.totales_por_area.get(aid, Decimal("0"))) for aid, _ in pivote.areas]
        + [float(pivote.gran_total)]
    )
    return pd.DataFrame(registros, columns=["Código", "NOMBRE", "RFC"] + nombres + ["TOTAL"])


# -----------------------------------------------------
# Exportación a Excel
# -----------------------------------------------------
def _estilo_encabezado(hoja, fila: int, columnas: int) -> None:
    relleno = PatternFill(start_color=COLOR_ENCABEZADO, end_color=COLOR_ENCABEZADO, fill_type="solid")
    for col in range(1, columnas + 1):
        celda = hoja.cell(row=fila, column=col)
        celda.font = Font(bold=True)
        celda.fill = relleno


def _escribir_titulo(hoja, titulo: str, periodo: Periodo, columnas: int) -> None:
    hoja.cell(row=1, column=1, value=titulo).font = Font(bold=True, size=16)
    hoja.cell(row=1, column=1).alignment = Alignment(horizontal="center")
    if columnas > 1:
        hoja.merge_cells(start_row=1, start_column=1, end_row=1, end_column=columnas)
    hoja.cell(row=2, column=1, value=f"Fecha: {datetime.now().strftime('%d/%m/%Y')}")
    hoja.cell(row=3, column=1, value=f"Periodo: {periodo.nombre}")


def _formato_moneda(hoja, desde_fila: int, hasta_fila: int, columnas: List[int]) -> None:
    for fila in range(desde_fila, hasta_fila + 1):
        for col in columnas:
            hoja.cell(row=fila, column=col).number_format = FORMATO_MONEDA


def _anchos(hoja, columnas: int, ancho: int = 15) -> None:
    for col in range(1, columnas + 1):
        hoja.column_dimensions[get_column_letter(col)].width = ancho


# Filas 1-3 son título, fecha y periodo; la 4 queda en blanco.
FILA_ENCABEZADO = 5


def _nuevo_libro(escribir) -> bytes:
    salida = io.BytesIO()
    with pd.ExcelWriter(salida, engine="openpyxl") as writer:
        writer.book.properties.creator = CREADOR
        escribir(writer)
    return salida.getvalue()


def _hoja_pivote(writer, pivote: Pivote, periodo: Periodo) -> None:
    df = pivote_a_dataframe(pivote)
    nombre_hoja = "Reporte de Pagos"
    df.to_excel(writer, index=False, sheet_name=nombre_hoja, startrow=FILA_ENCABEZADO - 1)
    hoja = writer.sheets[nombre_hoja]
    columnas = len(df.columns)

    _escribir_titulo(hoja, f"REPORTE DE PAGOS - {periodo.nombre}", periodo, columnas)
    _estilo_encabezado(hoja, FILA_ENCABEZADO, columnas)
    ultima = FILA_ENCABEZADO + len(df)
    for col in range(1, columnas + 1):
        hoja.cell(row=ultima, column=col).font = Font(bold=True)
    _formato_moneda(hoja, FILA_ENCABEZADO + 1, ultima, list(range(4, columnas + 1)))
    _anchos(hoja, columnas)


def exportar_excel(db: Session, periodo_id: int, area_id: Optional[int] = None) -> Tuple[bytes, str]:
    periodo = obtener_periodo(db, periodo_id)
    pivote = construir_pivote(db, periodo_id, area_id)
    contenido = _nuevo_libro(lambda writer: _hoja_pivote(writer, pivote, periodo))
    logger.info(
        "Reporte de pagos exportado: periodo=%s docentes=%s total=%s",
        periodo.nombre, len(pivote.filas), pivote.gran_total,
    )
    return contenido, f"reporte-pagos-{periodo.nombre}.xlsx"


def detalle_area_dataframe(cargas: List[CargaHoras]) -> Tuple[pd.DataFrame, List[int]]:
    """
    Detalle de un área con subtotal por docente y total del área.

    Regresa el DataFrame y las posiciones (base 0) de las filas de subtotal
    y total, para poder resaltarlas.
    """
    registros: List[List[Any]] = []
    resaltadas: List[int] = []
    total_area = Decimal("0")
    actual: Optional[int] = None
    subtotal = Decimal("0")

    def _cerrar_docente():
        resaltadas.append(len(registros))
        registros.append(["", "Subtotal", "", "", None, None, float(subtotal)])

    for carga in cargas:
        if actual is not None and carga.docente_id != actual:
            _cerrar_docente()
            subtotal = Decimal("0")
        actual = carga.docente_id
        importe = carga.importe
        subtotal += importe
        total_area += importe
        registros.append([
            carga.docente.codigo_interno,
            carga.docente.nombre,
            carga.docente.rfc,
            carga.materia_text,
            float(carga.horas),
            float(carga.costo_hora),
            float(importe),
        ])
    if actual is not None:
        _cerrar_docente()

    resaltadas.append(len(registros))
    registros.append(["", "TOTAL ÁREA", "", "", None, None, float(total_area)])

    columnas = ["Código", "NOMBRE", "RFC", "MATERIA", "HORAS", "COSTO POR HORA", "IMPORTE"]
    return pd.DataFrame(registros, columns=columnas), resaltadas


def _nombre_hoja(nombre: str, usados: set) -> str:
    base = re.sub(r"[\[\]:*?/\\]", "_", nombre).strip() or "Area"
    base = base[:31]
    candidato, n = base, 2
    while candidato.lower() in usados:
        sufijo = f" ({n})"
        candidato = base[: 31 - len(sufijo)] + sufijo
        n += 1
    usados.add(candidato.lower())
    return candidato


def _nombre_archivo(nombre: str, usados: set) -> str:
    base = re.sub(r"[^\w.-]+", "_", nombre).strip("_") or "reporte"
    candidato, n = f"{base}.xlsx", 2
    while candidato in usados:
        candidato = f"{base}_{n}.xlsx"
        n += 1
    usados.add(candidato)
    return candidato


def _hoja_area(writer, nombre_hoja: str, area_nombre: str, cargas: List[CargaHoras], periodo: Periodo) -> None:
    df, resaltadas = detalle_area_dataframe(cargas)
    df.to_excel(writer, index=False, sheet_name=nombre_hoja, startrow=FILA_ENCABEZADO - 1)
    hoja = writer.sheets[nombre_hoja]
    columnas = len(df.columns)

    _escribir_titulo(hoja, f"REPORTE DE PAGOS - {area_nombre}", periodo, columnas)
    _estilo_encabezado(hoja, FILA_ENCABEZADO, columnas)
    for posicion in resaltadas:
        for col in range(1, columnas + 1):
            hoja.cell(row=FILA_ENCABEZADO + 1 + posicion, column=col).font = Font(bold=True)
    _formato_moneda(hoja, FILA_ENCABEZADO + 1, FILA_ENCABEZADO + len(df), [6, 7])
    _anchos(hoja, columnas)
    hoja.column_dimensions["B"].width = 30
    hoja.column_dimensions["D"].width = 40


def _cargas_por_area(db: Session, periodo_id: int) -> List[Tuple[str, List[CargaHoras]]]:
    agrupadas: Dict[int, Tuple[str, List[CargaHoras]]] = {}
    for carga in crud_carga.list_cargas(db, periodo_id, ordenar_por="area"):
        agrupadas.setdefault(carga.area_id, (carga.area.nombre, []))[1].append(carga)
    if not agrupadas:
        raise DatosInvalidos("El periodo no tiene cargas de horas registradas")
    return sorted(agrupadas.values(), key=lambda a: a[0].lower())


def exportar_areas_zip(db: Session, periodo_id: int) -> Tuple[bytes, str]:
    """Un libro por área con cargas, empaquetados en un ZIP."""
    periodo = obtener_periodo(db, periodo_id)
    grupos = _cargas_por_area(db, periodo_id)

    salida = io.BytesIO()
    usados: set = set()
    with zipfile.ZipFile(salida, "w", zipfile.ZIP_DEFLATED) as zf:
        for area_nombre, cargas in grupos:
            hoja = _nombre_hoja(area_nombre, set())
            contenido = _nuevo_libro(
                lambda writer, h=hoja, a=area_nombre, c=cargas: _hoja_area(writer, h, a, c, periodo)
            )
            zf.writestr(_nombre_archivo(f"reporte-{area_nombre}-{periodo.nombre}", usados), contenido)

    logger.info("ZIP de reportes por área: periodo=%s áreas=%s", periodo.nombre, len(grupos))
    return salida.getvalue(), f"reportes-areas-{periodo.nombre}.zip"


def exportar_areas_multihojas(db: Session, periodo_id: int) -> Tuple[bytes, str]:
    """Un solo libro con una hoja por área con cargas."""
    periodo = obtener_periodo(db, periodo_id)
    grupos = _cargas_por_area(db, periodo_id)

    def _escribir(writer):
        usados: set = set()
        for area_nombre, cargas in grupos:
            _hoja_area(writer, _nombre_hoja(area_nombre, usados), area_nombre, cargas, periodo)

    contenido = _nuevo_libro(_escribir)
    logger.info("Libro multihoja por área: periodo=%s áreas=%s", periodo.nombre, len(grupos))
    return contenido, f"reportes-areas-{periodo.nombre}.xlsx"
