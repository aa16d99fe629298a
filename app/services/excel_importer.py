"""
Lectura y escritura de hojas de cálculo para las importaciones.

El mismo ``MapeoColumnas`` describe las columnas de una plantilla y sirve
para leer el archivo que el usuario devuelve, de modo que la plantilla
generada y el parser nunca se desincronizan.

La detección de columnas es tolerante a encabezados editados a mano:

1. Cada encabezado se normaliza (minúsculas, sin acentos, ``_`` en lugar
   de signos) y se compara con el título y los alias del campo.
2. Los campos sin coincidencia por nombre que tengan ``posicion`` toman la
   columna de esa posición, siempre que otra columna no la haya reclamado.
3. Si ningún encabezado coincide, la primera fila se trata como datos.
"""

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from app.core.exceptions import DatosInvalidos
from app.utils.logger import logger
from app.utils.normalizacion import a_texto, es_vacio, normalizar_encabezado


EXTENSIONES_SOPORTADAS = (".csv", ".xlsx", ".xls")
MARCA_INSTRUCCIONES = "INSTRUCCIONES"


@dataclass(frozen=True)
class CampoColumna:
    clave: str
    titulo: str
    alias: Tuple[str, ...] = ()
    posicion: Optional[int] = None
    ancho: int = 15

    def nombres_aceptados(self) -> set:
        nombres = {normalizar_encabezado(self.clave), normalizar_encabezado(self.titulo)}
        nombres.update(normalizar_encabezado(a) for a in self.alias)
        nombres.discard("")
        return nombres


@dataclass(frozen=True)
class MapeoColumnas:
    """Columnas de una plantilla de importación, en orden."""

    campos: Tuple[CampoColumna, ...]
    hoja: str = "Hoja1"
    instrucciones: Optional[Tuple[str, ...]] = None

    @property
    def claves(self) -> List[str]:
        return [c.clave for c in self.campos]

    @property
    def titulos(self) -> List[str]:
        return [c.titulo for c in self.campos]

    def resolver(self, encabezados: Sequence[Any]) -> Tuple[Dict[str, Optional[int]], bool]:
        """
        Relaciona cada campo con el índice de columna del archivo.

        Regresa ``(indices, hay_encabezado)``; ``hay_encabezado`` es falso
        cuando ningún encabezado coincide por nombre.
        """
        normalizados = [normalizar_encabezado(e) for e in encabezados]
        indices: Dict[str, Optional[int]] = {}
        usadas = set()

        for campo in self.campos:
            aceptados = campo.nombres_aceptados()
            indice = next(
                (i for i, n in enumerate(normalizados) if n in aceptados and i not in usadas),
                None,
            )
            indices[campo.clave] = indice
            if indice is not None:
                usadas.add(indice)

        hay_encabezado = bool(usadas)

        for campo in self.campos:
            if indices[campo.clave] is not None or campo.posicion is None:
                continue
            if campo.posicion < len(encabezados) and campo.posicion not in usadas:
                indices[campo.clave] = campo.posicion
                usadas.add(campo.posicion)

        return indices, hay_encabezado


MAPEO_CARGA_HORAS = MapeoColumnas(
    campos=(
        CampoColumna(
            "codigo_interno", "Código Interno",
            ("codigointerno", "codigo", "code", "id", "num", "numero"), posicion=0, ancho=15,
        ),
        CampoColumna(
            "nombre", "Nombre del Docente",
            ("name", "docente", "profesor", "maestro", "nombre_completo", "nombrecompleto",
             "fullname", "full_name"),
            posicion=1, ancho=30,
        ),
        CampoColumna(
            "rfc", "RFC", ("r.f.c.", "registro_fiscal", "registrofiscal", "tax_id"), posicion=2, ancho=15,
        ),
        CampoColumna("materia", "Materia", ("asignatura", "subject"), ancho=40),
        CampoColumna("horas", "Horas", ("hrs", "hours", "numero_horas"), ancho=10),
        CampoColumna("costo_hora", "Costo por Hora", ("costo", "costohora", "tarifa", "rate"), ancho=15),
        CampoColumna("pagable", "Pagable (1=Sí, 0=No)", ("pagable", "es_pagable", "payable"), ancho=20),
    ),
    hoja="Carga Horas",
)


MAPEO_DOCENTES = MapeoColumnas(
    campos=(
        CampoColumna(
            "codigo_interno", "codigo_interno",
            ("codigointerno", "codigo", "code", "id", "num", "numero", "Código Interno"),
            posicion=0, ancho=15,
        ),
        CampoColumna(
            "nombre", "nombre",
            ("name", "docente", "profesor", "maestro", "nombre_completo", "nombrecompleto",
             "fullname", "full_name", "Nombre del Docente"),
            posicion=1, ancho=30,
        ),
        CampoColumna(
            "rfc", "rfc", ("r.f.c.", "registro_fiscal", "registrofiscal", "tax_id"), posicion=2, ancho=15,
        ),
        CampoColumna("activo", "activo", ("active", "estatus", "status"), ancho=20),
    ),
    hoja="Docentes",
    instrucciones=("INSTRUCCIONES", "NO MODIFICAR ESTA FILA", "FORMATO: AAAA010101AAA", "1=SÍ, 0=NO"),
)


def leer_tabla(contenido: bytes, nombre_archivo: str) -> pd.DataFrame:
    """
    Lee un CSV o la primera hoja de un libro Excel sin interpretar encabezados.

    Lanza ``DatosInvalidos`` si la extensión no es soportada o el archivo no
    se puede leer.
    """
    extension = Path(nombre_archivo or "").suffix.lower()
    if extension not in EXTENSIONES_SOPORTADAS:
        raise DatosInvalidos(
            "Formato de archivo no soportado. Use CSV, XLSX o XLS.",
            extensiones=list(EXTENSIONES_SOPORTADAS),
        )

    try:
        if extension == ".csv":
            df = pd.read_csv(
                io.BytesIO(contenido),
                header=None,
                dtype=object,
                encoding="utf-8-sig",
                skip_blank_lines=True,
            )
        else:
            df = pd.read_excel(io.BytesIO(contenido), sheet_name=0, header=None, dtype=object)
    except Exception as e:
        logger.warning("No se pudo leer %s: %s", nombre_archivo, e)
        raise DatosInvalidos(f"Error al leer archivo: {e}") from e

    return df


def parsear_filas(df: pd.DataFrame, mapeo: MapeoColumnas) -> List[Dict[str, Any]]:
    """
    Convierte una tabla cruda en diccionarios con las claves de ``mapeo``.

    Cada fila incluye ``linea`` (número de fila en la hoja, base 1). Se
    omiten las filas totalmente vacías y la fila de instrucciones de las
    plantillas. Los valores se entregan sin validar.
    """
    if df.empty:
        return []

    encabezados = list(df.iloc[0])
    indices, hay_encabezado = mapeo.resolver(encabezados)
    inicio = 1 if hay_encabezado else 0
    logger.info(
        "Columnas detectadas (%s): %s",
        mapeo.hoja,
        {k: v for k, v in indices.items() if v is not None},
    )

    filas: List[Dict[str, Any]] = []
    for posicion in range(inicio, len(df)):
        valores = list(df.iloc[posicion])
        if all(es_vacio(v) for v in valores):
            continue
        if a_texto(valores[0]).upper() == MARCA_INSTRUCCIONES:
            continue

        fila: Dict[str, Any] = {"linea": posicion + 1}
        for clave, indice in indices.items():
            valor = valores[indice] if indice is not None and indice < len(valores) else None
            fila[clave] = None if es_vacio(valor) else valor
        filas.append(fila)

    return filas


def _estilizar_hoja(hoja, mapeo: MapeoColumnas) -> None:
    negrita = Font(bold=True)
    relleno = PatternFill(start_color="FFD3D3D3", end_color="FFD3D3D3", fill_type="solid")
    for indice, campo in enumerate(mapeo.campos, start=1):
        celda = hoja.cell(row=1, column=indice)
        celda.font = negrita
        celda.fill = relleno
        celda.alignment = Alignment(horizontal="center")
        hoja.column_dimensions[get_column_letter(indice)].width = campo.ancho
    if mapeo.instrucciones:
        for indice in range(1, len(mapeo.instrucciones) + 1):
            hoja.cell(row=2, column=indice).font = Font(italic=True, color="FF808080")
    hoja.freeze_panes = "A2"


def generar_plantilla(mapeo: MapeoColumnas, filas: Iterable[Dict[str, Any]]) -> bytes:
    """
    Genera un libro xlsx con los títulos de ``mapeo`` y las filas dadas.

    Las filas se indexan por clave de campo; las claves faltantes quedan
    vacías. Si el mapeo trae instrucciones, se escriben en la segunda fila.
    """
    registros = [[fila.get(clave, "") for clave in mapeo.claves] for fila in filas]
    if mapeo.instrucciones:
        instrucciones = list(mapeo.instrucciones) + [""] * (len(mapeo.campos) - len(mapeo.instrucciones))
        registros.insert(0, instrucciones[: len(mapeo.campos)])

    df = pd.DataFrame(registros, columns=mapeo.titulos)

    salida = io.BytesIO()
    with pd.ExcelWriter(salida, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=mapeo.hoja)
        _estilizar_hoja(writer.sheets[mapeo.hoja], mapeo)
    return salida.getvalue()
