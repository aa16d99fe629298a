"""
Utilidades de normalización de datos.

Funciones puras para limpiar los valores que llegan desde hojas de cálculo
o formularios: encabezados de columna, códigos internos de docente, RFC,
números y banderas de "pagable". Todas las importaciones (docentes y carga
de horas) pasan por aquí para que un mismo valor se interprete igual en
cualquier punto de la aplicación.
"""

import math
import re
import unicodedata
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from app.core.config import settings


# RFC con homoclave de 0 a 3 caracteres (backend histórico)
RFC_REGEX_PERMISIVO = re.compile(r"^[A-Z&Ñ]{3,4}[0-9]{6}[A-Z0-9]{0,3}$")
# RFC con homoclave completa
RFC_REGEX_ESTRICTO = re.compile(r"^[A-Z&Ñ]{3,4}[0-9]{6}[A-Z0-9]{3}$")

VALORES_VERDADEROS = frozenset({"1", "true", "t", "si", "sí", "s", "yes", "y", "verdadero", "v"})
VALORES_FALSOS = frozenset({"0", "false", "f", "no", "n", "falso"})


def es_vacio(valor: Any) -> bool:
    """
    Indica si una celda debe tratarse como vacía.

    pandas entrega ``NaN`` (float) para celdas vacías, por eso no basta con
    revisar ``None`` o la cadena vacía.

    Examples:
        >>> es_vacio(None), es_vacio(float("nan")), es_vacio("  ")
        (True, True, True)
        >>> es_vacio(0)
        False
    """
    if valor is None:
        return True
    if isinstance(valor, float) and math.isnan(valor):
        return True
    if isinstance(valor, str) and not valor.strip():
        return True
    return False


def a_texto(valor: Any) -> str:
    """
    Convierte una celda a texto limpio.

    Los flotantes enteros se escriben sin decimales (Excel guarda ``123``
    como ``123.0``).
    """
    if es_vacio(valor):
        return ""
    if isinstance(valor, float) and valor.is_integer():
        return str(int(valor))
    return str(valor).strip()


def normalizar_encabezado(texto: Any) -> str:
    """
    Normaliza un encabezado de columna para compararlo con los alias conocidos.

    Pasos: minúsculas, eliminar acentos y reemplazar cualquier carácter no
    alfanumérico por ``_`` (colapsando repeticiones y recortando extremos).

    Examples:
        >>> normalizar_encabezado("Código Interno")
        "codigo_interno"

        >>> normalizar_encabezado("R.F.C.")
        "r_f_c"

        >>> normalizar_encabezado("Pagable (1=Sí, 0=No)")
        "pagable_1_si_0_no"
    """
    texto = a_texto(texto).lower()
    texto = unicodedata.normalize("NFKD", texto)
    texto = "".join(c for c in texto if not unicodedata.combining(c))
    texto = re.sub(r"[^a-z0-9]+", "_", texto)
    return texto.strip("_")


def normalizar_codigo_docente(valor: Any, longitud: Optional[int] = None) -> str:
    """
    Normaliza el código interno de un docente.

    Los códigos que parecen numéricos se rellenan con ceros a la izquierda
    hasta ``longitud`` (``CODIGO_DOCENTE_LONGITUD``, 6 por omisión). Otros
    códigos se devuelven tal cual, sin espacios.

    Examples:
        >>> normalizar_codigo_docente(123)
        "000123"

        >>> normalizar_codigo_docente("123.0")
        "000123"

        >>> normalizar_codigo_docente("A-77")
        "A-77"
    """
    longitud = longitud or settings.codigo_docente_longitud
    codigo = a_texto(valor)
    if re.fullmatch(r"\d+\.0+", codigo):
        codigo = codigo.split(".")[0]
    if codigo.isdigit():
        return codigo.zfill(longitud)
    return codigo


def normalizar_rfc(valor: Any) -> str:
    return re.sub(r"\s+", "", a_texto(valor)).upper()


def validar_rfc(rfc: str, estricto: Optional[bool] = None) -> bool:
    """
    Valida el formato de un RFC ya normalizado.

    El patrón se elige con ``RFC_VALIDACION_ESTRICTA``: el permisivo admite
    de 0 a 3 caracteres de homoclave, el estricto exige exactamente 3.
    """
    if estricto is None:
        estricto = settings.rfc_validacion_estricta
    patron = RFC_REGEX_ESTRICTO if estricto else RFC_REGEX_PERMISIVO
    return bool(patron.match(rfc or ""))


def parsear_numero(valor: Any, campo: str = "valor") -> Decimal:
    """
    Convierte una celda a ``Decimal``.

    Acepta números o cadenas con espacios intercalados (``" 1 0 "`` -> 10).
    Lanza ``ValueError`` si el resultado no es un número finito.
    """
    if isinstance(valor, bool):
        raise ValueError(f"{campo} debe ser un número")
    if isinstance(valor, (int, float, Decimal)):
        texto = str(valor)
    else:
        texto = re.sub(r"\s+", "", a_texto(valor))
    if not texto:
        raise ValueError(f"{campo} es requerido")
    try:
        numero = Decimal(texto)
    except InvalidOperation as exc:
        raise ValueError(f"{campo} debe ser un número") from exc
    if not numero.is_finite():
        raise ValueError(f"{campo} debe ser un número")
    return numero


def parsear_pagable(valor: Any) -> bool:
    """
    Interpreta la bandera de "pagable".

    Acepta booleanos, los números 0 y 1 y las variantes de texto
    ``1/0``, ``true/false``, ``sí/no``, ``s/n``, ``yes/no``, ``v/f``,
    ``verdadero/falso`` sin importar mayúsculas. Cualquier otro valor
    (incluida la celda vacía) lanza ``ValueError``.
    """
    if isinstance(valor, bool):
        return valor
    if isinstance(valor, (int, float, Decimal)) and not es_vacio(valor):
        if valor == 1:
            return True
        if valor == 0:
            return False
        raise ValueError("Pagable debe ser 0 o 1")

    texto = a_texto(valor).lower()
    if texto in VALORES_VERDADEROS:
        return True
    if texto in VALORES_FALSOS:
        return False
    raise ValueError("Pagable debe ser 0 o 1 (o sí/no)")
