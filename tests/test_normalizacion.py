from decimal import Decimal

import pytest

from app.utils.normalizacion import (
    a_texto,
    es_vacio,
    normalizar_codigo_docente,
    normalizar_encabezado,
    normalizar_rfc,
    parsear_numero,
    parsear_pagable,
    validar_rfc,
)


def test_es_vacio_reconoce_nan_y_espacios():
    assert es_vacio(None)
    assert es_vacio(float("nan"))
    assert es_vacio("   ")
    assert not es_vacio(0)
    assert not es_vacio("0")


def test_a_texto_quita_decimales_de_enteros():
    assert a_texto(123.0) == "123"
    assert a_texto(12.5) == "12.5"
    assert a_texto("  Cálculo ") == "Cálculo"
    assert a_texto(None) == ""


@pytest.mark.parametrize("entrada, esperado", [
    ("Código Interno", "codigo_interno"),
    ("  RFC ", "rfc"),
    ("R.F.C.", "r_f_c"),
    ("Pagable (1=Sí, 0=No)", "pagable_1_si_0_no"),
    ("Costo por Hora", "costo_por_hora"),
])
def test_normalizar_encabezado(entrada, esperado):
    assert normalizar_encabezado(entrada) == esperado


@pytest.mark.parametrize("entrada, esperado", [
    (123, "000123"),
    ("123", "000123"),
    (123.0, "000123"),
    ("123.0", "000123"),
    ("1234567", "1234567"),
    ("A-77", "A-77"),
    ("  000999 ", "000999"),
    (None, ""),
])
def test_normalizar_codigo_docente(entrada, esperado):
    assert normalizar_codigo_docente(entrada) == esperado


def test_normalizar_codigo_docente_con_longitud():
    assert normalizar_codigo_docente("42", longitud=4) == "0042"


def test_normalizar_rfc():
    assert normalizar_rfc(" lopa 800101 ab1 ") == "LOPA800101AB1"


def test_validar_rfc_permisivo_y_estricto():
    assert validar_rfc("LOPA800101AB1", estricto=True)
    assert validar_rfc("LOPA800101", estricto=False)
    assert not validar_rfc("LOPA800101", estricto=True)
    assert not validar_rfc("123", estricto=False)
    assert validar_rfc("ÑAB800101", estricto=False)


def test_parsear_numero():
    assert parsear_numero("10") == Decimal("10")
    assert parsear_numero(" 1 0 ") == Decimal("10")
    assert parsear_numero(2.5) == Decimal("2.5")
    assert parsear_numero(Decimal("350.75")) == Decimal("350.75")


@pytest.mark.parametrize("valor", [None, "", "abc", True, float("inf"), "NaN"])
def test_parsear_numero_rechaza(valor):
    with pytest.raises(ValueError):
        parsear_numero(valor, "Horas")


@pytest.mark.parametrize("valor, esperado", [
    (1, True), (0, False), (1.0, True), ("1", True), ("0", False),
    ("Sí", True), ("si", True), ("NO", False), ("true", True), ("False", False),
    (True, True), (False, False), ("v", True), ("f", False),
])
def test_parsear_pagable(valor, esperado):
    assert parsear_pagable(valor) is esperado


@pytest.mark.parametrize("valor", [None, "", 2, "quizá", float("nan")])
def test_parsear_pagable_invalido(valor):
    with pytest.raises(ValueError):
        parsear_pagable(valor)
