"""
Agregación del pivote docente x área y exportaciones a Excel/ZIP.
"""
import io
import zipfile
from decimal import Decimal

import pytest
from openpyxl import load_workbook
from sqlalchemy.orm import Session

from app.core.exceptions import DatosInvalidos
from app.models.area import Area
from app.models.carga_horas import CargaHoras
from app.services import reporte_pagos
from app.services.reporte_pagos import FILA_ENCABEZADO


def _carga(db, periodo, area, docente, materia, horas, costo, usuario, pagable=True):
    carga = CargaHoras(
        periodo_id=periodo.id, area_id=area.id, docente_id=docente.id, materia_text=materia,
        horas=Decimal(str(horas)), costo_hora=Decimal(str(costo)), pagable=pagable,
        version=1, creado_por_id=usuario.id,
    )
    db.add(carga)
    db.commit()
    return carga


@pytest.fixture
def cargas(db: Session, admin, area, area_prepa, periodo_abierto, docentes):
    ana, bruno = docentes
    _carga(db, periodo_abierto, area, ana, "Cálculo", 10, "150.25", admin)
    _carga(db, periodo_abierto, area, ana, "Algebra", 3, "0.10", admin)
    _carga(db, periodo_abierto, area_prepa, ana, "Física", 2, 100, admin)
    _carga(db, periodo_abierto, area_prepa, bruno, "Química", 4, 200, admin)


def test_pivote_suma_por_docente_y_area(db: Session, cargas, area, area_prepa, periodo_abierto, docentes):
    pivote = reporte_pagos.construir_pivote(db, periodo_abierto.id)

    assert [nombre for _, nombre in pivote.areas] == ["Licenciaturas", "Preparatoria"]
    ana = next(f for f in pivote.filas if f.codigo_interno == "000123")
    assert ana.importes[area.id] == Decimal("1502.80")
    assert ana.importes[area_prepa.id] == Decimal("200")
    assert ana.total == Decimal("1702.80")
    assert pivote.totales_por_area[area_prepa.id] == Decimal("1000")
    assert pivote.gran_total == Decimal("2502.80")


def test_pivote_incluye_area_inactiva_con_cargas(db: Session, cargas, area_prepa, periodo_abierto):
    area_prepa.activo = False
    db.add(Area(nombre="Posgrado", activo=False))
    db.commit()

    nombres = [nombre for _, nombre in reporte_pagos.construir_pivote(db, periodo_abierto.id).areas]
    assert "Preparatoria" in nombres
    assert "Posgrado" not in nombres


def test_pivote_incluye_areas_activas_sin_cargas(db: Session, periodo_abierto):
    db.add(Area(nombre="Idiomas", activo=True))
    db.commit()
    pivote = reporte_pagos.construir_pivote(db, periodo_abierto.id)
    assert [nombre for _, nombre in pivote.areas] == ["Idiomas"]
    assert pivote.filas == []
    assert pivote.gran_total == Decimal("0")


def test_dataframe_agrega_fila_totales(db: Session, cargas, periodo_abierto):
    df = reporte_pagos.pivote_a_dataframe(reporte_pagos.construir_pivote(db, periodo_abierto.id))
    assert list(df.columns) == ["Código", "NOMBRE", "RFC", "Licenciaturas", "Preparatoria", "TOTAL"]
    assert df.iloc[-1]["NOMBRE"] == "TOTALES"
    assert df.iloc[-1]["TOTAL"] == pytest.approx(2502.80)


def test_exportar_excel(db: Session, cargas, periodo_abierto):
    contenido, nombre = reporte_pagos.exportar_excel(db, periodo_abierto.id)
    assert nombre == "reporte-pagos-2025-A.xlsx"

    libro = load_workbook(io.BytesIO(contenido))
    hoja = libro["Reporte de Pagos"]
    assert hoja["A1"].value == "REPORTE DE PAGOS - 2025-A"
    assert hoja["A3"].value == "Periodo: 2025-A"
    assert hoja.cell(row=FILA_ENCABEZADO, column=2).value == "NOMBRE"
    assert hoja.cell(row=FILA_ENCABEZADO, column=2).font.bold
    ultima = FILA_ENCABEZADO + 3
    assert hoja.cell(row=ultima, column=2).value == "TOTALES"
    assert hoja.cell(row=ultima, column=6).number_format == reporte_pagos.FORMATO_MONEDA
    assert libro.properties.creator == reporte_pagos.CREADOR


def test_detalle_area_con_subtotales(db: Session, cargas, area, periodo_abierto):
    from app.crud import carga_horas as crud_carga

    df, resaltadas = reporte_pagos.detalle_area_dataframe(
        crud_carga.list_cargas(db, periodo_abierto.id, area.id, ordenar_por="area")
    )
    assert list(df["NOMBRE"]) == ["ANA LÓPEZ", "ANA LÓPEZ", "Subtotal", "TOTAL ÁREA"]
    assert resaltadas == [2, 3]
    assert df.iloc[-1]["IMPORTE"] == pytest.approx(1502.80)


def test_exportar_areas_zip(db: Session, cargas, periodo_abierto):
    contenido, nombre = reporte_pagos.exportar_areas_zip(db, periodo_abierto.id)
    assert nombre == "reportes-areas-2025-A.zip"
    with zipfile.ZipFile(io.BytesIO(contenido)) as zf:
        nombres = sorted(zf.namelist())
    assert nombres == ["reporte-Licenciaturas-2025-A.xlsx", "reporte-Preparatoria-2025-A.xlsx"]


def test_exportar_areas_multihojas(db: Session, cargas, periodo_abierto):
    contenido, _ = reporte_pagos.exportar_areas_multihojas(db, periodo_abierto.id)
    libro = load_workbook(io.BytesIO(contenido))
    assert libro.sheetnames == ["Licenciaturas", "Preparatoria"]


def test_exportar_areas_sin_cargas(db: Session, periodo_abierto):
    with pytest.raises(DatosInvalidos):
        reporte_pagos.exportar_areas_multihojas(db, periodo_abierto.id)


def test_reporte_paginado_valida_orden(db: Session, cargas, periodo_abierto):
    with pytest.raises(DatosInvalidos):
        reporte_pagos.reporte_paginado(db, periodo_abierto.id, ordenar_por="rfc")

    resultado = reporte_pagos.reporte_paginado(db, periodo_abierto.id, ordenar_por="materia", page_size=2)
    assert resultado["pagination"] == {"total": 4, "page": 1, "pageSize": 2, "totalPages": 2}
    assert [f["materia_text"] for f in resultado["data"]] == ["Algebra", "Cálculo"]
