"""
Flujo del coordinador: plantilla -> procesar -> confirmar, y permisos por área.
"""
import io
from decimal import Decimal

from fastapi.testclient import TestClient
from openpyxl import load_workbook
from sqlalchemy.orm import Session

from app.core.config import Roles
from app.models.auditoria import Auditoria
from app.models.carga_horas import CargaHoras
from app.models.periodo import EstadoPeriodo
from app.services import excel_importer
from tests.conftest import auth_headers, crear_usuario

CSV_CARGA = (
    "Código Interno,Nombre del Docente,RFC,Materia,Horas,Costo por Hora,\"Pagable (1=Sí, 0=No)\"\n"
    "123,ANA LÓPEZ,LOPA800101AB1,Cálculo,10,200,1\n"
    "456,BRUNO DÍAZ,DIAB750505XY2,,,,1\n"
    "456,BRUNO DÍAZ,DIAB750505XY2,Física,0,150,1\n"
    "999,NADIE,XAXX010101000,Química,5,100,1\n"
)


def _datos(horas=10):
    return [
        {"codigo_interno": "123", "materia": "Cálculo", "horas": horas, "costo_hora": 200, "pagable": 1},
        {"codigo_interno": "000456", "materia": "Física", "horas": 4, "costo_hora": "150", "pagable": "no"},
    ]


class TestPlantillaYPreview:
    """Plantilla por área y previsualización."""

    def test_plantilla_con_docentes_activos(self, client: TestClient, coord, area, periodo_abierto, docentes):
        r = client.get(
            "/api/carga-horas/plantillas",
            params={"periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=auth_headers(coord),
        )
        assert r.status_code == 200
        hoja = load_workbook(io.BytesIO(r.content))[excel_importer.MAPEO_CARGA_HORAS.hoja]
        assert [c.value for c in hoja[1]] == excel_importer.MAPEO_CARGA_HORAS.titulos
        assert hoja["A2"].value == "000123"
        assert hoja["G2"].value == 1

    def test_plantilla_requiere_periodo_abierto(self, client: TestClient, db: Session, coord, area, periodo_abierto):
        periodo_abierto.estado = EstadoPeriodo.CERRADO
        db.commit()
        r = client.get(
            "/api/carga-horas/plantillas",
            params={"periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=auth_headers(coord),
        )
        assert r.status_code == 409
        assert r.json()["detail"]["estado_actual"] == "CERRADO"

    def test_procesar_archivo(self, client: TestClient, db: Session, coord, area, periodo_abierto, docentes):
        r = client.post(
            "/api/carga-horas/procesar",
            data={"periodo_id": str(periodo_abierto.id), "area_id": str(area.id)},
            files={"archivo": ("carga.csv", CSV_CARGA.encode("utf-8"), "text/csv")},
            headers=auth_headers(coord),
        )
        assert r.status_code == 200
        cuerpo = r.json()
        assert len(cuerpo["datos"]) == 1
        assert cuerpo["datos"][0]["codigo_interno"] == "000123"
        assert cuerpo["datos"][0]["importe"] == 2000.0
        # la fila sin materia se descarta sin error
        assert [e["linea"] for e in cuerpo["errores"]] == [4, 5]
        assert db.query(CargaHoras).count() == 0
        assert db.query(Auditoria).filter(Auditoria.accion == "PROCESAR_ARCHIVO_CARGA").count() == 1

    def test_procesar_area_no_asignada(self, client: TestClient, coord, area_prepa, periodo_abierto, docentes):
        r = client.post(
            "/api/carga-horas/procesar",
            data={"periodo_id": str(periodo_abierto.id), "area_id": str(area_prepa.id)},
            files={"archivo": ("carga.csv", CSV_CARGA.encode("utf-8"), "text/csv")},
            headers=auth_headers(coord),
        )
        assert r.status_code == 403

    def test_procesar_individual(self, client: TestClient, coord, area, periodo_abierto, docentes):
        r = client.post(
            "/api/carga-horas/procesar-individual",
            json={"dato": _datos()[1], "periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=auth_headers(coord),
        )
        assert r.status_code == 200
        assert r.json()["datos"][0]["costo_hora"] == 0.0
        assert r.json()["datos"][0]["pagable"] is False


class TestConfirmacion:
    """Confirmación del lote y sus permisos."""

    def test_confirmar_inserta_y_reenvio_actualiza(self, client: TestClient, db: Session, coord, area, periodo_abierto, docentes):
        headers = auth_headers(coord)
        payload = {"datos": _datos(), "periodo_id": periodo_abierto.id, "area_id": area.id}

        r = client.post("/api/carga-horas/confirmar", json=payload, headers=headers)
        assert r.status_code == 200
        assert r.json()["registrados"] == 2
        assert r.json()["errores"] == 0

        payload["datos"] = _datos(horas=12)
        r = client.post("/api/carga-horas/confirmar", json=payload, headers=headers)
        assert r.json()["registrados"] == 2

        db.expire_all()
        calculo = db.query(CargaHoras).filter(CargaHoras.materia_text == "Cálculo").one()
        assert calculo.version == 2
        assert Decimal(calculo.horas) == Decimal("12")
        assert db.query(CargaHoras).count() == 2

        r = client.get(
            "/api/carga-horas",
            params={"periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=headers,
        )
        assert r.json()["pagination"]["total"] == 2
        assert {c["materia_text"]: c["version"] for c in r.json()["data"]} == {"Cálculo": 2, "Física": 2}

    def test_confirmar_con_errores_por_fila(self, client: TestClient, coord, area, periodo_abierto, docentes):
        datos = _datos() + [{"codigo_interno": "123", "materia": "Cálculo", "horas": 3, "costo_hora": 1, "pagable": 1}]
        r = client.post(
            "/api/carga-horas/confirmar",
            json={"datos": datos, "periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=auth_headers(coord),
        )
        assert r.json()["registrados"] == 2
        assert r.json()["errores"] == 1
        assert r.json()["detalle_errores"][0]["linea"] == 3

    def test_confirmar_requiere_coordinador_asignado(self, client: TestClient, db: Session, admin, coord_otro, area,
                                                     periodo_abierto, docentes):
        payload = {"datos": _datos(), "periodo_id": periodo_abierto.id, "area_id": area.id}

        r = client.post("/api/carga-horas/confirmar", json=payload, headers=auth_headers(coord_otro))
        assert r.status_code == 403
        assert r.json()["detail"]["area_id"] == area.id

        # ADMIN sin rol COORD no carga horas
        assert client.post("/api/carga-horas/confirmar", json=payload, headers=auth_headers(admin)).status_code == 403

        # ADMIN + COORD sin asignación tampoco: el predicado es estricto
        admin_coord = crear_usuario(db, "admin.coord@test.mx", Roles.ADMIN, Roles.COORD)
        assert client.post("/api/carga-horas/confirmar", json=payload, headers=auth_headers(admin_coord)).status_code == 403
        assert db.query(CargaHoras).count() == 0

    def test_confirmar_periodo_no_abierto(self, client: TestClient, db: Session, coord, area, periodo_abierto, docentes):
        periodo_abierto.estado = EstadoPeriodo.CERRADO
        db.commit()
        r = client.post(
            "/api/carga-horas/confirmar",
            json={"datos": _datos(), "periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=auth_headers(coord),
        )
        assert r.status_code == 409
        assert r.json()["detail"]["code"] == "PERIODO_NO_DISPONIBLE"

    def test_confirmar_sin_datos(self, client: TestClient, coord, area, periodo_abierto):
        r = client.post(
            "/api/carga-horas/confirmar",
            json={"datos": [], "periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=auth_headers(coord),
        )
        assert r.status_code == 400


class TestListadoYEliminacion:
    """Listado y baja de cargas."""

    def test_listar_cargas_permisos(self, client: TestClient, rh, coord_otro, area, periodo_abierto):
        params = {"periodo_id": periodo_abierto.id, "area_id": area.id}
        assert client.get("/api/carga-horas", params=params, headers=auth_headers(rh)).status_code == 200
        assert client.get("/api/carga-horas", params=params, headers=auth_headers(coord_otro)).status_code == 403

    def test_eliminar_carga(self, client: TestClient, db: Session, admin, rh, coord, coord_otro, area, periodo_abierto, docentes):
        client.post(
            "/api/carga-horas/confirmar",
            json={"datos": _datos(), "periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=auth_headers(coord),
        )
        primera, segunda = [c.id for c in db.query(CargaHoras).order_by(CargaHoras.id)]

        assert client.delete(f"/api/carga-horas/{primera}", headers=auth_headers(rh)).status_code == 403
        assert client.delete(f"/api/carga-horas/{primera}", headers=auth_headers(coord_otro)).status_code == 403
        assert client.delete(f"/api/carga-horas/{primera}", headers=auth_headers(coord)).status_code == 200
        assert client.delete(f"/api/carga-horas/{segunda}", headers=auth_headers(admin)).status_code == 200
        assert client.delete(f"/api/carga-horas/{segunda}", headers=auth_headers(admin)).status_code == 404
        assert db.query(Auditoria).filter(Auditoria.accion == "ELIMINAR_CARGA").count() == 2

    def test_eliminar_carga_periodo_cerrado(self, client: TestClient, db: Session, coord, area, periodo_abierto, docentes):
        client.post(
            "/api/carga-horas/confirmar",
            json={"datos": _datos(), "periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=auth_headers(coord),
        )
        carga_id = db.query(CargaHoras.id).first()[0]
        periodo_abierto.estado = EstadoPeriodo.CERRADO
        db.commit()
        assert client.delete(f"/api/carga-horas/{carga_id}", headers=auth_headers(coord)).status_code == 409


class TestPagos:
    """Reporte y exportaciones de pagos."""

    def test_pagos_solo_admin_rh(self, client: TestClient, rh, coord, area, periodo_abierto, docentes):
        client.post(
            "/api/carga-horas/confirmar",
            json={"datos": _datos(), "periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=auth_headers(coord),
        )
        params = {"periodo_id": periodo_abierto.id}

        assert client.get("/api/pagos/reporte", params=params, headers=auth_headers(coord)).status_code == 403

        r = client.get("/api/pagos/reporte", params={**params, "ordenar_por": "docente"}, headers=auth_headers(rh))
        assert r.status_code == 200
        assert [f["nombre_docente"] for f in r.json()["data"]] == ["ANA LÓPEZ", "BRUNO DÍAZ"]
        assert r.json()["data"][0]["importe"] == 2000.0

        r = client.get("/api/pagos/reporte", params={**params, "ordenar_por": "rfc"}, headers=auth_headers(rh))
        assert r.status_code == 400

    def test_pagos_exportaciones(self, client: TestClient, rh, coord, area, periodo_abierto, docentes):
        client.post(
            "/api/carga-horas/confirmar",
            json={"datos": _datos(), "periodo_id": periodo_abierto.id, "area_id": area.id},
            headers=auth_headers(coord),
        )
        headers = auth_headers(rh)
        params = {"periodo_id": periodo_abierto.id}

        r = client.get("/api/pagos/exportar/excel", params=params, headers=headers)
        assert r.status_code == 200
        assert "reporte-pagos-2025-A.xlsx" in r.headers["content-disposition"]

        r = client.get("/api/pagos/exportar/areas/zip", params=params, headers=headers)
        assert r.headers["content-type"] == "application/zip"

        r = client.get("/api/pagos/exportar/areas/excel-multihojas", params=params, headers=headers)
        assert load_workbook(io.BytesIO(r.content)).sheetnames == ["Licenciaturas"]
