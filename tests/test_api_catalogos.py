"""
Áreas, docentes (incluida la importación masiva) y periodos vía API.
"""
import io
import json
from pathlib import Path

from fastapi.testclient import TestClient
from openpyxl import load_workbook
from sqlalchemy.orm import Session

from app.core.config import Roles, settings
from app.models.area import Area
from app.models.docente import Docente
from tests.conftest import auth_headers, crear_usuario


class TestAreas:
    """Áreas y asignación de coordinadores."""

    def test_crear_y_listar_areas(self, client: TestClient, admin, coord, area):
        headers = auth_headers(admin)
        r = client.post("/api/areas", json={"nombre": "Posgrado"}, headers=headers)
        assert r.status_code == 201

        r = client.post("/api/areas", json={"nombre": "Posgrado"}, headers=headers)
        assert r.status_code == 409

        r = client.get("/api/areas", headers=auth_headers(coord))
        cuerpo = {a["nombre"]: a for a in r.json()}
        assert set(cuerpo) == {"Licenciaturas", "Posgrado"}
        assert [c["correo"] for c in cuerpo["Licenciaturas"]["coordinadores"]] == ["coord@test.mx"]

    def test_nombre_de_area_corto(self, client: TestClient, admin):
        r = client.post("/api/areas", json={"nombre": "AB"}, headers=auth_headers(admin))
        assert r.status_code == 400

    def test_rh_no_crea_areas(self, client: TestClient, rh):
        assert client.post("/api/areas", json={"nombre": "Posgrado"}, headers=auth_headers(rh)).status_code == 403

    def test_mis_areas(self, client: TestClient, coord, area, area_prepa):
        r = client.get("/api/areas/mis-areas", headers=auth_headers(coord))
        assert [a["nombre"] for a in r.json()] == ["Licenciaturas"]

    def test_obtener_area(self, client: TestClient, coord, area):
        r = client.get(f"/api/areas/{area.id}", headers=auth_headers(coord))
        assert r.status_code == 200
        assert [c["correo"] for c in r.json()["coordinadores"]] == [coord.correo]
        assert client.get("/api/areas/9999", headers=auth_headers(coord)).status_code == 404

    def test_asignar_coordinador(self, client: TestClient, db: Session, rh, coord_otro, area_prepa):
        headers = auth_headers(rh)
        url = f"/api/areas/{area_prepa.id}/coordinadores"

        r = client.post(url, json={"usuario_id": coord_otro.id}, headers=headers)
        assert r.status_code == 201
        assert client.post(url, json={"usuario_id": coord_otro.id}, headers=headers).status_code == 409

        sin_rol = crear_usuario(db, "otro.rh@test.mx", Roles.RH)
        r = client.post(url, json={"usuario_id": sin_rol.id}, headers=headers)
        assert r.status_code == 400

        r = client.delete(f"{url}/{coord_otro.id}", headers=headers)
        assert r.status_code == 204
        assert client.get(url, headers=headers).json() == []

    def test_eliminar_area(self, client: TestClient, db: Session, admin, area, area_prepa):
        headers = auth_headers(admin)
        r = client.delete(f"/api/areas/{area.id}", headers=headers)
        assert r.json()["desactivado"] is True

        r = client.delete(f"/api/areas/{area_prepa.id}", headers=headers)
        assert r.json()["eliminado"] is True
        db.expire_all()
        assert db.get(Area, area_prepa.id) is None


class TestDocentes:
    """Catálogo de docentes e importación masiva."""

    def test_crear_docente_normaliza_codigo(self, client: TestClient, rh):
        r = client.post(
            "/api/docentes",
            json={"codigo_interno": "77", "nombre": " Carla Ruiz ", "rfc": "ruic900101ab3"},
            headers=auth_headers(rh),
        )
        assert r.status_code == 201
        assert r.json()["codigo_interno"] == "000077"
        assert r.json()["rfc"] == "RUIC900101AB3"
        assert r.json()["nombre"] == "Carla Ruiz"

    def test_crear_docente_duplicado_y_rfc_invalido(self, client: TestClient, rh, docentes):
        headers = auth_headers(rh)
        r = client.post(
            "/api/docentes", json={"codigo_interno": "123", "nombre": "Otra", "rfc": "OTRA800101AB1"}, headers=headers
        )
        assert r.status_code == 409
        assert r.json()["detail"]["campo"] == "codigo_interno"

        r = client.post(
            "/api/docentes", json={"codigo_interno": "900", "nombre": "Otra", "rfc": "12345678901"}, headers=headers
        )
        assert r.status_code == 400

    def test_listar_docentes_busqueda(self, client: TestClient, coord, docentes):
        r = client.get("/api/docentes", params={"query": "bruno"}, headers=auth_headers(coord))
        assert r.status_code == 200
        assert [d["codigo_interno"] for d in r.json()["data"]] == ["000456"]
        assert r.json()["pagination"]["total"] == 1

    def test_listar_docentes_por_area_requiere_asignacion(self, client: TestClient, coord, area, area_prepa, docentes):
        headers = auth_headers(coord)
        assert client.get("/api/docentes", params={"area_id": area.id}, headers=headers).status_code == 200
        assert client.get("/api/docentes", params={"area_id": area_prepa.id}, headers=headers).status_code == 403

    def test_eliminar_docente_sin_cargas(self, client: TestClient, db: Session, rh, docentes):
        r = client.delete(f"/api/docentes/{docentes[0].id}", headers=auth_headers(rh))
        assert r.json()["eliminado"] is True

    def test_plantilla_docentes(self, client: TestClient, rh):
        r = client.get("/api/docentes/plantilla", headers=auth_headers(rh))
        assert r.status_code == 200
        assert "plantilla_docentes.xlsx" in r.headers["content-disposition"]
        hoja = load_workbook(io.BytesIO(r.content)).active
        assert [c.value for c in hoja[1]] == ["codigo_interno", "nombre", "rfc", "activo"]

    def test_importar_docentes(self, client: TestClient, db: Session, rh, docentes):
        csv = (
            "Código,Nombre Completo,R.F.C.,Estatus\n"
            "123,ANA LÓPEZ ACTUALIZADA,LOPA800101AB1,1\n"
            "789,CARLA RUIZ,RUIC900101AB3,sí\n"
            "789,CARLA REPETIDA,RUIC900101AB4,1\n"
            "555,SIN RFC,,1\n"
            "556,RFC AJENO,DIAB750505XY2,1\n"
        )
        r = client.post(
            "/api/docentes/import",
            files={"archivo": ("docentes.csv", csv.encode("utf-8"), "text/csv")},
            headers=auth_headers(rh),
        )
        assert r.status_code == 200
        cuerpo = r.json()
        assert cuerpo["total"] == 5
        assert cuerpo["insertados"] == 1
        assert cuerpo["actualizados"] == 1
        assert [e["linea"] for e in cuerpo["errores"]] == [4, 5, 6]

        assert cuerpo["errores_archivo"].startswith("/uploads/errores-import-")
        reporte = Path(settings.uploads_dir) / cuerpo["errores_archivo"].rsplit("/", 1)[1]
        assert len(json.loads(reporte.read_text(encoding="utf-8"))) == 3

        db.expire_all()
        assert db.query(Docente).filter(Docente.codigo_interno == "000789").one().nombre == "CARLA RUIZ"
        assert db.query(Docente).filter(Docente.codigo_interno == "000123").one().nombre == "ANA LÓPEZ ACTUALIZADA"

    def test_importar_docentes_formato_no_soportado(self, client: TestClient, rh):
        r = client.post(
            "/api/docentes/import",
            files={"archivo": ("docentes.txt", b"hola", "text/plain")},
            headers=auth_headers(rh),
        )
        assert r.status_code == 400


class TestPeriodosApi:
    """Ciclo de vida de periodos vía API."""

    def test_flujo_de_periodo_por_api(self, client: TestClient, rh, coord):
        headers = auth_headers(rh)
        r = client.post(
            "/api/periodos",
            json={"nombre": "2026-A", "fecha_inicio": "2026-01-10", "fecha_fin": "2026-06-30"},
            headers=headers,
        )
        assert r.status_code == 201
        periodo_id = r.json()["id"]
        assert r.json()["estado"] == "BORRADOR"

        assert client.get("/api/periodos", headers=auth_headers(coord)).json() == []

        r = client.patch(f"/api/periodos/{periodo_id}/cerrar", headers=headers)
        assert r.status_code == 409
        assert r.json()["detail"]["code"] == "TRANSICION_INVALIDA"
        assert r.json()["detail"]["estado_actual"] == "BORRADOR"

        assert client.patch(f"/api/periodos/{periodo_id}/abrir", headers=headers).json()["estado"] == "ABIERTO"
        assert [p["id"] for p in client.get("/api/periodos", headers=auth_headers(coord)).json()] == [periodo_id]

        r = client.patch(f"/api/periodos/{periodo_id}", json={"nombre": "2026-A bis"}, headers=headers)
        assert r.status_code == 409

    def test_abrir_con_otro_abierto(self, client: TestClient, admin, periodo_abierto):
        headers = auth_headers(admin)
        r = client.post(
            "/api/periodos",
            json={"nombre": "2025-B", "fecha_inicio": "2025-08-01", "fecha_fin": "2025-12-15"},
            headers=headers,
        )
        r = client.patch(f"/api/periodos/{r.json()['id']}/abrir", headers=headers)
        assert r.status_code == 409
        assert r.json()["detail"]["periodo_abierto"] == {"id": periodo_abierto.id, "nombre": "2025-A"}

    def test_periodo_rango_invalido(self, client: TestClient, admin):
        r = client.post(
            "/api/periodos",
            json={"nombre": "X", "fecha_inicio": "2026-06-30", "fecha_fin": "2026-01-10"},
            headers=auth_headers(admin),
        )
        assert r.status_code == 400
        assert r.json()["detail"]["code"] == "RANGO_FECHAS_INVALIDO"

    def test_coordinador_no_crea_periodos(self, client: TestClient, coord):
        r = client.post(
            "/api/periodos",
            json={"nombre": "X", "fecha_inicio": "2026-01-10", "fecha_fin": "2026-06-30"},
            headers=auth_headers(coord),
        )
        assert r.status_code == 403
