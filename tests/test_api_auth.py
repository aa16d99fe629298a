"""
Autenticación, /me y administración de usuarios.
"""
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.config import Roles
from app.core.security import create_access_token, decode_access_token
from app.models.auditoria import Auditoria
from app.models.usuario import Usuario
from tests.conftest import auth_headers, crear_usuario


class TestAutenticacion:
    """Login, /me y validación del token."""

    def test_health(self, client: TestClient):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    def test_login_exitoso(self, client: TestClient, db: Session, coord):
        r = client.post("/api/auth/login", json={"correo": "coord@test.mx", "password": "secreto123"})
        assert r.status_code == 200
        claims = decode_access_token(r.json()["token"])
        assert claims["sub"] == str(coord.id)
        assert claims["correo"] == "coord@test.mx"
        assert claims["roles"] == [Roles.COORD]

    def test_login_credenciales_incorrectas(self, client: TestClient, coord):
        r = client.post("/api/auth/login", json={"correo": "coord@test.mx", "password": "otra"})
        assert r.status_code == 401

    def test_login_usuario_inactivo(self, client: TestClient, db: Session):
        crear_usuario(db, "baja@test.mx", Roles.RH, activo=False)
        r = client.post("/api/auth/login", json={"correo": "baja@test.mx", "password": "secreto123"})
        assert r.status_code == 403

    def test_me(self, client: TestClient, rh):
        r = client.get("/api/me", headers=auth_headers(rh))
        assert r.status_code == 200
        assert r.json() == {"id": rh.id, "nombre": rh.nombre, "correo": "rh@test.mx", "roles": [Roles.RH]}

    def test_sin_token_o_token_invalido(self, client: TestClient, db: Session):
        assert client.get("/api/me").status_code == 401
        r = client.get("/api/me", headers={"Authorization": "Bearer no-es-un-jwt"})
        assert r.status_code == 401
        assert r.headers["WWW-Authenticate"] == "Bearer"

    def test_token_de_usuario_desactivado(self, client: TestClient, db: Session, rh):
        headers = auth_headers(rh)
        rh.activo = False
        db.commit()
        assert client.get("/api/me", headers=headers).status_code == 401

    def test_token_expirado(self, client: TestClient, rh):
        token = create_access_token(rh.id, rh.correo, rh.roles, expires_minutes=-1)
        assert client.get("/api/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


class TestUsuarios:
    """Administración de usuarios (solo ADMIN escribe)."""

    def test_crear_usuario_solo_admin(self, client: TestClient, admin, rh):
        payload = {"nombre": "Nueva Coord", "correo": "nueva@test.mx", "password": "secreto123", "roles": ["COORD"]}

        r = client.post("/api/usuarios", json=payload, headers=auth_headers(rh))
        assert r.status_code == 403
        assert r.json()["detail"]["code"] == "ACCESO_DENEGADO"

        r = client.post("/api/usuarios", json=payload, headers=auth_headers(admin))
        assert r.status_code == 201
        assert r.json()["roles"] == ["COORD"]

    def test_crear_usuario_validaciones(self, client: TestClient, admin):
        headers = auth_headers(admin)
        base = {"nombre": "Alguien", "correo": "alguien@test.mx", "password": "secreto123"}

        r = client.post("/api/usuarios", json={**base, "roles": ["SUPER"]}, headers=headers)
        assert r.status_code == 400
        assert r.json()["detail"]["roles"] == ["SUPER"]

        r = client.post("/api/usuarios", json={**base, "password": "123", "roles": ["RH"]}, headers=headers)
        assert r.status_code == 400

        r = client.post("/api/usuarios", json={**base, "correo": "admin@test.mx", "roles": ["RH"]}, headers=headers)
        assert r.status_code == 409

    def test_listar_usuarios_paginado(self, client: TestClient, admin, rh, coord):
        r = client.get("/api/usuarios", params={"page": 1, "pageSize": 2}, headers=auth_headers(rh))
        assert r.status_code == 200
        cuerpo = r.json()
        assert cuerpo["pagination"] == {"total": 3, "page": 1, "pageSize": 2, "totalPages": 2}
        assert len(cuerpo["data"]) == 2

        r = client.get("/api/usuarios", params={"query": "coord"}, headers=auth_headers(admin))
        assert [u["correo"] for u in r.json()["data"]] == ["coord@test.mx"]

    def test_coordinador_no_lista_usuarios(self, client: TestClient, coord):
        assert client.get("/api/usuarios", headers=auth_headers(coord)).status_code == 403

    def test_actualizar_roles_reemplaza(self, client: TestClient, db: Session, admin, coord):
        r = client.put(f"/api/usuarios/{coord.id}", json={"roles": ["RH", "COORD"]}, headers=auth_headers(admin))
        assert r.status_code == 200
        assert sorted(r.json()["roles"]) == ["COORD", "RH"]

    def test_unico_admin_no_pierde_rol(self, client: TestClient, admin):
        r = client.put(f"/api/usuarios/{admin.id}", json={"roles": ["RH"]}, headers=auth_headers(admin))
        assert r.status_code == 400

        r = client.delete(f"/api/usuarios/{admin.id}", headers=auth_headers(admin))
        assert r.status_code == 400

    def test_eliminar_usuario_con_referencias_lo_desactiva(self, client: TestClient, db: Session, admin, coord, area):
        r = client.delete(f"/api/usuarios/{coord.id}", headers=auth_headers(admin))
        assert r.status_code == 200
        assert r.json()["desactivado"] is True
        db.expire_all()
        assert db.get(Usuario, coord.id).activo is False

    def test_eliminar_usuario_sin_referencias(self, client: TestClient, db: Session, admin, rh):
        r = client.delete(f"/api/usuarios/{rh.id}", headers=auth_headers(admin))
        assert r.json()["eliminado"] is True
        assert db.get(Usuario, rh.id) is None
        assert db.query(Auditoria).filter(Auditoria.accion == "ELIMINAR", Auditoria.entidad == "Usuario").count() == 1

    def test_roles_listado(self, client: TestClient, admin):
        r = client.get("/api/usuarios/roles", headers=auth_headers(admin))
        assert sorted(x["nombre"] for x in r.json()) == ["ADMIN", "COORD", "RH"]
