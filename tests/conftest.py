"""
Fixtures compartidas: base SQLite en memoria, cliente HTTP y usuarios por rol.
"""
import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas")
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="rh-uploads-"))
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Roles
from app.core.security import create_access_token, hash_password
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.area import Area, CoordArea
from app.models.docente import Docente
from app.models.periodo import EstadoPeriodo, Periodo
from app.models.usuario import Role, Usuario, UsuarioRole

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Sesión sobre un esquema recién creado para cada prueba."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    for nombre in Roles.TODOS:
        session.add(Role(nombre=nombre))
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def crear_usuario(db: Session, correo: str, *roles: str, password: str = "secreto123", activo: bool = True) -> Usuario:
    usuario = Usuario(
        nombre=correo.split("@")[0].title(),
        correo=correo,
        password_hash=hash_password(password),
        activo=activo,
    )
    for nombre in roles:
        role = db.query(Role).filter(Role.nombre == nombre).one()
        usuario.usuario_roles.append(UsuarioRole(role=role))
    db.add(usuario)
    db.commit()
    db.refresh(usuario)
    return usuario


def auth_headers(usuario: Usuario) -> dict:
    token = create_access_token(usuario.id, usuario.correo, usuario.roles)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(db: Session) -> Usuario:
    return crear_usuario(db, "admin@test.mx", Roles.ADMIN)


@pytest.fixture
def rh(db: Session) -> Usuario:
    return crear_usuario(db, "rh@test.mx", Roles.RH)


@pytest.fixture
def coord(db: Session) -> Usuario:
    return crear_usuario(db, "coord@test.mx", Roles.COORD)


@pytest.fixture
def coord_otro(db: Session) -> Usuario:
    return crear_usuario(db, "coord2@test.mx", Roles.COORD)


@pytest.fixture
def area(db: Session, coord: Usuario) -> Area:
    """Área 'Licenciaturas' con ``coord`` asignado."""
    area = Area(nombre="Licenciaturas", activo=True)
    db.add(area)
    db.flush()
    db.add(CoordArea(usuario_id=coord.id, area_id=area.id))
    db.commit()
    db.refresh(area)
    return area


@pytest.fixture
def area_prepa(db: Session) -> Area:
    area = Area(nombre="Preparatoria", activo=True)
    db.add(area)
    db.commit()
    db.refresh(area)
    return area


@pytest.fixture
def periodo_abierto(db: Session) -> Periodo:
    periodo = Periodo(
        nombre="2025-A",
        fecha_inicio=date(2025, 1, 15),
        fecha_fin=date(2025, 6, 30),
        estado=EstadoPeriodo.ABIERTO,
    )
    db.add(periodo)
    db.commit()
    db.refresh(periodo)
    return periodo


@pytest.fixture
def docentes(db: Session):
    lista = [
        Docente(codigo_interno="000123", nombre="ANA LÓPEZ", rfc="LOPA800101AB1", activo=True),
        Docente(codigo_interno="000456", nombre="BRUNO DÍAZ", rfc="DIAB750505XY2", activo=True),
    ]
    db.add_all(lista)
    db.commit()
    for d in lista:
        db.refresh(d)
    return lista
