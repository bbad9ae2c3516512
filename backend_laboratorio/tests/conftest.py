import os
import tempfile

# Antes de importar la app: SQLite en memoria y carpeta temporal de uploads
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="lab-uploads-")
os.environ["ADMIN_CORREO"] = "admin@lab.edu.ec"
os.environ["ADMIN_PASSWORD"] = "Admin1234"

import pytest
from fastapi.testclient import TestClient

from app.auth import hash_password
from app.database import Base, SessionLocal, engine
from app.main import app
from app.models import Usuario

ADMIN_CORREO = "admin@lab.edu.ec"
ADMIN_PASSWORD = "Admin1234"


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c


def login(client, correo, password):
    return client.post("/api/auth/login", json={"correo": correo, "password": password})


@pytest.fixture
def admin_client(client):
    r = login(client, ADMIN_CORREO, ADMIN_PASSWORD)
    assert r.json() == {"ok": True, "rol": "ADMIN"}
    return client


@pytest.fixture
def make_user(db):
    def _make(correo, rol, password="secreto1", nombre="Usuario"):
        u = Usuario(nombre=nombre, correo=correo, password_hash=hash_password(password), rol=rol)
        db.add(u)
        db.commit()
        db.refresh(u)
        return u
    return _make


@pytest.fixture
def asistente_client(client, make_user):
    make_user("asistente@lab.edu.ec", "ASISTENTE")
    assert login(client, "asistente@lab.edu.ec", "secreto1").json()["ok"] is True
    return client


@pytest.fixture
def auditor_client(client, make_user):
    make_user("auditor@lab.edu.ec", "AUDITOR")
    assert login(client, "auditor@lab.edu.ec", "secreto1").json()["ok"] is True
    return client
