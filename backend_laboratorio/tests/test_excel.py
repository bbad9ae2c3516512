import io
import os

import pandas as pd
import pytest

from app.database import Base, engine
from app.excel import fila_a_instrumento
from conftest import login

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _xlsx(filas):
    buf = io.BytesIO()
    pd.DataFrame(filas).to_excel(buf, index=False, sheet_name="Hoja1")
    return buf.getvalue()


def _subir(client, contenido, nombre="instrumentos.xlsx"):
    return client.post("/api/instrumentos/upload", files={"archivo": (nombre, contenido, XLSX)})


def _todos(client):
    return client.get("/api/instrumentos").json()["data"]


def test_importa_solo_filas_validas(asistente_client):
    contenido = _xlsx([
        {"Nombre": "Pipeta", "Categoria": "Vidrio"},
        {"nombre": "Balanza"},
    ])
    r = _subir(asistente_client, contenido)
    assert r.json() == {"ok": True}
    data = _todos(asistente_client)
    assert len(data) == 1
    assert data[0]["nombre"] == "Pipeta"
    assert data[0]["estado"] == "DISPONIBLE"
    assert data[0]["ubicacion"] == ""


def test_importa_columnas_minusculas_y_capitalizadas(admin_client):
    contenido = _xlsx([
        {"nombre": "Microscopio", "categoria": "Óptica", "Estado": "PRESTADO", "ubicacion": "Lab 3"},
        {"nombre": "Mechero", "categoria": "Calor", "Estado": None, "ubicacion": None},
    ])
    assert _subir(admin_client, contenido).json() == {"ok": True}
    por_nombre = {i["nombre"]: i for i in _todos(admin_client)}
    assert por_nombre["Microscopio"]["estado"] == "PRESTADO"
    assert por_nombre["Microscopio"]["ubicacion"] == "Lab 3"
    assert por_nombre["Mechero"]["estado"] == "DISPONIBLE"
    assert por_nombre["Mechero"]["ubicacion"] == ""


def test_importa_csv(admin_client):
    contenido = "nombre,categoria,estado\nTermómetro,Medición,\nGradilla,,\n".encode("utf-8")
    r = admin_client.post("/api/instrumentos/upload", files={"archivo": ("lista.csv", contenido, "text/csv")})
    assert r.json() == {"ok": True}
    data = _todos(admin_client)
    assert [i["nombre"] for i in data] == ["Termómetro"]
    assert data[0]["estado"] == "DISPONIBLE"


def test_archivo_no_legible(admin_client):
    r = _subir(admin_client, b"esto no es una hoja de calculo", nombre="roto.xlsx")
    assert r.status_code == 200
    assert r.json() == {"ok": False, "msg": "Error al procesar Excel"}
    assert _todos(admin_client) == []


def test_sin_archivo(admin_client):
    r = admin_client.post("/api/instrumentos/upload", data={"otro": "x"})
    assert r.json() == {"ok": False, "msg": "Error al procesar Excel"}


def test_upload_no_deja_archivos(admin_client):
    antes = set(os.listdir(os.environ["UPLOAD_DIR"]))
    _subir(admin_client, _xlsx([{"nombre": "A", "categoria": "B"}]))
    assert set(os.listdir(os.environ["UPLOAD_DIR"])) == antes


def test_auditor_no_puede_importar(auditor_client):
    r = _subir(auditor_client, _xlsx([{"nombre": "A", "categoria": "B"}]))
    assert r.status_code == 403
    assert _todos(auditor_client) == []


def test_exportar(admin_client, make_user):
    client = admin_client
    client.post("/api/instrumentos", json={"nombre": "Pipeta", "categoria": "Vidrio"})
    client.post("/api/instrumentos", json={"nombre": "Balanza", "categoria": "Medición", "ubicacion": "Lab 1"})
    make_user("auditor@lab.edu.ec", "AUDITOR")
    login(client, "auditor@lab.edu.ec", "secreto1")

    r = client.get("/api/instrumentos/download")
    assert r.status_code == 200
    assert r.headers["content-type"] == XLSX
    assert "instrumentos.xlsx" in r.headers["content-disposition"]

    df = pd.read_excel(io.BytesIO(r.content), sheet_name="instrumentos", dtype=str).fillna("")
    assert list(df.columns) == ["id", "nombre", "categoria", "estado", "ubicacion"]
    assert df["nombre"].tolist() == ["Pipeta", "Balanza"]
    assert df["estado"].tolist() == ["DISPONIBLE", "DISPONIBLE"]
    assert df["ubicacion"].tolist() == ["", "Lab 1"]


def test_exportar_vacio_tiene_encabezados(admin_client):
    r = admin_client.get("/api/instrumentos/download")
    df = pd.read_excel(io.BytesIO(r.content))
    assert list(df.columns) == ["id", "nombre", "categoria", "estado", "ubicacion"]
    assert len(df) == 0


@pytest.mark.parametrize("fila,esperado", [
    ({"nombre": "A", "categoria": "B"}, {"nombre": "A", "categoria": "B", "estado": "DISPONIBLE", "ubicacion": ""}),
    ({"Nombre": "A", "Categoria": "B", "Ubicacion": "L"}, {"nombre": "A", "categoria": "B", "estado": "DISPONIBLE", "ubicacion": "L"}),
    ({"nombre": None, "Nombre": "A", "categoria": "B"}, {"nombre": "A", "categoria": "B", "estado": "DISPONIBLE", "ubicacion": ""}),
    ({"NOMBRE": "A", "categoria": "B"}, None),
    ({"nombre": "A"}, None),
    ({"nombre": "", "categoria": "B"}, None),
])
def test_fila_a_instrumento(fila, esperado):
    assert fila_a_instrumento(fila) == esperado


def test_exportar_falla_al_escribir(admin_client, monkeypatch):
    def _falla(*args, **kwargs):
        raise OSError("disco lleno")

    monkeypatch.setattr(pd.DataFrame, "to_excel", _falla)
    r = admin_client.get("/api/instrumentos/download")
    assert r.status_code == 200
    assert r.json() == {"ok": False, "msg": "Error al generar Excel"}


def test_exportar_falla_al_leer(admin_client):
    Base.metadata.tables["instrumentos"].drop(bind=engine)
    r = admin_client.get("/api/instrumentos/download")
    assert r.status_code == 200
    assert r.json() == {"ok": False, "msg": "Error al generar Excel"}
