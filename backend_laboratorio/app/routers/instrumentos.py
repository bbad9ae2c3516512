import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from starlette.background import BackgroundTask

from .. import crud
from ..auth import get_current_session, require_admin, require_editor
from ..config import UPLOAD_DIR
from ..database import get_db
from ..errors import ExportError, MissingFields, ParseError
from ..excel import XLSX_MEDIA_TYPE, exportar_instrumentos, importar_instrumentos
from ..schemas import InstrumentoIn, InstrumentoOut, InstrumentosResponse, Respuesta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/instrumentos", tags=["instrumentos"])


def _envelope(instrumentos):
    return {"ok": True, "data": [InstrumentoOut.model_validate(i) for i in instrumentos]}


def _borrar(ruta):
    ruta.unlink(missing_ok=True)


def _sufijo(nombre: str) -> str:
    sufijo = "." + nombre.rsplit(".", 1)[-1].lower() if "." in nombre else ""
    return sufijo if sufijo.isascii() and sufijo[1:].isalnum() else ""


# Ver todos (los tres roles)
@router.get("", response_model=InstrumentosResponse, response_model_exclude_unset=True,
            dependencies=[Depends(get_current_session)])
def list_instrumentos(db: Session = Depends(get_db)):
    return _envelope(crud.get_instrumentos(db))


@router.get("/buscar", response_model=InstrumentosResponse, response_model_exclude_unset=True,
            dependencies=[Depends(get_current_session)])
def buscar(q: str = "", db: Session = Depends(get_db)):
    return _envelope(crud.buscar_instrumentos(db, q))


@router.post("", response_model=Respuesta, response_model_exclude_unset=True,
             dependencies=[Depends(require_editor)])
def create_instrumento(payload: InstrumentoIn, db: Session = Depends(get_db)):
    if not payload.nombre or not payload.categoria:
        raise MissingFields()
    crud.create_instrumento(
        db,
        nombre=payload.nombre,
        categoria=payload.categoria,
        estado=payload.estado,
        ubicacion=payload.ubicacion,
    )
    return {"ok": True}


@router.put("/{instrumento_id}", response_model=Respuesta, response_model_exclude_unset=True,
            dependencies=[Depends(require_editor)])
def update_instrumento(instrumento_id: int, payload: InstrumentoIn, db: Session = Depends(get_db)):
    crud.update_instrumento(
        db,
        instrumento_id,
        nombre=payload.nombre,
        categoria=payload.categoria,
        estado=payload.estado,
        ubicacion=payload.ubicacion,
    )
    return {"ok": True}


@router.delete("/{instrumento_id}", response_model=Respuesta, response_model_exclude_unset=True,
               dependencies=[Depends(require_admin)])
def delete_instrumento(instrumento_id: int, db: Session = Depends(get_db)):
    crud.delete_instrumento(db, instrumento_id)
    return {"ok": True}


# ========= EXCEL =========

@router.post("/upload", response_model=Respuesta, response_model_exclude_unset=True,
             dependencies=[Depends(require_editor)])
def upload(archivo: Optional[UploadFile] = File(None), db: Session = Depends(get_db)):
    if archivo is None or not archivo.filename:
        raise ParseError()

    UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    ruta = UPLOAD_DIR / f"{uuid.uuid4().hex}{_sufijo(archivo.filename)}"
    try:
        with ruta.open("wb") as destino:
            destino.write(archivo.file.read())
        importar_instrumentos(db, ruta)
    except OSError:
        logger.exception("No se pudo guardar %s", archivo.filename)
        raise ParseError()
    finally:
        _borrar(ruta)
    return {"ok": True}


@router.get("/download", dependencies=[Depends(get_current_session)])
def download(db: Session = Depends(get_db)):
    try:
        UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        logger.exception("No se pudo crear %s", UPLOAD_DIR)
        raise ExportError()
    ruta = exportar_instrumentos(db, UPLOAD_DIR / f"instrumentos-{uuid.uuid4().hex}.xlsx")
    return FileResponse(
        ruta,
        media_type=XLSX_MEDIA_TYPE,
        filename="instrumentos.xlsx",
        background=BackgroundTask(_borrar, ruta),
    )