"""Importación y exportación de instrumentos en hojas de cálculo.

La importación es tolerante: acepta columnas en minúscula o capitalizadas
(``nombre`` / ``Nombre``), ignora en silencio las filas sin nombre o
categoría y no reporta fallos de inserción por fila.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ExportError, ParseError
from .models import ESTADO_DEFAULT, Instrumento

logger = logging.getLogger(__name__)

COLUMNAS = ["id", "nombre", "categoria", "estado", "ubicacion"]
HOJA = "instrumentos"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def leer_filas(ruta: Path) -> List[Dict[str, Any]]:
    """Lee la primera hoja (o el CSV) como lista de filas; celdas vacías -> None."""
    try:
        if ruta.suffix.lower() == ".csv":
            df = pd.read_csv(ruta, dtype=str, keep_default_na=False)
        else:
            df = pd.read_excel(ruta, sheet_name=0, dtype=str)
    except Exception:
        logger.exception("No se pudo leer la hoja %s", ruta.name)
        raise ParseError()

    df.columns = [str(c).strip() for c in df.columns]
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def _campo(fila: Dict[str, Any], clave: str) -> Any:
    return fila.get(clave) or fila.get(clave.capitalize())


def fila_a_instrumento(fila: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    nombre = _campo(fila, "nombre")
    categoria = _campo(fila, "categoria")
    if not nombre or not categoria:
        return None
    return {
        "nombre": nombre,
        "categoria": categoria,
        "estado": _campo(fila, "estado") or ESTADO_DEFAULT,
        "ubicacion": _campo(fila, "ubicacion") or "",
    }


def importar_instrumentos(db: Session, ruta: Path) -> int:
    """Inserta cada fila válida por separado. Devuelve cuántas se insertaron."""
    filas = leer_filas(ruta)
    insertados = 0
    for n, fila in enumerate(filas, start=1):
        datos = fila_a_instrumento(fila)
        if datos is None:
            continue
        try:
            db.add(Instrumento(**datos))
            db.commit()
            insertados += 1
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Fila %d no insertada", n)
    logger.info("Importación %s: %d de %d filas insertadas", ruta.name, insertados, len(filas))
    return insertados


def exportar_instrumentos(db: Session, ruta: Path) -> Path:
    try:
        instrumentos = db.query(Instrumento).order_by(Instrumento.id).all()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error al leer instrumentos para exportar")
        raise ExportError()

    df = pd.DataFrame(
        [{c: getattr(i, c) for c in COLUMNAS} for i in instrumentos],
        columns=COLUMNAS,
    )
    try:
        ruta.parent.mkdir(parents=True, exist_ok=True)
        df.to_excel(ruta, sheet_name=HOJA, index=False)
    except (OSError, ValueError):
        logger.exception("Error al escribir %s", ruta)
        raise ExportError()
    return ruta
