import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StoreError
from .models import Instrumento, Usuario

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(db: Session, msg: str):
    """Convierte fallos de la base en StoreError(msg) tras hacer rollback."""
    try:
        yield
    except SQLAlchemyError:
        db.rollback()
        logger.exception(msg)
        raise StoreError(msg)


# ========= USUARIOS =========

def get_usuario_por_correo(db: Session, correo: str) -> Optional[Usuario]:
    with store_errors(db, "Error en servidor"):
        return db.query(Usuario).filter(Usuario.correo == correo).first()


def get_usuarios(db: Session) -> List[Usuario]:
    with store_errors(db, "Error al obtener usuarios"):
        return db.query(Usuario).order_by(Usuario.id).all()


def create_usuario(db: Session, nombre: str, correo: str, password_hash: str, rol: str) -> Usuario:
    u = Usuario(nombre=nombre, correo=correo, password_hash=password_hash, rol=rol)
    with store_errors(db, "Error al guardar usuario"):
        db.add(u)
        db.commit()
        db.refresh(u)
    return u


def update_usuario(db: Session, user_id: int, **campos) -> None:
    # sin comprobar existencia: un id inexistente no actualiza nada
    with store_errors(db, "Error al actualizar"):
        db.query(Usuario).filter(Usuario.id == user_id).update(campos, synchronize_session=False)
        db.commit()


def delete_usuario(db: Session, user_id: int) -> None:
    with store_errors(db, "Error al eliminar usuario"):
        db.query(Usuario).filter(Usuario.id == user_id).delete(synchronize_session=False)
        db.commit()


# ========= INSTRUMENTOS =========

def get_instrumentos(db: Session) -> List[Instrumento]:
    with store_errors(db, "Error al obtener instrumentos"):
        return db.query(Instrumento).all()


def buscar_instrumentos(db: Session, q: str = "") -> List[Instrumento]:
    patron = f"%{q}%"
    with store_errors(db, "Error en búsqueda"):
        return db.query(Instrumento).filter(
            or_(
                Instrumento.nombre.like(patron),
                Instrumento.categoria.like(patron),
                Instrumento.estado.like(patron),
                Instrumento.ubicacion.like(patron),
            )
        ).all()


def create_instrumento(db: Session, **campos) -> Instrumento:
    """Inserta solo los campos recibidos; el resto toma el default de la columna."""
    i = Instrumento(**{k: v for k, v in campos.items() if v is not None})
    with store_errors(db, "Error al crear instrumento"):
        db.add(i)
        db.commit()
        db.refresh(i)
    return i


def update_instrumento(db: Session, instrumento_id: int, nombre, categoria, estado, ubicacion) -> None:
    with store_errors(db, "Error al actualizar"):
        db.query(Instrumento).filter(Instrumento.id == instrumento_id).update(
            {
                Instrumento.nombre: nombre,
                Instrumento.categoria: categoria,
                Instrumento.estado: estado,
                Instrumento.ubicacion: ubicacion,
            },
            synchronize_session=False,
        )
        db.commit()


def delete_instrumento(db: Session, instrumento_id: int) -> None:
    with store_errors(db, "Error al eliminar instrumento"):
        db.query(Instrumento).filter(Instrumento.id == instrumento_id).delete(synchronize_session=False)
        db.commit()
