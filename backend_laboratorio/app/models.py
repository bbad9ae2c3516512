from sqlalchemy import Column, Integer, String, DateTime, func
from .database import Base

# ===== ROLES =====
ADMIN = "ADMIN"
ASISTENTE = "ASISTENTE"
AUDITOR = "AUDITOR"
ROLES = (ADMIN, ASISTENTE, AUDITOR)

ESTADO_DEFAULT = "DISPONIBLE"


def normalizar_rol(rol) -> str:
    """Cualquier rol fuera de ROLES (incluido vacío) se degrada a ASISTENTE."""
    return rol if rol in ROLES else ASISTENTE


class Usuario(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(100), nullable=False)
    correo = Column(String(150), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    rol = Column(String(20), nullable=False, default=ASISTENTE)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Instrumento(Base):
    __tablename__ = "instrumentos"

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(150), nullable=False)
    categoria = Column(String(100), nullable=False)
    # texto libre, sin catálogo cerrado
    estado = Column(String(50), default=ESTADO_DEFAULT, server_default=ESTADO_DEFAULT)
    ubicacion = Column(String(150), default="", server_default="")
