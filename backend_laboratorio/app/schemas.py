from typing import List, Optional

from pydantic import BaseModel
from pydantic.config import ConfigDict

# ===== AUTH INPUTS =====
# Campos opcionales: la ausencia se reporta como "Faltan datos" (400), no 422.
class UserCreate(BaseModel):
    nombre: Optional[str] = None
    correo: Optional[str] = None
    password: Optional[str] = None
    rol: Optional[str] = None

class UserLogin(BaseModel):
    correo: Optional[str] = None
    password: Optional[str] = None

# ===== ADMIN INPUT =====
class UserUpdate(BaseModel):
    nombre: Optional[str] = None
    correo: Optional[str] = None
    rol: Optional[str] = None
    password: Optional[str] = None  # vacío = no cambiar

# ===== INSTRUMENTOS INPUT =====
class InstrumentoIn(BaseModel):
    nombre: Optional[str] = None
    categoria: Optional[str] = None
    estado: Optional[str] = None
    ubicacion: Optional[str] = None

# ===== OUTPUTS =====
class UserOut(BaseModel):
    id: int
    nombre: str
    correo: str
    rol: str

    model_config = ConfigDict(from_attributes=True)

class InstrumentoOut(BaseModel):
    id: int
    nombre: str
    categoria: str
    estado: Optional[str] = None
    ubicacion: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class SesionOut(BaseModel):
    id: int
    correo: str
    rol: str

# ===== ENVELOPES =====
class Respuesta(BaseModel):
    ok: bool
    msg: Optional[str] = None

class LoginResponse(Respuesta):
    rol: Optional[str] = None

class UsuariosResponse(Respuesta):
    data: List[UserOut] = []

class InstrumentosResponse(Respuesta):
    data: List[InstrumentoOut] = []

class SesionResponse(Respuesta):
    data: Optional[SesionOut] = None
