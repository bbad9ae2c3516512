import logging
from typing import Optional

from passlib.context import CryptContext
from fastapi import Depends, Request

from .config import SESSION_COOKIE
from .errors import Forbidden, InvalidCredential, Unauthenticated
from .models import ADMIN, ASISTENTE
from .sessions import Sesion, SessionStore, get_session_store

logger = logging.getLogger(__name__)

# ===== HASHING =====
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # hash corrupto o no reconocido
        logger.exception("Error al validar contraseña")
        raise InvalidCredential("Error al validar contraseña")

# ===== SESIÓN =====
def session_token(request: Request) -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE)

def get_current_session(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> Sesion:
    token = session_token(request)
    sesion = store.obtener(token) if token else None
    if sesion is None:
        raise Unauthenticated()
    return sesion

# ===== ROLE GUARDS =====
def require_roles(*roles: str):
    """Dependencia que exige sesión y que su rol esté en ``roles``."""
    permitidos = frozenset(roles)

    def guard(sesion: Sesion = Depends(get_current_session)) -> Sesion:
        if sesion.rol not in permitidos:
            raise Forbidden()
        return sesion

    return guard

require_admin = require_roles(ADMIN)
require_editor = require_roles(ADMIN, ASISTENTE)
