import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from .. import crud
from ..auth import get_current_session, hash_password, require_admin, session_token, verify_password
from ..config import SESSION_COOKIE
from ..database import get_db
from ..errors import DuplicateEmail, InvalidCredential, MissingFields, NotFound
from ..models import normalizar_rol
from ..schemas import LoginResponse, Respuesta, SesionOut, SesionResponse, UserCreate, UserLogin
from ..sessions import Sesion, SessionStore, get_session_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse, response_model_exclude_unset=True)
def login(
    payload: UserLogin,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    user = crud.get_usuario_por_correo(db, payload.correo)
    if not user:
        raise NotFound()
    if not verify_password(payload.password, user.password_hash):
        raise InvalidCredential()

    anterior = session_token(request)
    if anterior:
        store.destruir(anterior)

    token = store.crear(Sesion(id=user.id, correo=user.correo, rol=user.rol))
    response.set_cookie(
        SESSION_COOKIE, token, max_age=store.max_age, httponly=True, samesite="lax"
    )
    logger.info("Login %s (%s)", user.correo, user.rol)
    return {"ok": True, "rol": user.rol}


@router.post("/logout", response_model=Respuesta, response_model_exclude_unset=True)
def logout(request: Request, response: Response, store: SessionStore = Depends(get_session_store)):
    token = session_token(request)
    if token:
        store.destruir(token)
    response.delete_cookie(SESSION_COOKIE)
    return {"ok": True}


@router.get("/me", response_model=SesionResponse, response_model_exclude_unset=True)
def me(sesion: Sesion = Depends(get_current_session)):
    return {"ok": True, "data": SesionOut(id=sesion.id, correo=sesion.correo, rol=sesion.rol)}


# REGISTER (solo ADMIN)
@router.post("/register", response_model=Respuesta, response_model_exclude_unset=True)
def register(
    payload: UserCreate,
    db: Session = Depends(get_db),
    admin: Sesion = Depends(require_admin),
):
    if not payload.nombre or not payload.correo or not payload.password:
        raise MissingFields()

    rol = normalizar_rol(payload.rol)

    if crud.get_usuario_por_correo(db, payload.correo):
        raise DuplicateEmail()

    crud.create_usuario(
        db,
        nombre=payload.nombre,
        correo=payload.correo,
        password_hash=hash_password(payload.password),
        rol=rol,
    )
    logger.info("Usuario %s (%s) registrado por %s", payload.correo, rol, admin.correo)
    return {"ok": True}
