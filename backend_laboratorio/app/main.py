import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import hash_password, session_token
from .config import ADMIN_CORREO, ADMIN_NOMBRE, ADMIN_PASSWORD, CORS_ORIGINS, PUBLIC_DIR
from .database import Base, SessionLocal, check_connection, engine
from .errors import Unauthenticated
from .models import ADMIN, Usuario
from .routers import auth, instrumentos, usuarios
from .sessions import SessionStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Rutas /api/ que no exigen sesión
RUTAS_PUBLICAS = {"/api/auth/login", "/api/auth/logout", "/api/health"}


# ===== SEED ADMIN (solo si no existe) =====
def seed_admin(db: Session):
    exists = db.query(Usuario).filter(Usuario.correo == ADMIN_CORREO).first()
    if exists:
        logger.info("Admin already exists")
        return

    admin = Usuario(
        nombre=ADMIN_NOMBRE,
        correo=ADMIN_CORREO,
        password_hash=hash_password(ADMIN_PASSWORD),
        rol=ADMIN,
    )
    db.add(admin)
    db.commit()
    logger.info("Admin %s seeded successfully", ADMIN_CORREO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.session_store = SessionStore()
    try:
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            seed_admin(db)
        finally:
            db.close()
    except SQLAlchemyError:
        # la API arranca igual; cada petición reportará el fallo de la base
        logger.exception("Error in startup")
    yield
    logger.info("Lifespan shutdown")


app = FastAPI(title="Inventario de Laboratorio", version="1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===== ENVELOPE DE ERRORES =====
def _requiere_sesion(path: str) -> bool:
    return path.startswith("/api/") and path.rstrip("/") not in RUTAS_PUBLICAS


def _tiene_sesion(request: Request) -> bool:
    token = session_token(request)
    return bool(token) and request.app.state.session_store.obtener(token) is not None


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "msg": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    # FastAPI valida el body antes de las dependencias: sin sesión manda el 401
    if _requiere_sesion(request.url.path) and not _tiene_sesion(request):
        return await http_error(request, Unauthenticated())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "msg": "Datos inválidos"},
    )


@app.get("/", include_in_schema=False)
def root():
    index = PUBLIC_DIR / "index.html"
    if index.is_file():
        return FileResponse(index)
    return {"ok": True, "message": "API Inventario de Laboratorio OK"}


@app.get("/api/health")
def health():
    return {"ok": check_connection()}


app.include_router(auth.router)
app.include_router(usuarios.router)
app.include_router(instrumentos.router)
