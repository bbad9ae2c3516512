import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

# ===== BASE DE DATOS =====
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_USER = os.getenv("DB_USER", "lab_user")
DB_PASS = os.getenv("DB_PASS", "lab_pass")
DB_NAME = os.getenv("DB_NAME", "laboratorio")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{DB_USER}:{DB_PASS}@{DB_HOST}/{DB_NAME}",
)

# ===== SESIONES =====
SESSION_COOKIE = os.getenv("SESSION_COOKIE", "sid")
SESSION_MAX_AGE = int(os.getenv("SESSION_MAX_AGE", str(60 * 60 * 8)))  # 8 horas

# ===== ARCHIVOS =====
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(BASE_DIR / "uploads")))
PUBLIC_DIR = Path(os.getenv("PUBLIC_DIR", str(BASE_DIR / "public")))

# ===== ADMIN INICIAL =====
ADMIN_NOMBRE = os.getenv("ADMIN_NOMBRE", "Administrador")
ADMIN_CORREO = os.getenv("ADMIN_CORREO", "admin@laboratorio.edu.ec")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "Admin1234")

# ===== SERVIDOR =====
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "3000"))

CORS_ORIGINS = [
    o.strip().rstrip("/")
    for o in os.getenv("CORS_ORIGINS", "*").split(",")
    if o.strip()
]
