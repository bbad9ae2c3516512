import secrets
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from fastapi import Request

from .config import SESSION_MAX_AGE


@dataclass(frozen=True)
class Sesion:
    """Proyección reducida del usuario que se guarda en el servidor."""
    id: int
    correo: str
    rol: str


class SessionStore:
    """Sesiones en memoria del proceso, indexadas por un token opaco.

    Se pierden al reiniciar. Las entradas con más de ``max_age`` segundos
    se descartan al leerlas y en cada login.
    """

    def __init__(self, max_age: int = SESSION_MAX_AGE):
        self.max_age = max_age
        self._sesiones: Dict[str, Tuple[Sesion, float]] = {}
        self._lock = threading.Lock()

    def crear(self, sesion: Sesion) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._purgar()
            self._sesiones[token] = (sesion, time.monotonic())
        return token

    def obtener(self, token: str) -> Optional[Sesion]:
        with self._lock:
            entrada = self._sesiones.get(token)
            if entrada is None:
                return None
            sesion, creada = entrada
            if time.monotonic() - creada > self.max_age:
                del self._sesiones[token]
                return None
            return sesion

    def destruir(self, token: str) -> None:
        with self._lock:
            self._sesiones.pop(token, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sesiones)

    def _purgar(self) -> None:
        # llamar con el lock tomado
        limite = time.monotonic() - self.max_age
        vencidos = [t for t, (_, creada) in self._sesiones.items() if creada < limite]
        for token in vencidos:
            del self._sesiones[token]


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store
