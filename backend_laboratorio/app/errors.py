from typing import Optional

from fastapi import HTTPException, status


class ApiError(HTTPException):
    """Error que se responde como {"ok": false, "msg": ...}.

    Solo autenticación, autorización y datos faltantes cambian el código
    HTTP; el resto de fallos de negocio se responden con 200 y el cliente
    debe mirar "ok".
    """

    status_code = status.HTTP_200_OK
    msg = "Error en servidor"

    def __init__(self, msg: Optional[str] = None):
        super().__init__(status_code=type(self).status_code, detail=msg or self.msg)


class Unauthenticated(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    msg = "No has iniciado sesión"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    msg = "No autorizado"


class MissingFields(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    msg = "Faltan datos"


class NotFound(ApiError):
    msg = "Correo no encontrado"


class DuplicateEmail(ApiError):
    msg = "Ese correo ya existe"


class InvalidCredential(ApiError):
    msg = "Contraseña incorrecta"


class ParseError(ApiError):
    msg = "Error al procesar Excel"


class ExportError(ApiError):
    msg = "Error al generar Excel"


class StoreError(ApiError):
    pass
