from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud
from ..auth import hash_password, require_admin
from ..database import get_db
from ..models import normalizar_rol
from ..schemas import Respuesta, UserOut, UserUpdate, UsuariosResponse

# Todo el router es solo ADMIN
router = APIRouter(prefix="/api/usuarios", tags=["usuarios"], dependencies=[Depends(require_admin)])


@router.get("", response_model=UsuariosResponse, response_model_exclude_unset=True)
def list_users(db: Session = Depends(get_db)):
    usuarios = crud.get_usuarios(db)
    return {"ok": True, "data": [UserOut.model_validate(u) for u in usuarios]}


@router.put("/{user_id}", response_model=Respuesta, response_model_exclude_unset=True)
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)):
    """
    Actualiza nombre, correo y rol. La contraseña solo se cambia si viene
    con contenido.
    """
    campos = {
        "nombre": payload.nombre,
        "correo": payload.correo,
        "rol": normalizar_rol(payload.rol),
    }
    if payload.password and payload.password.strip():
        campos["password_hash"] = hash_password(payload.password)

    crud.update_usuario(db, user_id, **campos)
    return {"ok": True}


@router.delete("/{user_id}", response_model=Respuesta, response_model_exclude_unset=True)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    crud.delete_usuario(db, user_id)
    return {"ok": True}
