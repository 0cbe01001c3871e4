"""
Router: AUTH

Login con email y contraseña → JWT (2 horas)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.auth import LoginRequest, LoginResponse
from app.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Iniciar sesión",
    description="""
    Devuelve `{user, token}`. Usar el token como `Authorization: Bearer <token>`.

    Errores:
    - 400: faltan email o contraseña
    - 401: "Usuario no encontrado" / "Contraseña incorrecta"
    """,
)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    return AuthService.login(db, body.email, body.password)
