"""
AuthService - Login y alta de usuarios

Las contraseñas se guardan hasheadas (passlib). El contrato del login
({user, token} y los mensajes 401) no cambia.
"""

from typing import Any, Dict, Optional
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationException, ConflictException, ValidationException
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models import USER_ROLES, User
from app.services.id_generator import IDGenerator

logger = logging.getLogger(__name__)


class AuthService:

    @staticmethod
    def login(db: Session, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        """
        Validar credenciales y emitir JWT (2 h)

        Raises:
            ValidationException: faltan email o contraseña (400)
            AuthenticationException: usuario inexistente o contraseña incorrecta (401)
        """
        if not email or not password:
            raise ValidationException("Email y contraseña son requeridos")

        user = db.query(User).filter(User.email == email.strip()).first()
        if not user:
            logger.info(f"🔒 Login rechazado (usuario inexistente): {email}")
            raise AuthenticationException("Usuario no encontrado")
        if not verify_password(password, user.password_hash):
            logger.info(f"🔒 Login rechazado (contraseña): {email}")
            raise AuthenticationException("Contraseña incorrecta")

        token = create_access_token({"id": user.id, "email": user.email, "role": user.role})
        logger.info(f"🔓 Login: {user.email} ({user.role})")
        return {"user": user, "token": token}

    @staticmethod
    def create_user(
        db: Session,
        name: str,
        email: str,
        password: str,
        role: str = "SELLER",
        commission_percentage: Optional[float] = None,
    ) -> User:
        if role not in USER_ROLES:
            raise ValidationException("Rol inválido", details={"role": role})
        if db.query(User.id).filter(User.email == email).first():
            raise ConflictException("El email ya está registrado", details={"email": email})

        user = User(
            id=IDGenerator.generate_user_id(),
            name=name,
            email=email,
            role=role,
            commission_percentage=commission_percentage,
            password_hash=get_password_hash(password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"✅ Usuario creado: {email} ({role})")
        return user
