# app/core/security.py
"""Verificación de los tokens de acceso y contexto explícito del usuario.

El token es un JWT HS256 emitido por el proveedor de autenticación; el
claim `sub` es el id del usuario. El contexto resultante se pasa de forma
explícita a cada servicio que necesita identidad.
"""
import logging
from typing import Optional

import jwt
from fastapi import Header
from pydantic import BaseModel

from app.core.config import settings
from app.core.exceptions import FunctionError

logger = logging.getLogger(__name__)


class UserContext(BaseModel):
    """Identidad verificada del usuario que realiza la operación."""
    id: str
    email: Optional[str] = None
    access_token: str


def verify_access_token(token: str) -> UserContext:
    """Decodifica y valida el token. Lanza FunctionError(401) si no es válido."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=["HS256"],
            audience=settings.JWT_AUDIENCE,
            options={"require": ["sub", "exp"]},
        )
    except jwt.InvalidTokenError as e:
        logger.warning(f"Token inválido: {e}")
        raise FunctionError(401, "Invalid token", e) from e

    return UserContext(id=payload["sub"], email=payload.get("email"), access_token=token)


def get_current_user(authorization: Optional[str] = Header(None)) -> UserContext:
    """Dependency de FastAPI: extrae el Bearer token de la cabecera Authorization."""
    if not authorization:
        raise FunctionError(401, "No authorization header")
    token = authorization.replace("Bearer ", "", 1).strip()
    return verify_access_token(token)
