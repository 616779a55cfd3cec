# backend/catalogo/core/security.py
"""
Generación y verificación de tokens JWT.

Los JWT permiten autenticar sin sesiones en el servidor. El payload lleva el
id, el email y el rol del usuario; la firma usa settings.JWT_SECRET.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

import jwt

from catalogo.core.config import settings
from catalogo.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def create_access_token(payload: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
    """
    Genera un token JWT firmado para un usuario.

    Args:
        payload: Datos que se incluirán en el token (id, email, rol)
        expires_minutes: Minutos de validez; por defecto settings.JWT_EXPIRES_MINUTES

    Returns:
        Token JWT codificado
    """
    minutes = expires_minutes if expires_minutes is not None else settings.JWT_EXPIRES_MINUTES
    to_encode = dict(payload)
    to_encode["exp"] = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Verifica un token JWT y devuelve su payload.

    Raises:
        AuthenticationError: si el token es inválido o ha expirado
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("El token ha expirado")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Token JWT rechazado: {e}")
        raise AuthenticationError("Token inválido")


def extract_token_from_header(authorization: Optional[str]) -> str:
    """Extrae el token de un header 'Authorization: Bearer <token>'."""
    if not authorization:
        raise AuthenticationError("No se proporcionó token de autenticación")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Formato de token inválido. Use: Bearer <token>")
    return parts[1]
