# backend/catalogo/api/deps.py
"""
Módulo de dependencias para FastAPI.

Este archivo centraliza todas las dependencias que pueden ser inyectadas
en los endpoints de la API: sesión de base de datos, configuración,
almacenamiento de imágenes y el usuario autenticado a partir del token JWT.
"""

from typing import AsyncGenerator, Optional
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.core.config import Settings, settings
from catalogo.core.exceptions import AuthenticationError, PermissionDeniedError
from catalogo.core.security import extract_token_from_header, verify_token
from catalogo.crud import usuario_crud
from catalogo.db.database import AsyncSessionLocal
from catalogo.db.models.usuario_model import Usuario, ROL_ADMINISTRADOR
from catalogo.services.image_storage_service import ImageStorageService

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependencia de FastAPI para obtener una sesión de base de datos asíncrona.
    Se asegura de que la sesión se cierre siempre después de la petición.
    """
    async with AsyncSessionLocal() as session:
        yield session

def get_settings():
    """
    Dependencia de FastAPI para obtener el objeto de configuración.
    """
    return settings

def get_image_storage(app_settings: Settings = Depends(get_settings)) -> ImageStorageService:
    """Almacenamiento de imágenes configurado con UPLOAD_PATH y MAX_IMAGE_SIZE."""
    return ImageStorageService(app_settings)

async def get_current_usuario(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Usuario:
    """
    Resuelve el usuario autenticado a partir del header Authorization.

    Raises:
        AuthenticationError: token ausente, inválido o de un usuario inexistente o inactivo
    """
    token = extract_token_from_header(authorization)
    payload = verify_token(token)

    usuario_id = payload.get("id")
    if not isinstance(usuario_id, int):
        raise AuthenticationError("El token no identifica a ningún usuario")

    usuario = await usuario_crud.get_usuario(db, usuario_id)
    if usuario is None or not usuario.activo:
        raise AuthenticationError("Usuario no encontrado o inactivo")
    return usuario

async def require_admin(usuario: Usuario = Depends(get_current_usuario)) -> Usuario:
    """Solo los administradores pueden modificar el catálogo."""
    if usuario.rol != ROL_ADMINISTRADOR:
        raise PermissionDeniedError(ROL_ADMINISTRADOR)
    return usuario
