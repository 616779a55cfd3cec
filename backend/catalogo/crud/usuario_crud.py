# backend/catalogo/crud/usuario_crud.py
"""
Operaciones CRUD mínimas para usuarios.

El alta y el login pertenecen al subsistema de autenticación; aquí solo se
necesita resolver el usuario de un token y dar de alta usuarios semilla.
"""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.db.models.usuario_model import Usuario, ROL_CLIENTE

async def get_usuario(db: AsyncSession, usuario_id: int) -> Optional[Usuario]:
    result = await db.execute(select(Usuario).filter(Usuario.id == usuario_id))
    return result.scalars().first()

async def create_usuario(db: AsyncSession, nombre: str, email: str, rol: str = ROL_CLIENTE) -> Usuario:
    usuario = Usuario(nombre=nombre, email=email, rol=rol)
    db.add(usuario)
    await db.flush()
    return usuario
