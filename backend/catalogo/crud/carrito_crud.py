# backend/catalogo/crud/carrito_crud.py
"""
Este archivo contiene las operaciones CRUD para las líneas de carrito.

Cada fila de 'carritos' es un par (usuario, producto) único con su cantidad
y el precio unitario congelado al añadirlo.
"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalogo.db.models.carrito_model import Carrito

async def get_item(db: AsyncSession, usuario_id: int, producto_id: int) -> Optional[Carrito]:
    """Obtiene la línea de carrito de un usuario para un producto."""
    result = await db.execute(
        select(Carrito).filter(
            Carrito.usuario_id == usuario_id,
            Carrito.producto_id == producto_id,
        )
    )
    return result.scalars().first()

async def get_items_by_usuario(db: AsyncSession, usuario_id: int) -> List[Carrito]:
    """Obtiene todas las líneas del carrito de un usuario con su producto precargado."""
    result = await db.execute(
        select(Carrito)
        .filter(Carrito.usuario_id == usuario_id)
        .options(selectinload(Carrito.producto))
        .order_by(Carrito.id)
    )
    return result.scalars().all()

async def create_item(
    db: AsyncSession, usuario_id: int, producto_id: int, cantidad: int, precio_unitario: Decimal
) -> Carrito:
    """Inserta una nueva línea. El índice único (usuario_id, producto_id) impide duplicados."""
    item = Carrito(
        usuario_id=usuario_id,
        producto_id=producto_id,
        cantidad=cantidad,
        precio_unitario=precio_unitario,
    )
    db.add(item)
    await db.flush()
    return item

async def update_cantidad(db: AsyncSession, item: Carrito, cantidad: int) -> Carrito:
    """Fija la cantidad de una línea existente; precio_unitario no se toca."""
    item.cantidad = cantidad
    db.add(item)
    await db.flush()
    return item

async def delete_item(db: AsyncSession, item: Carrito) -> None:
    await db.delete(item)
    await db.flush()

async def clear(db: AsyncSession, usuario_id: int) -> int:
    """
    Vacía el carrito de un usuario y devuelve cuántas líneas se borraron.
    """
    items = await get_items_by_usuario(db, usuario_id)
    for item in items:
        await db.delete(item)
    await db.flush()
    return len(items)
