# backend/catalogo/crud/subcategoria_crud.py

"""
Operaciones CRUD para el modelo Subcategoria.

Como en el resto de la capa CRUD, aquí no se hace commit.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.db.models.subcategoria_model import Subcategoria
from catalogo.db.models.producto_model import Producto
from catalogo.crud.locks import with_lock
from catalogo.schemas import subcategoria_schema

# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def get_subcategoria(
    db: AsyncSession, subcategoria_id: int, lock: Optional[str] = None
) -> Optional[Subcategoria]:
    """Obtiene una subcategoría por su ID, opcionalmente bloqueando la fila (ver with_lock)."""
    query = with_lock(select(Subcategoria).filter(Subcategoria.id == subcategoria_id), lock)
    result = await db.execute(query)
    return result.scalars().first()


async def get_subcategoria_by_nombre_and_categoria(
    db: AsyncSession, nombre: str, categoria_id: int
) -> Optional[Subcategoria]:
    """
    Obtiene una subcategoría por su nombre dentro de una categoría.

    El nombre solo es único por categoría: dos categorías distintas pueden
    tener una subcategoría "Bebidas".
    """
    result = await db.execute(
        select(Subcategoria).filter(
            Subcategoria.nombre == nombre,
            Subcategoria.categoria_id == categoria_id,
        )
    )
    return result.scalars().first()


async def get_subcategorias(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 100,
    categoria_id: Optional[int] = None,
    activo: Optional[bool] = None,
) -> List[Subcategoria]:
    """Obtiene una lista paginada de subcategorías con filtros opcionales."""
    query = select(Subcategoria)
    if categoria_id is not None:
        query = query.filter(Subcategoria.categoria_id == categoria_id)
    if activo is not None:
        query = query.filter(Subcategoria.activo == activo)
    result = await db.execute(query.order_by(Subcategoria.id).offset(skip).limit(limit))
    return result.scalars().all()


async def get_subcategorias_activas_by_categoria(db: AsyncSession, categoria_id: int) -> List[Subcategoria]:
    """Subcategorías activas de una categoría; son las que cambian en una cascada."""
    result = await db.execute(
        select(Subcategoria).filter(
            Subcategoria.categoria_id == categoria_id,
            Subcategoria.activo.is_(True),
        )
    )
    return result.scalars().all()


async def count_productos(db: AsyncSession, subcategoria_id: int, solo_activos: bool = False) -> int:
    """Cuenta los productos de una subcategoría."""
    query = select(func.count(Producto.id)).filter(Producto.subcategoria_id == subcategoria_id)
    if solo_activos:
        query = query.filter(Producto.activo.is_(True))
    result = await db.execute(query)
    return result.scalar_one()


# ========================================
# OPERACIONES DE ESCRITURA (CREATE, UPDATE, DELETE)
# ========================================

async def create_subcategoria(db: AsyncSession, subcategoria: subcategoria_schema.SubcategoriaCreate) -> Subcategoria:
    """Crea una subcategoría. La categoría padre debe haberse validado antes."""
    db_subcategoria = Subcategoria(
        nombre=subcategoria.nombre,
        descripcion=subcategoria.descripcion,
        categoria_id=subcategoria.categoria_id,
        activo=subcategoria.activo,
    )
    db.add(db_subcategoria)
    await db.flush()
    return db_subcategoria


async def update_subcategoria(
    db: AsyncSession, db_subcategoria: Subcategoria, update_data: Dict[str, Any]
) -> Subcategoria:
    """Aplica una actualización parcial a una subcategoría ya cargada."""
    for key, value in update_data.items():
        setattr(db_subcategoria, key, value)
    db.add(db_subcategoria)
    await db.flush()
    return db_subcategoria


async def delete_subcategoria(db: AsyncSession, db_subcategoria: Subcategoria) -> Subcategoria:
    """Elimina una subcategoría; sus productos caen por ON DELETE CASCADE."""
    await db.delete(db_subcategoria)
    await db.flush()
    return db_subcategoria
