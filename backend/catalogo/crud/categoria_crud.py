# backend/catalogo/crud/categoria_crud.py

"""
Operaciones CRUD para el modelo Categoria.

Este módulo implementa las operaciones de Create, Read, Update, Delete para categorías,
proporcionando una capa de abstracción entre los servicios y la base de datos.

Ninguna función de este módulo confirma la transacción: solo hacen flush. El
commit (o rollback) lo decide la capa de servicios, que es la que conoce el
alcance completo de la operación (por ejemplo, una desactivación en cascada).
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.db.models.categoria_model import Categoria
from catalogo.db.models.subcategoria_model import Subcategoria
from catalogo.db.models.producto_model import Producto
from catalogo.crud.locks import with_lock
from catalogo.schemas import categoria_schema

# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def get_categoria(db: AsyncSession, categoria_id: int, lock: Optional[str] = None) -> Optional[Categoria]:
    """
    Obtiene una categoría por su ID.

    Args:
        db: Sesión asíncrona de SQLAlchemy
        categoria_id: ID único de la categoría
        lock: locks.LOCK_SHARE (FOR SHARE) o locks.LOCK_UPDATE (FOR UPDATE) para bloquear
            la fila hasta el final de la transacción

    Returns:
        Objeto Categoria si existe, None si no se encuentra
    """
    query = with_lock(select(Categoria).filter(Categoria.id == categoria_id), lock)
    result = await db.execute(query)
    return result.scalars().first()

async def get_categoria_by_nombre(db: AsyncSession, nombre: str) -> Optional[Categoria]:
    """
    Obtiene una categoría por su nombre.

    Se usa para validar duplicados antes de crear o renombrar, ya que el
    nombre de una categoría es único en todo el catálogo.
    """
    result = await db.execute(select(Categoria).filter(Categoria.nombre == nombre))
    return result.scalars().first()

async def get_categorias(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 100,
    activo: Optional[bool] = None,
) -> List[Categoria]:
    """
    Obtiene una lista paginada de categorías, opcionalmente filtrada por estado.

    Args:
        db: Sesión asíncrona de SQLAlchemy
        skip: Número de registros a omitir (para paginación)
        limit: Número máximo de registros a devolver
        activo: Si se indica, solo devuelve categorías con ese estado

    Returns:
        Lista de objetos Categoria ordenada por ID
    """
    query = select(Categoria)
    if activo is not None:
        query = query.filter(Categoria.activo == activo)
    result = await db.execute(query.order_by(Categoria.id).offset(skip).limit(limit))
    return result.scalars().all()

async def count_subcategorias(db: AsyncSession, categoria_id: int) -> int:
    """Cuenta las subcategorías de una categoría."""
    result = await db.execute(
        select(func.count(Subcategoria.id)).filter(Subcategoria.categoria_id == categoria_id)
    )
    return result.scalar_one()

async def count_productos(db: AsyncSession, categoria_id: int, solo_activos: bool = False) -> int:
    """Cuenta los productos de una categoría (todas sus subcategorías incluidas)."""
    query = select(func.count(Producto.id)).filter(Producto.categoria_id == categoria_id)
    if solo_activos:
        query = query.filter(Producto.activo.is_(True))
    result = await db.execute(query)
    return result.scalar_one()

# ========================================
# OPERACIONES DE ESCRITURA (CREATE, UPDATE, DELETE)
# ========================================

async def create_categoria(db: AsyncSession, categoria: categoria_schema.CategoriaCreate) -> Categoria:
    """
    Crea una nueva categoría dentro de la transacción actual.

    Flujo recomendado (lo sigue categoria_service):
        1. Validar que no exista duplicado con get_categoria_by_nombre()
        2. Crear la categoría con esta función
        3. Confirmar la transacción en el servicio
    """
    db_categoria = Categoria(
        nombre=categoria.nombre,
        descripcion=categoria.descripcion,
        activo=categoria.activo,
    )
    db.add(db_categoria)
    await db.flush()
    return db_categoria

async def update_categoria(db: AsyncSession, db_categoria: Categoria, update_data: Dict[str, Any]) -> Categoria:
    """
    Aplica una actualización parcial a una categoría ya cargada.

    Solo se modifican las claves presentes en update_data (patrón exclude_unset).
    """
    for key, value in update_data.items():
        setattr(db_categoria, key, value)
    db.add(db_categoria)  # Marca el objeto como modificado
    await db.flush()
    return db_categoria

async def delete_categoria(db: AsyncSession, db_categoria: Categoria) -> Categoria:
    """
    Elimina una categoría.

    Efectos colaterales (manejados por las foreign keys con ON DELETE CASCADE):
        - Se eliminan sus subcategorías
        - Se eliminan sus productos
        - Se eliminan las líneas de carrito de esos productos
    """
    await db.delete(db_categoria)
    await db.flush()
    return db_categoria
