# backend/catalogo/crud/producto_crud.py

"""
Operaciones CRUD para el modelo Producto.

Este módulo implementa las operaciones de Create, Read, Update, Delete para
productos, que son el corazón del catálogo, además de los movimientos de stock.

Funcionalidades principales:
- Filtrado por categoría, subcategoría, estado y rango de precio
- Consultas por nombre dentro de la categoría (validación de duplicados)
- Decremento de stock atómico y condicional (UPDATE ... WHERE stock >= n)
- Listado de imágenes afectadas antes de un borrado en cascada

Como en el resto de la capa CRUD, aquí no se hace commit.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.db.models.producto_model import Producto
from catalogo.db.models.subcategoria_model import Subcategoria
from catalogo.schemas import producto_schema

# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def get_producto(db: AsyncSession, producto_id: int, refresh: bool = False) -> Optional[Producto]:
    """
    Obtiene un producto por su ID.

    Con refresh=True se sobreescriben los atributos de la instancia que ya
    estuviera en la sesión (útil tras un UPDATE masivo de stock).
    """
    query = select(Producto).filter(Producto.id == producto_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalars().first()


async def get_producto_by_nombre_and_categoria(
    db: AsyncSession, nombre: str, categoria_id: int
) -> Optional[Producto]:
    """Obtiene un producto por nombre dentro de una categoría (nombre único por categoría)."""
    result = await db.execute(
        select(Producto).filter(
            Producto.nombre == nombre,
            Producto.categoria_id == categoria_id,
        )
    )
    return result.scalars().first()


async def get_productos(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 100,
    categoria_id: Optional[int] = None,
    subcategoria_id: Optional[int] = None,
    activo: Optional[bool] = None,
    min_precio: Optional[Decimal] = None,
    max_precio: Optional[Decimal] = None,
) -> List[Producto]:
    """
    Obtiene una lista filtrada y paginada de productos.
    """
    query = select(Producto)

    if categoria_id is not None:
        query = query.filter(Producto.categoria_id == categoria_id)
    if subcategoria_id is not None:
        query = query.filter(Producto.subcategoria_id == subcategoria_id)
    if activo is not None:
        query = query.filter(Producto.activo == activo)
    if min_precio is not None:
        query = query.filter(Producto.precio >= min_precio)
    if max_precio is not None:
        query = query.filter(Producto.precio <= max_precio)

    query = query.order_by(Producto.id).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


async def get_productos_activos_by_categoria(db: AsyncSession, categoria_id: int) -> List[Producto]:
    """
    Productos activos de una categoría.

    Incluye tanto los que apuntan directamente a la categoría como los que
    cuelgan de cualquiera de sus subcategorías.
    """
    subcategoria_ids = select(Subcategoria.id).filter(Subcategoria.categoria_id == categoria_id)
    result = await db.execute(
        select(Producto).filter(
            or_(
                Producto.categoria_id == categoria_id,
                Producto.subcategoria_id.in_(subcategoria_ids),
            ),
            Producto.activo.is_(True),
        )
    )
    return result.scalars().all()


async def get_productos_activos_by_subcategoria(db: AsyncSession, subcategoria_id: int) -> List[Producto]:
    """Productos activos de una subcategoría."""
    result = await db.execute(
        select(Producto).filter(
            Producto.subcategoria_id == subcategoria_id,
            Producto.activo.is_(True),
        )
    )
    return result.scalars().all()


async def get_imagenes(
    db: AsyncSession,
    categoria_id: Optional[int] = None,
    subcategoria_id: Optional[int] = None,
) -> List[str]:
    """
    Nombres de archivo de imagen de los productos de una categoría o subcategoría.

    Se consulta antes de un borrado en cascada, porque después las filas ya no existen.
    """
    query = select(Producto.imagen).filter(Producto.imagen.is_not(None))
    if categoria_id is not None:
        query = query.filter(Producto.categoria_id == categoria_id)
    if subcategoria_id is not None:
        query = query.filter(Producto.subcategoria_id == subcategoria_id)
    result = await db.execute(query)
    return [imagen for imagen in result.scalars().all()]


# ========================================
# OPERACIONES DE ESCRITURA (CREATE, UPDATE, DELETE)
# ========================================

async def create_producto(db: AsyncSession, producto_data: producto_schema.ProductoCreate) -> Producto:
    """Crea un nuevo producto. La jerarquía padre debe haberse validado antes."""
    db_producto = Producto(
        nombre=producto_data.nombre,
        descripcion=producto_data.descripcion,
        precio=producto_data.precio,
        stock=producto_data.stock,
        imagen=producto_data.imagen,
        subcategoria_id=producto_data.subcategoria_id,
        categoria_id=producto_data.categoria_id,
        activo=producto_data.activo,
    )
    db.add(db_producto)
    await db.flush()
    return db_producto


async def update_producto(db: AsyncSession, db_producto: Producto, update_data: Dict[str, Any]) -> Producto:
    """Aplica una actualización parcial a un producto ya cargado."""
    for key, value in update_data.items():
        setattr(db_producto, key, value)
    db.add(db_producto)
    await db.flush()
    return db_producto


async def delete_producto(db: AsyncSession, db_producto: Producto) -> Producto:
    """Elimina un producto; sus líneas de carrito caen por ON DELETE CASCADE."""
    await db.delete(db_producto)
    await db.flush()
    return db_producto


# ========================================
# MOVIMIENTOS DE STOCK
# ========================================

async def decrement_stock(db: AsyncSession, producto_id: int, cantidad: int) -> bool:
    """
    Resta cantidad al stock solo si alcanza, en una única sentencia.

    La comprobación y la escritura son el mismo UPDATE, así que dos ventas
    simultáneas de la última unidad no pueden tener éxito las dos: la segunda
    espera el bloqueo de fila y, al reevaluar el WHERE, no afecta ninguna fila.

    Returns:
        True si se descontó el stock, False si no había suficiente (o no existe el producto)
    """
    result = await db.execute(
        update(Producto)
        .where(Producto.id == producto_id, Producto.stock >= cantidad)
        .values(stock=Producto.stock - cantidad)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def increment_stock(db: AsyncSession, producto_id: int, cantidad: int) -> bool:
    """Suma cantidad al stock sin límite superior. Devuelve False si el producto no existe."""
    result = await db.execute(
        update(Producto)
        .where(Producto.id == producto_id)
        .values(stock=Producto.stock + cantidad)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
