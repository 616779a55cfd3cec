# backend/catalogo/services/stock_service.py
"""
Libro de stock: consulta, reducción e incremento del inventario de productos.

El stock nunca puede quedar negativo. La reducción no se hace como
"leer, comprobar, escribir" desde Python sino con un UPDATE condicional
(producto_crud.decrement_stock), de modo que la comprobación se repite bajo el
mismo bloqueo de fila que hace el descuento. El resultado de un has_stock()
previo es solo orientativo.
"""

import logging
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.core.exceptions import InsufficientStockError, InvalidQuantityError, ProductNotFoundError
from catalogo.crud import producto_crud
from catalogo.db.models.producto_model import Producto

logger = logging.getLogger(__name__)


class StockService:
    """
    Operaciones sobre Producto.stock.

    reduce_stock() e increase_stock() confirman su propia transacción. Para
    combinarlas con otras escrituras en una sola transacción se usan
    directamente las funciones de producto_crud.
    """

    async def has_stock(self, db: AsyncSession, producto_id: int, cantidad: int) -> bool:
        """
        Indica si hay al menos 'cantidad' unidades disponibles.

        Raises:
            ProductNotFoundError: si el producto no existe
        """
        producto = await producto_crud.get_producto(db, producto_id)
        if producto is None:
            raise ProductNotFoundError(producto_id)
        return producto.stock >= cantidad

    async def reduce_stock(self, db: AsyncSession, producto_id: int, cantidad: int) -> Producto:
        """
        Descuenta stock de forma atómica.

        Raises:
            InvalidQuantityError: si cantidad < 1
            ProductNotFoundError: si el producto no existe
            InsufficientStockError: si en el momento del descuento no hay bastante stock
        """
        if cantidad < 1:
            raise InvalidQuantityError(cantidad)

        try:
            descontado = await producto_crud.decrement_stock(db, producto_id, cantidad)
            if not descontado:
                producto = await producto_crud.get_producto(db, producto_id, refresh=True)
                if producto is None:
                    raise ProductNotFoundError(producto_id)
                raise InsufficientStockError(producto_id, cantidad, producto.stock)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        producto = await producto_crud.get_producto(db, producto_id, refresh=True)
        logger.info(f"Stock reducido: producto {producto_id} -{cantidad} (queda {producto.stock})")
        return producto

    async def increase_stock(self, db: AsyncSession, producto_id: int, cantidad: int) -> Producto:
        """
        Incrementa el stock sin límite superior (devoluciones, reposición).

        Raises:
            InvalidQuantityError: si cantidad < 1
            ProductNotFoundError: si el producto no existe
        """
        if cantidad < 1:
            raise InvalidQuantityError(cantidad)

        try:
            if not await producto_crud.increment_stock(db, producto_id, cantidad):
                raise ProductNotFoundError(producto_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        producto = await producto_crud.get_producto(db, producto_id, refresh=True)
        logger.info(f"Stock aumentado: producto {producto_id} +{cantidad} (queda {producto.stock})")
        return producto


# Instancia única del servicio para uso en endpoints y otros servicios
stock_service = StockService()
