# backend/catalogo/services/carrito_service.py
"""
Servicio de carrito de compras.

Cada usuario tiene como máximo una línea por producto. Añadir un producto que
ya está en el carrito suma la cantidad a la línea existente y conserva el
precio unitario con el que se añadió por primera vez.

El stock solo se comprueba aquí (has_stock); no se reserva. El descuento real
ocurre al comprar, con stock_service.reduce_stock.
"""

from decimal import Decimal
from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.core.exceptions import (
    DuplicateEntryError,
    InsufficientStockError,
    InvalidQuantityError,
    NotFoundError,
    ProductInactiveError,
    ProductNotFoundError,
)
from catalogo.crud import carrito_crud, producto_crud
from catalogo.db.models.carrito_model import Carrito
from catalogo.schemas import carrito_schema
from catalogo.services.stock_service import StockService, stock_service as default_stock_service

logger = logging.getLogger(__name__)


class CarritoService:
    """
    Capa de consistencia del carrito.

    Métodos principales:
    - add_to_cart: añade o acumula cantidad
    - update_quantity: fija la cantidad (0 elimina la línea)
    - remove_from_cart: elimina la línea
    - get_cart / clear_cart: consulta y vaciado completo
    """

    def __init__(self, stock: Optional[StockService] = None):
        self.stock = stock or default_stock_service

    async def add_to_cart(self, db: AsyncSession, usuario_id: int, producto_id: int, cantidad: int) -> Carrito:
        """
        Añade un producto al carrito del usuario.

        Raises:
            InvalidQuantityError: si cantidad < 1
            ProductNotFoundError: si el producto no existe
            ProductInactiveError: si el producto está inactivo (solo para líneas nuevas)
            InsufficientStockError: si el stock no cubre la cantidad resultante
            DuplicateEntryError: si otra petición insertó la misma línea a la vez
        """
        if cantidad < 1:
            raise InvalidQuantityError(cantidad)

        try:
            item = await carrito_crud.get_item(db, usuario_id, producto_id)
            if item is not None:
                nueva_cantidad = item.cantidad + cantidad
                await self._check_stock(db, producto_id, nueva_cantidad)
                item = await carrito_crud.update_cantidad(db, item, nueva_cantidad)
            else:
                producto = await producto_crud.get_producto(db, producto_id)
                if producto is None:
                    raise ProductNotFoundError(producto_id)
                if not producto.activo:
                    raise ProductInactiveError(producto_id)
                await self._check_stock(db, producto_id, cantidad)
                try:
                    item = await carrito_crud.create_item(
                        db, usuario_id, producto_id, cantidad, precio_unitario=producto.precio
                    )
                except IntegrityError:
                    raise DuplicateEntryError("linea de carrito", "producto_id", producto_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Carrito {usuario_id}: producto {producto_id} x{item.cantidad}")
        return item

    async def update_quantity(
        self, db: AsyncSession, usuario_id: int, producto_id: int, nueva_cantidad: int
    ) -> Optional[Carrito]:
        """
        Fija la cantidad de una línea del carrito.

        Returns:
            La línea actualizada, o None si nueva_cantidad es 0 y la línea se eliminó
        """
        if nueva_cantidad < 0:
            raise InvalidQuantityError(nueva_cantidad, rule="la cantidad no puede ser negativa")

        try:
            item = await self._get_item(db, usuario_id, producto_id)
            if nueva_cantidad == 0:
                await carrito_crud.delete_item(db, item)
                item = None
            else:
                await self._check_stock(db, producto_id, nueva_cantidad)
                item = await carrito_crud.update_cantidad(db, item, nueva_cantidad)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return item

    async def remove_from_cart(self, db: AsyncSession, usuario_id: int, producto_id: int) -> None:
        try:
            item = await self._get_item(db, usuario_id, producto_id)
            await carrito_crud.delete_item(db, item)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(f"Carrito {usuario_id}: producto {producto_id} eliminado")

    async def get_cart(self, db: AsyncSession, usuario_id: int) -> carrito_schema.Carrito:
        """Contenido del carrito con subtotales y total."""
        items = await carrito_crud.get_items_by_usuario(db, usuario_id)
        total = sum((item.subtotal for item in items), Decimal("0"))
        return carrito_schema.Carrito(
            items=[carrito_schema.CarritoItemResponse.model_validate(item) for item in items],
            total_items=sum(item.cantidad for item in items),
            total=total,
        )

    async def clear_cart(self, db: AsyncSession, usuario_id: int) -> int:
        """Vacía el carrito y devuelve cuántas líneas se eliminaron."""
        try:
            eliminadas = await carrito_crud.clear(db, usuario_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(f"Carrito {usuario_id} vaciado ({eliminadas} líneas)")
        return eliminadas

    # ========================================
    # MÉTODOS AUXILIARES PRIVADOS
    # ========================================

    async def _get_item(self, db: AsyncSession, usuario_id: int, producto_id: int) -> Carrito:
        item = await carrito_crud.get_item(db, usuario_id, producto_id)
        if item is None:
            raise NotFoundError(
                "linea de carrito", producto_id,
                message=f"El producto {producto_id} no está en el carrito",
            )
        return item

    async def _check_stock(self, db: AsyncSession, producto_id: int, cantidad: int) -> None:
        if not await self.stock.has_stock(db, producto_id, cantidad):
            producto = await producto_crud.get_producto(db, producto_id)
            raise InsufficientStockError(producto_id, cantidad, producto.stock)


carrito_service = CarritoService()
