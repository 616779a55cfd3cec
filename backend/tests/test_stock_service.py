"""
Tests del libro de stock.
"""

import asyncio

import pytest
from sqlalchemy import select

from catalogo.core.exceptions import InsufficientStockError, InvalidQuantityError, ProductNotFoundError
from catalogo.db.models.producto_model import Producto
from catalogo.services.stock_service import StockService


@pytest.fixture
def stock_service():
    return StockService()


async def _crear_producto(factory, stock):
    categoria = await factory.categoria()
    subcategoria = await factory.subcategoria(categoria)
    return await factory.producto(subcategoria, stock=stock)


async def _stock(db, producto_id):
    return await db.scalar(select(Producto.stock).where(Producto.id == producto_id))


class TestHasStock:

    @pytest.mark.asyncio
    async def test_consulta(self, db, factory, stock_service):
        producto = await _crear_producto(factory, stock=3)

        assert await stock_service.has_stock(db, producto.id, 3) is True
        assert await stock_service.has_stock(db, producto.id, 4) is False

    @pytest.mark.asyncio
    async def test_producto_inexistente(self, db, stock_service):
        with pytest.raises(ProductNotFoundError):
            await stock_service.has_stock(db, 999, 1)


class TestReduceStock:

    @pytest.mark.asyncio
    async def test_descuenta(self, db, factory, stock_service):
        producto = await _crear_producto(factory, stock=5)

        producto = await stock_service.reduce_stock(db, producto.id, 2)

        assert producto.stock == 3

    @pytest.mark.asyncio
    async def test_hasta_cero(self, db, factory, stock_service):
        producto = await _crear_producto(factory, stock=2)

        producto = await stock_service.reduce_stock(db, producto.id, 2)

        assert producto.stock == 0

    @pytest.mark.asyncio
    async def test_insuficiente_no_modifica(self, db, factory, stock_service):
        producto_id = (await _crear_producto(factory, stock=2)).id

        with pytest.raises(InsufficientStockError) as exc_info:
            await stock_service.reduce_stock(db, producto_id, 3)

        assert exc_info.value.solicitado == 3
        assert exc_info.value.disponible == 2
        assert await _stock(db, producto_id) == 2

    @pytest.mark.asyncio
    async def test_producto_inexistente(self, db, stock_service):
        with pytest.raises(ProductNotFoundError):
            await stock_service.reduce_stock(db, 999, 1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cantidad", [0, -1])
    async def test_cantidad_invalida(self, db, factory, stock_service, cantidad):
        producto = await _crear_producto(factory, stock=2)

        with pytest.raises(InvalidQuantityError):
            await stock_service.reduce_stock(db, producto.id, cantidad)
        with pytest.raises(InvalidQuantityError):
            await stock_service.increase_stock(db, producto.id, cantidad)

    @pytest.mark.asyncio
    async def test_ventas_simultaneas_de_la_ultima_unidad(self, session_factory, factory, stock_service):
        """Dos reducciones concurrentes de 1 con stock=1: una tiene éxito y la otra falla."""
        producto_id = (await _crear_producto(factory, stock=1)).id

        async def vender():
            async with session_factory() as session:
                return await stock_service.reduce_stock(session, producto_id, 1)

        resultados = await asyncio.gather(vender(), vender(), return_exceptions=True)

        exitos = [r for r in resultados if isinstance(r, Producto)]
        fallos = [r for r in resultados if isinstance(r, InsufficientStockError)]
        assert len(exitos) == 1
        assert len(fallos) == 1
        assert exitos[0].stock == 0
        async with session_factory() as session:
            assert await _stock(session, producto_id) == 0


class TestIncreaseStock:

    @pytest.mark.asyncio
    async def test_incrementa(self, db, factory, stock_service):
        producto = await _crear_producto(factory, stock=0)

        producto = await stock_service.increase_stock(db, producto.id, 7)

        assert producto.stock == 7

    @pytest.mark.asyncio
    async def test_producto_inexistente(self, db, stock_service):
        with pytest.raises(ProductNotFoundError):
            await stock_service.increase_stock(db, 999, 1)

    @pytest.mark.asyncio
    async def test_aumentar_y_reducir_deja_el_stock_igual(self, db, factory, stock_service):
        producto = await _crear_producto(factory, stock=4)

        await stock_service.increase_stock(db, producto.id, 6)
        producto = await stock_service.reduce_stock(db, producto.id, 6)

        assert producto.stock == 4
