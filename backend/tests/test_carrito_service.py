"""
Tests de la capa de consistencia del carrito.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from catalogo.core.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    NotFoundError,
    ProductInactiveError,
    ProductNotFoundError,
)
from catalogo.db.models.carrito_model import Carrito
from catalogo.schemas.producto_schema import ProductoUpdate
from catalogo.services.carrito_service import CarritoService
from catalogo.services.producto_service import ProductoService


@pytest.fixture
def carrito_service():
    return CarritoService()


@pytest_asyncio.fixture
async def escenario(factory):
    categoria = await factory.categoria()
    subcategoria = await factory.subcategoria(categoria)
    return {
        "usuario": await factory.usuario(),
        "subcategoria": subcategoria,
        "producto": await factory.producto(subcategoria, "Cola 1L", precio="10.00", stock=10),
    }


async def _lineas(db, usuario_id):
    return await db.scalar(select(func.count(Carrito.id)).where(Carrito.usuario_id == usuario_id))


class TestAddToCart:

    @pytest.mark.asyncio
    async def test_acumula_cantidad_y_conserva_el_primer_precio(self, db, escenario, carrito_service, image_storage):
        usuario, producto = escenario["usuario"], escenario["producto"]

        await carrito_service.add_to_cart(db, usuario.id, producto.id, 2)
        await ProductoService(image_storage).update_existing_producto(
            db, producto.id, ProductoUpdate(precio=Decimal("12.00"))
        )
        item = await carrito_service.add_to_cart(db, usuario.id, producto.id, 3)

        assert item.cantidad == 5
        assert item.precio_unitario == Decimal("10.00")
        assert await _lineas(db, usuario.id) == 1

    @pytest.mark.asyncio
    async def test_cantidad_invalida(self, db, escenario, carrito_service):
        with pytest.raises(InvalidQuantityError):
            await carrito_service.add_to_cart(db, escenario["usuario"].id, escenario["producto"].id, 0)
        assert await _lineas(db, escenario["usuario"].id) == 0

    @pytest.mark.asyncio
    async def test_producto_inexistente(self, db, escenario, carrito_service):
        with pytest.raises(ProductNotFoundError):
            await carrito_service.add_to_cart(db, escenario["usuario"].id, 999, 1)

    @pytest.mark.asyncio
    async def test_producto_inactivo(self, db, factory, escenario, carrito_service):
        inactivo = await factory.producto(escenario["subcategoria"], "Descatalogado", activo=False)
        with pytest.raises(ProductInactiveError):
            await carrito_service.add_to_cart(db, escenario["usuario"].id, inactivo.id, 1)

    @pytest.mark.asyncio
    async def test_stock_insuficiente_en_linea_nueva(self, db, escenario, carrito_service):
        # El rollback expira las instancias cargadas: se guardan los ids antes
        usuario_id, producto_id = escenario["usuario"].id, escenario["producto"].id

        with pytest.raises(InsufficientStockError) as exc_info:
            await carrito_service.add_to_cart(db, usuario_id, producto_id, 11)
        assert exc_info.value.disponible == 10
        assert await _lineas(db, usuario_id) == 0

    @pytest.mark.asyncio
    async def test_stock_insuficiente_al_acumular(self, db, escenario, carrito_service):
        usuario_id, producto_id = escenario["usuario"].id, escenario["producto"].id
        await carrito_service.add_to_cart(db, usuario_id, producto_id, 8)

        with pytest.raises(InsufficientStockError):
            await carrito_service.add_to_cart(db, usuario_id, producto_id, 3)

        item = (await carrito_service.get_cart(db, usuario_id)).items[0]
        assert item.cantidad == 8


class TestUpdateAndRemove:

    @pytest.mark.asyncio
    async def test_fijar_cantidad(self, db, escenario, carrito_service):
        usuario, producto = escenario["usuario"], escenario["producto"]
        await carrito_service.add_to_cart(db, usuario.id, producto.id, 2)

        item = await carrito_service.update_quantity(db, usuario.id, producto.id, 7)

        assert item.cantidad == 7

    @pytest.mark.asyncio
    async def test_cantidad_cero_elimina_la_linea(self, db, escenario, carrito_service):
        usuario, producto = escenario["usuario"], escenario["producto"]
        await carrito_service.add_to_cart(db, usuario.id, producto.id, 2)

        assert await carrito_service.update_quantity(db, usuario.id, producto.id, 0) is None
        assert await _lineas(db, usuario.id) == 0

    @pytest.mark.asyncio
    async def test_cantidad_negativa(self, db, escenario, carrito_service):
        usuario, producto = escenario["usuario"], escenario["producto"]
        await carrito_service.add_to_cart(db, usuario.id, producto.id, 2)

        with pytest.raises(InvalidQuantityError):
            await carrito_service.update_quantity(db, usuario.id, producto.id, -1)

    @pytest.mark.asyncio
    async def test_fijar_cantidad_por_encima_del_stock(self, db, escenario, carrito_service):
        usuario, producto = escenario["usuario"], escenario["producto"]
        await carrito_service.add_to_cart(db, usuario.id, producto.id, 2)

        with pytest.raises(InsufficientStockError):
            await carrito_service.update_quantity(db, usuario.id, producto.id, 50)

    @pytest.mark.asyncio
    async def test_actualizar_linea_inexistente(self, db, escenario, carrito_service):
        with pytest.raises(NotFoundError):
            await carrito_service.update_quantity(db, escenario["usuario"].id, escenario["producto"].id, 1)

    @pytest.mark.asyncio
    async def test_eliminar(self, db, escenario, carrito_service):
        usuario, producto = escenario["usuario"], escenario["producto"]
        await carrito_service.add_to_cart(db, usuario.id, producto.id, 1)

        await carrito_service.remove_from_cart(db, usuario.id, producto.id)

        assert await _lineas(db, usuario.id) == 0
        with pytest.raises(NotFoundError):
            await carrito_service.remove_from_cart(db, usuario.id, producto.id)


class TestCartView:

    @pytest.mark.asyncio
    async def test_totales(self, db, factory, escenario, carrito_service):
        usuario = escenario["usuario"]
        agua = await factory.producto(escenario["subcategoria"], "Agua", precio="0.50", stock=100)
        await carrito_service.add_to_cart(db, usuario.id, escenario["producto"].id, 2)
        await carrito_service.add_to_cart(db, usuario.id, agua.id, 4)

        carrito = await carrito_service.get_cart(db, usuario.id)

        assert carrito.total_items == 6
        assert carrito.total == Decimal("22.00")
        assert [item.subtotal for item in carrito.items] == [Decimal("20.00"), Decimal("2.00")]

    @pytest.mark.asyncio
    async def test_vaciar(self, db, factory, escenario, carrito_service):
        usuario = escenario["usuario"]
        otro = await factory.usuario("otro@example.com")
        await carrito_service.add_to_cart(db, usuario.id, escenario["producto"].id, 1)
        await carrito_service.add_to_cart(db, otro.id, escenario["producto"].id, 1)

        assert await carrito_service.clear_cart(db, usuario.id) == 1
        assert (await carrito_service.get_cart(db, usuario.id)).total_items == 0
        assert await _lineas(db, otro.id) == 1
