"""
Tests de la API HTTP: autenticación, traducción de errores a códigos de estado
y los flujos principales de catálogo, stock y carrito.
"""

from decimal import Decimal

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from catalogo.api.errors import register_exception_handlers
from catalogo.core.exceptions import CascadeWriteFailureError

from conftest import auth_headers

API = "/api/v1"


class TestAutenticacion:

    @pytest.mark.asyncio
    async def test_lectura_publica(self, client, seed):
        response = await client.get(f"{API}/categorias/")

        assert response.status_code == 200
        assert [c["nombre"] for c in response.json()] == ["Bebidas"]

    @pytest.mark.asyncio
    async def test_sin_token(self, client, seed):
        response = await client.post(f"{API}/categorias/", json={"nombre": "Snacks"})

        assert response.status_code == 401
        assert response.json()["error"] == "AuthenticationError"

    @pytest.mark.asyncio
    async def test_token_invalido(self, client, seed):
        response = await client.get(f"{API}/carrito/", headers={"Authorization": "Bearer no-es-un-jwt"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_cliente_no_modifica_catalogo(self, client, seed):
        response = await client.post(
            f"{API}/categorias/", json={"nombre": "Snacks"}, headers=auth_headers(seed["cliente"])
        )

        assert response.status_code == 403
        assert response.json()["rol_requerido"] == "administrador"


class TestCatalogo:

    @pytest.mark.asyncio
    async def test_crear_categoria(self, client, seed):
        response = await client.post(
            f"{API}/categorias/", json={"nombre": "Snacks"}, headers=auth_headers(seed["admin"])
        )

        assert response.status_code == 201
        assert response.json()["activo"] is True

    @pytest.mark.asyncio
    async def test_categoria_duplicada(self, client, seed):
        response = await client.post(
            f"{API}/categorias/", json={"nombre": "Bebidas"}, headers=auth_headers(seed["admin"])
        )

        assert response.status_code == 409
        assert response.json()["error"] == "DuplicateEntryError"

    @pytest.mark.asyncio
    async def test_categoria_inexistente(self, client, seed):
        response = await client.get(f"{API}/categorias/999")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "NotFoundError"
        assert body["entity_id"] == 999

    @pytest.mark.asyncio
    async def test_desactivar_categoria_en_cascada(self, client, seed):
        admin = auth_headers(seed["admin"])
        categoria_id = seed["categoria"].id

        response = await client.put(f"{API}/categorias/{categoria_id}", json={"activo": False}, headers=admin)

        assert response.status_code == 200
        assert response.json()["descendientes_desactivados"] == 2
        producto = (await client.get(f"{API}/productos/{seed['producto'].id}")).json()
        assert producto["activo"] is False

        response = await client.post(
            f"{API}/subcategorias/",
            json={"nombre": "Zumos", "categoria_id": categoria_id},
            headers=admin,
        )
        assert response.status_code == 409
        assert response.json()["error"] == "ParentInactiveError"

    @pytest.mark.asyncio
    async def test_producto_con_jerarquia_incoherente(self, client, seed):
        admin = auth_headers(seed["admin"])
        snacks = (await client.post(f"{API}/categorias/", json={"nombre": "Snacks"}, headers=admin)).json()

        response = await client.post(
            f"{API}/productos/",
            json={
                "nombre": "Patatas",
                "precio": "1.20",
                "stock": 3,
                "subcategoria_id": seed["subcategoria"].id,
                "categoria_id": snacks["id"],
            },
            headers=admin,
        )

        assert response.status_code == 409
        assert response.json()["error"] == "InconsistentHierarchyError"

    @pytest.mark.asyncio
    async def test_imagen_con_extension_invalida(self, client, seed):
        admin = auth_headers(seed["admin"])
        response = await client.put(
            f"{API}/productos/{seed['producto'].id}", json={"imagen": "foto.pdf"}, headers=admin
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationFailedError"
        assert body["field"] == "imagen"

    @pytest.mark.asyncio
    async def test_nombre_demasiado_corto(self, client, seed):
        response = await client.post(
            f"{API}/categorias/", json={"nombre": "X"}, headers=auth_headers(seed["admin"])
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationFailedError"
        assert body["field"] == "nombre"
        assert body["rule"]

    @pytest.mark.asyncio
    async def test_precio_negativo(self, client, seed):
        response = await client.put(
            f"{API}/productos/{seed['producto'].id}", json={"precio": "-1.00"}, headers=auth_headers(seed["admin"])
        )

        assert response.status_code == 400
        assert response.json()["field"] == "precio"
        assert [e["field"] for e in response.json()["errores"]] == ["precio"]

    @pytest.mark.asyncio
    async def test_subir_imagen(self, client, seed, image_storage):
        response = await client.post(
            f"{API}/productos/{seed['producto'].id}/imagen",
            files={"imagen": ("cola.png", b"\x89PNG", "image/png")},
            headers=auth_headers(seed["admin"]),
        )

        assert response.status_code == 200
        imagen = response.json()["imagen"]
        assert imagen.endswith("-cola.png")
        assert (image_storage.upload_path / imagen).exists()

    @pytest.mark.asyncio
    async def test_resumen_y_categoria_de_subcategoria(self, client, seed):
        subcategoria_id = seed["subcategoria"].id

        resumen = (await client.get(f"{API}/categorias/{seed['categoria'].id}/resumen")).json()
        padre = (await client.get(f"{API}/subcategorias/{subcategoria_id}/categoria")).json()

        assert resumen == {"categoria_id": seed["categoria"].id, "subcategorias": 1, "productos": 1, "productos_activos": 1}
        assert padre["nombre"] == "Bebidas"


class TestStock:

    @pytest.mark.asyncio
    async def test_reducir_y_aumentar(self, client, seed):
        admin = auth_headers(seed["admin"])
        url = f"{API}/productos/{seed['producto'].id}/stock"

        response = await client.post(f"{url}/reducir", json={"cantidad": 5}, headers=admin)
        assert response.status_code == 200
        assert response.json()["stock"] == 0

        response = await client.post(f"{url}/reducir", json={"cantidad": 1}, headers=admin)
        assert response.status_code == 409
        assert response.json()["error"] == "InsufficientStockError"

        response = await client.post(f"{url}/aumentar", json={"cantidad": 3}, headers=admin)
        assert response.json()["stock"] == 3

    @pytest.mark.asyncio
    async def test_cantidad_invalida(self, client, seed):
        response = await client.post(
            f"{API}/productos/{seed['producto'].id}/stock/reducir",
            json={"cantidad": 0},
            headers=auth_headers(seed["admin"]),
        )

        assert response.status_code == 400
        assert response.json()["field"] == "cantidad"


class TestCarrito:

    @pytest.mark.asyncio
    async def test_flujo_completo(self, client, seed):
        cliente = auth_headers(seed["cliente"])
        producto_id = seed["producto"].id

        response = await client.post(f"{API}/carrito/items", json={"producto_id": producto_id, "cantidad": 2}, headers=cliente)
        assert response.status_code == 201
        response = await client.post(f"{API}/carrito/items", json={"producto_id": producto_id, "cantidad": 1}, headers=cliente)
        assert response.status_code == 200
        assert response.json()["cantidad"] == 3

        carrito = (await client.get(f"{API}/carrito/", headers=cliente)).json()
        assert carrito["total_items"] == 3
        assert Decimal(carrito["total"]) == Decimal("7.50")

        response = await client.put(f"{API}/carrito/items/{producto_id}", json={"cantidad": 0}, headers=cliente)
        assert response.json()["items"] == []

        response = await client.delete(f"{API}/carrito/items/{producto_id}", headers=cliente)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_stock_insuficiente(self, client, seed):
        response = await client.post(
            f"{API}/carrito/items",
            json={"producto_id": seed["producto"].id, "cantidad": 6},
            headers=auth_headers(seed["cliente"]),
        )

        assert response.status_code == 409
        assert response.json()["disponible"] == 5

    @pytest.mark.asyncio
    async def test_carrito_separado_por_usuario(self, client, seed):
        await client.post(
            f"{API}/carrito/items",
            json={"producto_id": seed["producto"].id},
            headers=auth_headers(seed["cliente"]),
        )

        carrito = (await client.get(f"{API}/carrito/", headers=auth_headers(seed["admin"]))).json()
        assert carrito["items"] == []

    @pytest.mark.asyncio
    async def test_vaciar(self, client, seed):
        cliente = auth_headers(seed["cliente"])
        await client.post(f"{API}/carrito/items", json={"producto_id": seed["producto"].id}, headers=cliente)

        response = await client.delete(f"{API}/carrito/", headers=cliente)

        assert response.status_code == 204
        assert (await client.get(f"{API}/carrito/", headers=cliente)).json()["total_items"] == 0


class TestErroresInternos:

    @pytest.mark.asyncio
    async def test_error_no_clasificado_oculta_el_detalle(self):
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/falla")
        async def falla():
            raise RuntimeError("contraseña de la base de datos")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/falla")

        assert response.status_code == 500
        assert response.json() == {"detail": "Error interno del servidor", "error": "InternalServerError"}

    @pytest.mark.asyncio
    async def test_fallo_de_cascada_es_500(self):
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/cascada")
        async def cascada():
            raise CascadeWriteFailureError("productos", "categoria", 1, RuntimeError("disk I/O error"))

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/cascada")

        assert response.status_code == 500
        assert response.json()["error"] == "CascadeWriteFailureError"
        assert "disk I/O" not in response.text
