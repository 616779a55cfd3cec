"""
Pytest configuration and fixtures for tests.

Cada test usa su propia base de datos SQLite en un archivo dentro de tmp_path,
con el mismo motor (claves foráneas y BEGIN IMMEDIATE) que usa la aplicación.
"""

import os
import tempfile

# La configuración se lee al importar catalogo.core.config: debe definirse antes
_TMP_DIR = tempfile.mkdtemp(prefix="catalogo-tests-")
os.environ.setdefault("JWT_SECRET", "test_jwt_secret_1234567890abcdef")
os.environ["DATABASE_URL_OVERRIDE"] = f"sqlite+aiosqlite:///{_TMP_DIR}/app.db"
os.environ["UPLOAD_PATH"] = os.path.join(_TMP_DIR, "uploads")
os.environ["LOG_FILE_PATH"] = ""

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from catalogo.api import deps
from catalogo.core.config import settings
from catalogo.core.security import create_access_token
from catalogo.crud import categoria_crud, subcategoria_crud, producto_crud, usuario_crud
from catalogo.db.database import build_engine, build_sessionmaker, init_models
from catalogo.db.models.usuario_model import ROL_ADMINISTRADOR, ROL_CLIENTE
from catalogo.main import app
from catalogo.schemas.categoria_schema import CategoriaCreate
from catalogo.schemas.producto_schema import ProductoCreate
from catalogo.schemas.subcategoria_schema import SubcategoriaCreate
from catalogo.services.image_storage_service import ImageStorageService


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Motor SQLite sobre un archivo, para poder abrir varias conexiones a la vez."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return build_sessionmaker(test_engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def image_storage(tmp_path):
    test_settings = settings.model_copy(update={"UPLOAD_PATH": str(tmp_path / "uploads")})
    storage = ImageStorageService(test_settings)
    storage.ensure_upload_dir()
    return storage


# ============================================================================
# Data Factories
# ============================================================================

class CatalogoFactory:
    """
    Crea filas directamente con la capa CRUD, sin las validaciones de los servicios,
    para poder preparar también estados intermedios (p. ej. hijos inactivos).
    """

    def __init__(self, session):
        self.session = session

    async def categoria(self, nombre="Bebidas", activo=True):
        categoria = await categoria_crud.create_categoria(
            self.session, CategoriaCreate(nombre=nombre, activo=activo)
        )
        await self.session.commit()
        return categoria

    async def subcategoria(self, categoria, nombre="Refrescos", activo=True):
        subcategoria = await subcategoria_crud.create_subcategoria(
            self.session, SubcategoriaCreate(nombre=nombre, categoria_id=categoria.id, activo=activo)
        )
        await self.session.commit()
        return subcategoria

    async def producto(self, subcategoria, nombre="Cola 1L", precio="10.00", stock=10, activo=True, imagen=None):
        producto = await producto_crud.create_producto(
            self.session,
            ProductoCreate(
                nombre=nombre,
                precio=Decimal(precio),
                stock=stock,
                imagen=imagen,
                subcategoria_id=subcategoria.id,
                categoria_id=subcategoria.categoria_id,
                activo=activo,
            ),
        )
        await self.session.commit()
        return producto

    async def usuario(self, email="cliente@example.com", rol=ROL_CLIENTE):
        usuario = await usuario_crud.create_usuario(self.session, nombre=email.split("@")[0], email=email, rol=rol)
        await self.session.commit()
        return usuario


@pytest.fixture
def factory(db):
    return CatalogoFactory(db)


def token_for(usuario) -> str:
    return create_access_token({"id": usuario.id, "email": usuario.email, "rol": usuario.rol})


def auth_headers(usuario) -> dict:
    return {"Authorization": f"Bearer {token_for(usuario)}"}


# ============================================================================
# API Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def client(session_factory, image_storage):
    """Cliente HTTP contra la app, con la base de datos y las imágenes del test."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_image_storage] = lambda: image_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seed(session_factory):
    """
    Usuarios y un catálogo mínimo creados en una sesión propia que se cierra
    antes de las peticiones.
    """
    async with session_factory() as session:
        f = CatalogoFactory(session)
        data = {
            "admin": await f.usuario("admin@example.com", rol=ROL_ADMINISTRADOR),
            "cliente": await f.usuario("cliente@example.com"),
        }
        data["categoria"] = await f.categoria("Bebidas")
        data["subcategoria"] = await f.subcategoria(data["categoria"], "Refrescos")
        data["producto"] = await f.producto(data["subcategoria"], "Cola 1L", precio="2.50", stock=5)
    return data
