# backend/catalogo/db/database.py

"""
Configuración principal de la base de datos para la aplicación.

Este módulo establece la conexión usando SQLAlchemy asíncrono y define
los componentes básicos que serán utilizados por toda la aplicación:
- Motor de base de datos (engine)
- Fábrica de sesiones (AsyncSessionLocal)
- Clase base para modelos (Base)

En producción se usa PostgreSQL (asyncpg). Para desarrollo y tests se admite
SQLite (aiosqlite); en ese caso se activan las claves foráneas y cada
transacción se abre con BEGIN IMMEDIATE para serializar a los escritores,
igual que lo hacen los bloqueos de fila de PostgreSQL.

La función get_db() vive en catalogo/api/deps.py para mantener las dependencias
de FastAPI separadas de la configuración.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base
from catalogo.core.config import settings # Importamos nuestra configuración

# Clase base declarativa para todos los modelos ORM
Base = declarative_base()


def configure_sqlite(engine: AsyncEngine) -> None:
    """
    Ajusta un motor SQLite para que respete las claves foráneas y serialice escrituras.
    """
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Desactiva el manejo de transacciones del driver; las abre el evento "begin"
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Crea un motor asíncrono aplicando los ajustes propios del dialecto."""
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=echo)
        configure_sqlite(engine)
    else:
        engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    # expire_on_commit=False es importante para que los objetos sigan siendo utilizables
    # después de que la transacción se haya confirmado.
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Motor y sessionmaker de la aplicación
engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
AsyncSessionLocal = build_sessionmaker(engine)


async def init_models(target_engine: AsyncEngine = engine) -> None:
    """Crea las tablas que no existan todavía."""
    # Importa los modelos para registrarlos en Base.metadata
    import catalogo.db.models  # noqa: F401

    async with target_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
