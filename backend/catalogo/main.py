# backend/catalogo/main.py
"""
Aplicación FastAPI del catálogo.

Monta los routers de categorías, subcategorías, productos y carrito bajo
el prefijo de la API y registra:
- Traducción de excepciones de dominio a códigos HTTP
- Creación de tablas y carpeta de subidas al arrancar
"""

import logging

from fastapi import FastAPI
from catalogo.core.config import settings  # Configuración centralizada de la aplicación
from catalogo.core.logging_config import setup_logging
from catalogo.api.errors import register_exception_handlers
from catalogo.api.v1.api_router import api_router_v1  # Router principal de la API v1
from catalogo.db.database import init_models
from catalogo.services.image_storage_service import ImageStorageService

logger = logging.getLogger(__name__)

# ========================================
# CONFIGURACIÓN DE LA APLICACIÓN FASTAPI
# ========================================

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    version=settings.PROJECT_VERSION,
    description="API del catálogo: categorías, subcategorías, productos y carrito"
)

register_exception_handlers(app)

# ========================================
# REGISTRO DE ROUTERS DE LA API
# ========================================

# El prefijo se obtiene de settings (típicamente "/api/v1")
app.include_router(api_router_v1, prefix=settings.API_V1_STR)


# ========================================
# ENDPOINTS RAÍZ Y VERIFICACIÓN DE ESTADO
# ========================================

@app.get("/", tags=["Root"])
async def read_root():
    """
    Endpoint raíz para verificación básica del estado de la API.

    Example:
        GET /
        Response: {"message": "Bienvenido a Catálogo API v1.0.0"}
    """
    return {"message": f"Bienvenido a {settings.PROJECT_NAME} v{settings.PROJECT_VERSION}"}

# ========================================
# EVENTOS DEL CICLO DE VIDA DE LA APLICACIÓN
# ========================================

@app.on_event("startup")
async def startup_event():
    """
    Arranque: prepara logging, carpeta de subidas y tablas.

    Pasos:
    - Configuración del logging
    - Creación de la carpeta de subidas de imágenes
    - Creación de las tablas que falten
    """
    setup_logging()
    ImageStorageService(settings).ensure_upload_dir()
    await init_models()
    logger.info(f"✅ {settings.PROJECT_NAME} iniciada")


def main() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
