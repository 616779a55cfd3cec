# backend/catalogo/api/v1/api_router.py
"""
Este archivo contiene el router principal para la API versión 1.

Se encarga de registrar y configurar todos los routers de la versión 1 de la API.
"""

from fastapi import APIRouter

# Importación de routers especializados por dominio de negocio
from catalogo.api.v1.endpoints import (
    categorias,
    subcategorias,
    productos,
    carrito
)

# ========================================
# CONFIGURACIÓN DEL ROUTER PRINCIPAL V1
# ========================================

api_router_v1 = APIRouter()

# ========================================
# REGISTRO DE ROUTERS POR DOMINIO DE NEGOCIO
# ========================================

# ROUTER DE CATEGORÍAS
# Raíz de la jerarquía; desactivar una categoría desactiva todo lo que cuelga de ella
api_router_v1.include_router(
    categorias.router,              # Router con endpoints de categorías
    prefix="/categorias",           # Prefijo: /api/v1/categorias
    tags=["Categorias"]             # Tag para documentación OpenAPI/Swagger
)

# ROUTER DE SUBCATEGORÍAS
api_router_v1.include_router(
    subcategorias.router,
    prefix="/subcategorias",
    tags=["Subcategorias"]
)

# ROUTER DE PRODUCTOS
# CRUD, subida de imagen y movimientos de stock
api_router_v1.include_router(
    productos.router,
    prefix="/productos",
    tags=["Productos"]
)

# ROUTER DEL CARRITO
# Maneja las operaciones del carrito de compras del usuario autenticado
api_router_v1.include_router(
    carrito.router,
    prefix="/carrito",
    tags=["Carrito"]
)
