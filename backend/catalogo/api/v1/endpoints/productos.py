# backend/catalogo/api/v1/endpoints/productos.py

"""
Endpoints REST para operaciones CRUD, imagen y stock de productos.
"""

from decimal import Decimal
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from catalogo.api import deps
from catalogo.db.models.usuario_model import Usuario
from catalogo.schemas import producto_schema
from catalogo.services.image_storage_service import ImageStorageService
from catalogo.services.producto_service import ProductoService
from catalogo.services.stock_service import stock_service

logger = logging.getLogger(__name__)
router = APIRouter()

def get_producto_service(image_storage: ImageStorageService = Depends(deps.get_image_storage)) -> ProductoService:
    return ProductoService(image_storage)

@router.post("/", response_model=producto_schema.ProductoResponse, status_code=status.HTTP_201_CREATED)
async def create_producto(
    *,
    db: AsyncSession = Depends(deps.get_db),
    producto_in: producto_schema.ProductoCreate,
    service: ProductoService = Depends(get_producto_service),
    _admin: Usuario = Depends(deps.require_admin),
):
    """Crea un nuevo producto en el catálogo."""
    logger.info(f"🆕 PRODUCTO: Creando producto '{producto_in.nombre}'")
    producto = await service.create_new_producto(db, producto_in)
    logger.info(f"✅ PRODUCTO: Creado exitosamente id={producto.id}")
    return producto

@router.put("/{producto_id}", response_model=producto_schema.ProductoResponse)
async def update_producto(
    *,
    db: AsyncSession = Depends(deps.get_db),
    producto_id: int,
    producto_in: producto_schema.ProductoUpdate,
    service: ProductoService = Depends(get_producto_service),
    _admin: Usuario = Depends(deps.require_admin),
):
    """Actualiza un producto existente."""
    logger.info(f"🔄 PRODUCTO: Actualizando producto {producto_id}")
    return await service.update_existing_producto(db, producto_id, producto_in)

@router.delete("/{producto_id}", response_model=producto_schema.ProductoResponse)
async def delete_producto(
    *,
    db: AsyncSession = Depends(deps.get_db),
    producto_id: int,
    service: ProductoService = Depends(get_producto_service),
    _admin: Usuario = Depends(deps.require_admin),
):
    """Elimina un producto del catálogo."""
    logger.info(f"🗑️ PRODUCTO: Eliminando producto {producto_id}")
    return await service.delete_existing_producto(db, producto_id)

@router.post("/{producto_id}/imagen", response_model=producto_schema.ProductoResponse)
async def upload_imagen(
    *,
    db: AsyncSession = Depends(deps.get_db),
    producto_id: int,
    imagen: UploadFile = File(...),
    service: ProductoService = Depends(get_producto_service),
    _admin: Usuario = Depends(deps.require_admin),
):
    """Sube la imagen del producto (jpg, jpeg, png o gif) y reemplaza la anterior."""
    return await service.set_imagen(db, producto_id, imagen)

@router.post("/{producto_id}/stock/aumentar", response_model=producto_schema.ProductoResponse)
async def aumentar_stock(
    *,
    db: AsyncSession = Depends(deps.get_db),
    producto_id: int,
    movimiento: producto_schema.StockMovimiento,
    _admin: Usuario = Depends(deps.require_admin),
):
    return await stock_service.increase_stock(db, producto_id, movimiento.cantidad)

@router.post("/{producto_id}/stock/reducir", response_model=producto_schema.ProductoResponse)
async def reducir_stock(
    *,
    db: AsyncSession = Depends(deps.get_db),
    producto_id: int,
    movimiento: producto_schema.StockMovimiento,
    _admin: Usuario = Depends(deps.require_admin),
):
    """Descuenta stock; responde 409 si no hay unidades suficientes."""
    return await stock_service.reduce_stock(db, producto_id, movimiento.cantidad)

@router.get("/{producto_id}", response_model=producto_schema.ProductoResponse)
async def read_producto(
    *,
    db: AsyncSession = Depends(deps.get_db),
    producto_id: int,
    service: ProductoService = Depends(get_producto_service),
):
    return await service.get_producto_by_id(db, producto_id)

@router.get("/", response_model=List[producto_schema.ProductoResponse])
async def read_productos(
    db: AsyncSession = Depends(deps.get_db),
    skip: int = 0,
    limit: int = 100,
    categoria_id: Optional[int] = None,
    subcategoria_id: Optional[int] = None,
    activo: Optional[bool] = None,
    min_precio: Optional[Decimal] = None,
    max_precio: Optional[Decimal] = None,
    service: ProductoService = Depends(get_producto_service),
):
    """Obtiene una lista de productos con filtros y paginación."""
    return await service.get_all_productos(
        db,
        skip=skip,
        limit=limit,
        categoria_id=categoria_id,
        subcategoria_id=subcategoria_id,
        activo=activo,
        min_precio=min_precio,
        max_precio=max_precio,
    )
