"""
Endpoints REST para operaciones CRUD de categorías.

Las lecturas son públicas; crear, modificar y eliminar requiere rol de administrador.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from catalogo.api import deps
from catalogo.db.models.usuario_model import Usuario
from catalogo.schemas import categoria_schema
from catalogo.services.categoria_service import CategoriaService
from catalogo.services.image_storage_service import ImageStorageService

router = APIRouter()

def get_categoria_service(image_storage: ImageStorageService = Depends(deps.get_image_storage)) -> CategoriaService:
    return CategoriaService(image_storage)

@router.post("/", response_model=categoria_schema.CategoriaResponse, status_code=status.HTTP_201_CREATED)
async def create_categoria(
    *,
    db: AsyncSession = Depends(deps.get_db),
    categoria_in: categoria_schema.CategoriaCreate,
    service: CategoriaService = Depends(get_categoria_service),
    _admin: Usuario = Depends(deps.require_admin),
):
    """Crea una nueva categoría en el sistema."""
    return await service.create_new_categoria(db, categoria_in)

@router.put("/{categoria_id}", response_model=categoria_schema.CategoriaUpdateResponse)
async def update_categoria(
    *,
    db: AsyncSession = Depends(deps.get_db),
    categoria_id: int,
    categoria_in: categoria_schema.CategoriaUpdate,
    service: CategoriaService = Depends(get_categoria_service),
    _admin: Usuario = Depends(deps.require_admin),
):
    """
    Actualiza una categoría existente.

    Si la categoría pasa a inactiva, sus subcategorías y productos se desactivan
    en la misma operación; la respuesta indica cuántos cambiaron.
    """
    categoria, desactivados = await service.update_existing_categoria(db, categoria_id, categoria_in)
    response = categoria_schema.CategoriaUpdateResponse.model_validate(categoria)
    response.descendientes_desactivados = desactivados
    return response

@router.delete("/{categoria_id}", response_model=categoria_schema.CategoriaResponse)
async def delete_categoria(
    *,
    db: AsyncSession = Depends(deps.get_db),
    categoria_id: int,
    service: CategoriaService = Depends(get_categoria_service),
    _admin: Usuario = Depends(deps.require_admin),
):
    """Elimina una categoría con todas sus subcategorías y productos."""
    return await service.delete_existing_categoria(db, categoria_id)

@router.get("/{categoria_id}", response_model=categoria_schema.CategoriaResponse)
async def read_categoria(
    *,
    db: AsyncSession = Depends(deps.get_db),
    categoria_id: int,
    service: CategoriaService = Depends(get_categoria_service),
):
    """Obtiene los detalles de una categoría específica por su ID."""
    return await service.get_categoria_by_id(db, categoria_id)

@router.get("/{categoria_id}/resumen", response_model=categoria_schema.CategoriaResumen)
async def read_categoria_resumen(
    *,
    db: AsyncSession = Depends(deps.get_db),
    categoria_id: int,
    service: CategoriaService = Depends(get_categoria_service),
):
    """Número de subcategorías, productos y productos activos de la categoría."""
    return await service.get_resumen(db, categoria_id)

@router.get("/", response_model=List[categoria_schema.CategoriaResponse])
async def read_categorias(
    db: AsyncSession = Depends(deps.get_db),
    skip: int = 0,
    limit: int = 100,
    activo: Optional[bool] = None,
    service: CategoriaService = Depends(get_categoria_service),
):
    """Obtiene una lista de categorías con filtro de estado y paginación."""
    return await service.get_all_categorias(db, skip=skip, limit=limit, activo=activo)
