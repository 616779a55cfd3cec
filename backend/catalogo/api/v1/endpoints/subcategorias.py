"""
Endpoints REST para subcategorías.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from catalogo.api import deps
from catalogo.db.models.usuario_model import Usuario
from catalogo.schemas import categoria_schema, subcategoria_schema
from catalogo.services.image_storage_service import ImageStorageService
from catalogo.services.subcategoria_service import SubcategoriaService

router = APIRouter()

def get_subcategoria_service(
    image_storage: ImageStorageService = Depends(deps.get_image_storage),
) -> SubcategoriaService:
    return SubcategoriaService(image_storage)

@router.post("/", response_model=subcategoria_schema.SubcategoriaResponse, status_code=status.HTTP_201_CREATED)
async def create_subcategoria(
    *,
    db: AsyncSession = Depends(deps.get_db),
    subcategoria_in: subcategoria_schema.SubcategoriaCreate,
    service: SubcategoriaService = Depends(get_subcategoria_service),
    _admin: Usuario = Depends(deps.require_admin),
):
    """Crea una subcategoría. La categoría indicada debe existir y estar activa."""
    return await service.create_new_subcategoria(db, subcategoria_in)

@router.put("/{subcategoria_id}", response_model=subcategoria_schema.SubcategoriaUpdateResponse)
async def update_subcategoria(
    *,
    db: AsyncSession = Depends(deps.get_db),
    subcategoria_id: int,
    subcategoria_in: subcategoria_schema.SubcategoriaUpdate,
    service: SubcategoriaService = Depends(get_subcategoria_service),
    _admin: Usuario = Depends(deps.require_admin),
):
    subcategoria, desactivados = await service.update_existing_subcategoria(db, subcategoria_id, subcategoria_in)
    response = subcategoria_schema.SubcategoriaUpdateResponse.model_validate(subcategoria)
    response.descendientes_desactivados = desactivados
    return response

@router.delete("/{subcategoria_id}", response_model=subcategoria_schema.SubcategoriaResponse)
async def delete_subcategoria(
    *,
    db: AsyncSession = Depends(deps.get_db),
    subcategoria_id: int,
    service: SubcategoriaService = Depends(get_subcategoria_service),
    _admin: Usuario = Depends(deps.require_admin),
):
    return await service.delete_existing_subcategoria(db, subcategoria_id)

@router.get("/{subcategoria_id}", response_model=subcategoria_schema.SubcategoriaResponse)
async def read_subcategoria(
    *,
    db: AsyncSession = Depends(deps.get_db),
    subcategoria_id: int,
    service: SubcategoriaService = Depends(get_subcategoria_service),
):
    return await service.get_subcategoria_by_id(db, subcategoria_id)

@router.get("/{subcategoria_id}/categoria", response_model=categoria_schema.CategoriaResponse)
async def read_subcategoria_categoria(
    *,
    db: AsyncSession = Depends(deps.get_db),
    subcategoria_id: int,
    service: SubcategoriaService = Depends(get_subcategoria_service),
):
    """Categoría a la que pertenece la subcategoría."""
    return await service.get_categoria_padre(db, subcategoria_id)

@router.get("/{subcategoria_id}/resumen", response_model=subcategoria_schema.SubcategoriaResumen)
async def read_subcategoria_resumen(
    *,
    db: AsyncSession = Depends(deps.get_db),
    subcategoria_id: int,
    service: SubcategoriaService = Depends(get_subcategoria_service),
):
    return await service.get_resumen(db, subcategoria_id)

@router.get("/", response_model=List[subcategoria_schema.SubcategoriaResponse])
async def read_subcategorias(
    db: AsyncSession = Depends(deps.get_db),
    skip: int = 0,
    limit: int = 100,
    categoria_id: Optional[int] = None,
    activo: Optional[bool] = None,
    service: SubcategoriaService = Depends(get_subcategoria_service),
):
    """Lista subcategorías, opcionalmente de una sola categoría."""
    return await service.get_all_subcategorias(
        db, skip=skip, limit=limit, categoria_id=categoria_id, activo=activo
    )
