# backend/catalogo/services/subcategoria_service.py
"""
Servicio para operaciones de negocio relacionadas con subcategorías.

Una subcategoría solo puede crearse (o reactivarse, o moverse) bajo una
categoría existente y activa. Al desactivarla se desactivan sus productos.
"""

from typing import List, Optional, Tuple
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.core.config import settings
from catalogo.core.exceptions import (
    DuplicateEntryError,
    NotFoundError,
    ParentInactiveError,
    ParentNotFoundError,
    ValidationFailedError,
)
from catalogo.crud import categoria_crud, subcategoria_crud, producto_crud
from catalogo.crud.locks import LOCK_SHARE
from catalogo.db.models.categoria_model import Categoria
from catalogo.db.models.subcategoria_model import Subcategoria
from catalogo.schemas import subcategoria_schema
from catalogo.services import cascade_service
from catalogo.services.categoria_service import descartar_nulos
from catalogo.services.image_storage_service import ImageStorageService

logger = logging.getLogger(__name__)

_NO_NULOS = {"nombre", "activo", "categoria_id"}


class SubcategoriaService:
    """
    Servicio para operaciones de negocio relacionadas con subcategorías.

    Características:
    - Nombre único dentro de cada categoría
    - Validación de la categoría padre al crear, reactivar o mover
    - Desactivación en cascada de sus productos
    """

    def __init__(self, image_storage: Optional[ImageStorageService] = None):
        self.image_storage = image_storage or ImageStorageService(settings)

    # ========================================
    # OPERACIONES DE CONSULTA
    # ========================================

    async def get_subcategoria_by_id(self, db: AsyncSession, subcategoria_id: int) -> Subcategoria:
        subcategoria = await subcategoria_crud.get_subcategoria(db, subcategoria_id)
        if subcategoria is None:
            raise NotFoundError(cascade_service.ENTIDAD_SUBCATEGORIA, subcategoria_id)
        return subcategoria

    async def get_all_subcategorias(
        self,
        db: AsyncSession,
        skip: int = 0,
        limit: int = 100,
        categoria_id: Optional[int] = None,
        activo: Optional[bool] = None,
    ) -> List[Subcategoria]:
        if limit > 1000:
            limit = 1000
        return await subcategoria_crud.get_subcategorias(
            db, skip=skip, limit=limit, categoria_id=categoria_id, activo=activo
        )

    async def get_categoria_padre(self, db: AsyncSession, subcategoria_id: int) -> Categoria:
        """Devuelve la categoría a la que pertenece una subcategoría."""
        subcategoria = await self.get_subcategoria_by_id(db, subcategoria_id)
        categoria = await categoria_crud.get_categoria(db, subcategoria.categoria_id)
        if categoria is None:
            raise NotFoundError(cascade_service.ENTIDAD_CATEGORIA, subcategoria.categoria_id)
        return categoria

    async def get_resumen(self, db: AsyncSession, subcategoria_id: int) -> subcategoria_schema.SubcategoriaResumen:
        await self.get_subcategoria_by_id(db, subcategoria_id)
        return subcategoria_schema.SubcategoriaResumen(
            subcategoria_id=subcategoria_id,
            productos=await subcategoria_crud.count_productos(db, subcategoria_id),
            productos_activos=await subcategoria_crud.count_productos(db, subcategoria_id, solo_activos=True),
        )

    # ========================================
    # OPERACIONES DE ESCRITURA CON LÓGICA DE NEGOCIO
    # ========================================

    async def create_new_subcategoria(
        self, db: AsyncSession, subcategoria_in: subcategoria_schema.SubcategoriaCreate
    ) -> Subcategoria:
        """
        Crea una subcategoría bajo una categoría activa.

        Raises:
            ParentNotFoundError: si la categoría no existe
            ParentInactiveError: si la categoría está inactiva
            DuplicateEntryError: si el nombre ya existe en esa categoría
        """
        try:
            await cascade_service.validate_parent_active(
                db, cascade_service.ENTIDAD_SUBCATEGORIA, categoria_id=subcategoria_in.categoria_id
            )
            existing = await subcategoria_crud.get_subcategoria_by_nombre_and_categoria(
                db, subcategoria_in.nombre, subcategoria_in.categoria_id
            )
            if existing:
                raise DuplicateEntryError(cascade_service.ENTIDAD_SUBCATEGORIA, "nombre", subcategoria_in.nombre)

            subcategoria = await subcategoria_crud.create_subcategoria(db, subcategoria_in)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateEntryError(cascade_service.ENTIDAD_SUBCATEGORIA, "nombre", subcategoria_in.nombre)
        except Exception:
            await db.rollback()
            raise

        await db.refresh(subcategoria)
        logger.info(
            f"Subcategoría creada: {subcategoria.nombre} (id={subcategoria.id}, categoria={subcategoria.categoria_id})"
        )
        return subcategoria

    async def update_existing_subcategoria(
        self, db: AsyncSession, subcategoria_id: int, subcategoria_in: subcategoria_schema.SubcategoriaUpdate
    ) -> Tuple[Subcategoria, int]:
        """
        Actualiza una subcategoría.

        - activa → inactiva: desactiva sus productos en la misma transacción
        - inactiva → activa: exige que la categoría esté activa
        - cambio de categoria_id: solo si no tiene productos, y la nueva
          categoría debe existir y estar activa

        Returns:
            (subcategoría actualizada, número de productos desactivados)
        """
        update_data = descartar_nulos(subcategoria_in.model_dump(exclude_unset=True), _NO_NULOS)
        desactivados = 0

        try:
            subcategoria = await self.get_subcategoria_by_id(db, subcategoria_id)
            estaba_activa = subcategoria.activo
            categoria_id = update_data.get("categoria_id", subcategoria.categoria_id)
            quedara_activa = update_data.get("activo", estaba_activa)

            if categoria_id != subcategoria.categoria_id:
                # Los productos guardan su propia categoria_id; moverlos rompería la jerarquía
                if await subcategoria_crud.count_productos(db, subcategoria_id) > 0:
                    raise ValidationFailedError(
                        "categoria_id", "no se puede mover una subcategoría que tiene productos"
                    )
                if quedara_activa:
                    await cascade_service.validate_parent_active(
                        db, cascade_service.ENTIDAD_SUBCATEGORIA, categoria_id=categoria_id
                    )
                elif await categoria_crud.get_categoria(db, categoria_id) is None:
                    raise ParentNotFoundError(cascade_service.ENTIDAD_CATEGORIA, categoria_id)
            elif quedara_activa and not estaba_activa:
                categoria = await categoria_crud.get_categoria(db, categoria_id, lock=LOCK_SHARE)
                if categoria is not None and not categoria.activo:
                    raise ParentInactiveError(
                        cascade_service.ENTIDAD_CATEGORIA, categoria_id, child=cascade_service.ENTIDAD_SUBCATEGORIA
                    )

            nombre = update_data.get("nombre", subcategoria.nombre)
            if nombre != subcategoria.nombre or categoria_id != subcategoria.categoria_id:
                existing = await subcategoria_crud.get_subcategoria_by_nombre_and_categoria(db, nombre, categoria_id)
                if existing and existing.id != subcategoria_id:
                    raise DuplicateEntryError(cascade_service.ENTIDAD_SUBCATEGORIA, "nombre", nombre)

            try:
                subcategoria = await subcategoria_crud.update_subcategoria(db, subcategoria, update_data)
            except IntegrityError:
                raise DuplicateEntryError(cascade_service.ENTIDAD_SUBCATEGORIA, "nombre", nombre)

            if estaba_activa and not subcategoria.activo:
                desactivados = await cascade_service.cascade_deactivate(
                    db, cascade_service.ENTIDAD_SUBCATEGORIA, subcategoria_id
                )

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(subcategoria)
        return subcategoria, desactivados

    async def delete_existing_subcategoria(self, db: AsyncSession, subcategoria_id: int) -> Subcategoria:
        """Elimina una subcategoría y sus productos; después borra sus imágenes."""
        try:
            subcategoria = await self.get_subcategoria_by_id(db, subcategoria_id)
            imagenes = await producto_crud.get_imagenes(db, subcategoria_id=subcategoria_id)
            await subcategoria_crud.delete_subcategoria(db, subcategoria)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Subcategoría eliminada: {subcategoria.nombre} (id={subcategoria_id})")
        self.image_storage.delete_many(imagenes)
        return subcategoria


subcategoria_service = SubcategoriaService()
