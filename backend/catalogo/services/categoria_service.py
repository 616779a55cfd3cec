# backend/catalogo/services/categoria_service.py
"""
Servicio para operaciones de negocio relacionadas con categorías.

Este servicio se encarga de gestionar la lógica de negocio de las categorías:
validación de duplicados, desactivación en cascada y limpieza de imágenes
tras un borrado. Cada operación de escritura es una única transacción que el
servicio confirma o revierte.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.core.config import settings
from catalogo.core.exceptions import DuplicateEntryError, NotFoundError
from catalogo.crud import categoria_crud, producto_crud
from catalogo.crud.locks import LOCK_UPDATE
from catalogo.db.models.categoria_model import Categoria
from catalogo.schemas import categoria_schema
from catalogo.services import cascade_service
from catalogo.services.image_storage_service import ImageStorageService

logger = logging.getLogger(__name__)

# Campos que no admiten NULL: un null explícito en la petición se ignora
_NO_NULOS = {"nombre", "activo"}


class CategoriaService:
    """
    Servicio para operaciones de negocio relacionadas con categorías.

    Características:
    - Validación de nombres únicos en todo el catálogo
    - Desactivación en cascada de subcategorías y productos
    - Reactivación sin cascada (los descendientes se reactivan uno a uno)
    - Borrado con limpieza de las imágenes de los productos eliminados
    """

    def __init__(self, image_storage: Optional[ImageStorageService] = None):
        self.image_storage = image_storage or ImageStorageService(settings)

    # ========================================
    # OPERACIONES DE CONSULTA
    # ========================================

    async def get_categoria_by_id(self, db: AsyncSession, categoria_id: int, lock: Optional[str] = None) -> Categoria:
        """
        Obtiene una categoría por su ID.

        Con lock=LOCK_UPDATE la fila queda bloqueada hasta el fin de la transacción.

        Raises:
            NotFoundError: si no existe
        """
        categoria = await categoria_crud.get_categoria(db, categoria_id=categoria_id, lock=lock)
        if categoria is None:
            raise NotFoundError(cascade_service.ENTIDAD_CATEGORIA, categoria_id)
        return categoria

    async def get_all_categorias(
        self, db: AsyncSession, skip: int = 0, limit: int = 100, activo: Optional[bool] = None
    ) -> List[Categoria]:
        if limit > 1000: # Prevenir consultas excesivamente grandes
            limit = 1000
        return await categoria_crud.get_categorias(db, skip=skip, limit=limit, activo=activo)

    async def get_resumen(self, db: AsyncSession, categoria_id: int) -> categoria_schema.CategoriaResumen:
        """Cuenta subcategorías y productos de una categoría."""
        await self.get_categoria_by_id(db, categoria_id)
        return categoria_schema.CategoriaResumen(
            categoria_id=categoria_id,
            subcategorias=await categoria_crud.count_subcategorias(db, categoria_id),
            productos=await categoria_crud.count_productos(db, categoria_id),
            productos_activos=await categoria_crud.count_productos(db, categoria_id, solo_activos=True),
        )

    # ========================================
    # OPERACIONES DE ESCRITURA CON LÓGICA DE NEGOCIO
    # ========================================

    async def create_new_categoria(self, db: AsyncSession, categoria_in: categoria_schema.CategoriaCreate) -> Categoria:
        """
        Crea una nueva categoría.

        Raises:
            DuplicateEntryError: si ya existe una categoría con ese nombre
        """
        try:
            existing = await categoria_crud.get_categoria_by_nombre(db, categoria_in.nombre)
            if existing:
                raise DuplicateEntryError(cascade_service.ENTIDAD_CATEGORIA, "nombre", categoria_in.nombre)

            categoria = await categoria_crud.create_categoria(db, categoria_in)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateEntryError(cascade_service.ENTIDAD_CATEGORIA, "nombre", categoria_in.nombre)
        except Exception:
            await db.rollback()
            raise

        await db.refresh(categoria)
        logger.info(f"Categoría creada: {categoria.nombre} (id={categoria.id})")
        return categoria

    async def update_existing_categoria(
        self, db: AsyncSession, categoria_id: int, categoria_in: categoria_schema.CategoriaUpdate
    ) -> Tuple[Categoria, int]:
        """
        Actualiza una categoría y, si pasa de activa a inactiva, desactiva a sus descendientes.

        Todo ocurre en una sola transacción: si falla alguna escritura de la
        cascada no queda persistido ni siquiera el cambio de la propia categoría.

        Returns:
            (categoría actualizada, número de descendientes desactivados)

        Raises:
            NotFoundError: si la categoría no existe
            DuplicateEntryError: si el nuevo nombre ya está en uso
            CascadeWriteFailureError: si falla la desactivación de algún descendiente
        """
        update_data = descartar_nulos(categoria_in.model_dump(exclude_unset=True), _NO_NULOS)
        desactivados = 0

        try:
            # FOR UPDATE: los hijos que se estén creando bajo ella esperan a la cascada
            categoria = await self.get_categoria_by_id(db, categoria_id, lock=LOCK_UPDATE)

            if "nombre" in update_data and update_data["nombre"] != categoria.nombre:
                existing = await categoria_crud.get_categoria_by_nombre(db, update_data["nombre"])
                if existing and existing.id != categoria_id:
                    raise DuplicateEntryError(cascade_service.ENTIDAD_CATEGORIA, "nombre", update_data["nombre"])

            estaba_activa = categoria.activo
            try:
                categoria = await categoria_crud.update_categoria(db, categoria, update_data)
            except IntegrityError:
                raise DuplicateEntryError(cascade_service.ENTIDAD_CATEGORIA, "nombre", update_data.get("nombre"))

            # Solo la transición activa → inactiva dispara la cascada
            if estaba_activa and not categoria.activo:
                desactivados = await cascade_service.cascade_deactivate(
                    db, cascade_service.ENTIDAD_CATEGORIA, categoria_id
                )
            elif not estaba_activa and categoria.activo:
                logger.info(f"Categoría {categoria_id} reactivada; sus descendientes no cambian")

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(categoria)
        return categoria, desactivados

    async def delete_existing_categoria(self, db: AsyncSession, categoria_id: int) -> Categoria:
        """
        Elimina una categoría junto con sus subcategorías y productos (ON DELETE CASCADE).

        Las imágenes de los productos eliminados se borran después del commit;
        un fallo al borrarlas solo se registra.
        """
        try:
            categoria = await self.get_categoria_by_id(db, categoria_id)
            imagenes = await producto_crud.get_imagenes(db, categoria_id=categoria_id)
            await categoria_crud.delete_categoria(db, categoria)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Categoría eliminada: {categoria.nombre} (id={categoria_id})")
        self.image_storage.delete_many(imagenes)
        return categoria


def descartar_nulos(update_data: Dict[str, Any], no_nulos: set) -> Dict[str, Any]:
    """Descarta los null explícitos en campos obligatorios."""
    return {k: v for k, v in update_data.items() if v is not None or k not in no_nulos}

# ========================================
# INSTANCIA SINGLETON DEL SERVICIO
# ========================================

categoria_service = CategoriaService()
