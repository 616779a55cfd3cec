# backend/catalogo/services/producto_service.py
"""
Servicio para operaciones de negocio relacionadas con productos.

Este servicio se encarga de:
- Validar la jerarquía (subcategoría y categoría existentes, activas y coherentes)
  al crear, reactivar o mover un producto
- Mantener el nombre único dentro de cada categoría
- Gestionar la imagen del producto en disco
"""

from decimal import Decimal
from typing import List, Optional
import logging

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.core.config import settings
from catalogo.core.exceptions import (
    DuplicateEntryError,
    InconsistentHierarchyError,
    ParentNotFoundError,
    ProductNotFoundError,
)
from catalogo.crud import categoria_crud, subcategoria_crud, producto_crud
from catalogo.db.models.producto_model import Producto
from catalogo.schemas import producto_schema
from catalogo.services import cascade_service
from catalogo.services.categoria_service import descartar_nulos
from catalogo.services.image_storage_service import ImageStorageService

logger = logging.getLogger(__name__)

_NO_NULOS = {"nombre", "activo", "precio", "stock", "categoria_id", "subcategoria_id"}


class ProductoService:
    """
    Servicio para operaciones de negocio relacionadas con productos.

    El stock no se modifica aquí salvo en la actualización completa del
    producto; los movimientos de stock pasan por stock_service.
    """

    def __init__(self, image_storage: Optional[ImageStorageService] = None):
        self.image_storage = image_storage or ImageStorageService(settings)

    # ========================================
    # OPERACIONES DE CONSULTA
    # ========================================

    async def get_producto_by_id(self, db: AsyncSession, producto_id: int) -> Producto:
        producto = await producto_crud.get_producto(db, producto_id)
        if producto is None:
            raise ProductNotFoundError(producto_id)
        return producto

    async def get_all_productos(
        self,
        db: AsyncSession,
        skip: int = 0,
        limit: int = 100,
        categoria_id: Optional[int] = None,
        subcategoria_id: Optional[int] = None,
        activo: Optional[bool] = None,
        min_precio: Optional[Decimal] = None,
        max_precio: Optional[Decimal] = None,
    ) -> List[Producto]:
        """
        Obtiene productos con filtros avanzados.

        El límite se acota a 1000 para evitar consultas excesivamente grandes.
        """
        if limit > 1000:
            limit = 1000
        return await producto_crud.get_productos(
            db,
            skip=skip,
            limit=limit,
            categoria_id=categoria_id,
            subcategoria_id=subcategoria_id,
            activo=activo,
            min_precio=min_precio,
            max_precio=max_precio,
        )

    # ========================================
    # OPERACIONES DE ESCRITURA CON LÓGICA DE NEGOCIO
    # ========================================

    async def create_new_producto(self, db: AsyncSession, producto_in: producto_schema.ProductoCreate) -> Producto:
        """
        Crea un producto bajo una subcategoría y categoría activas y coherentes.

        Raises:
            ParentNotFoundError, ParentInactiveError, InconsistentHierarchyError:
                si la jerarquía no es válida (se comprueba antes de escribir)
            DuplicateEntryError: si el nombre ya existe en la categoría
        """
        try:
            await cascade_service.validate_parent_active(
                db,
                cascade_service.ENTIDAD_PRODUCTO,
                categoria_id=producto_in.categoria_id,
                subcategoria_id=producto_in.subcategoria_id,
            )
            existing = await producto_crud.get_producto_by_nombre_and_categoria(
                db, producto_in.nombre, producto_in.categoria_id
            )
            if existing:
                raise DuplicateEntryError(cascade_service.ENTIDAD_PRODUCTO, "nombre", producto_in.nombre)

            producto = await producto_crud.create_producto(db, producto_in)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateEntryError(cascade_service.ENTIDAD_PRODUCTO, "nombre", producto_in.nombre)
        except Exception:
            await db.rollback()
            raise

        await db.refresh(producto)
        logger.info(f"Producto creado: {producto.nombre} (id={producto.id}, stock={producto.stock})")
        return producto

    async def update_existing_producto(
        self, db: AsyncSession, producto_id: int, producto_in: producto_schema.ProductoUpdate
    ) -> Producto:
        """
        Actualiza un producto.

        Si cambia de subcategoría o categoría, o pasa de inactivo a activo, se
        vuelve a validar la jerarquía. Un producto inactivo puede moverse bajo
        padres inactivos, pero la subcategoría siempre debe pertenecer a la
        categoría indicada.

        Si cambia la imagen (o se pone a null), el archivo anterior se borra
        después del commit.
        """
        update_data = descartar_nulos(producto_in.model_dump(exclude_unset=True), _NO_NULOS)

        try:
            producto = await self.get_producto_by_id(db, producto_id)
            imagen_anterior = producto.imagen
            categoria_id = update_data.get("categoria_id", producto.categoria_id)
            subcategoria_id = update_data.get("subcategoria_id", producto.subcategoria_id)
            quedara_activo = update_data.get("activo", producto.activo)
            se_mueve = (categoria_id, subcategoria_id) != (producto.categoria_id, producto.subcategoria_id)

            if quedara_activo and (se_mueve or not producto.activo):
                await cascade_service.validate_parent_active(
                    db,
                    cascade_service.ENTIDAD_PRODUCTO,
                    categoria_id=categoria_id,
                    subcategoria_id=subcategoria_id,
                )
            elif se_mueve:
                await self._validar_jerarquia(db, categoria_id, subcategoria_id)

            nombre = update_data.get("nombre", producto.nombre)
            if nombre != producto.nombre or categoria_id != producto.categoria_id:
                existing = await producto_crud.get_producto_by_nombre_and_categoria(db, nombre, categoria_id)
                if existing and existing.id != producto_id:
                    raise DuplicateEntryError(cascade_service.ENTIDAD_PRODUCTO, "nombre", nombre)

            try:
                producto = await producto_crud.update_producto(db, producto, update_data)
            except IntegrityError:
                raise DuplicateEntryError(cascade_service.ENTIDAD_PRODUCTO, "nombre", nombre)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if "imagen" in update_data and imagen_anterior and imagen_anterior != update_data["imagen"]:
            self.image_storage.delete(imagen_anterior)
        await db.refresh(producto)
        return producto

    async def set_imagen(self, db: AsyncSession, producto_id: int, upload: UploadFile) -> Producto:
        """
        Sube una imagen nueva para el producto y reemplaza la anterior.

        Si falla la escritura en base de datos se elimina el archivo recién
        guardado; la imagen anterior solo se borra tras el commit.
        """
        producto = await self.get_producto_by_id(db, producto_id)
        imagen_anterior = producto.imagen
        nueva_imagen = await self.image_storage.save(upload)

        try:
            producto = await producto_crud.update_producto(db, producto, {"imagen": nueva_imagen})
            await db.commit()
        except Exception:
            await db.rollback()
            self.image_storage.delete(nueva_imagen)
            raise

        if imagen_anterior and imagen_anterior != nueva_imagen:
            self.image_storage.delete(imagen_anterior)
        await db.refresh(producto)
        return producto

    async def delete_existing_producto(self, db: AsyncSession, producto_id: int) -> Producto:
        """Elimina un producto (y sus líneas de carrito) y después su imagen."""
        try:
            producto = await self.get_producto_by_id(db, producto_id)
            imagen = producto.imagen
            await producto_crud.delete_producto(db, producto)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Producto eliminado: {producto.nombre} (id={producto_id})")
        self.image_storage.delete(imagen)
        return producto

    # ========================================
    # MÉTODOS AUXILIARES PRIVADOS
    # ========================================

    async def _validar_jerarquia(self, db: AsyncSession, categoria_id: int, subcategoria_id: int) -> None:
        """Existencia y coherencia de los padres, sin exigir que estén activos."""
        subcategoria = await subcategoria_crud.get_subcategoria(db, subcategoria_id)
        if subcategoria is None:
            raise ParentNotFoundError(cascade_service.ENTIDAD_SUBCATEGORIA, subcategoria_id)
        if await categoria_crud.get_categoria(db, categoria_id) is None:
            raise ParentNotFoundError(cascade_service.ENTIDAD_CATEGORIA, categoria_id)
        if subcategoria.categoria_id != categoria_id:
            raise InconsistentHierarchyError(subcategoria_id, categoria_id, subcategoria.categoria_id)


producto_service = ProductoService()
