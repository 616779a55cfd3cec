# backend/catalogo/services/cascade_service.py

"""
Motor de cascada de activación e integridad jerárquica.

Centraliza toda la lógica que cruza entidades (categoría → subcategoría →
producto), de modo que ningún modelo necesita conocer a los demás:

- validate_parent_active(): comprobación previa a crear (o reactivar, o mover)
  una subcategoría o un producto. La cadena de padres debe existir, estar
  activa y ser coherente.
- cascade_deactivate(): tras pasar una categoría o subcategoría de activa a
  inactiva, desactiva a todos sus descendientes.

Ambas operaciones trabajan sobre la sesión que recibe el llamador, dentro de
su transacción. Este módulo nunca hace commit ni rollback: si una escritura de
la cascada falla se lanza CascadeWriteFailureError y el servicio que abrió la
transacción la revierte entera, incluido el cambio de la entidad original.

La reactivación no se propaga: volver a activar una categoría deja a sus
subcategorías y productos como estén, y deben reactivarse uno a uno.

Invariante que se mantiene tras cada commit:

    activo(Producto) ⇒ activo(Subcategoria) ⇒ activo(Categoria)
"""

from typing import List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.core.exceptions import (
    CascadeWriteFailureError,
    InconsistentHierarchyError,
    ParentInactiveError,
    ParentNotFoundError,
)
from catalogo.crud import categoria_crud, subcategoria_crud, producto_crud
from catalogo.crud.locks import LOCK_SHARE

logger = logging.getLogger(__name__)

ENTIDAD_CATEGORIA = "categoria"
ENTIDAD_SUBCATEGORIA = "subcategoria"
ENTIDAD_PRODUCTO = "producto"


# ========================================
# VALIDACIÓN PREVIA A LA ESCRITURA
# ========================================

async def validate_parent_active(
    db: AsyncSession,
    entity_kind: str,
    *,
    categoria_id: int,
    subcategoria_id: Optional[int] = None,
) -> None:
    """
    Verifica que la cadena de padres de una subcategoría o producto sea válida.

    Para una subcategoría solo se comprueba la categoría. Para un producto se
    comprueban la subcategoría y la categoría, y además que la subcategoría
    pertenezca a esa categoría.

    Los padres se leen con FOR SHARE y quedan bloqueados hasta el fin de la
    transacción: una desactivación concurrente espera al commit del hijo (y su
    cascada lo ve) o termina antes y la comprobación ve al padre inactivo.
    Se bloquean de arriba abajo, en el mismo orden que la cascada.

    Args:
        db: Sesión de la transacción en curso
        entity_kind: ENTIDAD_SUBCATEGORIA o ENTIDAD_PRODUCTO
        categoria_id: Categoría declarada por la entidad hija
        subcategoria_id: Subcategoría declarada (obligatoria para productos)

    Raises:
        ParentNotFoundError: si algún padre no existe
        ParentInactiveError: si algún padre está inactivo
        InconsistentHierarchyError: si la subcategoría es de otra categoría
    """
    if entity_kind == ENTIDAD_SUBCATEGORIA:
        categoria = await categoria_crud.get_categoria(db, categoria_id, lock=LOCK_SHARE)
        if categoria is None:
            raise ParentNotFoundError(ENTIDAD_CATEGORIA, categoria_id)
        if not categoria.activo:
            raise ParentInactiveError(ENTIDAD_CATEGORIA, categoria_id, child=ENTIDAD_SUBCATEGORIA)
        return

    if entity_kind != ENTIDAD_PRODUCTO:
        raise ValueError(f"Tipo de entidad sin padres que validar: {entity_kind}")
    if subcategoria_id is None:
        raise ValueError("subcategoria_id es obligatorio para validar un producto")

    categoria = await categoria_crud.get_categoria(db, categoria_id, lock=LOCK_SHARE)
    subcategoria = await subcategoria_crud.get_subcategoria(db, subcategoria_id, lock=LOCK_SHARE)
    if subcategoria is None:
        raise ParentNotFoundError(ENTIDAD_SUBCATEGORIA, subcategoria_id)
    if categoria is None:
        raise ParentNotFoundError(ENTIDAD_CATEGORIA, categoria_id)

    if not categoria.activo:
        raise ParentInactiveError(ENTIDAD_CATEGORIA, categoria_id, child=ENTIDAD_PRODUCTO)
    if not subcategoria.activo:
        raise ParentInactiveError(ENTIDAD_SUBCATEGORIA, subcategoria_id, child=ENTIDAD_PRODUCTO)

    if subcategoria.categoria_id != categoria_id:
        raise InconsistentHierarchyError(subcategoria_id, categoria_id, subcategoria.categoria_id)


# ========================================
# DESACTIVACIÓN EN CASCADA
# ========================================

async def cascade_deactivate(db: AsyncSession, entity_kind: str, entity_id: int) -> int:
    """
    Desactiva todos los descendientes de una categoría o subcategoría.

    Debe llamarse solo cuando la entidad acaba de pasar de activa a inactiva;
    una actualización que no cambia el estado no dispara la cascada.

    Categoría: primero sus subcategorías y después todos sus productos.
    Subcategoría: sus productos.

    Returns:
        Número de descendientes que pasaron de activos a inactivos

    Raises:
        CascadeWriteFailureError: si falla alguna escritura; la transacción
            debe revertirse completa
    """
    if entity_kind == ENTIDAD_CATEGORIA:
        logger.info(f"Desactivando categoría {entity_id} y sus descendientes")
        subcategorias = await subcategoria_crud.get_subcategorias_activas_by_categoria(db, entity_id)
        total = await _desactivar(db, subcategorias, "subcategorias", ENTIDAD_CATEGORIA, entity_id)
        productos = await producto_crud.get_productos_activos_by_categoria(db, entity_id)
        total += await _desactivar(db, productos, "productos", ENTIDAD_CATEGORIA, entity_id)
    elif entity_kind == ENTIDAD_SUBCATEGORIA:
        logger.info(f"Desactivando subcategoría {entity_id} y sus productos")
        productos = await producto_crud.get_productos_activos_by_subcategoria(db, entity_id)
        total = await _desactivar(db, productos, "productos", ENTIDAD_SUBCATEGORIA, entity_id)
    else:
        raise ValueError(f"Tipo de entidad sin descendientes: {entity_kind}")

    logger.info(f"{entity_kind.capitalize()} {entity_id}: {total} descendientes desactivados")
    return total


async def _desactivar(db: AsyncSession, entidades: List, entity: str, parent_kind: str, parent_id: int) -> int:
    # Un flush por fila: si una escritura falla se sabe qué descendiente era
    for entidad in entidades:
        entidad_id = entidad.id
        entidad.activo = False
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error al desactivar {entity[:-1]} {entidad_id} de la {parent_kind} {parent_id}: {e}")
            raise CascadeWriteFailureError(entity, parent_kind, parent_id, e, descendant_id=entidad_id) from e
        logger.debug(f"  {entity[:-1].capitalize()} desactivado: {entidad.nombre}")
    return len(entidades)
