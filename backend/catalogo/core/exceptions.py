# backend/catalogo/core/exceptions.py
"""
Excepciones de dominio del catálogo.

Los servicios lanzan estas excepciones en lugar de HTTPException; la capa
HTTP (catalogo/api/errors.py) se encarga de traducirlas a códigos de estado.

Jerarquía:

    CatalogoException
    ├── NotFoundError
    │   ├── ParentNotFoundError
    │   └── ProductNotFoundError
    ├── ValidationFailedError
    │   └── InvalidQuantityError
    ├── ParentInactiveError
    ├── ProductInactiveError
    ├── InconsistentHierarchyError
    ├── InsufficientStockError
    ├── DuplicateEntryError
    ├── CascadeWriteFailureError
    ├── AuthenticationError
    └── PermissionDeniedError
"""

from typing import Any, Dict, Optional


class CatalogoException(Exception):
    """
    Excepción base para todos los errores del catálogo.

    Attributes:
        message: Mensaje legible para el usuario
        details: Contexto adicional (ids de entidades, campos, etc.)
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


# ========================================
# ENTIDADES INEXISTENTES
# ========================================

class NotFoundError(CatalogoException):
    """El id de la entidad no existe."""

    def __init__(self, entity: str, entity_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"{entity.capitalize()} {entity_id} no encontrada",
            details={'entity': entity, 'entity_id': entity_id}
        )
        self.entity = entity
        self.entity_id = entity_id


class ParentNotFoundError(NotFoundError):
    """La entidad padre referenciada no existe."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(entity, entity_id, message=f"La {entity} seleccionada ({entity_id}) no existe")


class ProductNotFoundError(NotFoundError):
    """El producto referenciado no existe."""

    def __init__(self, producto_id: Any):
        super().__init__("producto", producto_id, message=f"Producto {producto_id} no encontrado")


# ========================================
# VALIDACIÓN DE CAMPOS
# ========================================

class ValidationFailedError(CatalogoException):
    """Un campo viola una restricción. Lleva el nombre del campo y la regla."""

    def __init__(self, field: str, rule: str):
        super().__init__(
            f"El campo '{field}' no es válido: {rule}",
            details={'field': field, 'rule': rule}
        )
        self.field = field
        self.rule = rule


class InvalidQuantityError(ValidationFailedError):
    """Cantidad fuera de rango en el carrito o en el stock."""

    def __init__(self, cantidad: int, rule: str = "la cantidad debe ser al menos 1"):
        super().__init__("cantidad", rule)
        self.details['cantidad'] = cantidad
        self.cantidad = cantidad


# ========================================
# JERARQUÍA Y ACTIVACIÓN
# ========================================

class ParentInactiveError(CatalogoException):
    """La entidad padre existe pero está inactiva."""

    def __init__(self, entity: str, entity_id: Any, child: str):
        super().__init__(
            f"No se puede crear o activar una {child} en una {entity} inactiva ({entity_id})",
            details={'entity': entity, 'entity_id': entity_id, 'child': child}
        )
        self.entity = entity
        self.entity_id = entity_id
        self.child = child


class ProductInactiveError(CatalogoException):
    """El producto existe pero está inactivo y no puede añadirse al carrito."""

    def __init__(self, producto_id: int):
        super().__init__(
            f"El producto {producto_id} no está disponible",
            details={'producto_id': producto_id}
        )
        self.producto_id = producto_id


class InconsistentHierarchyError(CatalogoException):
    """La subcategoría indicada no pertenece a la categoría indicada."""

    def __init__(self, subcategoria_id: int, categoria_id: int, categoria_real_id: int):
        super().__init__(
            f"La subcategoría {subcategoria_id} no pertenece a la categoría {categoria_id}",
            details={
                'subcategoria_id': subcategoria_id,
                'categoria_id': categoria_id,
                'categoria_real_id': categoria_real_id,
            }
        )
        self.subcategoria_id = subcategoria_id
        self.categoria_id = categoria_id
        self.categoria_real_id = categoria_real_id


class CascadeWriteFailureError(CatalogoException):
    """Falló una escritura durante la desactivación en cascada."""

    def __init__(
        self,
        entity: str,
        parent_kind: str,
        parent_id: int,
        cause: BaseException,
        descendant_id: Optional[int] = None,
    ):
        message = f"Error al desactivar {entity} de la {parent_kind} {parent_id}"
        if descendant_id is not None:
            message += f" (primer fallo: id {descendant_id})"
        super().__init__(
            message,
            details={
                'entity': entity,
                'parent_kind': parent_kind,
                'parent_id': parent_id,
                'descendant_id': descendant_id,
            }
        )
        self.descendant_id = descendant_id
        self.entity = entity
        self.parent_kind = parent_kind
        self.parent_id = parent_id
        self.cause = cause


# ========================================
# STOCK Y UNICIDAD
# ========================================

class InsufficientStockError(CatalogoException):
    """No hay stock suficiente para la cantidad solicitada."""

    def __init__(self, producto_id: int, solicitado: int, disponible: Optional[int] = None):
        message = f"Stock insuficiente para el producto {producto_id}. Solicitado: {solicitado}"
        if disponible is not None:
            message += f", Disponible: {disponible}"
        super().__init__(
            message,
            details={'producto_id': producto_id, 'solicitado': solicitado, 'disponible': disponible}
        )
        self.producto_id = producto_id
        self.solicitado = solicitado
        self.disponible = disponible


class DuplicateEntryError(CatalogoException):
    """Violación de unicidad (nombre repetido en su ámbito, fila de carrito duplicada...)."""

    def __init__(self, entity: str, field: str, value: Any):
        super().__init__(
            f"Ya existe una {entity} con {field} '{value}'",
            details={'entity': entity, 'field': field, 'value': value}
        )
        self.entity = entity
        self.field = field
        self.value = value


# ========================================
# AUTENTICACIÓN
# ========================================

class AuthenticationError(CatalogoException):
    """Token ausente, inválido o expirado."""

    def __init__(self, reason: str = "Token inválido o expirado"):
        super().__init__(reason)


class PermissionDeniedError(CatalogoException):
    """El usuario autenticado no tiene el rol requerido."""

    def __init__(self, rol_requerido: str):
        super().__init__(
            f"Se requiere el rol '{rol_requerido}'",
            details={'rol_requerido': rol_requerido}
        )
        self.rol_requerido = rol_requerido
