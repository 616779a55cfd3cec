# backend/catalogo/schemas/producto_schema.py
"""
Esquemas Pydantic para el modelo Producto.

El nombre de la imagen se valida con la misma expresión que usa el servicio de
almacenamiento: solo archivos jpg, jpeg, png o gif.
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

IMAGEN_PATTERN = re.compile(r"^[\w,\s-]+\.(jpg|jpeg|png|gif)$", re.IGNORECASE)


def _validar_imagen(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not IMAGEN_PATTERN.match(value):
        raise ValueError("La imagen debe ser un archivo jpg, jpeg, png o gif")
    return value


# ========================================
# ESQUEMA BASE
# ========================================

class ProductoBase(BaseModel):
    """Propiedades comunes compartidas entre esquemas de producto."""
    nombre: str = Field(..., min_length=2, max_length=200)
    descripcion: Optional[str] = None
    precio: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)
    imagen: Optional[str] = Field(None, max_length=255)
    subcategoria_id: int
    categoria_id: int


# ========================================
# ESQUEMAS PARA OPERACIONES
# ========================================

class ProductoCreate(ProductoBase):
    activo: bool = True

    @field_validator("imagen")
    @classmethod
    def validar_imagen(cls, value):
        return _validar_imagen(value)


class ProductoUpdate(BaseModel):
    """Esquema para actualizar un producto. Todos los campos son opcionales."""
    nombre: Optional[str] = Field(None, min_length=2, max_length=200)
    descripcion: Optional[str] = None
    precio: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    imagen: Optional[str] = Field(None, max_length=255)
    subcategoria_id: Optional[int] = None
    categoria_id: Optional[int] = None
    activo: Optional[bool] = None

    @field_validator("imagen")
    @classmethod
    def validar_imagen(cls, value):
        return _validar_imagen(value)


class StockMovimiento(BaseModel):
    """Cantidad para aumentar o reducir el stock de un producto."""
    cantidad: int


# ========================================
# ESQUEMA DE RESPUESTA
# ========================================

class ProductoResponse(ProductoBase):
    id: int
    activo: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
