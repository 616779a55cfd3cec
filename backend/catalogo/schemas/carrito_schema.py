# backend/catalogo/schemas/carrito_schema.py
"""
Esquemas Pydantic para la gestión del carrito de la compra.
"""

from decimal import Decimal
from typing import List
from pydantic import BaseModel, ConfigDict

class CarritoItemCreate(BaseModel):
    """Esquema para añadir un producto al carrito."""
    producto_id: int
    cantidad: int = 1

class CarritoItemUpdate(BaseModel):
    """Nueva cantidad de una línea; 0 la elimina."""
    cantidad: int

class CarritoItemResponse(BaseModel):
    id: int
    usuario_id: int
    producto_id: int
    cantidad: int
    precio_unitario: Decimal
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)

class Carrito(BaseModel):
    """Esquema que representa el estado completo del carrito."""
    items: List[CarritoItemResponse]
    total_items: int
    total: Decimal
