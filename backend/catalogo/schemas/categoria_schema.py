# backend/catalogo/schemas/categoria_schema.py

"""
Esquemas Pydantic para el modelo Categoria.

Patrón de esquemas utilizado:
- CategoriaBase: Propiedades comunes compartidas
- CategoriaCreate: Para crear nuevas categorías (POST)
- CategoriaUpdate: Para actualizar categorías existentes (PUT/PATCH)
- CategoriaResponse: Para respuestas de la API (GET)
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

# ========================================
# ESQUEMA BASE
# ========================================

class CategoriaBase(BaseModel):
    """Propiedades comunes compartidas entre esquemas de categoría."""
    nombre: str = Field(..., min_length=2, max_length=100)
    descripcion: Optional[str] = None


# ========================================
# ESQUEMAS PARA OPERACIONES
# ========================================

class CategoriaCreate(CategoriaBase):
    """Esquema para crear una nueva categoría. El ID lo genera la base de datos."""
    activo: bool = True


class CategoriaUpdate(BaseModel):
    """Esquema para actualizar una categoría. Todos los campos son opcionales."""
    nombre: Optional[str] = Field(None, min_length=2, max_length=100)
    descripcion: Optional[str] = None
    activo: Optional[bool] = None


# ========================================
# ESQUEMAS DE RESPUESTA
# ========================================

class CategoriaResponse(CategoriaBase):
    """Esquema para las respuestas de la API al leer categorías."""
    id: int
    activo: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CategoriaResumen(BaseModel):
    """Conteo de descendientes de una categoría."""
    categoria_id: int
    subcategorias: int
    productos: int
    productos_activos: int


class CategoriaUpdateResponse(CategoriaResponse):
    """Respuesta de actualización: incluye cuántos descendientes se desactivaron en cascada."""
    descendientes_desactivados: int = 0
