# backend/catalogo/schemas/subcategoria_schema.py
"""
Esquemas Pydantic para el modelo Subcategoria.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class SubcategoriaBase(BaseModel):
    nombre: str = Field(..., min_length=2, max_length=100)
    descripcion: Optional[str] = None
    categoria_id: int


class SubcategoriaCreate(SubcategoriaBase):
    activo: bool = True


class SubcategoriaUpdate(BaseModel):
    """Todos los campos son opcionales; cambiar categoria_id mueve la subcategoría."""
    nombre: Optional[str] = Field(None, min_length=2, max_length=100)
    descripcion: Optional[str] = None
    categoria_id: Optional[int] = None
    activo: Optional[bool] = None


class SubcategoriaResponse(SubcategoriaBase):
    id: int
    activo: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubcategoriaUpdateResponse(SubcategoriaResponse):
    descendientes_desactivados: int = 0


class SubcategoriaResumen(BaseModel):
    subcategoria_id: int
    productos: int
    productos_activos: int
