# backend/catalogo/db/models/categoria_model.py
"""
Modelo de categorías principales del catálogo.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, true
from catalogo.db.database import Base

class Categoria(Base):
    """
    Categoría raíz del catálogo. Si se desactiva, todas sus subcategorías y
    productos se desactivan con ella (ver services/cascade_service.py).
    """
    __tablename__ = "categorias"
    # Recupera created_at/updated_at generados por el servidor tras cada flush
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    nombre = Column(String(100), nullable=False, unique=True)
    descripcion = Column(Text, nullable=True)
    activo = Column(Boolean, nullable=False, default=True, server_default=true())

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # El borrado en cascada lo hace la base de datos (ON DELETE CASCADE)
    subcategorias = relationship("Subcategoria", back_populates="categoria", cascade="all, delete", passive_deletes=True)
    productos = relationship("Producto", back_populates="categoria", cascade="all, delete", passive_deletes=True)
