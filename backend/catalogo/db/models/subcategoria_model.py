# backend/catalogo/db/models/subcategoria_model.py
"""
Modelo de subcategorías. Cada subcategoría pertenece a exactamente una categoría.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, true
from catalogo.db.database import Base

class Subcategoria(Base):
    __tablename__ = "subcategorias"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    nombre = Column(String(100), nullable=False)
    descripcion = Column(Text, nullable=True)
    categoria_id = Column(
        Integer,
        ForeignKey("categorias.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    activo = Column(Boolean, nullable=False, default=True, server_default=true())

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    categoria = relationship("Categoria", back_populates="subcategorias")
    productos = relationship("Producto", back_populates="subcategoria", cascade="all, delete", passive_deletes=True)

    __table_args__ = (
        # Dos categorías distintas pueden tener subcategorías con el mismo nombre
        UniqueConstraint('nombre', 'categoria_id', name='uq_subcategoria_nombre_categoria'),
    )
