# backend/catalogo/db/models/producto_model.py
from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Boolean, DateTime, ForeignKey,
    UniqueConstraint, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, true

from catalogo.db.database import Base

class Producto(Base):
    """
    Producto del catálogo.

    Guarda tanto subcategoria_id como categoria_id; categoria_id debe coincidir
    siempre con la categoría de su subcategoría. imagen almacena solo el nombre
    del archivo (p. ej. 1718000000000-coca-cola.jpg) dentro de UPLOAD_PATH.
    """
    __tablename__ = "productos"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    nombre = Column(String(200), nullable=False)
    descripcion = Column(Text, nullable=True)
    precio = Column(Numeric(10, 2), nullable=False)  # hasta 99.999.999,99
    stock = Column(Integer, nullable=False, default=0, server_default="0")
    imagen = Column(String(255), nullable=True)
    subcategoria_id = Column(
        Integer,
        ForeignKey("subcategorias.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )
    categoria_id = Column(
        Integer,
        ForeignKey("categorias.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )
    activo = Column(Boolean, nullable=False, default=True, server_default=true())

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    subcategoria = relationship("Subcategoria", back_populates="productos")
    categoria = relationship("Categoria", back_populates="productos")
    lineas_carrito = relationship("Carrito", back_populates="producto", cascade="all, delete", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint('nombre', 'categoria_id', name='uq_producto_nombre_categoria'),
        CheckConstraint('precio >= 0', name='ck_producto_precio_no_negativo'),
        CheckConstraint('stock >= 0', name='ck_producto_stock_no_negativo'),
        Index('ix_productos_subcategoria_id', 'subcategoria_id'),
        Index('ix_productos_categoria_id', 'categoria_id'),
        Index('ix_productos_activo', 'activo'),
        Index('ix_productos_nombre', 'nombre'),
    )
