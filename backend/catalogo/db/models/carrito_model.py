# backend/catalogo/db/models/carrito_model.py
"""
Modelo de líneas de carrito: los productos que cada usuario ha añadido.
"""

from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from catalogo.db.database import Base

class Carrito(Base):
    __tablename__ = "carritos"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(
        Integer,
        ForeignKey("usuarios.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    producto_id = Column(
        Integer,
        ForeignKey("productos.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )
    cantidad = Column(Integer, nullable=False, default=1)
    # Precio del producto al momento de agregarlo; no cambia si el producto cambia de precio
    precio_unitario = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    usuario = relationship("Usuario", back_populates="lineas_carrito")
    producto = relationship("Producto", back_populates="lineas_carrito")

    __table_args__ = (
        # Un usuario no puede tener el mismo producto duplicado
        UniqueConstraint('usuario_id', 'producto_id', name='uq_carrito_usuario_producto'),
        CheckConstraint('cantidad >= 1', name='ck_carrito_cantidad_minima'),
        CheckConstraint('precio_unitario >= 0', name='ck_carrito_precio_no_negativo'),
    )

    @property
    def subtotal(self):
        return self.precio_unitario * self.cantidad
