# backend/catalogo/db/models/usuario_model.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, true
from catalogo.db.database import Base

ROL_CLIENTE = "cliente"
ROL_ADMINISTRADOR = "administrador"

class Usuario(Base):
    """Usuario autenticado. Solo se usa como dueño del carrito y para comprobar el rol."""
    __tablename__ = "usuarios"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    nombre = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    rol = Column(String(20), nullable=False, default=ROL_CLIENTE)
    activo = Column(Boolean, nullable=False, default=True, server_default=true())

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    lineas_carrito = relationship("Carrito", back_populates="usuario", cascade="all, delete", passive_deletes=True)
