"""
Importar todos los modelos aquí asegura que las relaciones declaradas por
nombre ("Producto", "Carrito"...) se resuelvan y que create_all cree todas las tablas.
"""

from catalogo.db.models.categoria_model import Categoria
from catalogo.db.models.subcategoria_model import Subcategoria
from catalogo.db.models.producto_model import Producto
from catalogo.db.models.carrito_model import Carrito
from catalogo.db.models.usuario_model import Usuario

__all__ = ["Categoria", "Subcategoria", "Producto", "Carrito", "Usuario"]
