# backend/catalogo/api/v1/endpoints/carrito.py
"""
Este archivo contiene los endpoints para el carrito de compras.

El carrito siempre es el del usuario autenticado: el id se toma del token,
nunca de la URL ni del cuerpo de la petición.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalogo.api import deps
from catalogo.db.models.usuario_model import Usuario
from catalogo.schemas import carrito_schema
from catalogo.services.carrito_service import carrito_service

router = APIRouter()

@router.get("/", response_model=carrito_schema.Carrito)
async def get_carrito(
    db: AsyncSession = Depends(deps.get_db),
    usuario: Usuario = Depends(deps.get_current_usuario),
):
    """Obtiene el contenido del carrito con subtotales y total."""
    return await carrito_service.get_cart(db, usuario.id)

@router.post("/items", status_code=status.HTTP_201_CREATED, response_model=carrito_schema.CarritoItemResponse)
async def add_item(
    item: carrito_schema.CarritoItemCreate,
    response: Response,
    db: AsyncSession = Depends(deps.get_db),
    usuario: Usuario = Depends(deps.get_current_usuario),
):
    """
    Añade un producto al carrito, verificando el stock disponible.

    Si el producto ya estaba en el carrito se suma la cantidad y se mantiene
    el precio con el que se añadió la primera vez. Responde 201 si se creó la
    línea y 200 si solo se incrementó.
    """
    linea = await carrito_service.add_to_cart(db, usuario.id, item.producto_id, item.cantidad)
    # Una línea existente ya tenía al menos 1 unidad: tras sumar nunca coincide
    if linea.cantidad != item.cantidad:
        response.status_code = status.HTTP_200_OK
    return linea

@router.put("/items/{producto_id}", response_model=carrito_schema.Carrito)
async def update_item(
    producto_id: int,
    item: carrito_schema.CarritoItemUpdate,
    db: AsyncSession = Depends(deps.get_db),
    usuario: Usuario = Depends(deps.get_current_usuario),
):
    """Cambia la cantidad de un producto del carrito; 0 lo elimina."""
    await carrito_service.update_quantity(db, usuario.id, producto_id, item.cantidad)
    return await carrito_service.get_cart(db, usuario.id)

@router.delete("/items/{producto_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_item(
    producto_id: int,
    db: AsyncSession = Depends(deps.get_db),
    usuario: Usuario = Depends(deps.get_current_usuario),
):
    await carrito_service.remove_from_cart(db, usuario.id, producto_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def clear_carrito(
    db: AsyncSession = Depends(deps.get_db),
    usuario: Usuario = Depends(deps.get_current_usuario),
):
    """Vacía el carrito del usuario."""
    await carrito_service.clear_cart(db, usuario.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
