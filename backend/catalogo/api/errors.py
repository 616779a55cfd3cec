# backend/catalogo/api/errors.py
"""
Traducción de las excepciones de dominio a respuestas HTTP.

Los servicios nunca lanzan HTTPException; aquí se decide el código de estado
de cada tipo de error. El cuerpo de la respuesta siempre tiene la forma:

    {"detail": <mensaje>, "error": <nombre de la excepción>, ...detalles}
"""

import logging
from typing import Dict, Type

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalogo.core.exceptions import (
    AuthenticationError,
    CascadeWriteFailureError,
    CatalogoException,
    DuplicateEntryError,
    InconsistentHierarchyError,
    InsufficientStockError,
    NotFoundError,
    ParentInactiveError,
    PermissionDeniedError,
    ProductInactiveError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

# Se recorre en orden: las subclases heredan el código de su clase base
STATUS_CODES: Dict[Type[CatalogoException], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationFailedError: status.HTTP_400_BAD_REQUEST,
    ParentInactiveError: status.HTTP_409_CONFLICT,
    ProductInactiveError: status.HTTP_409_CONFLICT,
    InconsistentHierarchyError: status.HTTP_409_CONFLICT,
    InsufficientStockError: status.HTTP_409_CONFLICT,
    DuplicateEntryError: status.HTTP_409_CONFLICT,
    CascadeWriteFailureError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
}


def status_code_for(exc: CatalogoException) -> int:
    for exc_type, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def catalogo_exception_handler(request: Request, exc: CatalogoException) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc!r}", exc_info=exc)
    else:
        logger.info(f"⚠️ {request.method} {request.url.path} -> {status_code}: {exc.message}")

    content = {"detail": exc.message, "error": exc.__class__.__name__}
    content.update({k: v for k, v in exc.details.items() if k not in content})
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Restricciones de campo incumplidas en la petición (longitud, mínimos, formato).

    Se responden como ValidationFailedError (400) con el primer campo y su
    regla; la lista completa va en "errores".
    """
    errores = [
        {"field": _nombre_campo(error["loc"]), "rule": error["msg"]}
        for error in exc.errors()
    ]
    primero = errores[0] if errores else {"field": "body", "rule": "petición no válida"}
    error = ValidationFailedError(primero["field"], primero["rule"])
    error.details["errores"] = errores
    return await catalogo_exception_handler(request, error)


def _nombre_campo(loc) -> str:
    # loc = ("body", "nombre") | ("query", "limit") | ("body",)
    partes = [str(p) for p in loc[1:]] or [str(p) for p in loc]
    return ".".join(partes)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Errores no clasificados: se registran completos y el cliente recibe un mensaje genérico."""
    logger.error(f"❌ Error no controlado en {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Error interno del servidor", "error": "InternalServerError"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogoException, catalogo_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
