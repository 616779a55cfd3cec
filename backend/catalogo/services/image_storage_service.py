# backend/catalogo/services/image_storage_service.py
"""
Almacenamiento en disco de las imágenes de productos.

Las imágenes se guardan en settings.UPLOAD_PATH con el formato
<timestamp en ms>-<nombre original>, y en la base de datos solo se guarda el
nombre del archivo. Solo se aceptan jpg, jpeg, png y gif.

El borrado es de mejor esfuerzo: si el archivo no existe o no se puede borrar
se registra un aviso, pero la operación que lo provocó no falla.
"""

import logging
import re
import time
from pathlib import Path
from typing import Iterable, Optional

from fastapi import UploadFile

from catalogo.core.config import Settings
from catalogo.core.exceptions import ValidationFailedError

logger = logging.getLogger(__name__)

EXTENSIONES_PERMITIDAS = {".jpg", ".jpeg", ".png", ".gif"}
TIPOS_PERMITIDOS = {"image/jpeg", "image/jpg", "image/png", "image/gif"}
_CARACTERES_NO_VALIDOS = re.compile(r"[^\w,\s-]")


class ImageStorageService:
    """
    Guarda y elimina archivos de imagen en el directorio de subidas.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.upload_path = Path(settings.UPLOAD_PATH)

    def ensure_upload_dir(self) -> None:
        """Crea la carpeta de subidas si no existe."""
        if not self.upload_path.exists():
            self.upload_path.mkdir(parents=True, exist_ok=True)
            logger.info(f"Carpeta {self.upload_path} creada")

    def build_filename(self, original_name: str) -> str:
        """
        Genera un nombre único usando timestamp + nombre original saneado.

        El resultado siempre cumple el patrón de imagen del modelo Producto.
        """
        path = Path(original_name or "")
        extension = path.suffix.lower()
        if extension not in EXTENSIONES_PERMITIDAS:
            raise ValidationFailedError("imagen", "solo se permiten imágenes (jpg, jpeg, png, gif)")
        stem = _CARACTERES_NO_VALIDOS.sub("-", path.stem).strip() or "imagen"
        return f"{int(time.time() * 1000)}-{stem}{extension}"

    async def save(self, upload: UploadFile) -> str:
        """
        Valida y guarda un archivo subido.

        Returns:
            Nombre del archivo guardado (sin ruta)

        Raises:
            ValidationFailedError: tipo de archivo no permitido o tamaño excesivo
        """
        if upload.content_type and upload.content_type not in TIPOS_PERMITIDOS:
            raise ValidationFailedError("imagen", "solo se permiten imágenes (jpg, jpeg, png, gif)")
        filename = self.build_filename(upload.filename)

        content = await upload.read()
        if len(content) > self.settings.MAX_IMAGE_SIZE:
            raise ValidationFailedError(
                "imagen", f"el archivo supera el tamaño máximo de {self.settings.MAX_IMAGE_SIZE} bytes"
            )

        self.ensure_upload_dir()
        (self.upload_path / filename).write_bytes(content)
        logger.info(f"Imagen guardada: {filename} ({len(content)} bytes)")
        return filename

    def delete(self, filename: Optional[str]) -> bool:
        """
        Elimina una imagen. Nunca lanza excepciones.

        Returns:
            True si el archivo se borró, False en cualquier otro caso
        """
        if not filename:
            return False
        path = self.upload_path / Path(filename).name
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"La imagen {filename} no existe en {self.upload_path}")
            return False
        except OSError as e:
            logger.warning(f"No se pudo eliminar la imagen {filename}: {e}")
            return False
        logger.info(f"Imagen eliminada: {filename}")
        return True

    def delete_many(self, filenames: Iterable[Optional[str]]) -> int:
        """Elimina varias imágenes y devuelve cuántas se borraron."""
        return sum(1 for filename in filenames if self.delete(filename))
