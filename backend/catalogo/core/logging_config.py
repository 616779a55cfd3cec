# backend/catalogo/core/logging_config.py
"""
Configuración centralizada del logging a partir de los valores LOG_* de settings.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from catalogo.core.config import settings


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configura el logger raíz con salida por consola y, si hay ruta, un archivo rotativo.

    Es idempotente: los handlers instalados previamente por esta función se reemplazan.
    """
    level = (level or settings.LOG_LEVEL).upper()
    log_file = log_file if log_file is not None else settings.LOG_FILE_PATH
    formatter = logging.Formatter(settings.LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_catalogo_handler", False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler._catalogo_handler = True
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler._catalogo_handler = True
        root_logger.addHandler(file_handler)

    # Las sentencias SQL solo se muestran si SQL_ECHO está activo
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.SQL_ECHO else logging.WARNING)
