# backend/catalogo/crud/locks.py
"""
Bloqueo de filas para las lecturas que deciden una escritura posterior.

En PostgreSQL (read committed) un SELECT simple no bloquea nada: un padre
podría desactivarse entre la comprobación y el INSERT del hijo. Con
FOR SHARE el hijo retiene la fila del padre hasta el commit, y la
desactivación (FOR UPDATE) espera o se hace esperar.

SQLite ignora estas cláusulas; allí BEGIN IMMEDIATE ya serializa las escrituras.
"""

from typing import Optional

from sqlalchemy import Select

LOCK_SHARE = "share"
LOCK_UPDATE = "update"


def with_lock(query: Select, lock: Optional[str]) -> Select:
    """Añade FOR SHARE / FOR UPDATE a la consulta y recarga la instancia de la sesión."""
    if lock is None:
        return query
    if lock not in (LOCK_SHARE, LOCK_UPDATE):
        raise ValueError(f"Modo de bloqueo desconocido: {lock}")
    # populate_existing: la fila bloqueada puede haber cambiado desde que se cargó
    return query.with_for_update(read=lock == LOCK_SHARE).execution_options(populate_existing=True)
