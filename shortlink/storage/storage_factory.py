"""
Storage factory – pick the storage backend from settings
========================================================

Centralizes selection of the storage backend (in-memory vs PostgreSQL) so
the rest of the app stays ignorant of where mappings live.

- Takes an explicit `Settings`; never reads the environment itself.
- Imports the DB backend **only if** the selected backend is "postgres",
  so the in-memory path has no psycopg import cost.
"""

import logging
from typing import Optional

from shortlink.config import Settings
from shortlink.storage.base import BaseStorage
from shortlink.storage.storage import Storage

log = logging.getLogger(__name__)


def get_storage(settings: Settings, backend: Optional[str] = None) -> BaseStorage:
    """
    Return a BaseStorage implementation for the configured backend.

    Parameters
    ----------
    settings : Settings
        Supplies `storage_backend`, `db_dsn` and `db_timeout`.
    backend : str, optional
        Overrides `settings.storage_backend` ("memory" or "postgres").

    Raises
    ------
    ValueError
        Unknown backend, or "postgres" without a DSN.
    """
    be = (backend or settings.storage_backend or "memory").strip().lower()
    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        if not settings.db_dsn:
            raise ValueError("DB DSN is required for postgres backend (env SHORTLINK_DB_DSN)")
        from shortlink.storage.db_storage import DBStorage
        return DBStorage(dsn=settings.db_dsn, timeout=settings.db_timeout)

    raise ValueError(f"Unknown storage backend: {be!r}")
