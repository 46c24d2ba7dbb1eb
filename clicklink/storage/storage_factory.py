"""
Storage factory – switch storage backend from config
====================================================

Centralizes selection of the storage backend so the rest of the app stays
ignorant of where links live.

- Reads the environment **at call time** to avoid stale values in tests.
- Only the in-memory backend ships; persistence across restarts is out of
  scope.

Environment variables
---------------------
- CLICKLINK_STORAGE_BACKEND: "memory" (default)
"""

import logging
import os
from typing import Optional

from clicklink.storage.base import BaseStorage
from clicklink.storage.storage import Storage

log = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None) -> BaseStorage:
    """
    Return a storage object based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" (default). If omitted, reads CLICKLINK_STORAGE_BACKEND.

    Raises
    ------
    ValueError
        For an unknown backend name.
    """
    be = (backend or os.getenv("CLICKLINK_STORAGE_BACKEND", "memory")).strip().lower()
    log.debug("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    raise ValueError(f"Unknown storage backend: {be!r}")
