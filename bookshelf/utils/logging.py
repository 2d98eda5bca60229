"""Logging helpers.

One stream handler on the ``bookshelf`` logger; SQL statements go to
``bookshelf.sa.query`` whose level follows ``SQL_LOG_LEVEL``.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from bookshelf.config import get_settings

QUERY_LOGGER = "bookshelf.sa.query"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_LOCK = threading.Lock()
_CONFIGURED = False


def configure_logging(level: Optional[str] = None, sql_level: Optional[str] = None) -> logging.Logger:
    global _CONFIGURED
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    sql_level_name = (sql_level or settings.sql_log_level).upper()

    with _LOCK:
        root = logging.getLogger("bookshelf")
        root.setLevel(getattr(logging, level_name, logging.INFO))
        if not _CONFIGURED:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(handler)
            root.propagate = False
            _CONFIGURED = True
        logging.getLogger(QUERY_LOGGER).setLevel(getattr(logging, sql_level_name, logging.INFO))
    return root


__all__ = ["configure_logging", "QUERY_LOGGER"]
