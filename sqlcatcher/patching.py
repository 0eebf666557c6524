"""Route ``psycopg.connect`` to the fake driver."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List

import psycopg

from .catalog import ResponseCatalog
from .connection import Connection, connect

logger = logging.getLogger(__name__)


@contextmanager
def patch_psycopg(catalog: ResponseCatalog | None = None, **connect_kwargs: Any) -> Iterator[List[Connection]]:
    """Replace :func:`psycopg.connect` while the context is active.

    Code under test keeps calling ``psycopg.connect(dsn, autocommit=...)`` and
    receives fake connections using the ``%s`` placeholder style.  The
    connections handed out are collected in the yielded list.
    """

    original = psycopg.connect
    opened: List[Connection] = []

    def _connect(conninfo: str = "", **kwargs: Any) -> Connection:
        options = {**kwargs, **connect_kwargs}
        options.setdefault("paramstyle", "format")
        connection = connect(catalog, conninfo=conninfo, **options)
        opened.append(connection)
        return connection

    psycopg.connect = _connect  # type: ignore[assignment]
    logger.debug("psycopg.connect patched with the fake driver")
    try:
        yield opened
    finally:
        psycopg.connect = original  # type: ignore[assignment]


__all__ = ["patch_psycopg"]
