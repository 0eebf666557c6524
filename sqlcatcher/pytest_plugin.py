"""pytest fixtures for suites using the fake driver.

Enable with ``pytest_plugins = ["sqlcatcher.pytest_plugin"]`` in a
``conftest.py``.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from .catalog import ResponseCatalog, catcher
from .connection import Connection, connect


@pytest.fixture
def sql_catcher() -> Iterator[ResponseCatalog]:
    """A fresh catalog, reset once the test finishes."""

    catalog = ResponseCatalog()
    yield catalog
    catalog.reset()


@pytest.fixture
def sql_connection(sql_catcher: ResponseCatalog) -> Iterator[Connection]:
    connection = connect(sql_catcher)
    yield connection
    connection.close()


@pytest.fixture
def default_catcher() -> Iterator[ResponseCatalog]:
    """The process-wide catalog, emptied before and after the test."""

    catcher.reset()
    yield catcher
    catcher.reset()
