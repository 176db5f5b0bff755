from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from querychain import QueryBuilder

pytestmark = pytest.mark.anyio
here = Path(__file__).parent
root_path = here.parent


class MockConnection:
    """Stand-in for a pooled driver connection."""

    def __init__(self, driver: Any = "mysql", result: Any = None) -> None:
        self.driver = driver
        self.query = AsyncMock(return_value=[] if result is None else result)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def connection() -> MockConnection:
    return MockConnection()


@pytest.fixture
def pg_connection() -> MockConnection:
    return MockConnection("postgresql")


@pytest.fixture
def sqlite_connection() -> MockConnection:
    return MockConnection("sqlite")


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    """The querychain logger, restored after tests that reconfigure it."""
    logger = logging.getLogger("querychain")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def builder(connection: MockConnection) -> QueryBuilder:
    return QueryBuilder(connection)
