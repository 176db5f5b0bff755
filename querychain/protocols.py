"""Runtime-checkable protocols for querychain to replace duck typing.

This module provides protocols that can be used for static type checking
and runtime isinstance() checks, replacing defensive hasattr() patterns.
"""

from collections.abc import Sequence
from typing import Any, Optional, Protocol, runtime_checkable

__all__ = (
    "ConnectionProtocol",
    "SubqueryProviderProtocol",
)


@runtime_checkable
class ConnectionProtocol(Protocol):
    """Protocol for the connection a statement executes on.

    The connection is owned by the caller. Builders only call ``query`` and
    read ``driver`` to pick the date-part dialect.
    """

    driver: Any

    async def query(self, sql: str, values: Optional[Sequence[Any]] = None) -> Any:
        """Execute ``sql`` with positional ``values`` and return the driver result."""
        ...


@runtime_checkable
class SubqueryProviderProtocol(Protocol):
    """Protocol for a statement that can be embedded in another one."""

    def build(self, subquery: bool = False) -> str:
        """Render the statement, without the terminator when ``subquery`` is set."""
        ...

    def get_values(self) -> list[Any]:
        """Return the flattened bound values of the statement."""
        ...
