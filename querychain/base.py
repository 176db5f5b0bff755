"""Entry point tying the statement builders to one connection."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Optional

from querychain.builder import Delete, Insert, Select, Update
from querychain.config import BuilderConfig
from querychain.exceptions import QueryError
from querychain.utils.logging import configure_logging, get_logger
from querychain.utils.type_guards import is_connection

if TYPE_CHECKING:
    from querychain.protocols import ConnectionProtocol

__all__ = ("QueryBuilder",)

logger = get_logger("base")


class QueryBuilder:
    """Create statement builders bound to a single connection.

    Example:
        ::

            builder = QueryBuilder(connection)
            users = await builder.select().from_("users").where(lambda col: col("age").greater_than(18)).exec()
            await builder.insert().into("users").row({"email": "a@b.c", "password": "secret"}).exec()
    """

    def __init__(self, connection: "ConnectionProtocol", config: Optional[BuilderConfig] = None) -> None:
        """Initialize the builder.

        Args:
            connection: The connection every created statement executes on.
            config: Settings forwarded to every created statement. When its
                ``log_level`` is set, querychain's log handler is installed.

        Raises:
            QueryError: If the connection does not implement ``ConnectionProtocol``.
        """
        self._connection = self._validate(connection)
        self.config = config if config is not None else BuilderConfig()
        if self.config.log_level is not None:
            configure_logging(self.config.log_level, structured=self.config.structured_logs)

    @staticmethod
    def _validate(connection: Any) -> "ConnectionProtocol":
        if not is_connection(connection):
            msg = f"Invalid connection: {connection!r}"
            raise QueryError(msg)
        return connection

    def get_connection(self) -> "ConnectionProtocol":
        """Return the current connection.

        Raises:
            QueryError: If the stored connection is no longer valid.
        """
        return self._validate(self._connection)

    def set_connection(self, connection: "ConnectionProtocol") -> None:
        """Replace the connection used by builders created from now on.

        Raises:
            QueryError: If the connection does not implement ``ConnectionProtocol``.
        """
        self._connection = self._validate(connection)
        logger.debug("Connection replaced", extra={"extra_fields": {"driver": str(connection.driver)}})

    async def raw(self, sql: str, values: Optional[Sequence[Any]] = None) -> Any:
        """Execute ``sql`` on the connection as given."""
        return await self._connection.query(sql, values)

    def select(self) -> Select:
        return Select(self._connection, self.config)

    def insert(self) -> Insert:
        return Insert(self._connection, self.config)

    def update(self) -> Update:
        return Update(self._connection, self.config)

    def delete(self) -> Delete:
        return Delete(self._connection, self.config)
