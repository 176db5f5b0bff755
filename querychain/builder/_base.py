"""Shared lifecycle for the statement builders.

A statement owns its clause state and a value sink, renders SQL with ``?``
placeholders in :meth:`Statement.build`, and hands the SQL plus the flattened
values to the injected connection in :meth:`Statement.exec`.
"""

from abc import abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Generic, Optional

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError as SQLGlotParseError
from sqlglot.errors import TokenError as SQLGlotTokenError

from querychain.builder._condition import Condition, ConditionOwner
from querychain.config import BuilderConfig
from querychain.dialects import Dialect, get_dialect
from querychain.exceptions import QueryError, SQLParsingError
from querychain.typing import QueryResultT
from querychain.utils.logging import correlation_scope, get_logger
from querychain.utils.type_guards import is_connection

if TYPE_CHECKING:
    from typing_extensions import Self

    from querychain.builder._select import Select
    from querychain.protocols import ConnectionProtocol
    from querychain.typing import ConditionCallback

__all__ = ("Statement",)

logger = get_logger("builder")


class Statement(ConditionOwner, Generic[QueryResultT]):
    """Base class for SQL statement builders."""

    def __init__(self, connection: "ConnectionProtocol", config: Optional[BuilderConfig] = None) -> None:
        """Initialize the builder.

        Args:
            connection: The connection used to execute the statement.
            config: Builder settings. Defaults to :class:`BuilderConfig`.

        Raises:
            QueryError: If the connection does not implement ``ConnectionProtocol``.
        """
        if not is_connection(connection):
            msg = f"Invalid connection: {connection!r}"
            raise QueryError(msg)
        self._connection = connection
        self._config = config if config is not None else BuilderConfig()
        self._dialect: Optional[Dialect] = None

    def __str__(self) -> str:
        return self.to_sql()

    @property
    def connection(self) -> "ConnectionProtocol":
        return self._connection

    @property
    def config(self) -> BuilderConfig:
        return self._config

    @property
    def dialect(self) -> Dialect:
        """Date-part dialect for the connection's driver, selected on first use."""
        if self._dialect is None:
            self._dialect = get_dialect(self._connection.driver)
        return self._dialect

    @abstractmethod
    def build(self) -> str:
        """Render the statement.

        Raises:
            QueryError: If required state is missing or a condition is invalid.
        """

    @abstractmethod
    def reset(self) -> "Self":
        """Return every clause and the value sink to their construction defaults."""

    def to_sql(self) -> str:
        """Render the SQL text without executing it.

        Returns:
            str: The rendered SQL.
        """
        return self.build()

    @abstractmethod
    def get_values(self) -> list[Any]:
        """Return the bound values aligned with the ``?`` placeholders of :meth:`to_sql`.

        Returns:
            list[Any]: A new list, flattened in render order.
        """

    def new_subquery(self) -> "Select":
        """Create an empty ``Select`` on the same connection for use as a subquery."""
        from querychain.builder._select import Select

        return Select(self._connection, self._config)

    def to_expression(self) -> exp.Expression:
        """Parse the rendered statement with sqlglot for the connection's dialect.

        Raises:
            SQLParsingError: If sqlglot cannot parse the rendered SQL.

        Returns:
            exp.Expression: The parsed statement.
        """
        sql = self.to_sql().rstrip(";")
        try:
            return sqlglot.parse_one(sql, read=self.dialect.parser())
        except (SQLGlotParseError, SQLGlotTokenError) as e:
            msg = f"Failed to parse rendered SQL: {sql}"
            raise SQLParsingError(msg) from e

    async def exec(self) -> QueryResultT:
        """Execute the statement on the connection.

        Runs inside a correlation scope, reusing the caller's id when one is bound.

        Returns:
            The connection's result, unchanged.
        """
        sql = self.to_sql()
        values = self.get_values()
        with correlation_scope():
            if self._config.log_statements:
                logger.debug(
                    "Executing %s statement",
                    type(self).__name__.upper(),
                    extra={"extra_fields": {"sql": sql, "value_count": len(values)}},
                )
            result: QueryResultT = await self._connection.query(sql, values)
        return result

    async def raw(self, sql: str, values: Optional[Sequence[Any]] = None) -> Any:
        """Execute ``sql`` as given, bypassing the builder state.

        Returns:
            The connection's result, unchanged.
        """
        return await self._connection.query(sql, values)

    def log_sql(self) -> "Self":
        """Log the rendered SQL at INFO level."""
        logger.info("%s", self.to_sql())
        return self

    def log_values(self) -> "Self":
        """Log the bound values at INFO level."""
        logger.info("%r", self.get_values())
        return self

    def _new_condition(self, callback: "ConditionCallback", label: str, current: Optional[Condition] = None) -> Condition:
        """Apply a condition callback, creating the condition on first use.

        Args:
            callback: The user's condition callback.
            label: Clause name used in error messages, e.g. ``"SELECT"`` or ``"HAVING"``.
            current: The clause's existing condition, if any.

        Raises:
            QueryError: If ``callback`` is not callable.

        Returns:
            Condition: The condition the callback was applied to.
        """
        if not callable(callback):
            msg = f"Invalid {label} condition: {callback}"
            raise QueryError(msg)
        condition = current if current is not None else Condition(self)
        return condition.apply(callback)
