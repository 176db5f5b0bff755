"""Date-part extraction fragments per database driver.

MySQL, PostgreSQL and SQLite spell date and time extraction differently. Each
:class:`Dialect` renders one fragment per extraction unit and is selected once
from the connection's driver kind with :func:`get_dialect`.
"""

from abc import ABC, abstractmethod
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Union

from sqlglot.dialects.dialect import Dialect as SQLGlotDialect

from querychain.exceptions import ImproperConfigurationError
from querychain.utils.logging import get_logger

__all__ = (
    "Dialect",
    "DriverKind",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "get_dialect",
    "resolve_driver_kind",
)

logger = get_logger("dialects")


class DriverKind(str, Enum):
    """Database driver kinds a connection can declare."""

    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"

    def __str__(self) -> str:
        return self.value


_DRIVER_ALIASES: dict[str, DriverKind] = {
    "mysql": DriverKind.MYSQL,
    "mariadb": DriverKind.MYSQL,
    "postgresql": DriverKind.POSTGRESQL,
    "postgres": DriverKind.POSTGRESQL,
    "pg": DriverKind.POSTGRESQL,
    "sqlite": DriverKind.SQLITE,
    "sqlite3": DriverKind.SQLITE,
}


class Dialect(ABC):
    """Renders date and time extraction fragments for one database."""

    kind: ClassVar[DriverKind]
    sqlglot_dialect: ClassVar[str]
    """Name of the sqlglot dialect used to parse statements for this database."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"

    def parser(self) -> SQLGlotDialect:
        """Return the sqlglot dialect instance matching this database."""
        return SQLGlotDialect.get_or_raise(self.sqlglot_dialect)

    @abstractmethod
    def date(self, column: str) -> str: ...

    @abstractmethod
    def time(self, column: str) -> str: ...

    @abstractmethod
    def year(self, column: str) -> str: ...

    @abstractmethod
    def month(self, column: str) -> str: ...

    @abstractmethod
    def day(self, column: str) -> str: ...

    @abstractmethod
    def hour(self, column: str) -> str: ...

    @abstractmethod
    def minute(self, column: str) -> str: ...

    @abstractmethod
    def second(self, column: str) -> str: ...


class MySQLDialect(Dialect):
    """MySQL / MariaDB: one function per unit."""

    kind = DriverKind.MYSQL
    sqlglot_dialect = "mysql"

    def date(self, column: str) -> str:
        return f"DATE({column})"

    def time(self, column: str) -> str:
        return f"TIME({column})"

    def year(self, column: str) -> str:
        return f"YEAR({column})"

    def month(self, column: str) -> str:
        return f"MONTH({column})"

    def day(self, column: str) -> str:
        return f"DAY({column})"

    def hour(self, column: str) -> str:
        return f"HOUR({column})"

    def minute(self, column: str) -> str:
        return f"MINUTE({column})"

    def second(self, column: str) -> str:
        return f"SECOND({column})"


class PostgresDialect(Dialect):
    """PostgreSQL: casts, ``TO_CHAR`` and ``EXTRACT``."""

    kind = DriverKind.POSTGRESQL
    sqlglot_dialect = "postgres"

    def date(self, column: str) -> str:
        return f"{column}::DATE"

    def time(self, column: str) -> str:
        return f"TO_CHAR({column}, 'HH24:MI:SS')"

    def year(self, column: str) -> str:
        return self._extract("YEAR", column)

    def month(self, column: str) -> str:
        return self._extract("MONTH", column)

    def day(self, column: str) -> str:
        return self._extract("DAY", column)

    def hour(self, column: str) -> str:
        return self._extract("HOUR", column)

    def minute(self, column: str) -> str:
        return self._extract("MINUTE", column)

    def second(self, column: str) -> str:
        return self._extract("SECOND", column)

    @staticmethod
    def _extract(part: str, column: str) -> str:
        return f"EXTRACT({part} FROM {column})"


class SQLiteDialect(Dialect):
    """SQLite: ``DATE`` plus ``STRFTIME`` formats."""

    kind = DriverKind.SQLITE
    sqlglot_dialect = "sqlite"

    def date(self, column: str) -> str:
        return f"DATE({column})"

    def time(self, column: str) -> str:
        return self._strftime("%H:%M:%S", column)

    def year(self, column: str) -> str:
        return self._strftime("%Y", column)

    def month(self, column: str) -> str:
        return self._strftime("%m", column)

    def day(self, column: str) -> str:
        return self._strftime("%d", column)

    def hour(self, column: str) -> str:
        return self._strftime("%H", column)

    def minute(self, column: str) -> str:
        return self._strftime("%M", column)

    def second(self, column: str) -> str:
        return self._strftime("%S", column)

    @staticmethod
    def _strftime(fmt: str, column: str) -> str:
        return f"STRFTIME('{fmt}', {column})"


_DIALECTS: dict[DriverKind, type[Dialect]] = {
    DriverKind.MYSQL: MySQLDialect,
    DriverKind.POSTGRESQL: PostgresDialect,
    DriverKind.SQLITE: SQLiteDialect,
}


def resolve_driver_kind(driver: Any) -> DriverKind:
    """Normalize a connection's driver descriptor to a :class:`DriverKind`.

    Args:
        driver: A ``DriverKind``, a driver name such as ``"postgres"``, or an
            object exposing a ``name`` attribute.

    Raises:
        ImproperConfigurationError: If the driver kind is not supported.

    Returns:
        DriverKind: The normalized driver kind.
    """
    if isinstance(driver, DriverKind):
        return driver
    name: Union[str, None] = driver if isinstance(driver, str) else getattr(driver, "name", None)
    if isinstance(name, str):
        kind = _DRIVER_ALIASES.get(name.strip().lower())
        if kind is not None:
            return kind
    msg = f"Unsupported driver kind: {driver!r}"
    raise ImproperConfigurationError(msg)


@lru_cache(maxsize=None)
def _dialect_for(kind: DriverKind) -> Dialect:
    logger.debug("Selected %s dialect", kind.value)
    return _DIALECTS[kind]()


def get_dialect(driver: Any) -> Dialect:
    """Return the date-part dialect for a driver descriptor.

    Dialects are stateless, so one instance is shared per driver kind.

    Args:
        driver: The connection's driver descriptor.

    Returns:
        Dialect: The dialect for the driver kind.
    """
    return _dialect_for(resolve_driver_kind(driver))
