"""querychain: fluent, parameterized SQL statement builders."""

from querychain import builder, dialects, exceptions, typing, utils
from querychain.__metadata__ import __version__
from querychain.base import QueryBuilder
from querychain.builder import (
    Condition,
    Delete,
    Insert,
    Operator,
    PageInfo,
    Pagination,
    Ref,
    Select,
    SortOrder,
    Statement,
    TotalInfo,
    Update,
    ref,
)
from querychain.config import BuilderConfig
from querychain.dialects import Dialect, DriverKind, get_dialect
from querychain.exceptions import ImproperConfigurationError, QueryChainError, QueryError, SQLParsingError
from querychain.protocols import ConnectionProtocol

__all__ = (
    "BuilderConfig",
    "Condition",
    "ConnectionProtocol",
    "Delete",
    "Dialect",
    "DriverKind",
    "ImproperConfigurationError",
    "Insert",
    "Operator",
    "PageInfo",
    "Pagination",
    "QueryBuilder",
    "QueryChainError",
    "QueryError",
    "Ref",
    "SQLParsingError",
    "Select",
    "SortOrder",
    "Statement",
    "TotalInfo",
    "Update",
    "__version__",
    "builder",
    "dialects",
    "exceptions",
    "get_dialect",
    "ref",
    "typing",
    "utils",
)
