from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Callable, TypeVar, Union

from typing_extensions import TypeAlias

if TYPE_CHECKING:
    from querychain.builder._condition import Condition
    from querychain.builder._select import Select

__all__ = (
    "BindValue",
    "ConditionCallback",
    "QueryResultT",
    "Row",
    "RowData",
    "RowSequence",
    "Rows",
    "Scalar",
    "SubqueryCallback",
)

Scalar: TypeAlias = Union[str, int, float]
"""A value that can be bound to a ``?`` placeholder in a condition."""

BindValue: TypeAlias = Union[str, int, float, None]
"""A value that can be written by INSERT or UPDATE. ``None`` renders as ``NULL``."""

Row: TypeAlias = dict[str, Any]
"""A result row as returned by the connection."""

Rows: TypeAlias = list[Row]
"""A list of result rows."""

RowData: TypeAlias = Mapping[str, BindValue]
"""Column to value mapping accepted by :meth:`Insert.row` and :meth:`Update.set`."""

ConditionCallback: TypeAlias = Callable[..., Any]
"""Callback receiving ``col`` (and optionally the condition) to build a predicate."""

SubqueryCallback: TypeAlias = Callable[["Select"], Any]
"""Callback receiving a fresh ``Select`` to build a subquery."""

QueryResultT = TypeVar("QueryResultT")

RowSequence: TypeAlias = Sequence[RowData]
