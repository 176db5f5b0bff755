# ruff: noqa: PLR0904
"""Predicate builder with syntax validation.

A :class:`Condition` collects comparison fragments, logical operators and
parentheses for one ``WHERE``, ``HAVING`` or ``JOIN ... ON`` clause. Values are
bound with ``?`` placeholders unless wrapped in a :class:`Ref`, and the
assembled text is checked for grammar errors in :meth:`Condition.build`.
"""

import inspect
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from querychain.exceptions import QueryError
from querychain.utils.type_guards import is_full_str, is_int, is_scalar, is_subquery_provider

if TYPE_CHECKING:
    from typing_extensions import Self

    from querychain.dialects import Dialect
    from querychain.protocols import SubqueryProviderProtocol
    from querychain.typing import ConditionCallback, Scalar, SubqueryCallback

__all__ = (
    "Condition",
    "ConditionOwner",
    "Operator",
    "Ref",
    "ref",
)


class Ref:
    """A raw column or expression spliced into SQL instead of being bound."""

    __slots__ = ("column",)

    def __init__(self, column: str) -> None:
        self.column = column

    def __repr__(self) -> str:
        return f"Ref({self.column!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Ref) and other.column == self.column

    def __hash__(self) -> int:
        return hash((Ref, self.column))


def ref(column: str) -> Ref:
    """Reference a column so it is compared by name rather than as a bound value.

    Args:
        column: The column name or SQL expression.

    Raises:
        QueryError: If the column is not a non-empty string.

    Returns:
        Ref: The reference marker.
    """
    if not is_full_str(column):
        msg = f"Invalid column reference: {column}"
        raise QueryError(msg)
    return Ref(column)


class Operator(str, Enum):
    """Comparison operators accepted by :meth:`Condition.any` and :meth:`Condition.all`."""

    EQUAL = "="
    NOT_EQUAL = "!="
    LESS = "<"
    LESS_OR_EQUAL = "<="
    MORE = ">"
    MORE_OR_EQUAL = ">="

    def __str__(self) -> str:
        return self.value


Operand = Union["Scalar", Ref]

_AFTER_OPEN = re.compile(r"\(\s*AND|\(\s*OR")
_BEFORE_CLOSE = re.compile(r"AND\s*\)|OR\s*\)")
_CONSECUTIVE = re.compile(r"AND\s*AND|OR\s*OR")
_EMPTY_PARENS = re.compile(r"\(\s*\)")


class ConditionOwner(ABC):
    """What a :class:`Condition` needs from the statement that owns it.

    Statements provide the date-part dialect and fresh ``Select`` instances for
    subqueries, so the condition never imports the concrete ``Select``.
    """

    @property
    @abstractmethod
    def dialect(self) -> "Dialect": ...

    @abstractmethod
    def new_subquery(self) -> "SubqueryProviderProtocol": ...


class Condition:
    """Builds a SQL predicate with syntax validation.

    Example:
        The usual entry point is a statement's ``where`` callback::

            select.from_("users").where(lambda col: col("age").greater_than(18).and_().col("city").equal("Tokyo"))
    """

    def __init__(self, owner: ConditionOwner) -> None:
        if not isinstance(owner, ConditionOwner):
            msg = f"Invalid query instance: {owner!r}"
            raise QueryError(msg)
        self._owner = owner
        self._stack: list[str] = []
        self._values: list[Any] = []
        self._negate = False
        self._opened = 0
        self._column: Optional[str] = None

    def __repr__(self) -> str:
        return f"Condition({''.join(self._stack).strip()!r})"

    @property
    def values(self) -> list[Any]:
        """Values bound by this condition, in placeholder order."""
        return list(self._values)

    def apply(self, callback: "ConditionCallback") -> "Self":
        """Run a condition callback against this condition.

        The callback receives the column selector, plus the condition itself
        when it accepts a second positional argument.

        Returns:
            Self: The condition instance.
        """
        if _accepts_condition(callback):
            callback(self.col, self)
        else:
            callback(self.col)
        return self

    def build(self) -> str:
        """Validate and return the assembled predicate.

        Raises:
            QueryError: If the predicate is empty or syntactically invalid.

        Returns:
            str: The predicate text.
        """
        condition = "".join(self._stack).strip()

        if self._opened != 0:
            msg = "Syntax error: Unmatched parentheses."
            raise QueryError(msg)

        if _AFTER_OPEN.search(condition):
            msg = "Invalid syntax: AND/OR cannot directly follow an opening parenthesis."
            raise QueryError(msg)

        if _BEFORE_CLOSE.search(condition):
            msg = "Invalid syntax: AND/OR cannot directly precede a closing parenthesis."
            raise QueryError(msg)

        if _CONSECUTIVE.search(condition):
            msg = "Invalid syntax: Consecutive AND/OR operators found."
            raise QueryError(msg)

        if _EMPTY_PARENS.search(condition):
            msg = "Invalid syntax: Empty parentheses found."
            raise QueryError(msg)

        if condition.endswith(("AND", "OR")):
            msg = "Invalid syntax: Condition cannot end with an operator."
            raise QueryError(msg)

        if condition.startswith(("AND", "OR")):
            msg = "Invalid syntax: Condition cannot start with an operator."
            raise QueryError(msg)

        if not condition:
            msg = "Invalid syntax: Condition cannot be empty."
            raise QueryError(msg)

        return condition

    # -- structure ---------------------------------------------------------

    def raw(self, condition: str, *values: "Scalar") -> "Self":
        """Append a raw SQL fragment, binding ``values`` to its placeholders.

        Raises:
            QueryError: If the fragment is empty or a value is not a non-empty string or number.

        Returns:
            Self: The condition instance.
        """
        if not is_full_str(condition):
            msg = f"Invalid condition: {condition}"
            raise QueryError(msg)
        for value in values:
            if not is_scalar(value):
                msg = f"Invalid condition value: {value}"
                raise QueryError(msg)
        self._values.extend(values)
        self._stack.append(condition)
        return self

    def not_(self) -> "Self":
        """Negate the next comparison only."""
        self._negate = True
        return self

    def open(self) -> "Self":
        self._stack.append("(")
        self._opened += 1
        return self

    def close(self) -> "Self":
        self._stack.append(")")
        self._opened -= 1
        return self

    def paren(self) -> "Self":
        """Open a parenthesis if none is open, otherwise close one.

        Toggling does not nest: use :meth:`open` and :meth:`close` for nested groups.
        """
        return self.open() if self._opened == 0 else self.close()

    def and_(self) -> "Self":
        self._stack.append(" AND ")
        return self

    def or_(self) -> "Self":
        self._stack.append(" OR ")
        return self

    def col(self, name: str) -> "Self":
        """Select the column the following comparisons apply to.

        Raises:
            QueryError: If the name is not a non-empty string.

        Returns:
            Self: The condition instance.
        """
        if not is_full_str(name):
            msg = f"Invalid column name: {name}"
            raise QueryError(msg)
        self._column = name
        return self

    # -- comparisons -------------------------------------------------------

    def equal(self, value: Operand) -> "Self":
        return self._compare("=", value)

    def less_than(self, value: Operand) -> "Self":
        return self._compare("<", value)

    def less_than_or_equal(self, value: Operand) -> "Self":
        return self._compare("<=", value)

    def greater_than(self, value: Operand) -> "Self":
        return self._compare(">", value)

    def greater_than_or_equal(self, value: Operand) -> "Self":
        return self._compare(">=", value)

    def like(self, value: Union[str, Ref]) -> "Self":
        """Match the column against a ``LIKE`` pattern (``%`` and ``_`` wildcards).

        Raises:
            QueryError: If no column is selected or the pattern is not a non-empty string.

        Returns:
            Self: The condition instance.
        """
        column = self._require_column()
        if not (isinstance(value, Ref) or is_full_str(value)):
            msg = f"Invalid value: {value}"
            raise QueryError(msg)
        return self._push(f"{column} LIKE {self._bind(value)}")

    def between(self, start: Operand, end: Operand) -> "Self":
        """Check the column lies in the inclusive range ``start`` to ``end``.

        Raises:
            QueryError: If no column is selected or either bound is invalid.

        Returns:
            Self: The condition instance.
        """
        column = self._require_column()
        if not (isinstance(start, Ref) or is_scalar(start)):
            msg = f"Invalid start value: {start}"
            raise QueryError(msg)
        if not (isinstance(end, Ref) or is_scalar(end)):
            msg = f"Invalid end value: {end}"
            raise QueryError(msg)
        return self._push(f"{column} BETWEEN {self._bind(start)} AND {self._bind(end)}")

    def in_(self, *values: Operand) -> "Self":
        """Check the column is one of ``values``.

        Raises:
            QueryError: If no column is selected, no values are given, or a value is invalid.

        Returns:
            Self: The condition instance.
        """
        column = self._require_column()
        if not values:
            msg = "Values array cannot be empty for IN clause"
            raise QueryError(msg)
        for value in values:
            if not (isinstance(value, Ref) or is_scalar(value)):
                msg = f"Invalid value: {value}"
                raise QueryError(msg)
        placeholders = ", ".join(self._bind(value) for value in values)
        return self._push(f"{column} IN ({placeholders})")

    def is_null(self) -> "Self":
        column = self._require_column()
        return self._push(f"{column} IS NULL")

    # -- date parts --------------------------------------------------------

    def in_date(self, date: Union[str, Ref]) -> "Self":
        """Compare the date part of the column with a ``YYYY-MM-DD`` string."""
        column = self._require_column()
        if not (isinstance(date, Ref) or is_full_str(date)):
            msg = f"Invalid date: {date}"
            raise QueryError(msg)
        return self._push(f"{self._owner.dialect.date(column)} = {self._bind(date)}")

    def in_time(self, time: Union[str, Ref]) -> "Self":
        """Compare the time part of the column with a ``hh:mm:ss`` string."""
        column = self._require_column()
        if not (isinstance(time, Ref) or is_full_str(time)):
            msg = f"Invalid time: {time}"
            raise QueryError(msg)
        return self._push(f"{self._owner.dialect.time(column)} = {self._bind(time)}")

    def in_year(self, year: Union[int, Ref]) -> "Self":
        return self._date_part("year", year, 1, None)

    def in_month(self, month: Union[int, Ref]) -> "Self":
        return self._date_part("month", month, 1, 12)

    def in_day(self, day: Union[int, Ref]) -> "Self":
        return self._date_part("day", day, 1, 31)

    def in_hour(self, hour: Union[int, Ref]) -> "Self":
        return self._date_part("hour", hour, 0, 23)

    def in_minute(self, minute: Union[int, Ref]) -> "Self":
        return self._date_part("minute", minute, 0, 59)

    def in_second(self, second: Union[int, Ref]) -> "Self":
        return self._date_part("second", second, 0, 59)

    # -- subqueries --------------------------------------------------------

    def in_subquery(self, subquery: "SubqueryCallback") -> "Self":
        """Check the column is in the result of a subquery.

        Args:
            subquery: Callback receiving a fresh ``Select`` to build the subquery.

        Raises:
            QueryError: If no column is selected or ``subquery`` is not callable.

        Returns:
            Self: The condition instance.
        """
        column = self._require_column()
        sql = self._subquery(subquery)
        return self._push(f"{column} IN ({sql})")

    def exists(self, subquery: "SubqueryCallback") -> "Self":
        """Check the subquery returns at least one row. No column is needed."""
        sql = self._subquery(subquery)
        return self._push(f"EXISTS ({sql})")

    def any(self, operator: Operator, subquery: "SubqueryCallback") -> "Self":
        """Compare the column with ``operator`` against any row of a subquery.

        Raises:
            QueryError: If no column is selected, the operator is not an :class:`Operator`,
                or ``subquery`` is not callable.

        Returns:
            Self: The condition instance.
        """
        return self._quantified("ANY", operator, subquery)

    def all(self, operator: Operator, subquery: "SubqueryCallback") -> "Self":
        """Compare the column with ``operator`` against every row of a subquery."""
        return self._quantified("ALL", operator, subquery)

    # -- internals ---------------------------------------------------------

    def _require_column(self) -> str:
        if not is_full_str(self._column):
            msg = f"Invalid column: {self._column}"
            raise QueryError(msg)
        return self._column

    def _bind(self, value: Operand) -> str:
        if isinstance(value, Ref):
            return value.column
        self._values.append(value)
        return "?"

    def _push(self, fragment: str) -> "Self":
        prefix = "NOT " if self._negate else ""
        self._stack.append(f"{prefix}{fragment}")
        self._negate = False
        return self

    def _compare(self, sign: str, value: Operand) -> "Self":
        column = self._require_column()
        if not (isinstance(value, Ref) or is_scalar(value)):
            msg = f"Invalid value: {value}"
            raise QueryError(msg)
        return self._push(f"{column} {sign} {self._bind(value)}")

    def _date_part(self, unit: str, value: Union[int, Ref], low: int, high: Optional[int]) -> "Self":
        column = self._require_column()
        if not isinstance(value, Ref):
            in_range = is_int(value) and value >= low and (high is None or value <= high)
            if not in_range:
                msg = f"Invalid {unit}: {value}"
                raise QueryError(msg)
        extract: Callable[[str], str] = getattr(self._owner.dialect, unit)
        return self._push(f"{extract(column)} = {self._bind(value)}")

    def _subquery(self, subquery: "SubqueryCallback") -> str:
        if not callable(subquery):
            msg = f"Invalid subquery: {subquery}"
            raise QueryError(msg)
        select = self._owner.new_subquery()
        if not is_subquery_provider(select):
            msg = f"Invalid subquery provider: {select!r}"
            raise QueryError(msg)
        subquery(select)
        sql = select.build(True)
        self._values.extend(select.get_values())
        return sql

    def _quantified(self, quantifier: str, operator: Operator, subquery: "SubqueryCallback") -> "Self":
        column = self._require_column()
        if not isinstance(operator, Operator):
            msg = f"Invalid operator: {operator}"
            raise QueryError(msg)
        sql = self._subquery(subquery)
        return self._push(f"{column} {operator.value} {quantifier} ({sql})")


def _accepts_condition(callback: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError):
        return False
    positional = 0
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if parameter.kind in {inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD}:
            positional += 1
    return positional >= 2
