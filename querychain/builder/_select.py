# ruff: noqa: PLR0904
"""SELECT statement builder.

Renders, in order: columns and table, joins, ``WHERE``, ``GROUP BY``,
``HAVING``, ``ORDER BY``, ``LIMIT``, ``OFFSET`` and unions. Also provides the
``count`` and ``paginate`` reads layered on top of the same state.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union

from querychain.builder._base import Statement
from querychain.builder._condition import Condition
from querychain.builder._mixins import WhereClauseMixin
from querychain.exceptions import QueryError
from querychain.typing import Rows
from querychain.utils.logging import correlation_scope, get_logger
from querychain.utils.type_guards import is_full_str, is_int

if TYPE_CHECKING:
    from typing_extensions import Self

    from querychain.typing import ConditionCallback, SubqueryCallback

__all__ = (
    "PageInfo",
    "Pagination",
    "Select",
    "SortOrder",
    "TotalInfo",
)

logger = get_logger("builder.select")


class SortOrder(str, Enum):
    """Sort direction for ``ORDER BY``."""

    ASC = "ASC"
    DESC = "DESC"

    def __str__(self) -> str:
        return self.value


@dataclass
class PageInfo:
    """Position of a page within a paginated result."""

    current: int
    """The current page number."""
    items: int
    """Items per page."""
    prev: Optional[int] = None
    """The previous page number, ``None`` on the first page."""
    next: Optional[int] = None
    """The next page number, ``None`` on the last page."""


@dataclass
class TotalInfo:
    """Totals across every page."""

    items: int
    pages: int


@dataclass
class Pagination:
    """One page of rows plus the information needed to navigate the others."""

    result: Any
    """Rows of the current page, as returned by the connection."""
    page: PageInfo
    total: TotalInfo


@dataclass
class _Join:
    table: str
    kind: str
    condition: Condition


@dataclass
class _Union:
    query: str
    all: bool
    values: list[Any]


class Select(WhereClauseMixin, Statement[Rows]):
    """Builder for SELECT statements.

    Example:
        ::

            rows = await (
                Select(connection)
                .from_("users")
                .where(lambda col: col("status").equal("active"))
                .and_()
                .paren()
                .where(lambda col: col("city").equal("Tokyo").or_().equal("Osaka"))
                .paren()
                .order_by("created_at", SortOrder.DESC)
                .limit(10)
                .exec()
            )
    """

    _label = "SELECT"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_state()

    def _init_state(self) -> None:
        self._table: Optional[str] = None
        self._columns: Union[list[str], str] = "*"
        self._distinct = False
        self._joins: list[_Join] = []
        self._where: Optional[Condition] = None
        self._having: Optional[Condition] = None
        self._group: list[str] = []
        self._order: list[tuple[str, SortOrder]] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        self._unions: list[_Union] = []

    def reset(self) -> "Self":
        self._init_state()
        return self

    def build(self, subquery: bool = False) -> str:
        """Render the SELECT statement.

        Args:
            subquery: Omit the trailing ``;`` so the statement can be embedded.

        Raises:
            QueryError: If no table is set or a condition is invalid.

        Returns:
            str: The rendered SQL.
        """
        if not is_full_str(self._table):
            msg = f"Invalid SELECT table: {self._table}"
            raise QueryError(msg)

        subquery = subquery if isinstance(subquery, bool) else False
        columns = ", ".join(self._columns) if isinstance(self._columns, list) else self._columns
        distinct = "DISTINCT " if self._distinct else ""

        parts = [f"SELECT {distinct}{columns} FROM {self._table}"]
        parts.extend(f"{join.kind} JOIN {join.table} ON {join.condition.build()}" for join in self._joins)
        if self._where is not None:
            parts.append(f"WHERE {self._where.build()}")
        if self._group:
            parts.append(f"GROUP BY {', '.join(self._group)}")
        if self._having is not None:
            parts.append(f"HAVING {self._having.build()}")
        if self._order:
            parts.append("ORDER BY " + ", ".join(f"{column} {order.value}" for column, order in self._order))
        if self._limit is not None:
            parts.append(f"LIMIT {self._limit}")
        if self._offset is not None:
            parts.append(f"OFFSET {self._offset}")
        parts.extend(f"{'UNION ALL' if union.all else 'UNION'} {union.query}" for union in self._unions)

        statement = " ".join(parts)
        return statement if subquery else f"{statement};"

    def get_values(self) -> list[Any]:
        """Return the bound values in render order: joins, WHERE, HAVING, unions."""
        values: list[Any] = []
        for join in self._joins:
            values.extend(join.condition.values)
        if self._where is not None:
            values.extend(self._where.values)
        if self._having is not None:
            values.extend(self._having.values)
        for union in self._unions:
            values.extend(union.values)
        return values

    def from_(self, table: str) -> "Self":
        if not is_full_str(table):
            msg = f"Invalid SELECT table: {table}"
            raise QueryError(msg)
        self._table = table
        return self

    def col(self, *columns: str) -> "Self":
        """Set the columns to select, replacing any previous list.

        Aggregates and aliases such as ``"COUNT(*) AS total"`` are accepted as-is.
        Calling it without columns selects ``*`` again.

        Raises:
            QueryError: If a column is not a non-empty string.

        Returns:
            Self: The current builder instance for method chaining.
        """
        for column in columns:
            if not is_full_str(column):
                msg = f"Invalid SELECT column: {column}"
                raise QueryError(msg)
        self._columns = list(columns) if columns else "*"
        return self

    def distinct(self) -> "Self":
        self._distinct = True
        return self

    def limit(self, value: int) -> "Self":
        if not is_int(value) or value < 0:
            msg = f"Invalid LIMIT value: {value}"
            raise QueryError(msg)
        self._limit = value
        return self

    def offset(self, value: int) -> "Self":
        if not is_int(value) or value < 0:
            msg = f"Invalid OFFSET value: {value}"
            raise QueryError(msg)
        self._offset = value
        return self

    def join(self, table: str, condition: "ConditionCallback") -> "Self":
        """Add an ``INNER JOIN``.

        Args:
            table: The table to join.
            condition: Callback building the ``ON`` condition.

        Raises:
            QueryError: If the table or the condition is invalid.

        Returns:
            Self: The current builder instance for method chaining.
        """
        return self._join("INNER", table, condition)

    def left_join(self, table: str, condition: "ConditionCallback") -> "Self":
        return self._join("LEFT", table, condition)

    def right_join(self, table: str, condition: "ConditionCallback") -> "Self":
        return self._join("RIGHT", table, condition)

    def group_by(self, *columns: str) -> "Self":
        for column in columns:
            if not is_full_str(column):
                msg = f"Invalid GROUP BY column: {column}"
                raise QueryError(msg)
        self._group.extend(columns)
        return self

    def order_by(self, column: str, order: SortOrder = SortOrder.ASC) -> "Self":
        """Add an ``ORDER BY`` term.

        Raises:
            QueryError: If the column is invalid or ``order`` is not a :class:`SortOrder`.

        Returns:
            Self: The current builder instance for method chaining.
        """
        if not is_full_str(column):
            msg = f"Invalid ORDER BY column: {column}"
            raise QueryError(msg)
        if not isinstance(order, SortOrder):
            msg = f"Invalid ORDER BY type: {order}"
            raise QueryError(msg)
        self._order.append((column, order))
        return self

    def having(self, condition: "ConditionCallback") -> "Self":
        """Add to the ``HAVING`` clause, applied to groups after ``GROUP BY``."""
        self._having = self._new_condition(condition, "HAVING", self._having)
        return self

    def union(self, subquery: "SubqueryCallback") -> "Self":
        """Append ``UNION <subquery>``, dropping duplicate rows."""
        return self._union(subquery, all_rows=False)

    def union_all(self, subquery: "SubqueryCallback") -> "Self":
        """Append ``UNION ALL <subquery>``, keeping duplicate rows."""
        return self._union(subquery, all_rows=True)

    async def count(self) -> int:
        """Count the rows matching the current state.

        The column list is swapped for ``COUNT(*)`` while the query runs and is
        restored afterwards, whether or not the query succeeds.

        Raises:
            QueryError: If no table is set.

        Returns:
            int: The number of matching rows.
        """
        if not is_full_str(self._table):
            msg = f"Invalid SELECT table: {self._table}"
            raise QueryError(msg)

        alias = self._config.count_alias
        columns = self._columns
        self._columns = [f"COUNT(*) AS {alias}"]
        try:
            rows = await self.exec()
        finally:
            self._columns = columns
        return int(rows[0][alias])

    async def paginate(self, page: int = 1, items: Optional[int] = None) -> Pagination:
        """Read one page of rows along with pagination details.

        Invalid input is normalized: a page below 1 becomes 1, and a missing or
        invalid page size becomes ``BuilderConfig.default_page_size``.
        The count and the page read share one correlation id.

        Args:
            page: The page number, starting from 1.
            items: Items per page.

        Returns:
            Pagination: The page's rows, page numbers and totals.
        """
        if not is_int(page) or page < 1:
            page = 1
        if not is_int(items) or items < 1:
            items = self._config.default_page_size

        # A previous page must not leak into the count.
        self._limit = None
        self._offset = None
        with correlation_scope():
            total = await self.count()
            self.limit(items).offset((page - 1) * items)
            result = await self.exec()

        pages = math.ceil(total / items)
        logger.debug("Paginated page %d of %d", page, pages, extra={"extra_fields": {"total_items": total}})
        return Pagination(
            result=result,
            page=PageInfo(
                current=page,
                items=items,
                prev=page - 1 if page > 1 else None,
                next=page + 1 if page < pages else None,
            ),
            total=TotalInfo(items=total, pages=pages),
        )

    def _join(self, kind: str, table: str, condition: "ConditionCallback") -> "Self":
        if not is_full_str(table):
            msg = f"Invalid JOIN table: {table}"
            raise QueryError(msg)
        self._joins.append(_Join(table=table, kind=kind, condition=self._new_condition(condition, "JOIN")))
        return self

    def _union(self, subquery: "SubqueryCallback", all_rows: bool) -> "Self":
        if not callable(subquery):
            label = "UNION ALL" if all_rows else "UNION"
            msg = f"Invalid {label} subquery: {subquery}"
            raise QueryError(msg)
        select = self.new_subquery()
        subquery(select)
        self._unions.append(_Union(query=select.build(True), all=all_rows, values=select.get_values()))
        return self
