from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Optional

from querychain.builder._base import Statement
from querychain.exceptions import QueryError
from querychain.typing import BindValue
from querychain.utils.type_guards import is_bind_value, is_full_str, is_mapping

if TYPE_CHECKING:
    from typing_extensions import Self

    from querychain.typing import RowData, RowSequence

__all__ = ("Insert",)


class Insert(Statement[Any]):
    """Builder for INSERT statements, single-row or bulk.

    The first row fixes the column list. Every later row must name exactly the
    same columns, in any order; its values are stored in the established
    column order so each row-vector lines up with the rendered column list.
    ``None`` renders as an inline ``NULL`` and is not bound.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_state()

    def _init_state(self) -> None:
        self._table: Optional[str] = None
        self._columns: Optional[list[str]] = None
        self._rows: list[list[BindValue]] = []
        self._returning: list[str] = []

    def reset(self) -> "Self":
        self._init_state()
        return self

    def build(self) -> str:
        """Render the INSERT statement.

        Raises:
            QueryError: If the table, the columns or the rows are missing.

        Returns:
            str: The rendered SQL.
        """
        if not is_full_str(self._table):
            msg = f"Invalid INSERT table: {self._table}"
            raise QueryError(msg)
        if not self._columns:
            msg = "Invalid INSERT columns"
            raise QueryError(msg)
        if not self._rows:
            msg = "Invalid INSERT values"
            raise QueryError(msg)

        columns = ", ".join(self._columns)
        rows = ", ".join(
            "(" + ", ".join("NULL" if value is None else "?" for value in row) + ")" for row in self._rows
        )
        returning = f" RETURNING {', '.join(self._returning)}" if self._returning else ""
        return f"INSERT INTO {self._table} ({columns}) VALUES {rows}{returning};"

    def get_values(self) -> list[Any]:
        """Return the non-null row values, row by row, in column order."""
        return [value for row in self._rows for value in row if value is not None]

    def into(self, table: str) -> "Self":
        if not is_full_str(table):
            msg = f"Invalid INSERT table: {table}"
            raise QueryError(msg)
        self._table = table
        return self

    def returning(self, *columns: str) -> "Self":
        """Set the ``RETURNING`` columns, for drivers that support it."""
        if not columns or not all(is_full_str(column) for column in columns):
            msg = f"Invalid RETURNING columns: {columns}"
            raise QueryError(msg)
        self._returning = list(columns)
        return self

    def row(self, row: "RowData") -> "Self":
        """Add one row.

        Args:
            row: Mapping of column name to value.

        Raises:
            QueryError: If the row is not a mapping, is empty, names different
                columns than the first row, or holds a value that cannot be bound.

        Returns:
            Self: The current builder instance for method chaining.
        """
        self._columns, vector = self._row_vector(row, self._columns)
        self._rows.append(vector)
        return self

    def rows(self, rows: "RowSequence") -> "Self":
        """Add several rows in one bulk insert.

        Raises:
            QueryError: If ``rows`` is not a sequence of mappings or holds fewer than two rows.
                Nothing is added unless every row is valid.

        Returns:
            Self: The current builder instance for method chaining.
        """
        if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence) or not all(is_mapping(r) for r in rows):
            msg = f"Invalid rows: {rows}"
            raise QueryError(msg)
        if len(rows) < 2:  # noqa: PLR2004
            msg = "Bulk insert requires at least 2 rows."
            raise QueryError(msg)
        columns = self._columns
        vectors: list[list[BindValue]] = []
        for row in rows:
            columns, vector = self._row_vector(row, columns)
            vectors.append(vector)
        self._columns = columns
        self._rows.extend(vectors)
        return self

    @staticmethod
    def _row_vector(row: Any, columns: Optional[list[str]]) -> "tuple[list[str], list[BindValue]]":
        """Validate one row against the established columns and order its values by them."""
        if not is_mapping(row):
            msg = f"Invalid INSERT row: {row}"
            raise QueryError(msg)

        if columns is None:
            if not row:
                msg = f"Empty INSERT row: {row}"
                raise QueryError(msg)
            columns = list(row)
        elif len(row) != len(columns) or any(column not in row for column in columns):
            msg = f"Invalid INSERT row: {row}"
            raise QueryError(msg)

        for value in row.values():
            if not is_bind_value(value):
                msg = f"Invalid INSERT value: {value}"
                raise QueryError(msg)

        return columns, [row[column] for column in columns]
