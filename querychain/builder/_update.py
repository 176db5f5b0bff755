from typing import TYPE_CHECKING, Any, Optional

from querychain.builder._base import Statement
from querychain.builder._condition import Condition
from querychain.builder._mixins import WhereClauseMixin
from querychain.exceptions import QueryError
from querychain.typing import BindValue
from querychain.utils.type_guards import is_bind_value, is_full_str, is_mapping

if TYPE_CHECKING:
    from typing_extensions import Self

    from querychain.typing import RowData

__all__ = ("Update",)


class Update(WhereClauseMixin, Statement[Any]):
    """Builder for UPDATE statements.

    A ``WHERE`` condition is mandatory. SET values are bound before the
    condition's values, matching the order of the placeholders.
    """

    _label = "UPDATE"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_state()

    def _init_state(self) -> None:
        self._table: Optional[str] = None
        self._columns: list[str] = []
        self._set_values: list[BindValue] = []
        self._where: Optional[Condition] = None

    def reset(self) -> "Self":
        self._init_state()
        return self

    def build(self) -> str:
        """Render the UPDATE statement.

        Raises:
            QueryError: If the table, the SET row or the condition is missing.

        Returns:
            str: The rendered SQL.
        """
        if not is_full_str(self._table):
            msg = "Invalid UPDATE table"
            raise QueryError(msg)
        if not self._columns:
            msg = "Invalid UPDATE columns"
            raise QueryError(msg)
        if not self._set_values:
            msg = "Invalid UPDATE values"
            raise QueryError(msg)
        if self._where is None:
            msg = "UPDATE condition is required"
            raise QueryError(msg)

        assignments = ", ".join(
            f"{column} = NULL" if value is None else f"{column} = ?"
            for column, value in zip(self._columns, self._set_values)
        )
        return f"UPDATE {self._table} SET {assignments} WHERE {self._where.build()};"

    def get_values(self) -> list[Any]:
        values: list[Any] = [value for value in self._set_values if value is not None]
        if self._where is not None:
            values.extend(self._where.values)
        return values

    def table(self, name: str) -> "Self":
        if not is_full_str(name):
            msg = f"Invalid UPDATE table: {name}"
            raise QueryError(msg)
        self._table = name
        return self

    def set(self, row: "RowData") -> "Self":
        """Set the columns to update, replacing any previous ``set`` call.

        Args:
            row: Mapping of column name to new value. ``None`` writes ``NULL``.

        Raises:
            QueryError: If ``row`` is not a mapping or holds a value that cannot be bound.

        Returns:
            Self: The current builder instance for method chaining.
        """
        if not is_mapping(row):
            msg = "Invalid UPDATE row"
            raise QueryError(msg)
        for value in row.values():
            if not is_bind_value(value):
                msg = f"Invalid UPDATE value: {value}"
                raise QueryError(msg)
        self._columns = list(row)
        self._set_values = list(row.values())
        return self
