from typing import TYPE_CHECKING, Any, Optional

from querychain.builder._base import Statement
from querychain.builder._condition import Condition
from querychain.builder._mixins import WhereClauseMixin
from querychain.exceptions import QueryError
from querychain.utils.type_guards import is_full_str

if TYPE_CHECKING:
    from typing_extensions import Self

__all__ = ("Delete",)


class Delete(WhereClauseMixin, Statement[Any]):
    """Builder for DELETE statements. A ``WHERE`` condition is mandatory."""

    _label = "DELETE"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._table: Optional[str] = None
        self._where: Optional[Condition] = None

    def reset(self) -> "Self":
        self._table = None
        self._where = None
        return self

    def build(self) -> str:
        if not is_full_str(self._table):
            msg = f"Invalid DELETE table: {self._table}"
            raise QueryError(msg)
        if self._where is None:
            msg = "DELETE condition is required"
            raise QueryError(msg)
        return f"DELETE FROM {self._table} WHERE {self._where.build()};"

    def get_values(self) -> list[Any]:
        return self._where.values if self._where is not None else []

    def from_(self, table: str) -> "Self":
        if not is_full_str(table):
            msg = f"Invalid DELETE table: {table}"
            raise QueryError(msg)
        self._table = table
        return self
