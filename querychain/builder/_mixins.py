from typing import TYPE_CHECKING, ClassVar, Optional

from querychain.builder._condition import Condition
from querychain.exceptions import QueryError

if TYPE_CHECKING:
    from typing_extensions import Self

    from querychain.typing import ConditionCallback

__all__ = ("WhereClauseMixin",)


class WhereClauseMixin:
    """Mixin for statements with a ``WHERE`` clause.

    The clause methods delegate to one lazily created :class:`Condition`.
    ``and_``, ``or_`` and ``close`` need an existing condition; ``open`` and
    ``paren`` create it.
    """

    _label: ClassVar[str]
    _where: Optional[Condition]

    def where(self, condition: "ConditionCallback") -> "Self":
        """Add to the ``WHERE`` clause.

        Args:
            condition: Callback receiving ``col`` (the column selector) and optionally the condition.

        Raises:
            QueryError: If ``condition`` is not callable.

        Returns:
            Self: The current builder instance for method chaining.
        """
        self._where = self._new_condition(condition, self._label, self._where)  # type: ignore[attr-defined]
        return self

    def and_(self) -> "Self":
        self._require_where().and_()
        return self

    def or_(self) -> "Self":
        self._require_where().or_()
        return self

    def open(self) -> "Self":
        self._ensure_where().open()
        return self

    def close(self) -> "Self":
        self._require_where().close()
        return self

    def paren(self) -> "Self":
        """Open a parenthesis in the ``WHERE`` clause, or close the open one."""
        self._ensure_where().paren()
        return self

    def _ensure_where(self) -> Condition:
        if self._where is None:
            self._where = Condition(self)  # type: ignore[arg-type]
        return self._where

    def _require_where(self) -> Condition:
        if self._where is None:
            msg = f"Invalid {self._label} condition"
            raise QueryError(msg)
        return self._where
