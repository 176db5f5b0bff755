from dataclasses import dataclass
from typing import Optional

from querychain.exceptions import ImproperConfigurationError
from querychain.utils.type_guards import is_full_str, is_int

__all__ = ("DEFAULT_PAGE_SIZE", "LOG_LEVELS", "BuilderConfig")

DEFAULT_PAGE_SIZE = 10
LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class BuilderConfig:
    """Settings shared by every builder created from one :class:`~querychain.base.QueryBuilder`."""

    default_page_size: int = DEFAULT_PAGE_SIZE
    """Items per page used by ``Select.paginate`` when none (or an invalid value) is given."""
    count_alias: str = "count"
    """Alias of the aggregate column ``Select.count`` reads back."""
    log_statements: bool = True
    """Emit a DEBUG record for every executed statement."""
    log_level: Optional[str] = None
    """When set, ``QueryBuilder`` installs querychain's own log handler at this level."""
    structured_logs: bool = True
    """JSON log lines when ``log_level`` is set, plain text otherwise."""

    def __post_init__(self) -> None:
        if not is_int(self.default_page_size) or self.default_page_size < 1:
            msg = f"Invalid default page size: {self.default_page_size!r}"
            raise ImproperConfigurationError(msg)
        if not is_full_str(self.count_alias):
            msg = f"Invalid count alias: {self.count_alias!r}"
            raise ImproperConfigurationError(msg)
        if self.log_level is not None and (
            not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS
        ):
            msg = f"Invalid log level: {self.log_level!r}"
            raise ImproperConfigurationError(msg)
