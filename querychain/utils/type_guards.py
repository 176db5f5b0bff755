"""Type guard functions for runtime type checking in querychain.

This module provides type-safe runtime checks that help the type checker
understand type narrowing, replacing scattered ``isinstance`` chains in the
builders.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from querychain.protocols import ConnectionProtocol, SubqueryProviderProtocol

if TYPE_CHECKING:
    from typing_extensions import TypeGuard

__all__ = (
    "is_bind_value",
    "is_connection",
    "is_full_str",
    "is_int",
    "is_mapping",
    "is_number",
    "is_scalar",
    "is_subquery_provider",
)


def is_full_str(obj: Any) -> "TypeGuard[str]":
    """Check if an object is a non-empty string.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return isinstance(obj, str) and obj != ""


def is_number(obj: Any) -> "TypeGuard[float]":
    """Check if an object is an ``int`` or ``float`` (booleans excluded).

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return isinstance(obj, (int, float)) and not isinstance(obj, bool)


def is_int(obj: Any) -> "TypeGuard[int]":
    """Check if an object is an ``int`` (booleans excluded).

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return isinstance(obj, int) and not isinstance(obj, bool)


def is_scalar(obj: Any) -> bool:
    """Check if an object can be bound in a condition: a non-empty string or a number.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return is_full_str(obj) or is_number(obj)


def is_bind_value(obj: Any) -> bool:
    """Check if an object can be written by INSERT or UPDATE: a string, a number or ``None``.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return obj is None or isinstance(obj, str) or is_number(obj)


def is_mapping(obj: Any) -> "TypeGuard[Mapping[str, Any]]":
    """Check if an object is a mapping.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return isinstance(obj, Mapping)


def is_connection(obj: Any) -> "TypeGuard[ConnectionProtocol]":
    """Check if an object implements the ConnectionProtocol.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return isinstance(obj, ConnectionProtocol)


def is_subquery_provider(obj: Any) -> "TypeGuard[SubqueryProviderProtocol]":
    """Check if an object implements the SubqueryProviderProtocol.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return isinstance(obj, SubqueryProviderProtocol)
