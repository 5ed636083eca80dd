"""
Core exception types raised while assembling and checking upsert contexts.

Provides typed exceptions for upsert configuration failures:
- ConfigurationError when a builder is finalized without a required field.
- SchemaMismatchError when a context names columns its record schema lacks.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Enum parsers in upsertkit.core.grammar raise plain ValueError.

Examples:
    Catch a refused build.

    >>> from upsertkit.core.errors import ConfigurationError
    >>> from upsertkit.upsert.context import UpsertContext
    >>> try:
    ...     UpsertContext.builder().build()
    ... except ConfigurationError as e:
    ...     msg = str(e)
    >>> msg
    'Table config must be set'
"""

from __future__ import annotations

__all__ = [
    "UpsertError",
    "ConfigurationError",
    "SchemaMismatchError",
]


class UpsertError(Exception):
    """
    Base class for errors raised by upsertkit.

    Notes:
        Use this as a catch-all for upsertkit failures.
    """


class ConfigurationError(UpsertError, ValueError):
    """
    Raised when an upsert context cannot be constructed from the staged state.

    Attributes:
        field (str | None): Name of the offending builder field, when known.

    Examples:
        - Primary key columns never set, or set to an empty list
        - Table index directory missing
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class SchemaMismatchError(UpsertError):
    """Columns named by an upsert context are missing from, or mistyped in, the record schema."""
