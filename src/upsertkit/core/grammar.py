"""
Canonical upsert grammar and helpers.

Defines the enumerations an upsert context carries (hash function, consistency
mode, upsert mode) together with zero-IO parsers that normalize free-form
strings into enum members.

Responsibilities
- Define enums with lower_snake serialized values.
- Provide normalization and validation helpers for enum-like strings.

Design principles
-----------------
1) One naming standard:
   - Enum classes: PascalCase
   - Enum member names: UPPER_SNAKE (Python constants)
   - Enum serialized values (config files, env vars, logs): lower_snake

2) Enums describe, they do not decide:
   - Nothing here interprets what a hash function or consistency mode does to
     the upsert engine. The engine is an external collaborator.

Downstream usage
----------------
- `upsertkit.upsert.context` carries HashFunction and ConsistencyMode members.
- `upsertkit.upsert.config` and `upsertkit.upsert.table_config` parse env/TOML
  strings and pydantic fields through `hash_function_from_value`,
  `consistency_mode_from_value` and `upsert_mode_from_value`.

Examples
--------
>>> from upsertkit.core.grammar import HashFunction, hash_function_from_value
>>> hash_function_from_value("MD5") == HashFunction.MD5
True
>>> consistency_mode_from_value("snapshot")
<ConsistencyMode.SNAPSHOT: 'snapshot'>
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from typing import Final

__all__ = [
    "HashFunction",
    "ConsistencyMode",
    "UpsertMode",
    # helpers/validators
    "is_lower_snake",
    "assert_lower_snake",
    "hash_function_from_value",
    "consistency_mode_from_value",
    "upsert_mode_from_value",
    "ensure_all_enum_values_lower_snake",
]


# ============================================================================
# PRIMARY KEY HASHING
# ============================================================================


class HashFunction(Enum):
    """
    Hash applied to primary key values before they enter the key index.

    Notes:
      NONE keeps the raw primary key. The other variants trade a small collision
      risk for a fixed-size key held in memory.
    """

    NONE = "none"
    MD5 = "md5"
    MURMUR3 = "murmur3"
    UUID = "uuid"


# ============================================================================
# CONSISTENCY / MODE
# ============================================================================


class ConsistencyMode(Enum):
    """
    Read-consistency guarantee offered by the upsert view.

    Notes:
      An upsert context may carry no consistency mode at all (None). That state is
      distinct from ConsistencyMode.NONE, which is an explicit choice.
    """

    NONE = "none"
    SYNC = "sync"
    SNAPSHOT = "snapshot"


class UpsertMode(Enum):
    """
    Upsert mode declared by a table's upsert config.

    FULL replaces the previous record, PARTIAL merges column-wise through a
    partial-upsert handler, NONE disables upsert for the table.
    """

    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


# ============================================================================
# Helpers & Validators (zero I/O)
# ============================================================================

_LOWER_SNAKE_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$")


def is_lower_snake(value: str) -> bool:
    """
    Check whether a string is lower_snake.

    Args:
      value (str): Candidate string to validate.

    Returns:
      bool: True if value matches lower_snake (e.g., "murmur3"), False otherwise.

    Examples:
      >>> is_lower_snake("murmur3")
      True
      >>> is_lower_snake("Murmur3")
      False
    """
    return bool(_LOWER_SNAKE_RE.match(value or ""))


def assert_lower_snake(value: str, what: str = "value") -> None:
    """
    Validate that a string is lower_snake.

    Args:
      value (str): Candidate string to validate.
      what (str): Human-friendly label used in the error message.

    Raises:
      ValueError: If value is not lower_snake.
    """
    if not is_lower_snake(value):
        raise ValueError(f"{what} must be lower_snake (got: {value!r})")


def _normalize(value: str) -> str:
    return (value or "").strip().lower()


def hash_function_from_value(s: str | HashFunction) -> HashFunction:
    """
    Parse a hash function name into a HashFunction.

    Args:
      s (str | HashFunction): Case-insensitive name (e.g., "MD5", "murmur3") or a member.

    Returns:
      HashFunction: Parsed hash function.

    Raises:
      ValueError: If s is not a known hash function.
    """
    if isinstance(s, HashFunction):
        return s
    value = _normalize(s)
    assert_lower_snake(value, "hash_function")
    return HashFunction(value)


def consistency_mode_from_value(s: str | ConsistencyMode) -> ConsistencyMode:
    """
    Parse a consistency mode name into a ConsistencyMode.

    Args:
      s (str | ConsistencyMode): Case-insensitive name or a member.

    Returns:
      ConsistencyMode: Parsed consistency mode.

    Raises:
      ValueError: If s is not a known consistency mode.
    """
    if isinstance(s, ConsistencyMode):
        return s
    value = _normalize(s)
    assert_lower_snake(value, "consistency_mode")
    return ConsistencyMode(value)


def upsert_mode_from_value(s: str | UpsertMode) -> UpsertMode:
    """Parse an upsert mode name into an UpsertMode (case-insensitive)."""
    if isinstance(s, UpsertMode):
        return s
    value = _normalize(s)
    assert_lower_snake(value, "upsert_mode")
    return UpsertMode(value)


def ensure_all_enum_values_lower_snake(enums: Iterable[type[Enum]]) -> None:
    """
    Assert that every enum member's value is lower_snake.

    Args:
      enums (Iterable[type[Enum]]): Iterable of Enum classes to inspect.

    Raises:
      AssertionError: If any enum member has a non-lower_snake value.

    Examples:
      >>> ensure_all_enum_values_lower_snake([HashFunction, ConsistencyMode, UpsertMode])
    """
    for E in enums:
        for m in E:
            if not is_lower_snake(m.value):
                raise AssertionError(
                    f"{E.__name__}.{m.name} has non-lower_snake value: {m.value!r}"
                )
