"""
upsertkit: Immutable, validated configuration for upsert-enabled table partitions.

- upsertkit.core: zero-IO grammar, errors, constants and typing.
- upsertkit.upsert: UpsertContext, its builder, settings and table config models.
"""

from __future__ import annotations

from .core.errors import ConfigurationError, SchemaMismatchError, UpsertError
from .core.grammar import ConsistencyMode, HashFunction, UpsertMode
from .upsert import UpsertContext, UpsertContextBuilder, UpsertSettings

__all__ = [
    "ConfigurationError",
    "ConsistencyMode",
    "HashFunction",
    "SchemaMismatchError",
    "UpsertContext",
    "UpsertContextBuilder",
    "UpsertError",
    "UpsertMode",
    "UpsertSettings",
]
