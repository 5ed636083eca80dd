"""
Upsert context defaults.

Defines the values optional upsert context fields take when a builder never sets
them. This module is zero-IO and uses only the Python standard library.

Notes:
    - A TTL of 0 disables the corresponding expiry.
    - A refresh interval of 0 means the upsert view is not refreshed on a timer.
    - Consistency mode has no default here: an unset mode stays None.
"""

from __future__ import annotations

from .grammar import HashFunction

__all__ = [
    "DEFAULT_HASH_FUNCTION",
    "DEFAULT_METADATA_TTL",
    "DEFAULT_DELETED_KEYS_TTL",
    "DEFAULT_UPSERT_VIEW_REFRESH_INTERVAL_MS",
]

# Primary keys are indexed verbatim unless a hash function is chosen.
DEFAULT_HASH_FUNCTION: HashFunction = HashFunction.NONE

# Seconds (in the comparison column's unit) after which key metadata may be dropped.
DEFAULT_METADATA_TTL: float = 0.0

# Same unit as DEFAULT_METADATA_TTL; applies to keys whose latest record is a delete.
DEFAULT_DELETED_KEYS_TTL: float = 0.0

DEFAULT_UPSERT_VIEW_REFRESH_INTERVAL_MS: int = 0
