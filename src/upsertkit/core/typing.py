"""
Lightweight typing aliases used across upsert contexts and table configs.

Provides minimal aliases to improve readability and static checks.
This module contains no runtime logic and is zero-IO.

Examples:
    >>> from upsertkit.core.typing import ColumnList
    >>> def first(cols: ColumnList) -> str:
    ...     return next(iter(cols))
    >>> first(("id", "ts"))
    'id'
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import Union

__all__ = [
    "ColumnList",
    "PathLike",
]

# Accepted by builder setters; contexts store tuples.
ColumnList = Iterable[str]

# Anything os.fspath() accepts; contexts keep the value as given.
PathLike = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]
