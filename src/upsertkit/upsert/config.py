"""
Process-level defaults for upsert context builders.

Defines UpsertSettings, a frozen dataclass carrying defaults for the optional
fields of an UpsertContext. Defaults are sourced from upsertkit.core.constants
and match the builder's own defaults, so seeding a builder from UpsertSettings()
changes nothing.

Source of truth
- upsertkit.core.constants for numeric and hash function defaults
- upsertkit.core.grammar for enum parsing

Precedence
- environment (UPSERTKIT_*) > TOML (upsertkit.toml or [tool.upsertkit.upsert]) > defaults

Notes
- Values that cannot be parsed, and negative or non-finite TTLs and intervals,
  are ignored with a warning; the lower layer's value is kept.
- Required fields (table config, schema, columns, index dir) are per table and
  never come from settings.
"""

from __future__ import annotations

import logging
import math
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from upsertkit.core.constants import (
    DEFAULT_DELETED_KEYS_TTL,
    DEFAULT_HASH_FUNCTION,
    DEFAULT_METADATA_TTL,
    DEFAULT_UPSERT_VIEW_REFRESH_INTERVAL_MS,
)
from upsertkit.core.grammar import (
    ConsistencyMode,
    HashFunction,
    consistency_mode_from_value,
    hash_function_from_value,
)

__all__ = ["UpsertSettings"]

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "t", "yes", "y", "on"}
_FALSE = {"0", "false", "f", "no", "n", "off"}

_BOOL_FIELDS = (
    "enable_snapshot",
    "enable_preload",
    "drop_out_of_order_record",
    "enable_deleted_keys_compaction_consistency",
)
_FLOAT_FIELDS = ("metadata_ttl", "deleted_keys_ttl")


def _non_negative_float(v: Any) -> float:
    f = float(v)
    if not math.isfinite(f) or f < 0:
        raise ValueError(f"must be a finite number >= 0: {v!r}")
    return f


def _non_negative_int(v: Any) -> int:
    if isinstance(v, bool) or (isinstance(v, float) and not v.is_integer()):
        raise ValueError(f"not an integer: {v!r}")
    i = int(v)
    if i < 0:
        raise ValueError(f"must be >= 0: {v!r}")
    return i


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        lo = v.strip().lower()
        if lo in _TRUE:
            return True
        if lo in _FALSE:
            return False
    raise ValueError(f"not a boolean: {v!r}")


@dataclass(frozen=True)
class UpsertSettings:
    """
    Defaults applied to new upsert context builders.

    Attributes:
        hash_function (HashFunction): Primary key hash (default NONE).
        enable_snapshot (bool): Persist key state snapshots.
        enable_preload (bool): Warm-start from snapshots.
        metadata_ttl (float): Key metadata expiry; 0 disables it.
        deleted_keys_ttl (float): Deleted key expiry; 0 disables it.
        consistency_mode (ConsistencyMode | None): None leaves the mode unset.
        upsert_view_refresh_interval_ms (int): Upsert view refresh period in ms.
        drop_out_of_order_record (bool): Drop records older than the current winner.
        enable_deleted_keys_compaction_consistency (bool): Compaction consistency for deletes.

    Examples:
        >>> from upsertkit.upsert.config import UpsertSettings
        >>> UpsertSettings(enable_snapshot=True).enable_snapshot
        True
    """

    hash_function: HashFunction = DEFAULT_HASH_FUNCTION
    enable_snapshot: bool = False
    enable_preload: bool = False
    metadata_ttl: float = DEFAULT_METADATA_TTL
    deleted_keys_ttl: float = DEFAULT_DELETED_KEYS_TTL
    consistency_mode: ConsistencyMode | None = None
    upsert_view_refresh_interval_ms: int = DEFAULT_UPSERT_VIEW_REFRESH_INTERVAL_MS
    drop_out_of_order_record: bool = False
    enable_deleted_keys_compaction_consistency: bool = False

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: UpsertSettings, cfg: dict[str, Any] | None) -> UpsertSettings:
        """Apply a loose config mapping onto UpsertSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        if "hash_function" in cfg:
            try:
                s = replace(s, hash_function=hash_function_from_value(str(cfg["hash_function"])))
            except ValueError as exc:
                logger.warning("Ignoring hash_function=%r: %s", cfg["hash_function"], exc)

        if "consistency_mode" in cfg:
            raw = cfg["consistency_mode"]
            try:
                mode = consistency_mode_from_value(str(raw)) if raw not in (None, "") else None
                s = replace(s, consistency_mode=mode)
            except ValueError as exc:
                logger.warning("Ignoring consistency_mode=%r: %s", raw, exc)

        for name in _BOOL_FIELDS:
            if name in cfg:
                try:
                    s = replace(s, **{name: _bool(cfg[name])})
                except ValueError as exc:
                    logger.warning("Ignoring %s=%r: %s", name, cfg[name], exc)

        for name in _FLOAT_FIELDS:
            if name in cfg:
                try:
                    s = replace(s, **{name: _non_negative_float(cfg[name])})
                except (TypeError, ValueError) as exc:
                    logger.warning("Ignoring %s=%r: %s", name, cfg[name], exc)

        if "upsert_view_refresh_interval_ms" in cfg:
            try:
                interval = _non_negative_int(cfg["upsert_view_refresh_interval_ms"])
                s = replace(s, upsert_view_refresh_interval_ms=interval)
            except (TypeError, ValueError) as exc:
                logger.warning(
                    "Ignoring upsert_view_refresh_interval_ms=%r: %s",
                    cfg["upsert_view_refresh_interval_ms"],
                    exc,
                )

        return s

    @classmethod
    def from_env(
        cls, base: UpsertSettings | None = None, prefix: str = "UPSERTKIT_"
    ) -> UpsertSettings:
        """
        Build UpsertSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - UPSERTKIT_HASH_FUNCTION ("none" | "md5" | "murmur3" | "uuid")
            - UPSERTKIT_ENABLE_SNAPSHOT (1/0/true/false/yes/no/on/off)
            - UPSERTKIT_ENABLE_PRELOAD
            - UPSERTKIT_METADATA_TTL
            - UPSERTKIT_DELETED_KEYS_TTL
            - UPSERTKIT_CONSISTENCY_MODE ("none" | "sync" | "snapshot")
            - UPSERTKIT_UPSERT_VIEW_REFRESH_INTERVAL_MS
            - UPSERTKIT_DROP_OUT_OF_ORDER_RECORD
            - UPSERTKIT_ENABLE_DELETED_KEYS_COMPACTION_CONSISTENCY
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for name in (
            "hash_function",
            "consistency_mode",
            "upsert_view_refresh_interval_ms",
            *_BOOL_FIELDS,
            *_FLOAT_FIELDS,
        ):
            v = os.getenv(prefix + name.upper())
            if v:
                mapping[name] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> UpsertSettings:
        """
        Build UpsertSettings from a TOML file.

        Search order when `path` is None:
            1) ./upsertkit.toml (with either top-level [upsert] or direct keys)
            2) ./pyproject.toml under [tool.upsertkit.upsert]

        Returns defaults if no file is present.

        Raises:
            tomllib.TOMLDecodeError: If a candidate file exists but is not valid TOML.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "upsertkit.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            with p.open("rb") as fh:
                data = tomllib.load(fh)
            if p.name == "pyproject.toml":
                cfg = data.get("tool", {}).get("upsertkit", {}).get("upsert")
            elif isinstance(data.get("upsert"), dict):
                cfg = data["upsert"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> UpsertSettings:
        """
        Load UpsertSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (upsertkit.toml, pyproject.toml).

        Returns:
            UpsertSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
