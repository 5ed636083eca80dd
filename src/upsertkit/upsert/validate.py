"""
Column checks of an upsert context against its record schema.

Purpose
- Confirm that the columns an UpsertContext names (primary key, comparison,
  delete-record) exist in the schema it carries, and that incoming frames can be
  keyed.
- Keep the builder itself free of schema knowledge: these checks run after
  build(), at table bring-up or ingestion.

Accepted schema shapes
- upsertkit.upsert.table_config.Schema (dtype names mapped to polars dtypes)
- pl.Schema, pl.DataFrame, pl.LazyFrame
- Mapping[str, polars dtype]

Notes
- Raises SchemaMismatchError from upsertkit.core.errors.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import polars as pl

from upsertkit.core.errors import SchemaMismatchError

from .context import UpsertContext
from .table_config import Schema

__all__ = [
    "schema_columns",
    "validate_context_columns",
    "validate_frame_for_context",
]

# Note: Polars exposes dtype singletons/classes (e.g., pl.Int64). Keep this mapping loosely typed.
_DTYPE_MAP: dict[str, object] = {
    "i64": pl.Int64,
    "i32": pl.Int32,
    "f64": pl.Float64,
    "f32": pl.Float32,
    "str": pl.Utf8,
    "bool": pl.Boolean,
    "bytes": pl.Binary,
}


def schema_columns(schema: Any) -> dict[str, Any]:
    """
    Resolve a schema-like object to a mapping of column name -> polars dtype.

    Args:
        schema (Any): Schema model, polars schema/frame, or mapping.

    Returns:
        dict[str, Any]: Column name -> polars dtype.

    Raises:
        SchemaMismatchError: If the object is not a recognized schema shape.
    """
    if isinstance(schema, Schema):
        return {name: _DTYPE_MAP[dtype] for name, dtype in schema.columns.items()}
    if isinstance(schema, pl.DataFrame):
        return dict(schema.schema)
    if isinstance(schema, pl.LazyFrame):
        return dict(schema.collect_schema())
    if isinstance(schema, Mapping):
        return dict(schema)
    raise SchemaMismatchError(f"cannot read columns from schema of type {type(schema).__name__}")


def _ensure_columns_present(available: Iterable[str], needed: Iterable[str], what: str) -> None:
    have = set(available)
    missing = [c for c in needed if c not in have]
    if missing:
        raise SchemaMismatchError(f"{what} not in schema: {missing!r}")


def _check_columns(ctx: UpsertContext, columns: Mapping[str, Any]) -> None:
    _ensure_columns_present(columns, ctx.primary_key_columns, "primary key columns")
    _ensure_columns_present(columns, ctx.comparison_columns, "comparison columns")
    col = ctx.delete_record_column
    if col is not None:
        _ensure_columns_present(columns, [col], "delete record column")
        if columns[col] != pl.Boolean:
            raise SchemaMismatchError(
                f"delete record column {col!r} must be boolean; got {columns[col]}"
            )


def validate_context_columns(ctx: UpsertContext) -> None:
    """
    Check the columns named by `ctx` against `ctx.schema`.

    Args:
        ctx (UpsertContext): Built context.

    Raises:
        SchemaMismatchError: If a primary key, comparison or delete-record column is
            missing, or the delete-record column is not boolean.

    Examples:
        >>> import polars as pl
        >>> from upsertkit.upsert.context import UpsertContext
        >>> ctx = (UpsertContext.builder().set_table_config({})
        ...        .set_schema(pl.Schema({"id": pl.Utf8, "ts": pl.Int64}))
        ...        .set_primary_key_columns(["id"]).set_comparison_columns(["ts"])
        ...        .set_table_index_dir("/tmp/t").build())
        >>> validate_context_columns(ctx)
    """
    _check_columns(ctx, schema_columns(ctx.schema))


def validate_frame_for_context(ctx: UpsertContext, df: pl.DataFrame) -> pl.DataFrame:
    """
    Validate an incoming frame against the columns named by `ctx`.

    Args:
        ctx (UpsertContext): Built context.
        df (pl.DataFrame): Records about to be upserted.

    Returns:
        pl.DataFrame: The same frame, unchanged.

    Raises:
        SchemaMismatchError: If required columns are missing, the delete-record column
            is not boolean, or a primary key column contains nulls.
    """
    _check_columns(ctx, dict(df.schema))
    nulls = df.select([pl.col(c).null_count() for c in ctx.primary_key_columns]).row(0)
    null_keys = [c for c, n in zip(ctx.primary_key_columns, nulls) if n]
    if null_keys:
        raise SchemaMismatchError(f"primary key columns contain nulls: {null_keys!r}")
    return df
