"""
Pydantic v2 models for the table-level inputs of an upsert context, and a helper
that seeds an UpsertContextBuilder from them.

Responsibilities
- Define Schema (columns, dtypes, primary key), UpsertConfig (the table's upsert
  section) and TableConfig.
- Normalize enum-like strings to grammar enums via upsertkit.core.grammar.
- Translate a TableConfig + Schema pair into a staged builder (`new_builder`).

Style
- Google-style docstrings; models forbid unknown fields.

Notes
- UpsertContext itself treats table config and schema as opaque. These models
  are one concrete shape for them; any object can be handed to the builder.
- Comparison columns fall back to the table's time column when the upsert
  config does not name any.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from upsertkit.core.constants import (
    DEFAULT_DELETED_KEYS_TTL,
    DEFAULT_HASH_FUNCTION,
    DEFAULT_METADATA_TTL,
    DEFAULT_UPSERT_VIEW_REFRESH_INTERVAL_MS,
)
from upsertkit.core.errors import ConfigurationError
from upsertkit.core.grammar import (
    ConsistencyMode,
    HashFunction,
    UpsertMode,
    consistency_mode_from_value,
    hash_function_from_value,
    upsert_mode_from_value,
)

from .context import UpsertContextBuilder

__all__ = [
    "COLUMN_DTYPES",
    "Schema",
    "UpsertConfig",
    "TableConfig",
    "new_builder",
]

COLUMN_DTYPES: frozenset[str] = frozenset({"i64", "i32", "f64", "f32", "str", "bool", "bytes"})


class Schema(BaseModel):
    """
    Record schema of an upsert table.

    Attributes:
        schema_name (str): Schema identifier.
        columns (dict[str, str]): Mapping of column name -> dtype where dtype is one of
            {"i64","i32","f64","f32","str","bool","bytes"}.
        primary_key_columns (list[str]): Columns forming the primary key, in order.

    Raises:
        pydantic.ValidationError: On unknown dtypes or primary keys that are not columns.

    Examples:
        >>> Schema(schema_name="orders", columns={"id": "str"}, primary_key_columns=["id"])
        Schema(schema_name='orders', columns={'id': 'str'}, primary_key_columns=['id'])
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_name: str
    columns: dict[str, str]
    primary_key_columns: list[str] = Field(default_factory=list)

    @field_validator("columns")
    @classmethod
    def _known_dtypes(cls, v: dict[str, str]) -> dict[str, str]:
        bad = {name: dtype for name, dtype in v.items() if dtype not in COLUMN_DTYPES}
        if bad:
            raise ValueError(f"unknown column dtypes {bad!r}; allowed {sorted(COLUMN_DTYPES)}")
        return v

    @model_validator(mode="after")
    def _primary_keys_are_columns(self) -> Schema:
        missing = [c for c in self.primary_key_columns if c not in self.columns]
        if missing:
            raise ValueError(f"primary key columns not in schema: {missing!r}")
        return self


class UpsertConfig(BaseModel):
    """
    Upsert section of a table config.

    Attributes:
        mode (UpsertMode): FULL, PARTIAL or NONE.
        comparison_columns (list[str] | None): Columns deciding which record wins.
        delete_record_column (str | None): Boolean column marking deletes.
        hash_function (HashFunction): Primary key hash.
        enable_snapshot (bool): Persist key state snapshots.
        enable_preload (bool): Warm-start from snapshots.
        metadata_ttl (float): Key metadata expiry (>= 0).
        deleted_keys_ttl (float): Deleted key expiry (>= 0).
        consistency_mode (ConsistencyMode | None): Unset when None.
        upsert_view_refresh_interval_ms (int): Refresh period (>= 0).
        drop_out_of_order_record (bool): Drop stale records.
        enable_deleted_keys_compaction_consistency (bool): Compaction consistency for deletes.

    Notes:
        Enum fields accept case-insensitive strings (e.g., "MD5", "snapshot").
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: UpsertMode = UpsertMode.FULL
    comparison_columns: list[str] | None = None
    delete_record_column: str | None = None
    hash_function: HashFunction = DEFAULT_HASH_FUNCTION
    enable_snapshot: bool = False
    enable_preload: bool = False
    metadata_ttl: float = Field(default=DEFAULT_METADATA_TTL, ge=0)
    deleted_keys_ttl: float = Field(default=DEFAULT_DELETED_KEYS_TTL, ge=0)
    consistency_mode: ConsistencyMode | None = None
    upsert_view_refresh_interval_ms: int = Field(
        default=DEFAULT_UPSERT_VIEW_REFRESH_INTERVAL_MS, ge=0
    )
    drop_out_of_order_record: bool = False
    enable_deleted_keys_compaction_consistency: bool = False

    @field_validator("mode", mode="before")
    @classmethod
    def _norm_mode(cls, v: Any) -> Any:
        return upsert_mode_from_value(v) if isinstance(v, str) else v

    @field_validator("hash_function", mode="before")
    @classmethod
    def _norm_hash_function(cls, v: Any) -> Any:
        return hash_function_from_value(v) if isinstance(v, str) else v

    @field_validator("consistency_mode", mode="before")
    @classmethod
    def _norm_consistency_mode(cls, v: Any) -> Any:
        return consistency_mode_from_value(v) if isinstance(v, str) else v


class TableConfig(BaseModel):
    """
    Table config carrying the pieces an upsert context needs.

    Attributes:
        table_name (str): Table name with type suffix (e.g., "orders_REALTIME").
        time_column_name (str | None): Default comparison column.
        upsert_config (UpsertConfig | None): Upsert section; None for non-upsert tables.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    table_name: str
    time_column_name: str | None = None
    upsert_config: UpsertConfig | None = None


def new_builder(
    table_config: TableConfig,
    schema: Schema,
    table_index_dir: str | os.PathLike[str],
    *,
    partial_upsert_handler: Any = None,
    table_data_manager: Any = None,
) -> UpsertContextBuilder:
    """
    Seed an UpsertContextBuilder from a table config and its schema.

    Args:
        table_config (TableConfig): Table config with an upsert section.
        schema (Schema): Record schema; supplies the primary key columns.
        table_index_dir (str | os.PathLike[str]): Directory for the table's upsert index.
        partial_upsert_handler (Any): Required when the upsert mode is PARTIAL.
        table_data_manager (Any): Owning table's runtime manager, if any.

    Returns:
        UpsertContextBuilder: Staged builder. Callers may override fields before build().

    Raises:
        ConfigurationError: If the table is not an upsert table, or a partial upsert
            table has no handler.

    Examples:
        >>> schema = Schema(schema_name="t", columns={"id": "str", "ts": "i64"},
        ...                 primary_key_columns=["id"])
        >>> tc = TableConfig(table_name="t_REALTIME", time_column_name="ts",
        ...                  upsert_config=UpsertConfig())
        >>> new_builder(tc, schema, "/data/t").build().comparison_columns
        ('ts',)
    """
    upsert = table_config.upsert_config
    if upsert is None or upsert.mode is UpsertMode.NONE:
        raise ConfigurationError(
            f"Upsert must be enabled for table {table_config.table_name!r}", field="upsert_config"
        )
    if upsert.mode is UpsertMode.PARTIAL and partial_upsert_handler is None:
        raise ConfigurationError(
            f"Partial upsert handler must be set for table {table_config.table_name!r}",
            field="partial_upsert_handler",
        )

    comparison_columns = upsert.comparison_columns
    if not comparison_columns and table_config.time_column_name:
        comparison_columns = [table_config.time_column_name]

    return (
        UpsertContextBuilder()
        .set_table_config(table_config)
        .set_schema(schema)
        .set_primary_key_columns(schema.primary_key_columns)
        .set_comparison_columns(comparison_columns)
        .set_delete_record_column(upsert.delete_record_column)
        .set_hash_function(upsert.hash_function)
        .set_partial_upsert_handler(partial_upsert_handler)
        .set_enable_snapshot(upsert.enable_snapshot)
        .set_enable_preload(upsert.enable_preload)
        .set_metadata_ttl(upsert.metadata_ttl)
        .set_deleted_keys_ttl(upsert.deleted_keys_ttl)
        .set_consistency_mode(upsert.consistency_mode)
        .set_upsert_view_refresh_interval_ms(upsert.upsert_view_refresh_interval_ms)
        .set_table_index_dir(table_index_dir)
        .set_drop_out_of_order_record(upsert.drop_out_of_order_record)
        .set_enable_deleted_keys_compaction_consistency(
            upsert.enable_deleted_keys_compaction_consistency
        )
        .set_table_data_manager(table_data_manager)
    )
