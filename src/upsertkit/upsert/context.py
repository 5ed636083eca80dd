"""
Immutable upsert context and the builder that validates it.

An UpsertContext carries every parameter the upsert engine needs to bring up
one table partition. It is created only through UpsertContextBuilder.build(),
which checks the staged fields once and either returns a frozen context or
raises ConfigurationError naming the first missing field.

Required fields (checked in this order)
- table_config
- schema
- primary_key_columns (non-empty)
- comparison_columns (non-empty)
- hash_function (defaulted to HashFunction.NONE)
- table_index_dir

Notes
- Setters never validate and always return the builder; the last write wins.
- Column sequences are frozen into tuples; a bare string names a single column.
- The index directory is kept as given once os.fspath() accepts it.
- partial_upsert_handler and table_data_manager are held, never managed: the
  context does not call into them or own their lifecycle.
- A builder is meant to be filled from a single thread. Built contexts are
  immutable and safe to share.

Examples
--------
>>> from upsertkit.upsert.context import UpsertContext
>>> ctx = (
...     UpsertContext.builder()
...     .set_table_config(object())
...     .set_schema(object())
...     .set_primary_key_columns(["id"])
...     .set_comparison_columns(["updated_at"])
...     .set_table_index_dir("/data/t1")
...     .build()
... )
>>> ctx.hash_function.value, ctx.table_index_dir
('none', '/data/t1')
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from upsertkit.core.constants import (
    DEFAULT_DELETED_KEYS_TTL,
    DEFAULT_HASH_FUNCTION,
    DEFAULT_METADATA_TTL,
    DEFAULT_UPSERT_VIEW_REFRESH_INTERVAL_MS,
)
from upsertkit.core.errors import ConfigurationError
from upsertkit.core.grammar import ConsistencyMode, HashFunction
from upsertkit.core.typing import ColumnList, PathLike

if TYPE_CHECKING:
    from .config import UpsertSettings

__all__ = [
    "UpsertContext",
    "UpsertContextBuilder",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class UpsertContext:
    """
    Frozen configuration for one upsert-enabled table partition.

    Attributes:
        table_config (Any): Table configuration object, carried through untouched.
        schema (Any): Record schema object, carried through untouched.
        primary_key_columns (tuple[str, ...]): Columns forming the primary key (non-empty).
        comparison_columns (tuple[str, ...]): Columns deciding which record is newer (non-empty).
        delete_record_column (str | None): Boolean column marking deletes, if any.
        hash_function (HashFunction): Hash applied to primary keys; never None.
        partial_upsert_handler (Any | None): Column-wise merger for partial upserts.
        enable_snapshot (bool): Persist key state snapshots.
        enable_preload (bool): Warm-start key state from snapshots.
        metadata_ttl (float): Key metadata expiry; 0 disables it.
        deleted_keys_ttl (float): Deleted key expiry; 0 disables it.
        consistency_mode (ConsistencyMode | None): None means no mode was configured.
        upsert_view_refresh_interval_ms (int): Upsert view refresh period in ms.
        table_index_dir (PathLike): Directory for per-table upsert index files, as given.
        drop_out_of_order_record (bool): Drop records older than the current winner.
        enable_deleted_keys_compaction_consistency (bool): Keep deleted keys consistent
            across compaction.
        table_data_manager (Any | None): Owning table's runtime manager.

    Notes:
        - Build through UpsertContext.builder(); direct construction skips validation.
        - Existence of table_index_dir is not checked here.
    """

    table_config: Any
    schema: Any
    primary_key_columns: tuple[str, ...]
    comparison_columns: tuple[str, ...]
    delete_record_column: str | None = None
    hash_function: HashFunction = DEFAULT_HASH_FUNCTION
    partial_upsert_handler: Any | None = None
    enable_snapshot: bool = False
    enable_preload: bool = False
    metadata_ttl: float = DEFAULT_METADATA_TTL
    deleted_keys_ttl: float = DEFAULT_DELETED_KEYS_TTL
    consistency_mode: ConsistencyMode | None = None
    upsert_view_refresh_interval_ms: int = DEFAULT_UPSERT_VIEW_REFRESH_INTERVAL_MS
    table_index_dir: PathLike
    drop_out_of_order_record: bool = False
    enable_deleted_keys_compaction_consistency: bool = False
    table_data_manager: Any | None = None

    @staticmethod
    def builder() -> UpsertContextBuilder:
        """Return a fresh builder with every optional field at its default."""
        return UpsertContextBuilder()

    @property
    def is_snapshot_enabled(self) -> bool:
        return self.enable_snapshot

    @property
    def is_preload_enabled(self) -> bool:
        return self.enable_preload

    @property
    def is_drop_out_of_order_record(self) -> bool:
        return self.drop_out_of_order_record

    @property
    def is_deleted_keys_compaction_consistency_enabled(self) -> bool:
        return self.enable_deleted_keys_compaction_consistency


class UpsertContextBuilder:
    """
    Mutable staging area for an UpsertContext.

    Every `set_*` method stores its argument as given and returns the builder, so
    calls chain. `build()` validates the staged fields and returns a new context.

    Attributes:
        finalized (bool): True once build() has succeeded at least once.

    Examples:
        >>> b = UpsertContextBuilder().set_table_config(object()).set_schema(object())
        >>> b.finalized
        False
    """

    def __init__(self) -> None:
        self._table_config: Any = None
        self._schema: Any = None
        self._primary_key_columns: ColumnList | None = None
        self._comparison_columns: ColumnList | None = None
        self._delete_record_column: str | None = None
        self._hash_function: HashFunction | None = DEFAULT_HASH_FUNCTION
        self._partial_upsert_handler: Any = None
        self._enable_snapshot: bool = False
        self._enable_preload: bool = False
        self._metadata_ttl: float = DEFAULT_METADATA_TTL
        self._deleted_keys_ttl: float = DEFAULT_DELETED_KEYS_TTL
        self._consistency_mode: ConsistencyMode | None = None
        self._upsert_view_refresh_interval_ms: int = DEFAULT_UPSERT_VIEW_REFRESH_INTERVAL_MS
        self._table_index_dir: PathLike | None = None
        self._drop_out_of_order_record: bool = False
        self._enable_deleted_keys_compaction_consistency: bool = False
        self._table_data_manager: Any = None
        self.finalized = False

    @classmethod
    def from_settings(cls, settings: UpsertSettings) -> UpsertContextBuilder:
        """
        Return a fresh builder whose optional fields start from `settings`.

        Args:
            settings (UpsertSettings): Process-level defaults (see upsertkit.upsert.config).

        Returns:
            UpsertContextBuilder: Builder with defaults seeded; setters still override.
        """
        return (
            cls()
            .set_hash_function(settings.hash_function)
            .set_enable_snapshot(settings.enable_snapshot)
            .set_enable_preload(settings.enable_preload)
            .set_metadata_ttl(settings.metadata_ttl)
            .set_deleted_keys_ttl(settings.deleted_keys_ttl)
            .set_consistency_mode(settings.consistency_mode)
            .set_upsert_view_refresh_interval_ms(settings.upsert_view_refresh_interval_ms)
            .set_drop_out_of_order_record(settings.drop_out_of_order_record)
            .set_enable_deleted_keys_compaction_consistency(
                settings.enable_deleted_keys_compaction_consistency
            )
        )

    def set_table_config(self, table_config: Any) -> UpsertContextBuilder:
        self._table_config = table_config
        return self

    def set_schema(self, schema: Any) -> UpsertContextBuilder:
        self._schema = schema
        return self

    def set_primary_key_columns(self, primary_key_columns: ColumnList | None) -> UpsertContextBuilder:
        self._primary_key_columns = primary_key_columns
        return self

    def set_comparison_columns(self, comparison_columns: ColumnList | None) -> UpsertContextBuilder:
        self._comparison_columns = comparison_columns
        return self

    def set_delete_record_column(self, delete_record_column: str | None) -> UpsertContextBuilder:
        self._delete_record_column = delete_record_column
        return self

    def set_hash_function(self, hash_function: HashFunction | None) -> UpsertContextBuilder:
        self._hash_function = hash_function
        return self

    def set_partial_upsert_handler(self, partial_upsert_handler: Any) -> UpsertContextBuilder:
        self._partial_upsert_handler = partial_upsert_handler
        return self

    def set_enable_snapshot(self, enable_snapshot: bool) -> UpsertContextBuilder:
        self._enable_snapshot = enable_snapshot
        return self

    def set_enable_preload(self, enable_preload: bool) -> UpsertContextBuilder:
        self._enable_preload = enable_preload
        return self

    def set_metadata_ttl(self, metadata_ttl: float) -> UpsertContextBuilder:
        self._metadata_ttl = metadata_ttl
        return self

    def set_deleted_keys_ttl(self, deleted_keys_ttl: float) -> UpsertContextBuilder:
        self._deleted_keys_ttl = deleted_keys_ttl
        return self

    def set_consistency_mode(self, consistency_mode: ConsistencyMode | None) -> UpsertContextBuilder:
        self._consistency_mode = consistency_mode
        return self

    def set_upsert_view_refresh_interval_ms(
        self, upsert_view_refresh_interval_ms: int
    ) -> UpsertContextBuilder:
        self._upsert_view_refresh_interval_ms = upsert_view_refresh_interval_ms
        return self

    def set_table_index_dir(
        self, table_index_dir: PathLike | None
    ) -> UpsertContextBuilder:
        self._table_index_dir = table_index_dir
        return self

    def set_drop_out_of_order_record(self, drop_out_of_order_record: bool) -> UpsertContextBuilder:
        self._drop_out_of_order_record = drop_out_of_order_record
        return self

    def set_enable_deleted_keys_compaction_consistency(
        self, enable_deleted_keys_compaction_consistency: bool
    ) -> UpsertContextBuilder:
        self._enable_deleted_keys_compaction_consistency = enable_deleted_keys_compaction_consistency
        return self

    def set_table_data_manager(self, table_data_manager: Any) -> UpsertContextBuilder:
        self._table_data_manager = table_data_manager
        return self

    def _check_required(self) -> tuple[tuple[str, ...], tuple[str, ...], HashFunction, PathLike]:
        # Order matters: the first failing check is the one reported.
        if self._table_config is None:
            raise ConfigurationError("Table config must be set", field="table_config")
        if self._schema is None:
            raise ConfigurationError("Schema must be set", field="schema")
        primary_key_columns = self._frozen_columns("_primary_key_columns")
        if not primary_key_columns:
            raise ConfigurationError(
                "Primary key columns must be set", field="primary_key_columns"
            )
        comparison_columns = self._frozen_columns("_comparison_columns")
        if not comparison_columns:
            raise ConfigurationError("Comparison columns must be set", field="comparison_columns")
        if self._hash_function is None:
            raise ConfigurationError("Hash function must be set", field="hash_function")
        table_index_dir = self._table_index_dir
        if table_index_dir is None:
            raise ConfigurationError("Table index directory must be set", field="table_index_dir")
        try:
            raw_dir = os.fspath(table_index_dir)
        except TypeError as exc:
            raise ConfigurationError(
                "Table index directory must be a filesystem path, "
                f"got {type(table_index_dir).__name__}",
                field="table_index_dir",
            ) from exc
        if not raw_dir:
            raise ConfigurationError("Table index directory must be set", field="table_index_dir")
        return primary_key_columns, comparison_columns, self._hash_function, table_index_dir

    def _frozen_columns(self, attr: str) -> tuple[str, ...]:
        value = getattr(self, attr)
        if value is None:
            return ()
        # A bare string names one column, not a sequence of characters.
        frozen = (value,) if isinstance(value, str) and value else tuple(value)
        # Iterators are consumed by tuple(); keep the frozen copy so a retry sees it.
        setattr(self, attr, frozen)
        return frozen

    def build(self) -> UpsertContext:
        """
        Validate the staged fields and return a new UpsertContext.

        Returns:
            UpsertContext: Snapshot of the staged fields.

        Raises:
            ConfigurationError: If a required field is missing; names the first one found.

        Notes:
            Column sequences are frozen into tuples before they are checked, so an
            empty iterator is reported as missing. A failed build leaves the builder
            accumulating so the caller can fix the field and call build() again.
        """
        try:
            primary_key_columns, comparison_columns, hash_function, table_index_dir = (
                self._check_required()
            )
        except ConfigurationError as exc:
            logger.debug("Refusing to build upsert context: %s", exc)
            raise

        ctx = UpsertContext(
            table_config=self._table_config,
            schema=self._schema,
            primary_key_columns=primary_key_columns,
            comparison_columns=comparison_columns,
            delete_record_column=self._delete_record_column,
            hash_function=hash_function,
            partial_upsert_handler=self._partial_upsert_handler,
            enable_snapshot=self._enable_snapshot,
            enable_preload=self._enable_preload,
            metadata_ttl=self._metadata_ttl,
            deleted_keys_ttl=self._deleted_keys_ttl,
            consistency_mode=self._consistency_mode,
            upsert_view_refresh_interval_ms=self._upsert_view_refresh_interval_ms,
            table_index_dir=table_index_dir,
            drop_out_of_order_record=self._drop_out_of_order_record,
            enable_deleted_keys_compaction_consistency=self._enable_deleted_keys_compaction_consistency,
            table_data_manager=self._table_data_manager,
        )
        self.finalized = True
        logger.debug(
            "Built upsert context for %r (primary_key_columns=%s, comparison_columns=%s)",
            ctx.table_index_dir,
            list(ctx.primary_key_columns),
            list(ctx.comparison_columns),
        )
        return ctx
