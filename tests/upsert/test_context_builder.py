from __future__ import annotations

from pathlib import Path

import pytest

from upsertkit.core.errors import ConfigurationError
from upsertkit.core.grammar import ConsistencyMode, HashFunction
from upsertkit.upsert.context import UpsertContext, UpsertContextBuilder

TABLE_CONFIG = object()
SCHEMA = object()


def _minimal() -> UpsertContextBuilder:
    return (
        UpsertContext.builder()
        .set_table_config(TABLE_CONFIG)
        .set_schema(SCHEMA)
        .set_primary_key_columns(["id"])
        .set_comparison_columns(["updatedAt"])
        .set_table_index_dir("/data/t1")
    )


def test_minimal_build_applies_defaults() -> None:
    ctx = _minimal().build()

    assert ctx.table_config is TABLE_CONFIG
    assert ctx.schema is SCHEMA
    assert ctx.primary_key_columns == ("id",)
    assert ctx.comparison_columns == ("updatedAt",)
    assert ctx.table_index_dir == "/data/t1"
    assert ctx.hash_function is HashFunction.NONE
    assert ctx.delete_record_column is None
    assert ctx.partial_upsert_handler is None
    assert ctx.consistency_mode is None
    assert ctx.table_data_manager is None
    assert ctx.enable_snapshot is False
    assert ctx.enable_preload is False
    assert ctx.drop_out_of_order_record is False
    assert ctx.enable_deleted_keys_compaction_consistency is False
    assert ctx.metadata_ttl == 0
    assert ctx.deleted_keys_ttl == 0
    assert ctx.upsert_view_refresh_interval_ms == 0


def test_every_field_round_trips() -> None:
    handler = object()
    manager = object()
    ctx = (
        _minimal()
        .set_primary_key_columns(["tenant", "id"])
        .set_comparison_columns(["ts", "seq"])
        .set_delete_record_column("is_deleted")
        .set_hash_function(HashFunction.MURMUR3)
        .set_partial_upsert_handler(handler)
        .set_enable_snapshot(True)
        .set_enable_preload(True)
        .set_metadata_ttl(3600.5)
        .set_deleted_keys_ttl(60.0)
        .set_consistency_mode(ConsistencyMode.SNAPSHOT)
        .set_upsert_view_refresh_interval_ms(3000)
        .set_table_index_dir(Path("/data/t2"))
        .set_drop_out_of_order_record(True)
        .set_enable_deleted_keys_compaction_consistency(True)
        .set_table_data_manager(manager)
        .build()
    )

    assert ctx.primary_key_columns == ("tenant", "id")
    assert ctx.comparison_columns == ("ts", "seq")
    assert ctx.delete_record_column == "is_deleted"
    assert ctx.hash_function is HashFunction.MURMUR3
    assert ctx.partial_upsert_handler is handler
    assert ctx.is_snapshot_enabled is True
    assert ctx.is_preload_enabled is True
    assert ctx.metadata_ttl == 3600.5
    assert ctx.deleted_keys_ttl == 60.0
    assert ctx.consistency_mode is ConsistencyMode.SNAPSHOT
    assert ctx.upsert_view_refresh_interval_ms == 3000
    assert ctx.table_index_dir == Path("/data/t2")
    assert ctx.is_drop_out_of_order_record is True
    assert ctx.is_deleted_keys_compaction_consistency_enabled is True
    assert ctx.table_data_manager is manager


def test_consistency_mode_none_is_distinct_from_unset() -> None:
    assert _minimal().build().consistency_mode is None
    explicit = _minimal().set_consistency_mode(ConsistencyMode.NONE).build()
    assert explicit.consistency_mode is ConsistencyMode.NONE


def test_setters_return_builder() -> None:
    b = UpsertContextBuilder()
    assert b.set_enable_snapshot(True) is b
    assert b.set_table_data_manager(None) is b


def test_last_write_wins() -> None:
    ctx = (
        _minimal()
        .set_hash_function(HashFunction.MD5)
        .set_hash_function(HashFunction.UUID)
        .set_primary_key_columns(["a"])
        .set_primary_key_columns(["b"])
        .set_enable_snapshot(True)
        .set_enable_snapshot(False)
        .build()
    )
    assert ctx.hash_function is HashFunction.UUID
    assert ctx.primary_key_columns == ("b",)
    assert ctx.enable_snapshot is False


def test_failure_names_primary_key_columns() -> None:
    b = UpsertContext.builder().set_table_config(TABLE_CONFIG).set_schema(SCHEMA)
    with pytest.raises(ConfigurationError, match="Primary key columns must be set") as exc_info:
        b.build()
    assert exc_info.value.field == "primary_key_columns"


@pytest.mark.parametrize(
    "setter,value,message,field",
    [
        ("set_table_config", None, "Table config must be set", "table_config"),
        ("set_schema", None, "Schema must be set", "schema"),
        ("set_primary_key_columns", None, "Primary key columns must be set", "primary_key_columns"),
        ("set_primary_key_columns", [], "Primary key columns must be set", "primary_key_columns"),
        ("set_comparison_columns", None, "Comparison columns must be set", "comparison_columns"),
        ("set_comparison_columns", [], "Comparison columns must be set", "comparison_columns"),
        ("set_hash_function", None, "Hash function must be set", "hash_function"),
        ("set_table_index_dir", None, "Table index directory must be set", "table_index_dir"),
    ],
)
def test_each_missing_required_field_is_reported(
    setter: str, value, message: str, field: str
) -> None:
    b = getattr(_minimal(), setter)(value)
    with pytest.raises(ConfigurationError, match=message) as exc_info:
        b.build()
    assert exc_info.value.field == field
    assert b.finalized is False


def test_first_violation_wins() -> None:
    # Nothing set: table config is checked before everything else.
    with pytest.raises(ConfigurationError, match="Table config must be set"):
        UpsertContext.builder().build()

    b = (
        UpsertContext.builder()
        .set_table_config(TABLE_CONFIG)
        .set_schema(SCHEMA)
        .set_primary_key_columns(["id"])
    )
    with pytest.raises(ConfigurationError, match="Comparison columns must be set"):
        b.build()


def test_failed_build_can_be_corrected_and_retried() -> None:
    b = _minimal().set_table_index_dir(None)
    with pytest.raises(ConfigurationError):
        b.build()
    assert b.finalized is False

    ctx = b.set_table_index_dir("/data/t3").build()
    assert b.finalized is True
    assert ctx.table_index_dir == "/data/t3"


def test_rebuilding_yields_independent_snapshots() -> None:
    b = _minimal()
    first = b.build()
    second = b.set_enable_preload(True).build()

    assert first.enable_preload is False
    assert second.enable_preload is True
    assert first is not second


def test_build_logs_refusal(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("DEBUG", logger="upsertkit.upsert.context"):
        with pytest.raises(ConfigurationError):
            UpsertContext.builder().set_table_config(TABLE_CONFIG).build()
    assert "Schema must be set" in caplog.text


@pytest.mark.parametrize(
    "columns,expected",
    [
        ((c for c in ["tenant", "id"]), ("tenant", "id")),
        (iter(["id"]), ("id",)),
        (("tenant", "id"), ("tenant", "id")),
        ("id", ("id",)),
    ],
)
def test_column_iterables_are_frozen_to_tuples(columns, expected: tuple[str, ...]) -> None:
    ctx = _minimal().set_primary_key_columns(columns).build()
    assert ctx.primary_key_columns == expected


@pytest.mark.parametrize("empty", [iter([]), (c for c in []), (), ""])
def test_empty_column_iterables_are_reported_missing(empty) -> None:
    with pytest.raises(ConfigurationError, match="Primary key columns must be set"):
        _minimal().set_primary_key_columns(empty).build()
    with pytest.raises(ConfigurationError, match="Comparison columns must be set"):
        _minimal().set_comparison_columns(iter([])).build()


def test_consumed_iterator_survives_a_failed_build() -> None:
    b = _minimal().set_primary_key_columns(iter(["id"])).set_table_index_dir(None)
    with pytest.raises(ConfigurationError, match="Table index directory must be set"):
        b.build()

    ctx = b.set_table_index_dir("/data/t1").build()
    assert ctx.primary_key_columns == ("id",)


@pytest.mark.parametrize("index_dir", ["/data/t1/", b"/data/t1", Path("/data/t1")])
def test_table_index_dir_is_kept_as_given(index_dir) -> None:
    ctx = _minimal().set_table_index_dir(index_dir).build()
    assert ctx.table_index_dir == index_dir
    assert type(ctx.table_index_dir) is type(index_dir)


def test_non_path_table_index_dir_is_a_configuration_error() -> None:
    b = _minimal().set_table_index_dir(42)  # type: ignore[arg-type]
    with pytest.raises(ConfigurationError, match="must be a filesystem path") as exc_info:
        b.build()
    assert exc_info.value.field == "table_index_dir"
    assert b.finalized is False


def test_empty_table_index_dir_is_reported_missing() -> None:
    with pytest.raises(ConfigurationError, match="Table index directory must be set"):
        _minimal().set_table_index_dir("").build()
