from __future__ import annotations

import dataclasses

import pytest

from upsertkit.upsert.context import UpsertContext


def _ctx(pk: list[str], cmp: list[str]) -> UpsertContext:
    return (
        UpsertContext.builder()
        .set_table_config({"table_name": "t_REALTIME"})
        .set_schema({"id": "str"})
        .set_primary_key_columns(pk)
        .set_comparison_columns(cmp)
        .set_table_index_dir("/data/t")
        .build()
    )


def test_context_rejects_assignment() -> None:
    ctx = _ctx(["id"], ["ts"])
    with pytest.raises(dataclasses.FrozenInstanceError):
        ctx.enable_snapshot = True  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        ctx.primary_key_columns = ("other",)  # type: ignore[misc]


def test_caller_list_mutation_does_not_leak() -> None:
    pk = ["id"]
    cmp = ["ts"]
    ctx = _ctx(pk, cmp)

    pk.append("extra")
    cmp.clear()

    assert ctx.primary_key_columns == ("id",)
    assert ctx.comparison_columns == ("ts",)


def test_accessors_are_stable_across_calls() -> None:
    ctx = _ctx(["id"], ["ts"])
    first = [getattr(ctx, f.name) for f in dataclasses.fields(ctx)]
    second = [getattr(ctx, f.name) for f in dataclasses.fields(ctx)]
    assert first == second


def test_references_are_held_not_copied() -> None:
    handler = object()
    ctx = (
        UpsertContext.builder()
        .set_table_config({})
        .set_schema({})
        .set_primary_key_columns(["id"])
        .set_comparison_columns(["ts"])
        .set_table_index_dir("/data/t")
        .set_partial_upsert_handler(handler)
        .build()
    )
    assert ctx.partial_upsert_handler is handler
