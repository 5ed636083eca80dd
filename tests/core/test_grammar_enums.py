import pytest

from upsertkit.core.grammar import (
    ConsistencyMode,
    HashFunction,
    UpsertMode,
    consistency_mode_from_value,
    ensure_all_enum_values_lower_snake,
    hash_function_from_value,
    is_lower_snake,
    upsert_mode_from_value,
)


def test_all_enum_values_are_lower_snake() -> None:
    ensure_all_enum_values_lower_snake([HashFunction, ConsistencyMode, UpsertMode])


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("none", HashFunction.NONE),
        ("MD5", HashFunction.MD5),
        (" murmur3 ", HashFunction.MURMUR3),
        (HashFunction.UUID, HashFunction.UUID),
    ],
)
def test_hash_function_from_value(raw, expected: HashFunction) -> None:
    assert hash_function_from_value(raw) is expected


def test_consistency_and_mode_parsers() -> None:
    assert consistency_mode_from_value("Snapshot") is ConsistencyMode.SNAPSHOT
    assert consistency_mode_from_value("sync") is ConsistencyMode.SYNC
    assert upsert_mode_from_value("PARTIAL") is UpsertMode.PARTIAL


@pytest.mark.parametrize("bad", ["sha1", "", "md-5"])
def test_hash_function_rejects_unknown(bad: str) -> None:
    with pytest.raises(ValueError):
        hash_function_from_value(bad)


def test_is_lower_snake() -> None:
    assert is_lower_snake("murmur3")
    assert not is_lower_snake("Murmur3")
    assert not is_lower_snake("")
