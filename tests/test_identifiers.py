"""Tests for entry id generation."""

import pytest

from nutri_ledger.services.identifiers import EntryIdGenerator, new_entry_id, to_base36


def test_to_base36() -> None:
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    with pytest.raises(ValueError):
        to_base36(-1)


def test_ids_unique_when_clock_stalls() -> None:
    generator = EntryIdGenerator(clock_ms=lambda: 1_000)

    ids = [generator.new_id() for _ in range(50)]

    assert len(set(ids)) == 50
    prefixes = [entry_id[: -generator.random_chars] for entry_id in ids]
    assert prefixes[0] == to_base36(1_000)
    assert prefixes[1] == to_base36(1_001)


def test_ids_unique_when_clock_steps_back() -> None:
    ticks = iter([5_000, 4_000, 4_000])
    generator = EntryIdGenerator(clock_ms=lambda: next(ticks), random_chars=4)

    ids = [generator.new_id() for _ in range(3)]

    assert [entry_id[:-4] for entry_id in ids] == [
        to_base36(5_000),
        to_base36(5_001),
        to_base36(5_002),
    ]


def test_new_entry_id_is_base36() -> None:
    first = new_entry_id()
    second = new_entry_id()

    assert first != second
    assert set(first) <= set("0123456789abcdefghijklmnopqrstuvwxyz")
