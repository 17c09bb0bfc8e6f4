"""Tests for the bounded, shared-blob calculation history store."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

import calchub.services.history_service as history_service
from calchub.services.history_service import HistoryStore
from calchub.storage import KeyValueStorage, MemoryBackend, StorageError


@pytest.fixture
def ticking_clock(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make every new entry one second newer than the previous one."""

    start = datetime(2025, 1, 1, tzinfo=UTC)
    ticks = iter(range(10_000))
    monkeypatch.setattr(
        history_service,
        "_current_timestamp",
        lambda: start + timedelta(seconds=next(ticks)),
    )


@pytest.mark.asyncio
async def test_load_defaults_to_empty(storage: KeyValueStorage) -> None:
    assert await HistoryStore(storage).load("alice", "tip-calculator") == []


@pytest.mark.asyncio
async def test_append_prepends_newest_entry(
    storage: KeyValueStorage, ticking_clock: None
) -> None:
    store = HistoryStore(storage)

    await store.append("alice", "tip-calculator", {"bill_amount": 10}, "first")
    entries = await store.append("alice", "tip-calculator", {"bill_amount": 20}, "second")

    assert [entry.result for entry in entries] == ["second", "first"]
    assert entries[0].inputs == {"bill_amount": 20}
    assert entries[0].timestamp.tzinfo is not None
    assert entries[0].id != entries[1].id
    assert await store.load("alice", "tip-calculator") == entries


@pytest.mark.asyncio
async def test_history_is_bounded_to_most_recent_fifty(
    storage: KeyValueStorage, ticking_clock: None
) -> None:
    store = HistoryStore(storage)

    for index in range(55):
        await store.append("alice", "loan-calculator", {"n": index}, f"result {index}")

    entries = await store.load("alice", "loan-calculator")
    assert len(entries) == 50
    assert [entry.inputs["n"] for entry in entries] == list(range(54, 4, -1))
    timestamps = [entry.timestamp for entry in entries]
    assert timestamps == sorted(timestamps, reverse=True)


@pytest.mark.asyncio
async def test_capacity_is_configurable(storage: KeyValueStorage) -> None:
    store = HistoryStore(storage, capacity=3)

    for index in range(5):
        await store.append("alice", "tip-calculator", {"n": index}, str(index))

    assert [e.result for e in await store.load("alice", "tip-calculator")] == ["4", "3", "2"]


def test_capacity_must_be_positive(storage: KeyValueStorage) -> None:
    with pytest.raises(ValueError):
        HistoryStore(storage, capacity=0)


@pytest.mark.asyncio
async def test_append_does_not_touch_other_calculators(storage: KeyValueStorage) -> None:
    store = HistoryStore(storage)
    before = await store.append("alice", "bmi-calculator", {"unit": "metric"}, "BMI: 22.0")

    for index in range(60):
        await store.append("alice", "tip-calculator", {"n": index}, str(index))

    assert await store.load("alice", "bmi-calculator") == before


@pytest.mark.asyncio
async def test_append_rereads_mapping_before_writing(
    storage: KeyValueStorage, memory_backend: MemoryBackend
) -> None:
    """A slice written by another request between two appends survives."""

    store = HistoryStore(storage)
    await store.append("alice", "tip-calculator", {}, "tip")

    key = storage.key_for("alice", "calculation-history")
    mapping = json.loads(memory_backend.data[key])
    mapping["loan-calculator"] = [
        {
            "id": "external",
            "timestamp": "2025-01-01T00:00:00+00:00",
            "inputs": {},
            "result": "loan",
        }
    ]
    memory_backend.data[key] = json.dumps(mapping)

    await store.append("alice", "tip-calculator", {}, "tip again")

    loan = await store.load("alice", "loan-calculator")
    assert [entry.id for entry in loan] == ["external"]


@pytest.mark.asyncio
async def test_clear_removes_only_one_calculator(storage: KeyValueStorage) -> None:
    store = HistoryStore(storage)
    await store.append("alice", "tip-calculator", {}, "tip")
    await store.append("alice", "loan-calculator", {}, "loan")

    await store.clear("alice", "tip-calculator")

    assert await store.load("alice", "tip-calculator") == []
    assert len(await store.load("alice", "loan-calculator")) == 1


@pytest.mark.asyncio
async def test_clear_without_history_does_not_write(
    storage: KeyValueStorage, monkeypatch: pytest.MonkeyPatch
) -> None:
    spy = AsyncMock(wraps=storage.set)
    monkeypatch.setattr(storage, "set", spy)

    await HistoryStore(storage).clear("alice", "tip-calculator")

    spy.assert_not_awaited()


@pytest.mark.asyncio
async def test_profiles_are_isolated(storage: KeyValueStorage) -> None:
    store = HistoryStore(storage)
    await store.append("alice", "tip-calculator", {}, "tip")

    assert await store.load("bob", "tip-calculator") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["{broken", "[]", '"text"'])
async def test_corrupt_mapping_loads_as_empty_and_is_replaced(
    storage: KeyValueStorage, memory_backend: MemoryBackend, raw: str
) -> None:
    key = storage.key_for("alice", "calculation-history")
    memory_backend.data[key] = raw
    store = HistoryStore(storage)

    assert await store.load("alice", "tip-calculator") == []
    entries = await store.append("alice", "tip-calculator", {}, "tip")

    assert len(entries) == 1
    assert list(json.loads(memory_backend.data[key])) == ["tip-calculator"]


@pytest.mark.asyncio
async def test_malformed_entries_are_skipped(
    storage: KeyValueStorage, memory_backend: MemoryBackend
) -> None:
    key = storage.key_for("alice", "calculation-history")
    memory_backend.data[key] = json.dumps(
        {
            "tip-calculator": [
                {"id": "ok", "timestamp": "2025-01-01T00:00:00Z", "inputs": {}, "result": "r"},
                {"id": "missing-result", "timestamp": "2025-01-01T00:00:00Z"},
                "not an object",
            ]
        }
    )

    entries = await HistoryStore(storage).load("alice", "tip-calculator")

    assert [entry.id for entry in entries] == ["ok"]


@pytest.mark.asyncio
async def test_storage_failures_degrade_silently() -> None:
    backend = MagicMock()
    backend.read = AsyncMock(side_effect=StorageError("unavailable"))
    backend.write = AsyncMock(side_effect=StorageError("unavailable"))
    store = HistoryStore(KeyValueStorage(backend))

    assert await store.load("alice", "tip-calculator") == []
    entries = await store.append("alice", "tip-calculator", {"bill_amount": 5}, "tip")
    await store.clear("alice", "tip-calculator")

    assert [entry.result for entry in entries] == ["tip"]
