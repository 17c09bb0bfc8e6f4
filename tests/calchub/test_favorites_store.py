"""Tests for the per-profile favorites store."""

from __future__ import annotations

import json
import logging
from unittest.mock import AsyncMock

import pytest

from calchub.services.favorites_service import FavoritesStore
from calchub.storage import KeyValueStorage, MemoryBackend


@pytest.mark.asyncio
async def test_load_defaults_to_empty(storage: KeyValueStorage) -> None:
    assert await FavoritesStore(storage).load("alice") == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "initial",
    [[], ["tip-calculator"], ["loan-calculator", "bmi-calculator"]],
)
@pytest.mark.parametrize("calculator_id", ["tip-calculator", "unit-converter"])
async def test_toggle_twice_restores_original_set(
    storage: KeyValueStorage, initial: list[str], calculator_id: str
) -> None:
    store = FavoritesStore(storage)
    await storage.set_json(storage.key_for("alice", "favorites"), initial)

    once = await store.toggle("alice", calculator_id)
    twice = await store.toggle("alice", calculator_id)

    assert (calculator_id in once) is (calculator_id not in initial)
    assert set(twice) == set(initial)
    assert await store.load("alice") == twice


@pytest.mark.asyncio
async def test_toggle_performs_exactly_one_write(
    storage: KeyValueStorage, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = FavoritesStore(storage)
    spy = AsyncMock(wraps=storage.set)
    monkeypatch.setattr(storage, "set", spy)

    await store.toggle("alice", "tip-calculator")

    spy.assert_awaited_once()
    key, payload = spy.await_args.args
    assert key == "test:alice:favorites"
    assert json.loads(payload) == ["tip-calculator"]


@pytest.mark.asyncio
async def test_insertion_order_is_preserved(storage: KeyValueStorage) -> None:
    store = FavoritesStore(storage)

    await store.toggle("alice", "tip-calculator")
    await store.toggle("alice", "loan-calculator")
    await store.toggle("alice", "bmi-calculator")
    result = await store.toggle("alice", "loan-calculator")

    assert result == ["tip-calculator", "bmi-calculator"]


@pytest.mark.asyncio
async def test_profiles_are_isolated(storage: KeyValueStorage) -> None:
    store = FavoritesStore(storage)

    await store.toggle("alice", "tip-calculator")

    assert await store.load("bob") == []
    assert await store.load("alice") == ["tip-calculator"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    ["not json", '{"tip-calculator": true}', "[1, 2]", '"tip-calculator"'],
)
async def test_unusable_payloads_load_as_empty(
    storage: KeyValueStorage, memory_backend: MemoryBackend, raw: str
) -> None:
    memory_backend.data[storage.key_for("alice", "favorites")] = raw

    assert await FavoritesStore(storage).load("alice") == []


def _calchub_levels(caplog: pytest.LogCaptureFixture) -> list[int]:
    return [record.levelno for record in caplog.records if record.name.startswith("calchub")]


@pytest.mark.asyncio
async def test_absent_favorites_log_at_debug_and_corrupt_at_warning(
    storage: KeyValueStorage,
    memory_backend: MemoryBackend,
    caplog: pytest.LogCaptureFixture,
) -> None:
    store = FavoritesStore(storage)

    with caplog.at_level(logging.DEBUG, logger="calchub"):
        assert await store.load("alice") == []
    assert _calchub_levels(caplog) == [logging.DEBUG]

    caplog.clear()
    memory_backend.data[storage.key_for("alice", "favorites")] = "[1, 2]"
    with caplog.at_level(logging.DEBUG, logger="calchub"):
        assert await store.load("alice") == []
    assert _calchub_levels(caplog) == [logging.WARNING]


@pytest.mark.asyncio
async def test_duplicates_in_storage_are_collapsed(
    storage: KeyValueStorage, memory_backend: MemoryBackend
) -> None:
    memory_backend.data[storage.key_for("alice", "favorites")] = json.dumps(
        ["tip-calculator", "tip-calculator", "loan-calculator"]
    )

    assert await FavoritesStore(storage).load("alice") == [
        "tip-calculator",
        "loan-calculator",
    ]


@pytest.mark.asyncio
async def test_failed_write_still_returns_new_state(storage: KeyValueStorage) -> None:
    storage.set = AsyncMock(return_value=False)  # type: ignore[method-assign]

    result = await FavoritesStore(storage).toggle("alice", "tip-calculator")

    assert result == ["tip-calculator"]
