"""Calculation history kept in one shared JSON mapping per profile.

Layout under the ``calculation-history`` key::

    {"<calculator id>": [{"id", "timestamp", "inputs", "result"}, ...], ...}

Every mutation re-reads the whole mapping, replaces one calculator's slice and
writes the mapping back, so appending to one calculator never drops entries
another request wrote for a different calculator in the meantime. Reads and
writes degrade to "empty" and "best effort" respectively; callers never see a
storage failure.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from calchub.schemas.history import HistoryEntry
from calchub.settings import DEFAULT_HISTORY_CAPACITY
from calchub.storage import HISTORY_KEY, KeyValueStorage

logger = logging.getLogger(__name__)


def _current_timestamp() -> datetime:
    return datetime.now(UTC)


def _new_entry_id() -> str:
    return uuid.uuid4().hex


def _parse_entries(raw: Any, *, calculator_id: str) -> list[HistoryEntry]:
    if not isinstance(raw, list):
        return []
    entries: list[HistoryEntry] = []
    for item in raw:
        try:
            entries.append(HistoryEntry.model_validate(item))
        except ValidationError:
            logger.warning("Skipping malformed history entry for %s", calculator_id)
    return entries


class HistoryStore:
    """Bounded, most-recent-first history per calculator for each profile."""

    def __init__(
        self, storage: KeyValueStorage, *, capacity: int = DEFAULT_HISTORY_CAPACITY
    ) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._storage = storage
        self._capacity = capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    async def _read_mapping(self, key: str) -> dict[str, Any]:
        payload = await self._storage.get_json(key)
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring history under %s: expected a JSON object", key)
            return {}
        return payload

    async def load(self, profile_id: str, calculator_id: str) -> list[HistoryEntry]:
        key = self._storage.key_for(profile_id, HISTORY_KEY)
        mapping = await self._read_mapping(key)
        return _parse_entries(mapping.get(calculator_id), calculator_id=calculator_id)

    async def append(
        self,
        profile_id: str,
        calculator_id: str,
        inputs: Mapping[str, Any],
        result: str,
    ) -> list[HistoryEntry]:
        """Prepend a new entry and return the bounded sequence for the calculator."""

        key = self._storage.key_for(profile_id, HISTORY_KEY)
        entry = HistoryEntry(
            id=_new_entry_id(),
            timestamp=_current_timestamp(),
            inputs=dict(inputs),
            result=result,
        )

        mapping = await self._read_mapping(key)
        existing = _parse_entries(mapping.get(calculator_id), calculator_id=calculator_id)
        entries = [entry, *existing][: self._capacity]
        mapping[calculator_id] = [item.model_dump(mode="json") for item in entries]

        if not await self._storage.set_json(key, mapping):
            logger.warning(
                "History entry for %s (profile %s) was not persisted",
                calculator_id,
                profile_id,
            )
        else:
            logger.debug(
                "Recorded history entry %s for %s (%d kept)",
                entry.id,
                calculator_id,
                len(entries),
            )
        return entries

    async def clear(self, profile_id: str, calculator_id: str) -> None:
        key = self._storage.key_for(profile_id, HISTORY_KEY)
        mapping = await self._read_mapping(key)
        if calculator_id not in mapping:
            return
        del mapping[calculator_id]
        if not await self._storage.set_json(key, mapping):
            logger.warning(
                "Clearing history for %s (profile %s) was not persisted",
                calculator_id,
                profile_id,
            )


__all__ = ["HistoryStore"]
