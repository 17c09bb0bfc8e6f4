"""Per-profile favorites persisted as a JSON array of calculator ids."""

from __future__ import annotations

import logging
from typing import Any

from calchub.storage import FAVORITES_KEY, KeyValueStorage

logger = logging.getLogger(__name__)


def _normalise(payload: Any, *, key: str) -> list[str]:
    """Decode the stored payload into an ordered, duplicate-free id list."""

    if payload is None:
        logger.debug("No favorites stored under %s", key)
        return []
    if not isinstance(payload, list) or not all(isinstance(item, str) for item in payload):
        logger.warning("Ignoring favorites under %s: expected a JSON array of strings", key)
        return []
    # dict.fromkeys keeps the first occurrence of every id.
    return list(dict.fromkeys(payload))


class FavoritesStore:
    """Load and toggle the set of favorited calculator ids for a profile.

    The store does not know the registry; any id may be toggled. A toggle
    issues exactly one storage write containing the full resulting list.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    async def load(self, profile_id: str) -> list[str]:
        key = self._storage.key_for(profile_id, FAVORITES_KEY)
        return _normalise(await self._storage.get_json(key), key=key)

    async def toggle(self, profile_id: str, calculator_id: str) -> list[str]:
        key = self._storage.key_for(profile_id, FAVORITES_KEY)
        favorites = _normalise(await self._storage.get_json(key), key=key)
        if calculator_id in favorites:
            favorites.remove(calculator_id)
        else:
            favorites.append(calculator_id)

        if not await self._storage.set_json(key, favorites):
            logger.warning(
                "Favorites for profile %s were not persisted; returning unsaved state",
                profile_id,
            )
        return favorites


__all__ = ["FavoritesStore"]
