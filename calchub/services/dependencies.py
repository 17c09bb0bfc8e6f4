"""FastAPI dependency wiring for CalcHub services.

Routers depend on these factories rather than on module globals, which lets
tests swap in in-memory storage or a stub suggestion client through
``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends

from calchub.calculators.catalog import get_registry
from calchub.calculators.registry import CalculatorRegistry
from calchub.services.favorites_service import FavoritesStore
from calchub.services.history_service import HistoryStore
from calchub.services.suggestion_service import SuggestionClient, SuggestionService
from calchub.settings import AppSettings, get_settings
from calchub.storage import KeyValueStorage, get_storage


def get_registry_dependency() -> CalculatorRegistry:
    return get_registry()


def get_settings_dependency() -> AppSettings:
    return get_settings()


def get_storage_dependency(
    settings: AppSettings = Depends(get_settings_dependency),
) -> KeyValueStorage:
    return get_storage(settings)


def get_favorites_store(
    storage: KeyValueStorage = Depends(get_storage_dependency),
) -> FavoritesStore:
    return FavoritesStore(storage)


def get_history_store(
    storage: KeyValueStorage = Depends(get_storage_dependency),
    settings: AppSettings = Depends(get_settings_dependency),
) -> HistoryStore:
    return HistoryStore(storage, capacity=settings.history_capacity)


def get_suggestion_service(
    registry: CalculatorRegistry = Depends(get_registry_dependency),
    settings: AppSettings = Depends(get_settings_dependency),
) -> SuggestionService:
    """Wire the registry and the configured remote client, if any."""

    return SuggestionService(registry, SuggestionClient.from_settings(settings))


__all__ = [
    "get_favorites_store",
    "get_history_store",
    "get_registry_dependency",
    "get_settings_dependency",
    "get_storage_dependency",
    "get_suggestion_service",
]
