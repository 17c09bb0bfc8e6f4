"""Shared fixtures: in-memory storage, a fresh registry and test settings."""

from __future__ import annotations

import pytest

from calchub.calculators import CalculatorRegistry, build_default_registry
from calchub.settings import AppSettings
from calchub.storage import KeyValueStorage, MemoryBackend


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def storage(memory_backend: MemoryBackend) -> KeyValueStorage:
    """Storage adapter over a process-local dict, namespaced ``test``."""
    return KeyValueStorage(memory_backend, namespace="test")


@pytest.fixture
def registry() -> CalculatorRegistry:
    return build_default_registry()


@pytest.fixture
def app_settings() -> AppSettings:
    """Settings isolated from the developer's environment and ``.env`` file."""
    return AppSettings(
        _env_file=None,
        storage_backend="memory",
        history_capacity=50,
        record_history_default=True,
        suggestion_service_url=None,
    )
