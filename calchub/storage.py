"""Key-value persistence used by the favorites and history stores.

The stores never talk to a backend directly. They go through
:class:`KeyValueStorage`, which turns every backend failure (unreachable Redis,
unwritable disk, corrupt document) into "value absent" on reads and ``False``
on writes. Persisted conveniences must never break a calculation.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from calchub.settings import AppSettings, get_settings

if TYPE_CHECKING:
    from redis.asyncio import Redis as RedisClient
else:  # pragma: no cover - runtime fallback for optional dependency
    RedisClient = Any

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorites"
HISTORY_KEY = "calculation-history"


class StorageError(Exception):
    """Raised by a backend when a read, write or delete cannot be completed."""


class StorageBackend(Protocol):
    """Minimal contract every persistence backend satisfies."""

    async def read(self, key: str) -> str | None: ...

    async def write(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


def storage_key(namespace: str, profile_id: str, name: str) -> str:
    """Return the namespaced key for one profile's ``name`` record."""

    return f"{namespace}:{profile_id}:{name}"


class MemoryBackend:
    """Process-local backend used by tests and throwaway deployments."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> str | None:
        return self.data.get(key)

    async def write(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileBackend:
    """Persist every key inside one JSON object on disk.

    Writes land in a sibling temporary file which then replaces the document
    with :func:`os.replace`, so readers only ever see a complete document.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load_document(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as exc:
            raise StorageError(f"Storage document {self._path} is not valid UTF-8") from exc
        except OSError as exc:
            raise StorageError(f"Unable to read {self._path}: {exc}") from exc

        if not raw.strip():
            return {}
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Storage document {self._path} is not valid JSON") from exc
        if not isinstance(document, dict):
            raise StorageError(f"Storage document {self._path} is not a JSON object")
        return {str(key): value for key, value in document.items() if isinstance(value, str)}

    def _dump_document(self, document: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, ensure_ascii=False, indent=2, sort_keys=True)
                    handle.write("\n")
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Unable to write {self._path}: {exc}") from exc

    async def read(self, key: str) -> str | None:
        async with self._lock:
            return self._load_document().get(key)

    async def write(self, key: str, value: str) -> None:
        async with self._lock:
            document = self._load_document()
            document[key] = value
            self._dump_document(document)

    async def delete(self, key: str) -> None:
        async with self._lock:
            document = self._load_document()
            if key not in document:
                return
            del document[key]
            self._dump_document(document)


@lru_cache(maxsize=1)
def _load_redis_components() -> tuple[Any, type[BaseException]]:
    """Return the Redis asyncio client class and its base error type."""

    try:  # pragma: no cover - optional dependency import
        from redis.asyncio import Redis as RedisClientType
        from redis.exceptions import RedisError
    except ModuleNotFoundError:  # pragma: no cover - optional dependency
        return None, StorageError

    return RedisClientType, RedisError


class RedisBackend:
    """Backend storing each key as a plain Redis string."""

    def __init__(self, redis: RedisClient) -> None:
        self._redis = redis
        _, self._error_type = _load_redis_components()

    @classmethod
    def from_url(cls, url: str) -> "RedisBackend":
        redis_class, _ = _load_redis_components()
        if redis_class is None:
            raise StorageError("The redis package is not installed")
        client = redis_class.from_url(url, decode_responses=True, encoding="utf-8")
        return cls(client)

    async def read(self, key: str) -> str | None:
        try:
            value = await self._redis.get(key)
        except UnicodeDecodeError as exc:
            raise StorageError(f"Redis value for key {key} is not valid UTF-8") from exc
        except self._error_type as exc:
            raise StorageError(f"Redis get failed for key {key}: {exc}") from exc
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise StorageError(f"Redis value for key {key} is not valid UTF-8") from exc
        return value

    async def write(self, key: str, value: str) -> None:
        try:
            await self._redis.set(key, value)
        except self._error_type as exc:
            raise StorageError(f"Redis set failed for key {key}: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except self._error_type as exc:
            raise StorageError(f"Redis delete failed for key {key}: {exc}") from exc

    async def aclose(self) -> None:
        await self._redis.aclose()


class KeyValueStorage:
    """Failure-tolerant facade over a :class:`StorageBackend`.

    ``get`` answers ``None`` when the key is absent or the backend is
    unavailable; ``set`` and ``remove`` report success as a boolean. A
    :class:`StorageError` is logged and never propagated.
    """

    def __init__(self, backend: StorageBackend, *, namespace: str = "calchub") -> None:
        self._backend = backend
        self._namespace = namespace

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def namespace(self) -> str:
        return self._namespace

    def key_for(self, profile_id: str, name: str) -> str:
        return storage_key(self._namespace, profile_id, name)

    async def get(self, key: str) -> str | None:
        try:
            return await self._backend.read(key)
        except StorageError as exc:
            logger.warning("Storage read failed for key %s: %s", key, exc)
            return None

    async def set(self, key: str, value: str) -> bool:
        try:
            await self._backend.write(key, value)
        except StorageError as exc:
            logger.warning("Storage write failed for key %s: %s", key, exc)
            return False
        return True

    async def remove(self, key: str) -> bool:
        try:
            await self._backend.delete(key)
        except StorageError as exc:
            logger.warning("Storage delete failed for key %s: %s", key, exc)
            return False
        return True

    async def get_json(self, key: str) -> Any:
        """Return the decoded JSON value at ``key`` or ``None`` if unusable."""

        payload = await self.get(key)
        if payload is None:
            return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt JSON stored under key %s", key)
            return None

    async def set_json(self, key: str, value: Any) -> bool:
        encoded = json.dumps(value, ensure_ascii=False, default=str)
        return await self.set(key, encoded)


def build_backend(settings: AppSettings) -> StorageBackend:
    """Instantiate the backend selected by ``settings.storage_backend``."""

    if settings.storage_backend == "memory":
        return MemoryBackend()
    if settings.storage_backend == "redis":
        return RedisBackend.from_url(settings.redis_url)
    return JsonFileBackend(settings.storage_path)


_storage: KeyValueStorage | None = None


def get_storage(settings: AppSettings | None = None) -> KeyValueStorage:
    """Return the process-wide storage adapter, creating it on first use."""

    global _storage
    if _storage is None:
        active = settings or get_settings()
        try:
            backend = build_backend(active)
        except StorageError as exc:
            logger.warning(
                "Storage backend %s unavailable (%s); falling back to memory.",
                active.storage_backend,
                exc,
            )
            backend = MemoryBackend()
        _storage = KeyValueStorage(backend, namespace=active.storage_namespace)
        logger.info("Storage backend initialised: %s", type(backend).__name__)
    return _storage


async def close_storage() -> None:
    """Release backend resources held by the shared adapter."""

    global _storage
    if _storage is not None and isinstance(_storage.backend, RedisBackend):
        await _storage.backend.aclose()
    _storage = None


__all__ = [
    "FAVORITES_KEY",
    "HISTORY_KEY",
    "JsonFileBackend",
    "KeyValueStorage",
    "MemoryBackend",
    "RedisBackend",
    "StorageBackend",
    "StorageError",
    "build_backend",
    "close_storage",
    "get_storage",
    "storage_key",
]
