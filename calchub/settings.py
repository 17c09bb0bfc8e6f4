"""Centralized configuration management for the CalcHub service."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load a local .env before the settings singleton is built so every consumer of
# :mod:`calchub.settings` observes the same environment.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_STORAGE_BACKEND = "file"
DEFAULT_STORAGE_PATH = "./data/calchub-storage.json"
DEFAULT_STORAGE_NAMESPACE = "calchub"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_HISTORY_CAPACITY = 50
DEFAULT_SUGGESTION_TIMEOUT_SECONDS = 20.0
DEFAULT_LOG_LEVEL = "INFO"

StorageBackendName = Literal["file", "memory", "redis"]


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Besides the raw values the class exposes a couple of derived helpers
    (numeric log level, parsed CORS origins, startup warnings) so that the
    application factory does not need to re-parse environment variables.
    """

    _explicit_suggestion_url: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:  # noqa: D401
        """Remember whether the suggestion endpoint was supplied explicitly."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_suggestion_url = "suggestion_service_url" in normalized_keys
        suggestion_env = os.getenv("SUGGESTION_SERVICE_URL")
        if suggestion_env is not None and suggestion_env.strip():
            self._explicit_suggestion_url = True

    storage_backend: StorageBackendName = Field(
        default=DEFAULT_STORAGE_BACKEND,
        alias="STORAGE_BACKEND",
        description=(
            "Persistence backend for favorites and history. ``file`` keeps a"
            " JSON document on disk, ``memory`` lives for the process only and"
            " ``redis`` uses REDIS_URL."
        ),
    )
    storage_path: Path = Field(
        default=Path(DEFAULT_STORAGE_PATH),
        alias="STORAGE_PATH",
        description="Location of the JSON document used by the file backend.",
    )
    storage_namespace: str = Field(
        default=DEFAULT_STORAGE_NAMESPACE,
        alias="STORAGE_NAMESPACE",
        min_length=1,
        description="Prefix applied to every persisted key.",
    )
    redis_url: str = Field(
        default=DEFAULT_REDIS_URL,
        alias="REDIS_URL",
        description="Redis connection string consumed by the redis backend.",
    )
    history_capacity: int = Field(
        default=DEFAULT_HISTORY_CAPACITY,
        alias="HISTORY_CAPACITY",
        ge=1,
        le=500,
        description="Maximum number of history entries kept per calculator.",
    )
    record_history_default: bool = Field(
        default=True,
        alias="RECORD_HISTORY_DEFAULT",
        description=(
            "Whether a compute request writes a history entry when the caller"
            " does not say otherwise."
        ),
    )
    suggestion_service_url: str | None = Field(
        default=None,
        alias="SUGGESTION_SERVICE_URL",
        description="Endpoint of the external calculator suggestion service.",
    )
    suggestion_api_key: str | None = Field(
        default=None,
        alias="SUGGESTION_API_KEY",
        description="Bearer token forwarded to the suggestion service, if any.",
    )
    suggestion_timeout_seconds: float = Field(
        default=DEFAULT_SUGGESTION_TIMEOUT_SECONDS,
        alias="SUGGESTION_TIMEOUT_SECONDS",
        gt=0,
        description="Timeout applied to suggestion requests (seconds).",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of additional CORS origins.",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return []

        origins = [
            origin.strip().rstrip("/")
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin]

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self._explicit_suggestion_url and not self.suggestion_service_url:
            warnings.append(
                "SUGGESTION_SERVICE_URL is not set - calculator suggestions will "
                "always answer with a retry message"
            )

        if self.storage_backend == "memory":
            warnings.append(
                "STORAGE_BACKEND is 'memory' - favorites and history are lost "
                "when the process exits"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_HISTORY_CAPACITY",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_REDIS_URL",
    "DEFAULT_STORAGE_NAMESPACE",
    "DEFAULT_STORAGE_PATH",
    "StorageBackendName",
    "get_settings",
]
