"""Configuration settings for ToDo64 with caching utilities."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ToDo64 application settings"""

    model_config = SettingsConfigDict(
        env_prefix="TODO64_",
        env_file=[".env.test", ".env"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Local storage
    data_dir: Path = Path("./data")
    store_filename: str = "tasks.json"
    quarantine_dirname: str = "Corrupted_Backups"

    # Snapshot export / import
    backup_directory: Path = Path("./backups")
    max_backups: int = 10

    # Reminder host
    notifications_authorized: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"
    log_file: Path | None = None

    @property
    def store_path(self) -> Path:
        """Location of the persisted task collection"""
        return self.data_dir / self.store_filename

    @property
    def quarantine_directory(self) -> Path:
        """Where unreadable store files are moved before a fresh start"""
        return self.data_dir / self.quarantine_dirname


_SETTINGS_LOCK = RLock()
_SETTINGS_CACHE: Settings | None = None


def get_settings(*, refresh: bool = False) -> Settings:
    """Return a cached ``Settings`` instance.

    Parameters
    ----------
    refresh:
        When ``True`` the cached instance is discarded and a new one is created.
    """

    global _SETTINGS_CACHE

    with _SETTINGS_LOCK:
        if refresh or _SETTINGS_CACHE is None:
            _SETTINGS_CACHE = Settings()
        return _SETTINGS_CACHE


def clear_settings_cache() -> None:
    """Clear the cached settings instance."""

    global _SETTINGS_CACHE

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None


@contextmanager
def override_settings(**overrides: Any) -> Iterator[Settings]:
    """Temporarily override the cached settings within a context."""

    global _SETTINGS_CACHE

    with _SETTINGS_LOCK:
        previous_settings = _SETTINGS_CACHE

    base_settings = previous_settings or Settings()
    patched_settings = base_settings.model_copy(update=overrides)

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = patched_settings

    try:
        yield patched_settings
    finally:
        with _SETTINGS_LOCK:
            _SETTINGS_CACHE = previous_settings
