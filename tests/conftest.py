"""
Shared fixtures.

- Test environment variables are set before every test (autouse)
- The project root is added to ``sys.path`` so ``import todo64`` resolves
  without an install
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Point every setting at a temporary directory for the test."""
    from todo64.config import clear_settings_cache

    env: dict[str, str] = {
        "TODO64_DATA_DIR": str(tmp_path / "data"),
        "TODO64_BACKUP_DIRECTORY": str(tmp_path / "backups"),
        "TODO64_LOG_LEVEL": "DEBUG",
    }
    for k, v in env.items():
        monkeypatch.setenv(k, v)

    clear_settings_cache()
    yield
    clear_settings_cache()


@dataclass
class RecordingReminderScheduler:
    """ReminderScheduler fake that records every call in order."""

    calls: list[tuple] = field(default_factory=list)

    def request_authorization(self) -> None:
        self.calls.append(("request_authorization",))

    def schedule(
        self, task_id: str, title: str, body: str | None, fire_at: datetime
    ) -> None:
        self.calls.append(("schedule", task_id, title, body, fire_at))

    def cancel(self, task_id: str) -> None:
        self.calls.append(("cancel", task_id))

    def cancel_all(self) -> None:
        self.calls.append(("cancel_all",))

    def calls_named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    def reset(self) -> None:
        self.calls.clear()


@pytest.fixture
def recording_scheduler() -> RecordingReminderScheduler:
    return RecordingReminderScheduler()


@pytest.fixture
def task_store(tmp_path: Path):
    from todo64.tasks import TaskStore

    return TaskStore(tmp_path / "data" / "tasks.json")


@pytest.fixture
def backup_manager(tmp_path: Path):
    from todo64.backup import BackupManager

    return BackupManager(tmp_path / "backups", max_backups=10)


@pytest.fixture
def service(task_store, recording_scheduler, backup_manager):
    from todo64.tasks.mutation_service import TaskMutationService

    return TaskMutationService(task_store, recording_scheduler, backup_manager)
