"""Snapshot file management."""

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiofiles

from todo64.tasks.exceptions import BackupIOError
from todo64.utils.mixins import LoggerMixin

BACKUP_PREFIX = "ToDo64_Backup_"
BACKUP_SUFFIX = ".json"


def _backup_sort_key(name: str) -> tuple[int, int]:
    """Order by the unix-seconds stamp in the name, then the collision counter."""
    stem = name[len(BACKUP_PREFIX) : -len(BACKUP_SUFFIX)]
    seconds, _, counter = stem.partition("_")
    try:
        return int(seconds), int(counter or 0)
    except ValueError:
        return -1, 0


class BackupManager(LoggerMixin):
    """Writes, reads, lists and prunes snapshot files."""

    def __init__(self, backup_directory: Path, max_backups: int = 10):
        self.backup_directory = backup_directory
        self.max_backups = max_backups

    async def write_snapshot(
        self, data: bytes, timestamp: datetime | None = None
    ) -> Path:
        """Write ``data`` to a new ``ToDo64_Backup_<unix-seconds>.json`` file."""
        timestamp = timestamp or datetime.now(UTC)
        try:
            self.backup_directory.mkdir(parents=True, exist_ok=True)
            backup_path = self._generate_backup_path(timestamp)
            async with aiofiles.open(backup_path, "wb") as f:
                await f.write(data)
        except OSError as e:
            self.logger.error(
                "Snapshot export failed",
                directory=str(self.backup_directory),
                error=str(e),
            )
            raise BackupIOError(f"Cannot write snapshot: {e}") from e

        self.logger.info(
            "Snapshot written", backup_path=str(backup_path), total_size=len(data)
        )
        self._cleanup_old_backups()
        return backup_path

    async def read_snapshot(self, path: Path) -> bytes:
        """Read a snapshot file in full."""
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as e:
            self.logger.error("Snapshot read failed", path=str(path), error=str(e))
            raise BackupIOError(f"Cannot read snapshot {path}: {e}") from e

        self.logger.debug("Snapshot read", path=str(path), total_size=len(data))
        return data

    def list_backups(self) -> list[dict[str, Any]]:
        """List snapshot files, newest first."""
        if not self.backup_directory.exists():
            return []

        backups = []
        for backup_file in self.backup_directory.glob(f"{BACKUP_PREFIX}*{BACKUP_SUFFIX}"):
            if not backup_file.is_file():
                continue
            stat = backup_file.stat()
            backups.append(
                {
                    "name": backup_file.name,
                    "path": backup_file,
                    "size": stat.st_size,
                    "modified": datetime.fromtimestamp(stat.st_mtime, UTC),
                }
            )

        backups.sort(key=lambda b: _backup_sort_key(b["name"]), reverse=True)
        return backups

    def _generate_backup_path(self, timestamp: datetime) -> Path:
        stem = f"{BACKUP_PREFIX}{int(timestamp.timestamp())}"
        candidate = self.backup_directory / f"{stem}{BACKUP_SUFFIX}"
        counter = 1
        while candidate.exists():
            candidate = self.backup_directory / f"{stem}_{counter}{BACKUP_SUFFIX}"
            counter += 1
        return candidate

    def _cleanup_old_backups(self) -> None:
        """Delete the oldest snapshot files beyond ``max_backups``."""
        if self.max_backups <= 0:
            return

        for backup in self.list_backups()[self.max_backups :]:
            try:
                backup["path"].unlink()
                self.logger.info("Old snapshot removed", name=backup["name"])
            except OSError as e:
                self.logger.warning(
                    "Failed to remove old snapshot", name=backup["name"], error=str(e)
                )
