"""Data models for backup functionality."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any


@dataclass
class ExportResult:
    """Result of writing a snapshot file."""

    backup_path: Path
    task_count: int
    total_size: int  # in bytes
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "backup_path": str(self.backup_path),
            "task_count": self.task_count,
            "total_size": self.total_size,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ImportSummary:
    """Outcome of merging a snapshot into the store."""

    imported_count: int
    reminders_scheduled: int
    total_count: int
    capacity: int
    imported_ids: list[str] = field(default_factory=list)

    @property
    def exceeds_capacity(self) -> bool:
        """More live tasks than the host can hold pending reminders for."""
        return self.total_count > self.capacity

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "imported_count": self.imported_count,
            "reminders_scheduled": self.reminders_scheduled,
            "total_count": self.total_count,
            "capacity": self.capacity,
            "exceeds_capacity": self.exceeds_capacity,
            "imported_ids": list(self.imported_ids),
        }
