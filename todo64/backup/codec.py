"""Portable JSON snapshot of the task collection.

The wire format is a pretty-printed JSON array with one object per task::

    [
      {
        "id": "5B0E...",
        "title": "Buy milk",
        "content": null,
        "createdAt": "2026-01-07T03:00:00Z",
        "isReminderOn": false,
        "reminderDate": "2026-01-07T03:00:00Z",
        "isCompleted": false,
        "hexColor": "#BAE1FF"
      }
    ]

Records are written in ascending ``createdAt`` order. Every key except
``content`` is required when reading.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_serializer,
    field_validator,
)

from todo64.tasks.constants import CONTENT_MAX_LENGTH, TITLE_MAX_LENGTH
from todo64.tasks.exceptions import SnapshotDecodeError
from todo64.tasks.models import Task, new_task_id

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class SnapshotRecord(BaseModel):
    """One task as it appears in a snapshot."""

    model_config = ConfigDict(populate_by_name=True, strict=True)

    id: str
    title: str = Field(..., max_length=TITLE_MAX_LENGTH)
    content: str | None = Field(None, max_length=CONTENT_MAX_LENGTH)
    created_at: datetime = Field(..., alias="createdAt")
    reminder_enabled: bool = Field(..., alias="isReminderOn")
    reminder_at: datetime = Field(..., alias="reminderDate")
    is_completed: bool = Field(..., alias="isCompleted")
    color_tag: str = Field(..., alias="hexColor")

    @field_validator("title")
    @classmethod
    def validate_title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title must not be empty")
        return v

    @field_validator("created_at", "reminder_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return v.astimezone(UTC).replace(microsecond=0)

    @field_serializer("created_at", "reminder_at")
    def serialize_timestamp(self, v: datetime) -> str:
        """Always whole seconds with a literal Z, never fractional."""
        return v.astimezone(UTC).strftime(TIMESTAMP_FORMAT)

    @classmethod
    def from_task(cls, task: Task) -> "SnapshotRecord":
        return cls(
            id=task.id,
            title=task.title,
            content=task.content,
            created_at=task.created_at,
            reminder_enabled=task.reminder_enabled,
            reminder_at=task.reminder_at,
            is_completed=task.is_completed,
            color_tag=task.color_tag,
        )

    def to_new_task(self) -> Task:
        """Build a task from this record under a freshly generated id.

        Everything else, including ``created_at``, is carried over as is.
        """
        return Task(
            id=new_task_id(),
            title=self.title,
            content=self.content,
            created_at=self.created_at,
            is_completed=self.is_completed,
            reminder_enabled=self.reminder_enabled,
            reminder_at=self.reminder_at,
            color_tag=self.color_tag,
        )


_SNAPSHOT_ADAPTER = TypeAdapter(list[SnapshotRecord])


def encode_snapshot(tasks: Iterable[Task]) -> bytes:
    """Serialize tasks in ascending ``created_at`` order."""
    ordered = sorted(tasks, key=lambda task: task.created_at)
    records = [SnapshotRecord.from_task(task) for task in ordered]
    return _SNAPSHOT_ADAPTER.dump_json(records, by_alias=True, indent=2)


def decode_snapshot(data: bytes | str) -> list[SnapshotRecord]:
    """Parse a snapshot; raises ``SnapshotDecodeError`` if any record is malformed."""
    try:
        return _SNAPSHOT_ADAPTER.validate_json(data)
    except ValueError as e:
        raise SnapshotDecodeError(f"Malformed snapshot: {e}") from e
