"""Task data models."""

import random
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from todo64.tasks.constants import (
    CONTENT_MAX_LENGTH,
    DEFAULT_COLOR,
    PASTEL_COLORS,
    TITLE_MAX_LENGTH,
)
from todo64.tasks.validators import normalize_content, validate_title


def utc_now() -> datetime:
    """Current UTC time in whole seconds, the resolution of snapshot files."""
    return datetime.now(UTC).replace(microsecond=0)


def new_task_id() -> str:
    return str(uuid.uuid4())


def random_pastel_color() -> str:
    """Pick a color tag uniformly from the palette."""
    return random.choice(PASTEL_COLORS) if PASTEL_COLORS else DEFAULT_COLOR


class Task(BaseModel):
    """Task data model.

    ``id`` doubles as the correlation key of the task's reminder, so it is
    frozen together with ``created_at``. Equality and hashing go by ``id``.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_task_id, frozen=True)
    title: str = Field(..., max_length=TITLE_MAX_LENGTH)
    content: str | None = Field(None, max_length=CONTENT_MAX_LENGTH)
    created_at: datetime = Field(default_factory=utc_now, frozen=True)
    is_completed: bool = False
    reminder_enabled: bool = False
    reminder_at: datetime = Field(default_factory=utc_now)
    color_tag: str = Field(default=DEFAULT_COLOR)

    @field_validator("title")
    @classmethod
    def validate_title_not_blank(cls, v: str) -> str:
        """Reject titles that are empty once trimmed."""
        if not v.strip():
            raise ValueError("Title must not be empty")
        return v

    @field_validator("content")
    @classmethod
    def empty_content_to_none(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("created_at", "reminder_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Aware UTC in whole seconds; naive values are read as local time."""
        return v.astimezone(UTC).replace(microsecond=0)

    @classmethod
    def create(
        cls,
        title: str,
        content: str | None = None,
        reminder_enabled: bool = False,
        reminder_at: datetime | None = None,
    ) -> "Task":
        """Create a fresh task with a new id, creation time and color tag.

        Raises ``TaskValidationError`` when the trimmed title is empty or a
        field exceeds its length bound.
        """
        now = utc_now()
        return cls(
            title=validate_title(title),
            content=normalize_content(content),
            created_at=now,
            is_completed=False,
            reminder_enabled=reminder_enabled,
            reminder_at=reminder_at or now,
            color_tag=random_pastel_color(),
        )

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Task):
            return self.id == other.id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass
class TaskEdits:
    """Every editable field of a task, as filled in by an edit form."""

    title: str
    content: str | None
    is_completed: bool
    reminder_enabled: bool
    reminder_at: datetime

    @classmethod
    def from_task(cls, task: Task) -> "TaskEdits":
        """Pre-fill the form from the task's current state."""
        return cls(
            title=task.title,
            content=task.content,
            is_completed=task.is_completed,
            reminder_enabled=task.reminder_enabled,
            reminder_at=task.reminder_at,
        )
