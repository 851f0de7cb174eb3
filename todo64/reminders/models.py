"""Reminder data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AuthorizationStatus(str, Enum):
    """Whether the host lets this app post notifications."""

    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    DENIED = "denied"


@dataclass(frozen=True)
class ReminderRequest:
    """One-shot reminder registration, keyed by the task id."""

    identifier: str
    title: str
    body: str | None
    fire_at: datetime


def truncate_to_minute(value: datetime) -> datetime:
    """Triggers are matched on date and time down to the minute."""
    return value.replace(second=0, microsecond=0)
