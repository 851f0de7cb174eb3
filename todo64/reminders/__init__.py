"""Local reminder scheduling."""

from todo64.reminders.host import InProcessNotificationHost
from todo64.reminders.interfaces import NotificationHost, ReminderScheduler
from todo64.reminders.models import AuthorizationStatus, ReminderRequest
from todo64.reminders.scheduler import LocalReminderScheduler, NullReminderScheduler

__all__ = [
    "AuthorizationStatus",
    "InProcessNotificationHost",
    "LocalReminderScheduler",
    "NotificationHost",
    "NullReminderScheduler",
    "ReminderRequest",
    "ReminderScheduler",
]
