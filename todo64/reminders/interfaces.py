"""
Reminder interfaces.

``ReminderScheduler`` is what the task engine talks to; ``NotificationHost``
is the local-notification service a live scheduler drives.
"""

from datetime import datetime
from typing import Protocol

from todo64.reminders.models import AuthorizationStatus, ReminderRequest


class ReminderScheduler(Protocol):
    """Fire-and-forget reminder operations keyed by task id."""

    def request_authorization(self) -> None:
        """Ask the host for permission to post notifications."""
        ...

    def schedule(
        self, task_id: str, title: str, body: str | None, fire_at: datetime
    ) -> None:
        """Register (or replace) the reminder for ``task_id``."""
        ...

    def cancel(self, task_id: str) -> None:
        """Drop the reminder for ``task_id``, if any."""
        ...

    def cancel_all(self) -> None:
        """Drop every reminder."""
        ...


class NotificationHost(Protocol):
    """Interface for the host's local-notification service."""

    async def request_authorization(self) -> bool:
        ...

    async def authorization_status(self) -> AuthorizationStatus:
        ...

    async def add(self, request: ReminderRequest) -> bool:
        """Add a pending request, replacing one with the same identifier.

        Returns False when the host is full and discarded this request.
        """
        ...

    async def remove_pending(self, identifiers: list[str]) -> None:
        ...

    async def remove_all_pending(self) -> None:
        ...
