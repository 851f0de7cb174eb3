"""In-process local notification host."""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

from todo64.reminders.models import AuthorizationStatus, ReminderRequest
from todo64.tasks.constants import MAX_ITEM_COUNT
from todo64.tasks.exceptions import SchedulerError
from todo64.utils.error_handler import safe_operation
from todo64.utils.mixins import LoggerMixin

DeliverCallback = Callable[[ReminderRequest], None]


class InProcessNotificationHost(LoggerMixin):
    """Local notification service running on the current event loop.

    Pending requests are one-shot timers. Like a mobile OS, the host keeps
    at most ``max_pending`` of them: past that, the request that fires
    last is dropped.
    """

    def __init__(
        self,
        *,
        grant_authorization: bool = True,
        max_pending: int = MAX_ITEM_COUNT,
        deliver: DeliverCallback | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.grant_authorization = grant_authorization
        self.max_pending = max_pending
        self._deliver = deliver or self._log_delivery
        self._clock = clock or (lambda: datetime.now(UTC))
        self._status = AuthorizationStatus.NOT_DETERMINED
        self._pending: dict[str, tuple[ReminderRequest, asyncio.TimerHandle]] = {}

    async def request_authorization(self) -> bool:
        if self._status == AuthorizationStatus.NOT_DETERMINED:
            self._status = (
                AuthorizationStatus.AUTHORIZED
                if self.grant_authorization
                else AuthorizationStatus.DENIED
            )
        return self._status == AuthorizationStatus.AUTHORIZED

    async def authorization_status(self) -> AuthorizationStatus:
        return self._status

    async def add(self, request: ReminderRequest) -> bool:
        """Register ``request``; returns False if the limit dropped it right away."""
        delay = (request.fire_at - self._clock()).total_seconds()
        if delay <= 0:
            raise SchedulerError(
                f"Trigger time {request.fire_at.isoformat()} has already passed"
            )

        self._remove(request.identifier)
        handle = asyncio.get_running_loop().call_later(
            delay, self._fire, request.identifier
        )
        self._pending[request.identifier] = (request, handle)

        if len(self._pending) > self.max_pending:
            latest = max(self._pending.values(), key=lambda entry: entry[0].fire_at)[0]
            self._remove(latest.identifier)
            self.logger.warning(
                "Pending reminder limit reached, dropped latest request",
                task_id=latest.identifier,
                limit=self.max_pending,
            )
            return latest.identifier != request.identifier
        return True

    async def remove_pending(self, identifiers: list[str]) -> None:
        for identifier in identifiers:
            self._remove(identifier)

    async def remove_all_pending(self) -> None:
        for _, handle in self._pending.values():
            handle.cancel()
        self._pending.clear()

    def pending_requests(self) -> list[ReminderRequest]:
        """Pending requests, soonest first."""
        return sorted(
            (request for request, _ in self._pending.values()),
            key=lambda request: request.fire_at,
        )

    def _remove(self, identifier: str) -> None:
        entry = self._pending.pop(identifier, None)
        if entry is not None:
            entry[1].cancel()

    @safe_operation("deliver reminder")
    def _fire(self, identifier: str) -> None:
        entry = self._pending.pop(identifier, None)
        if entry is not None:
            self._deliver(entry[0])

    def _log_delivery(self, request: ReminderRequest) -> None:
        self.logger.info(
            "Reminder delivered",
            task_id=request.identifier,
            title=request.title,
            body=request.body,
        )
