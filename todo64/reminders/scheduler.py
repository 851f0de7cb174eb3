"""Reminder scheduler adapters."""

import asyncio
import functools
from collections.abc import Callable, Coroutine
from datetime import datetime
from typing import Any

from todo64.reminders.interfaces import NotificationHost
from todo64.reminders.models import (
    AuthorizationStatus,
    ReminderRequest,
    truncate_to_minute,
)
from todo64.utils.error_handler import safe_operation
from todo64.utils.mixins import LoggerMixin

HostCall = Callable[[], Coroutine[Any, Any, None]]


class LocalReminderScheduler(LoggerMixin):
    """Scheduler backed by a local notification host.

    Every public call returns immediately; the host is driven from a
    background asyncio task. Those tasks run one at a time in call order,
    so a cancel issued after a schedule for the same task is applied after
    it. Host failures are logged and never reach the caller.

    Calls made while no event loop is running are queued and handed to the
    host, still in order, by the next call made on a running loop or by
    ``wait_idle``. Host timers live on that loop.
    """

    def __init__(self, host: NotificationHost):
        self.host = host
        self._in_flight: set[asyncio.Task[Any]] = set()
        self._deferred: list[HostCall] = []
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    def request_authorization(self) -> None:
        self._spawn(self._request_authorization)

    def schedule(
        self, task_id: str, title: str, body: str | None, fire_at: datetime
    ) -> None:
        request = ReminderRequest(
            identifier=task_id,
            title=title,
            body=body,
            fire_at=truncate_to_minute(fire_at),
        )
        self._spawn(functools.partial(self._schedule, request))

    def cancel(self, task_id: str) -> None:
        self._spawn(functools.partial(self._cancel, task_id))

    def cancel_all(self) -> None:
        self._spawn(self._cancel_all)

    @property
    def deferred_count(self) -> int:
        """Calls waiting for an event loop."""
        return len(self._deferred)

    async def wait_idle(self) -> None:
        """Wait until every request issued so far has reached the host."""
        self._flush_deferred(asyncio.get_running_loop())
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def _spawn(self, call: HostCall) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._deferred.append(call)
            self.logger.debug(
                "No running event loop, reminder call queued",
                queued=len(self._deferred),
            )
            return

        self._flush_deferred(loop)
        self._start(loop, call)

    def _flush_deferred(self, loop: asyncio.AbstractEventLoop) -> None:
        deferred, self._deferred = self._deferred, []
        for call in deferred:
            self._start(loop, call)

    def _start(self, loop: asyncio.AbstractEventLoop, call: HostCall) -> None:
        task = loop.create_task(self._serialized(call))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _serialized(self, call: HostCall) -> None:
        async with self._get_lock():
            await call()

    def _get_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    @safe_operation("request notification authorization")
    async def _request_authorization(self) -> None:
        granted = await self.host.request_authorization()
        self.logger.info("Notification authorization answered", granted=granted)

    @safe_operation("schedule reminder")
    async def _schedule(self, request: ReminderRequest) -> None:
        status = await self.host.authorization_status()
        if status != AuthorizationStatus.AUTHORIZED:
            self.logger.debug(
                "Reminder not scheduled, notifications not authorized",
                task_id=request.identifier,
                status=status.value,
            )
            return

        if not await self.host.add(request):
            self.logger.warning(
                "Reminder not scheduled, host pending limit reached",
                task_id=request.identifier,
            )
            return

        self.logger.info(
            "Reminder scheduled",
            task_id=request.identifier,
            fire_at=request.fire_at.isoformat(),
        )

    @safe_operation("cancel reminder")
    async def _cancel(self, task_id: str) -> None:
        await self.host.remove_pending([task_id])
        self.logger.debug("Reminder cancelled", task_id=task_id)

    @safe_operation("cancel all reminders")
    async def _cancel_all(self) -> None:
        await self.host.remove_all_pending()
        self.logger.info("All reminders cancelled")


class NullReminderScheduler(LoggerMixin):
    """Scheduler that drops every request; for headless runs and tests."""

    def request_authorization(self) -> None:
        self.logger.debug("Authorization request ignored")

    def schedule(
        self, task_id: str, title: str, body: str | None, fire_at: datetime
    ) -> None:
        self.logger.debug("Reminder ignored", task_id=task_id)

    def cancel(self, task_id: str) -> None:
        return None

    def cancel_all(self) -> None:
        return None
