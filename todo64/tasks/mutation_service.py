"""Task mutations that keep the store and the reminder scheduler in step."""

from collections.abc import Iterable, Sequence
from datetime import datetime
from pathlib import Path

from todo64.backup.backup_manager import BackupManager
from todo64.backup.backup_models import ExportResult, ImportSummary
from todo64.backup.codec import decode_snapshot, encode_snapshot
from todo64.reminders.interfaces import ReminderScheduler
from todo64.tasks.exceptions import CapacityError
from todo64.tasks.models import Task, TaskEdits, utc_now
from todo64.tasks.task_store import TaskStore
from todo64.tasks.validators import normalize_content, validate_title
from todo64.utils.mixins import LoggerMixin


class TaskMutationService(LoggerMixin):
    """Single entry point for every change to the task collection.

    Each operation mutates the store first and then issues the matching
    reminder call with the post-mutation task state. Reminder calls are
    fire-and-forget: they are never awaited and their failures never undo
    a store change.
    """

    def __init__(
        self,
        store: TaskStore,
        scheduler: ReminderScheduler,
        backup_manager: BackupManager | None = None,
    ):
        self.store = store
        self.scheduler = scheduler
        self.backup_manager = backup_manager

    async def add_task(
        self,
        title: str,
        content: str | None = None,
        *,
        reminder_enabled: bool = False,
        reminder_at: datetime | None = None,
    ) -> Task:
        """Create a task.

        Raises ``TaskValidationError`` for a blank title and ``CapacityError``
        once the store holds ``MAX_ITEM_COUNT`` tasks. Both checks happen
        before anything is created.
        """
        validate_title(title)
        if self.store.count() >= self.store.capacity:
            self.logger.warning("Task limit reached", limit=self.store.capacity)
            raise CapacityError(self.store.capacity)

        task = Task.create(
            title,
            content,
            reminder_enabled=reminder_enabled,
            reminder_at=reminder_at,
        )
        await self.store.insert(task)

        if task.reminder_enabled:
            self._schedule(task)

        self.logger.info(
            "Task created",
            task_id=task.id,
            reminder_enabled=task.reminder_enabled,
            total=self.store.count(),
        )
        return task

    async def save_edits(self, task_id: str, edits: TaskEdits) -> Task:
        """Write every editable field, then schedule or cancel the reminder."""
        title = validate_title(edits.title)
        content = normalize_content(edits.content)

        def apply(task: Task) -> None:
            task.title = title
            task.content = content
            task.is_completed = edits.is_completed
            task.reminder_enabled = edits.reminder_enabled
            task.reminder_at = edits.reminder_at

        task = await self.store.update(task_id, apply)

        if task.reminder_enabled:
            self._schedule(task)
        else:
            self.scheduler.cancel(task.id)

        self.logger.info(
            "Task updated", task_id=task.id, reminder_enabled=task.reminder_enabled
        )
        return task

    async def toggle_complete(self, task_id: str) -> Task:
        """Flip ``is_completed``. The reminder is left alone."""

        def flip(task: Task) -> None:
            task.is_completed = not task.is_completed

        task = await self.store.update(task_id, flip)
        self.logger.info(
            "Task completion toggled", task_id=task.id, is_completed=task.is_completed
        )
        return task

    async def delete_task(self, task_id: str) -> Task:
        """Delete one task; raises ``TaskNotFoundError`` if it is already gone."""
        task = await self.store.delete(task_id)
        self.scheduler.cancel(task.id)
        self.logger.info("Task deleted", task_id=task.id, total=self.store.count())
        return task

    async def delete_many(self, task_ids: Iterable[str]) -> list[Task]:
        """Delete several tasks, cancelling reminders in deletion order.

        Ids that no longer exist are skipped.
        """
        requested = list(task_ids)
        removed = await self.store.delete_many(requested)
        for task in removed:
            self.scheduler.cancel(task.id)

        skipped = len(requested) - len(removed)
        if skipped:
            self.logger.debug("Skipped tasks already deleted", count=skipped)
        self.logger.info("Tasks deleted", count=len(removed), total=self.store.count())
        return removed

    async def delete_at_offsets(
        self, offsets: Iterable[int], tasks: Sequence[Task]
    ) -> list[Task]:
        """Delete the tasks at the given positions of a displayed list."""
        task_ids = [tasks[offset].id for offset in offsets if 0 <= offset < len(tasks)]
        return await self.delete_many(task_ids)

    async def delete_all(self) -> int:
        """Delete every task and every reminder; returns how many tasks went."""
        removed = await self.store.delete_all()
        self.scheduler.cancel_all()
        self.logger.info("All tasks deleted", count=removed)
        return removed

    def export_snapshot(self) -> bytes:
        """Serialize the whole collection, oldest task first."""
        return encode_snapshot(self.store.list(sorted_by="created_at", descending=False))

    async def export_to_file(self) -> ExportResult:
        """Write a snapshot file; raises ``BackupIOError`` on file errors."""
        backup_manager = self._require_backup_manager()
        timestamp = utc_now()
        data = self.export_snapshot()
        path = await backup_manager.write_snapshot(data, timestamp)
        return ExportResult(
            backup_path=path,
            task_count=self.store.count(),
            total_size=len(data),
            timestamp=timestamp,
        )

    async def import_snapshot(self, data: bytes | str) -> ImportSummary:
        """Merge a snapshot into the store.

        Every record becomes a new task with a fresh id; existing tasks are
        never touched. The creation cap is not applied here, so a restore
        can leave more live tasks than the host can hold reminders for;
        that case is logged and reported in the summary.
        """
        records = decode_snapshot(data)
        new_tasks = [record.to_new_task() for record in records]
        await self.store.insert_many(new_tasks, enforce_capacity=False)

        scheduled = 0
        for task in new_tasks:
            if task.reminder_enabled:
                self._schedule(task)
                scheduled += 1

        summary = ImportSummary(
            imported_count=len(new_tasks),
            reminders_scheduled=scheduled,
            total_count=self.store.count(),
            capacity=self.store.capacity,
            imported_ids=[task.id for task in new_tasks],
        )
        if summary.exceeds_capacity:
            self.logger.warning(
                "Import exceeded task limit; some reminders may not be scheduled",
                total=summary.total_count,
                limit=summary.capacity,
            )
        self.logger.info(
            "Snapshot imported",
            imported=summary.imported_count,
            reminders_scheduled=scheduled,
            total=summary.total_count,
        )
        return summary

    async def import_from_file(self, path: Path) -> ImportSummary:
        """Read a snapshot file and merge it into the store."""
        data = await self._require_backup_manager().read_snapshot(path)
        return await self.import_snapshot(data)

    def _schedule(self, task: Task) -> None:
        self.scheduler.schedule(task.id, task.title, task.content, task.reminder_at)

    def _require_backup_manager(self) -> BackupManager:
        if self.backup_manager is None:
            raise RuntimeError("No backup manager configured")
        return self.backup_manager
