"""Persisted, ordered task collection."""

from __future__ import annotations

import asyncio
import json
import os
import shutil
import tempfile
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import aiofiles
from pydantic import ValidationError
from structlog import get_logger

from todo64.tasks.constants import MAX_ITEM_COUNT
from todo64.tasks.exceptions import (
    CapacityError,
    StoreCorruptedError,
    TaskNotFoundError,
    TaskStoreError,
)
from todo64.tasks.models import Task

logger = get_logger(__name__)

SORT_FIELDS = ("created_at", "title", "reminder_at")


class TaskStore:
    """Ordered collection of tasks keyed by id.

    The whole collection is kept in memory and mirrored to a JSON file. A
    mutation writes the new collection first and only then replaces the
    in-memory view, so a failed write leaves the store as it was. Pass
    ``data_file=None`` for a store that lives in memory only.
    """

    def __init__(self, data_file: Path | None = None, capacity: int = MAX_ITEM_COUNT):
        self.data_file = data_file
        self.capacity = capacity
        self._tasks: dict[str, Task] = {}

    async def load(self) -> None:
        """Read the collection from disk.

        A missing file is an empty store. Raises ``StoreCorruptedError`` when
        the file exists but cannot be parsed.
        """
        if self.data_file is None or not self.data_file.exists():
            self._tasks = {}
            return

        try:
            async with aiofiles.open(self.data_file, encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            raise TaskStoreError(f"Cannot read {self.data_file}: {e}") from e

        try:
            data = json.loads(content)
            if not isinstance(data, dict):
                raise ValueError("top-level value is not an object")
            tasks = {
                task_id: Task.model_validate(task_data)
                for task_id, task_data in data.items()
            }
        except (ValueError, ValidationError) as e:
            logger.error(
                "Task store is unreadable", path=str(self.data_file), error=str(e)
            )
            raise StoreCorruptedError(str(e)) from e

        self._tasks = tasks
        logger.info("Task store loaded", path=str(self.data_file), total=len(tasks))

    def count(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task:
        """Return a copy of the task with this id."""
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task.model_copy(deep=True)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def list(self, sorted_by: str = "created_at", descending: bool = True) -> list[Task]:
        """Return copies of all tasks ordered by ``sorted_by``."""
        if sorted_by not in SORT_FIELDS:
            raise ValueError(f"Cannot sort tasks by {sorted_by!r}")
        tasks = sorted(
            self._tasks.values(),
            key=lambda task: getattr(task, sorted_by),
            reverse=descending,
        )
        return [task.model_copy(deep=True) for task in tasks]

    async def insert(self, task: Task, *, enforce_capacity: bool = True) -> Task:
        """Append a task.

        Raises ``CapacityError`` when the store already holds ``capacity``
        tasks and ``enforce_capacity`` is set.
        """
        if enforce_capacity and self.count() >= self.capacity:
            raise CapacityError(self.capacity)
        if task.id in self._tasks:
            raise TaskStoreError(f"Duplicate task id: {task.id}")

        tasks = dict(self._tasks)
        tasks[task.id] = task.model_copy(deep=True)
        await self._commit(tasks)

        logger.debug("Task inserted", task_id=task.id, total=len(tasks))
        return task

    async def insert_many(
        self, new_tasks: Iterable[Task], *, enforce_capacity: bool = True
    ) -> list[Task]:
        """Append several tasks with a single write."""
        tasks = dict(self._tasks)
        inserted: list[Task] = []
        for task in new_tasks:
            if enforce_capacity and len(tasks) >= self.capacity:
                raise CapacityError(self.capacity)
            if task.id in tasks:
                raise TaskStoreError(f"Duplicate task id: {task.id}")
            tasks[task.id] = task.model_copy(deep=True)
            inserted.append(task)

        if inserted:
            await self._commit(tasks)
        return inserted

    async def update(self, task_id: str, mutator: Callable[[Task], None]) -> Task:
        """Apply ``mutator`` to a copy of the task and persist the result.

        Returns the updated task. Raises ``TaskNotFoundError`` when absent.
        """
        current = self._tasks.get(task_id)
        if current is None:
            raise TaskNotFoundError(task_id)

        updated = current.model_copy(deep=True)
        mutator(updated)

        tasks = dict(self._tasks)
        tasks[task_id] = updated
        await self._commit(tasks)

        return updated.model_copy(deep=True)

    async def delete(self, task_id: str) -> Task:
        """Remove the task and return it. Raises ``TaskNotFoundError`` when absent."""
        if task_id not in self._tasks:
            raise TaskNotFoundError(task_id)

        tasks = dict(self._tasks)
        removed = tasks.pop(task_id)
        await self._commit(tasks)

        return removed

    async def delete_many(self, task_ids: Iterable[str]) -> list[Task]:
        """Remove every listed task that still exists, with a single write.

        Missing ids are skipped. Returns the removed tasks in the order given.
        """
        tasks = dict(self._tasks)
        removed: list[Task] = []
        for task_id in task_ids:
            task = tasks.pop(task_id, None)
            if task is not None:
                removed.append(task)

        if removed:
            await self._commit(tasks)
        return removed

    async def delete_all(self) -> int:
        """Clear the collection; returns how many tasks were removed."""
        removed = self.count()
        await self._commit({})
        return removed

    async def _commit(self, tasks: dict[str, Task]) -> None:
        if self.data_file is not None:
            data = {task_id: task.model_dump(mode="json") for task_id, task in tasks.items()}
            try:
                await self._write_tasks_atomic(data)
            except OSError as e:
                logger.error(
                    "Failed to save tasks", path=str(self.data_file), error=str(e)
                )
                raise TaskStoreError(f"Cannot write {self.data_file}: {e}") from e
        self._tasks = tasks

    async def _write_tasks_atomic(self, data: dict[str, Any]) -> None:
        """Write tasks JSON using an atomic file replace."""
        assert self.data_file is not None
        data_file = self.data_file
        serialized = json.dumps(data, indent=2, ensure_ascii=False)

        def _write() -> None:
            data_file.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=data_file.parent, prefix="tasks_", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                    tmp_file.write(serialized)
                    tmp_file.flush()
                    os.fsync(tmp_file.fileno())
                os.replace(temp_path, data_file)
            finally:
                if os.path.exists(temp_path):
                    try:
                        os.remove(temp_path)
                    except FileNotFoundError:
                        pass

        await asyncio.to_thread(_write)


def quarantine_store_file(store_path: Path, quarantine_root: Path) -> Path | None:
    """Move an unreadable store file aside so the app can start empty.

    The file goes into ``<quarantine_root>/<unix-seconds>/``. Returns that
    directory, or None when there was nothing to move.
    """
    if not store_path.exists():
        return None

    target_dir = quarantine_root / str(int(time.time()))
    target_dir.mkdir(parents=True, exist_ok=True)
    shutil.move(str(store_path), str(target_dir / store_path.name))
    logger.warning(
        "Corrupted store file moved", source=str(store_path), target=str(target_dir)
    )
    return target_dir
