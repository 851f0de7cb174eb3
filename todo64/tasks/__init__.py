"""Task entities and their persisted store."""

# TaskMutationService is imported from its module directly: it depends on
# todo64.backup, which itself imports from this package.
from todo64.tasks.exceptions import (
    BackupIOError,
    CapacityError,
    SchedulerError,
    SnapshotDecodeError,
    StoreCorruptedError,
    TaskEngineError,
    TaskNotFoundError,
    TaskStoreError,
    TaskValidationError,
)
from todo64.tasks.models import Task, TaskEdits
from todo64.tasks.task_store import TaskStore, quarantine_store_file

__all__ = [
    "Task",
    "TaskEdits",
    "TaskStore",
    "quarantine_store_file",
    "TaskEngineError",
    "TaskValidationError",
    "CapacityError",
    "TaskNotFoundError",
    "TaskStoreError",
    "StoreCorruptedError",
    "SnapshotDecodeError",
    "BackupIOError",
    "SchedulerError",
]
