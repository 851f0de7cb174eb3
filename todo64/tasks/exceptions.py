"""Errors raised by the task engine."""


class TaskEngineError(Exception):
    """Base class for task engine errors"""


class TaskValidationError(TaskEngineError):
    """Title or content failed boundary validation"""


class CapacityError(TaskEngineError):
    """The live task count already reached the creation ceiling"""

    def __init__(self, limit: int):
        super().__init__(f"Task limit of {limit} reached")
        self.limit = limit


class TaskNotFoundError(TaskEngineError):
    """The referenced task no longer exists"""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class TaskStoreError(TaskEngineError):
    """The task collection could not be written"""


class StoreCorruptedError(TaskStoreError):
    """The persisted task collection could not be read back"""


class SnapshotDecodeError(TaskEngineError):
    """A backup snapshot is malformed"""


class BackupIOError(TaskEngineError):
    """A backup snapshot file could not be read or written"""


class SchedulerError(TaskEngineError):
    """The reminder host rejected a request; only ever logged"""
