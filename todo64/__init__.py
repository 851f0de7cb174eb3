"""ToDo64: a personal task manager with capacity-limited local reminders."""

__version__ = "0.1.0"
