"""
Main entry point for ToDo64
"""

import argparse
import asyncio
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

from todo64 import __version__
from todo64.backup import BackupManager
from todo64.config import Settings, get_settings
from todo64.reminders import InProcessNotificationHost, LocalReminderScheduler
from todo64.tasks import (
    StoreCorruptedError,
    TaskEdits,
    TaskEngineError,
    TaskStore,
    quarantine_store_file,
)
from todo64.tasks.mutation_service import TaskMutationService
from todo64.tasks.validators import truncate_content, truncate_title
from todo64.utils import get_logger, setup_logging

logger = get_logger(__name__)
console = Console()


@dataclass
class RuntimeContext:
    """Container for runtime components."""

    settings: Settings
    store: TaskStore
    host: InProcessNotificationHost
    scheduler: LocalReminderScheduler
    backup_manager: BackupManager
    service: TaskMutationService


async def open_store(settings: Settings) -> TaskStore:
    """Load the task store, quarantining an unreadable file and starting empty."""
    store = TaskStore(settings.store_path)
    try:
        await store.load()
    except StoreCorruptedError:
        quarantined = quarantine_store_file(
            settings.store_path, settings.quarantine_directory
        )
        logger.warning(
            "Starting with an empty task store",
            quarantined=str(quarantined) if quarantined else None,
        )
        store = TaskStore(settings.store_path)
    return store


async def build_runtime_context(settings: Settings) -> RuntimeContext:
    """Construct the runtime components and fire the authorization request."""
    store = await open_store(settings)
    host = InProcessNotificationHost(
        grant_authorization=settings.notifications_authorized
    )
    scheduler = LocalReminderScheduler(host)
    scheduler.request_authorization()

    backup_manager = BackupManager(settings.backup_directory, settings.max_backups)
    service = TaskMutationService(store, scheduler, backup_manager)

    logger.info(
        "ToDo64 ready",
        version=__version__,
        store=str(settings.store_path),
        total=store.count(),
    )
    return RuntimeContext(
        settings=settings,
        store=store,
        host=host,
        scheduler=scheduler,
        backup_manager=backup_manager,
        service=service,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="todo64", description="Personal task manager with local reminders"
    )
    parser.add_argument("--version", action="version", version=__version__)
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="add a task")
    add.add_argument("title", type=truncate_title)
    add.add_argument("--content", type=truncate_content)
    add.add_argument(
        "--remind-at",
        type=datetime.fromisoformat,
        help="ISO-8601 time for a one-shot reminder",
    )

    commands.add_parser("list", help="list tasks, newest first")

    edit = commands.add_parser("edit", help="edit a task")
    edit.add_argument("task_id")
    edit.add_argument("--title", type=truncate_title)
    edit.add_argument("--content", type=truncate_content)
    edit.add_argument("--remind-at", type=datetime.fromisoformat)
    edit.add_argument("--no-reminder", action="store_true")

    toggle = commands.add_parser("toggle", help="flip a task's completion")
    toggle.add_argument("task_id")

    delete = commands.add_parser("delete", help="delete tasks")
    delete.add_argument("task_ids", nargs="+")

    commands.add_parser("delete-all", help="delete every task and reminder")
    commands.add_parser("export", help="write a snapshot file")

    restore = commands.add_parser("import", help="merge a snapshot file")
    restore.add_argument("path", type=Path)

    return parser


def print_tasks(store: TaskStore) -> None:
    table = Table(title=f"Tasks ({store.count()})")
    table.add_column("id")
    table.add_column("title")
    table.add_column("done")
    table.add_column("reminder")
    for task in store.list():
        reminder = task.reminder_at.isoformat() if task.reminder_enabled else "-"
        table.add_row(task.id, task.title, "x" if task.is_completed else "", reminder)
    console.print(table)


async def run_command(context: RuntimeContext, args: argparse.Namespace) -> None:
    service = context.service

    if args.command == "add":
        task = await service.add_task(
            args.title,
            args.content,
            reminder_enabled=args.remind_at is not None,
            reminder_at=args.remind_at,
        )
        console.print(f"Added {task.id}")
    elif args.command == "list":
        print_tasks(context.store)
    elif args.command == "edit":
        edits = TaskEdits.from_task(context.store.get(args.task_id))
        if args.title is not None:
            edits.title = args.title
        if args.content is not None:
            edits.content = args.content
        if args.remind_at is not None:
            edits.reminder_enabled = True
            edits.reminder_at = args.remind_at
        if args.no_reminder:
            edits.reminder_enabled = False
        await service.save_edits(args.task_id, edits)
        console.print(f"Saved {args.task_id}")
    elif args.command == "toggle":
        task = await service.toggle_complete(args.task_id)
        console.print(f"{task.id} completed={task.is_completed}")
    elif args.command == "delete":
        if len(args.task_ids) == 1:
            await service.delete_task(args.task_ids[0])
            console.print("Deleted 1 task")
        else:
            removed = await service.delete_many(args.task_ids)
            console.print(f"Deleted {len(removed)} tasks")
    elif args.command == "delete-all":
        removed = await service.delete_all()
        console.print(f"Deleted {removed} tasks")
    elif args.command == "export":
        result = await service.export_to_file()
        console.print(f"Exported {result.task_count} tasks to {result.backup_path}")
    elif args.command == "import":
        summary = await service.import_from_file(args.path)
        console.print(
            f"Imported {summary.imported_count} tasks "
            f"({summary.reminders_scheduled} reminders)"
        )
        if summary.exceeds_capacity:
            console.print(
                f"[yellow]{summary.total_count} tasks exceed the reminder limit "
                f"of {summary.capacity}[/yellow]"
            )

    await context.scheduler.wait_idle()


async def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    context = await build_runtime_context(get_settings())
    try:
        await run_command(context, args)
    except TaskEngineError as e:
        console.print(f"[red]{e}[/red]")
        return 1
    return 0


def main() -> None:
    setup_logging()
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
