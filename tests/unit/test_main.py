"""Tests for the command-line entry point."""

from datetime import UTC, datetime, timedelta

import pytest

from todo64.config import get_settings
from todo64.main import build_parser, build_runtime_context, open_store, run
from todo64.tasks import TaskStore


async def _load_store() -> TaskStore:
    store = TaskStore(get_settings().store_path)
    await store.load()
    return store


@pytest.mark.asyncio
async def test_add_and_toggle() -> None:
    assert await run(["add", "Buy milk", "--content", "2 litres"]) == 0

    (task,) = (await _load_store()).list()
    assert task.title == "Buy milk"
    assert task.content == "2 litres"

    assert await run(["toggle", task.id]) == 0
    assert (await _load_store()).get(task.id).is_completed is True


@pytest.mark.asyncio
async def test_add_with_reminder_and_edit() -> None:
    remind_at = (datetime.now(UTC) + timedelta(days=1)).isoformat()
    assert await run(["add", "Dentist", "--remind-at", remind_at]) == 0
    (task,) = (await _load_store()).list()
    assert task.reminder_enabled is True

    assert await run(["edit", task.id, "--title", "Dentist 10am", "--no-reminder"]) == 0

    edited = (await _load_store()).get(task.id)
    assert edited.title == "Dentist 10am"
    assert edited.reminder_enabled is False


@pytest.mark.asyncio
async def test_delete_and_delete_all() -> None:
    for title in ("a", "b", "c"):
        await run(["add", title])
    ids = [task.id for task in (await _load_store()).list()]

    assert await run(["delete", ids[0], ids[1]]) == 0
    assert (await _load_store()).count() == 1

    assert await run(["delete-all"]) == 0
    assert (await _load_store()).count() == 0


@pytest.mark.asyncio
async def test_export_then_import() -> None:
    await run(["add", "Backed up"])
    assert await run(["export"]) == 0

    (backup,) = get_settings().backup_directory.glob("ToDo64_Backup_*.json")
    assert await run(["import", str(backup)]) == 0

    assert [t.title for t in (await _load_store()).list()] == ["Backed up"] * 2


@pytest.mark.asyncio
async def test_engine_errors_return_nonzero() -> None:
    assert await run(["toggle", "missing"]) == 1
    assert await run(["add", "   "]) == 1


@pytest.mark.asyncio
async def test_corrupted_store_is_quarantined() -> None:
    settings = get_settings()
    settings.store_path.parent.mkdir(parents=True)
    settings.store_path.write_text("{broken", encoding="utf-8")

    store = await open_store(settings)

    assert store.count() == 0
    (quarantined,) = settings.quarantine_directory.glob("*/tasks.json")
    assert quarantined.read_text(encoding="utf-8") == "{broken"


@pytest.mark.asyncio
async def test_runtime_context_requests_authorization() -> None:
    context = await build_runtime_context(get_settings())
    await context.scheduler.wait_idle()

    assert context.store.count() == 0
    assert context.service.store is context.store
    assert (await context.host.authorization_status()).value == "authorized"


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


@pytest.mark.asyncio
async def test_long_input_is_clipped_to_field_limits() -> None:
    assert await run(["add", "t" * 60, "--content", "c" * 250]) == 0
    (task,) = (await _load_store()).list()
    assert task.title == "t" * 40
    assert task.content == "c" * 200

    assert await run(["edit", task.id, "--title", "e" * 45]) == 0
    assert (await _load_store()).get(task.id).title == "e" * 40


def test_parser_clips_title() -> None:
    args = build_parser().parse_args(["add", "x" * 41])
    assert args.title == "x" * 40
