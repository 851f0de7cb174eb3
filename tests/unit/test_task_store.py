"""Unit tests for task store persistence and capacity."""

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from todo64.tasks import (
    CapacityError,
    StoreCorruptedError,
    Task,
    TaskNotFoundError,
    TaskStore,
    TaskStoreError,
    quarantine_store_file,
)
from todo64.tasks.constants import MAX_ITEM_COUNT


def _task_created_at(title: str, created_at: datetime) -> Task:
    return Task(title=title, created_at=created_at, reminder_at=created_at)


@pytest.mark.asyncio
async def test_insert_persists_and_reloads(task_store: TaskStore) -> None:
    task = Task.create("Buy milk", content="2 litres")
    await task_store.insert(task)

    assert task_store.count() == 1
    assert task_store.data_file is not None
    data = json.loads(task_store.data_file.read_text(encoding="utf-8"))
    assert data[task.id]["title"] == "Buy milk"

    reloaded = TaskStore(task_store.data_file)
    await reloaded.load()
    copy = reloaded.get(task.id)
    assert copy.title == "Buy milk"
    assert copy.content == "2 litres"
    assert copy.created_at == task.created_at
    assert copy.color_tag == task.color_tag

    # No temporary files remain from atomic writes
    assert not list(task_store.data_file.parent.glob("tasks_*.json"))


@pytest.mark.asyncio
async def test_insert_rejects_at_capacity() -> None:
    store = TaskStore(capacity=3)
    for i in range(3):
        await store.insert(Task.create(f"task {i}"))

    with pytest.raises(CapacityError) as exc_info:
        await store.insert(Task.create("one too many"))

    assert exc_info.value.limit == 3
    assert store.count() == 3


@pytest.mark.asyncio
async def test_insert_without_capacity_check() -> None:
    store = TaskStore(capacity=1)
    await store.insert(Task.create("first"))
    await store.insert(Task.create("second"), enforce_capacity=False)
    assert store.count() == 2


def test_default_capacity() -> None:
    assert TaskStore().capacity == MAX_ITEM_COUNT == 64


@pytest.mark.asyncio
async def test_insert_rejects_duplicate_id() -> None:
    store = TaskStore()
    task = Task.create("unique")
    await store.insert(task)
    with pytest.raises(TaskStoreError):
        await store.insert(task)


@pytest.mark.asyncio
async def test_update_applies_mutator(task_store: TaskStore) -> None:
    task = Task.create("Draft")
    await task_store.insert(task)

    def rename(t: Task) -> None:
        t.title = "Final"

    updated = await task_store.update(task.id, rename)

    assert updated.title == "Final"
    assert task_store.get(task.id).title == "Final"


@pytest.mark.asyncio
async def test_update_missing_raises() -> None:
    store = TaskStore()
    with pytest.raises(TaskNotFoundError) as exc_info:
        await store.update("missing", lambda t: None)
    assert exc_info.value.task_id == "missing"


@pytest.mark.asyncio
async def test_returned_tasks_are_copies() -> None:
    store = TaskStore()
    task = Task.create("Original")
    await store.insert(task)

    listed = store.list()[0]
    listed.title = "Changed outside"

    assert store.get(task.id).title == "Original"


@pytest.mark.asyncio
async def test_delete_and_missing_delete() -> None:
    store = TaskStore()
    task = Task.create("Temporary")
    await store.insert(task)

    removed = await store.delete(task.id)
    assert removed.id == task.id
    assert store.count() == 0

    with pytest.raises(TaskNotFoundError):
        await store.delete(task.id)


@pytest.mark.asyncio
async def test_delete_many_skips_missing_and_keeps_order() -> None:
    store = TaskStore()
    a, b, c = (Task.create(t) for t in ("a", "b", "c"))
    for task in (a, b, c):
        await store.insert(task)

    removed = await store.delete_many([c.id, "missing", a.id])

    assert [t.id for t in removed] == [c.id, a.id]
    assert [t.id for t in store.list()] == [b.id]


@pytest.mark.asyncio
async def test_delete_all(task_store: TaskStore) -> None:
    for i in range(5):
        await task_store.insert(Task.create(f"task {i}"))

    assert await task_store.delete_all() == 5
    assert task_store.count() == 0

    reloaded = TaskStore(task_store.data_file)
    await reloaded.load()
    assert reloaded.count() == 0


@pytest.mark.asyncio
async def test_list_orders_by_created_at() -> None:
    store = TaskStore()
    base = datetime(2026, 1, 7, 9, 0, tzinfo=UTC)
    middle = _task_created_at("middle", base + timedelta(hours=1))
    newest = _task_created_at("newest", base + timedelta(hours=2))
    oldest = _task_created_at("oldest", base)
    await store.insert_many([middle, newest, oldest])

    assert [t.title for t in store.list()] == ["newest", "middle", "oldest"]
    assert [t.title for t in store.list(descending=False)] == [
        "oldest",
        "middle",
        "newest",
    ]

    with pytest.raises(ValueError):
        store.list(sorted_by="color_tag")


@pytest.mark.asyncio
async def test_insert_many_respects_capacity() -> None:
    store = TaskStore(capacity=2)
    with pytest.raises(CapacityError):
        await store.insert_many([Task.create(str(i)) for i in range(3)])
    assert store.count() == 0


@pytest.mark.asyncio
async def test_failed_write_leaves_store_unchanged(tmp_path: Path) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file in the way", encoding="utf-8")
    store = TaskStore(blocker / "tasks.json")

    with pytest.raises(TaskStoreError):
        await store.insert(Task.create("never saved"))

    assert store.count() == 0


@pytest.mark.asyncio
async def test_missing_file_loads_empty(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "absent.json")
    await store.load()
    assert store.count() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        json.dumps({"x": {"title": "no timestamps", "created_at": "yesterday"}}),
    ],
)
async def test_corrupted_file_raises(tmp_path: Path, content: str) -> None:
    data_file = tmp_path / "tasks.json"
    data_file.write_text(content, encoding="utf-8")

    with pytest.raises(StoreCorruptedError):
        await TaskStore(data_file).load()


def test_quarantine_moves_store_file(tmp_path: Path) -> None:
    data_file = tmp_path / "data" / "tasks.json"
    data_file.parent.mkdir()
    data_file.write_text("{broken", encoding="utf-8")

    target = quarantine_store_file(data_file, tmp_path / "data" / "Corrupted_Backups")

    assert target is not None
    assert not data_file.exists()
    assert (target / "tasks.json").read_text(encoding="utf-8") == "{broken"


def test_quarantine_without_file(tmp_path: Path) -> None:
    assert quarantine_store_file(tmp_path / "tasks.json", tmp_path / "q") is None
