from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from tasklist.domain.entities import TaskEntity
from tasklist.domain.errors import NotFoundError, PersistenceError, ValidationError
from tasklist.domain.filters import FilterState
from tasklist.services.task_store import TaskStore


class FakeAdapter:
    def __init__(self, stored: list[TaskEntity] | None = None) -> None:
        self.stored = stored
        self.saves: list[list[TaskEntity]] = []
        self.fail_with: Exception | None = None

    def load(self) -> list[TaskEntity] | None:
        return list(self.stored) if self.stored is not None else None

    def save(self, tasks) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.stored = list(tasks)
        self.saves.append(list(tasks))


def _stored_task(task_id: int, **overrides) -> TaskEntity:
    stamp = datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)
    fields = dict(
        id=task_id,
        title=f"Task {task_id}",
        description="Loaded from storage",
        deadline=date(2026, 2, 1),
        priority=3,
        completed=False,
        created_at=stamp,
        updated_at=stamp,
    )
    fields.update(overrides)
    return TaskEntity(**fields)


def _add(store: TaskStore, title: str = "Write report", **overrides) -> TaskEntity:
    fields = dict(description="Quarterly numbers", deadline="2026-03-10", priority=3)
    fields.update(overrides)
    return store.create(title, fields["description"], fields["deadline"], fields["priority"])


def test_empty_storage_starts_with_counter_at_zero(clock) -> None:
    store = TaskStore(FakeAdapter(), clock=clock)

    assert store.tasks == ()
    assert store.next_id == 0


def test_create_assigns_id_timestamps_and_persists(clock) -> None:
    adapter = FakeAdapter()
    store = TaskStore(adapter, clock=clock)

    task = store.create("  Write report ", " Quarterly numbers ", "2026-03-10", 4)

    assert task.id == 0
    assert task.title == "Write report"
    assert task.description == "Quarterly numbers"
    assert task.deadline == date(2026, 3, 10)
    assert task.priority == 4
    assert task.completed is False
    assert task.created_at == task.updated_at == clock.now
    assert store.tasks == (task,)
    assert adapter.saves == [[task]]
    assert store.next_id == 1


def test_create_accepts_date_object_and_numeric_string_priority(clock) -> None:
    store = TaskStore(FakeAdapter(), clock=clock)

    task = store.create("Title", "Body", date(2026, 5, 1), "2")

    assert task.deadline == date(2026, 5, 1)
    assert task.priority == 2


INVALID_FIELDS = [
    ("", "Body", "2026-03-10", 3, "title"),
    ("   ", "Body", "2026-03-10", 3, "title"),
    (None, "Body", "2026-03-10", 3, "title"),
    ("Title", "", "2026-03-10", 3, "description"),
    ("Title", "Body", "not-a-date", 3, "deadline"),
    ("Title", "Body", "2026-13-01", 3, "deadline"),
    ("Title", "Body", "2026-02-30", 3, "deadline"),
    ("Title", "Body", "20260310", 3, "deadline"),
    ("Title", "Body", datetime(2026, 3, 10, 12, 0), 3, "deadline"),
    ("Title", "Body", None, 3, "deadline"),
    ("Title", "Body", "2026-03-10", 0, "priority"),
    ("Title", "Body", "2026-03-10", 6, "priority"),
    ("Title", "Body", "2026-03-10", True, "priority"),
    ("Title", "Body", "2026-03-10", 2.5, "priority"),
    ("Title", "Body", "2026-03-10", "high", "priority"),
    ("Title", "Body", "2026-03-10", None, "priority"),
]


@pytest.mark.parametrize(("title", "description", "deadline", "priority", "field"), INVALID_FIELDS)
def test_create_rejects_invalid_fields_without_mutation(
    clock, title, description, deadline, priority, field
) -> None:
    adapter = FakeAdapter()
    store = TaskStore(adapter, clock=clock)
    existing = _add(store)

    with pytest.raises(ValidationError) as excinfo:
        store.create(title, description, deadline, priority)

    assert excinfo.value.field == field
    assert store.tasks == (existing,)
    assert store.next_id == 1
    assert len(adapter.saves) == 1


def test_update_overwrites_editable_fields_only(clock) -> None:
    store = TaskStore(FakeAdapter(), clock=clock)
    first = _add(store, "First")
    second = _add(store, "Second")
    store.set_completed(first.id, True)
    clock.advance(minutes=5)

    updated = store.update(first.id, "Renamed", "New body", "2026-04-01", 5)

    assert updated.id == first.id
    assert updated.created_at == first.created_at
    assert updated.completed is True
    assert (updated.title, updated.description, updated.priority) == ("Renamed", "New body", 5)
    assert updated.deadline == date(2026, 4, 1)
    assert updated.updated_at == clock.now
    assert [task.id for task in store.tasks] == [first.id, second.id]


def test_update_missing_task_raises_not_found(clock) -> None:
    adapter = FakeAdapter()
    store = TaskStore(adapter, clock=clock)
    _add(store)

    with pytest.raises(NotFoundError) as excinfo:
        store.update(42, "", "", "", 0)

    assert excinfo.value.task_id == 42
    assert len(adapter.saves) == 1


@pytest.mark.parametrize(("title", "description", "deadline", "priority", "field"), INVALID_FIELDS)
def test_update_with_invalid_fields_leaves_task_untouched(
    clock, title, description, deadline, priority, field
) -> None:
    adapter = FakeAdapter()
    store = TaskStore(adapter, clock=clock)
    task = _add(store)
    clock.advance(minutes=1)

    with pytest.raises(ValidationError) as excinfo:
        store.update(task.id, title, description, deadline, priority)

    assert excinfo.value.field == field
    assert store.get_task(task.id) == task
    assert store.tasks == (task,)
    assert len(adapter.saves) == 1


def test_set_completed_same_value_still_refreshes_and_persists(clock) -> None:
    adapter = FakeAdapter()
    store = TaskStore(adapter, clock=clock)
    task = _add(store)
    clock.advance(seconds=30)

    result = store.set_completed(task.id, False)

    assert result.completed is False
    assert result.updated_at == clock.now
    assert result.updated_at > task.updated_at
    assert len(adapter.saves) == 2


def test_set_completed_requires_bool(clock) -> None:
    store = TaskStore(FakeAdapter(), clock=clock)
    task = _add(store)

    with pytest.raises(ValidationError) as excinfo:
        store.set_completed(task.id, "yes")

    assert excinfo.value.field == "completed"


def test_toggle_completed_flips_flag(clock) -> None:
    store = TaskStore(FakeAdapter(), clock=clock)
    task = _add(store)

    assert store.toggle_completed(task.id).completed is True
    assert store.toggle_completed(task.id).completed is False


def test_toggle_missing_task_raises_not_found(clock) -> None:
    store = TaskStore(FakeAdapter(), clock=clock)

    with pytest.raises(NotFoundError):
        store.toggle_completed(3)


def test_delete_removes_task_and_never_reuses_id(clock) -> None:
    adapter = FakeAdapter()
    store = TaskStore(adapter, clock=clock)
    for index in range(6):
        _add(store, f"Task {index}")
    assert store.tasks[-1].id == 5

    store.delete(5)
    replacement = _add(store, "Replacement")

    assert replacement.id == 6
    assert 5 not in [task.id for task in store.tasks]
    assert adapter.stored == list(store.tasks)


def test_delete_missing_task_raises_not_found(clock) -> None:
    adapter = FakeAdapter()
    store = TaskStore(adapter, clock=clock)
    _add(store)

    with pytest.raises(NotFoundError):
        store.delete(99)

    assert len(store.tasks) == 1
    assert len(adapter.saves) == 1


def test_ids_strictly_increase_across_creates_and_deletes(clock) -> None:
    store = TaskStore(FakeAdapter(), clock=clock)
    issued: list[int] = []

    for step in range(10):
        task = _add(store, f"Task {step}")
        assert all(task.id > previous for previous in issued)
        issued.append(task.id)
        if step % 3 == 0:
            store.delete(task.id)


def test_every_mutation_saves_whole_collection_once(clock) -> None:
    adapter = FakeAdapter()
    store = TaskStore(adapter, clock=clock)

    first = _add(store, "First")
    second = _add(store, "Second")
    store.update(first.id, "First!", "Body", "2026-03-11", 2)
    store.set_completed(second.id, True)
    store.delete(first.id)

    assert len(adapter.saves) == 5
    assert [len(saved) for saved in adapter.saves] == [1, 2, 2, 2, 1]
    assert adapter.saves[-1] == list(store.tasks)


def test_counter_is_recomputed_from_loaded_tasks(clock) -> None:
    adapter = FakeAdapter([_stored_task(3), _stored_task(7), _stored_task(1)])
    store = TaskStore(adapter, clock=clock)

    assert store.next_id == 8
    assert _add(store).id == 8
    assert [task.id for task in store.tasks] == [3, 7, 1, 8]


def test_failed_save_leaves_memory_unchanged(clock) -> None:
    adapter = FakeAdapter()
    store = TaskStore(adapter, clock=clock)
    task = _add(store)
    adapter.fail_with = PersistenceError("disk full")

    with pytest.raises(PersistenceError):
        _add(store, "Second")
    with pytest.raises(PersistenceError):
        store.set_completed(task.id, True)
    with pytest.raises(PersistenceError):
        store.delete(task.id)

    assert store.tasks == (task,)
    assert store.next_id == 1


def test_adapter_os_error_surfaces_as_persistence_error(clock) -> None:
    adapter = FakeAdapter()
    store = TaskStore(adapter, clock=clock)
    adapter.fail_with = OSError("read-only file system")

    with pytest.raises(PersistenceError) as excinfo:
        _add(store)

    assert isinstance(excinfo.value.__cause__, OSError)
    assert store.tasks == ()


def test_updated_at_never_precedes_created_at(clock) -> None:
    store = TaskStore(FakeAdapter(), clock=clock)
    task = _add(store)
    clock.advance(hours=-2)

    updated = store.set_completed(task.id, True)

    assert updated.updated_at == task.created_at


def test_tasks_property_returns_snapshot(clock) -> None:
    store = TaskStore(FakeAdapter(), clock=clock)
    _add(store)
    snapshot = store.get_collection()

    _add(store, "Second")

    assert len(snapshot) == 1
    assert len(store.tasks) == 2


def test_compute_view_reflects_latest_mutation(clock) -> None:
    store = TaskStore(FakeAdapter(), clock=clock)
    task = _add(store)
    store.set_completed(task.id, True)

    view = store.compute_view(FilterState(), today=date(2026, 3, 1))

    assert view.total_count == 1
    assert view.completed_count == 1
    assert view.tasks[0].task == replace(task, completed=True, updated_at=clock.now)
