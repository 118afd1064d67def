"""In-memory entity store for tasks and task items, with durable backends."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Protocol

from .models import StoreSnapshot, Task, TaskItem

logger = logging.getLogger(__name__)

DATABASE_SAVE_ERROR = "Could not save information to the database."
DATABASE_READ_ERROR = "Could not load information from the database."


class StorageError(Exception):
    """Raised when the underlying medium rejects a read or a write."""

    def __init__(self, kind: str, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        message = DATABASE_SAVE_ERROR if kind == "save" else DATABASE_READ_ERROR
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class StoreBackend(Protocol):
    def load(self) -> StoreSnapshot: ...

    def write(self, snapshot: StoreSnapshot) -> None: ...


@dataclass
class StoreChange:
    """Notification sent to subscribers after a mutation."""

    action: str  # "insert" or "delete"
    record: Task | TaskItem


class TaskStore:
    """Arena of tasks and task items keyed by id.

    Items reference their owning task by id; deleting a task sweeps every
    item with a matching ``task_id``. Fetches return fresh lists in
    insertion order.
    """

    def __init__(self, backend: StoreBackend | None = None) -> None:
        self.backend = backend
        self._tasks: dict[str, Task] = {}
        self._items: dict[str, TaskItem] = {}
        self._subscribers: list[Callable[[StoreChange], None]] = []

    @classmethod
    def open(cls, backend: StoreBackend) -> TaskStore:
        """Create a store populated from the backend's current snapshot."""
        snapshot = backend.load()
        store = cls(backend)
        for task in snapshot.tasks:
            store._tasks[task.task_id] = task
        for item in snapshot.task_items:
            if item.task_id not in store._tasks:
                logger.warning(
                    "Dropping task item '%s' (%s): owning task %s not found",
                    item.title, item.item_id, item.task_id,
                )
                continue
            store._items[item.item_id] = item
        logger.debug(
            "Opened store with %d tasks and %d task items",
            len(store._tasks), len(store._items),
        )
        return store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_all_tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def fetch_all_task_items(self) -> list[TaskItem]:
        return list(self._items.values())

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def get_task_item(self, item_id: str) -> TaskItem | None:
        return self._items.get(item_id)

    def items_for_task(self, task_id: str) -> list[TaskItem]:
        return [i for i in self._items.values() if i.task_id == task_id]

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            tasks=self.fetch_all_tasks(),
            task_items=self.fetch_all_task_items(),
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, record: Task | TaskItem) -> None:
        """Add a record, replacing any existing record with the same id."""
        if isinstance(record, Task):
            self._tasks[record.task_id] = record
        else:
            if record.task_id not in self._tasks:
                raise ValueError(
                    f"Task item '{record.title}' belongs to unknown task {record.task_id}"
                )
            self._items[record.item_id] = record
        self._notify("insert", record)

    def delete(self, record: Task | TaskItem) -> None:
        """Remove a record; removing a task also removes its items."""
        if isinstance(record, Task):
            if self._tasks.pop(record.task_id, None) is None:
                logger.debug("Task %s not in store; nothing to delete", record.task_id)
                return
            for item in self.items_for_task(record.task_id):
                del self._items[item.item_id]
                self._notify("delete", item)
            logger.debug("Deleted task '%s' (%s)", record.title, record.task_id)
        else:
            if self._items.pop(record.item_id, None) is None:
                logger.debug("Task item %s not in store; nothing to delete", record.item_id)
                return
            logger.debug("Deleted task item '%s' (%s)", record.title, record.item_id)
        self._notify("delete", record)

    def delete_many(self, records: Iterable[Task | TaskItem]) -> None:
        for record in list(records):
            self.delete(record)

    def save(self) -> None:
        """Persist the current contents through the backend, if any."""
        if self.backend is None:
            return
        self.backend.write(self.snapshot())
        logger.debug(
            "Saved %d tasks and %d task items",
            len(self._tasks), len(self._items),
        )

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable[[StoreChange], None]) -> None:
        self._subscribers.append(callback)

    def _notify(self, action: str, record: Task | TaskItem) -> None:
        change = StoreChange(action=action, record=record)
        for callback in self._subscribers:
            callback(change)


class JsonFileBackend:
    """Stores the whole snapshot as one JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> StoreSnapshot:
        from .codec import parse_store_document

        if not self.path.exists():
            logger.info("No store file at %s; starting empty", self.path)
            return StoreSnapshot(source_path=str(self.path))
        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read %s: %s", self.path, e)
            raise StorageError("read", str(e)) from e
        return parse_store_document(content, source_path=str(self.path))

    def write(self, snapshot: StoreSnapshot) -> None:
        from .codec import dump_store_document

        content = dump_store_document(snapshot)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write %s: %s", self.path, e)
            raise StorageError("save", str(e)) from e
