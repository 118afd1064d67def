"""Validity rules for tasks and task items, and discarding incomplete ones."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from .models import Task, TaskItem, format_timestamp
from .store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class PruneResult:
    """Summary of what prune_invalid removed."""

    deleted_task_ids: list[str] = field(default_factory=list)
    deleted_item_ids: list[str] = field(default_factory=list)

    @property
    def deleted(self) -> int:
        return len(self.deleted_task_ids) + len(self.deleted_item_ids)


def is_valid(record: Task | TaskItem) -> bool:
    """True when title, description and comment are all filled in."""
    return bool(record.title and record.description and record.comment)


def finalize_on_exit(record: Task | TaskItem, store: TaskStore) -> bool:
    """Delete a record that is still incomplete when its edit session ends.

    Returns True if the record was deleted. Deleting a task also removes its
    items. Nothing is saved here; persisting is up to the caller.
    """
    if is_valid(record):
        return False
    logger.info(
        "Discarding incomplete %s '%s'",
        "task" if isinstance(record, Task) else "task item",
        record.title,
    )
    store.delete(record)
    return True


def toggle_completed(task: Task, now: datetime | None = None) -> Task:
    """Flip a task's completion state and stamp or clear its completed date."""
    task.is_completed = not task.is_completed
    if task.is_completed:
        task.completed_date = format_timestamp(now)
    else:
        task.completed_date = ""
    return task


def prune_invalid(store: TaskStore) -> PruneResult:
    """Remove every incomplete task and task item from the store."""
    result = PruneResult()

    for task in store.fetch_all_tasks():
        if not is_valid(task):
            # Items go with the task; record them before the cascade
            doomed = [i.item_id for i in store.items_for_task(task.task_id)]
            finalize_on_exit(task, store)
            result.deleted_task_ids.append(task.task_id)
            result.deleted_item_ids.extend(doomed)

    for item in store.fetch_all_task_items():
        if finalize_on_exit(item, store):
            result.deleted_item_ids.append(item.item_id)

    if result.deleted:
        logger.info(
            "Pruned %d incomplete task(s) and %d task item(s)",
            len(result.deleted_task_ids),
            len(result.deleted_item_ids),
        )
    return result
