"""Reading and writing the JSON snapshot document."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from datetime import date
from pathlib import Path

from .models import StoreSnapshot, Task, TaskItem
from .store import StorageError

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1


def parse_store_document(content: str, source_path: str = "") -> StoreSnapshot:
    """Parse a snapshot document into tasks and task items.

    Items pointing at a task that is not in the document are dropped.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise StorageError("read", f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise StorageError("read", "document root must be an object")

    version = data.get("version", DOCUMENT_VERSION)
    if version != DOCUMENT_VERSION:
        logger.warning("Unknown document version %r; reading anyway", version)

    tasks = [_task_from_dict(raw) for raw in _records(data, "tasks")]
    known_ids = {t.task_id for t in tasks}

    items: list[TaskItem] = []
    for raw in _records(data, "task_items"):
        item = _item_from_dict(raw)
        if item.task_id not in known_ids:
            logger.warning(
                "Task item '%s' references task '%s' which was not found; dropping",
                item.title, item.task_id,
            )
            continue
        items.append(item)

    return StoreSnapshot(tasks=tasks, task_items=items, source_path=source_path)


def parse_store_file(path: str | Path) -> StoreSnapshot:
    """Parse a snapshot document from disk."""
    p = Path(path)
    content = p.read_text(encoding="utf-8")
    return parse_store_document(content, source_path=str(p))


def dump_store_document(snapshot: StoreSnapshot) -> str:
    doc = {
        "version": DOCUMENT_VERSION,
        "tasks": [_task_to_dict(t) for t in snapshot.tasks],
        "task_items": [_item_to_dict(i) for i in snapshot.task_items],
    }
    return json.dumps(doc, indent=2) + "\n"


def _records(data: dict, key: str) -> list[dict]:
    records = data.get(key) or []
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise StorageError("read", f"'{key}' must be a list of objects")
    return records


def _task_to_dict(task: Task) -> dict:
    return {
        "task_id": task.task_id,
        "title": task.title,
        "description": task.description,
        "comment": task.comment,
        "location": task.location,
        "category": task.category,
        "priority": task.priority,
        "is_completed": task.is_completed,
        "created_date": task.created_date,
        "completed_date": task.completed_date,
        "before_image": _encode_image(task.before_image),
        "after_image": _encode_image(task.after_image),
        "project_id": task.project_id,
    }


def _text(raw: dict, key: str) -> str | None:
    """A text field's value, or None when the key is absent or null."""
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise StorageError("read", f"'{key}' must be a string, got {value!r}")
    return value


def _flag(raw: dict, key: str) -> bool:
    value = raw.get(key, False)
    if not isinstance(value, bool):
        raise StorageError("read", f"'{key}' must be true or false, got {value!r}")
    return value


def _task_from_dict(raw: dict) -> Task:
    task = Task(
        is_completed=_flag(raw, "is_completed"),
        before_image=_decode_image(_text(raw, "before_image")),
        after_image=_decode_image(_text(raw, "after_image")),
        project_id=_text(raw, "project_id"),
    )
    # Absent keys keep the model defaults; empty strings are kept as stored
    for key in (
        "task_id", "title", "description", "comment", "location",
        "category", "priority", "created_date", "completed_date",
    ):
        value = _text(raw, key)
        if value is not None:
            setattr(task, key, value)
    return task


def _item_to_dict(item: TaskItem) -> dict:
    return {
        "item_id": item.item_id,
        "task_id": item.task_id,
        "title": item.title,
        "description": item.description,
        "comment": item.comment,
        "was_purchased": item.was_purchased,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "purchase_date": item.purchase_date.isoformat(),
        "created_date": item.created_date,
    }


def _item_from_dict(raw: dict) -> TaskItem:
    item = TaskItem(
        task_id=_text(raw, "task_id") or "",
        was_purchased=_flag(raw, "was_purchased"),
    )
    for key in (
        "item_id", "title", "description", "comment",
        "quantity", "unit_price", "created_date",
    ):
        value = _text(raw, key)
        if value is not None:
            setattr(item, key, value)
    purchase_date = _text(raw, "purchase_date")
    if purchase_date:
        try:
            item.purchase_date = date.fromisoformat(purchase_date)
        except ValueError:
            logger.warning(
                "Task item '%s' has bad purchase date %r; using today",
                item.title, purchase_date,
            )
    return item


def _encode_image(data: bytes | None) -> str | None:
    if data is None:
        return None
    return base64.b64encode(data).decode("ascii")


def _decode_image(value: str | None) -> bytes | None:
    if not value:
        return None
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise StorageError("read", f"corrupt image data: {e}") from e
