"""CLI entry point for movingtasks."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .filtering import (
    FilterKind,
    filter_values,
    filtered_tasks,
    sort_tasks,
    style_for_priority,
)
from .lifecycle import finalize_on_exit, prune_invalid, toggle_completed
from .models import PRIORITIES, Task, TaskItem, sample_tasks
from .money import format_currency, grand_total
from .remote import RemoteStoreClient
from .store import JsonFileBackend, StorageError, TaskStore

DEFAULT_STORE_FILE = "tasks.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="movingtasks",
        description="Track moving tasks and the items bought for them.",
    )
    parser.add_argument(
        "--file",
        type=str,
        default=None,
        help=f"Path to the JSON store (or set MOVINGTASKS_FILE; default {DEFAULT_STORE_FILE})",
    )
    parser.add_argument(
        "--remote-url",
        type=str,
        default=None,
        help="URL of a remote store document (or set MOVINGTASKS_REMOTE_URL). "
        "Overrides --file.",
    )
    parser.add_argument(
        "--token",
        type=str,
        default=None,
        help="Bearer token for the remote store (or set MOVINGTASKS_TOKEN)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser(
        "list",
        help="List tasks, optionally filtered",
        epilog=_filter_values_help(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "--filter",
        type=FilterKind.from_string,
        default=FilterKind.NONE,
        help="None, Category, Location, Priority or Status",
    )
    p.add_argument(
        "--value",
        type=str,
        default="All",
        help="Filter value, matched as a case-insensitive substring (default All)",
    )
    p.add_argument("--output-json", type=str, default=None)

    p = sub.add_parser("add-task", help="Create a task")
    p.add_argument("--title", default="")
    p.add_argument("--description", default="")
    p.add_argument("--comment", default="")
    p.add_argument("--location", default="Third Floor")
    p.add_argument("--category", default="Miscellaneous")
    p.add_argument("--priority", default="Medium", choices=PRIORITIES)

    p = sub.add_parser("add-item", help="Add a task item to a task")
    p.add_argument("task_id")
    p.add_argument("--title", default="")
    p.add_argument("--description", default="")
    p.add_argument("--comment", default="")
    p.add_argument("--quantity", default="1")
    p.add_argument("--unit-price", default="$10.00")
    p.add_argument("--purchased", action="store_true")

    p = sub.add_parser("toggle", help="Toggle a task's completion status")
    p.add_argument("task_id")

    p = sub.add_parser("delete", help="Delete tasks and their items")
    p.add_argument("task_ids", nargs="+")

    p = sub.add_parser("delete-item", help="Delete task items")
    p.add_argument("item_ids", nargs="+")

    p = sub.add_parser("totals", help="Show item line totals and the grand total")
    p.add_argument("--task", dest="task_id", default=None, help="Only this task's items")
    p.add_argument("--output-json", type=str, default=None)

    sub.add_parser("prune", help="Delete tasks and items missing required fields")
    sub.add_parser("seed", help="Add the sample tasks")

    return parser


def _filter_values_help() -> str:
    lines = ["filter values:"]
    for kind in FilterKind:
        if kind is not FilterKind.NONE:
            lines.append(f"  {kind.value}: {', '.join(filter_values(kind))}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )

    backend = _resolve_backend(args)
    try:
        store = TaskStore.open(backend)
        return COMMANDS[args.command](store, args)
    except (StorageError, ValueError) as e:
        logging.error("%s", e)
        return 1
    finally:
        if isinstance(backend, RemoteStoreClient):
            backend.close()


def _resolve_backend(args: argparse.Namespace) -> JsonFileBackend | RemoteStoreClient:
    remote_url = args.remote_url or os.environ.get("MOVINGTASKS_REMOTE_URL")
    if remote_url:
        token = args.token or os.environ.get("MOVINGTASKS_TOKEN")
        logging.debug("Using remote store %s", remote_url)
        return RemoteStoreClient(remote_url, token=token)
    path = args.file or os.environ.get("MOVINGTASKS_FILE") or DEFAULT_STORE_FILE
    logging.debug("Using store file %s", path)
    return JsonFileBackend(path)


def _require_task(store: TaskStore, task_id: str) -> Task:
    task = store.get_task(task_id)
    if task is None:
        raise ValueError(f"Task {task_id} not found")
    return task


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------


def cmd_list(store: TaskStore, args: argparse.Namespace) -> int:
    tasks = sort_tasks(store.fetch_all_tasks())
    if not tasks:
        print("No tasks are available for display.")
        return 0

    shown = filtered_tasks(tasks, args.filter, args.value)
    items_by_task = store.snapshot().items_by_task
    if not shown:
        print("No tasks were found for display. Please refine your filter.")
    for task in shown:
        count = len(items_by_task.get(task.task_id, []))
        print(f"[{style_for_priority(task.priority)}] {task.title}  ({count} item(s))")
        print(f"    {task.task_id}")
        print(f"    {task.description}")
        print(f"    Location: {task.location}")
        print(f"    Category: {task.category}")
        print(f"    Status: {task.status_label}")
        print(f"    Date Created: {task.created_date}")

    if args.output_json:
        out = [
            {
                "task_id": t.task_id,
                "title": t.title,
                "location": t.location,
                "category": t.category,
                "priority": t.priority,
                "is_completed": t.is_completed,
            }
            for t in shown
        ]
        Path(args.output_json).write_text(json.dumps(out, indent=2))
        logging.info("Results written to %s", args.output_json)
    return 0


def cmd_add_task(store: TaskStore, args: argparse.Namespace) -> int:
    task = Task(
        title=args.title,
        description=args.description,
        comment=args.comment,
        location=args.location,
        category=args.category,
        priority=args.priority,
    )
    store.insert(task)
    if finalize_on_exit(task, store):
        logging.error("Title, description and comment are required; task not saved")
        return 1
    store.save()
    logging.info("Created task '%s' (%s)", task.title, task.task_id)
    return 0


def cmd_add_item(store: TaskStore, args: argparse.Namespace) -> int:
    task = _require_task(store, args.task_id)
    item = TaskItem(
        task_id=task.task_id,
        title=args.title,
        description=args.description,
        comment=args.comment,
        quantity=args.quantity,
        unit_price=args.unit_price,
        was_purchased=args.purchased,
    )
    store.insert(item)
    if finalize_on_exit(item, store):
        logging.error("Title, description and comment are required; item not saved")
        return 1
    store.save()
    logging.info(
        "Added '%s' to '%s' (%s)", item.title, task.title, item.formatted_line_total
    )
    return 0


def cmd_toggle(store: TaskStore, args: argparse.Namespace) -> int:
    task = toggle_completed(_require_task(store, args.task_id))
    store.save()
    logging.info("Task '%s' is now %s", task.title, task.status_label.lower())
    return 0


def cmd_delete(store: TaskStore, args: argparse.Namespace) -> int:
    tasks = [_require_task(store, tid) for tid in args.task_ids]
    store.delete_many(tasks)
    store.save()
    logging.info("Deleted %d task(s)", len(tasks))
    return 0


def cmd_delete_item(store: TaskStore, args: argparse.Namespace) -> int:
    items = []
    for item_id in args.item_ids:
        item = store.get_task_item(item_id)
        if item is None:
            raise ValueError(f"Task item {item_id} not found")
        items.append(item)
    store.delete_many(items)
    store.save()
    logging.info("Deleted %d task item(s)", len(items))
    return 0


def cmd_totals(store: TaskStore, args: argparse.Namespace) -> int:
    if args.task_id:
        items = store.items_for_task(_require_task(store, args.task_id).task_id)
    else:
        items = store.fetch_all_task_items()

    for item in items:
        print(
            f"{item.title}: {item.quantity} x {item.unit_price} = "
            f"{item.formatted_line_total} (purchased: {item.purchased_label})"
        )
    total = grand_total(items)
    print(f"Grand Total: {format_currency(total)}")

    if args.output_json:
        snapshot = store.snapshot()
        tasks = snapshot.by_task_id
        out = {
            "items": {i.item_id: str(i.line_total) for i in items},
            "tasks": {
                task_id: {"title": tasks[task_id].title, "total": str(grand_total(group))}
                for task_id, group in snapshot.items_by_task.items()
                if not args.task_id or task_id == args.task_id
            },
            "grand_total": str(total),
        }
        Path(args.output_json).write_text(json.dumps(out, indent=2))
        logging.info("Results written to %s", args.output_json)
    return 0


def cmd_prune(store: TaskStore, args: argparse.Namespace) -> int:
    result = prune_invalid(store)
    if result.deleted:
        store.save()
    else:
        logging.info("Nothing to prune")
    return 0


def cmd_seed(store: TaskStore, args: argparse.Namespace) -> int:
    tasks = sample_tasks()
    for task in tasks:
        store.insert(task)
    store.save()
    logging.info("Added %d sample task(s)", len(tasks))
    return 0


COMMANDS = {
    "list": cmd_list,
    "add-task": cmd_add_task,
    "add-item": cmd_add_item,
    "toggle": cmd_toggle,
    "delete": cmd_delete,
    "delete-item": cmd_delete_item,
    "totals": cmd_totals,
    "prune": cmd_prune,
    "seed": cmd_seed,
}


if __name__ == "__main__":
    sys.exit(main())
