"""Task list filtering by category, location, priority or completion status."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .models import ALL, CATEGORIES, LOCATIONS, PRIORITIES, STATUSES, Task

logger = logging.getLogger(__name__)

COMPLETED = "Completed"
INCOMPLETE = "Incomplete"

PRIORITY_COLORS = {
    "Low": "green",
    "Medium": "orange",
    "High": "red",
}
DEFAULT_PRIORITY_COLOR = "blue"


class FilterKind(Enum):
    """The field the task list is restricted on."""

    NONE = "None"
    CATEGORY = "Category"
    LOCATION = "Location"
    PRIORITY = "Priority"
    STATUS = "Status"

    @classmethod
    def from_string(cls, value: str) -> FilterKind:
        """Parse a filter kind by name or label, case-insensitively."""
        lowered = value.strip().lower()
        for kind in cls:
            if lowered in (kind.name.lower(), kind.value.lower()):
                return kind
        valid = ", ".join(k.value for k in cls)
        raise ValueError(f"Invalid filter '{value}'. Must be one of: {valid}")


# Task attribute compared for each substring-matched kind
_FIELD_FOR_KIND = {
    FilterKind.CATEGORY: "category",
    FilterKind.LOCATION: "location",
    FilterKind.PRIORITY: "priority",
}


def filtered_tasks(
    tasks: Sequence[Task],
    kind: FilterKind,
    value: str = ALL,
) -> list[Task]:
    """Return the tasks matching a filter, in their original order.

    Category, location and priority match when the task's field contains
    ``value`` case-insensitively (a substring match, not equality). Status
    accepts "Completed" or "Incomplete"; any other status value, and "All"
    for the other kinds, leaves the list unrestricted.
    """
    if kind is FilterKind.NONE:
        return list(tasks)

    if kind is FilterKind.STATUS:
        if value == COMPLETED:
            return [t for t in tasks if t.is_completed]
        if value == INCOMPLETE:
            return [t for t in tasks if not t.is_completed]
        return list(tasks)

    if value == ALL:
        return list(tasks)

    attr = _FIELD_FOR_KIND[kind]
    needle = value.lower()
    result = [t for t in tasks if needle in getattr(t, attr).lower()]
    logger.debug(
        "Filter %s=%r matched %d of %d tasks",
        kind.value, value, len(result), len(tasks),
    )
    return result


@dataclass
class FilterSelection:
    """The filter currently chosen for the task list."""

    kind: FilterKind = FilterKind.NONE
    value: str = ALL

    def select_kind(self, kind: FilterKind) -> None:
        """Switch to another kind; the old value never carries over."""
        self.kind = kind
        self.value = ALL

    def apply(self, tasks: Sequence[Task]) -> list[Task]:
        return filtered_tasks(tasks, self.kind, self.value)


def filter_values(kind: FilterKind) -> tuple[str, ...]:
    """Values offered for a filter kind, sentinel first."""
    if kind is FilterKind.CATEGORY:
        return CATEGORIES
    if kind is FilterKind.LOCATION:
        return LOCATIONS
    if kind is FilterKind.PRIORITY:
        return (ALL,) + PRIORITIES
    if kind is FilterKind.STATUS:
        return STATUSES
    return (ALL,)


def style_for_priority(priority: str) -> str:
    """Color name used to badge a task with the given priority."""
    return PRIORITY_COLORS.get(priority, DEFAULT_PRIORITY_COLOR)


def sort_tasks(tasks: Sequence[Task]) -> list[Task]:
    """Default list order: by title."""
    return sorted(tasks, key=lambda t: t.title)
