"""Data models for tasks and the items purchased for them."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from .money import formatted_line_total, line_total

ALL = "All"

PRIORITIES = ("Low", "Medium", "High")

CATEGORIES = (
    ALL,
    "Cleaning",
    "Miscellaneous",
    "Packing",
    "Painting",
    "Removal",
    "Repair",
    "Replacement",
    "Storage",
)

LOCATIONS = (
    ALL,
    "Main Bedroom",
    "Back Bedroom",
    "Basement",
    "Computer Room",
    "Deck",
    "Dining Room",
    "Foyer",
    "Front Bedroom",
    "Front Porch",
    "Kitchen",
    "Living Room",
    "Main Bathroom",
    "Pantry",
    "Small Bathroom",
    "First Floor",
    "Second Floor",
    "Third Floor",
    "Third Floor Stairwell",
)

STATUSES = (ALL, "Incomplete", "Completed")

TIMESTAMP_FORMAT = "%b %d, %Y at %I:%M %p"


def generate_id() -> str:
    return str(uuid.uuid4())


def format_timestamp(moment: datetime | None = None) -> str:
    """Render a timestamp the way created/completed dates are stored."""
    return (moment or datetime.now()).strftime(TIMESTAMP_FORMAT)


@dataclass
class Task:
    """A unit of work that owns zero or more TaskItems.

    Items are not held here; they live in the store keyed by id and point
    back to their task through ``TaskItem.task_id``.
    """

    title: str = ""
    description: str = ""
    comment: str = ""
    location: str = "Third Floor"
    category: str = "Miscellaneous"
    priority: str = "Medium"
    is_completed: bool = False
    created_date: str = field(default_factory=format_timestamp)
    completed_date: str = ""
    before_image: bytes | None = None
    after_image: bytes | None = None
    project_id: str | None = None
    task_id: str = field(default_factory=generate_id)

    @property
    def status_label(self) -> str:
        return "Complete" if self.is_completed else "Incomplete"


@dataclass
class TaskItem:
    """A purchasable line entry belonging to exactly one Task."""

    task_id: str
    title: str = ""
    description: str = ""
    comment: str = ""
    was_purchased: bool = False
    quantity: str = "1"
    unit_price: str = "$10.00"
    purchase_date: date = field(default_factory=date.today)
    created_date: str = field(default_factory=format_timestamp)
    item_id: str = field(default_factory=generate_id)

    @property
    def purchased_label(self) -> str:
        return "Yes" if self.was_purchased else "No"

    @property
    def line_total(self) -> Decimal:
        return line_total(self.quantity, self.unit_price)

    @property
    def formatted_line_total(self) -> str:
        return formatted_line_total(self.quantity, self.unit_price)


@dataclass
class StoreSnapshot:
    """A complete, materialized copy of the store contents."""

    tasks: list[Task] = field(default_factory=list)
    task_items: list[TaskItem] = field(default_factory=list)
    source_path: str = ""

    @property
    def by_task_id(self) -> dict[str, Task]:
        return {t.task_id: t for t in self.tasks}

    @property
    def items_by_task(self) -> dict[str, list[TaskItem]]:
        groups: dict[str, list[TaskItem]] = {}
        for item in self.task_items:
            groups.setdefault(item.task_id, []).append(item)
        return groups


def sample_tasks() -> list[Task]:
    """Tasks used to seed an empty store."""
    return [
        Task(
            title="Repair Faucet",
            description="Repair Kitchen Faucet",
            comment="Faucet keeps dripping water",
            location="Kitchen",
            category="Repair",
        ),
        Task(
            title="Milk",
            description="Buy Milk",
            comment="We need milk",
            category="Miscellaneous",
        ),
        Task(
            title="Gas",
            description="Fill up gas tank in car",
            comment="Car needs gas",
            category="Miscellaneous",
        ),
    ]
