"""Tests for task list filtering."""

import pytest

from movingtasks.filtering import (
    FilterKind,
    FilterSelection,
    filter_values,
    filtered_tasks,
    sort_tasks,
    style_for_priority,
)
from movingtasks.models import CATEGORIES, Task


def _make_task(title, category="Kitchen", location="Inside", priority="High", done=False):
    return Task(
        title=title,
        description="Test Description",
        comment="Test comment",
        category=category,
        location=location,
        priority=priority,
        is_completed=done,
    )


@pytest.fixture
def tasks():
    return [
        _make_task("Kitchen Task", category="Kitchen", location="Kitchen", priority="High"),
        _make_task("Bathroom Task", category="Bathroom", location="Main Bathroom", priority="Low", done=True),
        _make_task("Pantry Task", category="Kitchen Storage", location="Pantry", priority="Medium"),
        _make_task("Deck Task", category="Repair", location="Deck", priority="Low", done=True),
    ]


def _titles(tasks):
    return [t.title for t in tasks]


# ===================================================================
# filtered_tasks
# ===================================================================


def test_none_returns_all(tasks):
    assert filtered_tasks(tasks, FilterKind.NONE, "anything") == tasks


def test_category_all_is_identity(tasks):
    assert filtered_tasks(tasks, FilterKind.CATEGORY, "All") == tasks


def test_category_substring_match(tasks):
    result = filtered_tasks(tasks, FilterKind.CATEGORY, "Kitchen")
    assert _titles(result) == ["Kitchen Task", "Pantry Task"]
    assert all(t in tasks for t in result)
    assert all("kitchen" in t.category.lower() for t in result)


def test_category_is_case_insensitive(tasks):
    assert filtered_tasks(tasks, FilterKind.CATEGORY, "kItChEn") == filtered_tasks(
        tasks, FilterKind.CATEGORY, "KITCHEN"
    )


def test_location_match(tasks):
    result = filtered_tasks(tasks, FilterKind.LOCATION, "bath")
    assert _titles(result) == ["Bathroom Task"]


def test_priority_match(tasks):
    result = filtered_tasks(tasks, FilterKind.PRIORITY, "Low")
    assert _titles(result) == ["Bathroom Task", "Deck Task"]


def test_status_completed(tasks):
    result = filtered_tasks(tasks, FilterKind.STATUS, "Completed")
    assert result == [t for t in tasks if t.is_completed]


def test_status_incomplete(tasks):
    result = filtered_tasks(tasks, FilterKind.STATUS, "Incomplete")
    assert result == [t for t in tasks if not t.is_completed]


def test_status_partitions_tasks(tasks):
    done = filtered_tasks(tasks, FilterKind.STATUS, "Completed")
    todo = filtered_tasks(tasks, FilterKind.STATUS, "Incomplete")
    assert len(done) + len(todo) == len(tasks)
    assert not set(map(id, done)) & set(map(id, todo))


def test_status_other_values_return_all(tasks):
    assert filtered_tasks(tasks, FilterKind.STATUS, "All") == tasks
    assert filtered_tasks(tasks, FilterKind.STATUS, "Kitchen") == tasks


def test_no_match_returns_empty(tasks):
    assert filtered_tasks(tasks, FilterKind.CATEGORY, "Garage") == []


def test_empty_input_always_empty():
    for kind in FilterKind:
        for value in ["All", "Completed", "Kitchen", ""]:
            assert filtered_tasks([], kind, value) == []


def test_filter_is_idempotent(tasks):
    once = filtered_tasks(tasks, FilterKind.CATEGORY, "Kitchen")
    twice = filtered_tasks(once, FilterKind.CATEGORY, "Kitchen")
    assert once == twice


def test_filter_does_not_mutate_input(tasks):
    before = list(tasks)
    result = filtered_tasks(tasks, FilterKind.NONE)
    result.pop()
    assert tasks == before


# ===================================================================
# FilterSelection and FilterKind
# ===================================================================


def test_selection_defaults():
    selection = FilterSelection()
    assert selection.kind is FilterKind.NONE
    assert selection.value == "All"


def test_select_kind_resets_value(tasks):
    selection = FilterSelection(kind=FilterKind.CATEGORY, value="Kitchen")
    selection.select_kind(FilterKind.LOCATION)
    assert selection.kind is FilterKind.LOCATION
    assert selection.value == "All"
    assert selection.apply(tasks) == tasks


def test_selection_apply(tasks):
    selection = FilterSelection()
    selection.select_kind(FilterKind.STATUS)
    selection.value = "Completed"
    assert _titles(selection.apply(tasks)) == ["Bathroom Task", "Deck Task"]


def test_filter_kind_from_string():
    assert FilterKind.from_string("category") is FilterKind.CATEGORY
    assert FilterKind.from_string("STATUS") is FilterKind.STATUS
    assert FilterKind.from_string("None") is FilterKind.NONE


def test_filter_kind_from_string_invalid():
    with pytest.raises(ValueError, match="Must be one of"):
        FilterKind.from_string("color")


def test_filter_values():
    assert filter_values(FilterKind.CATEGORY) == CATEGORIES
    assert filter_values(FilterKind.PRIORITY) == ("All", "Low", "Medium", "High")
    assert filter_values(FilterKind.STATUS) == ("All", "Incomplete", "Completed")
    assert filter_values(FilterKind.NONE) == ("All",)
    assert filter_values(FilterKind.LOCATION)[0] == "All"


# ===================================================================
# Presentation helpers
# ===================================================================


@pytest.mark.parametrize(
    "priority, color",
    [("Low", "green"), ("Medium", "orange"), ("High", "red"), ("Invalid", "blue"), ("low", "blue")],
)
def test_style_for_priority(priority, color):
    assert style_for_priority(priority) == color


def test_sort_tasks_by_title(tasks):
    assert _titles(sort_tasks(tasks)) == [
        "Bathroom Task", "Deck Task", "Kitchen Task", "Pantry Task",
    ]
