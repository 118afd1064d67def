"""Tests for the JSON snapshot document."""

import json
from datetime import date

import pytest

from movingtasks.codec import dump_store_document, parse_store_document, parse_store_file
from movingtasks.models import StoreSnapshot, Task, TaskItem
from movingtasks.money import grand_total
from movingtasks.store import StorageError

SAMPLE_DOCUMENT = """\
{
  "version": 1,
  "tasks": [
    {
      "task_id": "T-faucet",
      "title": "Repair Faucet",
      "description": "Repair Kitchen Faucet",
      "comment": "Faucet keeps dripping water",
      "location": "Kitchen",
      "category": "Repair",
      "priority": "High",
      "is_completed": true,
      "created_date": "Dec 11, 2023 at 09:15 AM",
      "completed_date": "Dec 12, 2023 at 05:00 PM",
      "before_image": "aGVsbG8=",
      "after_image": null,
      "project_id": null
    },
    {
      "task_id": "T-milk",
      "title": "Milk"
    }
  ],
  "task_items": [
    {
      "item_id": "I-washer",
      "task_id": "T-faucet",
      "title": "Washer",
      "description": "Rubber washer",
      "comment": "Size 10",
      "was_purchased": true,
      "quantity": "2",
      "unit_price": "$1.25",
      "purchase_date": "2023-12-11",
      "created_date": "Dec 11, 2023 at 09:20 AM"
    },
    {
      "item_id": "I-orphan",
      "task_id": "T-missing",
      "title": "Orphan"
    }
  ]
}
"""


def test_parse_tasks():
    snap = parse_store_document(SAMPLE_DOCUMENT)
    assert [t.task_id for t in snap.tasks] == ["T-faucet", "T-milk"]
    faucet = snap.tasks[0]
    assert faucet.location == "Kitchen"
    assert faucet.priority == "High"
    assert faucet.is_completed is True
    assert faucet.completed_date == "Dec 12, 2023 at 05:00 PM"
    assert faucet.before_image == b"hello"
    assert faucet.after_image is None


def test_missing_fields_take_defaults():
    milk = parse_store_document(SAMPLE_DOCUMENT).tasks[1]
    assert milk.description == ""
    assert milk.location == "Third Floor"
    assert milk.category == "Miscellaneous"
    assert milk.priority == "Medium"
    assert milk.is_completed is False
    assert milk.created_date


def test_empty_strings_are_kept():
    doc = {
        "tasks": [{"task_id": "T1", "title": "x", "location": "", "priority": ""}],
        "task_items": [{"task_id": "T1", "title": "y", "quantity": "", "unit_price": ""}],
    }
    snap = parse_store_document(json.dumps(doc))
    assert snap.tasks[0].location == ""
    assert snap.tasks[0].priority == ""
    assert snap.task_items[0].quantity == ""
    assert snap.task_items[0].unit_price == ""
    assert snap.task_items[0].line_total == 0


def test_null_fields_take_defaults():
    doc = {
        "tasks": [{"task_id": "T1", "location": None}],
        "task_items": [{"task_id": "T1", "unit_price": None, "purchase_date": None}],
    }
    snap = parse_store_document(json.dumps(doc))
    assert snap.tasks[0].location == "Third Floor"
    assert snap.task_items[0].unit_price == "$10.00"


def test_parse_items_and_drop_orphans():
    snap = parse_store_document(SAMPLE_DOCUMENT)
    assert [i.item_id for i in snap.task_items] == ["I-washer"]
    washer = snap.task_items[0]
    assert washer.purchase_date == date(2023, 12, 11)
    assert washer.was_purchased is True
    assert washer.formatted_line_total == "$2.50"


def test_items_by_task():
    snap = parse_store_document(SAMPLE_DOCUMENT)
    assert list(snap.items_by_task) == ["T-faucet"]
    assert set(snap.by_task_id) == {"T-faucet", "T-milk"}


def test_bad_purchase_date_falls_back_to_today():
    doc = {
        "tasks": [{"task_id": "T1", "title": "x"}],
        "task_items": [{"task_id": "T1", "title": "y", "purchase_date": "yesterday"}],
    }
    snap = parse_store_document(json.dumps(doc))
    assert snap.task_items[0].purchase_date == date.today()


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[]",
        '{"tasks": {"a": 1}}',
        '{"tasks": ["a"]}',
        '{"tasks": [{"task_id": "T1", "before_image": "***"}]}',
        '{"tasks": [{"task_id": "T1", "title": 7}]}',
        '{"tasks": [{"task_id": "T1", "is_completed": "yes"}]}',
        '{"tasks": [{"task_id": "T1"}], "task_items": [{"task_id": "T1", "quantity": 2}]}',
        '{"tasks": [{"task_id": "T1"}], "task_items": [{"task_id": "T1", "unit_price": 10.5}]}',
    ],
)
def test_malformed_documents_raise(content):
    with pytest.raises(StorageError) as exc:
        parse_store_document(content)
    assert exc.value.kind == "read"


def test_empty_object_is_empty_snapshot():
    snap = parse_store_document("{}")
    assert snap.tasks == []
    assert snap.task_items == []


def test_dump_then_parse_preserves_records():
    task = Task(title="Paint", description="Paint deck", comment="Two coats", after_image=b"\x00\x01")
    item = TaskItem(task_id=task.task_id, title="Paint can", quantity="3", unit_price="$24.99")
    snap = parse_store_document(dump_store_document(StoreSnapshot(tasks=[task], task_items=[item])))
    assert snap.tasks == [task]
    assert snap.task_items == [item]


def test_dump_then_parse_keeps_empty_prices():
    task = Task(title="Paint", description="Paint deck", comment="Two coats", location="")
    item = TaskItem(task_id=task.task_id, title="Paint can", quantity="", unit_price="")
    snap = parse_store_document(dump_store_document(StoreSnapshot(tasks=[task], task_items=[item])))
    assert snap.tasks == [task]
    assert snap.task_items == [item]
    assert grand_total(snap.task_items) == 0


def test_parse_store_file(tmp_path):
    f = tmp_path / "tasks.json"
    f.write_text(SAMPLE_DOCUMENT)
    snap = parse_store_file(f)
    assert snap.source_path == str(f)
    assert len(snap.tasks) == 2
