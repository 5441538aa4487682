"""Task entity tests: construction rules, mutators and representations."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from tasktracker.errors import (
    EmptyIdError,
    EmptyTitleError,
    PastDueDateError,
    TitleTooLongError,
    ValidationError,
)
from tasktracker.task import MAX_TITLE_LENGTH, Task, check_title, format_timestamp, parse_timestamp


# ============================================================================
# Construction
# ============================================================================


def test_create_with_defaults():
    task = Task("t1", "Buy milk")
    assert task.id == "t1"
    assert task.title == "Buy milk"
    assert task.description == ""
    assert task.completed is False
    assert task.due_date is None
    assert task.created_at.tzinfo is not None


def test_create_with_all_fields(tomorrow):
    created = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    task = Task("t1", "Write report", "quarterly numbers", True, tomorrow, created)
    assert task.description == "quarterly numbers"
    assert task.completed is True
    assert task.due_date == tomorrow
    assert task.created_at == created


@pytest.mark.parametrize("title", ["a", "Buy milk", "  padded  ", "x" * MAX_TITLE_LENGTH])
def test_valid_titles_are_kept_verbatim(title):
    assert Task("t1", title).title == title


@pytest.mark.parametrize("title", ["", "   ", "\t\n", None])
def test_blank_title_rejected(title):
    with pytest.raises(EmptyTitleError):
        Task("t1", title)


def test_title_too_long_rejected():
    with pytest.raises(TitleTooLongError):
        Task("t1", "x" * (MAX_TITLE_LENGTH + 1))


def test_title_length_uses_raw_length():
    # Padding counts toward the limit even though emptiness is checked after trimming.
    with pytest.raises(TitleTooLongError):
        Task("t1", " " + "x" * MAX_TITLE_LENGTH)


@pytest.mark.parametrize("task_id", ["", "  "])
def test_blank_id_rejected(task_id):
    with pytest.raises(EmptyIdError):
        Task(task_id, "Title")


def test_past_due_date_rejected(yesterday):
    with pytest.raises(PastDueDateError):
        Task("t1", "Title", due_date=yesterday)


def test_validation_order_title_before_id_before_due_date(yesterday):
    with pytest.raises(EmptyTitleError):
        Task("", "", due_date=yesterday)
    with pytest.raises(EmptyIdError):
        Task("", "Title", due_date=yesterday)


def test_validation_errors_share_base_and_codes():
    codes = set()
    for build in (
        lambda: Task("t1", ""),
        lambda: Task("t1", "x" * 300),
        lambda: Task("", "Title"),
        lambda: Task("t1", "Title", due_date=datetime(2000, 1, 1, tzinfo=timezone.utc)),
    ):
        with pytest.raises(ValidationError) as excinfo:
            build()
        codes.add(excinfo.value.code)
    assert codes == {"empty_title", "title_too_long", "empty_id", "past_due_date"}


def test_title_and_id_checked_before_due_date_type():
    with pytest.raises(EmptyTitleError):
        Task("t1", "", due_date="not-a-date")
    with pytest.raises(EmptyIdError):
        Task("", "Title", due_date="not-a-date")


@pytest.mark.parametrize("title", [None, 123, b"bytes"])
def test_non_string_title_is_validation_error(title):
    with pytest.raises(EmptyTitleError):
        Task("t1", title)
    assert isinstance(check_title(title), EmptyTitleError)


def test_check_title_returns_failure_instead_of_raising():
    assert check_title("ok") is None
    assert isinstance(check_title(""), EmptyTitleError)


def test_naive_due_date_is_treated_as_utc():
    naive = (datetime.now(timezone.utc) + timedelta(days=2)).replace(tzinfo=None)
    task = Task("t1", "Title", due_date=naive)
    assert task.due_date.tzinfo == timezone.utc
    assert task.due_date.replace(tzinfo=None) == naive


def test_id_and_created_at_are_read_only():
    task = Task("t1", "Title")
    with pytest.raises(AttributeError):
        task.created_at = datetime.now(timezone.utc)
    with pytest.raises(AttributeError):
        task.id = "t2"


# ============================================================================
# Mutators
# ============================================================================


def test_complete_and_reopen_are_idempotent():
    task = Task("t1", "Title")
    task.complete()
    task.complete()
    assert task.completed is True
    task.reopen()
    task.reopen()
    assert task.completed is False
    task.complete()
    assert task.completed is True


def test_update_title():
    task = Task("t1", "Old")
    task.update_title("New")
    assert task.title == "New"


@pytest.mark.parametrize(
    "title, error",
    [("", EmptyTitleError), ("   ", EmptyTitleError), ("x" * 256, TitleTooLongError)],
)
def test_failed_update_title_keeps_current_title(title, error):
    task = Task("t1", "Keep me")
    with pytest.raises(error):
        task.update_title(title)
    assert task.title == "Keep me"


def test_update_description_accepts_anything():
    task = Task("t1", "Title", "before")
    task.update_description("")
    assert task.description == ""
    task.update_description("y" * 10_000)
    assert len(task.description) == 10_000


def test_update_description_none_becomes_empty_string():
    task = Task("t1", "Title", "before")
    task.update_description(None)
    assert task.description == ""
    assert task.serialize()["description"] == ""


def test_set_due_date(tomorrow):
    task = Task("t1", "Title")
    task.set_due_date(tomorrow)
    assert task.due_date == tomorrow


def test_set_past_due_date_rejected_and_unchanged(tomorrow, yesterday):
    task = Task("t1", "Title", due_date=tomorrow)
    with pytest.raises(PastDueDateError):
        task.set_due_date(yesterday)
    assert task.due_date == tomorrow


def test_clearing_due_date_always_allowed(tomorrow):
    task = Task("t1", "Title", due_date=tomorrow)
    task.set_due_date(None)
    assert task.due_date is None
    task.set_due_date(None)
    assert task.due_date is None


# ============================================================================
# Overdue
# ============================================================================


def test_not_overdue_without_due_date():
    assert Task("t1", "Title").is_overdue() is False


def test_overdue_follows_the_clock(tomorrow):
    task = Task("t1", "Title", due_date=tomorrow)
    assert task.is_overdue() is False
    assert task.is_overdue(now=tomorrow + timedelta(seconds=1)) is True
    assert task.is_overdue(now=tomorrow) is False


def test_completed_task_is_never_overdue(tomorrow):
    task = Task("t1", "Title", due_date=tomorrow)
    task.complete()
    assert task.is_overdue(now=tomorrow + timedelta(days=30)) is False


def test_restored_task_with_elapsed_due_date_is_overdue(yesterday):
    task = Task.restore("t1", "Title", due_date=yesterday)
    assert task.is_overdue() is True


# ============================================================================
# Representations
# ============================================================================


def test_serialize_survives_json_round_trip(tomorrow):
    task = Task("t1", "Buy milk", "2 litres", False, tomorrow)
    payload = json.loads(json.dumps(task.serialize()))
    assert set(payload) == {"id", "title", "description", "completed", "created_at", "due_date"}

    restored = Task.deserialize(payload)
    assert restored.id == task.id
    assert restored.title == task.title
    assert restored.description == task.description
    assert restored.completed == task.completed
    assert restored.created_at == task.created_at
    assert restored.due_date == task.due_date


def test_serialize_without_due_date():
    data = Task("t1", "Title").serialize()
    assert data["due_date"] is None
    assert Task.deserialize(data).due_date is None


def test_timestamp_text_is_fixed_width_and_sortable():
    early = datetime(2026, 1, 1, tzinfo=timezone.utc)
    late = datetime(2026, 1, 1, 0, 0, 0, 1, tzinfo=timezone.utc)
    assert len(format_timestamp(early)) == len(format_timestamp(late))
    assert format_timestamp(early) < format_timestamp(late)
    assert parse_timestamp(format_timestamp(late)) == late


def test_parse_timestamp_accepts_z_suffix():
    assert parse_timestamp("2026-10-18T09:00:00Z") == datetime(2026, 10, 18, 9, tzinfo=timezone.utc)


def test_describe(tomorrow):
    task = Task("t1", "Buy milk")
    assert task.describe() == "[ ] Buy milk"
    task.complete()
    task.set_due_date(tomorrow)
    assert task.describe() == f"[✓] Buy milk (Due: {tomorrow.isoformat()})"
    assert str(task) == task.describe()
    assert repr(task) == "<Task 'Buy milk'>"


def test_copy_is_equal_but_independent(tomorrow):
    original = Task("t1", "Title", "desc", False, tomorrow)
    clone = original.copy()
    assert clone == original
    assert clone is not original

    clone.set_due_date(tomorrow + timedelta(days=3))
    clone.update_title("Changed")
    clone.complete()
    assert original.due_date == tomorrow
    assert original.title == "Title"
    assert original.completed is False


def test_tasks_are_unhashable():
    with pytest.raises(TypeError):
        hash(Task("t1", "Title"))
