"""
Tests for the field validation predicates.
"""

from datetime import date

import pytest

from taskchat.core.validators import (
    check_not_before_today, check_priority, check_reminder_before_deadline,
    parse_date, validate_field, validate_task_fields
)

TODAY = date(2025, 1, 15)

VALID = {
    "title": "Pay rent",
    "description": "Transfer rent to landlord",
    "category": "Bills",
    "deadline": "2025-02-01",
    "priority": "High",
    "reminder": "2025-01-25",
}


def test_parse_date():
    assert parse_date("2025-02-01") == date(2025, 2, 1)
    assert parse_date("01/02/2025") is None
    assert parse_date("2025-02-30") is None
    assert parse_date("") is None


def test_valid_submission_has_no_errors():
    assert validate_task_fields(VALID, TODAY) == []


def test_today_is_not_in_the_past():
    errors = []
    assert check_not_before_today("deadline", "2025-01-15", errors, TODAY)
    assert errors == []


def test_all_failures_are_reported_together():
    data = {"title": "", "description": " ", "category": "Bills", "deadline": "2025-01-01",
            "priority": "high", "reminder": "soon"}
    errors = validate_task_fields(data, TODAY)

    assert errors == [
        "Title must not be empty!",
        "Description must not be empty!",
        "For consistency please use the exact words for priority! (High, Medium or Low)",
        "Deadline should not come before today you silly!",
        "Reminder is in the wrong format, please use YYYY-MM-DD.",
    ]


def test_missing_deadline_is_only_reported_once():
    errors = validate_task_fields(dict(VALID, deadline=""), TODAY)
    assert errors == ["Deadline must not be empty!"]


def test_reminder_after_deadline():
    errors = validate_task_fields(dict(VALID, reminder="2025-02-05"), TODAY)
    assert errors == ["I have to remind you before the deadline remember?"]


def test_reminder_is_optional():
    assert validate_task_fields(dict(VALID, reminder=""), TODAY) == []
    assert validate_task_fields({k: v for k, v in VALID.items() if k != "reminder"}, TODAY) == []


def test_reminder_on_deadline_day_is_allowed():
    errors = []
    assert check_reminder_before_deadline("2025-02-01", "2025-02-01", errors)
    assert errors == []


@pytest.mark.parametrize("value", ["High", "Medium", "Low"])
def test_exact_priorities_pass(value):
    assert check_priority(value, [])


@pytest.mark.parametrize("value", ["high", "LOW", "urgent", "", None])
def test_other_priorities_fail(value):
    errors = []
    assert not check_priority(value, errors)
    assert len(errors) == 1


def test_validate_single_field():
    assert validate_field("title", "", {}, TODAY) == ["Title must not be empty!"]
    assert validate_field("title", "Pay rent", {}, TODAY) == []
    assert validate_field("deadline", "2024-12-31", {}, TODAY) == ["Deadline should not come before today you silly!"]
    assert validate_field("reminder", "2025-03-01", {"deadline": "2025-02-01"}, TODAY) == [
        "I have to remind you before the deadline remember?"
    ]
    assert validate_field("priority", "Medium", {}, TODAY) == []
