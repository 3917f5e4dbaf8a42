"""
Tests for "field: value" form submissions.
"""

from taskchat.utils.form_parser import parse_form_submission


def test_parses_known_fields():
    text = "Title: Pay rent\ndescription: Transfer rent\nDeadline: 2025-02-01\npriority: High"
    assert parse_form_submission(text) == {
        "title": "Pay rent",
        "description": "Transfer rent",
        "deadline": "2025-02-01",
        "priority": "High",
    }


def test_keeps_colons_inside_values():
    assert parse_form_submission("description: call at 10:30") == {"description": "call at 10:30"}


def test_fullwidth_colon():
    assert parse_form_submission("title：交房租") == {"title": "交房租"}


def test_empty_value_is_kept():
    assert parse_form_submission("reminder:") == {"reminder": ""}


def test_plain_chat_is_not_a_form():
    assert parse_form_submission("add a task") is None
    assert parse_form_submission("note: remember this") is None
    assert parse_form_submission("") is None
