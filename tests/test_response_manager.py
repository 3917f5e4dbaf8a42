"""
Tests for canned responses, custom overrides and weighted filler lines.
"""

import random

from taskchat.utils.response_manager import FILLER_POOLS, ResponseManager, weighted_choice


def test_default_responses():
    responses = ResponseManager({})
    assert responses.get_response("not_a_number") == "Input must be a number!"
    assert responses.greeting() == "Hey! How can I help you today?"
    assert responses.greeting("Sam") == "Hey Sam! How can I help you today?"
    assert responses.get_response("does_not_exist") is None


def test_custom_response_overrides_and_silences():
    config = {"ui_preferences": {"custom_responses": {
        "task_added": "Done: {title}",
        "ready": "",
    }}}
    responses = ResponseManager(config)

    assert responses.get_response("task_added", title="Pay rent") == "Done: Pay rent"
    assert responses.get_response("ready") is None
    # missing placeholder falls back to the raw template
    assert responses.get_response("task_added") == "Done: {title}"


def test_task_store_errors_are_silent_by_default():
    assert ResponseManager({}).get_response("task_store_error", error="boom") is None


def test_select_prompt_range():
    responses = ResponseManager({})
    assert responses.select_prompt("DeleteTask", 1) == (
        "Please enter the index number of the task to delete it (which means 1)!"
    )
    assert responses.select_prompt("EditTask", 4) == (
        "Please enter the index number of the task to edit it (which means 1 - 4)!"
    )


def test_next_field_prompts():
    responses = ResponseManager({})
    assert responses.next_field_prompt("category") == "Sweet! Please enter the category."
    assert responses.next_field_prompt("priority") == "Nice! Please set a priority level of High, Medium or Low!"


def test_confirm_instructions():
    assert ResponseManager({}).confirm_instructions() == [
        "Please enter confirm, yes, sure, okay, or no problem to proceed.",
        "Or enter no to leave.",
    ]


def test_filler_is_deterministic_with_seeded_rng():
    first = ResponseManager({}, random.Random(3))
    second = ResponseManager({}, random.Random(3))
    picks = [first.filler() for _ in range(20)]

    assert picks == [second.filler() for _ in range(20)]
    assert set(picks) <= {line for line, _ in FILLER_POOLS["what_next"]}


def test_weighted_choice_ignores_zero_weight():
    rng = random.Random(0)
    pool = (("always", 1), ("never", 0))
    assert {weighted_choice(pool, rng) for _ in range(50)} == {"always"}
