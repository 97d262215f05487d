from __future__ import annotations

import pytest

from taskservice.app.core.errors import StoreError, ValidationError
from taskservice.app.validation import (
    CREATE_TASK_RULES,
    TASK_ID_RULES,
    TASK_STATUSES,
    UPDATE_TASK_RULES,
    raise_for_errors,
    validate,
)
from fakes import InMemoryTaskRepository


def _messages(result, field=None):
    return [e.message for e in result.errors if field is None or e.field == field]


def test_valid_payload_is_trimmed(repo, new_task) -> None:
    result = validate(
        new_task(title="  Buy milk  ", status=" pending "), CREATE_TASK_RULES, repository=repo
    )
    assert result.ok
    assert result.values == {
        "title": "Buy milk",
        "description": "2% milk, 1 gallon",
        "status": "pending",
    }


def test_missing_fields_report_every_failing_rule_in_order(repo) -> None:
    result = validate({}, CREATE_TASK_RULES, repository=repo)
    assert [e.field for e in result.errors][:3] == ["title", "title", "title"]
    assert _messages(result, "title") == [
        "title is required",
        "title cannot be empty",
        "title should be at least 5 characters long",
    ]
    assert _messages(result, "description")[0] == "description is required"
    assert _messages(result, "status") == [
        "status is required",
        "status cannot be empty",
        "status should be one of (pending, in progress, completed)",
    ]
    # uniqueness lookup is skipped for a title that already failed
    assert repo.calls == []


@pytest.mark.parametrize("title", ["abcd", "  abcd  ", "a"])
def test_short_title_fails_length_rule(repo, new_task, title) -> None:
    result = validate(new_task(title=title), CREATE_TASK_RULES, repository=repo)
    assert _messages(result) == ["title should be at least 5 characters long"]


def test_five_character_title_passes(repo, new_task) -> None:
    result = validate(new_task(title=" abcde "), CREATE_TASK_RULES, repository=repo)
    assert result.ok
    assert result.values["title"] == "abcde"


def test_whitespace_title_is_empty(repo, new_task) -> None:
    result = validate(new_task(title="     "), UPDATE_TASK_RULES)
    assert _messages(result) == [
        "title cannot be empty",
        "title should be at least 5 characters long",
    ]


@pytest.mark.parametrize("status", TASK_STATUSES)
def test_each_status_passes(new_task, status) -> None:
    assert validate(new_task(status=status), UPDATE_TASK_RULES).ok


@pytest.mark.parametrize("status", ["done", "Pending", "in-progress", "complete"])
def test_unknown_status_fails(new_task, status) -> None:
    result = validate(new_task(status=status), UPDATE_TASK_RULES)
    assert _messages(result) == ["status should be one of (pending, in progress, completed)"]


@pytest.mark.parametrize(
    "description, ok",
    [("abcd", False), ("abcde", True), ("x" * 128, True), ("x" * 129, False), ("  abcd  ", False)],
)
def test_description_length_bounds(new_task, description, ok) -> None:
    result = validate(new_task(description=description), UPDATE_TASK_RULES)
    assert result.ok is ok
    if not ok:
        assert _messages(result) == ["description should be between 5 and 128 characters long"]


def test_numbers_are_coerced_and_other_types_rejected(new_task) -> None:
    result = validate(new_task(title=1234567), UPDATE_TASK_RULES)
    assert result.ok
    assert result.values["title"] == "1234567"

    result = validate(new_task(title=["Buy milk"], status=True), UPDATE_TASK_RULES)
    assert _messages(result) == ["title must be a string", "status must be a string"]


def test_duplicate_title_fails_uniqueness(repo, new_task) -> None:
    repo.create(new_task())
    result = validate(new_task(title="  Buy milk "), CREATE_TASK_RULES, repository=repo)
    assert _messages(result) == ["title already exists"]
    assert result.errors[0].value == "Buy milk"


def test_update_rules_do_not_check_uniqueness(repo, new_task) -> None:
    repo.create(new_task())
    assert validate(new_task(), UPDATE_TASK_RULES, repository=repo).ok
    assert "find_by_title" not in repo.calls


def test_store_failure_during_uniqueness_check_propagates(new_task) -> None:
    repo = InMemoryTaskRepository(fail_on={"find_by_title"})
    with pytest.raises(StoreError):
        validate(new_task(), CREATE_TASK_RULES, repository=repo)


def test_id_rule() -> None:
    assert validate({"id": "65a1f0c2e4b0a1b2c3d4e5f6"}, TASK_ID_RULES).ok
    for bad in ("123", "zz" * 12, "65a1f0c2e4b0a1b2c3d4e5f6a", ""):
        result = validate({"id": bad}, TASK_ID_RULES)
        assert _messages(result) == ["should be a valid mongo Id"]
        assert result.errors[0].location == "path"


def test_raise_for_errors_merges_results_in_order(new_task) -> None:
    id_result = validate({"id": "nope"}, TASK_ID_RULES)
    body_result = validate(new_task(status="done"), UPDATE_TASK_RULES)
    with pytest.raises(ValidationError) as info:
        raise_for_errors(id_result, body_result)
    assert [e.field for e in info.value.errors] == ["id", "status"]

    raise_for_errors(validate(new_task(), UPDATE_TASK_RULES))


def test_null_values_count_as_empty_not_missing() -> None:
    result = validate(
        {"title": None, "description": "2% milk, 1 gallon", "status": None}, UPDATE_TASK_RULES
    )
    assert _messages(result) == [
        "title cannot be empty",
        "title should be at least 5 characters long",
        "status cannot be empty",
        "status should be one of (pending, in progress, completed)",
    ]
