"""Declarative field rules for task requests.

A rule set is an ordered tuple of :class:`FieldRules`. Each field runs its
synchronous :class:`Rule` predicates eagerly and reports every failure; the
store-backed :class:`StoreCheck` rules (title uniqueness) run afterwards and
only when the synchronous rules passed. A failing store lookup raises
``StoreError`` out of :func:`validate`, it is never reported as a field error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from taskservice.app.core.errors import ValidationError
from taskservice.app.task_repo_utils import is_object_id
from taskservice.ports.task_repository import ITaskRepository

TASK_STATUSES = ("pending", "in progress", "completed")

DESCRIPTION_MIN_LENGTH = 5
DESCRIPTION_MAX_LENGTH = 128
TITLE_MIN_LENGTH = 5


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str
    location: str = "body"
    value: Any = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "message": self.message,
            "location": self.location,
            "value": self.value,
        }


@dataclass(frozen=True)
class Rule:
    predicate: Callable[[str], bool]
    message: str


@dataclass(frozen=True)
class StoreCheck:
    """A rule that needs the task store; ``passes`` may raise StoreError."""

    passes: Callable[[ITaskRepository, str], bool]
    message: str


@dataclass(frozen=True)
class FieldRules:
    name: str
    rules: tuple[Rule, ...] = ()
    store_checks: tuple[StoreCheck, ...] = ()
    required: Optional[str] = None
    location: str = "body"
    trim: bool = True


@dataclass
class ValidationResult:
    values: dict[str, Any] = field(default_factory=dict)
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _coerce(raw: Any) -> Optional[str]:
    if isinstance(raw, str):
        return raw
    # bool is an int subclass but never a valid text value
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return str(raw)
    return None


def _check_field(
    field_rules: FieldRules,
    data: Mapping[str, Any],
    repository: Optional[ITaskRepository],
    result: ValidationResult,
) -> None:
    name, location = field_rules.name, field_rules.location
    raw = data.get(name)
    errors: list[FieldError] = []

    if raw is None:
        # only an absent key is "required"; an explicit null counts as empty
        if name not in data and field_rules.required:
            errors.append(FieldError(name, field_rules.required, location, raw))
        value = ""
    else:
        value = _coerce(raw)
        if value is None:
            result.errors.append(FieldError(name, f"{name} must be a string", location, raw))
            return

    if field_rules.trim:
        value = value.strip()

    for rule in field_rules.rules:
        if not rule.predicate(value):
            errors.append(FieldError(name, rule.message, location, value))

    if not errors and field_rules.store_checks:
        if repository is None:
            raise RuntimeError(f"field {name!r} needs a task repository to validate")
        for check in field_rules.store_checks:
            if not check.passes(repository, value):
                errors.append(FieldError(name, check.message, location, value))

    result.errors.extend(errors)
    result.values[name] = value


def validate(
    data: Optional[Mapping[str, Any]],
    rule_set: tuple[FieldRules, ...],
    repository: Optional[ITaskRepository] = None,
) -> ValidationResult:
    """Run ``rule_set`` over ``data`` and return cleaned values plus ordered errors."""
    result = ValidationResult()
    data = data or {}
    for field_rules in rule_set:
        _check_field(field_rules, data, repository, result)
    return result


def raise_for_errors(*results: ValidationResult) -> None:
    errors = [error for result in results for error in result.errors]
    if errors:
        raise ValidationError(errors)


def _non_empty(value: str) -> bool:
    return bool(value)


def _title_is_unused(repository: ITaskRepository, title: str) -> bool:
    return repository.find_by_title(title) is None


_TITLE_RULES = (
    Rule(_non_empty, "title cannot be empty"),
    Rule(
        lambda value: len(value) >= TITLE_MIN_LENGTH,
        f"title should be at least {TITLE_MIN_LENGTH} characters long",
    ),
)

_DESCRIPTION = FieldRules(
    "description",
    rules=(
        Rule(_non_empty, "description cannot be empty"),
        Rule(
            lambda value: DESCRIPTION_MIN_LENGTH <= len(value) <= DESCRIPTION_MAX_LENGTH,
            f"description should be between {DESCRIPTION_MIN_LENGTH} and "
            f"{DESCRIPTION_MAX_LENGTH} characters long",
        ),
    ),
    required="description is required",
)

_STATUS = FieldRules(
    "status",
    rules=(
        Rule(_non_empty, "status cannot be empty"),
        Rule(
            lambda value: value in TASK_STATUSES,
            f"status should be one of ({', '.join(TASK_STATUSES)})",
        ),
    ),
    required="status is required",
)

CREATE_TASK_RULES = (
    FieldRules(
        "title",
        rules=_TITLE_RULES,
        store_checks=(StoreCheck(_title_is_unused, "title already exists"),),
        required="title is required",
    ),
    _DESCRIPTION,
    _STATUS,
)

UPDATE_TASK_RULES = (
    FieldRules("title", rules=_TITLE_RULES, required="title is required"),
    _DESCRIPTION,
    _STATUS,
)

TASK_ID_RULES = (
    FieldRules(
        "id",
        rules=(Rule(is_object_id, "should be a valid mongo Id"),),
        location="path",
        trim=False,
    ),
)
