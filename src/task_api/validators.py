"""
Field rules for task requests.

Each field is described by a FieldSchema: where it is read from, whether it may
be omitted, and an ordered tuple of Rule objects. Every failing rule of every
field is reported; lookup rules (which hit the store) only run once the other
rules of the same field have passed.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from bson import ObjectId

from .errors import TaskValidationError
from .models import STATUS_VALUES
from .repositories import Repository
from .schemas import FieldError, TaskCreate, TaskUpdate

MISSING: Any = object()


@dataclass(frozen=True)
class RuleContext:
    """Data available to rules beyond the value itself."""

    repo: Optional[Repository] = None
    task_id: Optional[str] = None


@dataclass(frozen=True)
class Rule:
    message: str
    check: Callable[[Any, RuleContext], bool]
    lookup: bool = False


@dataclass(frozen=True)
class FieldSchema:
    location: str
    rules: Tuple[Rule, ...]
    optional: bool = False


# PUBLIC_INTERFACE
def exists(message: str) -> Rule:
    """Field must be present and not null."""
    return Rule(message, lambda v, ctx: v is not MISSING and v is not None)


# PUBLIC_INTERFACE
def is_string(message: str) -> Rule:
    """Field, when present, must be a string."""
    return Rule(message, lambda v, ctx: v is MISSING or v is None or isinstance(v, str))


# PUBLIC_INTERFACE
def not_empty(message: str) -> Rule:
    """Field must be present, not null and not the empty string."""
    return Rule(message, lambda v, ctx: v is not MISSING and v is not None and v != "")


# PUBLIC_INTERFACE
def min_length(length: int, message: str) -> Rule:
    return Rule(message, lambda v, ctx: isinstance(v, str) and len(v) >= length)


# PUBLIC_INTERFACE
def is_in(options: Tuple[str, ...], message: str) -> Rule:
    return Rule(message, lambda v, ctx: isinstance(v, str) and v in options)


# PUBLIC_INTERFACE
def is_object_id(message: str) -> Rule:
    """Field must be a 24 character hex MongoDB ObjectId."""
    return Rule(
        message,
        lambda v, ctx: isinstance(v, str) and len(v) == 24 and ObjectId.is_valid(v),
    )


# PUBLIC_INTERFACE
def unique_title(message: str) -> Rule:
    """No other task may already use this title."""

    def check(value: Any, ctx: RuleContext) -> bool:
        if ctx.repo is None:
            raise RuntimeError("unique_title requires a repository")
        return not ctx.repo.title_exists(value, exclude_id=ctx.task_id)

    return Rule(message, check, lookup=True)


TITLE_MIN_LENGTH = 5
_STATUS_CHOICES = "status should be one of ({})".format(", ".join(STATUS_VALUES))


def _task_schema(partial: bool) -> Dict[str, FieldSchema]:
    """Body rules for a full task, or for a patch where every field may be left out."""
    title_rules: Tuple[Rule, ...] = (
        is_string("title must be a string"),
        not_empty("title cannot be empty"),
        min_length(TITLE_MIN_LENGTH, f"title length should be a minimum of {TITLE_MIN_LENGTH} characters"),
        unique_title("title already exists"),
    )
    description_rules: Tuple[Rule, ...] = (
        is_string("description must be a string"),
        not_empty("description cannot be empty"),
    )
    return {
        "title": FieldSchema(
            location="body",
            rules=(() if partial else (exists("Title is required"),)) + title_rules,
            optional=partial,
        ),
        "description": FieldSchema(
            location="body",
            rules=(() if partial else (exists("description is required"),)) + description_rules,
            optional=partial,
        ),
        "status": FieldSchema(
            location="body",
            rules=(
                not_empty("status cannot be empty"),
                is_in(STATUS_VALUES, _STATUS_CHOICES),
            ),
            optional=partial,
        ),
    }


TASK_CREATE_SCHEMA = _task_schema(partial=False)
TASK_UPDATE_SCHEMA = _task_schema(partial=True)

ID_SCHEMA: Dict[str, FieldSchema] = {
    "id": FieldSchema(
        location="params",
        rules=(is_object_id("should be valid mongodb id"),),
    ),
}


def _error(name: str, schema: FieldSchema, value: Any, message: str) -> FieldError:
    return FieldError(
        value=None if value is MISSING else value,
        msg=message,
        path=name,
        location=schema.location,
    )


# PUBLIC_INTERFACE
def check_schema(
    schemas: Mapping[str, FieldSchema],
    data: Mapping[str, Any],
    ctx: Optional[RuleContext] = None,
    lookups: bool = True,
) -> Tuple[Dict[str, Any], List[FieldError]]:
    """
    Run every field schema against `data`.

    Returns:
        A tuple of (cleaned values for the fields that are present, errors).
        Unknown keys in `data` are dropped. With `lookups` off, rules that
        query the store are skipped.
    """
    ctx = ctx or RuleContext()
    cleaned: Dict[str, Any] = {}
    errors: List[FieldError] = []

    for name, schema in schemas.items():
        value = data.get(name, MISSING)
        if value is MISSING and schema.optional:
            continue

        failed = False
        for rule in schema.rules:
            if rule.lookup and (failed or not lookups):
                continue
            if not rule.check(value, ctx):
                errors.append(_error(name, schema, value, rule.message))
                failed = True

        if value is not MISSING:
            cleaned[name] = value

    return cleaned, errors


# PUBLIC_INTERFACE
class TaskValidator:
    """
    Validates task requests and turns them into typed payloads.

    Every method raises TaskValidationError carrying all collected errors, so
    the store is never called with invalid data.
    """

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def validate_id(self, task_id: Any) -> str:
        _, errors = check_schema(ID_SCHEMA, {"id": task_id})
        if errors:
            raise TaskValidationError(errors)
        return task_id

    def validate_create(self, payload: Mapping[str, Any]) -> TaskCreate:
        cleaned, errors = check_schema(TASK_CREATE_SCHEMA, payload, RuleContext(repo=self._repo))
        if errors:
            raise TaskValidationError(errors)
        return TaskCreate(**cleaned)

    def validate_update(self, task_id: Any, payload: Mapping[str, Any]) -> TaskUpdate:
        """
        Validate the id and the patch together; id errors come first.
        Title uniqueness ignores the task being updated.
        """
        _, errors = check_schema(ID_SCHEMA, {"id": task_id})
        ctx = RuleContext(repo=self._repo, task_id=task_id)
        cleaned, body_errors = check_schema(TASK_UPDATE_SCHEMA, payload, ctx, lookups=not errors)
        errors.extend(body_errors)
        if errors:
            raise TaskValidationError(errors)
        return TaskUpdate(**cleaned)
