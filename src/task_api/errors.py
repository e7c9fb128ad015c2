from __future__ import annotations

from typing import List

from .schemas import FieldError


class TaskValidationError(Exception):
    """Raised when request data breaks one or more field rules."""

    def __init__(self, errors: List[FieldError]) -> None:
        super().__init__(f"{len(errors)} validation error(s)")
        self.errors = errors


class TaskStoreError(Exception):
    """Raised when the task store backend fails unexpectedly."""


class DuplicateTitleError(TaskStoreError):
    """Raised by a store when a write would give two tasks the same title."""

    def __init__(self, title: str) -> None:
        super().__init__(f"title already exists: {title!r}")
        self.title = title
