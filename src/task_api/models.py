from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TypedDict


# PUBLIC_INTERFACE
class TaskStatus(str, Enum):
    """Allowed values of a task's status field."""

    PENDING = "pending"
    IN_PROGRESS = "in progress"
    COMPLETED = "completed"


STATUS_VALUES = tuple(s.value for s in TaskStatus)


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    Storage-agnostic representation of a task record.

    Fields:
    - id: ObjectId of the stored document as a 24 character hex string
    - title: Unique title, at least 5 characters after trimming
    - description: Required free-form description
    - status: One of TaskStatus values
    - created_at: UTC creation timestamp (datetime)
    - updated_at: UTC last write timestamp (datetime)
    """

    id: str
    title: str
    description: str
    status: str
    created_at: datetime
    updated_at: datetime
