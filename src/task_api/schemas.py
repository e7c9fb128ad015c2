from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import TaskStatus


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Validated data for creating a new task.

    Instances are built by the validator once every field rule has passed, so
    the store can rely on trimmed, non-empty values and a known status.
    """

    model_config = ConfigDict(
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "status": "pending",
            }
        },
    )

    title: str = Field(..., description="Unique title of the task", min_length=5)
    description: str = Field(..., description="Detailed description", min_length=1)
    status: TaskStatus = Field(..., description="One of: pending, in progress, completed")


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Validated partial update for an existing task.
    Only fields present in `model_fields_set` are written.
    """

    model_config = ConfigDict(
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "title": "Buy groceries and supplies",
                "status": "in progress",
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Unique title of the task", min_length=5)
    description: Optional[str] = Field(default=None, description="Detailed description", min_length=1)
    status: Optional[TaskStatus] = Field(default=None, description="One of: pending, in progress, completed")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task, keyed like the stored document.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "_id": "6717a2f4c2a4e0b1d3f5a901",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "status": "pending",
                "createdAt": "2026-10-19T10:15:30.123000Z",
                "updatedAt": "2026-10-19T10:15:30.123000Z",
            }
        },
    )

    id: str = Field(..., alias="_id", description="ObjectId of the task")
    title: str = Field(..., description="Unique title of the task")
    description: str = Field(..., description="Detailed description")
    status: str = Field(..., description="One of: pending, in progress, completed")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
    updated_at: datetime = Field(..., alias="updatedAt", description="Last update timestamp")


# PUBLIC_INTERFACE
class FieldError(BaseModel):
    """A single broken field rule."""

    type: str = Field(default="field", description="Kind of input the error refers to")
    value: Any = Field(default=None, description="Offending value as received")
    msg: str = Field(..., description="Human readable message")
    path: str = Field(..., description="Field name")
    location: str = Field(..., description="Where the field was read from: body or params")


class ErrorsResponse(BaseModel):
    """Envelope for 400 responses."""

    errors: List[FieldError]


class DetailResponse(BaseModel):
    detail: str


class ServerErrorResponse(BaseModel):
    error: str
