from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from functools import lru_cache
from threading import RLock
from typing import List, Optional

from bson import ObjectId

from .errors import DuplicateTitleError
from .models import TaskEntity
from .schemas import TaskCreate, TaskUpdate
from .settings import get_settings

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current UTC time at the millisecond precision BSON dates store."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskEntity:
        """Persist a new task and return it. Raise DuplicateTitleError if the title is taken."""

    @abstractmethod
    def list(self) -> List[TaskEntity]:
        """Return every stored task in insertion order."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskEntity]:
        """Return a task by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        """
        Apply the fields set on `data` to an existing task.
        Return the updated task, or None if not found.
        Raise DuplicateTitleError if the new title belongs to another task.
        """

    @abstractmethod
    def delete(self, task_id: str) -> Optional[TaskEntity]:
        """Delete a task by id. Return the removed task, or None if not found."""

    @abstractmethod
    def title_exists(self, title: str, exclude_id: Optional[str] = None) -> bool:
        """Return True if a task other than `exclude_id` already uses `title`."""

    def close(self) -> None:
        """Release backend resources. No-op by default."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and local runs.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[str, TaskEntity] = {}

    def _title_taken(self, title: str, exclude_id: Optional[str]) -> bool:
        return any(
            t["title"] == title and t["id"] != exclude_id for t in self._items.values()
        )

    def create(self, data: TaskCreate) -> TaskEntity:
        now = utcnow()
        entity: TaskEntity = {
            "id": str(ObjectId()),
            "title": data.title,
            "description": data.description,
            "status": data.status,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            if self._title_taken(data.title, None):
                raise DuplicateTitleError(data.title)
            self._items[entity["id"]] = entity
        logger.debug("Created task id=%s", entity["id"])
        return entity.copy()

    def list(self) -> List[TaskEntity]:
        with self._lock:
            return [t.copy() for t in self._items.values()]

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        changes = data.model_dump(include=data.model_fields_set)
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None
            if not changes:
                return existing.copy()
            if "title" in changes and self._title_taken(changes["title"], task_id):
                raise DuplicateTitleError(changes["title"])

            updated = existing.copy()
            updated.update(changes)  # type: ignore[typeddict-item]
            updated["updated_at"] = utcnow()
            self._items[task_id] = updated
            return updated.copy()

    def delete(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            return self._items.pop(task_id, None)

    def title_exists(self, title: str, exclude_id: Optional[str] = None) -> bool:
        with self._lock:
            return self._title_taken(title, exclude_id)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured by settings.
    - mongodb: MongoRepository (pymongo)
    - memory: InMemoryRepository
    """
    settings = get_settings()
    if settings.persistence_backend == "memory":
        logger.info("Using in-memory task store")
        return InMemoryRepository()

    from .db import MongoRepository

    return MongoRepository(
        settings.mongodb_uri,
        settings.mongodb_database,
        settings.mongodb_collection,
        timeout_ms=settings.mongodb_timeout_ms,
    )
