from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from .errors import DuplicateTitleError, TaskStoreError
from .models import TaskEntity
from .repositories import Repository, utcnow
from .schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Fields:
    id: str = "_id"
    title: str = "title"
    description: str = "description"
    status: str = "status"
    created_at: str = "createdAt"
    updated_at: str = "updatedAt"


_F = _Fields()


def _object_id(task_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(task_id)
    except (InvalidId, TypeError):
        return None


class MongoRepository(Repository):
    """
    Repository storing each task as a document in a MongoDB collection.

    All pymongo failures surface as TaskStoreError; a unique index on title
    turns racing duplicate writes into DuplicateTitleError.
    """

    def __init__(
        self,
        uri: str,
        database: str,
        collection: str,
        *,
        timeout_ms: int = 5000,
        client: Optional[MongoClient] = None,
    ) -> None:
        if client is None:
            client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms, tz_aware=True)
        self._client = client
        self._collection: Collection = self._client[database][collection]
        self._ensure_indexes()
        logger.info("Task store ready db=%s collection=%s", database, collection)

    def _ensure_indexes(self) -> None:
        try:
            self._collection.create_index([(_F.title, ASCENDING)], unique=True, name="title_unique")
        except PyMongoError as exc:
            logger.warning("Could not ensure unique index on %s: %s", _F.title, exc)

    @staticmethod
    def _doc_to_entity(doc: Mapping[str, Any]) -> TaskEntity:
        try:
            return {
                "id": str(doc[_F.id]),
                "title": doc[_F.title],
                "description": doc[_F.description],
                "status": doc[_F.status],
                "created_at": doc[_F.created_at],
                "updated_at": doc[_F.updated_at],
            }
        except KeyError as exc:
            raise TaskStoreError(f"task document {doc.get(_F.id)} is missing field {exc}") from exc

    def create(self, data: TaskCreate) -> TaskEntity:
        now = utcnow()
        doc = {
            _F.title: data.title,
            _F.description: data.description,
            _F.status: data.status,
            _F.created_at: now,
            _F.updated_at: now,
        }
        try:
            if self._collection.find_one({_F.title: data.title}, projection={_F.id: 1}) is not None:
                raise DuplicateTitleError(data.title)
            result = self._collection.insert_one(doc)
        except DuplicateKeyError as exc:
            raise DuplicateTitleError(data.title) from exc
        except PyMongoError as exc:
            raise TaskStoreError("failed to create task") from exc
        doc[_F.id] = result.inserted_id
        logger.info("Created task id=%s", result.inserted_id)
        return self._doc_to_entity(doc)

    def list(self) -> List[TaskEntity]:
        try:
            return [self._doc_to_entity(d) for d in self._collection.find()]
        except PyMongoError as exc:
            raise TaskStoreError("failed to list tasks") from exc

    def get(self, task_id: str) -> Optional[TaskEntity]:
        oid = _object_id(task_id)
        if oid is None:
            return None
        try:
            doc = self._collection.find_one({_F.id: oid})
        except PyMongoError as exc:
            raise TaskStoreError(f"failed to read task {task_id}") from exc
        return self._doc_to_entity(doc) if doc else None

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        oid = _object_id(task_id)
        if oid is None:
            return None
        changes = data.model_dump(include=data.model_fields_set)
        if not changes:
            return self.get(task_id)
        if "title" in changes and self.title_exists(changes["title"], exclude_id=task_id):
            raise DuplicateTitleError(changes["title"])

        changes[_F.updated_at] = utcnow()
        try:
            doc = self._collection.find_one_and_update(
                {_F.id: oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise DuplicateTitleError(changes.get("title", "")) from exc
        except PyMongoError as exc:
            raise TaskStoreError(f"failed to update task {task_id}") from exc
        if doc is None:
            return None
        logger.info("Updated task id=%s fields=%s", task_id, sorted(data.model_fields_set))
        return self._doc_to_entity(doc)

    def delete(self, task_id: str) -> Optional[TaskEntity]:
        oid = _object_id(task_id)
        if oid is None:
            return None
        try:
            doc = self._collection.find_one_and_delete({_F.id: oid})
        except PyMongoError as exc:
            raise TaskStoreError(f"failed to delete task {task_id}") from exc
        if doc is None:
            return None
        logger.info("Deleted task id=%s", task_id)
        return self._doc_to_entity(doc)

    def title_exists(self, title: str, exclude_id: Optional[str] = None) -> bool:
        query: dict[str, Any] = {_F.title: title}
        if exclude_id is not None:
            oid = _object_id(exclude_id)
            if oid is not None:
                query[_F.id] = {"$ne": oid}
        try:
            return self._collection.find_one(query, projection={_F.id: 1}) is not None
        except PyMongoError as exc:
            raise TaskStoreError("failed to look up task title") from exc

    def close(self) -> None:
        self._client.close()
