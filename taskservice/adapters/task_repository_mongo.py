"""MongoDB-backed task repository (production document store)."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from taskservice.app.core.errors import StoreError
from taskservice.app.task_repo_utils import normalize_task_document, pick_task_fields, utcnow
from taskservice.ports.task_repository import ITaskRepository, TaskDocument

logger = logging.getLogger(__name__)

_LOG_EXTRA = {"backend": "mongo"}


def _object_id(task_id: str) -> ObjectId:
    try:
        return ObjectId(task_id)
    except (InvalidId, TypeError) as exc:
        raise StoreError(f"invalid object id {task_id!r}", cause=exc) from exc


def _bson_now() -> datetime:
    # BSON datetimes keep millisecond precision
    now = utcnow()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _normalize(doc: Optional[dict[str, Any]]) -> Optional[TaskDocument]:
    if doc is None:
        return None
    return normalize_task_document(doc)


class MongoTaskRepository(ITaskRepository):
    """Task repository on a single Mongo collection.

    Documents keep the ``createdAt``/``updatedAt`` field names so the
    collection stays readable by other clients of the same database.
    """

    def __init__(self, collection: Collection, client: Optional[MongoClient] = None) -> None:
        self._collection = collection
        self._client = client

    @classmethod
    def from_url(
        cls,
        url: str,
        database: str,
        collection: str = "tasks",
        *,
        timeout_ms: int = 5000,
    ) -> "MongoTaskRepository":
        client: MongoClient = MongoClient(url, serverSelectionTimeoutMS=timeout_ms, tz_aware=True)
        logger.info("Mongo task store db=%s collection=%s", database, collection, extra=_LOG_EXTRA)
        return cls(client[database][collection], client=client)

    def create(self, fields: dict[str, Any]) -> TaskDocument:
        now = _bson_now()
        doc = dict(pick_task_fields(fields), createdAt=now, updatedAt=now)
        try:
            result = self._collection.insert_one(doc)
        except PyMongoError as exc:
            raise StoreError("insert failed", cause=exc) from exc
        doc["_id"] = result.inserted_id
        return normalize_task_document(doc)

    def list(self) -> list[TaskDocument]:
        try:
            docs = list(self._collection.find())
        except PyMongoError as exc:
            raise StoreError("find failed", cause=exc) from exc
        return [normalize_task_document(doc) for doc in docs]

    def get(self, task_id: str) -> Optional[TaskDocument]:
        oid = _object_id(task_id)
        try:
            return _normalize(self._collection.find_one({"_id": oid}))
        except PyMongoError as exc:
            raise StoreError("find_one failed", cause=exc) from exc

    def find_by_title(self, title: str) -> Optional[TaskDocument]:
        try:
            return _normalize(self._collection.find_one({"title": title}))
        except PyMongoError as exc:
            raise StoreError("title lookup failed", cause=exc) from exc

    def replace(self, task_id: str, fields: dict[str, Any]) -> Optional[TaskDocument]:
        oid = _object_id(task_id)
        update = dict(pick_task_fields(fields), updatedAt=_bson_now())
        try:
            doc = self._collection.find_one_and_update(
                {"_id": oid},
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise StoreError("update failed", cause=exc) from exc
        return _normalize(doc)

    def delete(self, task_id: str) -> Optional[TaskDocument]:
        oid = _object_id(task_id)
        try:
            return _normalize(self._collection.find_one_and_delete({"_id": oid}))
        except PyMongoError as exc:
            raise StoreError("delete failed", cause=exc) from exc

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
