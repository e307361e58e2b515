from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.collation import Collation as MongoCollation
from pymongo.errors import DuplicateKeyError, PyMongoError

from user_directory.document_store import Collation, DocumentStoreError, UniqueViolation

logger = logging.getLogger("user_directory.mongo")


def unique_field_from_error(error: DuplicateKeyError) -> str:
    """Best-effort extraction of the offending field from an E11000 error."""
    details = error.details or {}
    for key in ("keyPattern", "keyValue"):
        fields = details.get(key)
        if isinstance(fields, Mapping) and fields:
            return next(iter(fields))
    return "unknown"


class MongoCollection:
    def __init__(self, collection: Any):
        self._collection = collection

    async def find_one(self, filter: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            return await self._collection.find_one(dict(filter))
        except PyMongoError as e:
            raise DocumentStoreError(str(e)) from e

    async def find_many(self, filter: Mapping[str, Any]) -> List[Dict[str, Any]]:
        try:
            return await self._collection.find(dict(filter)).to_list(None)
        except PyMongoError as e:
            raise DocumentStoreError(str(e)) from e

    async def insert_one(self, document: Mapping[str, Any]) -> Any:
        try:
            result = await self._collection.insert_one(dict(document))
        except DuplicateKeyError as e:
            raise UniqueViolation(unique_field_from_error(e), str(e)) from e
        except PyMongoError as e:
            raise DocumentStoreError(str(e)) from e
        return result.inserted_id

    async def update_one(self, filter: Mapping[str, Any], fields: Mapping[str, Any]) -> int:
        try:
            result = await self._collection.update_one(dict(filter), {"$set": dict(fields)})
        except DuplicateKeyError as e:
            raise UniqueViolation(unique_field_from_error(e), str(e)) from e
        except PyMongoError as e:
            raise DocumentStoreError(str(e)) from e
        return result.matched_count

    async def ensure_unique_index(self, field: str) -> None:
        # No explicit collation: the index inherits the collection default.
        try:
            await self._collection.create_index([(field, ASCENDING)], unique=True, name=f"{field}_unique")
        except PyMongoError as e:
            raise DocumentStoreError(str(e)) from e


class MongoDocumentDatabase:
    """Document database port backed by pymongo's asyncio client."""

    def __init__(self, *, url: str, db_name: str, client: Any = None):
        self.url = url
        self.db_name = db_name
        self._client = client if client is not None else AsyncMongoClient(url)
        self._db = self._client[db_name]

    async def connect(self) -> None:
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            raise DocumentStoreError(f"MongoDB connection failed: {e}") from e
        logger.info("Connected to MongoDB database %s", self.db_name)

    async def list_collection_names(self, filter: Mapping[str, Any] | None = None) -> List[str]:
        try:
            return await self._db.list_collection_names(filter=dict(filter or {}))
        except PyMongoError as e:
            raise DocumentStoreError(str(e)) from e

    async def create_collection(self, name: str, *, collation: Collation | None = None) -> None:
        kwargs: Dict[str, Any] = {}
        if collation is not None:
            kwargs["collation"] = MongoCollation(locale=collation.locale, strength=collation.strength)
        try:
            await self._db.create_collection(name, **kwargs)
        except PyMongoError as e:
            raise DocumentStoreError(str(e)) from e

    async def drop_collection(self, name: str) -> None:
        try:
            await self._db.drop_collection(name)
        except PyMongoError as e:
            raise DocumentStoreError(str(e)) from e

    def get_collection(self, name: str) -> MongoCollection:
        return MongoCollection(self._db[name])

    async def close(self) -> None:
        await self._client.close()
