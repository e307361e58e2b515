from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from user_directory.document_store import (
    Collation,
    DocumentCollection,
    DocumentDatabase,
    DocumentStoreError,
    UniqueViolation,
)
from user_directory.errors import DuplicateError, DuplicateField, Ok, Result, StoreError, UserDirectoryError
from user_directory.validators import validate

logger = logging.getLogger("user_directory.store")

USERS_COLLECTION = "users"
USERS_COLLATION = Collation(locale="en", strength=1)
UNIQUE_FIELDS = ("username", "email")


@dataclass(frozen=True)
class User:
    username: str
    first_name: str
    email: str
    is_active: bool

    def to_document(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "firstName": self.first_name,
            "email": self.email,
            "isActive": self.is_active,
        }

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "User":
        try:
            return cls(
                username=doc["username"],
                first_name=doc["firstName"],
                email=doc["email"],
                is_active=doc["isActive"],
            )
        except KeyError as e:
            raise StoreError(f"Stored user document {doc.get('_id')!r} is missing field {e.args[0]!r}") from e


class UserStore:
    """Validated, uniqueness-checked access to the ``users`` collection.

    The store is constructed explicitly around a document database and must be
    initialized before use. Every public operation returns ``Ok(...)`` or
    ``Err(kind, message, ...)``; nothing below this class raises past it.

    Uniqueness is check-then-act: the pre-write query gives field-specific
    errors, and unique indexes on ``username``/``email`` catch concurrent writers
    that slip between the check and the write.
    """

    def __init__(self, database: DocumentDatabase, *, db_name: str = "", url: str = "", reset: bool = False):
        self.database = database
        self.db_name = db_name
        self.url = url
        self.reset = reset
        self._collection: Optional[DocumentCollection] = None
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._collection is not None

    async def initialize(self) -> None:
        async with self._init_lock:
            if self._collection is not None:
                return
            try:
                await self.database.connect()
                existing = await self.database.list_collection_names({"name": USERS_COLLECTION})

                if self.reset and existing:
                    logger.warning("Dropping existing '%s' collection in %s", USERS_COLLECTION, self.db_name)
                    await self.database.drop_collection(USERS_COLLECTION)
                    existing = []

                if not existing:
                    await self.database.create_collection(USERS_COLLECTION, collation=USERS_COLLATION)

                collection = self.database.get_collection(USERS_COLLECTION)
                for field in UNIQUE_FIELDS:
                    await collection.ensure_unique_index(field)
            except DocumentStoreError as e:
                logger.error("User store initialization failed: %s", e)
                raise StoreError(f"Failed to initialize user store: {e}") from e

            self._collection = collection
            logger.info("User store ready (db=%s, reset=%s)", self.db_name, self.reset)

    async def close(self) -> None:
        self._collection = None
        await self.database.close()

    def _require_collection(self) -> DocumentCollection:
        if self._collection is None:
            raise StoreError("User store is not initialized")
        return self._collection

    async def _find_duplicate(
        self,
        collection: DocumentCollection,
        username: str,
        email: str,
        *,
        exclude_username: str | None = None,
    ) -> DuplicateField | None:
        def scoped(clause: Dict[str, Any]) -> Dict[str, Any]:
            if exclude_username is None:
                return clause
            return {"$and": [{"username": {"$ne": exclude_username}}, clause]}

        hit = await collection.find_one(scoped({"$or": [{"username": username}, {"email": email}]}))
        if hit is None:
            return None

        # Narrow down with the store's own collation rather than comparing here.
        username_taken = await collection.find_one(scoped({"username": username})) is not None
        email_taken = await collection.find_one(scoped({"email": email})) is not None
        if username_taken and email_taken:
            return "both"
        if username_taken:
            return "username"
        return "email"

    @staticmethod
    def _unique_violation(e: UniqueViolation) -> DuplicateError:
        if e.field in ("username", "email"):
            return DuplicateError(e.field)
        # Index name the store did not report: either field may be the culprit.
        logger.warning("Unique violation on unrecognised field %r", e.field)
        return DuplicateError("both")

    async def create(self, username: Any, first_name: Any, email: Any, is_active: Any) -> Result[User]:
        try:
            validate(username, first_name, email, is_active)
            collection = self._require_collection()

            dup = await self._find_duplicate(collection, username, email)
            if dup is not None:
                raise DuplicateError(dup)

            user = User(username=username, first_name=first_name, email=email, is_active=is_active)
            try:
                await collection.insert_one(user.to_document())
            except UniqueViolation as e:
                raise self._unique_violation(e) from e
            logger.info("Created user %s", username)
            return Ok(user)
        except UserDirectoryError as e:
            logger.info("Create rejected for %r: %s", username, e.message)
            return e.to_err()
        except DocumentStoreError as e:
            logger.warning("Store failure while creating %r", username, exc_info=True)
            return StoreError(f"Failed to create user: {e}").to_err()

    async def read(self, username: Any) -> Result[User]:
        try:
            collection = self._require_collection()
            doc = await collection.find_one({"username": username})
            if doc is None:
                raise StoreError(f"User '{username}' not found", not_found=True)
            return Ok(User.from_document(doc))
        except UserDirectoryError as e:
            return e.to_err()
        except DocumentStoreError as e:
            logger.warning("Store failure while reading %r", username, exc_info=True)
            return StoreError(f"Failed to read user: {e}").to_err()

    async def read_all(self) -> Result[List[User]]:
        try:
            collection = self._require_collection()
            docs = await collection.find_many({})
            return Ok([User.from_document(d) for d in docs])
        except UserDirectoryError as e:
            return e.to_err()
        except DocumentStoreError as e:
            logger.warning("Store failure while listing users", exc_info=True)
            return StoreError(f"Failed to read users: {e}").to_err()

    async def update(
        self,
        username: Any,
        new_username: Any,
        new_first_name: Any,
        new_email: Any,
        new_is_active: Any,
    ) -> Result[User]:
        try:
            validate(new_username, new_first_name, new_email, new_is_active)
            collection = self._require_collection()

            if await collection.find_one({"username": username}) is None:
                raise StoreError(f"User '{username}' not found to update", not_found=True)

            dup = await self._find_duplicate(collection, new_username, new_email, exclude_username=username)
            if dup is not None:
                raise DuplicateError(dup)

            user = User(username=new_username, first_name=new_first_name, email=new_email, is_active=new_is_active)
            try:
                matched = await collection.update_one({"username": username}, user.to_document())
            except UniqueViolation as e:
                raise self._unique_violation(e) from e
            if matched == 0:
                # Removed between the lookup and the write.
                raise StoreError(f"User '{username}' not found to update", not_found=True)
            logger.info("Updated user %s -> %s", username, new_username)
            return Ok(user)
        except UserDirectoryError as e:
            logger.info("Update rejected for %r: %s", username, e.message)
            return e.to_err()
        except DocumentStoreError as e:
            logger.warning("Store failure while updating %r", username, exc_info=True)
            return StoreError(f"Failed to update user: {e}").to_err()
