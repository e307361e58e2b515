from __future__ import annotations

import copy
import threading
import unicodedata
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol


@dataclass(frozen=True)
class Collation:
    """String comparison settings for a collection.

    ``strength=1`` compares base letters only: case and diacritics are ignored.
    """

    locale: str = "en"
    strength: int = 1


class DocumentStoreError(RuntimeError):
    """Any failure reported by the underlying document store."""


class UniqueViolation(DocumentStoreError):
    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"Unique constraint violated on '{field}'")
        self.field = field


class DocumentCollection(Protocol):
    async def find_one(self, filter: Mapping[str, Any]) -> Optional[Dict[str, Any]]: ...

    async def find_many(self, filter: Mapping[str, Any]) -> List[Dict[str, Any]]: ...

    async def insert_one(self, document: Mapping[str, Any]) -> Any: ...

    async def update_one(self, filter: Mapping[str, Any], fields: Mapping[str, Any]) -> int: ...

    async def ensure_unique_index(self, field: str) -> None: ...


class DocumentDatabase(Protocol):
    async def connect(self) -> None: ...

    async def list_collection_names(self, filter: Mapping[str, Any] | None = None) -> List[str]: ...

    async def create_collection(self, name: str, *, collation: Collation | None = None) -> None: ...

    async def drop_collection(self, name: str) -> None: ...

    def get_collection(self, name: str) -> DocumentCollection: ...

    async def close(self) -> None: ...


def _fold(value: Any, collation: Collation | None) -> Any:
    if collation is None or not isinstance(value, str):
        return value
    if collation.strength >= 3:
        return value
    decomposed = unicodedata.normalize("NFKD", value)
    if collation.strength == 1:
        decomposed = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return decomposed.casefold()


def matches(document: Mapping[str, Any], filter: Mapping[str, Any], collation: Collation | None = None) -> bool:
    """Evaluate a small subset of the MongoDB query language against a document.

    Supported: field equality, ``{"$ne": value}``, ``{"$or": [...]}`` and
    ``{"$and": [...]}``. Unknown operators raise ``DocumentStoreError``.
    """
    for key, cond in filter.items():
        if key == "$or":
            if not any(matches(document, sub, collation) for sub in cond):
                return False
        elif key == "$and":
            if not all(matches(document, sub, collation) for sub in cond):
                return False
        elif key.startswith("$"):
            raise DocumentStoreError(f"Unsupported query operator: {key}")
        elif isinstance(cond, Mapping):
            for op, expected in cond.items():
                if op == "$ne":
                    if key in document and _fold(document[key], collation) == _fold(expected, collation):
                        return False
                elif op == "$eq":
                    if key not in document or _fold(document[key], collation) != _fold(expected, collation):
                        return False
                else:
                    raise DocumentStoreError(f"Unsupported query operator: {op}")
        else:
            if key not in document or _fold(document[key], collation) != _fold(cond, collation):
                return False
    return True


class InMemoryCollection:
    """Thread-safe in-process collection.

    Honours the collection collation for equality, ``$ne`` and unique indexes, so
    uniqueness behaves like the real store. Documents are copied in and out;
    callers never hold a reference to stored state.
    """

    def __init__(self, name: str, *, collation: Collation | None = None):
        self.name = name
        self.collation = collation
        self._lock = threading.Lock()
        self._docs: List[Dict[str, Any]] = []
        self._unique: List[str] = []

    def _check_unique(self, candidate: Mapping[str, Any], *, skip: Dict[str, Any] | None = None) -> None:
        for field in self._unique:
            if field not in candidate:
                continue
            key = _fold(candidate[field], self.collation)
            for doc in self._docs:
                if doc is skip:
                    continue
                if field in doc and _fold(doc[field], self.collation) == key:
                    raise UniqueViolation(field)

    async def find_one(self, filter: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            for doc in self._docs:
                if matches(doc, filter, self.collation):
                    return copy.deepcopy(doc)
        return None

    async def find_many(self, filter: Mapping[str, Any]) -> List[Dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(d) for d in self._docs if matches(d, filter, self.collation)]

    async def insert_one(self, document: Mapping[str, Any]) -> Any:
        doc = copy.deepcopy(dict(document))
        doc.setdefault("_id", uuid.uuid4().hex)
        with self._lock:
            self._check_unique(doc)
            self._docs.append(doc)
        return doc["_id"]

    async def update_one(self, filter: Mapping[str, Any], fields: Mapping[str, Any]) -> int:
        with self._lock:
            for doc in self._docs:
                if matches(doc, filter, self.collation):
                    merged = {**doc, **copy.deepcopy(dict(fields))}
                    self._check_unique(merged, skip=doc)
                    doc.update(merged)
                    return 1
        return 0

    async def ensure_unique_index(self, field: str) -> None:
        with self._lock:
            if field in self._unique:
                return
            seen = set()
            for doc in self._docs:
                if field not in doc:
                    continue
                key = _fold(doc[field], self.collation)
                if key in seen:
                    raise UniqueViolation(field, f"Existing documents violate unique index on '{field}'")
                seen.add(key)
            self._unique.append(field)


class InMemoryDocumentDatabase:
    """Process-local database used for offline mode and tests.

    Not durable and not shared across processes.
    """

    def __init__(self, name: str = "user_directory"):
        self.name = name
        self._lock = threading.Lock()
        self._collections: Dict[str, InMemoryCollection] = {}
        self.closed = False

    async def connect(self) -> None:
        self.closed = False

    async def list_collection_names(self, filter: Mapping[str, Any] | None = None) -> List[str]:
        with self._lock:
            names = list(self._collections)
        if not filter:
            return names
        return [n for n in names if matches({"name": n}, filter)]

    async def create_collection(self, name: str, *, collation: Collation | None = None) -> None:
        with self._lock:
            if name in self._collections:
                raise DocumentStoreError(f"Collection '{name}' already exists")
            self._collections[name] = InMemoryCollection(name, collation=collation)

    async def drop_collection(self, name: str) -> None:
        with self._lock:
            self._collections.pop(name, None)

    def get_collection(self, name: str) -> InMemoryCollection:
        # Like MongoDB, referencing a missing collection creates it implicitly.
        with self._lock:
            coll = self._collections.get(name)
            if coll is None:
                coll = InMemoryCollection(name)
                self._collections[name] = coll
            return coll

    async def close(self) -> None:
        self.closed = True
