"""Document store collaborators.

Handlers talk to persistence through :class:`DocumentStore`, a small
insert / find-by-id / find(filter, sort, limit) interface. Two
implementations exist:

- :class:`MongoDocumentStore` wraps a Motor database and is what the
  service runs against in production.
- :class:`MemoryDocumentStore` keeps collections in process memory. It is
  used by the test suite and by ``STORE_BACKEND=memory`` for local runs.

Both translate their own failure signals into :class:`ConflictError` and
:class:`PersistenceError`, so callers never see driver-specific errors.
Documents come back with ``_id`` as a string.
"""

import operator
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from services.errors import ConflictError, PersistenceError
from utils.logger import setup_logger

logger = setup_logger(__name__)

SortSpec = Sequence[Tuple[str, int]]


def serialize_document(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Serialize MongoDB document."""
    if not document:
        return None
    document["_id"] = str(document["_id"])
    return document


class DocumentStore(ABC):
    """Persistence interface used by the tracker service."""

    @abstractmethod
    async def insert_one(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a document and return it with its new ``_id``.

        Raises:
            ConflictError: If a unique field already holds the value.
            PersistenceError: On any other store failure.
        """

    @abstractmethod
    async def find_by_id(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        """Return the document with this id, or None.

        An id the store cannot interpret is simply not found.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        filter: Optional[Dict[str, Any]] = None,
        projection: Optional[Iterable[str]] = None,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return matching documents.

        ``filter`` uses MongoDB syntax: plain equality plus the ``$eq``,
        ``$gt``, ``$gte``, ``$lt`` and ``$lte`` comparison operators.
        ``projection`` names the fields to keep (``_id`` is always kept).
        """


class MongoDocumentStore(DocumentStore):
    """DocumentStore backed by a Motor database."""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database

    async def insert_one(self, collection, document):
        document = dict(document)
        try:
            result = await self.database[collection].insert_one(document)
        except DuplicateKeyError as e:
            logger.info(f"Duplicate key on insert into {collection}: {e}")
            raise ConflictError(f"Duplicate value in {collection}") from e
        except PyMongoError as e:
            logger.error(f"Error inserting into {collection}: {e}", exc_info=True)
            raise PersistenceError(f"Insert into {collection} failed") from e

        document["_id"] = result.inserted_id
        return serialize_document(document)

    async def find_by_id(self, collection, document_id):
        try:
            object_id = ObjectId(document_id)
        except (InvalidId, TypeError):
            return None

        try:
            document = await self.database[collection].find_one({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Error reading {collection}/{document_id}: {e}", exc_info=True)
            raise PersistenceError(f"Lookup in {collection} failed") from e

        return serialize_document(document)

    async def find(self, collection, filter=None, projection=None, sort=None, limit=None):
        fields = {name: 1 for name in projection} if projection else None
        try:
            cursor = self.database[collection].find(filter or {}, fields)
            if sort:
                cursor = cursor.sort(list(sort))
            if limit:
                cursor = cursor.limit(limit)
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error querying {collection}: {e}", exc_info=True)
            raise PersistenceError(f"Query on {collection} failed") from e

        return [serialize_document(document) for document in documents]


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "$eq": operator.eq,
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}


def matches(document: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    """Evaluate a MongoDB-style filter against a single document."""
    for field, condition in filter.items():
        value = document.get(field)
        if isinstance(condition, dict):
            for op, operand in condition.items():
                if op not in _OPERATORS:
                    raise PersistenceError(f"Unsupported filter operator {op}")
                if value is None or not _OPERATORS[op](value, operand):
                    return False
        elif value != condition:
            return False
    return True


class MemoryDocumentStore(DocumentStore):
    """DocumentStore keeping collections in a dict.

    Args:
        unique_fields: Per collection, the fields whose values must be unique,
            mirroring unique indexes on the MongoDB side.
    """

    def __init__(self, unique_fields: Optional[Dict[str, Sequence[str]]] = None):
        self.collections: Dict[str, List[Dict[str, Any]]] = {}
        self.unique_fields = dict(unique_fields or {})

    async def insert_one(self, collection, document):
        records = self.collections.setdefault(collection, [])
        for field in self.unique_fields.get(collection, ()):
            if any(record.get(field) == document.get(field) for record in records):
                raise ConflictError(f"Duplicate value in {collection}")

        record = dict(document)
        record["_id"] = str(ObjectId())
        records.append(record)
        return dict(record)

    async def find_by_id(self, collection, document_id):
        for record in self.collections.get(collection, []):
            if record["_id"] == document_id:
                return dict(record)
        return None

    async def find(self, collection, filter=None, projection=None, sort=None, limit=None):
        records = [r for r in self.collections.get(collection, []) if matches(r, filter or {})]

        # Apply keys last-to-first so the first key dominates (stable sort)
        for field, direction in reversed(list(sort or [])):
            records.sort(key=lambda r: r[field], reverse=direction != ASCENDING)

        if limit:
            records = records[:limit]

        if projection:
            keep = set(projection) | {"_id"}
            return [{k: v for k, v in r.items() if k in keep} for r in records]
        return [dict(r) for r in records]
