import asyncio
import copy
from collections import defaultdict
from typing import Any, Dict, List, Optional, Protocol, Tuple

from interactions.core.db import COLLECTIONS, EVENT_COLLECTIONS
from interactions.core.errors import DuplicateEventError, StoreFailure

Document = Dict[str, Any]


class DocumentStore(Protocol):
    """Async access to the four interaction collections.

    Implementations raise ``DuplicateEventError`` when an insert into an event
    collection violates a unique key and ``StoreFailure`` for anything else
    that goes wrong.
    """

    async def find_by_id(self, collection: str, doc_id: Any) -> Optional[Document]:
        ...

    async def insert_one(self, collection: str, document: Document) -> None:
        ...

    async def count(self, collection: str, query: Document, limit: Optional[int] = None) -> int:
        ...

    async def update_one(self, collection: str, query: Document, update: Document) -> int:
        ...


def _compare(op: str, actual: Any, expected: Any) -> bool:
    if op == "$ne":
        return actual != expected
    if op == "$in":
        return actual in expected
    if actual is None:
        return False
    if op == "$lt":
        return actual < expected
    if op == "$lte":
        return actual <= expected
    if op == "$gt":
        return actual > expected
    if op == "$gte":
        return actual >= expected
    raise StoreFailure(f"Unsupported query operator {op}")


def _matches(doc: Document, query: Document) -> bool:
    for field, cond in query.items():
        actual = doc.get(field)
        if isinstance(cond, dict) and cond and all(k.startswith("$") for k in cond):
            if not all(_compare(op, actual, expected) for op, expected in cond.items()):
                return False
        elif actual != cond:
            return False
    return True


class InMemoryDocumentStore:
    """Dict-backed store with the same semantics as the Mongo one.

    Every collection is unique on ``_id``; event collections are also unique
    on ``(user_id, video_id)``, mirroring the indexes the Mongo store creates.
    """

    def __init__(self, unique_keys: Optional[Dict[str, Tuple[str, ...]]] = None) -> None:
        self._lock = asyncio.Lock()
        self.collections: Dict[str, List[Document]] = defaultdict(list)
        for name in COLLECTIONS:
            self.collections[name] = []
        if unique_keys is None:
            unique_keys = {name: ("user_id", "video_id") for name in EVENT_COLLECTIONS}
        self.unique_keys = unique_keys
        self._next_oid = 1

    def _violates_unique(self, collection: str, document: Document) -> Optional[str]:
        docs = self.collections[collection]
        if "_id" in document and any(d.get("_id") == document["_id"] for d in docs):
            return "_id"
        fields = self.unique_keys.get(collection)
        if fields:
            key = tuple(document.get(f) for f in fields)
            if any(tuple(d.get(f) for f in fields) == key for d in docs):
                return ",".join(fields)
        return None

    async def find_by_id(self, collection: str, doc_id: Any) -> Optional[Document]:
        async with self._lock:
            for d in self.collections[collection]:
                if d.get("_id") == doc_id:
                    return copy.deepcopy(d)
            return None

    async def insert_one(self, collection: str, document: Document) -> None:
        async with self._lock:
            doc = copy.deepcopy(document)
            violated = self._violates_unique(collection, doc)
            if violated and collection in EVENT_COLLECTIONS:
                raise DuplicateEventError(f"duplicate key on {collection} ({violated})")
            if violated:
                raise StoreFailure(f"duplicate key on {collection} ({violated})")
            if "_id" not in doc:
                doc["_id"] = self._next_oid
                self._next_oid += 1
            self.collections[collection].append(doc)

    async def count(self, collection: str, query: Document, limit: Optional[int] = None) -> int:
        async with self._lock:
            n = 0
            for d in self.collections[collection]:
                if _matches(d, query):
                    n += 1
                    if limit and n >= limit:
                        break
            return n

    async def update_one(self, collection: str, query: Document, update: Document) -> int:
        unsupported = set(update) - {"$set", "$inc"}
        if unsupported:
            raise StoreFailure(f"Unsupported update operator {sorted(unsupported)[0]}")
        async with self._lock:
            for d in self.collections[collection]:
                if not _matches(d, query):
                    continue
                for k, v in update.get("$set", {}).items():
                    d[k] = copy.deepcopy(v)
                for k, v in update.get("$inc", {}).items():
                    d[k] = d.get(k, 0) + v
                return 1
            return 0
