import logging
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from interactions.core.db import COLLECTIONS, EVENT_COLLECTIONS
from interactions.core.errors import DuplicateEventError, StoreFailure
from interactions.services.store import Document

logger = logging.getLogger("interactions.store")


class MotorDocumentStore:
    """DocumentStore over a motor database; holds one handle per collection."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collections: Dict[str, AsyncIOMotorCollection] = {name: db[name] for name in COLLECTIONS}

    def _coll(self, collection: str) -> AsyncIOMotorCollection:
        try:
            return self._collections[collection]
        except KeyError:
            raise StoreFailure(f"Unknown collection {collection}")

    async def ensure_indexes(self) -> None:
        for name in EVENT_COLLECTIONS:
            try:
                await self._coll(name).create_index(
                    [("user_id", ASCENDING), ("video_id", ASCENDING)],
                    unique=True,
                    name="user_video_unique",
                )
            except PyMongoError as e:
                raise StoreFailure(f"create_index on {name} failed: {e}") from e
            logger.info("[indexes] %s unique on (user_id, video_id)", name)

    async def find_by_id(self, collection: str, doc_id: Any) -> Optional[Document]:
        try:
            return await self._coll(collection).find_one({"_id": doc_id})
        except PyMongoError as e:
            raise StoreFailure(f"find_one on {collection} failed: {e}") from e

    async def insert_one(self, collection: str, document: Document) -> None:
        try:
            await self._coll(collection).insert_one(dict(document))
        except DuplicateKeyError as e:
            if collection in EVENT_COLLECTIONS:
                raise DuplicateEventError(f"duplicate key on {collection}") from e
            raise StoreFailure(f"duplicate key on {collection}: {e}") from e
        except PyMongoError as e:
            raise StoreFailure(f"insert_one on {collection} failed: {e}") from e

    async def count(self, collection: str, query: Document, limit: Optional[int] = None) -> int:
        kwargs = {"limit": limit} if limit else {}
        try:
            return await self._coll(collection).count_documents(query, **kwargs)
        except PyMongoError as e:
            raise StoreFailure(f"count_documents on {collection} failed: {e}") from e

    async def update_one(self, collection: str, query: Document, update: Document) -> int:
        try:
            res = await self._coll(collection).update_one(query, update)
        except PyMongoError as e:
            raise StoreFailure(f"update_one on {collection} failed: {e}") from e
        return res.matched_count
