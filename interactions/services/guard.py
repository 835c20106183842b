import logging

from interactions.core.db import LIKED_VIDEOS, WATCHED_VIDEOS
from interactions.core.errors import StoreFailure
from interactions.services.store import DocumentStore

logger = logging.getLogger("interactions.guard")


class EventGuard:
    """Duplicate check run before a like/watch is recorded.

    A failed lookup answers "already happened": an ambiguous read must never
    let a duplicate event through.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def _exists(self, collection: str, user_id: int, video_id: int) -> bool:
        try:
            n = await self.store.count(collection, {"user_id": user_id, "video_id": video_id}, limit=1)
        except StoreFailure as e:
            logger.warning("[guard] %s lookup failed for user=%s video=%s: %s", collection, user_id, video_id, e)
            return True
        return n >= 1

    async def has_liked(self, user_id: int, video_id: int) -> bool:
        return await self._exists(LIKED_VIDEOS, user_id, video_id)

    async def has_watched(self, user_id: int, video_id: int) -> bool:
        return await self._exists(WATCHED_VIDEOS, user_id, video_id)
