import logging
from typing import Tuple

from interactions.core.db import LIKED_VIDEOS, VIDEOS, WATCHED_VIDEOS
from interactions.core.errors import StoreFailure
from interactions.models import MAX_LIKES, LikeEvent, User, Video, WatchEvent
from interactions.services.store import DocumentStore

logger = logging.getLogger("interactions.recorder")


class EngagementRecorder:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def record_like(self, user: User, video: Video) -> None:
        event = LikeEvent(video_id=video.id, user_id=user.id)
        await self.store.insert_one(LIKED_VIDEOS, event.model_dump())

    async def record_watch(self, user: User, video: Video) -> None:
        event = WatchEvent(video_id=video.id, user_id=user.id)
        await self.store.insert_one(WATCHED_VIDEOS, event.model_dump())

    async def increment_likes(self, video: Video) -> Tuple[bool, bool]:
        """Bump the like counter. Returns ``(incremented, saturated)``."""
        if video.likes >= MAX_LIKES:
            logger.warning("[likes] max likes on video %s", video.id)
            return False, True

        try:
            matched = await self.store.update_one(
                VIDEOS,
                {"_id": video.id, "likes": {"$lt": MAX_LIKES}},
                {"$inc": {"likes": 1}},
            )
        except StoreFailure as e:
            logger.warning("[likes] increment on video %s failed: %s", video.id, e)
            return False, False

        if not matched:
            # stored counter reached the ceiling after the video was loaded
            logger.warning("[likes] video %s not incremented (missing or saturated)", video.id)
            return False, False

        video.likes += 1
        return True, False
