import logging

from interactions.core.db import USERS, VIDEOS
from interactions.core.errors import ConflictError, NotFoundError
from interactions.models import ActionEnum, EngagementOutcome, User, Video
from interactions.services.guard import EventGuard
from interactions.services.interests import LIKE_WEIGHT, WATCH_WEIGHT, InterestAggregator, compute_deltas
from interactions.services.recorder import EngagementRecorder
from interactions.services.store import DocumentStore

logger = logging.getLogger("interactions.engine")


class InteractionEngine:
    """Likes and watches: guard, event row, interest merge, counters.

    Stateless between calls; everything lives in ``store``. Only a failed
    event insert aborts an action, the rest is best effort and shows up in
    the returned ``EngagementOutcome``.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self.guard = EventGuard(store)
        self.aggregator = InterestAggregator(store)
        self.recorder = EngagementRecorder(store)

    async def has_liked(self, user_id: int, video_id: int) -> bool:
        return await self.guard.has_liked(user_id, video_id)

    async def has_watched(self, user_id: int, video_id: int) -> bool:
        return await self.guard.has_watched(user_id, video_id)

    async def get_user(self, user_id: int) -> User:
        doc = await self.store.find_by_id(USERS, user_id)
        if not doc:
            raise NotFoundError("user", user_id)
        return User.model_validate(doc)

    async def get_video(self, video_id: int) -> Video:
        doc = await self.store.find_by_id(VIDEOS, video_id)
        if not doc:
            raise NotFoundError("video", video_id)
        return Video.model_validate(doc)

    async def like(self, user: User, video: Video) -> EngagementOutcome:
        await self.recorder.record_like(user, video)
        outcome = EngagementOutcome(action=ActionEnum.LIKE)

        deltas = compute_deltas(video.tags, LIKE_WEIGHT)
        outcome.interests_updated = await self.aggregator.merge_and_persist(user, deltas)

        outcome.likes_incremented, outcome.saturated = await self.recorder.increment_likes(video)

        if not outcome.complete:
            logger.info("[like] user=%s video=%s partial: %s", user.id, video.id, outcome)
        return outcome

    async def watch(self, user: User, video: Video) -> EngagementOutcome:
        await self.recorder.record_watch(user, video)
        outcome = EngagementOutcome(action=ActionEnum.WATCH)

        deltas = compute_deltas(video.tags, WATCH_WEIGHT)
        outcome.interests_updated = await self.aggregator.merge_and_persist(user, deltas)

        if not outcome.complete:
            logger.info("[watch] user=%s video=%s partial: %s", user.id, video.id, outcome)
        return outcome

    async def like_by_id(self, user_id: int, video_id: int) -> EngagementOutcome:
        if await self.has_liked(user_id, video_id):
            raise ConflictError("User has already liked this post")
        user = await self.get_user(user_id)
        video = await self.get_video(video_id)
        return await self.like(user, video)

    async def watch_by_id(self, user_id: int, video_id: int) -> EngagementOutcome:
        if await self.has_watched(user_id, video_id):
            raise ConflictError("User has already watched this post")
        user = await self.get_user(user_id)
        video = await self.get_video(video_id)
        return await self.watch(user, video)
