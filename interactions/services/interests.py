import logging
from typing import Dict, Iterable

from interactions.core.db import USERS
from interactions.core.errors import StoreFailure
from interactions.models import MAX_INT64, MIN_INT64, User
from interactions.services.store import DocumentStore

logger = logging.getLogger("interactions.interests")

LIKE_WEIGHT = 11
WATCH_WEIGHT = -1


def compute_deltas(tags: Iterable[str], weight: int) -> Dict[str, int]:
    """Every occurrence of a tag contributes ``weight``; repeats add up."""
    deltas: Dict[str, int] = {}
    for tag in tags:
        deltas[tag] = deltas.get(tag, 0) + weight
    return deltas


def _clamp(value: int) -> int:
    return max(MIN_INT64, min(MAX_INT64, value))


class InterestAggregator:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def merge_and_persist(self, user: User, deltas: Dict[str, int]) -> bool:
        """Add ``deltas`` to the user's scores and write the whole map back.

        Returns False if the write did not land; the in-memory user keeps the
        merged scores either way.
        """
        for tag, delta in deltas.items():
            user.interests[tag] = _clamp(user.interests.get(tag, 0) + delta)

        try:
            matched = await self.store.update_one(
                USERS,
                {"_id": user.id},
                {"$set": {"interests": dict(user.interests)}},
            )
        except StoreFailure as e:
            logger.warning("[interests] update for user %s failed: %s", user.id, e)
            return False

        if not matched:
            logger.warning("[interests] user %s vanished before interests were saved", user.id)
            return False
        return True
