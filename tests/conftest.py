import asyncio

import pytest

from interactions.core.db import USERS, VIDEOS
from interactions.models import User, Video
from interactions.services.engine import InteractionEngine
from interactions.services.store import InMemoryDocumentStore


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def engine(store):
    return InteractionEngine(store)


@pytest.fixture
def seed(store):
    """Insert a user or video document and return the model."""

    def _user(user_id, interests=None):
        user = User(id=user_id, interests=interests or {})
        asyncio.run(store.insert_one(USERS, user.model_dump(by_alias=True)))
        return user

    def _video(video_id, tags=(), likes=0):
        video = Video(id=video_id, creator_id=1, tags=list(tags), likes=likes)
        asyncio.run(store.insert_one(VIDEOS, video.to_document()))
        return video

    class Seed:
        user = staticmethod(_user)
        video = staticmethod(_video)

    return Seed
