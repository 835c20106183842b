import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from interactions.core.db import LIKED_VIDEOS, USERS, VIDEOS, WATCHED_VIDEOS
from interactions.core.errors import ConflictError, DuplicateEventError, NotFoundError, StoreFailure
from interactions.models import MAX_LIKES, ActionEnum


def test_like_then_watch_example(engine, store, seed):
    user = seed.user(1)
    funny_cats = seed.video(100, tags=["cats", "funny"])
    cats = seed.video(200, tags=["cats"])

    outcome = asyncio.run(engine.like(user, funny_cats))
    assert outcome.action == ActionEnum.LIKE
    assert outcome.complete
    assert asyncio.run(store.find_by_id(USERS, 1))["interests"] == {"cats": 11, "funny": 11}
    assert asyncio.run(store.find_by_id(VIDEOS, 100))["likes"] == 1
    assert asyncio.run(store.count(LIKED_VIDEOS, {"user_id": 1, "video_id": 100})) == 1

    outcome = asyncio.run(engine.watch(user, cats))
    assert outcome.complete
    assert asyncio.run(store.find_by_id(USERS, 1))["interests"] == {"cats": 10, "funny": 11}
    assert asyncio.run(store.find_by_id(VIDEOS, 200))["likes"] == 0


def test_has_watched_flips_after_watch(engine, seed):
    user = seed.user(1)
    video = seed.video(2, tags=["x"])

    assert asyncio.run(engine.has_watched(1, 2)) is False
    asyncio.run(engine.watch(user, video))
    assert asyncio.run(engine.has_watched(1, 2)) is True
    assert asyncio.run(engine.has_liked(1, 2)) is False


def test_like_at_saturation_still_records_and_merges(engine, store, seed):
    user = seed.user(1)
    video = seed.video(5, tags=["cats"], likes=MAX_LIKES)

    outcome = asyncio.run(engine.like(user, video))

    assert outcome.event_recorded and outcome.interests_updated
    assert outcome.saturated
    assert not outcome.likes_incremented
    assert not outcome.complete
    assert asyncio.run(store.find_by_id(VIDEOS, 5))["likes"] == MAX_LIKES
    assert asyncio.run(store.count(LIKED_VIDEOS, {"user_id": 1, "video_id": 5})) == 1
    assert asyncio.run(store.find_by_id(USERS, 1))["interests"] == {"cats": 11}


def test_failed_event_insert_aborts_like(engine, store, seed):
    user = seed.user(1)
    video = seed.video(5, tags=["cats"])

    with patch.object(store, "insert_one", AsyncMock(side_effect=StoreFailure("down"))):
        with pytest.raises(StoreFailure):
            asyncio.run(engine.like(user, video))

    assert asyncio.run(store.find_by_id(USERS, 1))["interests"] == {}
    assert asyncio.run(store.find_by_id(VIDEOS, 5))["likes"] == 0


def test_interest_failure_does_not_fail_watch(engine, store, seed):
    user = seed.user(1)
    video = seed.video(5, tags=["cats"])

    with patch.object(engine.aggregator, "merge_and_persist", AsyncMock(return_value=False)):
        outcome = asyncio.run(engine.watch(user, video))

    assert outcome.event_recorded
    assert not outcome.interests_updated
    assert asyncio.run(store.count(WATCHED_VIDEOS, {"user_id": 1, "video_id": 5})) == 1


def test_second_like_hits_unique_key(engine, seed):
    user = seed.user(1)
    video = seed.video(5, tags=["cats"])
    asyncio.run(engine.like(user, video))

    with pytest.raises(DuplicateEventError):
        asyncio.run(engine.like(user, video))
    assert user.interests == {"cats": 11}


def test_like_by_id_rejects_repeat(engine, store, seed):
    seed.user(1)
    seed.video(5, tags=["cats"])

    asyncio.run(engine.like_by_id(1, 5))
    with pytest.raises(ConflictError, match="already liked"):
        asyncio.run(engine.like_by_id(1, 5))
    assert asyncio.run(store.find_by_id(VIDEOS, 5))["likes"] == 1


def test_watch_by_id_rejects_repeat(engine, seed):
    seed.user(1)
    seed.video(5)

    asyncio.run(engine.watch_by_id(1, 5))
    with pytest.raises(ConflictError, match="already watched"):
        asyncio.run(engine.watch_by_id(1, 5))


def test_by_id_unknown_entities(engine, seed):
    seed.user(1)
    seed.video(5)

    with pytest.raises(NotFoundError) as exc:
        asyncio.run(engine.like_by_id(2, 5))
    assert exc.value.kind == "user"

    with pytest.raises(NotFoundError) as exc:
        asyncio.run(engine.watch_by_id(1, 6))
    assert exc.value.kind == "video"


def test_guard_failure_blocks_by_id_actions(engine, store, seed):
    seed.user(1)
    seed.video(5)

    with patch.object(store, "count", AsyncMock(side_effect=StoreFailure("timeout"))):
        with pytest.raises(ConflictError):
            asyncio.run(engine.like_by_id(1, 5))

    assert asyncio.run(store.count(LIKED_VIDEOS, {})) == 0


def test_interests_sum_over_many_events(engine, store, seed):
    user = seed.user(1)
    videos = [
        seed.video(10, tags=["a", "b"]),
        seed.video(11, tags=["a"]),
        seed.video(12, tags=["b", "b"]),
    ]
    for v in videos:
        asyncio.run(engine.like(user, v))
    for v in videos:
        asyncio.run(engine.watch(user, v))

    # likes: a=22 b=33, watches: a=-2 b=-3
    reloaded = asyncio.run(engine.get_user(1))
    assert reloaded.interests == {"a": 20, "b": 30}


def test_interest_failure_does_not_fail_like(engine, store, seed):
    user = seed.user(1)
    video = seed.video(5, tags=["cats"])

    with patch.object(engine.aggregator, "merge_and_persist", AsyncMock(return_value=False)):
        outcome = asyncio.run(engine.like(user, video))

    assert outcome.event_recorded
    assert not outcome.interests_updated
    assert outcome.likes_incremented
    assert not outcome.complete
    assert asyncio.run(store.find_by_id(VIDEOS, 5))["likes"] == 1
    assert asyncio.run(store.count(LIKED_VIDEOS, {"user_id": 1, "video_id": 5})) == 1


def test_counter_failure_does_not_fail_like(engine, store, seed):
    user = seed.user(1)
    video = seed.video(5, tags=["cats"])

    with patch.object(engine.recorder, "increment_likes", AsyncMock(return_value=(False, False))):
        outcome = asyncio.run(engine.like(user, video))

    assert outcome.interests_updated
    assert not outcome.likes_incremented
    assert not outcome.saturated
    assert asyncio.run(store.find_by_id(USERS, 1))["interests"] == {"cats": 11}


def test_null_fields_from_older_documents(engine, store):
    asyncio.run(store.insert_one(USERS, {"_id": 1, "interests": None}))
    asyncio.run(store.insert_one(VIDEOS, {"_id": 5, "likes": 0, "tags": ["cats"], "modifiers": None}))

    outcome = asyncio.run(engine.like_by_id(1, 5))

    assert outcome.complete
    assert asyncio.run(store.find_by_id(USERS, 1))["interests"] == {"cats": 11}
