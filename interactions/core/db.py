from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from .config import Settings, settings as default_settings

VIDEOS = "video_metadata"
USERS = "users"
LIKED_VIDEOS = "liked_videos"
WATCHED_VIDEOS = "watched_videos"

COLLECTIONS = (VIDEOS, USERS, LIKED_VIDEOS, WATCHED_VIDEOS)
EVENT_COLLECTIONS = (LIKED_VIDEOS, WATCHED_VIDEOS)


def create_client(settings: Settings = default_settings) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(
        settings.mongo_uri,
        serverSelectionTimeoutMS=settings.mongo_timeout_ms,
        timeoutMS=settings.mongo_timeout_ms,
    )


def get_database(client: AsyncIOMotorClient, settings: Settings = default_settings) -> AsyncIOMotorDatabase:
    return client[settings.mongo_db]
