import logging
import threading
import time
from typing import List, Optional

from interactions.core.db import VIDEOS
from interactions.core.errors import InvalidUploadError
from interactions.core.http_client import BlobStorageClient
from interactions.models import Video, VideoUpload
from interactions.services.store import DocumentStore

logger = logging.getLogger("interactions.ingest")

MAX_DESCRIPTION_LENGTH = 255

# 2019-12-31T00:00:00Z
SNOWFLAKE_EPOCH_MS = 1577750400000
NODE_BITS = 10
STEP_BITS = 12


def extract_tags(description: str) -> List[str]:
    tags: List[str] = []
    for keyword in description.split(" "):
        if not keyword.startswith("#"):
            continue
        tag = keyword.replace("#", "", 1)
        if tag:
            tags.append(tag)
    return tags


class SnowflakeGenerator:
    """64-bit ids: milliseconds since the epoch, node id, per-ms sequence."""

    def __init__(self, node_id: int, epoch_ms: int = SNOWFLAKE_EPOCH_MS) -> None:
        if not 0 <= node_id < (1 << NODE_BITS):
            raise ValueError(f"node_id must be in [0, {(1 << NODE_BITS) - 1}]")
        self.node_id = node_id
        self.epoch_ms = epoch_ms
        self._lock = threading.Lock()
        self._last_ms = -1
        self._step = 0

    def _now_ms(self) -> int:
        return int(time.time() * 1000)

    def generate(self) -> int:
        with self._lock:
            now = self._now_ms()
            if now < self._last_ms:
                # clock stepped back; stay on the last tick
                now = self._last_ms
            if now == self._last_ms:
                self._step = (self._step + 1) & ((1 << STEP_BITS) - 1)
                if self._step == 0:
                    while now <= self._last_ms:
                        now = self._now_ms()
            else:
                self._step = 0
            self._last_ms = now
            return ((now - self.epoch_ms) << (NODE_BITS + STEP_BITS)) | (self.node_id << STEP_BITS) | self._step


class VideoIngestor:
    def __init__(self, store: DocumentStore, blobs: BlobStorageClient, ids: SnowflakeGenerator) -> None:
        self.store = store
        self.blobs = blobs
        self.ids = ids

    async def ingest(self, creator_id: int, upload: VideoUpload) -> Video:
        if len(upload.description) > MAX_DESCRIPTION_LENGTH:
            raise InvalidUploadError(f"description is too long (max {MAX_DESCRIPTION_LENGTH} characters)")

        tags = extract_tags(upload.description)
        storage_key = await self.blobs.upload(upload.video)

        video = Video(
            id=self.ids.generate(),
            creator_id=creator_id,
            description=upload.description,
            series=upload.series,
            public=True,
            likes=0,
            tags=tags,
            modifiers=[],
            storage_key=storage_key,
        )
        await self.store.insert_one(VIDEOS, video.to_document())
        logger.info("[ingest] video %s by user %s stored at %s", video.id, creator_id, storage_key)
        return video
