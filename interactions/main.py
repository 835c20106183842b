from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from interactions.core.config import Settings, settings as default_settings
from interactions.core.db import create_client, get_database
from interactions.core.errors import StoreFailure
from interactions.core.http_client import BlobStorageClient
from interactions.services.engine import InteractionEngine
from interactions.services.ingest import SnowflakeGenerator, VideoIngestor
from interactions.services.mongo_store import MotorDocumentStore

logger = logging.getLogger("interactions")


def configure_logging(settings: Settings = default_settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s: %(message)s",
    )


@dataclass
class Services:
    engine: InteractionEngine
    ingestor: VideoIngestor


@asynccontextmanager
async def lifespan(settings: Settings = default_settings) -> AsyncIterator[Services]:
    client = create_client(settings)
    store = MotorDocumentStore(get_database(client, settings))
    blobs = BlobStorageClient(settings)

    try:
        try:
            await store.ensure_indexes()
        except StoreFailure as e:
            logger.warning("[startup] Index setup failed, duplicate guard is check-then-act only: %s", e)
        logger.info("[startup] interactions engine up; mongo db: %s", settings.mongo_db)

        yield Services(
            engine=InteractionEngine(store),
            ingestor=VideoIngestor(store, blobs, SnowflakeGenerator(settings.node_id)),
        )
    finally:
        await blobs.aclose()
        client.close()


async def _check() -> None:
    async with lifespan():
        logger.info("[startup] ready")


if __name__ == "__main__":
    configure_logging()
    asyncio.run(_check())
