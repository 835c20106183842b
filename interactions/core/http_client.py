# interactions/core/http_client.py
import httpx
from .config import Settings, settings as default_settings
from .errors import StorageUploadError

SKYLINK_PREFIX = "sia://"


class BlobStorageClient:
    """Uploads raw bytes to a content-addressed storage portal."""

    def __init__(self, settings: Settings = default_settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = settings.storage_portal_url.rstrip("/")
        self._timeout = httpx.Timeout(
            connect=settings.http_connect_timeout,
            read=settings.http_read_timeout,
            write=settings.http_write_timeout,
            pool=settings.http_pool_timeout,
        )
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
            transport=transport,
        )

    async def upload(self, data: bytes, filename: str = "upload") -> str:
        try:
            resp = await self._client.post("/skynet/skyfile", files={"file": (filename, data)})
            resp.raise_for_status()
            skylink = resp.json().get("skylink")
        except (httpx.HTTPError, ValueError) as e:
            raise StorageUploadError(f"upload to {self.base_url} failed: {e}") from e
        if not skylink:
            raise StorageUploadError(f"portal {self.base_url} returned no skylink")
        return SKYLINK_PREFIX + skylink

    async def aclose(self):
        await self._client.aclose()
