from pydantic import BaseModel
import os
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseModel):
    mongo_uri: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    mongo_db: str = os.getenv("MONGO_DB", "blue")
    mongo_timeout_ms: int = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

    storage_portal_url: str = os.getenv("STORAGE_PORTAL_URL", "https://siasky.net")
    http_connect_timeout: float = float(os.getenv("HTTP_CONNECT_TIMEOUT", "5"))
    http_read_timeout: float = float(os.getenv("HTTP_READ_TIMEOUT", "60"))
    http_write_timeout: float = float(os.getenv("HTTP_WRITE_TIMEOUT", "60"))
    http_pool_timeout: float = float(os.getenv("HTTP_POOL_TIMEOUT", "5"))

    node_id: int = int(os.getenv("NODE_ID", "1"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
