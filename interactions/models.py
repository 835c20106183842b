from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_INT64 = 2**63 - 1
MIN_INT64 = -(2**63)
MAX_LIKES = MAX_INT64 - 1


class ActionEnum(str, Enum):
    LIKE = "LIKE"
    WATCH = "WATCH"


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., alias="_id")
    interests: Dict[str, int] = Field(default_factory=dict)

    @field_validator("interests", mode="before")
    @classmethod
    def _null_interests(cls, v):
        # users written with a nil map carry interests: null
        return {} if v is None else v


class Video(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., alias="_id")
    creator_id: int = 0
    description: str = ""
    series: str = ""
    public: bool = True
    likes: int = Field(0, ge=0)
    tags: List[str] = Field(default_factory=list)
    modifiers: List[str] = Field(default_factory=list)
    storage_key: str = ""

    @field_validator("tags", "modifiers", mode="before")
    @classmethod
    def _null_lists(cls, v):
        return [] if v is None else v

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class LikeEvent(BaseModel):
    video_id: int
    user_id: int


class WatchEvent(BaseModel):
    video_id: int
    user_id: int


class VideoUpload(BaseModel):
    description: str = ""
    series: str = ""
    video: bytes = Field(b"", alias="video_data")

    model_config = ConfigDict(populate_by_name=True)


class EngagementOutcome(BaseModel):
    """What a like/watch actually managed to persist.

    The event row is always recorded when an outcome exists at all; the
    interest merge and the like counter are best effort and may lag.
    """

    action: ActionEnum
    event_recorded: bool = True
    interests_updated: bool = False
    likes_incremented: bool = False
    saturated: bool = False

    @property
    def complete(self) -> bool:
        if not (self.event_recorded and self.interests_updated):
            return False
        if self.action == ActionEnum.LIKE:
            return self.likes_incremented
        return True
