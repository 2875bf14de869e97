from datetime import datetime, timezone
from typing import List, Literal

from pydantic import BaseModel, Field, constr, field_validator

ContentType = Literal["podcast", "documentary"]

TagName = constr(max_length=100)

class ContentBase(BaseModel):
    title: constr(strip_whitespace=True, min_length=1, max_length=255)
    description: str | None = None
    language: constr(max_length=20) | None = None
    duration_seconds: int | None = Field(default=None, ge=0)
    published_at: datetime | None = None
    # no default: an absent or unknown type is rejected, never stored as podcast
    content_type: ContentType
    url: str | None = None
    platform_name: constr(max_length=255) | None = None
    tags: List[TagName] = []

    @field_validator("published_at")
    @classmethod
    def _published_in_utc(cls, ts: datetime | None) -> datetime | None:
        # stored without offset on some backends, so keep it in UTC
        if ts is None:
            return ts
        if ts.tzinfo is None:
            return ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(timezone.utc)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, tags: List[str]) -> List[str]:
        seen: list[str] = []
        for name in tags:
            name = name.strip()
            if name and name not in seen:
                seen.append(name)
        return seen

class ContentCreate(ContentBase):
    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Test Podcast",
                "description": "Weekly conversations about software.",
                "tags": ["technology", "podcast"],
                "language": "en",
                "duration_seconds": 3600,
                "published_at": "2024-01-15T10:00:00Z",
                "content_type": "podcast",
                "url": "https://youtu.be/mcrAH6g7CFk",
                "platform_name": "YouTube",
            }
        }
    }

class ContentUpdate(ContentBase):
    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Test Podcast (Remastered)",
                "description": "An updated cut of the first episode.",
                "tags": ["technology"],
                "language": "en",
                "duration_seconds": 3720,
                "published_at": "2024-01-15T10:00:00Z",
                "content_type": "podcast",
                "url": "https://youtu.be/mcrAH6g7CFk",
                "platform_name": "YouTube",
            }
        }
    }
