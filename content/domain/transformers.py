from datetime import datetime, timezone
from typing import Optional, Sequence

from content.domain.models.content import Content
from shared.entities.content import ContentOut


def as_utc(ts: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything stored is UTC
    if ts is None or ts.tzinfo is not None:
        return ts
    return ts.replace(tzinfo=timezone.utc)


def to_content_out(content: Content, tags: Sequence[str], rank: float | None = None) -> ContentOut:
    return ContentOut(
        id=content.id,
        title=content.title,
        description=content.description,
        language=content.language,
        duration_seconds=content.duration_seconds,
        published_at=as_utc(content.published_at),
        content_type=content.content_type.value,
        url=content.url,
        platform_name=content.platform_name,
        tags=list(tags),
        created_at=as_utc(content.created_at),
        updated_at=as_utc(content.updated_at),
        rank=rank,
    )
