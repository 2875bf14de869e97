from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from content.domain.entities.content import ContentBase


class ContentOut(ContentBase):
    id: UUID
    created_at: datetime
    updated_at: datetime
    # similarity rank, only set on search results
    rank: Optional[float] = None

    class Config:
        from_attributes = True


class ContentPage(BaseModel):
    contents: List[ContentOut] = []
    next_page_token: str = ""
