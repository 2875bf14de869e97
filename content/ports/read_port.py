from typing import Protocol, Optional
from uuid import UUID

from shared.entities.content import ContentOut, ContentPage


class CMSReadPort(Protocol):
    """CMS-owned query port consumed by the discovery read model."""

    async def get_content(self, content_id: UUID) -> ContentOut: ...

    async def list_contents(self, page_size: Optional[int] = None, page_token: Optional[str] = None) -> ContentPage: ...
