from typing import Optional
from uuid import UUID

from content.ports.read_port import CMSReadPort
from content.services.content_service import ContentService
from shared.entities.content import ContentOut, ContentPage

class CMSInProcessAdapter(CMSReadPort):
    def __init__(self, content_service: ContentService) -> None:
        self._content = content_service

    async def get_content(self, content_id: UUID) -> ContentOut:
        return await self._content.get(content_id)

    async def list_contents(self, page_size: Optional[int] = None, page_token: Optional[str] = None) -> ContentPage:
        return await self._content.list(page_size=page_size, page_token=page_token)
