import logging
from typing import Optional
from uuid import UUID

from shared.entities.content import ContentOut, ContentPage
from discovery.ports.search_port import SearchPort
from content.ports.read_port import CMSReadPort  # CMS-owned query port

logger = logging.getLogger(__name__)


class DiscoveryService:
    """
    Read-model service that:
      - ranks and pages matches via SearchPort
      - reads single items and plain listings via CMSReadPort
    """

    def __init__(self, search: SearchPort, cms_read: CMSReadPort):
        self.search_port = search
        self.cms_read = cms_read

    async def search(
        self,
        q: Optional[str],
        page_size: Optional[int],
        page_token: Optional[str],
    ) -> ContentPage:
        logger.info("SearchContents started - query=%r", q)
        page = await self.search_port.search(q or "", page_size, page_token)
        logger.info("SearchContents completed - count=%d", len(page.contents))
        return page

    async def list(self, page_size: Optional[int], page_token: Optional[str]) -> ContentPage:
        return await self.cms_read.list_contents(page_size=page_size, page_token=page_token)

    async def content_detail(self, content_id: UUID) -> ContentOut:
        return await self.cms_read.get_content(content_id)
