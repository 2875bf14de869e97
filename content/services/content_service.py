import logging
from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from content.domain.entities.content import ContentCreate, ContentUpdate
from shared.abstracts.abstract_repository import AbstractRepository
from shared.entities.content import ContentOut, ContentPage
from shared.errors import InvalidInput

logger = logging.getLogger(__name__)


def _validated(model, payload):
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise InvalidInput(str(e)) from e


class ContentService:
    """
    Content management operations over a repository variant (SQL-backed or
    in-memory). Every read goes to the store: content and tag sets are never
    cached in-process, so a read never sees a stale tag set.
    """

    def __init__(self, repo: AbstractRepository):
        self.repo = repo

    # ---------- Mutations ----------

    async def create(self, payload) -> ContentOut:
        logger.info("CreateContent started")
        data = _validated(ContentCreate, payload)
        dto = await self.repo.insert(data)
        logger.info("CreateContent completed - id=%s", dto.id)
        return dto

    async def update(self, content_id: UUID, payload) -> ContentOut:
        logger.info("UpdateContent started - id=%s", content_id)
        data = _validated(ContentUpdate, payload)
        dto = await self.repo.update(content_id, data)
        logger.info("UpdateContent completed - id=%s", content_id)
        return dto

    async def delete(self, content_id: UUID) -> None:
        logger.info("DeleteContent started - id=%s", content_id)
        await self.repo.delete(content_id)
        logger.info("DeleteContent completed - id=%s", content_id)

    # ---------- Queries ----------

    async def get(self, content_id: UUID) -> ContentOut:
        return await self.repo.get(content_id)

    async def list(self, page_size: Optional[int] = None, page_token: Optional[str] = None) -> ContentPage:
        page = await self.repo.list(page_size=page_size, page_token=page_token)
        logger.info("ListContents completed - count=%d", len(page.contents))
        return page
