import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update, and_, or_

from content.domain.entities import ContentCreate, ContentUpdate
from content.domain.models.content import Content, ContentType
from content.domain.repositories.tag_repository import TagRepository
from content.domain.transformers import as_utc, to_content_out
from shared.abstracts.abstract_repository import SQLRepository
from shared.entities.content import ContentOut, ContentPage
from shared.errors import InvalidPageToken, NotFound
from shared.pagination import effective_page_size, parse_page_token, split_page

logger = logging.getLogger(__name__)


def _as_uuid(content_id) -> Optional[UUID]:
    if isinstance(content_id, UUID):
        return content_id
    try:
        return UUID(str(content_id))
    except ValueError:
        return None


class ContentRepository(SQLRepository):
    """
    Content rows and their tag links. Every write runs in one transaction:
    a content row is never visible without its final tag set.
    """

    _live = Content.deleted_at.is_(None)

    def __init__(self, db, **kwargs):
        super().__init__(db, **kwargs)
        self.tags = TagRepository(db)

    def _apply(self, obj: Content, payload) -> None:
        obj.title = payload.title
        obj.description = payload.description
        obj.language = payload.language
        obj.duration_seconds = payload.duration_seconds
        obj.published_at = payload.published_at
        obj.content_type = ContentType(payload.content_type)
        obj.url = payload.url
        obj.platform_name = payload.platform_name

    async def _load_live(self, content_id: UUID, for_update: bool = False) -> Optional[Content]:
        stmt = select(Content).where(Content.id == content_id, self._live)
        if for_update:
            stmt = stmt.with_for_update()
        res = await self.db.execute(stmt)
        return res.scalars().first()

    async def insert(self, payload: ContentCreate) -> ContentOut:
        now = self.clock()
        async with self.transaction():
            obj = Content(id=self.id_factory(), created_at=now, updated_at=now)
            self._apply(obj, payload)
            self.db.add(obj)
            await self.db.flush()

            await self.tags.link(obj.id, await self.tags.ensure_ids(payload.tags))
            out = to_content_out(obj, (await self.tags.names_for([obj.id]))[obj.id])

        logger.info("created content %s with %d tags", out.id, len(out.tags))
        return out

    async def get(self, content_id) -> ContentOut:
        cid = _as_uuid(content_id)
        if cid is None:
            raise NotFound(f"content {content_id} not found")
        async with self.transaction():
            obj = await self._load_live(cid)
            if obj is None:
                raise NotFound(f"content {content_id} not found")
            return to_content_out(obj, (await self.tags.names_for([cid]))[cid])

    async def update(self, content_id, payload: ContentUpdate) -> ContentOut:
        cid = _as_uuid(content_id)
        if cid is None:
            raise NotFound(f"content {content_id} not found")
        async with self.transaction():
            obj = await self._load_live(cid, for_update=True)
            if obj is None:
                raise NotFound(f"content {content_id} not found")

            now = self.clock()
            previous = as_utc(obj.updated_at)
            if now <= previous:
                now = previous + timedelta(microseconds=1)

            self._apply(obj, payload)
            obj.updated_at = now

            # links are replaced, never merged
            await self.tags.unlink_all(cid)
            await self.tags.link(cid, await self.tags.ensure_ids(payload.tags))
            await self.db.flush()
            out = to_content_out(obj, (await self.tags.names_for([cid]))[cid])

        logger.info("updated content %s", cid)
        return out

    async def delete(self, content_id) -> None:
        """Soft delete. Deleting an already-deleted row is NotFound, not success."""
        cid = _as_uuid(content_id)
        if cid is None:
            raise NotFound(f"content {content_id} not found")
        now = self.clock()
        async with self.transaction():
            res = await self.db.execute(
                update(Content)
                .where(Content.id == cid, self._live)
                .values(deleted_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if not res.rowcount:
                raise NotFound(f"content {content_id} not found")
        logger.info("soft-deleted content %s", cid)

    async def list(self, page_size: Optional[int] = None, page_token: Optional[str] = None) -> ContentPage:
        """Live rows, newest first, keyset-paginated on (created_at, id)."""
        size = effective_page_size(page_size)
        token = parse_page_token(page_token)

        stmt = select(Content).where(self._live)
        async with self.transaction():
            if token is not None:
                exists = await self.db.execute(select(Content.id).where(Content.id == token, self._live))
                if exists.first() is None:
                    raise InvalidPageToken(f"page token {page_token} does not match a live content")
                cursor = select(Content.created_at).where(Content.id == token).scalar_subquery()
                stmt = stmt.where(
                    or_(
                        Content.created_at < cursor,
                        and_(Content.created_at == cursor, Content.id < token),
                    )
                )
            stmt = stmt.order_by(Content.created_at.desc(), Content.id.desc()).limit(size + 1)
            rows = (await self.db.execute(stmt)).scalars().all()

            page, next_token = split_page(rows, size)
            tags = await self.tags.names_for(obj.id for obj in page)
            return ContentPage(
                contents=[to_content_out(obj, tags[obj.id]) for obj in page],
                next_page_token=next_token,
            )
