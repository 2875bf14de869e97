from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from content.domain.models.tag import Tag, content_tags
from shared.errors import Conflict, StorageError

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class TagRepository:
    """
    Tag registry: name -> stable id. Tags are shared by every content row and
    never deleted. Runs inside the caller's session and transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _UPSERT_DIALECTS[dialect]
        except KeyError:
            raise StorageError(f"tag upsert is not supported on {dialect}") from None

    async def ensure_tag(self, name: str) -> UUID:
        """
        Insert-or-return-existing in one statement. The no-op DO UPDATE makes
        RETURNING yield the id of the row that already holds the name, so
        racing callers all get the same id.
        """
        stmt = self._insert()(Tag).values(id=uuid4(), name=name)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Tag.name],
            set_={"name": stmt.excluded.name},
        ).returning(Tag.id)
        try:
            res = await self.db.execute(stmt)
        except IntegrityError as e:
            raise Conflict(f"could not upsert tag {name!r}") from e
        tag_id = res.scalar_one_or_none()
        if tag_id is None:
            raise Conflict(f"upsert of tag {name!r} returned no row")
        return tag_id

    async def ensure_ids(self, names: Iterable[str]) -> List[UUID]:
        return [await self.ensure_tag(name) for name in names]

    async def link(self, content_id: UUID, tag_ids: List[UUID]) -> None:
        if tag_ids:
            await self.db.execute(
                content_tags.insert(),
                [{"content_id": content_id, "tag_id": tid} for tid in tag_ids],
            )

    async def unlink_all(self, content_id: UUID) -> None:
        await self.db.execute(
            content_tags.delete().where(content_tags.c.content_id == content_id)
        )

    async def names_for(self, content_ids: Iterable[UUID]) -> Dict[UUID, List[str]]:
        """Tag names per content id, each list sorted by name."""
        ids = list(content_ids)
        out: Dict[UUID, List[str]] = defaultdict(list)
        if not ids:
            return out
        res = await self.db.execute(
            select(content_tags.c.content_id, Tag.name)
            .join(Tag, Tag.id == content_tags.c.tag_id)
            .where(content_tags.c.content_id.in_(ids))
            .order_by(Tag.name.asc())
        )
        for content_id, name in res.all():
            out[content_id].append(name)
        return out
