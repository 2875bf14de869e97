# discovery/adapters/outbound/search_trigram.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import Float, String, and_, func, literal, literal_column, or_, select
from sqlalchemy.dialects.postgresql import aggregate_order_by
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import GenericFunction

from content.domain.models.content import Content
from content.domain.models.tag import Tag, content_tags
from content.domain.repositories.tag_repository import TagRepository
from content.domain.transformers import to_content_out
from discovery.ports.search_port import SearchPort
from shared.abstracts.abstract_repository import transaction
from shared.entities.content import ContentPage
from shared.errors import InvalidPageToken
from shared.pagination import effective_page_size, parse_page_token, split_page
from shared.trigram import SIMILARITY_THRESHOLD

logger = logging.getLogger(__name__)


class greatest(GenericFunction):
    type = Float()
    inherit_cache = True


@compiles(greatest, "sqlite")
def _greatest_sqlite(element, compiler, **kw):
    # SQLite's multi-argument max() is the scalar greatest()
    return "max(%s)" % compiler.process(element.clauses, **kw)


def _similarity(column, query):
    """pg_trgm similarity; NULL/empty fields score 0."""
    return func.coalesce(func.similarity(func.coalesce(column, ""), query), 0.0)


def _tag_text(dialect: str):
    """All tag names of the outer content row, sorted and joined with spaces."""
    link = content_tags.join(Tag, Tag.id == content_tags.c.tag_id)
    owned = content_tags.c.content_id == Content.id
    if dialect == "postgresql":
        joined = func.string_agg(Tag.name, aggregate_order_by(literal_column("' '"), Tag.name), type_=String)
        return select(joined).select_from(link).where(owned).correlate(Content).scalar_subquery()

    # group_concat has no ORDER BY before SQLite 3.44; it keeps the order of an ordered derived table
    names = (
        select(Tag.name.label("name"))
        .select_from(link)
        .where(owned)
        .order_by(Tag.name)
        .correlate(Content)
        .subquery("names")
    )
    return select(func.aggregate_strings(names.c.name, " ")).scalar_subquery()


class TrigramSearchAdapter(SearchPort):
    """
    SearchPort over the relational store using trigram similarity.

    A content row is a candidate when it is live and any of title,
    description, platform name or tag text either contains the query
    (case-insensitive) or scores above SIMILARITY_THRESHOLD. Its rank is the
    best of the four field similarities; ties fall back to newest first.
    """

    def __init__(self, db: AsyncSession, threshold: float = SIMILARITY_THRESHOLD):
        self.db = db
        self.tags = TagRepository(db)
        self.threshold = threshold

    def _ranked(self, query: str):
        q = literal(query)
        fields = [
            Content.title,
            Content.description,
            Content.platform_name,
            func.coalesce(_tag_text(self.db.get_bind().dialect.name), ""),
        ]
        rank = greatest(*[_similarity(f, q) for f in fields])
        substring = or_(*[func.coalesce(f, "").icontains(query, autoescape=True) for f in fields])
        return (
            select(
                Content.id.label("id"),
                Content.created_at.label("created_at"),
                rank.label("rank"),
            )
            .where(Content.deleted_at.is_(None), or_(substring, rank > self.threshold))
            .cte("ranked")
        )

    async def search(
        self,
        query: str,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
    ) -> ContentPage:
        query = (query or "").strip()
        if not query:
            return ContentPage()
        size = effective_page_size(page_size)
        token = parse_page_token(page_token)

        ranked = self._ranked(query)
        stmt = select(Content, ranked.c.rank).join(ranked, ranked.c.id == Content.id)

        async with transaction(self.db):
            if token is not None:
                # the cursor must belong to this query's candidate set
                hit = await self.db.execute(select(ranked.c.id).where(ranked.c.id == token))
                if hit.first() is None:
                    raise InvalidPageToken(f"page token {page_token} is not part of this search")
                cur_rank = select(ranked.c.rank).where(ranked.c.id == token).scalar_subquery()
                cur_created = select(ranked.c.created_at).where(ranked.c.id == token).scalar_subquery()
                stmt = stmt.where(
                    or_(
                        ranked.c.rank < cur_rank,
                        and_(ranked.c.rank == cur_rank, ranked.c.created_at < cur_created),
                        and_(
                            ranked.c.rank == cur_rank,
                            ranked.c.created_at == cur_created,
                            ranked.c.id < token,
                        ),
                    )
                )
            stmt = stmt.order_by(
                ranked.c.rank.desc(),
                ranked.c.created_at.desc(),
                ranked.c.id.desc(),
            ).limit(size + 1)
            rows = (await self.db.execute(stmt)).all()

            page, next_token = split_page(rows, size, row_id=lambda r: r[0].id)
            tags = await self.tags.names_for(obj.id for obj, _ in page)
            result = ContentPage(
                contents=[to_content_out(obj, tags[obj.id], rank=float(rank)) for obj, rank in page],
                next_page_token=next_token,
            )

        logger.debug("search %r returned %d rows", query, len(result.contents))
        return result
