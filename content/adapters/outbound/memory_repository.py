from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from content.domain.entities import ContentCreate, ContentUpdate
from shared.abstracts.abstract_repository import AbstractRepository
from shared.entities.content import ContentOut, ContentPage
from shared.errors import InvalidPageToken, NotFound
from shared.pagination import effective_page_size, parse_page_token, split_page
from shared.trigram import SIMILARITY_THRESHOLD, similarity

logger = logging.getLogger(__name__)

_FIELDS = ("title", "description", "language", "duration_seconds", "published_at",
           "content_type", "url", "platform_name")


@dataclass(frozen=True)
class _Row:
    id: UUID
    title: str
    description: Optional[str]
    language: Optional[str]
    duration_seconds: Optional[int]
    published_at: Optional[datetime]
    content_type: str
    url: Optional[str]
    platform_name: Optional[str]
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    tag_ids: Tuple[UUID, ...] = field(default_factory=tuple)


class InMemoryContentRepository(AbstractRepository):
    """
    Process-local fixture store with the same contract as the SQL-backed
    ContentRepository plus the SearchPort. Rows are immutable snapshots, so a
    write either swaps in its final row or leaves the store untouched.
    """

    def __init__(self, threshold: float = SIMILARITY_THRESHOLD, **kwargs):
        super().__init__(**kwargs)
        self.threshold = threshold
        self._rows: Dict[UUID, _Row] = {}
        self._tags: Dict[str, UUID] = {}
        self._tag_lock = asyncio.Lock()

    # ---------- Tag registry ----------

    async def ensure_tag(self, name: str) -> UUID:
        async with self._tag_lock:
            tag_id = self._tags.get(name)
            if tag_id is None:
                tag_id = self._tags[name] = uuid4()
            return tag_id

    @property
    def tag_names(self) -> List[str]:
        return list(self._tags)

    def _names_of(self, row: _Row) -> List[str]:
        by_id = {tid: name for name, tid in self._tags.items()}
        return sorted(by_id[tid] for tid in row.tag_ids)

    def _out(self, row: _Row, rank: Optional[float] = None) -> ContentOut:
        return ContentOut(
            id=row.id,
            **{f: getattr(row, f) for f in _FIELDS},
            tags=self._names_of(row),
            created_at=row.created_at,
            updated_at=row.updated_at,
            rank=rank,
        )

    def _live(self, content_id) -> Optional[_Row]:
        try:
            cid = content_id if isinstance(content_id, UUID) else UUID(str(content_id))
        except ValueError:
            return None
        row = self._rows.get(cid)
        if row is None or row.deleted_at is not None:
            return None
        return row

    # ---------- CRUD ----------

    async def insert(self, payload: ContentCreate) -> ContentOut:
        tag_ids = tuple([await self.ensure_tag(n) for n in payload.tags])
        now = self.clock()
        row = _Row(
            id=self.id_factory(),
            **{f: getattr(payload, f) for f in _FIELDS},
            created_at=now,
            updated_at=now,
            tag_ids=tag_ids,
        )
        self._rows[row.id] = row
        return self._out(row)

    async def get(self, content_id) -> ContentOut:
        row = self._live(content_id)
        if row is None:
            raise NotFound(f"content {content_id} not found")
        return self._out(row)

    async def update(self, content_id, payload: ContentUpdate) -> ContentOut:
        if self._live(content_id) is None:
            raise NotFound(f"content {content_id} not found")
        tag_ids = tuple([await self.ensure_tag(n) for n in payload.tags])
        # re-read: the row may have changed while tags were resolved
        row = self._live(content_id)
        if row is None:
            raise NotFound(f"content {content_id} not found")
        now = self.clock()
        if now <= row.updated_at:
            now = row.updated_at + timedelta(microseconds=1)
        row = replace(row, **{f: getattr(payload, f) for f in _FIELDS}, updated_at=now, tag_ids=tag_ids)
        self._rows[row.id] = row
        return self._out(row)

    async def delete(self, content_id) -> None:
        row = self._live(content_id)
        if row is None:
            raise NotFound(f"content {content_id} not found")
        now = self.clock()
        self._rows[row.id] = replace(row, deleted_at=now, updated_at=now)

    # ---------- Paging ----------

    @staticmethod
    def _after(key, cursor) -> bool:
        # descending order: "after" means strictly smaller key
        return key < cursor

    async def list(self, page_size: Optional[int] = None, page_token: Optional[str] = None) -> ContentPage:
        size = effective_page_size(page_size)
        token = parse_page_token(page_token)
        live = [r for r in self._rows.values() if r.deleted_at is None]
        key = lambda r: (r.created_at, r.id.int)
        if token is not None:
            cursor = self._live(token)
            if cursor is None:
                raise InvalidPageToken(f"page token {page_token} does not match a live content")
            live = [r for r in live if self._after(key(r), key(cursor))]
        live.sort(key=key, reverse=True)
        page, next_token = split_page(live[:size + 1], size)
        return ContentPage(contents=[self._out(r) for r in page], next_page_token=next_token)

    # ---------- SearchPort ----------

    def _rank(self, row: _Row, query: str) -> Optional[float]:
        fields = [row.title, row.description, row.platform_name, " ".join(self._names_of(row))]
        q = query.lower()
        rank = max(similarity(f or "", query) for f in fields)
        if rank > self.threshold or any(q in (f or "").lower() for f in fields):
            return rank
        return None

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

        ranked = []
        for row in self._rows.values():
            if row.deleted_at is not None:
                continue
            rank = self._rank(row, query)
            if rank is not None:
                ranked.append(((rank, row.created_at, row.id.int), row))

        if token is not None:
            cursor = next((k for k, r in ranked if r.id == token), None)
            if cursor is None:
                raise InvalidPageToken(f"page token {page_token} is not part of this search")
            ranked = [(k, r) for k, r in ranked if self._after(k, cursor)]

        ranked.sort(key=lambda kr: kr[0], reverse=True)
        page, next_token = split_page(ranked[:size + 1], size, row_id=lambda kr: kr[1].id)
        logger.debug("memory search %r returned %d rows", query, len(page))
        return ContentPage(
            contents=[self._out(r, rank=k[0]) for k, r in page],
            next_page_token=next_token,
        )
