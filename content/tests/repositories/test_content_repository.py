import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from uuid import uuid4
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from content.domain.entities import ContentCreate, ContentUpdate
from content.domain.models.content import Content
from content.domain.models.tag import Tag, content_tags
from content.domain.repositories import ContentRepository
from shared.errors import InvalidPageToken, NotFound, StorageError


def _create(**overrides) -> ContentCreate:
    data = {"title": "Test Podcast", "content_type": "podcast", "tags": ["technology", "podcast"]}
    data.update(overrides)
    return ContentCreate(**data)


async def _count(db: AsyncSession, table) -> int:
    return (await db.execute(select(func.count()).select_from(table))).scalar_one()


# ==============================================================================
# Create / Get
# ==============================================================================

@pytest.mark.asyncio
async def test_should_assign_id_and_equal_timestamps_when_inserting(content_repo: ContentRepository, clock):
    # WHEN
    out = await content_repo.insert(_create())

    # THEN
    assert out.id is not None
    assert out.created_at == out.updated_at == clock.now   # -> both from one clock reading
    assert out.tags == ["podcast", "technology"]


@pytest.mark.asyncio
async def test_should_use_injected_id_factory_when_inserting(db_session: AsyncSession, clock):
    # GIVEN
    fixed = uuid4()
    repo = ContentRepository(db_session, clock=clock, id_factory=lambda: fixed)

    # WHEN
    out = await repo.insert(_create())

    # THEN
    assert out.id == fixed
    assert (await repo.get(fixed)).id == fixed


@pytest.mark.asyncio
async def test_should_return_same_view_when_getting_after_insert(content_repo: ContentRepository):
    # GIVEN
    created = await content_repo.insert(_create(description="desc", platform_name="YouTube"))

    # WHEN
    got = await content_repo.get(created.id)

    # THEN
    assert got == created


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", ["not-a-uuid", uuid4()])
async def test_should_raise_not_found_when_id_unknown(content_repo: ContentRepository, bad_id):
    with pytest.raises(NotFound):
        await content_repo.get(bad_id)


@pytest.mark.asyncio
async def test_should_keep_published_instant_when_offset_is_not_utc(content_repo: ContentRepository):
    # GIVEN
    published = datetime(2024, 1, 15, 10, 0, tzinfo=timezone(timedelta(hours=2)))

    # WHEN
    created = await content_repo.insert(_create(published_at=published))
    content_repo.db.expunge_all()                          # -> force a read from the table
    got = await content_repo.get(created.id)

    # THEN
    assert got.published_at == published                  # -> same instant
    assert got.published_at == datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)
    assert got == created


# ==============================================================================
# Atomicity
# ==============================================================================

@pytest.mark.asyncio
async def test_should_leave_no_trace_when_tag_linking_fails(
    content_repo: ContentRepository, db_session: AsyncSession, monkeypatch
):
    # GIVEN: linking tags blows up after the content row was flushed
    async def _boom(*args, **kwargs):
        raise OperationalError("INSERT INTO content_tags", {}, Exception("disk I/O error"))
    monkeypatch.setattr(content_repo.tags, "link", _boom)

    # WHEN
    with pytest.raises(StorageError):
        await content_repo.insert(_create())

    # THEN: neither the content row nor its links survive
    assert await _count(db_session, Content) == 0
    assert await _count(db_session, content_tags) == 0


@pytest.mark.asyncio
async def test_should_keep_old_tags_when_update_fails(
    content_repo: ContentRepository, db_session: AsyncSession, monkeypatch
):
    # GIVEN
    created = await content_repo.insert(_create())

    async def _boom(*args, **kwargs):
        raise OperationalError("INSERT INTO content_tags", {}, Exception("connection lost"))
    monkeypatch.setattr(content_repo.tags, "link", _boom)

    # WHEN
    with pytest.raises(StorageError):
        await content_repo.update(created.id, ContentUpdate(title="Changed", content_type="podcast", tags=["x"]))
    monkeypatch.undo()

    # THEN: the unlink and the field changes were rolled back together
    db_session.expunge_all()
    got = await content_repo.get(created.id)
    assert got.title == "Test Podcast"
    assert got.tags == ["podcast", "technology"]


@pytest.mark.asyncio
async def test_should_roll_back_when_cancelled_mid_write(
    content_repo: ContentRepository, db_session: AsyncSession, monkeypatch
):
    # GIVEN: the write is cancelled while tags are being linked
    async def _cancelled(*args, **kwargs):
        raise asyncio.CancelledError()
    monkeypatch.setattr(content_repo.tags, "link", _cancelled)

    # WHEN
    with pytest.raises(asyncio.CancelledError):
        await content_repo.insert(_create())

    # THEN
    assert await _count(db_session, Content) == 0


# ==============================================================================
# Update
# ==============================================================================

@pytest.mark.asyncio
async def test_should_replace_tag_set_when_updating(content_repo: ContentRepository):
    # GIVEN
    created = await content_repo.insert(_create(tags=["a", "b"]))

    # WHEN
    out = await content_repo.update(created.id, ContentUpdate(title="T", content_type="documentary", tags=["c", "a"]))

    # THEN
    assert out.tags == ["a", "c"]
    assert out.content_type == "documentary"
    assert (await content_repo.get(created.id)).tags == ["a", "c"]


@pytest.mark.asyncio
async def test_should_bump_updated_at_when_clock_has_not_advanced(db_session: AsyncSession, frozen_clock):
    # GIVEN: a clock that returns the same instant forever
    repo = ContentRepository(db_session, clock=frozen_clock)
    created = await repo.insert(_create())

    # WHEN
    out = await repo.update(created.id, ContentUpdate(title="Again", content_type="podcast"))

    # THEN
    assert out.updated_at > created.updated_at
    assert out.created_at == created.created_at


@pytest.mark.asyncio
async def test_should_raise_not_found_when_updating_deleted(content_repo: ContentRepository):
    # GIVEN
    created = await content_repo.insert(_create())
    await content_repo.delete(created.id)

    # WHEN / THEN
    with pytest.raises(NotFound):
        await content_repo.update(created.id, ContentUpdate(title="Nope", content_type="podcast"))


# ==============================================================================
# Delete
# ==============================================================================

@pytest.mark.asyncio
async def test_should_keep_row_and_links_when_soft_deleting(
    content_repo: ContentRepository, db_session: AsyncSession
):
    # GIVEN
    created = await content_repo.insert(_create())

    # WHEN
    await content_repo.delete(created.id)

    # THEN
    deleted_at = (
        await db_session.execute(select(Content.deleted_at).where(Content.id == created.id))
    ).scalar_one()
    assert deleted_at is not None
    assert await _count(db_session, content_tags) == 2    # -> links untouched
    with pytest.raises(NotFound):
        await content_repo.get(created.id)


@pytest.mark.asyncio
async def test_should_raise_not_found_when_deleting_twice(content_repo: ContentRepository):
    # GIVEN
    created = await content_repo.insert(_create())
    await content_repo.delete(created.id)

    # WHEN / THEN
    with pytest.raises(NotFound):
        await content_repo.delete(created.id)


# ==============================================================================
# List
# ==============================================================================

@pytest.mark.asyncio
async def test_should_walk_all_pages_without_gaps_or_repeats(content_repo: ContentRepository):
    # GIVEN
    ids = [(await content_repo.insert(_create(title=f"Ep {i}", tags=[]))).id for i in range(7)]

    # WHEN
    seen, token = [], ""
    while True:
        page = await content_repo.list(page_size=3, page_token=token)
        seen.extend(c.id for c in page.contents)
        token = page.next_page_token
        if not token:
            break

    # THEN
    assert seen == list(reversed(ids))                    # -> newest first, each once


@pytest.mark.asyncio
async def test_should_break_created_at_ties_by_id(db_session: AsyncSession, frozen_clock):
    # GIVEN: three rows created at the same instant
    repo = ContentRepository(db_session, clock=frozen_clock)
    ids = [(await repo.insert(_create(title=f"Tie {i}", tags=[]))).id for i in range(3)]

    # WHEN
    first = await repo.list(page_size=2)
    rest = await repo.list(page_size=2, page_token=first.next_page_token)

    # THEN
    listed = [c.id for c in first.contents + rest.contents]
    assert listed == sorted(ids, key=lambda u: u.int, reverse=True)
    assert rest.next_page_token == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("page_size, expected", [(None, 10), (0, 10), (-3, 10), (500, 12)])
async def test_should_clamp_page_size_when_listing(content_repo: ContentRepository, page_size, expected):
    # GIVEN
    for i in range(12):
        await content_repo.insert(_create(title=f"Ep {i}", tags=[]))

    # WHEN
    page = await content_repo.list(page_size=page_size)

    # THEN
    assert len(page.contents) == expected


@pytest.mark.asyncio
async def test_should_raise_invalid_token_when_cursor_row_unknown(content_repo: ContentRepository):
    # GIVEN
    await content_repo.insert(_create())

    # WHEN / THEN
    with pytest.raises(InvalidPageToken):
        await content_repo.list(page_token=str(uuid4()))
    with pytest.raises(InvalidPageToken):
        await content_repo.list(page_token="garbage")


@pytest.mark.asyncio
async def test_should_register_each_tag_once_across_contents(
    content_repo: ContentRepository, db_session: AsyncSession
):
    # WHEN
    await content_repo.insert(_create(tags=["news", "daily"]))
    await content_repo.insert(_create(tags=["daily"]))

    # THEN
    names = (await db_session.execute(select(Tag.name).order_by(Tag.name))).scalars().all()
    assert names == ["daily", "news"]
