"""
Cursor pagination shared by listing and searching.

A page token is the identifier of the last row of the previous page. Queries
fetch ``page_size + 1`` rows; the extra row only signals that another page
exists and is dropped before the page is returned.
"""

from typing import List, Optional, Sequence, Tuple, TypeVar
from uuid import UUID

from shared.errors import InvalidPageToken

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

T = TypeVar("T")


def effective_page_size(page_size: Optional[int]) -> int:
    if page_size is None or page_size <= 0:
        return DEFAULT_PAGE_SIZE
    return min(page_size, MAX_PAGE_SIZE)


def parse_page_token(page_token: Optional[str]) -> Optional[UUID]:
    """Empty token means first page; anything else must be a content id."""
    if not page_token:
        return None
    try:
        return UUID(str(page_token))
    except ValueError:
        raise InvalidPageToken(f"invalid page token: {page_token!r}") from None


def split_page(rows: Sequence[T], page_size: int, row_id=lambda r: r.id) -> Tuple[List[T], str]:
    """Drop the look-ahead row and derive the next token from the new last row."""
    page = list(rows)
    if len(page) > page_size:
        page = page[:page_size]
        return page, str(row_id(page[-1]))
    return page, ""
