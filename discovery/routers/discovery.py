from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Path
from shared.entities.content import ContentOut, ContentPage
from shared.errors import CatalogError
from shared.http_errors import to_http
from discovery.services.discovery_service import DiscoveryService
from shared.wiring import get_discovery_service

router = APIRouter(
    prefix="/v1/discovery",
    tags=["discovery"],
    responses={
        422: {"description": "Request validation error (Pydantic)."},
    },
)


# ==============================
# Search
# ==============================
@router.get(
    "/search",
    summary="Search contents",
    description=(
        "Fuzzy + exact search over title, description, platform name and tags.\n\n"
        "A content matches when any of those fields contains `q` (case-insensitive) or is "
        "trigram-similar to it. Results are ranked by the best field similarity, newest first "
        "on ties; each item carries its `rank`.\n\n"
        "An empty `q` returns an empty page."
    ),
    response_model=ContentPage,
    responses={
        200: {
            "description": "One page of matches.",
            "content": {
                "application/json": {
                    "examples": {
                        "search_example": {
                            "summary": "Search results",
                            "value": {
                                "contents": [
                                    {
                                        "id": "550e8400-e29b-41d4-a716-446655440000",
                                        "title": "Test Podcast",
                                        "description": "Weekly conversations about software.",
                                        "tags": ["podcast", "technology"],
                                        "language": "en",
                                        "duration_seconds": 3600,
                                        "published_at": "2024-01-15T10:00:00Z",
                                        "content_type": "podcast",
                                        "url": "https://youtu.be/mcrAH6g7CFk",
                                        "platform_name": "YouTube",
                                        "created_at": "2024-01-15T10:00:00Z",
                                        "updated_at": "2024-01-15T10:00:00Z",
                                        "rank": 0.6667,
                                    }
                                ],
                                "next_page_token": "",
                            },
                        }
                    }
                }
            },
        },
        400: {"description": "Page token is not part of this search's results."},
    },
    openapi_extra={
        "x-codeSamples": [
            {
                "lang": "curl",
                "label": "cURL",
                "source": "curl 'https://api.example.com/v1/discovery/search?q=podcast&page_size=5'",
            },
        ]
    },
)
async def search(
    q: Optional[str] = Query(None, description="Search text."),
    page_size: Optional[int] = Query(None, description="Page size; clamped to 1–100, default 10."),
    page_token: Optional[str] = Query(None, description="Token from a previous page of the same search."),
    svc: DiscoveryService = Depends(get_discovery_service),
):
    try:
        return await svc.search(q, page_size, page_token)
    except CatalogError as e:
        raise to_http(e) from e


# ==============================
# Browse
# ==============================
@router.get(
    "/contents",
    summary="List contents (discovery)",
    description="Live content items, newest first, cursor-paginated.",
    response_model=ContentPage,
    responses={400: {"description": "Page token does not match a live content."}},
)
async def browse(
    page_size: Optional[int] = Query(None, description="Page size; clamped to 1–100, default 10."),
    page_token: Optional[str] = Query(None, description="Token from a previous page."),
    svc: DiscoveryService = Depends(get_discovery_service),
):
    try:
        return await svc.list(page_size, page_token)
    except CatalogError as e:
        raise to_http(e) from e


# ==============================
# Get by ID
# ==============================
@router.get(
    "/contents/{content_id}",
    summary="Get content by ID (discovery)",
    description="Fetch a single live content item by UUID.",
    response_model=ContentOut,
    responses={
        404: {
            "description": "Content not found.",
            "content": {"application/json": {"examples": {"not_found": {"value": {"detail": "not found"}}}}},
        },
    },
)
async def get_content(
    content_id: UUID = Path(..., description="Content UUID"),
    svc: DiscoveryService = Depends(get_discovery_service),
):
    try:
        return await svc.content_detail(content_id)
    except CatalogError as e:
        raise to_http(e) from e
