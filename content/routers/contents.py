from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status, Path, Body

from content.domain.entities.content import ContentCreate, ContentUpdate
from content.services.content_service import ContentService
from shared.entities.content import ContentOut, ContentPage
from shared.errors import CatalogError
from shared.http_errors import to_http
from shared.wiring import get_content_service

router = APIRouter(prefix="/v1/contents", tags=["contents"])

_EXAMPLE = {
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
    "rank": None,
}


@router.post(
    "",
    summary="Create content",
    description=(
        "Creates a new content item (podcast or documentary).\n\n"
        "**Body shape:** `title` and `content_type` are required; `content_type` must be "
        "`podcast` or `documentary`. Optional fields: `description`, `tags`, `language`, "
        "`duration_seconds`, `published_at`, `url`, `platform_name`.\n\n"
        "Identifier and timestamps are assigned by the server."
    ),
    response_model=ContentOut,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {
            "description": "Content created.",
            "content": {"application/json": {"examples": {"created": {"summary": "Created content", "value": _EXAMPLE}}}},
        },
        422: {"description": "Invalid body (missing title, unknown content_type, negative duration...)."},
    },
)
async def create_content(
    payload: ContentCreate,
    services: ContentService = Depends(get_content_service),
):
    try:
        return await services.create(payload)
    except CatalogError as e:
        raise to_http(e) from e


@router.put(
    "/{content_id}",
    summary="Update content",
    description=(
        "Replaces every field of a live content item. The tag set is replaced, not merged: "
        "tags missing from the body are unlinked."
    ),
    response_model=ContentOut,
    responses={
        200: {"description": "Content updated; full object returned."},
        404: {"description": "Content not found (or deleted)."},
        422: {"description": "Invalid body."},
    },
)
async def update_content(
    content_id: UUID = Path(..., description="Content UUID"),
    payload: ContentUpdate = Body(..., description="Full replacement payload"),
    services: ContentService = Depends(get_content_service),
):
    try:
        return await services.update(content_id, payload)
    except CatalogError as e:
        raise to_http(e) from e


@router.delete(
    "/{content_id}",
    summary="Delete content",
    description="Soft-deletes a content item by ID. Returns `{ \"ok\": true }` on success.",
    responses={
        200: {
            "description": "Deleted.",
            "content": {"application/json": {"examples": {"ok": {"value": {"ok": True}}}}},
        },
        404: {"description": "Content not found or already deleted."},
    },
)
async def delete_content(
    content_id: UUID = Path(..., description="Content UUID"),
    services: ContentService = Depends(get_content_service),
):
    try:
        await services.delete(content_id)
    except CatalogError as e:
        raise to_http(e) from e
    return {"ok": True}


@router.get(
    "",
    summary="List contents",
    description=(
        "Returns live content items, newest first. Pass the returned `next_page_token` as "
        "`page_token` to fetch the following page; an empty token marks the last page."
    ),
    response_model=ContentPage,
    responses={
        200: {
            "description": "One page of content items.",
            "content": {
                "application/json": {
                    "examples": {
                        "list": {
                            "summary": "List example",
                            "value": {"contents": [_EXAMPLE], "next_page_token": ""},
                        }
                    }
                }
            },
        },
        400: {"description": "Page token does not match a live content."},
    },
)
async def list_contents(
    page_size: Optional[int] = Query(None, description="Page size; clamped to 1–100, default 10."),
    page_token: Optional[str] = Query(None, description="Token from a previous page."),
    services: ContentService = Depends(get_content_service),
):
    try:
        return await services.list(page_size, page_token)
    except CatalogError as e:
        raise to_http(e) from e


@router.get(
    "/{content_id}",
    summary="Get content by ID",
    description="Fetches a single live content item by UUID, tags sorted by name.",
    response_model=ContentOut,
    responses={
        200: {
            "description": "Content found.",
            "content": {"application/json": {"examples": {"content": {"summary": "Content example", "value": _EXAMPLE}}}},
        },
        404: {
            "description": "Content not found.",
            "content": {"application/json": {"examples": {"not_found": {"value": {"detail": "not found"}}}}},
        },
    },
)
async def get_content(
    content_id: UUID = Path(..., description="Content UUID"),
    services: ContentService = Depends(get_content_service),
):
    try:
        return await services.get(content_id)
    except CatalogError as e:
        raise to_http(e) from e
