from fastapi import HTTPException

from shared.errors import CatalogError, Conflict, InvalidInput, InvalidPageToken, NotFound, StorageError

_STATUS = {
    NotFound: 404,
    InvalidPageToken: 400,
    InvalidInput: 422,
    Conflict: 409,
    StorageError: 503,
}

_DETAIL = {
    NotFound: "not found",
    InvalidPageToken: "invalid page token",
    Conflict: "conflict",
    StorageError: "storage unavailable",
}


def to_http(e: CatalogError) -> HTTPException:
    """Translate a core error kind into the HTTP error the routers raise."""
    kind = type(e)
    code = _STATUS.get(kind, 500)
    return HTTPException(status_code=code, detail=_DETAIL.get(kind, str(e)))
