"""
Error kinds surfaced by the catalog core.

Services raise these; routers translate them to HTTP statuses.
"""


class CatalogError(Exception):
    """Base exception for catalog operations."""

    pass


class InvalidInput(CatalogError):
    """Malformed or missing required field, rejected before any storage call."""

    pass


class NotFound(CatalogError):
    """Target record does not exist or is soft-deleted."""

    pass


class InvalidPageToken(CatalogError):
    """Cursor does not resolve to a live row of the current result set."""

    pass


class Conflict(CatalogError):
    """Concurrent tag creation could not be resolved by the atomic upsert."""

    pass


class StorageError(CatalogError):
    """The underlying store failed (connection loss, constraint, abort)."""

    pass
