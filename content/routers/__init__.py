from content.routers.contents import router as contents_router

__all__ = ["contents_router"]
