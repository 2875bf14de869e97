from discovery.routers.discovery import router as discovery_router

__all__ = ["discovery_router"]
