from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.db import get_session
from content.domain.repositories import ContentRepository
from shared.abstracts.abstract_repository import AbstractRepository

# Discovery search port + adapter
from discovery.ports.search_port import SearchPort
from discovery.adapters.outbound.search_trigram import TrigramSearchAdapter

# CMS read port + adapter
from content.ports.read_port import CMSReadPort
from content.adapters.read_inprocess import CMSInProcessAdapter

# CMS service
from content.services.content_service import ContentService

# Discovery service
from discovery.services.discovery_service import DiscoveryService


def get_content_repository(db: AsyncSession = Depends(get_session)) -> AbstractRepository:
    return ContentRepository(db)

def get_search_service(db: AsyncSession = Depends(get_session)) -> SearchPort:
    return TrigramSearchAdapter(db)

def get_content_service(repo: AbstractRepository = Depends(get_content_repository)) -> ContentService:
    return ContentService(repo)

def get_cms_read_port(
    content_svc: ContentService = Depends(get_content_service),
) -> CMSReadPort:
    """In-process adapter; discovery reads share the request's DB session with the CMS."""
    return CMSInProcessAdapter(content_service=content_svc)


def get_discovery_service(
    search: SearchPort = Depends(get_search_service),
    cms_read: CMSReadPort = Depends(get_cms_read_port),
) -> DiscoveryService:
    return DiscoveryService(search=search, cms_read=cms_read)
