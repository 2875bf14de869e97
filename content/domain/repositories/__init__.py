from content.domain.repositories.content_repository import ContentRepository
from content.domain.repositories.tag_repository import TagRepository

__all__ = ["ContentRepository", "TagRepository"]
