from content.domain.models.content import Content, ContentType
from content.domain.models.tag import Tag, content_tags

__all__ = ["Content", "ContentType", "Tag", "content_tags"]
