from content.domain.entities.content import ContentBase, ContentCreate, ContentUpdate

__all__ = ["ContentBase", "ContentCreate", "ContentUpdate"]
