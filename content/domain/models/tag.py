from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, UniqueConstraint, Table, Column, ForeignKey, Uuid
from uuid import UUID, uuid4

from app.core.database.base import Base

content_tags = Table(
    "content_tags",
    Base.metadata,
    Column("content_id", Uuid(as_uuid=True), ForeignKey("contents.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid(as_uuid=True), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

class Tag(Base):
    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("name", name="uq_tags_name"),)

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), default=uuid4, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
