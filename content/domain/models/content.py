from __future__ import annotations
from datetime import datetime
from enum import Enum
from uuid import uuid4, UUID

from sqlalchemy import DateTime, Enum as SAEnum, String, Text, Integer, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base


class ContentType(str, Enum):
    podcast = "podcast"
    documentary = "documentary"

class Content(Base):
    __tablename__ = "contents"
    __table_args__ = (
        Index("ix_contents_live_created", "deleted_at", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str | None] = mapped_column(String(20), nullable=True)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    content_type: Mapped[ContentType] = mapped_column(
        SAEnum(ContentType, name="content_type", native_enum=False, validate_strings=True), nullable=False
    )
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    platform_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # set by the repository from its clock, never by the caller
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
