"""catalog schema: contents, tags, content_tags + trigram indexes

Revision ID: 3c9a1f2b7d41
Revises:
Create Date: 2024-01-15 10:00:00.000000+00:00

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '3c9a1f2b7d41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# (index name, table, column) for every field the search ranks on
_TRGM_INDEXES = [
    ("ix_contents_title_trgm", "contents", "title"),
    ("ix_contents_description_trgm", "contents", "description"),
    ("ix_contents_platform_name_trgm", "contents", "platform_name"),
    ("ix_tags_name_trgm", "tags", "name"),
]


def upgrade() -> None:
    """
    Create the catalog tables. similarity() and the GIN trigram operator
    class come from pg_trgm, so the extension is created first.
    """
    op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")

    op.create_table(
        "contents",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("language", sa.String(length=20), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "content_type",
            sa.Enum("podcast", "documentary", name="content_type", native_enum=False),
            nullable=False,
        ),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("platform_name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_contents_live_created", "contents", ["deleted_at", "created_at"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.UniqueConstraint("name", name="uq_tags_name"),
    )

    op.create_table(
        "content_tags",
        sa.Column("content_id", sa.Uuid(), sa.ForeignKey("contents.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("tag_id", sa.Uuid(), sa.ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    )

    for name, table, column in _TRGM_INDEXES:
        op.create_index(
            name,
            table,
            [column],
            postgresql_using="gin",
            postgresql_ops={column: "gin_trgm_ops"},
        )


def downgrade() -> None:
    """Drop the catalog tables. The pg_trgm extension is left installed."""
    for name, table, _ in reversed(_TRGM_INDEXES):
        op.drop_index(name, table_name=table)
    op.drop_table("content_tags")
    op.drop_table("tags")
    op.drop_index("ix_contents_live_created", table_name="contents")
    op.drop_table("contents")
