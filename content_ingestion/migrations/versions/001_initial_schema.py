"""Initial content ingestion schema

Revision ID: 001
Revises:
Create Date: 2026-01-25

Creates the sources, items, item_topics and item_likes tables.
items.source_id and the item_id columns are plain columns, not foreign keys.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # sources table
    op.create_table(
        "sources",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("medium", sa.Text(), nullable=False),
        sa.Column("ingest_url", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("frequency", sa.Text(), nullable=True),
        sa.Column("meta", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", "type", name="uq_sources_name_type"),
    )
    op.create_index("idx_sources_active", "sources", ["active"])
    op.create_index("idx_sources_type", "sources", ["type"])
    op.create_index("idx_sources_medium", "sources", ["medium"])

    # items table
    op.create_table(
        "items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("source_id", sa.Integer(), nullable=False),
        sa.Column("source_type", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("raw_metadata", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source_id", "url", name="uq_items_source_url"),
    )
    op.create_index("idx_items_source_id", "items", ["source_id"])
    op.create_index("idx_items_published_at", "items", ["published_at"])
    op.create_index("idx_items_source_type", "items", ["source_type"])

    # item_topics table
    op.create_table(
        "item_topics",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("topic", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("item_id", "topic", name="uq_item_topics_item_topic"),
    )
    op.create_index("idx_item_topics_topic", "item_topics", ["topic"])

    # item_likes table
    op.create_table(
        "item_likes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "item_id", name="uq_item_likes_user_item"),
        sa.CheckConstraint("score IN (-1, 0, 1)", name="ck_item_likes_score"),
    )
    op.create_index("idx_item_likes_item_id", "item_likes", ["item_id"])


def downgrade() -> None:
    op.drop_index("idx_item_likes_item_id", table_name="item_likes")
    op.drop_table("item_likes")
    op.drop_index("idx_item_topics_topic", table_name="item_topics")
    op.drop_table("item_topics")
    op.drop_index("idx_items_source_type", table_name="items")
    op.drop_index("idx_items_published_at", table_name="items")
    op.drop_index("idx_items_source_id", table_name="items")
    op.drop_table("items")
    op.drop_index("idx_sources_medium", table_name="sources")
    op.drop_index("idx_sources_type", table_name="sources")
    op.drop_index("idx_sources_active", table_name="sources")
    op.drop_table("sources")
