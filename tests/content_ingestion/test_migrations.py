"""Tests for the initial schema migration."""

import importlib
from datetime import datetime, timezone

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from content_ingestion import db_engine
from content_ingestion.database import add_item_topic, get_or_create_source, set_item_like, upsert_item
from content_ingestion.models import Item
from content_ingestion.orm_models import Base

initial_schema = importlib.import_module("content_ingestion.migrations.versions.001_initial_schema")

TABLES = {"sources", "items", "item_topics", "item_likes"}


def run_migration(engine, step):
    with engine.begin() as conn:
        ctx = MigrationContext.configure(conn)
        with Operations.context(ctx):
            step()


@pytest.fixture
def migrated_engine():
    engine = create_engine("sqlite:///:memory:")
    run_migration(engine, initial_schema.upgrade)
    yield engine
    db_engine.reset_engine()


class TestInitialSchema:
    """Tests for the 001 migration."""

    def test_revision_chain(self):
        assert initial_schema.revision == "001"
        assert initial_schema.down_revision is None

    def test_upgrade_creates_tables(self, migrated_engine):
        assert TABLES <= set(inspect(migrated_engine).get_table_names())

    def test_columns_match_orm(self, migrated_engine):
        inspector = inspect(migrated_engine)
        for table in Base.metadata.sorted_tables:
            migrated = {col["name"] for col in inspector.get_columns(table.name)}
            assert migrated == {col.name for col in table.columns}, table.name

    def test_unique_constraints(self, migrated_engine):
        inspector = inspect(migrated_engine)
        items_uniques = {tuple(u["column_names"]) for u in inspector.get_unique_constraints("items")}
        assert ("source_id", "url") in items_uniques
        topic_uniques = {tuple(u["column_names"]) for u in inspector.get_unique_constraints("item_topics")}
        assert ("item_id", "topic") in topic_uniques

    def test_store_works_on_migrated_schema(self, migrated_engine):
        db_engine.set_engine(migrated_engine)
        source = get_or_create_source("Blog", "rss", "blog", ingest_url="https://example.com/feed")
        item_id = upsert_item(Item(
            source_id=source.id,
            source_type="blog",
            title="Post",
            url="https://example.com/post",
            published_at=datetime(2024, 1, 20, tzinfo=timezone.utc),
        ))

        assert add_item_topic(item_id, "LLM") is True
        assert add_item_topic(item_id, "LLM") is False
        set_item_like("user-1", item_id, 1)

    def test_downgrade_drops_tables(self, migrated_engine):
        run_migration(migrated_engine, initial_schema.downgrade)
        assert not TABLES & set(inspect(migrated_engine).get_table_names())
