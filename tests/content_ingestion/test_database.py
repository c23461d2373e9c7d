"""Tests for content ingestion database operations."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine

from content_ingestion import db_engine
from content_ingestion.database import (
    add_item_topic,
    count_items,
    get_active_sources,
    get_item_by_id,
    get_item_by_url,
    get_item_likes,
    get_item_topics,
    get_items_by_source,
    get_latest_items,
    get_or_create_source,
    get_source_by_id,
    init_db,
    set_item_like,
    set_source_active,
    upsert_item,
)
from content_ingestion.exceptions import InvalidScoreError
from content_ingestion.models import Item


@pytest.fixture
def temp_db():
    """Create an in-memory database for testing."""
    engine = create_engine("sqlite:///:memory:")
    db_engine.set_engine(engine)
    init_db()
    yield engine
    db_engine.reset_engine()


@pytest.fixture
def source(temp_db):
    return get_or_create_source(
        name="Example Blog",
        source_type="rss",
        medium="blog",
        ingest_url="https://blog.example.com/feed",
    )


def make_item(source_id, url="https://example.com/post", title="A Post", **kwargs):
    defaults = dict(
        source_id=source_id,
        source_type="blog",
        title=title,
        url=url,
        summary="Summary",
        published_at=datetime(2024, 1, 20, 12, 0, tzinfo=timezone.utc),
        raw_metadata={"feed_id": url},
    )
    defaults.update(kwargs)
    return Item(**defaults)


class TestSources:
    """Tests for source operations."""

    def test_create_source(self, temp_db):
        source = get_or_create_source(
            name="arxiv-qfin",
            source_type="arxiv",
            medium="paper",
            ingest_url="http://export.arxiv.org/api/query",
            meta={"query": "cat:q-fin.GN"},
            frequency="daily",
        )

        assert source.id is not None
        assert source.active is True
        assert source.meta == {"query": "cat:q-fin.GN"}
        assert source.frequency == "daily"
        assert source.created_at.tzinfo is not None

        fetched = get_source_by_id(source.id)
        assert fetched == source

    def test_get_or_create_is_idempotent(self, temp_db):
        first = get_or_create_source("Blog", "rss", "blog", ingest_url="https://a.example.com/feed")
        second = get_or_create_source("Blog", "rss", "newsletter", ingest_url="https://b.example.com/feed")

        assert first.id == second.id
        assert second.medium == "newsletter"
        assert second.ingest_url == "https://b.example.com/feed"
        assert second.created_at == first.created_at
        assert len(get_active_sources()) == 1

    def test_same_name_different_type(self, temp_db):
        a = get_or_create_source("Dual", "rss", "blog")
        b = get_or_create_source("Dual", "manual", "blog")
        assert a.id != b.id

    def test_reseed_keeps_inactive_flag(self, temp_db):
        source = get_or_create_source("Blog", "rss", "blog")
        set_source_active(source.id, False)

        again = get_or_create_source("Blog", "rss", "blog")
        assert again.active is False

    def test_get_source_by_id_missing(self, temp_db):
        assert get_source_by_id(999) is None

    def test_active_sources_ordered_by_name(self, temp_db):
        get_or_create_source("zeta", "rss", "blog")
        get_or_create_source("Alpha", "rss", "blog")
        get_or_create_source("beta", "arxiv", "paper")
        inactive = get_or_create_source("gamma", "rss", "blog")
        set_source_active(inactive.id, False)

        names = [s.name for s in get_active_sources()]
        assert names == ["Alpha", "beta", "zeta"]

    def test_empty_meta_round_trips_as_dict(self, temp_db):
        source = get_or_create_source("NoMeta", "rss", "blog")
        assert source.meta == {}


class TestItems:
    """Tests for item operations."""

    def test_upsert_new_item(self, source):
        item = make_item(source.id)
        stored_id = upsert_item(item)

        assert stored_id == item.id
        fetched = get_item_by_id(stored_id)
        assert fetched.title == "A Post"
        assert fetched.url == "https://example.com/post"
        assert fetched.published_at == datetime(2024, 1, 20, 12, 0, tzinfo=timezone.utc)
        assert fetched.raw_metadata == {"feed_id": "https://example.com/post"}
        assert fetched.created_at is not None

    def test_upsert_same_url_updates_in_place(self, source):
        first = make_item(source.id, title="Old title", summary="Old")
        first_id = upsert_item(first)

        second = make_item(source.id, title="New title", summary="New", body="Full text")
        second_id = upsert_item(second)

        assert second_id == first_id
        assert second.id != first.id
        assert count_items() == 1

        stored = get_item_by_url(source.id, "https://example.com/post")
        assert stored.id == first_id
        assert stored.title == "New title"
        assert stored.summary == "New"
        assert stored.body == "Full text"
        assert stored.updated_at >= stored.created_at

    def test_upsert_twice_is_idempotent(self, source):
        item = make_item(source.id)
        upsert_item(item)
        upsert_item(item)

        assert count_items() == 1
        assert get_item_by_url(source.id, item.url).title == item.title

    def test_same_url_different_sources(self, source):
        other = get_or_create_source("Other Blog", "rss", "blog")

        upsert_item(make_item(source.id))
        upsert_item(make_item(other.id))

        assert count_items() == 2

    def test_published_at_normalized_to_utc(self, source):
        tz = timezone(timedelta(hours=2))
        item = make_item(source.id, published_at=datetime(2024, 1, 20, 14, 0, tzinfo=tz))
        upsert_item(item)

        fetched = get_item_by_id(item.id)
        assert fetched.published_at == datetime(2024, 1, 20, 12, 0, tzinfo=timezone.utc)
        assert fetched.published_at.utcoffset() == timedelta(0)

    def test_get_item_missing(self, temp_db):
        assert get_item_by_id(uuid.uuid4()) is None
        assert get_item_by_url(1, "https://nowhere.example.com") is None

    def test_items_by_source_newest_first(self, source):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for day in range(3):
            upsert_item(make_item(
                source.id,
                url=f"https://example.com/{day}",
                published_at=base + timedelta(days=day),
            ))

        items = get_items_by_source(source.id)
        assert [i.url for i in items] == [
            "https://example.com/2",
            "https://example.com/1",
            "https://example.com/0",
        ]
        assert len(get_items_by_source(source.id, limit=2)) == 2

    def test_latest_items_across_sources(self, source):
        other = get_or_create_source("Other Blog", "rss", "blog")
        upsert_item(make_item(source.id, url="https://example.com/old",
                              published_at=datetime(2023, 1, 1, tzinfo=timezone.utc)))
        upsert_item(make_item(other.id, url="https://example.com/new",
                              published_at=datetime(2024, 6, 1, tzinfo=timezone.utc)))

        latest = get_latest_items(limit=1)
        assert [i.url for i in latest] == ["https://example.com/new"]


class TestTopics:
    """Tests for item topic operations."""

    def test_add_topic(self, source):
        item_id = upsert_item(make_item(source.id))

        assert add_item_topic(item_id, "LLM") is True
        assert add_item_topic(item_id, "Agents") is True

        topics = get_item_topics(item_id)
        assert [t.topic for t in topics] == ["Agents", "LLM"]
        assert all(t.item_id == item_id for t in topics)

    def test_duplicate_topic_ignored(self, source):
        item_id = upsert_item(make_item(source.id))

        assert add_item_topic(item_id, "LLM") is True
        assert add_item_topic(item_id, "LLM") is False
        assert len(get_item_topics(item_id)) == 1

    def test_topics_follow_stored_id_on_reingest(self, source):
        first_id = upsert_item(make_item(source.id))
        add_item_topic(first_id, "LLM")

        second_id = upsert_item(make_item(source.id))
        add_item_topic(second_id, "LLM")

        assert [t.topic for t in get_item_topics(first_id)] == ["LLM"]


class TestLikes:
    """Tests for item like operations."""

    @pytest.mark.parametrize("score", [-1, 0, 1])
    def test_valid_scores(self, source, score):
        item_id = upsert_item(make_item(source.id))
        set_item_like("user-1", item_id, score)

        likes = get_item_likes(item_id)
        assert len(likes) == 1
        assert likes[0].score == score
        assert likes[0].user_id == "user-1"

    def test_relike_replaces_score(self, source):
        item_id = upsert_item(make_item(source.id))
        set_item_like("user-1", item_id, 1)
        set_item_like("user-1", item_id, -1)

        likes = get_item_likes(item_id)
        assert [like.score for like in likes] == [-1]

    def test_likes_per_user(self, source):
        item_id = upsert_item(make_item(source.id))
        set_item_like("user-1", item_id, 1)
        set_item_like("user-2", item_id, 0)

        assert sorted(like.user_id for like in get_item_likes(item_id)) == ["user-1", "user-2"]

    @pytest.mark.parametrize("score", [2, -2, 5, True, 0.5, None])
    def test_invalid_scores_rejected(self, source, score):
        item_id = upsert_item(make_item(source.id))

        with pytest.raises(InvalidScoreError):
            set_item_like("user-1", item_id, score)

        assert get_item_likes(item_id) == []

    def test_invalid_score_is_value_error(self, source):
        item_id = upsert_item(make_item(source.id))
        with pytest.raises(ValueError):
            set_item_like("user-1", item_id, 3)
