"""
Database operations for the content ingestion store.

Uses SQLAlchemy for database access. The public API uses dataclass models
from models.py, with conversion to/from ORM models handled internally.

Every write is a single INSERT ... ON CONFLICT statement, so repeated
ingestion of the same entry is idempotent and concurrent writers are
resolved by the database's unique constraints.
"""

import uuid
from typing import Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from content_ingestion.constants import ALLOWED_LIKE_SCORES
from content_ingestion.db_engine import get_engine, get_session
from content_ingestion.exceptions import InvalidScoreError
from content_ingestion.models import Item, ItemLike, ItemTopic, Source
from content_ingestion.orm_models import (
    Base,
    ItemLikeORM,
    ItemORM,
    ItemTopicORM,
    SourceORM,
    item_dataclass_to_row,
    item_orm_to_dataclass,
    like_orm_to_dataclass,
    source_orm_to_dataclass,
    topic_orm_to_dataclass,
    utcnow,
)

# Columns refreshed when an already-stored item is ingested again.
# id, created_at, source_id and url never change after the first insert.
ITEM_UPDATE_COLUMNS = ("title", "summary", "body", "published_at", "raw_metadata", "updated_at")

SOURCE_UPDATE_COLUMNS = ("medium", "ingest_url", "meta", "frequency", "updated_at")

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _dialect_insert(session: Session) -> Callable:
    """Return the insert() construct supporting ON CONFLICT for the bound dialect."""
    dialect_name = session.get_bind().dialect.name
    try:
        return _DIALECT_INSERTS[dialect_name]
    except KeyError:
        raise NotImplementedError(f"Upserts are not supported on {dialect_name}") from None


def init_db():
    """Initialize the database schema."""
    engine = get_engine()
    Base.metadata.create_all(engine)


# Sources


def get_or_create_source(
    name: str,
    source_type: str,
    medium: str,
    ingest_url: Optional[str] = None,
    meta: Optional[dict] = None,
    frequency: Optional[str] = None,
) -> Source:
    """Insert a source, or update the existing one with the same (name, type).

    New sources are created active. An existing source keeps its id, active
    flag and created_at; medium, ingest_url, meta and frequency are replaced.
    """
    table = SourceORM.__table__
    now = utcnow()

    with get_session() as session:
        insert = _dialect_insert(session)
        stmt = insert(table).values(
            name=name,
            type=source_type,
            medium=medium,
            ingest_url=ingest_url,
            active=True,
            frequency=frequency,
            meta=meta or None,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["name", "type"],
            set_={col: stmt.excluded[col] for col in SOURCE_UPDATE_COLUMNS},
        ).returning(table.c.id)

        source_id = session.execute(stmt).scalar_one()
        orm = session.get(SourceORM, source_id, populate_existing=True)
        return source_orm_to_dataclass(orm)


def get_source_by_id(source_id: int) -> Optional[Source]:
    """Get a source by its database ID."""
    with get_session() as session:
        orm = session.get(SourceORM, source_id)
        if orm is None:
            return None
        return source_orm_to_dataclass(orm)


def get_active_sources() -> List[Source]:
    """Get all active sources, ordered by name."""
    with get_session() as session:
        stmt = (
            select(SourceORM)
            .where(SourceORM.active.is_(True))
            .order_by(SourceORM.name.asc())
        )
        orms = session.execute(stmt).scalars().all()
        return [source_orm_to_dataclass(orm) for orm in orms]


def set_source_active(source_id: int, active: bool):
    """Activate or deactivate a source. Its items are left untouched."""
    with get_session() as session:
        orm = session.get(SourceORM, source_id)
        if orm is not None:
            orm.active = active
            orm.updated_at = utcnow()


# Items


def upsert_item(item: Item) -> uuid.UUID:
    """Insert an item, or update the stored item with the same (source_id, url).

    Returns the id of the stored row, which is the id of the first insert
    when the item already existed.
    """
    table = ItemORM.__table__
    row = item_dataclass_to_row(item, utcnow())

    with get_session() as session:
        insert = _dialect_insert(session)
        stmt = insert(table).values(**row)
        stmt = stmt.on_conflict_do_update(
            index_elements=["source_id", "url"],
            set_={col: stmt.excluded[col] for col in ITEM_UPDATE_COLUMNS},
        ).returning(table.c.id)
        return session.execute(stmt).scalar_one()


def get_item_by_id(item_id: uuid.UUID) -> Optional[Item]:
    """Get an item by its database ID."""
    with get_session() as session:
        orm = session.get(ItemORM, item_id)
        if orm is None:
            return None
        return item_orm_to_dataclass(orm)


def get_item_by_url(source_id: int, url: str) -> Optional[Item]:
    """Get an item by its (source_id, url) key."""
    with get_session() as session:
        stmt = select(ItemORM).where(
            ItemORM.source_id == source_id,
            ItemORM.url == url,
        )
        orm = session.execute(stmt).scalar_one_or_none()
        if orm is None:
            return None
        return item_orm_to_dataclass(orm)


def get_items_by_source(source_id: int, limit: int = 50) -> List[Item]:
    """Get the most recently published items for a source."""
    with get_session() as session:
        stmt = (
            select(ItemORM)
            .where(ItemORM.source_id == source_id)
            .order_by(ItemORM.published_at.desc())
            .limit(limit)
        )
        orms = session.execute(stmt).scalars().all()
        return [item_orm_to_dataclass(orm) for orm in orms]


def get_latest_items(limit: int = 50) -> List[Item]:
    """Get the most recently published items across all sources."""
    with get_session() as session:
        stmt = select(ItemORM).order_by(ItemORM.published_at.desc()).limit(limit)
        orms = session.execute(stmt).scalars().all()
        return [item_orm_to_dataclass(orm) for orm in orms]


def count_items() -> int:
    """Count all stored items."""
    with get_session() as session:
        return session.execute(select(func.count()).select_from(ItemORM)).scalar_one()


# Topics


def add_item_topic(item_id: uuid.UUID, topic: str) -> bool:
    """Tag an item with a topic.

    Returns True if the tag was added, False if the item already had it.
    """
    table = ItemTopicORM.__table__

    with get_session() as session:
        insert = _dialect_insert(session)
        stmt = insert(table).values(item_id=item_id, topic=topic, created_at=utcnow())
        stmt = stmt.on_conflict_do_nothing(index_elements=["item_id", "topic"])
        result = session.execute(stmt)
        return result.rowcount > 0


def get_item_topics(item_id: uuid.UUID) -> List[ItemTopic]:
    """Get the topics of an item, ordered by topic."""
    with get_session() as session:
        stmt = (
            select(ItemTopicORM)
            .where(ItemTopicORM.item_id == item_id)
            .order_by(ItemTopicORM.topic.asc())
        )
        orms = session.execute(stmt).scalars().all()
        return [topic_orm_to_dataclass(orm) for orm in orms]


# Likes


def set_item_like(user_id: str, item_id: uuid.UUID, score: int):
    """Record a user's score for an item, replacing any earlier score.

    Raises InvalidScoreError if score is not -1, 0 or 1.
    """
    if isinstance(score, bool) or score not in ALLOWED_LIKE_SCORES:
        raise InvalidScoreError(f"Score must be -1, 0, or 1, got {score!r}")

    table = ItemLikeORM.__table__

    with get_session() as session:
        insert = _dialect_insert(session)
        stmt = insert(table).values(
            user_id=user_id,
            item_id=item_id,
            score=score,
            created_at=utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "item_id"],
            set_={"score": stmt.excluded.score},
        )
        session.execute(stmt)


def get_item_likes(item_id: uuid.UUID) -> List[ItemLike]:
    """Get all likes for an item."""
    with get_session() as session:
        stmt = select(ItemLikeORM).where(ItemLikeORM.item_id == item_id)
        orms = session.execute(stmt).scalars().all()
        return [like_orm_to_dataclass(orm) for orm in orms]
