"""
SQLAlchemy ORM models for the content ingestion store.

These models are internal to the database layer. The public interface
uses the dataclass models from models.py.
"""

import json
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from content_ingestion.models import Item, ItemLike, ItemTopic, Source


class JSONEncodedList(TypeDecorator):
    """Represents a list as a JSON-encoded string."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[List], dialect) -> Optional[str]:
        if value is None or value == []:
            return None
        return json.dumps(value)

    def process_result_value(self, value: Optional[str], dialect) -> List:
        if value is None:
            return []
        return json.loads(value)


class JSONEncodedDict(TypeDecorator):
    """Represents a dict as a JSON-encoded string."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[dict], dialect) -> Optional[str]:
        if value is None or value == {}:
            return None
        return json.dumps(value)

    def process_result_value(self, value: Optional[str], dialect) -> dict:
        if value is None:
            return {}
        return json.loads(value)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return value as an aware UTC datetime.

    SQLite hands back naive datetimes, which are stored in UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    pass


class SourceORM(Base):
    """SQLAlchemy model for sources table."""

    __tablename__ = "sources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    # 'type' shadows a builtin, so the Python attribute is source_type
    source_type: Mapped[str] = mapped_column("type", Text, nullable=False)
    medium: Mapped[str] = mapped_column(Text, nullable=False)
    ingest_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    frequency: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    meta: Mapped[dict] = mapped_column(JSONEncodedDict, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("name", "type", name="uq_sources_name_type"),
        Index("idx_sources_active", "active"),
        Index("idx_sources_type", "type"),
        Index("idx_sources_medium", "medium"),
    )


class ItemORM(Base):
    """SQLAlchemy model for items table. source_id is not a foreign key."""

    __tablename__ = "items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    source_id: Mapped[int] = mapped_column(Integer, nullable=False)
    source_type: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    raw_metadata: Mapped[dict] = mapped_column(JSONEncodedDict, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("source_id", "url", name="uq_items_source_url"),
        Index("idx_items_source_id", "source_id"),
        Index("idx_items_published_at", "published_at"),
        Index("idx_items_source_type", "source_type"),
    )


class ItemTopicORM(Base):
    """SQLAlchemy model for item_topics table."""

    __tablename__ = "item_topics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("item_id", "topic", name="uq_item_topics_item_topic"),
        Index("idx_item_topics_topic", "topic"),
    )


class ItemLikeORM(Base):
    """SQLAlchemy model for item_likes table."""

    __tablename__ = "item_likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    item_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_item_likes_user_item"),
        CheckConstraint("score IN (-1, 0, 1)", name="ck_item_likes_score"),
        Index("idx_item_likes_item_id", "item_id"),
    )


# Conversion functions between ORM models and dataclasses


def source_orm_to_dataclass(orm: SourceORM) -> Source:
    """Convert a SourceORM instance to a Source dataclass."""
    return Source(
        id=orm.id,
        name=orm.name,
        source_type=orm.source_type,
        medium=orm.medium,
        ingest_url=orm.ingest_url,
        active=bool(orm.active),
        frequency=orm.frequency,
        meta=orm.meta or {},
        created_at=as_utc(orm.created_at),
        updated_at=as_utc(orm.updated_at),
    )


def item_orm_to_dataclass(orm: ItemORM) -> Item:
    """Convert an ItemORM instance to an Item dataclass."""
    return Item(
        id=orm.id,
        source_id=orm.source_id,
        source_type=orm.source_type,
        title=orm.title,
        url=orm.url,
        summary=orm.summary,
        body=orm.body,
        published_at=as_utc(orm.published_at),
        raw_metadata=orm.raw_metadata or {},
        created_at=as_utc(orm.created_at),
        updated_at=as_utc(orm.updated_at),
    )


def item_dataclass_to_row(item: Item, now: datetime) -> dict:
    """Convert an Item dataclass to a column-keyed row for the items table."""
    return {
        "id": item.id,
        "source_id": item.source_id,
        "source_type": item.source_type,
        "title": item.title,
        "url": item.url,
        "summary": item.summary,
        "body": item.body,
        "published_at": as_utc(item.published_at),
        "raw_metadata": item.raw_metadata if item.raw_metadata else None,
        "created_at": as_utc(item.created_at) or now,
        "updated_at": now,
    }


def topic_orm_to_dataclass(orm: ItemTopicORM) -> ItemTopic:
    """Convert an ItemTopicORM instance to an ItemTopic dataclass."""
    return ItemTopic(
        id=orm.id,
        item_id=orm.item_id,
        topic=orm.topic,
        created_at=as_utc(orm.created_at),
    )


def like_orm_to_dataclass(orm: ItemLikeORM) -> ItemLike:
    """Convert an ItemLikeORM instance to an ItemLike dataclass."""
    return ItemLike(
        id=orm.id,
        user_id=orm.user_id,
        item_id=orm.item_id,
        score=orm.score,
        created_at=as_utc(orm.created_at),
    )
