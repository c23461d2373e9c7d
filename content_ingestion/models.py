"""
Data models for the content ingestion pipeline.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SourceType(Enum):
    """How a source is ingested."""
    ARXIV = "arxiv"
    RSS = "rss"
    TWITTER_API = "twitter_api"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: str) -> Optional["SourceType"]:
        """Return the SourceType for a stored string, or None if it is not recognised."""
        try:
            return cls(value)
        except ValueError:
            return None


class Medium(Enum):
    """What kind of content a source produces."""
    PAPER = "paper"
    NEWSLETTER = "newsletter"
    BLOG = "blog"
    TWEET = "tweet"


@dataclass
class Source:
    """A configured origin of content."""
    name: str
    source_type: str
    medium: str
    id: Optional[int] = None
    ingest_url: Optional[str] = None
    active: bool = True
    frequency: Optional[str] = None
    meta: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def type_enum(self) -> Optional[SourceType]:
        return SourceType.parse(self.source_type)


@dataclass
class Item:
    """Unified content item representation for all sources."""
    source_id: int
    source_type: str
    title: str
    url: str
    published_at: datetime
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    summary: Optional[str] = None
    body: Optional[str] = None
    raw_metadata: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class ItemTopic:
    """A keyword-derived topic attached to an item."""
    item_id: uuid.UUID
    topic: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class ItemLike:
    """A user's feedback on an item: -1, 0 or 1."""
    user_id: str
    item_id: uuid.UUID
    score: int
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class SourceIngestResult:
    """Outcome of ingesting a single source during a cycle."""
    source_name: str
    items_fetched: int = 0
    items_upserted: int = 0
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None
