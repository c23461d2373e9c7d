"""
Generic RSS/Atom feed fetching and processing.
"""

import calendar
from datetime import datetime, timezone
from typing import List, Optional

from content_ingestion.config import IngestorConfig
from content_ingestion.constants import (
    BODY_MAX_CHARS,
    MAX_METADATA_LINKS,
    SUMMARY_MAX_CHARS,
    TRUNCATION_MARKER,
)
from content_ingestion.feed_fetcher import fetch, parse_feed
from content_ingestion.models import Item, Source
from util.logging_util import setup_logger

logger = setup_logger(__name__)


def truncate(text: str, max_chars: int) -> str:
    """Cut text to max_chars characters, marking the cut with TRUNCATION_MARKER."""
    if len(text) > max_chars:
        return text[:max_chars] + TRUNCATION_MARKER
    return text


def _extract_title(entry: dict) -> str:
    title = (entry.get("title") or "").strip()
    if title:
        return title
    return f"Untitled ({datetime.now().strftime('%Y-%m-%d %H:%M:%S')})"


def _extract_url(entry: dict) -> Optional[str]:
    """Use the first alternate link, falling back to the entry ID.

    Links without a rel count as alternate.
    """
    for link in entry.get("links", []):
        if (link.get("rel") or "alternate") == "alternate" and link.get("href"):
            return link["href"]
    return entry.get("id") or None


def _extract_content_body(entry: dict) -> Optional[str]:
    """Return the first full-content body of an entry, if any."""
    for content in entry.get("content") or []:
        value = content.get("value")
        if value:
            return value
    return None


def _extract_summary(entry: dict, content_body: Optional[str]) -> Optional[str]:
    """The entry's own summary, else the start of its content body.

    feedparser copies a content body into "summary" when the entry has no
    summary of its own. That copy comes without "summary_detail".
    """
    summary = entry.get("summary")
    if summary and "summary_detail" not in entry and summary == content_body:
        summary = None
    if not summary and content_body is not None:
        summary = truncate(content_body, SUMMARY_MAX_CHARS)
    return summary or None


def _extract_published(entry: dict) -> datetime:
    """Published time, else updated time, else now."""
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed is not None:
            return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
    return datetime.now(timezone.utc)


def _extract_authors(entry: dict) -> List[str]:
    """Extract author names from an RSS entry.

    Handles various formats:
    - List of dicts with 'name' key (Atom, most RSS)
    - String with semicolon/comma separated names
    - Single 'author' string
    """
    if "authors" in entry:
        authors = entry["authors"]
        if isinstance(authors, str):
            authors = authors.replace(";", ",")
            return [a.strip() for a in authors.split(",") if a.strip()]
        elif isinstance(authors, list):
            result = []
            for author in authors:
                if isinstance(author, dict):
                    name = author.get("name", "")
                    # Some publishers put affiliations on new lines
                    name = name.replace("\n", ", ")
                    result.append(name.strip())
                elif isinstance(author, str):
                    result.append(author.strip())
            return [a for a in result if a]
    elif "author" in entry:
        author = entry["author"]
        if isinstance(author, str):
            return [author.strip()] if author.strip() else []
    return []


def _extract_categories(entry: dict) -> List[str]:
    return [tag["term"] for tag in entry.get("tags", []) if tag.get("term")]


def _build_metadata(entry: dict) -> dict:
    metadata = {
        "feed_id": entry.get("id"),
        "authors": _extract_authors(entry),
        "categories": _extract_categories(entry),
    }
    links = entry.get("links", [])
    if links:
        metadata["links"] = [
            {
                "href": link.get("href"),
                "rel": link.get("rel"),
                "media_type": link.get("type"),
            }
            for link in links[:MAX_METADATA_LINKS]
        ]
    return metadata


def entry_to_item(entry: dict, source: Source) -> Optional[Item]:
    """Normalize one RSS/Atom entry. Returns None if the entry has no URL."""
    url = _extract_url(entry)
    if url is None:
        logger.debug(f"Skipping entry without link or id in {source.name}")
        return None

    content_body = _extract_content_body(entry)
    body = truncate(content_body, BODY_MAX_CHARS) if content_body is not None else None

    return Item(
        source_id=source.id,
        source_type=source.medium,
        title=_extract_title(entry),
        url=url,
        summary=_extract_summary(entry, content_body),
        body=body,
        published_at=_extract_published(entry),
        raw_metadata=_build_metadata(entry),
    )


def fetch_rss_items(source: Source, config: IngestorConfig) -> List[Item]:
    """
    Fetch and normalize the entries of an RSS or Atom feed.

    Args:
        source: Source whose ingest_url is the feed URL.
        config: IngestorConfig with the User-Agent and timeout to use.

    Returns:
        List of Item objects, in feed order.

    Raises:
        FetchError: The feed could not be fetched.
        FeedParseError: The response was not a readable feed.
    """
    logger.info(f"Starting RSS ingestion for source: {source.name} ({source.ingest_url})")

    content = fetch(
        source.ingest_url,
        user_agent=config.user_agent,
        timeout=config.request_timeout_secs,
    )
    entries = parse_feed(content, source.ingest_url)

    items = []
    for entry in entries:
        item = entry_to_item(entry, source)
        if item is not None:
            items.append(item)

    logger.info(f"Fetched {len(items)} items from RSS feed: {source.name}")
    return items
