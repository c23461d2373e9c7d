"""
ArXiv search API fetching and processing.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from content_ingestion.constants import ARXIV_MAX_RESULTS, DEFAULT_ARXIV_QUERY
from content_ingestion.config import IngestorConfig
from content_ingestion.feed_fetcher import fetch, parse_feed
from content_ingestion.models import Item, Medium, Source
from util.logging_util import setup_logger

logger = setup_logger(__name__)

_RFC3339_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)


def build_query_params(query: str = DEFAULT_ARXIV_QUERY) -> dict:
    """Query string for the newest submissions matching an ArXiv search query."""
    return {
        "search_query": query,
        "start": 0,
        "max_results": ARXIV_MAX_RESULTS,
        "sortBy": "submittedDate",
        "sortOrder": "descending",
    }


def _extract_arxiv_id(entry_id: str) -> str:
    """Extract the paper ID from an entry ID such as http://arxiv.org/abs/2401.12345v1."""
    return entry_id.split("/")[-1]


def _extract_authors(entry: dict) -> List[str]:
    """Extract author names from an Atom entry, in document order."""
    return [author.get("name", "") for author in entry.get("authors", []) if author.get("name")]


def _extract_categories(entry: dict) -> List[str]:
    """Primary category first, then every category term (the primary usually repeats)."""
    categories = []
    primary = entry.get("arxiv_primary_category") or {}
    if primary.get("term"):
        categories.append(primary["term"])
    for tag in entry.get("tags", []):
        if tag.get("term"):
            categories.append(tag["term"])
    return categories


def _parse_rfc3339(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp into an aware UTC datetime, or None if it is not one."""
    if not value:
        return None
    match = _RFC3339_RE.match(value.strip())
    if not match:
        return None
    date, time_of_day, fraction, offset = match.groups()
    if offset in ("Z", "z"):
        offset = "+00:00"
    # fromisoformat only takes 3 or 6 fractional digits before Python 3.11
    fraction = f".{fraction[:6].ljust(6, '0')}" if fraction else ""
    try:
        return datetime.fromisoformat(f"{date}T{time_of_day}{fraction}{offset}").astimezone(timezone.utc)
    except ValueError:
        return None


def _resolve_links(links: List[dict]) -> Tuple[Optional[str], Optional[str]]:
    """Pick the item URL and the PDF URL from an entry's links.

    Links are scanned in document order. A link titled "pdf" always
    overwrites the PDF URL, so the last one wins. Any other link becomes
    the item URL if none has been chosen yet, so the first one wins; abs
    links are accepted like any other once they are reached.
    """
    url = None
    pdf_url = None
    for link in links:
        href = link.get("href")
        if not href:
            continue
        if link.get("title") == "pdf":
            pdf_url = href
        elif url is None and "abs" not in href:
            url = href
        elif url is None:
            url = href
    return url, pdf_url


def entry_to_item(entry: dict, source: Source) -> Optional[Item]:
    """Normalize one ArXiv Atom entry.

    Returns None for entries without an ID, without a valid RFC 3339
    published date, or without any usable link.
    """
    entry_id = entry.get("id", "")
    if not entry_id:
        logger.debug("Skipping ArXiv entry without id")
        return None

    published_at = _parse_rfc3339(entry.get("published"))
    if published_at is None:
        logger.debug(f"Skipping ArXiv entry {entry_id}: bad published date {entry.get('published')!r}")
        return None

    url, pdf_url = _resolve_links(entry.get("links", []))
    if url is None:
        logger.debug(f"Skipping ArXiv entry {entry_id}: no link")
        return None

    arxiv_id = _extract_arxiv_id(entry_id)
    categories = _extract_categories(entry)
    authors = _extract_authors(entry)

    summary = entry.get("summary")

    return Item(
        source_id=source.id,
        source_type=Medium.PAPER.value,
        title=entry.get("title", "").strip(),
        url=url,
        summary=summary.strip() if summary is not None else None,
        body=None,
        published_at=published_at,
        raw_metadata={
            "arxiv_id": arxiv_id,
            "categories": categories,
            "authors": authors,
            "pdf_url": pdf_url,
        },
    )


def fetch_arxiv_items(source: Source, config: IngestorConfig) -> List[Item]:
    """
    Fetch the newest papers for an ArXiv source.

    The search query comes from the source's meta ("query"), falling back
    to DEFAULT_ARXIV_QUERY.

    Args:
        source: Source whose ingest_url is the ArXiv search API endpoint.
        config: IngestorConfig with the User-Agent and timeout to use.

    Returns:
        List of Item objects, in feed order.

    Raises:
        FetchError: The API could not be reached.
        FeedParseError: The response was not a readable Atom feed.
    """
    query = source.meta.get("query") or DEFAULT_ARXIV_QUERY
    logger.info(f"Fetching from ArXiv API: {source.ingest_url} (query: {query})")

    content = fetch(
        source.ingest_url,
        params=build_query_params(query),
        user_agent=config.user_agent,
        timeout=config.request_timeout_secs,
    )
    entries = parse_feed(content, source.ingest_url)
    logger.info(f"Parsed {len(entries)} entries from ArXiv response")

    items = []
    for entry in entries:
        item = entry_to_item(entry, source)
        if item is not None:
            items.append(item)

    logger.info(f"Fetched {len(items)} items from ArXiv source {source.name}")
    return items
