"""
Fetching and decoding of remote feeds.
"""

from typing import List, Optional

import feedparser  # type: ignore
import requests

from content_ingestion.constants import REQUEST_TIMEOUT_SECONDS, USER_AGENT
from content_ingestion.exceptions import FeedParseError, FetchError
from util.logging_util import setup_logger

logger = setup_logger(__name__)


def fetch(
    url: str,
    params: Optional[dict] = None,
    user_agent: str = USER_AGENT,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> bytes:
    """GET a URL and return the raw response body.

    Raises FetchError on transport failures, timeouts and HTTP error statuses.
    """
    logger.debug(f"HTTP GET {url} params={params}")
    try:
        resp = requests.get(
            url,
            params=params,
            headers={"User-Agent": user_agent},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise FetchError(f"Error fetching {url}: {e}") from e

    if resp.status_code >= 400:
        raise FetchError(f"HTTP {resp.status_code} for {url}")

    return resp.content


def parse_feed(content: bytes, url: str) -> List[dict]:
    """Decode an RSS or Atom document into its entries.

    feedparser is lenient, so a feed only counts as undecodable when it
    is flagged as malformed and nothing could be recovered from it.
    """
    parsed = feedparser.parse(content)
    entries = parsed.get("entries", [])
    if parsed.get("bozo") and not entries:
        raise FeedParseError(f"Could not parse feed from {url}: {parsed.get('bozo_exception')}")
    return entries
