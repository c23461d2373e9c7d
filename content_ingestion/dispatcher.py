"""
Routes each source to the parser for its source type.
"""

import logging
from typing import Callable, Dict, List, Optional

from content_ingestion import arxiv_feed, rss_feed
from content_ingestion.config import IngestorConfig
from content_ingestion.models import Item, Source, SourceType
from util.logging_util import setup_logger

logger = setup_logger(__name__)

Parser = Callable[[Source, IngestorConfig], List[Item]]

PARSERS: Dict[SourceType, Parser] = {
    SourceType.ARXIV: arxiv_feed.fetch_arxiv_items,
    SourceType.RSS: rss_feed.fetch_rss_items,
}


def get_parser(source_type: Optional[SourceType]) -> Optional[Parser]:
    """Return the parser registered for a source type, or None if there is none."""
    if source_type is None:
        return None
    return PARSERS.get(source_type)


def dispatch(source: Source, config: IngestorConfig, log: Optional[logging.Logger] = None) -> List[Item]:
    """Fetch and normalize the items of one source.

    Sources whose type is unknown or has no parser, and parseable sources
    without an ingest_url, produce no items. Errors raised by the parser
    propagate to the caller.
    """
    log = log or logger
    source_type = source.type_enum

    if source_type is None:
        log.warning(f"Unknown source type: {source.source_type} for source: {source.name}")
        return []

    parser = get_parser(source_type)
    if parser is None:
        log.info(f"No automated ingestion for {source_type.value} source: {source.name} - skipping")
        return []

    if not source.ingest_url:
        log.warning(f"{source_type.value} source {source.name} has no ingest_url, skipping")
        return []

    return parser(source, config)
