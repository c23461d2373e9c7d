"""
Ingestion cycle orchestration.

One cycle walks every active source in name order, fetches and normalizes
its entries, stores them and tags them with topics. A source that fails to
fetch or parse is logged and skipped; so is an item that fails to store.
"""

import logging
import threading
import time
import uuid
from typing import List, Optional

from content_ingestion.config import IngestorConfig
from content_ingestion.database import add_item_topic, get_active_sources, upsert_item
from content_ingestion.dispatcher import dispatch
from content_ingestion.models import Item, Source, SourceIngestResult
from content_ingestion.topics import extract_topics
from util.logging_util import log_cycle_summary, log_source_result, setup_logger

logger = setup_logger(__name__)


def _tag_item(item_id: uuid.UUID, item: Item, log: logging.Logger):
    """Attach keyword topics to a stored item. Failures are logged, not raised."""
    for topic in extract_topics(item.title, item.summary):
        try:
            add_item_topic(item_id, topic)
        except Exception as e:
            log.warning(f"Failed to add topic '{topic}' for item {item.url}: {e}")


def store_items(items: List[Item], log: Optional[logging.Logger] = None) -> int:
    """
    Upsert items in order and tag each stored one with topics.

    Returns the number of items successfully stored.
    """
    log = log or logger
    stored = 0
    for item in items:
        try:
            item_id = upsert_item(item)
        except Exception as e:
            log.warning(f"Failed to insert item {item.url}: {e}")
            continue

        stored += 1
        _tag_item(item_id, item, log)

    return stored


def ingest_source(source: Source, config: IngestorConfig, log: Optional[logging.Logger] = None) -> SourceIngestResult:
    """
    Run ingestion for a single source.

    Never raises: fetch and parse errors are recorded on the result.
    """
    log = log or logger
    result = SourceIngestResult(source_name=source.name)

    log.info(f"Processing source: {source.name} (type: {source.source_type})")
    try:
        items = dispatch(source, config, log)
    except Exception as e:
        result.error = str(e)
        log_source_result(log, source.name, 0, 0, error=result.error)
        return result

    result.items_fetched = len(items)
    result.items_upserted = store_items(items, log)
    log_source_result(log, source.name, result.items_fetched, result.items_upserted)
    return result


def run_ingestion_cycle(
    config: IngestorConfig,
    log: Optional[logging.Logger] = None,
    stop_event: Optional[threading.Event] = None,
) -> int:
    """
    Run one ingestion cycle over all active sources.

    Args:
        config: Settings passed through to the parsers.
        log: Logger to report progress to. Defaults to this module's logger.
        stop_event: When set, the cycle ends before starting the next source.

    Returns:
        Total number of items stored across all sources.
    """
    log = log or logger
    started = time.monotonic()
    log.info("Starting ingestion cycle...")

    try:
        sources = get_active_sources()
    except Exception as e:
        log.error(f"Could not load active sources: {e}")
        return 0

    if not sources:
        log.warning("No active sources found in database")
        return 0

    log.info(f"Found {len(sources)} active sources")

    total_upserted = 0
    failed_sources = []
    for source in sources:
        if stop_event is not None and stop_event.is_set():
            log.info("Stop requested, ending ingestion cycle early")
            break

        result = ingest_source(source, config, log)
        total_upserted += result.items_upserted
        if result.failed:
            failed_sources.append(source.name)

    log_cycle_summary(log, total_upserted, failed_sources, time.monotonic() - started)
    return total_upserted
