import logging
import sys
from typing import Iterable

# Configure logging format
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logger(name: str, level=logging.INFO) -> logging.Logger:
    """
    Sets up a logger with consistent formatting.

    Args:
        name: Name of the logger (typically __name__ from the calling module)
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid adding handlers multiple times
    if not logger.handlers:
        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        # Formatter
        formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
        console_handler.setFormatter(formatter)

        logger.addHandler(console_handler)

    return logger

def log_source_result(logger: logging.Logger, source_name: str, items_fetched: int,
                      items_upserted: int, error: str = None):
    """
    Logs the outcome of ingesting a single source.

    Args:
        logger: Logger instance to use
        source_name: Name of the source
        items_fetched: Number of items the parser produced
        items_upserted: Number of items written to the store
        error: Error message if the source failed
    """
    if error:
        logger.error(f"❌ Source {source_name} failed: {error}")
        return
    logger.info(f"✅ Source {source_name} complete: {items_upserted}/{items_fetched} items stored")

def log_cycle_summary(logger: logging.Logger, total_upserted: int, failed_sources: Iterable[str],
                      duration_s: float = None):
    """
    Logs the totals of one ingestion cycle.

    Args:
        logger: Logger instance to use
        total_upserted: Items stored across all sources
        failed_sources: Names of sources that failed this cycle
        duration_s: Optional duration of the cycle in seconds
    """
    failed = list(failed_sources)
    duration_str = f" in {duration_s:.1f}s" if duration_s is not None else ""
    logger.info(f"Ingestion cycle complete{duration_str}. Total items inserted: {total_upserted}")
    if failed:
        logger.warning(f"  Failed sources: {', '.join(failed)}")
