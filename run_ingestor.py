#!/usr/bin/env python3
"""Content ingestor: polls the configured sources and stores normalized items.

Usage:
    python run_ingestor.py                 # run cycles forever at INGESTION_INTERVAL_SECS
    python run_ingestor.py --once          # run a single cycle (for cron)
    python run_ingestor.py --seed --once   # load data/sources.yaml first
    python run_ingestor.py --interval 600
"""

import argparse
import dataclasses
import signal
import sys

from dotenv import load_dotenv

from content_ingestion.config import load_config, load_source_configs, seed_sources
from content_ingestion.database import init_db
from content_ingestion.db_engine import configure_engine
from content_ingestion.exceptions import ConfigError
from content_ingestion.scheduler import IngestionScheduler
from util.logging_util import setup_logger

logger = setup_logger("content_ingestion")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poll content sources and store normalized items.")
    parser.add_argument("--once", action="store_true", help="Run a single ingestion cycle and exit")
    parser.add_argument("--seed", action="store_true", help="Create/update sources from the sources YAML first")
    parser.add_argument("--interval", type=int, default=None, help="Seconds between cycles (overrides INGESTION_INTERVAL_SECS)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    load_dotenv()

    try:
        config = load_config()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if args.interval is not None:
        if args.interval <= 0:
            logger.error("--interval must be positive")
            return 2
        config = dataclasses.replace(config, ingestion_interval_secs=args.interval)

    configure_engine(config.database_url)
    logger.info(f"Connecting to database: {config.database_url.split('://')[0]}://...")
    try:
        init_db()
    except Exception as e:
        logger.error(f"Database unavailable: {e}")
        return 1

    if args.seed:
        try:
            source_configs = load_source_configs(config.sources_config_path)
        except ConfigError as e:
            logger.error(f"Invalid source config: {e}")
            return 2
        seed_sources(source_configs, config)

    scheduler = IngestionScheduler(config, logger)

    if args.once:
        count = scheduler.run_once()
        logger.info(f"Single ingestion cycle stored {count} items")
        return 0

    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, stopping after the current source")
        scheduler.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    scheduler.run_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
