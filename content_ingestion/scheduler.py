"""
Fixed-interval scheduling of ingestion cycles.
"""

import logging
import threading
from typing import Callable, Optional

from content_ingestion.config import IngestorConfig
from content_ingestion.scanner import run_ingestion_cycle
from util.logging_util import setup_logger

logger = setup_logger(__name__)

CycleRunner = Callable[[IngestorConfig, logging.Logger, threading.Event], int]


class IngestionScheduler:
    """Runs ingestion cycles back to back, sleeping a fixed interval between them.

    stop() may be called from another thread or a signal handler. It is
    observed between sources and interrupts the sleep immediately.
    """

    def __init__(
        self,
        config: IngestorConfig,
        log: Optional[logging.Logger] = None,
        cycle_runner: CycleRunner = run_ingestion_cycle,
    ):
        self.config = config
        self.log = log or logger
        self._cycle_runner = cycle_runner
        self._stop_event = threading.Event()
        self.cycles_completed = 0

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self):
        """Ask the scheduler to stop after the current source."""
        self._stop_event.set()

    def run_once(self) -> int:
        """Run a single cycle. Returns the number of items stored."""
        try:
            return self._cycle_runner(self.config, self.log, self._stop_event)
        finally:
            self.cycles_completed += 1

    def run_forever(self, max_cycles: Optional[int] = None) -> int:
        """
        Run cycles until stop() is called (or max_cycles have run).

        Returns the total number of items stored across all cycles.
        """
        interval = self.config.ingestion_interval_secs
        total = 0
        self.log.info(f"Ingestor initialized. Starting ingestion loop (interval: {interval} seconds)")

        while not self.stopped:
            try:
                count = self.run_once()
            except Exception as e:
                # Keep the loop alive; the next cycle retries.
                self.log.exception(f"Ingestion cycle failed: {e}")
                count = 0
            total += count

            if max_cycles is not None and self.cycles_completed >= max_cycles:
                break

            self.log.info(f"Ingestion cycle complete. Sleeping for {interval} seconds...")
            if self._stop_event.wait(interval):
                break

        self.log.info("Ingestion loop stopped")
        return total
