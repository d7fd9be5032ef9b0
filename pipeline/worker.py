"""Scheduler loop that drives fetch, summary and cleanup runs."""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from pipeline.automation import AutomationController
from shared.config import settings
from shared.utils import get_utc_now

logger = logging.getLogger(__name__)


class AutomationWorker:
    """
    Polls the automation status and starts work when it is due.

    A fetch runs when the next scheduled fetch has passed, summaries follow
    summary_delay_minutes after each fetch, and cleanup runs every
    cleanup_interval_hours.
    """

    def __init__(
        self,
        controller: AutomationController,
        worker_id: str = "scheduler-1",
        poll_interval: Optional[float] = None,
        clock: Callable[[], datetime] = get_utc_now
    ):
        self.controller = controller
        self.worker_id = worker_id
        self.poll_interval = poll_interval or settings.scheduler_poll_interval
        self.clock = clock
        self.running = True
        self.summary_due_at: Optional[datetime] = None
        self.last_cleanup: Optional[datetime] = None
        self.summary_skip_logged = False

    async def start(self):
        """Initialize the system, then run the scheduler loop."""
        logger.info(f"Worker {self.worker_id} starting...")

        result = await self.controller.initialize()
        if result.success:
            logger.info(result.message)
        else:
            logger.error(result.message)

        while self.running:
            await self.run_once()
            await asyncio.sleep(self.poll_interval)

    async def stop(self):
        """Stop the worker gracefully."""
        logger.info(f"Worker {self.worker_id} stopping...")
        self.running = False

    async def run_once(self):
        """One scheduler tick."""
        now = self.clock()

        status = await self.controller.get_status()
        if status.next_scheduled_fetch is not None and status.next_scheduled_fetch <= now:
            result = await self.controller.trigger_manual_fetch(trigger="scheduled")
            logger.info(result.message)
            if result.success:
                self.summary_due_at = now + timedelta(minutes=settings.summary_delay_minutes)

        if self.summary_due_at is not None and self.summary_due_at <= now:
            self.summary_due_at = None
            if self.controller.summarizer.configured:
                result = await self.controller.trigger_manual_summary_processing(trigger="scheduled")
                logger.info(result.message)
            elif not self.summary_skip_logged:
                # Warn once per process.
                logger.warning("Summarizer endpoint not configured; skipping scheduled summaries")
                self.summary_skip_logged = True

        if self.last_cleanup is None or now - self.last_cleanup >= timedelta(hours=settings.cleanup_interval_hours):
            self.last_cleanup = now
            result = await self.controller.perform_cleanup()
            logger.info(result.message)
