"""Automation controller: the public operations of the news pipeline."""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Set
import redis.asyncio as redis
from motor.motor_asyncio import AsyncIOMotorDatabase
from database.events import ChangePublisher
from database.repositories.article_repo import ArticleRepository, ArticleStatus
from database.repositories.log_repo import LogOperation, LogStatus, PipelineLogRepository
from database.repositories.source_repo import SourceRepository
from pipeline.default_sources import DEFAULT_SOURCES
from pipeline.monitoring import EventHandler, RealtimeMonitor
from pipeline.orchestrator import IngestionOrchestrator
from pipeline.schedule import SystemHealth, derive_system_health, next_scheduled_fetch
from pipeline.summarizer import SummaryProcessor
from shared.config import settings
from shared.errors import ConfigurationError
from shared.utils import get_utc_now

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    success: bool
    message: str


@dataclass
class HealthReport:
    healthy: bool
    issues: List[str] = field(default_factory=list)


@dataclass
class AutomationStatus:
    is_running: bool
    last_fetch: Optional[datetime]
    last_summary: Optional[datetime]
    next_scheduled_fetch: Optional[datetime]
    articles_in_queue: int
    system_health: str
    errors: List[str] = field(default_factory=list)


@dataclass
class DiagnosticsReport:
    config_present: bool = False
    collections_accessible: bool = False
    summarizer_configured: bool = False
    has_data: bool = False
    errors: List[str] = field(default_factory=list)


class AutomationController:
    """
    Entry point for initialization, status, manual triggers, cleanup and health.

    Operations report failure through their return value; only
    start_realtime_monitoring() raises.
    """

    # Delayed summary runs outlive the request that scheduled them.
    background_tasks: Set[asyncio.Task] = set()

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        redis_client: Optional[redis.Redis] = None,
        article_repo: Optional[ArticleRepository] = None,
        source_repo: Optional[SourceRepository] = None,
        log_repo: Optional[PipelineLogRepository] = None,
        orchestrator: Optional[IngestionOrchestrator] = None,
        summarizer: Optional[SummaryProcessor] = None,
        clock: Callable[[], datetime] = get_utc_now
    ):
        events = ChangePublisher(redis_client) if redis_client is not None else None

        self.db = db
        self.redis = redis_client
        self.article_repo = article_repo or ArticleRepository(db, events)
        self.source_repo = source_repo or SourceRepository(db)
        self.log_repo = log_repo or PipelineLogRepository(db, events)
        self.orchestrator = orchestrator or IngestionOrchestrator(
            self.source_repo, self.article_repo, self.log_repo
        )
        self.summarizer = summarizer or SummaryProcessor(log_repo=self.log_repo)
        self.clock = clock

    async def _ping(self):
        await self.db.command("ping")

    async def initialize(self) -> OperationResult:
        """Bootstrap sources and, on an empty system, run a first fetch."""
        logger.info("Initializing AI news automation")

        try:
            await self._ping()
        except ConfigurationError as e:
            logger.error(f"Configuration error: {e}")
            return OperationResult(False, f"Configuration error: {e}")
        except Exception as e:
            logger.error(f"Storage is not reachable: {e}")
            return OperationResult(False, f"Error: storage is not reachable: {e}")

        try:
            if await self.source_repo.count_active() == 0:
                stats = await self.source_repo.sync_sources(DEFAULT_SOURCES)
                logger.info(f"Default sources registered: {stats}")

            await self.log_repo.append(
                LogOperation.SETUP,
                LogStatus.STARTED,
                "Configuring AI news automation",
                {
                    "fetch_interval_hours": settings.fetch_interval_hours,
                    "summary_delay_minutes": settings.summary_delay_minutes,
                    "max_articles_per_batch": settings.max_articles_per_batch
                }
            )

            if not await self.article_repo.has_published():
                logger.info("No published articles yet, running initial fetch")
                try:
                    result = await self.orchestrator.run_fetch_cycle(trigger="initial_setup")
                except Exception as e:
                    logger.error(f"Initial fetch failed: {e}")
                    return OperationResult(True, f"AI news automation initialized; initial fetch failed: {e}")

                self.schedule_summary_processing(settings.initial_summary_delay_seconds, trigger="initial_setup")
                return OperationResult(
                    True,
                    f"AI news automation initialized; initial fetch stored {result.articles_fetched} articles"
                )

            return OperationResult(True, "AI news automation initialized")

        except Exception as e:
            logger.error(f"Initialization error: {e}")
            return OperationResult(False, f"Initialization error: {e}")

    async def get_status(self) -> AutomationStatus:
        """Derive the current automation status from the pipeline log."""
        try:
            now = self.clock()
            last_fetch_entry = await self.log_repo.get_latest(LogOperation.FETCH, LogStatus.COMPLETED)
            last_summary_entry = await self.log_repo.get_latest(LogOperation.SUMMARY, LogStatus.COMPLETED)
            pending = await self.article_repo.count_by_status(ArticleStatus.PENDING)

            since = now - timedelta(hours=settings.error_window_hours)
            error_count = await self.log_repo.count_errors_since(since)
            recent_errors = await self.log_repo.get_recent_errors(since, limit=5)

            last_fetch = last_fetch_entry["created_at"] if last_fetch_entry else None
            last_summary = last_summary_entry["created_at"] if last_summary_entry else None

            return AutomationStatus(
                is_running=True,
                last_fetch=last_fetch,
                last_summary=last_summary,
                next_scheduled_fetch=next_scheduled_fetch(
                    last_fetch, timedelta(hours=settings.fetch_interval_hours), now
                ),
                articles_in_queue=pending,
                system_health=derive_system_health(error_count),
                errors=[entry["message"] for entry in recent_errors]
            )

        except Exception as e:
            logger.error(f"Failed to read automation status: {e}")
            return AutomationStatus(
                is_running=False,
                last_fetch=None,
                last_summary=None,
                next_scheduled_fetch=None,
                articles_in_queue=0,
                system_health=SystemHealth.ERROR,
                errors=[str(e)]
            )

    async def trigger_manual_fetch(self, trigger: str = "manual_user_request") -> OperationResult:
        """Run one fetch cycle now."""
        try:
            result = await self.orchestrator.run_fetch_cycle(trigger=trigger)
            return OperationResult(
                True,
                f"Fetch complete: {result.articles_fetched} new articles ({result.errors} errors)"
            )
        except Exception as e:
            logger.error(f"Fetch error: {e}")
            return OperationResult(False, f"Fetch error: {e}")

    async def trigger_manual_summary_processing(self, trigger: str = "manual_user_request") -> OperationResult:
        """Ask the summarizer to process pending articles now."""
        try:
            processed = await self.summarizer.process(trigger=trigger)
            return OperationResult(True, f"Summaries processed: {processed} articles")
        except Exception as e:
            logger.error(f"Summary processing error: {e}")
            await self._safe_log(LogOperation.SUMMARY, LogStatus.ERROR, f"Summary processing failed: {e}", {
                "error": str(e),
                "trigger": trigger
            })
            return OperationResult(False, f"Processing error: {e}")

    def schedule_summary_processing(self, delay: float, trigger: str = "scheduled") -> asyncio.Task:
        """Run summary processing in the background after `delay` seconds."""
        task = asyncio.create_task(self._delayed_summary(delay, trigger))
        self.background_tasks.add(task)
        task.add_done_callback(self.background_tasks.discard)
        return task

    async def _delayed_summary(self, delay: float, trigger: str):
        await asyncio.sleep(delay)
        if not self.summarizer.configured:
            logger.warning(f"Summarizer endpoint not configured; skipping {trigger} summary run")
            return
        result = await self.trigger_manual_summary_processing(trigger=trigger)
        logger.info(f"Delayed summary run ({trigger}): {result.message}")

    async def perform_cleanup(self) -> OperationResult:
        """
        Apply the retention rules.

        Removes log entries older than cleanup_days, failed articles older than
        failed_article_retention_days, and corrupted articles. Every step is
        attempted; any failure turns the whole run into one error result.
        """
        now = self.clock()
        steps = [
            ("logs", lambda: self.log_repo.delete_older_than(now - timedelta(days=settings.cleanup_days))),
            ("failed_articles", lambda: self.article_repo.delete_failed_older_than(
                now - timedelta(days=settings.failed_article_retention_days)
            )),
            ("corrupted_articles", lambda: self.article_repo.delete_corrupted(now)),
        ]

        deleted = {}
        failures = []
        for label, step in steps:
            try:
                deleted[label] = await step()
            except Exception as e:
                logger.error(f"Cleanup of {label} failed: {e}")
                failures.append(f"{label}: {e}")

        if failures:
            message = f"Clean-up error: {'; '.join(failures)}"
            await self._safe_log(LogOperation.CLEANUP, LogStatus.ERROR, message, {"deleted": deleted})
            return OperationResult(False, message)

        await self._safe_log(LogOperation.CLEANUP, LogStatus.COMPLETED, "Automatic clean-up complete", deleted)
        return OperationResult(
            True,
            f"Automatic clean-up complete: removed {deleted['logs']} logs, "
            f"{deleted['failed_articles']} failed and {deleted['corrupted_articles']} corrupted articles"
        )

    async def check_system_health(self) -> HealthReport:
        """Check storage, configured sources and the recent error rate."""
        issues = []
        try:
            try:
                await self._ping()
            except Exception as e:
                issues.append(f"Storage connection error: {e}")

            active = await self.source_repo.count_active()
            if active == 0:
                issues.append("No active news sources configured")

            since = self.clock() - timedelta(hours=settings.error_window_hours)
            error_count = await self.log_repo.count_errors_since(since)
            if error_count > settings.health_error_threshold:
                issues.append(
                    f"Too many recent errors: {error_count} in the last {settings.error_window_hours} hours"
                )

            return HealthReport(healthy=not issues, issues=issues)

        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return HealthReport(healthy=False, issues=issues + [f"Verification error: {e}"])

    async def start_realtime_monitoring(self, handlers: Optional[List[EventHandler]] = None) -> RealtimeMonitor:
        """
        Subscribe to article and log change events.

        Returns the started monitor; call stop() on it, or use it with
        `async with`, to release the subscription.
        """
        if self.redis is None:
            raise ConfigurationError("Realtime monitoring needs a Redis connection")
        monitor = RealtimeMonitor(self.redis, handlers=handlers)
        return await monitor.start()

    async def diagnose(self) -> DiagnosticsReport:
        """Check configuration, collection access, summarizer setup and data presence."""
        report = DiagnosticsReport()

        report.config_present = bool(settings.mongo_url and settings.mongo_db_name)
        if not report.config_present:
            report.errors.append("MongoDB connection info missing: set MONGO_URL and MONGO_DB_NAME")
            return report

        counts = {}
        for name, repo in (
            ("ai_news", self.article_repo),
            ("news_sources", self.source_repo),
            ("pipeline_logs", self.log_repo),
        ):
            try:
                counts[name] = await repo.count_all()
            except Exception as e:
                report.errors.append(f"{name} collection error: {e}")

        report.collections_accessible = len(counts) == 3
        report.has_data = counts.get("ai_news", 0) > 0

        report.summarizer_configured = self.summarizer.configured
        if not report.summarizer_configured:
            report.errors.append("Summarizer endpoint not configured: set SUMMARIZER_URL")

        return report

    async def reset_system(self) -> OperationResult:
        """Remove corrupted articles and reseed the default sources from scratch."""
        try:
            removed = await self.article_repo.delete_corrupted(self.clock())
            registered = await self.source_repo.replace_all(DEFAULT_SOURCES)

            message = f"System reset complete: removed {removed} corrupted articles, registered {registered} sources"
            await self.log_repo.append(
                LogOperation.RESET,
                LogStatus.COMPLETED,
                message,
                {"corrupted_removed": removed, "sources_registered": registered}
            )
            logger.info(message)
            return OperationResult(True, message)

        except Exception as e:
            logger.error(f"Reset error: {e}")
            return OperationResult(False, f"Reset error: {e}")

    async def _safe_log(self, operation: str, status: str, message: str, details: dict):
        try:
            await self.log_repo.append(operation, status, message, details)
        except Exception as e:
            logger.warning(f"Could not write pipeline log entry: {e}")
