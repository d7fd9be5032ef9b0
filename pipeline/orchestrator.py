"""Ingestion orchestrator: one fetch cycle over every active source."""
import asyncio
import logging
import time
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, Iterable, Optional

from database.repositories.article_repo import ArticleRepository
from database.repositories.log_repo import LogOperation, LogStatus, PipelineLogRepository
from database.repositories.source_repo import SourceRepository, SourceType
from pipeline.classifier import RelevanceClassifier
from pipeline.deduplication import DeduplicationService
from pipeline.fetcher import FeedFetcher
from pipeline.parser import FeedParser
from pipeline.tagger import extract_tags
from shared.config import settings
from shared.errors import FetchError, PersistenceError

logger = logging.getLogger(__name__)


@dataclass
class FetchCycleResult:
    """Aggregate counts for one fetch cycle."""
    articles_fetched: int = 0
    errors: int = 0
    sources_processed: int = 0
    skipped_existing: int = 0
    skipped_irrelevant: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class IngestionOrchestrator:
    """Runs Fetcher → Parser → Classifier/Tagger → Store for each active source."""

    def __init__(
        self,
        source_repo: SourceRepository,
        article_repo: ArticleRepository,
        log_repo: PipelineLogRepository,
        fetcher: Optional[FeedFetcher] = None,
        parser: Optional[FeedParser] = None,
        classifier: Optional[RelevanceClassifier] = None,
        tagger: Callable[[str, str], Iterable[str]] = extract_tags,
        source_delay: Optional[float] = None
    ):
        self.source_repo = source_repo
        self.article_repo = article_repo
        self.log_repo = log_repo
        self.fetcher = fetcher
        self.parser = parser or FeedParser()
        self.classifier = classifier or RelevanceClassifier()
        self.tagger = tagger
        self.source_delay = settings.source_delay_seconds if source_delay is None else source_delay

    async def run_fetch_cycle(self, trigger: str = "scheduled") -> FetchCycleResult:
        """
        Poll every active source once.

        A failing source is logged, counted and skipped. Only failing to read
        the source list aborts the cycle, with PersistenceError.
        """
        started = time.monotonic()
        await self.log_repo.append(
            LogOperation.FETCH,
            LogStatus.STARTED,
            "Beginning global AI news fetch",
            {"trigger": trigger}
        )

        try:
            sources = await self.source_repo.list_active()
        except Exception as e:
            logger.error(f"Failed to fetch sources: {e}")
            await self._safe_log_error(f"Failed to fetch sources: {e}", {"error": str(e), "trigger": trigger})
            raise PersistenceError(f"Failed to fetch sources: {e}") from e

        logger.info(f"Found {len(sources)} active news sources")

        result = FetchCycleResult(sources_processed=len(sources))
        dedup = DeduplicationService(self.article_repo)
        fetcher = self.fetcher or FeedFetcher()

        async with fetcher:
            for index, source in enumerate(sources):
                if index:
                    # Politeness delay towards upstream feed hosts.
                    await asyncio.sleep(self.source_delay)
                await self._process_source(source, fetcher, dedup, result)

        elapsed_ms = int((time.monotonic() - started) * 1000)
        message = f"Global fetch completed: {result.articles_fetched} new articles, {result.errors} errors"
        await self.log_repo.append(
            LogOperation.FETCH,
            LogStatus.COMPLETED,
            message,
            {**result.to_dict(), "trigger": trigger},
            execution_time_ms=elapsed_ms
        )
        logger.info(message)
        return result

    async def _process_source(
        self,
        source: Dict[str, Any],
        fetcher: FeedFetcher,
        dedup: DeduplicationService,
        result: FetchCycleResult
    ):
        name = source.get("name") or source.get("_id")
        source_type = source.get("source_type", SourceType.RSS)
        if source_type != SourceType.RSS:
            logger.info(f"Skipping {name}: source type {source_type} is not polled")
            return

        started = time.monotonic()
        logger.info(f"Fetching from: {name} ({source.get('url')})")

        try:
            raw = await fetcher.fetch(source)
        except Exception as e:
            await self._record_source_error(source, name, e, result)
            return

        try:
            items = list(self.parser.parse(raw, name))
            logger.info(f"Parsed {len(items)} articles from {name}")

            new_items = await dedup.filter_new(items)
            result.skipped_existing += len(items) - len(new_items)

            for item in new_items:
                if not self.classifier.is_relevant(item.title, item.description):
                    logger.debug(f"Not AI-related: {item.title[:50]}")
                    result.skipped_irrelevant += 1
                    continue

                try:
                    article = await self.article_repo.create_article(
                        title=item.title,
                        source_url=item.link,
                        source_name=name,
                        published_at=item.published_at,
                        original_content=item.description,
                        tags=self.tagger(item.title, item.description)
                    )
                except Exception as e:
                    logger.error(f"Failed to insert article {item.link}: {e}")
                    result.errors += 1
                    continue

                if article is None:
                    # Lost an insert race; the unique index kept the first copy.
                    result.skipped_existing += 1
                    continue

                logger.debug(f"Inserted: {item.title[:50]}")
                result.articles_fetched += 1

        except Exception as e:
            await self._record_source_error(source, name, e, result)

        # The payload was retrieved, so the checkpoint moves even if items failed.
        try:
            await self.source_repo.mark_fetched(source["_id"])
        except Exception as e:
            logger.warning(f"Could not update last_fetched for {name}: {e}")

        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info(f"Processed {name} in {elapsed_ms}ms")

    async def _record_source_error(
        self,
        source: Dict[str, Any],
        name: str,
        error: Exception,
        result: FetchCycleResult
    ):
        logger.error(f"Error fetching from {name}: {error}")
        result.errors += 1
        details = {
            "error": str(error),
            "error_type": type(error).__name__,
            "source_id": source.get("_id"),
            "source_name": name,
            "status_code": error.status_code if isinstance(error, FetchError) else None
        }
        await self._safe_log_error(f"Failed to fetch from {name}", details)

    async def _safe_log_error(self, message: str, details: Dict[str, Any]):
        try:
            await self.log_repo.append(LogOperation.FETCH, LogStatus.ERROR, message, details)
        except Exception as e:
            logger.warning(f"Could not write pipeline log entry: {e}")
