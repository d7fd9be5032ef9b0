"""Client for the external summarization job."""
import asyncio
import logging
from typing import Optional
import aiohttp
from database.repositories.log_repo import LogOperation, LogStatus, PipelineLogRepository
from shared.config import settings
from shared.errors import ConfigurationError, FetchError

logger = logging.getLogger(__name__)


class SummaryProcessor:
    """
    Triggers the summarization service, which moves pending articles through
    processing to published (or failed) and reports how many it handled.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        log_repo: Optional[PipelineLogRepository] = None
    ):
        self.url = url or settings.summarizer_url
        self.api_key = api_key or settings.summarizer_api_key
        self.timeout = timeout or settings.summarizer_timeout
        self.log_repo = log_repo

    @property
    def configured(self) -> bool:
        return bool(self.url)

    async def process(self, trigger: str = "manual_user_request", max_articles: Optional[int] = None) -> int:
        """
        Ask the summarizer to process a batch of pending articles.

        Returns:
            Number of articles the summarizer reports as processed

        Raises:
            ConfigurationError: no summarizer endpoint is configured
            FetchError: the summarizer could not be reached or answered non-2xx
        """
        if not self.configured:
            raise ConfigurationError("Summarizer endpoint not configured: set SUMMARIZER_URL")

        payload = {
            "trigger": trigger,
            "max_articles": max_articles or settings.max_articles_per_batch
        }
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        logger.info(f"Requesting summaries ({trigger}, max {payload['max_articles']})")

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.url, json=payload, headers=headers) as response:
                    if not 200 <= response.status < 300:
                        raise FetchError(
                            f"Summarizer returned HTTP {response.status}",
                            status_code=response.status,
                            url=self.url
                        )
                    data = await response.json(content_type=None)

        except asyncio.TimeoutError:
            raise FetchError(f"Summarizer timed out after {self.timeout} seconds", url=self.url)
        except aiohttp.ClientError as e:
            raise FetchError(f"Summarizer unreachable: {str(e)}", url=self.url)

        processed = int((data or {}).get("processed", 0))

        if self.log_repo:
            await self.log_repo.append(
                LogOperation.SUMMARY,
                LogStatus.COMPLETED,
                f"Summaries processed: {processed} articles",
                {"processed": processed, "trigger": trigger}
            )

        logger.info(f"Summarizer processed {processed} articles")
        return processed
