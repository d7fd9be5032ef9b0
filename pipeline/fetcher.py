"""HTTP fetcher for RSS/Atom feed payloads."""
import asyncio
from typing import Any, Dict, Optional
import aiohttp
from shared.config import settings
from shared.errors import FetchError


class FeedFetcher:
    """Retrieves raw feed documents from configured sources."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.timeout = timeout or settings.fetch_timeout
        self.headers = {
            "User-Agent": user_agent or settings.user_agent,
            "Accept": "application/rss+xml, application/atom+xml, text/xml, application/xml",
        }
        self._session = session
        self._owns_session = False

    async def __aenter__(self) -> "FeedFetcher":
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=self.headers
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the HTTP session if this fetcher opened it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None
        self._owns_session = False

    async def fetch(self, source: Dict[str, Any]) -> str:
        """
        Fetch the raw feed payload for a source.

        Raises FetchError on non-2xx responses, network errors and timeouts.
        """
        url = source["url"]
        if self._session is None:
            async with self:
                return await self._get(url)
        return await self._get(url)

    async def _get(self, url: str) -> str:
        try:
            async with self._session.get(
                url,
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(
                        f"HTTP {response.status}: {response.reason}",
                        status_code=response.status,
                        url=url
                    )
                return await response.text()

        except asyncio.TimeoutError:
            raise FetchError(f"Timeout after {self.timeout} seconds", url=url)
        except aiohttp.ClientError as e:
            raise FetchError(f"Network error: {str(e)}", url=url)
