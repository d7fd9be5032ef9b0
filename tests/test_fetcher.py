"""Feed fetcher tests."""
import asyncio
import pytest
import aiohttp
from unittest.mock import MagicMock
from pipeline.fetcher import FeedFetcher
from shared.errors import FetchError


class FakeResponse:
    """Minimal aiohttp response double."""

    def __init__(self, status=200, body="", reason="OK"):
        self.status = status
        self.reason = reason
        self._body = body

    async def text(self):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None


class FailingRequest:
    """Request context manager that raises on entry."""

    def __init__(self, error):
        self.error = error

    async def __aenter__(self):
        raise self.error

    async def __aexit__(self, exc_type, exc, tb):
        return None


class TestFeedFetcher:
    """Tests for FeedFetcher class."""

    @pytest.fixture
    def source(self):
        return {"_id": "src_1", "name": "Example", "url": "https://example.com/feed"}

    @pytest.fixture
    def session(self):
        return MagicMock()

    @pytest.mark.asyncio
    async def test_fetch_success(self, session, source):
        """Test fetching a feed returns the body."""
        session.get = MagicMock(return_value=FakeResponse(body="<rss></rss>"))
        fetcher = FeedFetcher(session=session)

        assert await fetcher.fetch(source) == "<rss></rss>"

    @pytest.mark.asyncio
    async def test_sends_user_agent_and_accept(self, session, source):
        """Test that the request carries User-Agent and feed Accept headers."""
        session.get = MagicMock(return_value=FakeResponse(body="<rss></rss>"))
        fetcher = FeedFetcher(session=session, user_agent="TestAgent/1.0")

        await fetcher.fetch(source)

        headers = session.get.call_args.kwargs["headers"]
        assert headers["User-Agent"] == "TestAgent/1.0"
        assert "application/rss+xml" in headers["Accept"]
        assert "application/atom+xml" in headers["Accept"]

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status(self, session, source):
        """Test that a 404 becomes FetchError carrying the status code."""
        session.get = MagicMock(return_value=FakeResponse(status=404, reason="Not Found"))
        fetcher = FeedFetcher(session=session)

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(source)

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == source["url"]

    @pytest.mark.asyncio
    async def test_timeout_raises(self, session, source):
        session.get = MagicMock(return_value=FailingRequest(asyncio.TimeoutError()))
        fetcher = FeedFetcher(session=session, timeout=0.5)

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(source)

        assert "Timeout" in str(exc_info.value)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_network_error_raises(self, session, source):
        session.get = MagicMock(return_value=FailingRequest(aiohttp.ClientConnectionError("refused")))
        fetcher = FeedFetcher(session=session)

        with pytest.raises(FetchError):
            await fetcher.fetch(source)

    @pytest.mark.asyncio
    async def test_injected_session_is_not_closed(self, session):
        """Test that close() leaves a caller-owned session alone."""
        fetcher = FeedFetcher(session=session)

        async with fetcher:
            pass

        session.close.assert_not_called()
