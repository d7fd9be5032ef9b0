"""Summarizer client tests."""
import pytest
from unittest.mock import MagicMock, patch
from database.repositories.log_repo import LogOperation, LogStatus
from pipeline.summarizer import SummaryProcessor
from shared.errors import ConfigurationError, FetchError


class FakeResponse:
    def __init__(self, status=200, payload=None):
        self.status = status
        self._payload = payload or {}

    async def json(self, content_type=None):
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.post = MagicMock(return_value=response)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None


class TestSummaryProcessor:
    """Tests for SummaryProcessor class."""

    @pytest.mark.asyncio
    async def test_not_configured(self):
        processor = SummaryProcessor(url=None)
        processor.url = None

        with pytest.raises(ConfigurationError):
            await processor.process()

    @pytest.mark.asyncio
    async def test_process_success(self, log_store):
        """Test that the processed count is returned and logged."""
        session = FakeSession(FakeResponse(payload={"processed": 3}))
        processor = SummaryProcessor(url="https://summaries.example.com/run", api_key="secret", log_repo=log_store)

        with patch("pipeline.summarizer.aiohttp.ClientSession", return_value=session):
            processed = await processor.process(trigger="manual_user_request", max_articles=5)

        assert processed == 3
        kwargs = session.post.call_args.kwargs
        assert kwargs["json"] == {"trigger": "manual_user_request", "max_articles": 5}
        assert kwargs["headers"]["Authorization"] == "Bearer secret"

        entry = log_store.entries[-1]
        assert entry["operation"] == LogOperation.SUMMARY
        assert entry["status"] == LogStatus.COMPLETED
        assert entry["details"]["processed"] == 3

    @pytest.mark.asyncio
    async def test_process_http_error(self, log_store):
        session = FakeSession(FakeResponse(status=503))
        processor = SummaryProcessor(url="https://summaries.example.com/run", log_repo=log_store)

        with patch("pipeline.summarizer.aiohttp.ClientSession", return_value=session):
            with pytest.raises(FetchError) as exc_info:
                await processor.process()

        assert exc_info.value.status_code == 503
        assert log_store.entries == []
