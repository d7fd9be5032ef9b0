"""Deduplication service tests."""
import pytest
from unittest.mock import AsyncMock
from pipeline.deduplication import DeduplicationService
from pipeline.parser import FeedItem
from shared.utils import get_utc_now


def make_item(link, title="AI news"):
    return FeedItem(
        title=title,
        link=link,
        description="",
        published_at=get_utc_now(),
        source_name="Test Feed"
    )


class TestDeduplicationService:
    """Tests for DeduplicationService.filter_new."""

    @pytest.fixture
    def dedup_service(self, article_store):
        return DeduplicationService(article_store)

    @pytest.mark.asyncio
    async def test_all_new(self, dedup_service):
        """Test that unseen links all pass through in feed order."""
        items = [make_item("https://example.com/b"), make_item("https://example.com/a")]

        result = await dedup_service.filter_new(items)

        assert [item.link for item in result] == ["https://example.com/b", "https://example.com/a"]

    @pytest.mark.asyncio
    async def test_stored_links_filtered(self, dedup_service, article_store):
        """Test that links already stored are dropped."""
        article_store.add(source_url="https://example.com/a")
        items = [make_item("https://example.com/a"), make_item("https://example.com/b")]

        result = await dedup_service.filter_new(items)

        assert [item.link for item in result] == ["https://example.com/b"]

    @pytest.mark.asyncio
    async def test_repeats_within_cycle_filtered(self, dedup_service):
        """Test that a link repeated in a feed, or across feeds, is kept once."""
        first = await dedup_service.filter_new([
            make_item("https://example.com/a", title="first"),
            make_item("https://example.com/a", title="second")
        ])
        second = await dedup_service.filter_new([make_item("https://example.com/a")])

        assert [item.title for item in first] == ["first"]
        assert second == []

    @pytest.mark.asyncio
    async def test_single_lookup_per_batch(self):
        """Test that one batch query covers the whole item list."""
        repo = AsyncMock()
        repo.get_existing_source_urls = AsyncMock(return_value=set())
        service = DeduplicationService(repo)

        await service.filter_new([make_item("https://example.com/a"), make_item("https://example.com/b")])

        repo.get_existing_source_urls.assert_awaited_once()
        links = repo.get_existing_source_urls.await_args.args[0]
        assert sorted(links) == ["https://example.com/a", "https://example.com/b"]

    @pytest.mark.asyncio
    async def test_empty_batch(self, dedup_service):
        assert await dedup_service.filter_new([]) == []
