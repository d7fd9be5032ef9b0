"""Deduplication of parsed feed items against stored articles."""
from typing import List, Set
from database.repositories.article_repo import ArticleRepository
from pipeline.parser import FeedItem


class DeduplicationService:
    """
    Separates new feed items from ones already stored.

    One instance lives for one fetch cycle and remembers every link it has
    let through, so an item repeated in the same feed, or carried by two
    sources, is only inserted once.
    """

    def __init__(self, article_repo: ArticleRepository):
        self.article_repo = article_repo
        self.seen: Set[str] = set()

    async def filter_new(self, items: List[FeedItem]) -> List[FeedItem]:
        """
        Return the items whose source_url is neither stored nor seen this cycle.

        Feed order is preserved.
        """
        links = list({item.link for item in items})
        existing = await self.article_repo.get_existing_source_urls(links)

        new_items = []
        for item in items:
            if item.link in existing or item.link in self.seen:
                continue
            self.seen.add(item.link)
            new_items.append(item)

        return new_items
