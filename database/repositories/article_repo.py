"""Article repository for CRUD operations on the ai_news collection."""
import logging
import re
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any, Iterable, Set
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from database.events import ChangeType
from shared.config import settings
from shared.utils import generate_article_id, get_utc_now, slugify, truncate

logger = logging.getLogger(__name__)


class ArticleStatus:
    """Article status constants."""
    PENDING = "pending"
    PROCESSING = "processing"
    PUBLISHED = "published"
    FAILED = "failed"


# Target status -> statuses it may be reached from. Status never moves backwards.
ALLOWED_TRANSITIONS = {
    ArticleStatus.PROCESSING: [ArticleStatus.PENDING],
    ArticleStatus.PUBLISHED: [ArticleStatus.PROCESSING],
    ArticleStatus.FAILED: [ArticleStatus.PENDING, ArticleStatus.PROCESSING],
}

# Numeric HTML entities left in a title mean the upstream text was double-encoded.
CORRUPTED_TITLE_PATTERN = r"&#x?[0-9a-fA-F]+;"


def future_date_cutoff(now: datetime, tolerance: Optional[timedelta] = None) -> datetime:
    """Latest publish date that is still considered plausible."""
    if tolerance is None:
        tolerance = timedelta(hours=settings.future_date_tolerance_hours)
    return now + tolerance


def corruption_query(now: datetime, tolerance: Optional[timedelta] = None) -> Dict[str, Any]:
    """Mongo filter matching articles with the corruption signature."""
    return {
        "$or": [
            {"published_at": {"$gt": future_date_cutoff(now, tolerance)}},
            {"title": {"$regex": CORRUPTED_TITLE_PATTERN}},
        ]
    }


def is_corrupted(article: Dict[str, Any], now: datetime, tolerance: Optional[timedelta] = None) -> bool:
    """In-memory counterpart of corruption_query."""
    published_at = article.get("published_at")
    if published_at is not None and published_at > future_date_cutoff(now, tolerance):
        return True
    return bool(re.search(CORRUPTED_TITLE_PATTERN, article.get("title") or ""))


class ArticleRepository:
    """Repository for NewsArticle CRUD operations."""

    def __init__(self, db: AsyncIOMotorDatabase, events=None):
        self.collection = db.ai_news
        self.events = events

    async def create_article(
        self,
        title: str,
        source_url: str,
        source_name: str,
        published_at: datetime,
        original_content: str = "",
        tags: Optional[Iterable[str]] = None,
        status: str = ArticleStatus.PENDING
    ) -> Optional[Dict[str, Any]]:
        """
        Create a new article record.

        The title is cut to the configured bound. Returns None when an article
        with the same source_url already exists.
        """
        article_id = generate_article_id()
        now = get_utc_now()
        title = truncate(title, settings.title_max_length)

        article = {
            "_id": article_id,
            "title": title,
            "slug": slugify(title),
            "original_content": original_content,
            "summary": None,
            "tags": sorted(set(tags or [])),
            "source_url": source_url,
            "source_name": source_name,
            "published_at": published_at,
            "processed_at": None,
            "status": status,
            "featured": False,
            "view_count": 0,
            "influence_score": None,
            "education_relevance": None,
            "created_at": now,
            "updated_at": now
        }

        try:
            await self.collection.insert_one(article)
        except DuplicateKeyError:
            logger.debug(f"Article already stored: {source_url}")
            return None

        if self.events:
            await self.events.publish_article_change(ChangeType.INSERT, article)
        return article

    async def get_existing_source_urls(self, source_urls: List[str]) -> Set[str]:
        """Return the subset of source_urls that are already stored."""
        if not source_urls:
            return set()
        cursor = self.collection.find(
            {"source_url": {"$in": source_urls}},
            {"source_url": 1}
        )
        articles = await cursor.to_list(length=len(source_urls))
        return {article["source_url"] for article in articles}

    async def update_article_status(
        self,
        article_id: str,
        status: str,
        summary: Optional[str] = None
    ) -> bool:
        """
        Move an article forward in its lifecycle.

        Returns False when the article does not exist or the transition would
        move the status backwards.
        """
        allowed_from = ALLOWED_TRANSITIONS.get(status)
        if not allowed_from:
            raise ValueError(f"Unknown target status: {status}")

        now = get_utc_now()
        update = {
            "$set": {
                "status": status,
                "updated_at": now
            }
        }
        if summary is not None:
            update["$set"]["summary"] = summary
        if status == ArticleStatus.PUBLISHED:
            update["$set"]["processed_at"] = now

        result = await self.collection.find_one_and_update(
            {"_id": article_id, "status": {"$in": allowed_from}},
            update,
            return_document=ReturnDocument.AFTER
        )
        if result is None:
            return False

        if self.events:
            await self.events.publish_article_change(ChangeType.UPDATE, result)
        return True

    async def count_by_status(self, status: str) -> int:
        """Count articles in a given status."""
        return await self.collection.count_documents({"status": status})

    async def has_published(self) -> bool:
        """Check whether at least one article has been published."""
        article = await self.collection.find_one(
            {"status": ArticleStatus.PUBLISHED},
            {"_id": 1}
        )
        return article is not None

    async def list_published(
        self,
        tag: Optional[str] = None,
        limit: int = 20,
        now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """List published articles, newest first, hiding corrupted ones."""
        query: Dict[str, Any] = {
            "status": ArticleStatus.PUBLISHED,
            "$nor": corruption_query(now or get_utc_now())["$or"]
        }
        if tag and tag != "all":
            query["tags"] = tag

        cursor = self.collection.find(query).sort("published_at", -1).limit(limit)
        return await cursor.to_list(length=limit)

    async def get_featured(self, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        """Get the newest featured, published, non-corrupted article."""
        query = {
            "status": ArticleStatus.PUBLISHED,
            "featured": True,
            "$nor": corruption_query(now or get_utc_now())["$or"]
        }
        return await self.collection.find_one(query, sort=[("published_at", -1)])

    async def increment_view_count(self, article_id: str) -> bool:
        """Increment the view count for an article."""
        result = await self.collection.update_one(
            {"_id": article_id},
            {
                "$inc": {"view_count": 1},
                "$set": {"updated_at": get_utc_now()}
            }
        )
        return result.modified_count > 0

    async def delete_failed_older_than(self, cutoff: datetime) -> int:
        """Delete failed articles created strictly before the cutoff."""
        result = await self.collection.delete_many({
            "status": ArticleStatus.FAILED,
            "created_at": {"$lt": cutoff}
        })
        return result.deleted_count

    async def delete_corrupted(self, now: Optional[datetime] = None) -> int:
        """Delete articles matching the corruption signature."""
        result = await self.collection.delete_many(corruption_query(now or get_utc_now()))
        return result.deleted_count

    async def count_all(self) -> int:
        """Count all stored articles."""
        return await self.collection.count_documents({})
