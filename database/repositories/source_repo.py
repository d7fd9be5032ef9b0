"""Source repository for CRUD operations on the news_sources collection."""
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from shared.utils import generate_source_id, get_utc_now

logger = logging.getLogger(__name__)


class SourceType:
    """Source type constants."""
    RSS = "rss"
    API = "api"
    WEB_SCRAPING = "web_scraping"


UPDATABLE_FIELDS = {"name", "url", "source_type", "is_active", "fetch_interval"}


class SourceRepository:
    """Repository for NewsSource CRUD operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.news_sources

    def _new_source(
        self,
        name: str,
        url: str,
        source_type: str = SourceType.RSS,
        is_active: bool = True,
        fetch_interval: str = "03:00:00"
    ) -> Dict[str, Any]:
        now = get_utc_now()
        return {
            "_id": generate_source_id(),
            "name": name,
            "url": url,
            "source_type": source_type,
            "is_active": is_active,
            "last_fetched": None,
            "fetch_interval": fetch_interval,
            "created_at": now,
            "updated_at": now
        }

    async def create_source(
        self,
        name: str,
        url: str,
        source_type: str = SourceType.RSS,
        is_active: bool = True,
        fetch_interval: str = "03:00:00"
    ) -> Dict[str, Any]:
        """Create a new source record."""
        source = self._new_source(name, url, source_type, is_active, fetch_interval)
        await self.collection.insert_one(source)
        return source

    async def get_source_by_url(self, url: str) -> Optional[Dict[str, Any]]:
        """Get a source by its feed URL."""
        return await self.collection.find_one({"url": url})

    async def list_sources(self) -> List[Dict[str, Any]]:
        """List all sources ordered by name."""
        cursor = self.collection.find({}).sort("name", 1)
        return await cursor.to_list(length=None)

    async def list_active(self) -> List[Dict[str, Any]]:
        """List sources that should be polled."""
        cursor = self.collection.find({"is_active": True})
        return await cursor.to_list(length=None)

    async def count_active(self) -> int:
        """Count active sources."""
        return await self.collection.count_documents({"is_active": True})

    async def count_all(self) -> int:
        """Count every source, active or not."""
        return await self.collection.count_documents({})

    async def update_source(self, source_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply admin updates to a source and return the new document."""
        changes = {key: value for key, value in updates.items() if key in UPDATABLE_FIELDS}
        changes["updated_at"] = get_utc_now()

        return await self.collection.find_one_and_update(
            {"_id": source_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER
        )

    async def mark_fetched(self, source_id: str, fetched_at: Optional[datetime] = None) -> bool:
        """Record the time of the latest poll of a source."""
        fetched_at = fetched_at or get_utc_now()
        result = await self.collection.update_one(
            {"_id": source_id},
            {"$set": {"last_fetched": fetched_at, "updated_at": fetched_at}}
        )
        return result.modified_count > 0

    async def sync_sources(self, desired: List[Dict[str, Any]]) -> Dict[str, int]:
        """
        Make the active source set match the desired list.

        Sources are matched by URL. Existing ones are updated in place, so their
        last_fetched checkpoint survives; sources not in the list are deactivated,
        never deleted.

        Returns:
            Counts of created, updated and deactivated sources
        """
        stats = {"created": 0, "updated": 0, "deactivated": 0}
        urls = [source["url"] for source in desired]

        for source in desired:
            result = await self.collection.update_one(
                {"url": source["url"]},
                {
                    "$set": {
                        "name": source["name"],
                        "source_type": source.get("source_type", SourceType.RSS),
                        "fetch_interval": source.get("fetch_interval", "03:00:00"),
                        "is_active": True,
                        "updated_at": get_utc_now()
                    }
                }
            )
            if result.matched_count:
                stats["updated"] += 1
            else:
                await self.collection.insert_one(self._new_source(
                    name=source["name"],
                    url=source["url"],
                    source_type=source.get("source_type", SourceType.RSS),
                    fetch_interval=source.get("fetch_interval", "03:00:00")
                ))
                stats["created"] += 1

        result = await self.collection.update_many(
            {"url": {"$nin": urls}, "is_active": True},
            {"$set": {"is_active": False, "updated_at": get_utc_now()}}
        )
        stats["deactivated"] = result.modified_count
        return stats

    async def replace_all(self, sources: List[Dict[str, Any]]) -> int:
        """Delete every source and insert the given list. Destructive."""
        await self.collection.delete_many({})

        inserted = 0
        for source in sources:
            try:
                await self.collection.insert_one(self._new_source(
                    name=source["name"],
                    url=source["url"],
                    source_type=source.get("source_type", SourceType.RSS),
                    is_active=source.get("is_active", True),
                    fetch_interval=source.get("fetch_interval", "03:00:00")
                ))
                inserted += 1
                logger.info(f"Source registered: {source['name']}")
            except Exception as e:
                logger.error(f"Failed to insert source {source['name']}: {e}")
        return inserted
