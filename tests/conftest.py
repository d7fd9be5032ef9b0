"""Pytest configuration and fixtures."""
import pytest
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock, AsyncMock

from database.repositories.article_repo import ArticleStatus, is_corrupted
from database.repositories.log_repo import LogStatus
from shared.config import settings
from shared.utils import get_utc_now, slugify, truncate


RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">
  <channel>
    <title>Example AI Blog</title>
    <atom:link href="https://example.com/feed" rel="self" type="application/rss+xml"/>
    <item>
      <title>OpenAI releases a new GPT model for teachers</title>
      <link>https://example.com/gpt-teachers</link>
      <description><![CDATA[<p>The model helps <b>teachers</b> plan lessons.</p>]]></description>
      <pubDate>Mon, 05 Feb 2024 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Machine learning in the classroom</title>
      <link>https://example.com/ml-classroom</link>
      <description>Schools try adaptive learning tools.</description>
      <pubDate>Sun, 04 Feb 2024 08:30:00 +0000</pubDate>
    </item>
    <item>
      <title>Local bakery wins prize</title>
      <link>https://example.com/bakery</link>
      <description>Best sourdough in town.</description>
      <pubDate>Sat, 03 Feb 2024 12:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example AI Blog</title>
  <link href="https://example.com/" rel="alternate"/>
  <entry>
    <title>OpenAI releases a new GPT model for teachers</title>
    <link href="https://example.com/gpt-teachers/replies" rel="replies"/>
    <link href="https://example.com/gpt-teachers" rel="alternate"/>
    <summary type="html">&lt;p&gt;The model helps &lt;b&gt;teachers&lt;/b&gt; plan lessons.&lt;/p&gt;</summary>
    <published>2024-02-05T10:00:00Z</published>
  </entry>
  <entry>
    <title>Machine learning in the classroom</title>
    <link href="https://example.com/ml-classroom"/>
    <summary>Schools try adaptive learning tools.</summary>
    <updated>2024-02-04T08:30:00+00:00</updated>
  </entry>
  <entry>
    <title>Local bakery wins prize</title>
    <link href="https://example.com/bakery"/>
    <summary>Best sourdough in town.</summary>
    <published>2024-02-03T12:00:00Z</published>
  </entry>
</feed>
"""


def rss_feed(*items: Dict[str, str]) -> str:
    """Build a minimal RSS document from title/link/description dicts."""
    body = "".join(
        f"<item><title>{item['title']}</title><link>{item['link']}</link>"
        f"<description>{item.get('description', '')}</description>"
        f"<pubDate>{item.get('pubDate', 'Mon, 05 Feb 2024 10:00:00 GMT')}</pubDate></item>"
        for item in items
    )
    return f'<?xml version="1.0"?><rss version="2.0"><channel><title>t</title>{body}</channel></rss>'


class FakeArticleRepository:
    """In-memory stand-in for ArticleRepository."""

    def __init__(self):
        self.articles: Dict[str, Dict[str, Any]] = {}
        self._next_id = 0

    async def create_article(
        self,
        title,
        source_url,
        source_name,
        published_at,
        original_content="",
        tags=None,
        status=ArticleStatus.PENDING
    ) -> Optional[Dict[str, Any]]:
        if any(a["source_url"] == source_url for a in self.articles.values()):
            return None
        self._next_id += 1
        now = get_utc_now()
        title = truncate(title, settings.title_max_length)
        article = {
            "_id": f"news_{self._next_id}",
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
            "created_at": now,
            "updated_at": now
        }
        self.articles[article["_id"]] = article
        return article

    def add(self, **fields) -> Dict[str, Any]:
        self._next_id += 1
        now = get_utc_now()
        article = {
            "_id": f"news_{self._next_id}",
            "title": "Stored article",
            "source_url": f"https://stored.example.com/{self._next_id}",
            "source_name": "Stored",
            "published_at": now,
            "status": ArticleStatus.PENDING,
            "tags": ["ai"],
            "created_at": now,
            "updated_at": now
        }
        article.update(fields)
        self.articles[article["_id"]] = article
        return article

    async def get_existing_source_urls(self, source_urls: List[str]):
        stored = {a["source_url"] for a in self.articles.values()}
        return {url for url in source_urls if url in stored}

    async def count_by_status(self, status: str) -> int:
        return sum(1 for a in self.articles.values() if a["status"] == status)

    async def has_published(self) -> bool:
        return await self.count_by_status(ArticleStatus.PUBLISHED) > 0

    async def delete_failed_older_than(self, cutoff: datetime) -> int:
        doomed = [
            key for key, a in self.articles.items()
            if a["status"] == ArticleStatus.FAILED and a["created_at"] < cutoff
        ]
        for key in doomed:
            del self.articles[key]
        return len(doomed)

    async def delete_corrupted(self, now: Optional[datetime] = None) -> int:
        now = now or get_utc_now()
        doomed = [key for key, a in self.articles.items() if is_corrupted(a, now)]
        for key in doomed:
            del self.articles[key]
        return len(doomed)

    async def count_all(self) -> int:
        return len(self.articles)


class FakeSourceRepository:
    """In-memory stand-in for SourceRepository."""

    def __init__(self, sources: Optional[List[Dict[str, Any]]] = None):
        self.sources: List[Dict[str, Any]] = []
        self.fetched: List[str] = []
        for source in sources or []:
            self.add(**source)

    def add(self, **fields) -> Dict[str, Any]:
        source = {
            "_id": f"src_{len(self.sources) + 1}",
            "name": f"Source {len(self.sources) + 1}",
            "url": f"https://feeds.example.com/{len(self.sources) + 1}",
            "source_type": "rss",
            "is_active": True,
            "last_fetched": None,
            "fetch_interval": "03:00:00"
        }
        source.update(fields)
        self.sources.append(source)
        return source

    async def list_active(self) -> List[Dict[str, Any]]:
        return [s for s in self.sources if s["is_active"]]

    async def count_active(self) -> int:
        return len(await self.list_active())

    async def count_all(self) -> int:
        return len(self.sources)

    async def mark_fetched(self, source_id: str, fetched_at=None) -> bool:
        self.fetched.append(source_id)
        for source in self.sources:
            if source["_id"] == source_id:
                source["last_fetched"] = fetched_at or get_utc_now()
                return True
        return False

    async def sync_sources(self, desired: List[Dict[str, Any]]) -> Dict[str, int]:
        stats = {"created": 0, "updated": 0, "deactivated": 0}
        urls = {s["url"] for s in desired}
        for wanted in desired:
            existing = next((s for s in self.sources if s["url"] == wanted["url"]), None)
            if existing:
                existing.update(name=wanted["name"], is_active=True)
                stats["updated"] += 1
            else:
                self.add(**wanted)
                stats["created"] += 1
        for source in self.sources:
            if source["url"] not in urls and source["is_active"]:
                source["is_active"] = False
                stats["deactivated"] += 1
        return stats

    async def replace_all(self, sources: List[Dict[str, Any]]) -> int:
        self.sources = []
        for source in sources:
            self.add(**source)
        return len(self.sources)


class FakeLogRepository:
    """In-memory stand-in for PipelineLogRepository."""

    def __init__(self):
        self.entries: List[Dict[str, Any]] = []

    async def append(self, operation, status, message, details=None, execution_time_ms=None):
        entry = {
            "_id": f"log_{len(self.entries) + 1}",
            "operation": operation,
            "status": status,
            "message": message,
            "details": details or {},
            "execution_time_ms": execution_time_ms,
            "created_at": get_utc_now()
        }
        self.entries.append(entry)
        return entry

    def add(self, **fields) -> Dict[str, Any]:
        entry = {
            "_id": f"log_{len(self.entries) + 1}",
            "operation": "fetch_enhanced_global_news",
            "status": LogStatus.COMPLETED,
            "message": "logged",
            "details": {},
            "execution_time_ms": None,
            "created_at": get_utc_now()
        }
        entry.update(fields)
        self.entries.append(entry)
        return entry

    def with_status(self, status: str) -> List[Dict[str, Any]]:
        return [e for e in self.entries if e["status"] == status]

    async def get_latest(self, operation: str, status: str):
        matches = [e for e in self.entries if e["operation"] == operation and e["status"] == status]
        return max(matches, key=lambda e: e["created_at"]) if matches else None

    async def count_errors_since(self, since: datetime) -> int:
        return sum(1 for e in self.entries if e["status"] == LogStatus.ERROR and e["created_at"] >= since)

    async def get_recent_errors(self, since: datetime, limit: int = 5):
        errors = [e for e in self.entries if e["status"] == LogStatus.ERROR and e["created_at"] >= since]
        return sorted(errors, key=lambda e: e["created_at"], reverse=True)[:limit]

    async def delete_older_than(self, cutoff: datetime) -> int:
        before = len(self.entries)
        self.entries = [e for e in self.entries if e["created_at"] >= cutoff]
        return before - len(self.entries)

    async def count_all(self) -> int:
        return len(self.entries)


class FakeFetcher:
    """Fetcher double mapping source URL to a payload or an exception."""

    def __init__(self, responses: Dict[str, Any]):
        self.responses = responses
        self.requested: List[str] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    async def fetch(self, source: Dict[str, Any]) -> str:
        self.requested.append(source["url"])
        response = self.responses[source["url"]]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def mock_mongo_db():
    """Create mock MongoDB database."""
    db = MagicMock()

    for name in ("ai_news", "news_sources", "pipeline_logs"):
        collection = MagicMock()
        collection.find_one = AsyncMock(return_value=None)
        collection.insert_one = AsyncMock()
        collection.update_one = AsyncMock()
        collection.update_many = AsyncMock()
        collection.delete_many = AsyncMock()
        collection.count_documents = AsyncMock(return_value=0)
        collection.find_one_and_update = AsyncMock(return_value=None)
        collection.find = MagicMock()
        setattr(db, name, collection)

    db.command = AsyncMock(return_value={"ok": 1})
    return db


@pytest.fixture
def mock_redis_client():
    """Create mock Redis client."""
    redis = AsyncMock()
    redis.publish = AsyncMock(return_value=1)
    return redis


@pytest.fixture
def fixed_now():
    """Current time, frozen for the duration of a test."""
    return get_utc_now()


@pytest.fixture
def article_store():
    return FakeArticleRepository()


@pytest.fixture
def source_store():
    return FakeSourceRepository()


@pytest.fixture
def log_store():
    return FakeLogRepository()


@pytest.fixture
def sample_article():
    """Create sample stored article data."""
    now = datetime(2024, 2, 5, 10, 0, tzinfo=timezone.utc)
    return {
        "_id": "news_test001",
        "title": "OpenAI releases a new GPT model for teachers",
        "slug": "openai-releases-a-new-gpt-model-for-teachers",
        "original_content": "The model helps teachers plan lessons.",
        "summary": "A short summary.",
        "tags": ["ai", "gpt", "openai", "teacher"],
        "source_url": "https://example.com/gpt-teachers",
        "source_name": "Example AI Blog",
        "published_at": now,
        "processed_at": now,
        "status": "published",
        "featured": True,
        "view_count": 3,
        "influence_score": None,
        "education_relevance": None,
        "created_at": now,
        "updated_at": now
    }


@pytest.fixture
def sample_source():
    """Create sample source data."""
    now = datetime(2024, 2, 5, 10, 0, tzinfo=timezone.utc)
    return {
        "_id": "src_test001",
        "name": "Example AI Blog",
        "url": "https://example.com/feed",
        "source_type": "rss",
        "is_active": True,
        "last_fetched": None,
        "fetch_interval": "03:00:00",
        "created_at": now,
        "updated_at": now
    }


@pytest.fixture
def build_rss():
    """Factory for small RSS documents."""
    return rss_feed


@pytest.fixture
def make_fetcher():
    """Factory for FakeFetcher instances."""
    return FakeFetcher


@pytest.fixture
def rss_payload():
    return RSS_FEED


@pytest.fixture
def atom_payload():
    return ATOM_FEED
