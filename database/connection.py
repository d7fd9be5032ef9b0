"""Database connection setup for MongoDB and Redis."""
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
import redis.asyncio as redis
from shared.config import settings
from shared.errors import ConfigurationError


class DatabaseConnection:
    """Manages MongoDB and Redis connections."""

    _mongo_client: Optional[AsyncIOMotorClient] = None
    _redis_client: Optional[redis.Redis] = None
    _db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def init_mongo(cls) -> AsyncIOMotorDatabase:
        """Initialize MongoDB connection."""
        if cls._mongo_client is None:
            if not settings.mongo_url or not settings.mongo_db_name:
                raise ConfigurationError(
                    "MongoDB connection info missing: set MONGO_URL and MONGO_DB_NAME"
                )
            cls._mongo_client = AsyncIOMotorClient(settings.mongo_url, tz_aware=True)
            cls._db = cls._mongo_client[settings.mongo_db_name]
            await cls._setup_indexes()
        return cls._db

    @classmethod
    async def _setup_indexes(cls):
        """Set up MongoDB indexes for the pipeline collections."""
        if cls._db is None:
            return

        # Articles collection indexes
        await cls._db.ai_news.create_index("source_url", unique=True)
        await cls._db.ai_news.create_index("status")
        await cls._db.ai_news.create_index("published_at")
        await cls._db.ai_news.create_index("created_at")

        # Sources collection indexes
        await cls._db.news_sources.create_index("is_active")
        await cls._db.news_sources.create_index("url")

        # Pipeline logs collection indexes
        await cls._db.pipeline_logs.create_index("created_at")
        await cls._db.pipeline_logs.create_index([("operation", 1), ("status", 1), ("created_at", -1)])

    @classmethod
    async def get_mongo_db(cls) -> AsyncIOMotorDatabase:
        """Get MongoDB database instance."""
        if cls._db is None:
            await cls.init_mongo()
        return cls._db

    @classmethod
    async def init_redis(cls) -> redis.Redis:
        """Initialize Redis connection."""
        if cls._redis_client is None:
            if not settings.redis_url:
                raise ConfigurationError("Redis connection info missing: set REDIS_URL")
            cls._redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=True
            )
        return cls._redis_client

    @classmethod
    async def get_redis(cls) -> redis.Redis:
        """Get Redis client instance."""
        if cls._redis_client is None:
            await cls.init_redis()
        return cls._redis_client

    @classmethod
    async def close_connections(cls):
        """Close all database connections."""
        if cls._mongo_client:
            cls._mongo_client.close()
            cls._mongo_client = None
            cls._db = None
        if cls._redis_client:
            await cls._redis_client.aclose()
            cls._redis_client = None


# Convenience functions
async def get_db() -> AsyncIOMotorDatabase:
    """Dependency for getting MongoDB database."""
    return await DatabaseConnection.get_mongo_db()


async def get_redis() -> redis.Redis:
    """Dependency for getting Redis client."""
    return await DatabaseConnection.get_redis()
