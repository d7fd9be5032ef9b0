"""Change-event publisher for realtime monitoring over Redis pub/sub."""
import json
import logging
from datetime import datetime
from typing import Any, Dict
import redis.asyncio as redis
from redis.exceptions import RedisError
from shared.config import settings

logger = logging.getLogger(__name__)


class ChangeType:
    """Change event type constants."""
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, set):
        return sorted(value)
    return str(value)


class ChangePublisher:
    """Publishes insert/update events for articles and pipeline logs."""

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client
        self.news_channel = settings.redis_news_channel
        self.logs_channel = settings.redis_logs_channel

    async def publish_article_change(self, change_type: str, record: Dict[str, Any]):
        """Publish a change on the ai_news collection."""
        await self._publish(self.news_channel, "ai_news", change_type, record)

    async def publish_log_change(self, change_type: str, record: Dict[str, Any]):
        """Publish a change on the pipeline_logs collection."""
        await self._publish(self.logs_channel, "pipeline_logs", change_type, record)

    async def _publish(self, channel: str, table: str, change_type: str, record: Dict[str, Any]):
        message = {
            "type": change_type,
            "table": table,
            "record": record
        }
        # Monitoring is passive: a Redis outage must not fail the write that triggered it.
        try:
            await self.redis.publish(channel, json.dumps(message, default=_json_default))
        except RedisError as e:
            logger.warning(f"Failed to publish {change_type} event on {channel}: {e}")
