"""Realtime monitoring of article and pipeline log changes over Redis pub/sub."""
import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
import redis.asyncio as redis
from database.events import ChangeType
from database.repositories.article_repo import ArticleStatus
from database.repositories.log_repo import LogStatus
from shared.config import settings

logger = logging.getLogger(__name__)

EventHandler = Callable[[Dict[str, Any]], Awaitable[None]]


async def log_change_event(event: Dict[str, Any]):
    """Default handler: write notable changes to the application log."""
    table = event.get("table")
    change_type = event.get("type")
    record = event.get("record") or {}

    if table == "ai_news":
        if change_type == ChangeType.INSERT:
            logger.info(f"New article inserted: {record.get('title')}")
        elif change_type == ChangeType.UPDATE and record.get("status") == ArticleStatus.PUBLISHED:
            logger.info(f"Article published: {record.get('title')}")

    elif table == "pipeline_logs" and change_type == ChangeType.INSERT:
        if record.get("status") == LogStatus.ERROR:
            logger.error(f"Pipeline error: {record.get('message')}")
        elif record.get("status") == LogStatus.COMPLETED:
            logger.info(f"Operation complete: {record.get('operation')}")


class RealtimeMonitor:
    """
    Subscription handle for change events.

    Use `async with RealtimeMonitor(redis_client):` or call start()/stop()
    explicitly. stop() is idempotent and always releases the subscription.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        handlers: Optional[List[EventHandler]] = None,
        channels: Optional[List[str]] = None
    ):
        self.redis = redis_client
        self.handlers = list(handlers) if handlers is not None else [log_change_event]
        self.channels = channels or [settings.redis_news_channel, settings.redis_logs_channel]
        self._pubsub = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> "RealtimeMonitor":
        """Subscribe to the change channels and start dispatching events."""
        if self._task is not None:
            return self

        pubsub = self.redis.pubsub()
        try:
            await pubsub.subscribe(*self.channels)
        except Exception:
            await pubsub.aclose()
            raise

        self._pubsub = pubsub
        self._task = asyncio.create_task(self._listen())
        logger.info(f"Realtime monitoring started on {', '.join(self.channels)}")
        return self

    async def stop(self):
        """Cancel the listener and release the subscription."""
        task, self._task = self._task, None
        try:
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                except Exception as e:
                    logger.warning(f"Realtime listener had failed: {e}")
        finally:
            pubsub, self._pubsub = self._pubsub, None
            if pubsub is not None:
                try:
                    await pubsub.unsubscribe(*self.channels)
                except Exception as e:
                    logger.warning(f"Failed to unsubscribe from change channels: {e}")
                finally:
                    await pubsub.aclose()
                logger.info("Realtime monitoring stopped")

    async def __aenter__(self) -> "RealtimeMonitor":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    async def _listen(self):
        async for message in self._pubsub.listen():
            if message["type"] != "message":
                continue
            try:
                event = json.loads(message["data"])
            except (TypeError, json.JSONDecodeError) as e:
                logger.warning(f"Discarding malformed change event: {e}")
                continue
            await self.dispatch(event)

    async def dispatch(self, event: Dict[str, Any]):
        """Hand an event to every handler; one failing handler does not stop the rest."""
        for handler in self.handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.warning(f"Change event handler failed: {e}")
