"""Pipeline log repository: append-only operational history."""
from datetime import datetime
from typing import Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from database.events import ChangeType
from shared.utils import generate_log_id, get_utc_now


class LogStatus:
    """Pipeline log status constants."""
    STARTED = "started"
    COMPLETED = "completed"
    ERROR = "error"


class LogOperation:
    """Operation names written to the pipeline log."""
    FETCH = "fetch_enhanced_global_news"
    SUMMARY = "process_summaries_openai_first"
    SETUP = "setup_automation"
    CLEANUP = "automatic_cleanup"
    RESET = "system_reset"


class PipelineLogRepository:
    """Repository for PipelineLogEntry records."""

    def __init__(self, db: AsyncIOMotorDatabase, events=None):
        self.collection = db.pipeline_logs
        self.events = events

    async def append(
        self,
        operation: str,
        status: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        execution_time_ms: Optional[int] = None
    ) -> Dict[str, Any]:
        """Append a new log entry."""
        entry = {
            "_id": generate_log_id(),
            "operation": operation,
            "status": status,
            "message": message,
            "details": details or {},
            "execution_time_ms": execution_time_ms,
            "created_at": get_utc_now()
        }

        await self.collection.insert_one(entry)

        if self.events:
            await self.events.publish_log_change(ChangeType.INSERT, entry)
        return entry

    async def get_latest(self, operation: str, status: str) -> Optional[Dict[str, Any]]:
        """Get the newest entry for an operation in a given status."""
        return await self.collection.find_one(
            {"operation": operation, "status": status},
            sort=[("created_at", -1)]
        )

    async def get_recent_errors(self, since: datetime, limit: int = 5) -> List[Dict[str, Any]]:
        """Get error entries created at or after `since`, newest first."""
        cursor = self.collection.find(
            {"status": LogStatus.ERROR, "created_at": {"$gte": since}}
        ).sort("created_at", -1).limit(limit)
        return await cursor.to_list(length=limit)

    async def count_errors_since(self, since: datetime) -> int:
        """Count error entries created at or after `since`."""
        return await self.collection.count_documents(
            {"status": LogStatus.ERROR, "created_at": {"$gte": since}}
        )

    async def list_logs(self, operation: Optional[str] = None, limit: int = 50) -> List[Dict[str, Any]]:
        """List log entries with optional operation filter, newest first."""
        query = {}
        if operation:
            query["operation"] = operation

        cursor = self.collection.find(query).sort("created_at", -1).limit(limit)
        return await cursor.to_list(length=limit)

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete entries created strictly before the cutoff."""
        result = await self.collection.delete_many({"created_at": {"$lt": cutoff}})
        return result.deleted_count

    async def count_all(self) -> int:
        """Count every log entry."""
        return await self.collection.count_documents({})
