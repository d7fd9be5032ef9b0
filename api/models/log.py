"""Pipeline log model definitions."""
from enum import Enum
from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class LogStatusEnum(str, Enum):
    """Pipeline log status enumeration."""
    STARTED = "started"
    COMPLETED = "completed"
    ERROR = "error"


class PipelineLogModel(BaseModel):
    """Pipeline log entry model for database representation."""
    id: str = Field(alias="_id")
    operation: str
    status: LogStatusEnum
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
    execution_time_ms: Optional[int] = None
    created_at: datetime

    class Config:
        populate_by_name = True
