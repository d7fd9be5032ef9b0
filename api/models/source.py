"""News source model definitions."""
from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class SourceTypeEnum(str, Enum):
    """Source type enumeration."""
    RSS = "rss"
    API = "api"
    WEB_SCRAPING = "web_scraping"


class NewsSourceModel(BaseModel):
    """News source model for database representation."""
    id: str = Field(alias="_id")
    name: str
    url: str
    source_type: SourceTypeEnum
    is_active: bool
    last_fetched: Optional[datetime] = None
    fetch_interval: str
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True
