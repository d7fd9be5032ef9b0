"""News article model definitions."""
from enum import Enum
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class ArticleStatusEnum(str, Enum):
    """Article status enumeration."""
    PENDING = "pending"
    PROCESSING = "processing"
    PUBLISHED = "published"
    FAILED = "failed"


class NewsArticleModel(BaseModel):
    """News article model for database representation."""
    id: str = Field(alias="_id")
    title: str
    slug: Optional[str] = None
    original_content: str = ""
    summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    source_url: str
    source_name: str
    published_at: datetime
    processed_at: Optional[datetime] = None
    status: ArticleStatusEnum
    featured: bool = False
    view_count: int = 0
    influence_score: Optional[float] = None
    education_relevance: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True
