"""Request schemas for API endpoints."""
import re
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from api.models.article import ArticleStatusEnum
from api.models.source import SourceTypeEnum
from shared.utils import validate_url

FETCH_INTERVAL_PATTERN = re.compile(r"^\d{2}:\d{2}:\d{2}$")


def _check_url(v: str) -> str:
    if not validate_url(v):
        raise ValueError('URL must be an absolute http:// or https:// address')
    return v


def _check_interval(v: str) -> str:
    if not FETCH_INTERVAL_PATTERN.match(v):
        raise ValueError('fetch_interval must look like HH:MM:SS')
    return v


class SourceCreateRequest(BaseModel):
    """Request schema for registering a news source."""
    name: str = Field(..., min_length=1, max_length=200, description="Display name of the source")
    url: str = Field(..., description="Feed URL")
    source_type: SourceTypeEnum = Field(default=SourceTypeEnum.RSS, description="How the source is polled")
    is_active: bool = Field(default=True, description="Whether the source is polled")
    fetch_interval: str = Field(default="03:00:00", description="Advisory poll interval (HH:MM:SS)")

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format."""
        return _check_url(v)

    @field_validator('fetch_interval')
    @classmethod
    def validate_fetch_interval(cls, v: str) -> str:
        return _check_interval(v)


class SourceUpdateRequest(BaseModel):
    """Request schema for updating a news source. Omitted fields are left unchanged."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    url: Optional[str] = Field(default=None)
    is_active: Optional[bool] = Field(default=None)
    fetch_interval: Optional[str] = Field(default=None)

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate URL format."""
        return _check_url(v) if v is not None else v

    @field_validator('fetch_interval')
    @classmethod
    def validate_fetch_interval(cls, v: Optional[str]) -> Optional[str]:
        return _check_interval(v) if v is not None else v


class ArticleStatusUpdateRequest(BaseModel):
    """Request schema for the summarizer reporting an article's new status."""
    status: ArticleStatusEnum = Field(..., description="Target status")
    summary: Optional[str] = Field(default=None, description="Generated summary, when published")
