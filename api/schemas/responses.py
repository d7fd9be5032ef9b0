"""Response schemas for API endpoints."""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class OperationResponse(BaseModel):
    """Response schema for automation operations."""
    success: bool = Field(..., description="Whether the operation succeeded")
    message: str = Field(..., description="Human-readable outcome")


class AutomationStatusResponse(BaseModel):
    """Response schema for automation status."""
    is_running: bool = Field(..., description="Whether status could be read")
    last_fetch: Optional[datetime] = Field(None, description="Time of the last completed fetch")
    last_summary: Optional[datetime] = Field(None, description="Time of the last completed summary run")
    next_scheduled_fetch: Optional[datetime] = Field(None, description="When the next fetch is due")
    articles_in_queue: int = Field(..., description="Number of pending articles")
    system_health: str = Field(..., description="healthy, warning or error")
    errors: List[str] = Field(default_factory=list, description="Messages of recent error log entries")


class HealthResponse(BaseModel):
    """Response schema for the system health check."""
    healthy: bool = Field(..., description="True when no issues were found")
    issues: List[str] = Field(default_factory=list, description="Problems found")


class DiagnosticsResponse(BaseModel):
    """Response schema for system diagnostics."""
    config_present: bool = Field(..., description="Storage connection info is configured")
    collections_accessible: bool = Field(..., description="All pipeline collections can be read")
    summarizer_configured: bool = Field(..., description="A summarizer endpoint is configured")
    has_data: bool = Field(..., description="At least one article is stored")
    errors: List[str] = Field(default_factory=list, description="Problems found")


class ViewCountResponse(BaseModel):
    """Response schema for view counting."""
    article_id: str = Field(..., description="Article identifier")
    counted: bool = Field(..., description="Whether the view was recorded")


class ErrorResponse(BaseModel):
    """Schema for error responses."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
