# Schemas module
from .requests import SourceCreateRequest, SourceUpdateRequest, ArticleStatusUpdateRequest
from .responses import (
    OperationResponse,
    AutomationStatusResponse,
    HealthResponse,
    DiagnosticsResponse,
    ViewCountResponse,
    ErrorResponse
)

__all__ = [
    "SourceCreateRequest",
    "SourceUpdateRequest",
    "ArticleStatusUpdateRequest",
    "OperationResponse",
    "AutomationStatusResponse",
    "HealthResponse",
    "DiagnosticsResponse",
    "ViewCountResponse",
    "ErrorResponse"
]
