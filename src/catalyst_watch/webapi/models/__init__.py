"""API Models package for response schemas."""

from .responses import (
    BaseResponse,
    ConsolidationData,
    ConsolidationListResponse,
    ErrorResponse,
    HealthResponse,
    HealthStatus,
    MessageResponse,
    StatusResponse,
    SuccessResponse,
)

__all__ = [
    "BaseResponse",
    "ConsolidationData",
    "ConsolidationListResponse",
    "ErrorResponse",
    "HealthResponse",
    "HealthStatus",
    "MessageResponse",
    "StatusResponse",
    "SuccessResponse",
]
