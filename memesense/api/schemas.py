"""Pydantic schemas for API requests and responses.

All API responses follow a consistent structure:
{
    "success": true/false,
    "data": <response-specific data>,
    "error": "error message if failed",
    "meta": {"error_code": "CODE", "timestamp": "..."}
}
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from ..notifier import Notification
from ..services.session_service import Session


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Session errors
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"

    # Workflow errors
    INVALID_IMAGE = "INVALID_IMAGE"
    NO_IMAGE_SELECTED = "NO_IMAGE_SELECTED"
    CLASSIFICATION_IN_PROGRESS = "CLASSIFICATION_IN_PROGRESS"


# =============================================================================
# Response Meta
# =============================================================================

class ResponseMeta(BaseModel):
    """Metadata included in all API responses."""
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )
    error_code: ErrorCode | None = None


# =============================================================================
# Generic API Response
# =============================================================================

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Generic wrapper for all API responses.

    Usage:
        return APIResponse.ok(MyData(...))
        return APIResponse.fail("Something failed", ErrorCode.INTERNAL_ERROR)
    """
    success: bool
    data: T | None = None
    error: str | None = None
    meta: ResponseMeta = Field(default_factory=ResponseMeta)

    @classmethod
    def ok(cls, data: T, **meta_kwargs) -> "APIResponse[T]":
        """Create a successful response."""
        return cls(
            success=True,
            data=data,
            meta=ResponseMeta(**meta_kwargs)
        )

    @classmethod
    def fail(cls, error: str, error_code: ErrorCode = ErrorCode.INTERNAL_ERROR) -> "APIResponse[None]":
        """Create an error response."""
        return cls(
            success=False,
            error=error,
            meta=ResponseMeta(error_code=error_code)
        )


# =============================================================================
# Data Models (used in responses)
# =============================================================================

class ImageData(BaseModel):
    """The selected image, with its preview."""
    filename: str
    media_type: str
    size_bytes: int
    width: int | None = None
    height: int | None = None
    preview: str


class StageData(BaseModel):
    """The progress stage currently shown."""
    index: int
    name: str
    duration_ms: int
    total: int


class ProbabilitiesData(BaseModel):
    safe: float
    explicit: float


class ResultData(BaseModel):
    """Classification verdict for the selected image."""
    label: str
    classification: str
    confidence_percent: float
    probabilities: ProbabilitiesData
    raw_text: str
    clean_text: str


class SessionData(BaseModel):
    """Workflow snapshot of one session."""
    session_id: str
    state: str
    input_key: str
    is_drag_over: bool
    image: ImageData | None = None
    stage: StageData | None = None
    result: ResultData | None = None


class NotificationData(BaseModel):
    message: str
    severity: str
    auto_close_ms: int
    created_at: float


class NotificationListData(BaseModel):
    notifications: list[NotificationData]


class ActionData(BaseModel):
    message: str


# =============================================================================
# Request Models
# =============================================================================

class DragRequest(BaseModel):
    """Cosmetic drag-over signal."""
    over: bool


# =============================================================================
# Response Type Aliases (for cleaner route signatures)
# =============================================================================

HealthResponse = APIResponse[dict]
SessionResponse = APIResponse[SessionData]
NotificationListResponse = APIResponse[NotificationListData]
ActionResponse = APIResponse[ActionData]


# =============================================================================
# Conversion Utilities
# =============================================================================

def session_to_data(session: Session) -> SessionData:
    """Convert a Session to its SessionData response model."""
    return SessionData.model_validate(session.to_dict())


def notifications_to_data(notifications: list[Notification]) -> NotificationListData:
    """Convert notifications to the response model."""
    return NotificationListData(
        notifications=[NotificationData(**n.to_dict()) for n in notifications]
    )
