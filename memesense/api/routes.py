"""API route definitions.

All endpoints return consistent APIResponse[T] structure with error codes.
"""
import asyncio

import structlog
from fastapi import APIRouter, Depends, File, Request, UploadFile

from .. import __version__
from ..intake import DropEvent, FileHandle
from ..services import SessionService
from .schemas import (
    ActionData,
    ActionResponse,
    APIResponse,
    DragRequest,
    ErrorCode,
    HealthResponse,
    NotificationListResponse,
    SessionResponse,
    notifications_to_data,
    session_to_data,
)

logger = structlog.get_logger()
router = APIRouter()


def get_session_service(request: Request) -> SessionService:
    """Get session service from app state."""
    return request.app.state.session_service


async def _read_upload(upload: UploadFile) -> FileHandle:
    content = await upload.read()
    return FileHandle(
        filename=upload.filename or "upload",
        content=content,
        content_type=upload.content_type,
    )


def _session_not_found(session_id: str) -> APIResponse:
    return APIResponse.fail(f"Session not found: {session_id}", ErrorCode.SESSION_NOT_FOUND)


# =============================================================================
# Health Check
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(service: SessionService = Depends(get_session_service)):
    """Check if the API is running and the classifier is reachable."""
    return APIResponse.ok(
        data={
            "status": "healthy",
            "version": __version__,
            "classifier": service.classifier.name,
            "classifier_healthy": await service.classifier.health_check(),
            **service.get_stats(),
        }
    )


# =============================================================================
# Sessions
# =============================================================================

@router.post("/sessions", response_model=SessionResponse)
async def create_session(service: SessionService = Depends(get_session_service)):
    """Create a session. Use its session_id for every other call."""
    session = service.create_session()
    return APIResponse.ok(data=session_to_data(session))


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    service: SessionService = Depends(get_session_service),
):
    """Get the workflow snapshot of a session (poll this while classifying)."""
    session = service.get_session(session_id)
    if not session:
        return _session_not_found(session_id)
    return APIResponse.ok(data=session_to_data(session))


@router.delete("/sessions/{session_id}", response_model=ActionResponse)
async def delete_session(
    session_id: str,
    service: SessionService = Depends(get_session_service),
):
    """Discard a session and cancel any running classification."""
    if not service.close_session(session_id):
        return _session_not_found(session_id)
    return APIResponse.ok(data=ActionData(message="Session closed"))


# =============================================================================
# Image Intake
# =============================================================================

@router.post("/sessions/{session_id}/image", response_model=SessionResponse)
async def select_image(
    session_id: str,
    image: UploadFile = File(...),
    service: SessionService = Depends(get_session_service),
):
    """Select an image as the file picker would."""
    session = service.get_session(session_id)
    if not session:
        return _session_not_found(session_id)

    handle = await _read_upload(image)
    if not handle.content:
        return APIResponse.fail(f"File is empty: {handle.filename}", ErrorCode.INVALID_IMAGE)

    session.orchestrator.select_file(handle)
    return APIResponse.ok(data=session_to_data(session))


@router.post("/sessions/{session_id}/drop", response_model=SessionResponse)
async def drop_image(
    session_id: str,
    image: UploadFile = File(...),
    service: SessionService = Depends(get_session_service),
):
    """Drop a file on the session; non-image drops are ignored."""
    session = service.get_session(session_id)
    if not session:
        return _session_not_found(session_id)

    handle = await _read_upload(image)
    session.orchestrator.drop(DropEvent(files=(handle,)))
    return APIResponse.ok(data=session_to_data(session))


@router.post("/sessions/{session_id}/drag", response_model=SessionResponse)
async def drag(
    session_id: str,
    request: DragRequest,
    service: SessionService = Depends(get_session_service),
):
    """Toggle the cosmetic drag-over flag."""
    session = service.get_session(session_id)
    if not session:
        return _session_not_found(session_id)

    if request.over:
        session.orchestrator.drag_over()
    else:
        session.orchestrator.drag_leave()
    return APIResponse.ok(data=session_to_data(session))


# =============================================================================
# Classification
# =============================================================================

@router.post("/sessions/{session_id}/classify", response_model=SessionResponse)
async def classify(
    session_id: str,
    service: SessionService = Depends(get_session_service),
):
    """Start classifying the selected image.

    Returns immediately; poll GET /sessions/{session_id} for the stage and
    the verdict, and /notifications for failures.
    """
    session = service.get_session(session_id)
    if not session:
        return _session_not_found(session_id)
    if session.orchestrator.image is None:
        return APIResponse.fail("No image selected", ErrorCode.NO_IMAGE_SELECTED)
    if session.orchestrator.is_classifying:
        return APIResponse.fail(
            "Classification already in progress",
            ErrorCode.CLASSIFICATION_IN_PROGRESS,
        )

    service.start_classification(session_id)
    # Let the task enter its first stage before answering
    await asyncio.sleep(0)
    logger.info("classify_request", session_id=session_id)
    return APIResponse.ok(data=session_to_data(session))


@router.post("/sessions/{session_id}/clear", response_model=SessionResponse)
async def clear(
    session_id: str,
    service: SessionService = Depends(get_session_service),
):
    """Clear the image and result; a running classification is abandoned."""
    session = service.get_session(session_id)
    if not session:
        return _session_not_found(session_id)

    session.orchestrator.clear()
    return APIResponse.ok(data=session_to_data(session))


@router.get("/sessions/{session_id}/notifications", response_model=NotificationListResponse)
async def list_notifications(
    session_id: str,
    service: SessionService = Depends(get_session_service),
):
    """Get notifications that have not auto-dismissed yet."""
    session = service.get_session(session_id)
    if not session:
        return _session_not_found(session_id)
    return APIResponse.ok(data=notifications_to_data(session.notifications.active()))
