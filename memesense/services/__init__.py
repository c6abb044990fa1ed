"""Service layer for hosting classification workflows."""
from .classifier_service import close_classifier, get_classifier, set_classifier
from .session_service import Session, SessionService

__all__ = [
    "Session",
    "SessionService",
    "close_classifier",
    "get_classifier",
    "set_classifier",
]
