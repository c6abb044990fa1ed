"""Remote classifier clients for content-safety verdicts."""
from .base import RemoteClassifier, TransportError
from .gradio_provider import GradioSpaceClassifier
from .mock_provider import MockClassifier

__all__ = [
    "RemoteClassifier",
    "TransportError",
    "GradioSpaceClassifier",
    "MockClassifier",
]
