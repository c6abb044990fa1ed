"""Classifier service - manages the singleton remote classifier."""

import structlog

from ..classifiers import GradioSpaceClassifier, MockClassifier, RemoteClassifier
from ..config import USE_MOCK_CLASSIFIER

logger = structlog.get_logger()

# Singleton classifier instance
_classifier: RemoteClassifier | None = None


def get_classifier() -> RemoteClassifier:
    """Get or create the classifier singleton.

    Uses the Gradio Space unless USE_MOCK_CLASSIFIER is set.
    """
    global _classifier

    if _classifier is not None:
        return _classifier

    if USE_MOCK_CLASSIFIER:
        logger.warning("using_mock_classifier", reason="USE_MOCK_CLASSIFIER enabled")
        _classifier = MockClassifier()
    else:
        _classifier = GradioSpaceClassifier.from_config()

    return _classifier


def set_classifier(classifier: RemoteClassifier | None) -> None:
    """Replace the singleton (tests and alternative backends)."""
    global _classifier
    _classifier = classifier


async def close_classifier() -> None:
    """Close the singleton's network resources, if any."""
    global _classifier
    if _classifier is not None:
        await _classifier.close()
        _classifier = None
