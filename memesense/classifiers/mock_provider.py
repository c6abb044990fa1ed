"""Mock classifier for development and testing."""
import random
from pathlib import Path

import structlog

from ..intake import ImagePayload
from .base import RemoteClassifier, TransportError

logger = structlog.get_logger()


class MockClassifier(RemoteClassifier):
    """Offline classifier that answers in the Space's reply format.

    Useful for:
    - Development without network access
    - Testing the workflow
    - CI/CD environments

    Filename hints pick the outcome: "error" gives a service-reported
    error, "offline" a transport failure, "nsfw"/"explicit"/"sexual" an
    explicit verdict. Anything else is safe.
    """

    name = "mock"

    def __init__(self, default_reply: str | None = None):
        """Initialize mock classifier.

        Args:
            default_reply: If set, always return this reply.
                           If None, derive it from the filename.
        """
        self.default_reply = default_reply
        logger.info("mock_classifier_initialized")

    async def classify(self, image: ImagePayload) -> str:
        """Return a mock reply."""
        if self.default_reply is not None:
            return self.default_reply

        filename_lower = Path(image.filename).name.lower()
        confidence = round(random.uniform(70.0, 99.9), 1)

        if "offline" in filename_lower:
            raise TransportError("Mock classifier is offline")
        if "error" in filename_lower:
            return "Error: Mock service could not process the image"
        if any(x in filename_lower for x in ["nsfw", "explicit", "sexual"]):
            return f"Confidence: {confidence}% sexual"
        return f"Confidence: {confidence}% non-sexual"

    async def health_check(self) -> bool:
        """Always healthy."""
        return True
