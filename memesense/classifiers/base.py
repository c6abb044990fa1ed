"""Base classes for remote classifier clients"""
from abc import ABC, abstractmethod

from ..intake import ImagePayload


class TransportError(Exception):
    """The classifier could not be reached or gave no usable reply."""


class RemoteClassifier(ABC):
    """Abstract interface for content-safety classifiers.

    Implement this to add new backends. The orchestrator doesn't care
    which service answers, only that ``classify`` returns the reply text
    (possibly starting with ``Error:``) or raises TransportError.
    """

    name: str = "base"

    @abstractmethod
    async def classify(self, image: ImagePayload) -> str:
        """Send one image and return the raw reply text."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the backend is reachable."""
        pass

    async def close(self) -> None:
        """Release network resources. Override if the client holds any."""
