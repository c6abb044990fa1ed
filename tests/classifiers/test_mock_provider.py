"""Tests for the mock classifier."""
import pytest

from memesense.classifiers import MockClassifier, TransportError
from memesense.intake import FileHandle, select_from_file
from memesense.interpreter import Label, interpret_reply


def _payload(filename: str, png_bytes: bytes):
    return select_from_file(FileHandle(filename=filename, content=png_bytes))


class TestMockClassifier:
    async def test_default_reply(self, payload):
        classifier = MockClassifier(default_reply="Confidence: 12% sexual")
        assert await classifier.classify(payload) == "Confidence: 12% sexual"

    async def test_explicit_hint(self, png_bytes):
        reply = await MockClassifier().classify(_payload("nsfw_meme.png", png_bytes))
        assert interpret_reply(reply).label == Label.EXPLICIT

    async def test_safe_by_default(self, png_bytes):
        reply = await MockClassifier().classify(_payload("cat.png", png_bytes))

        result = interpret_reply(reply)
        assert result.label == Label.SAFE
        assert 70.0 <= result.confidence_percent <= 99.9

    async def test_error_hint(self, png_bytes):
        reply = await MockClassifier().classify(_payload("error.png", png_bytes))
        assert reply.startswith("Error:")

    async def test_offline_hint(self, png_bytes):
        with pytest.raises(TransportError):
            await MockClassifier().classify(_payload("offline.png", png_bytes))

    async def test_health_check(self):
        assert await MockClassifier().health_check() is True
