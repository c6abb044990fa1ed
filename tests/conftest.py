"""Pytest configuration and fixtures"""
import io
import struct
import zlib

import pytest
from PIL import Image

from memesense.intake import FileHandle, ImagePayload, select_from_file
from memesense.stages import Stage, StageSequencer


@pytest.fixture
def png_bytes():
    """A small valid PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", (64, 48), color=(120, 80, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def image_handle(png_bytes):
    """File-picker handle for the test PNG."""
    return FileHandle(filename="meme.png", content=png_bytes, content_type="image/png")


@pytest.fixture
def payload(image_handle) -> ImagePayload:
    """Selected image payload."""
    return select_from_file(image_handle)


@pytest.fixture
def instant_sequencer():
    """The three stages with no delay."""
    return StageSequencer(
        stages=(
            Stage("Visual Analysis", 0),
            Stage("Text Processing", 0),
            Stage("Classification", 0),
        )
    )


@pytest.fixture
def oversized_png() -> bytes:
    """PNG header declaring 20000x20000 pixels, past Pillow's bomb limit."""
    ihdr = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
    chunk = b"IHDR" + ihdr
    return (
        b"\x89PNG\r\n\x1a\n"
        + struct.pack(">I", len(ihdr))
        + chunk
        + struct.pack(">I", zlib.crc32(chunk) & 0xFFFFFFFF)
    )
