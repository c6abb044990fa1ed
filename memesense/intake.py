"""Image intake from the file picker or a drag-and-drop gesture."""
from dataclasses import dataclass, field

import structlog

from .utils.image import (
    get_image_dimensions,
    guess_media_type,
    image_to_data_uri,
    is_image_media_type,
)

logger = structlog.get_logger()


class InvalidInput(ValueError):
    """No file was chosen, or the chosen file is empty."""


class UnsupportedDropType(ValueError):
    """A dropped item does not declare an image media type."""


@dataclass(frozen=True)
class FileHandle:
    """A file as handed over by the picker or a drop."""
    filename: str
    content: bytes
    content_type: str | None = None


@dataclass(frozen=True)
class DropEvent:
    """Items released over the drop zone, in drop order."""
    files: tuple[FileHandle, ...] = ()


@dataclass(frozen=True)
class ImagePayload:
    """Image bytes plus a display-only preview reference."""
    content: bytes = field(repr=False)
    filename: str
    media_type: str
    preview: str = field(repr=False)
    width: int | None = None
    height: int | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.content)


def _to_payload(handle: FileHandle) -> ImagePayload:
    media_type = guess_media_type(handle.filename, handle.content_type)
    dimensions = get_image_dimensions(handle.content)
    width, height = dimensions if dimensions else (None, None)
    return ImagePayload(
        content=handle.content,
        filename=handle.filename,
        media_type=media_type,
        preview=image_to_data_uri(handle.content, media_type),
        width=width,
        height=height,
    )


def select_from_file(handle: FileHandle | None) -> ImagePayload:
    """Build a payload from a file-picker selection.

    Raises:
        InvalidInput: If no file was chosen or it has no content.
    """
    if handle is None:
        raise InvalidInput("No file selected")
    if not handle.content:
        raise InvalidInput(f"File is empty: {handle.filename}")

    payload = _to_payload(handle)
    logger.info(
        "image_selected",
        source="file",
        filename=payload.filename,
        media_type=payload.media_type,
        size_bytes=payload.size_bytes,
    )
    return payload


def check_drop(event: DropEvent) -> FileHandle:
    """Return the first dropped file if it can be accepted.

    Raises:
        InvalidInput: If nothing usable was dropped.
        UnsupportedDropType: If the item doesn't declare an image type.
    """
    if not event.files:
        raise InvalidInput("Nothing was dropped")
    first = event.files[0]
    if not is_image_media_type(first.content_type):
        raise UnsupportedDropType(
            f"Dropped item is not an image: {first.content_type or 'unknown type'}"
        )
    if not first.content:
        raise InvalidInput(f"File is empty: {first.filename}")
    return first


def select_from_drop(event: DropEvent) -> ImagePayload | None:
    """Build a payload from a drop, or None when the drop is ignored.

    Non-image drops are ignored silently; nothing is surfaced to the user.
    """
    try:
        handle = check_drop(event)
    except (InvalidInput, UnsupportedDropType) as e:
        logger.debug("drop_ignored", reason=str(e))
        return None

    payload = _to_payload(handle)
    logger.info(
        "image_selected",
        source="drop",
        filename=payload.filename,
        media_type=payload.media_type,
        size_bytes=payload.size_bytes,
    )
    return payload
