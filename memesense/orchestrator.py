"""Classification workflow for a single selected image.

The orchestrator owns one WorkflowState at a time:

    Idle --select--> ImageSelected --classify--> Classifying(i) --> Succeeded
      ^                    ^                          |
      |                    +---- service error -------+
      +------------------- transport error -----------+

Every classify attempt carries a token. Clearing or selecting another
image invalidates it, and a stale attempt never writes state or notifies.
"""
import asyncio
import time
import uuid
from collections.abc import Callable
from contextlib import aclosing
from dataclasses import dataclass
from typing import ClassVar

import structlog

from .classifiers import RemoteClassifier
from .config import (
    CLASSIFY_TIMEOUT_SECONDS,
    SERVICE_ERROR_AUTO_CLOSE_MS,
    TRANSPORT_ERROR_AUTO_CLOSE_MS,
)
from .intake import (
    DropEvent,
    FileHandle,
    ImagePayload,
    InvalidInput,
    select_from_drop,
    select_from_file,
)
from .interpreter import ClassificationResult, ServiceReportedError, interpret_reply
from .notifier import NotificationCenter, Notifier, Severity
from .stages import Stage, StageSequencer

logger = structlog.get_logger()

TRANSPORT_ERROR_PREFIX = "Error: "


@dataclass(frozen=True)
class Idle:
    name: ClassVar[str] = "idle"


@dataclass(frozen=True)
class ImageSelected:
    name: ClassVar[str] = "image_selected"
    image: ImagePayload


@dataclass(frozen=True)
class Classifying:
    name: ClassVar[str] = "classifying"
    image: ImagePayload
    stage_index: int
    stage: Stage


@dataclass(frozen=True)
class Succeeded:
    name: ClassVar[str] = "succeeded"
    image: ImagePayload
    result: ClassificationResult


WorkflowState = Idle | ImageSelected | Classifying | Succeeded


def new_input_key() -> str:
    """Fresh identity for the file input, forcing it to remount."""
    return uuid.uuid4().hex


class ClassificationOrchestrator:
    """Drive intake, staged progress, the remote call and its outcome."""

    def __init__(
        self,
        classifier: RemoteClassifier,
        notifier: Notifier | None = None,
        sequencer: StageSequencer | None = None,
        timeout: float | None = CLASSIFY_TIMEOUT_SECONDS,
        service_error_auto_close_ms: int = SERVICE_ERROR_AUTO_CLOSE_MS,
        transport_error_auto_close_ms: int = TRANSPORT_ERROR_AUTO_CLOSE_MS,
    ):
        self.classifier = classifier
        self.notifier = notifier or NotificationCenter()
        self.sequencer = sequencer or StageSequencer()
        self.timeout = timeout
        self.service_error_auto_close_ms = service_error_auto_close_ms
        self.transport_error_auto_close_ms = transport_error_auto_close_ms

        self._state: WorkflowState = Idle()
        self._input_key = new_input_key()
        self._is_drag_over = False
        self._attempt: object | None = None
        self._state_callbacks: list[Callable[[WorkflowState], None]] = []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def input_key(self) -> str:
        return self._input_key

    @property
    def is_drag_over(self) -> bool:
        return self._is_drag_over

    @property
    def is_classifying(self) -> bool:
        return isinstance(self._state, Classifying)

    @property
    def image(self) -> ImagePayload | None:
        if isinstance(self._state, Idle):
            return None
        return self._state.image

    @property
    def result(self) -> ClassificationResult | None:
        if isinstance(self._state, Succeeded):
            return self._state.result
        return None

    def on_state_change(self, callback: Callable[[WorkflowState], None]) -> None:
        """Register callback for state transitions."""
        self._state_callbacks.append(callback)

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------

    def select_file(self, handle: FileHandle | None) -> WorkflowState:
        """Select an image from the file picker.

        An absent or empty file is declined and leaves the state untouched.
        """
        try:
            payload = select_from_file(handle)
        except InvalidInput as e:
            logger.info("file_selection_declined", reason=str(e))
            return self._state
        return self._select(payload)

    def drag_over(self) -> None:
        self._is_drag_over = True

    def drag_leave(self) -> None:
        self._is_drag_over = False

    def drop(self, event: DropEvent) -> WorkflowState:
        """Select an image from a drop; non-image drops change nothing."""
        self._is_drag_over = False
        payload = select_from_drop(event)
        if payload is None:
            return self._state
        return self._select(payload)

    def clear(self) -> WorkflowState:
        """Discard image and result, and reset the file input."""
        self._invalidate_attempt("cleared")
        self._input_key = new_input_key()
        self._set_state(Idle())
        return self._state

    def _select(self, payload: ImagePayload) -> WorkflowState:
        self._invalidate_attempt("image_replaced")
        self._set_state(ImageSelected(payload))
        return self._state

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    async def classify(self) -> WorkflowState:
        """Run the staged progress, call the classifier and apply the outcome.

        Failures never propagate: they resolve to ImageSelected (service
        error) or Idle (transport error) with a notification.

        Returns:
            The state after this attempt, or the current state if the
            attempt was ignored or went stale.
        """
        image = self.image
        if image is None:
            logger.info("classify_ignored", reason="no_image_selected")
            return self._state
        if self.is_classifying:
            logger.warning("classify_ignored", reason="already_in_flight")
            return self._state

        attempt = object()
        self._attempt = attempt
        logger.info("classification_started", filename=image.filename)

        try:
            return await self._run(attempt, image)
        except asyncio.CancelledError:
            if self._attempt is attempt:
                self._attempt = None
                logger.info("classification_cancelled", filename=image.filename)
                self._set_state(ImageSelected(image))
            raise

    async def _run(self, attempt: object, image: ImagePayload) -> WorkflowState:
        start_time = time.time()

        async with aclosing(self.sequencer.play()) as stages:
            async for index, stage in stages:
                if self._attempt is not attempt:
                    return self._discard_stale(image)
                self._set_state(Classifying(image, index, stage))
        if self._attempt is not attempt:
            return self._discard_stale(image)

        error = None
        reply = ""
        try:
            reply = await asyncio.wait_for(
                self.classifier.classify(image),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            error = f"Classification timed out after {self.timeout:g}s"
        except Exception as e:
            # Anything the client raises counts as a transport failure
            error = str(e) or type(e).__name__

        if self._attempt is not attempt:
            return self._discard_stale(image)
        self._attempt = None

        elapsed_ms = round((time.time() - start_time) * 1000)

        if error is not None:
            logger.error(
                "transport_error",
                filename=image.filename,
                error=error,
                elapsed_ms=elapsed_ms,
            )
            self._post(TRANSPORT_ERROR_PREFIX + error, self.transport_error_auto_close_ms)
            self._input_key = new_input_key()
            self._set_state(Idle())
            return self._state

        try:
            result = interpret_reply(reply)
        except ServiceReportedError as e:
            logger.warning(
                "service_reported_error",
                filename=image.filename,
                reply=e.reply,
                elapsed_ms=elapsed_ms,
            )
            self._post(e.reply, self.service_error_auto_close_ms)
            self._set_state(ImageSelected(image))
            return self._state

        logger.info(
            "classification_succeeded",
            filename=image.filename,
            label=result.label.value,
            confidence=result.confidence_percent,
            elapsed_ms=elapsed_ms,
        )
        self._set_state(Succeeded(image, result))
        return self._state

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _invalidate_attempt(self, reason: str) -> None:
        if self._attempt is not None:
            logger.info("classification_abandoned", reason=reason)
        self._attempt = None

    def _discard_stale(self, image: ImagePayload) -> WorkflowState:
        logger.info("stale_classification_discarded", filename=image.filename)
        return self._state

    def _set_state(self, state: WorkflowState) -> None:
        previous = self._state
        self._state = state
        if type(previous) is not type(state):
            logger.debug("state_changed", previous=previous.name, current=state.name)
        for callback in self._state_callbacks:
            try:
                callback(state)
            except Exception as e:
                logger.error("state_callback_error", error=str(e))

    def _post(self, message: str, auto_close_ms: int) -> None:
        try:
            self.notifier.notify(message, Severity.ERROR, auto_close_ms)
        except Exception as e:
            logger.error("notification_failed", message=message, error=str(e))

    def snapshot(self) -> dict:
        """Describe the current workflow for API responses."""
        state = self._state
        image = self.image
        stage = None
        if isinstance(state, Classifying):
            stage = {
                "index": state.stage_index,
                "name": state.stage.name,
                "duration_ms": state.stage.duration_ms,
                "total": len(self.sequencer),
            }
        return {
            "state": state.name,
            "input_key": self._input_key,
            "is_drag_over": self._is_drag_over,
            "image": (
                {
                    "filename": image.filename,
                    "media_type": image.media_type,
                    "size_bytes": image.size_bytes,
                    "width": image.width,
                    "height": image.height,
                    "preview": image.preview,
                }
                if image
                else None
            ),
            "stage": stage,
            "result": self.result.to_dict() if self.result else None,
        }
