"""Classifier backed by a Hugging Face Gradio Space over plain HTTP.

A prediction takes three requests against the Space's Gradio API:

1. ``POST {prefix}/upload`` stores the image and returns its server path.
2. ``POST {prefix}/call/{endpoint}`` queues the prediction, returning an
   ``event_id``.
3. ``GET {prefix}/call/{endpoint}/{event_id}`` streams server-sent events
   until ``complete`` (carrying the output list) or ``error``.
"""
import json
from typing import Any

import httpx
import structlog

from ..config import get_client_config
from ..intake import ImagePayload
from .base import RemoteClassifier, TransportError

logger = structlog.get_logger()


def parse_sse_result(lines: list[str]) -> Any:
    """Extract the first output from a Gradio event stream.

    Raises:
        TransportError: On an ``error`` event, or if the stream ends
            without a ``complete`` event.
    """
    event = None
    for line in lines:
        if line.startswith("event:"):
            event = line[len("event:"):].strip()
            continue
        if not line.startswith("data:"):
            continue

        data = line[len("data:"):].strip()
        if event == "error":
            message = None
            if data and data != "null":
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    message = data
            raise TransportError(f"Space reported an error: {message or 'no details'}")

        if event == "complete":
            try:
                outputs = json.loads(data)
            except json.JSONDecodeError as e:
                raise TransportError(f"Malformed result from Space: {data[:200]}") from e
            if not isinstance(outputs, list) or not outputs:
                raise TransportError(f"Unexpected result from Space: {data[:200]}")
            return outputs[0]

    raise TransportError("Space closed the event stream without a result")


class GradioSpaceClassifier(RemoteClassifier):
    """Call the meme-classification Space through its HTTP API."""

    name = "gradio-space"

    def __init__(
        self,
        space_url: str,
        endpoint: str = "/classify_meme",
        api_prefix: str = "/gradio_api",
        http: httpx.AsyncClient | None = None,
        http_timeout: float = 30.0,
    ):
        """Initialize the Space client.

        Args:
            space_url: Root URL of the Space, e.g. https://owner-name.hf.space
            endpoint: Gradio api_name of the prediction function
            api_prefix: Path prefix of the Gradio API ("" for Gradio 4)
            http: Shared AsyncClient; one is created (and owned) if omitted
            http_timeout: Per-request timeout for an owned client
        """
        self.space_url = space_url.rstrip("/")
        self.endpoint = endpoint.strip("/")
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(timeout=http_timeout)

        logger.info(
            "gradio_classifier_initialized",
            space_url=self.space_url,
            endpoint=self.endpoint,
        )

    @classmethod
    def from_config(cls, http: httpx.AsyncClient | None = None) -> "GradioSpaceClassifier":
        config = get_client_config()
        return cls(
            space_url=config["space_url"],
            endpoint=config["endpoint"],
            api_prefix=config["api_prefix"],
            http=http,
            http_timeout=config["http_timeout"],
        )

    def _url(self, path: str) -> str:
        return f"{self.space_url}{self.api_prefix}/{path.lstrip('/')}"

    async def classify(self, image: ImagePayload) -> str:
        """Upload the image, queue a prediction and wait for its text."""
        logger.debug("classifying_image_remote", filename=image.filename)

        try:
            server_path = await self._upload(image)
            event_id = await self._queue_prediction(image, server_path)
            output = await self._await_result(event_id)
        except httpx.HTTPError as e:
            logger.error("space_request_failed", error=str(e))
            raise TransportError(str(e) or type(e).__name__) from e
        except ValueError as e:
            logger.error("space_response_invalid", error=str(e))
            raise TransportError(f"Invalid response from Space: {e}") from e

        if not isinstance(output, str):
            raise TransportError(f"Expected text from Space, got {type(output).__name__}")

        logger.debug("space_reply", reply=output[:200])
        return output

    async def _upload(self, image: ImagePayload) -> str:
        response = await self.http.post(
            self._url("upload"),
            files={"files": (image.filename, image.content, image.media_type)},
        )
        response.raise_for_status()
        paths = response.json()
        if not isinstance(paths, list) or not paths:
            raise TransportError("Space upload returned no file path")
        return paths[0]

    async def _queue_prediction(self, image: ImagePayload, server_path: str) -> str:
        payload = {
            "data": [
                {
                    "path": server_path,
                    "orig_name": image.filename,
                    "mime_type": image.media_type,
                    "size": image.size_bytes,
                    "meta": {"_type": "gradio.FileData"},
                }
            ]
        }
        response = await self.http.post(self._url(f"call/{self.endpoint}"), json=payload)
        response.raise_for_status()
        event_id = response.json().get("event_id")
        if not event_id:
            raise TransportError("Space did not return an event id")
        return event_id

    async def _await_result(self, event_id: str) -> Any:
        lines = []
        async with self.http.stream("GET", self._url(f"call/{self.endpoint}/{event_id}")) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                lines.append(line)
        return parse_sse_result(lines)

    async def health_check(self) -> bool:
        """Check that the Space answers its API info route."""
        try:
            response = await self.http.get(self._url("info"))
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning("space_health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        if self._owns_http:
            await self.http.aclose()
