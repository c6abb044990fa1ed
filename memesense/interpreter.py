"""Interpret the classifier's free-text reply into a structured verdict.

The Space answers with prose such as ``"Confidence: 92.3% sexual"``. Its
vocabulary always pairs "sexual" with "non-sexual", so the label comes from
a substring check and the single confidence figure always describes the
chosen label. Keep all text heuristics in this module so a structured
upstream can replace them without touching the orchestrator.
"""
import re
from dataclasses import dataclass
from enum import Enum

import structlog

logger = structlog.get_logger()

ERROR_MARKER = "Error:"
EXPLICIT_TERM = "sexual"
SAFE_TERM = "non-sexual"

CONFIDENCE_PATTERN = re.compile(r"Confidence:\s*(\d+(?:\.\d+)?)", re.IGNORECASE)

# Used when the reply carries no confidence figure
DEFAULT_CONFIDENCE = 50.0


class ServiceReportedError(Exception):
    """The service answered, but with an ``Error:`` message."""

    def __init__(self, reply: str):
        super().__init__(reply)
        self.reply = reply


class Label(Enum):
    SAFE = "safe"
    EXPLICIT = "explicit"


@dataclass(frozen=True)
class ClassificationResult:
    """Verdict derived from one reply.

    Probabilities are computed from ``label`` and ``confidence_percent``
    and can't be set on their own.
    """
    label: Label
    confidence_percent: float
    raw_text: str

    @property
    def p_explicit(self) -> float:
        if self.label is Label.EXPLICIT:
            return self.confidence_percent / 100
        return 1 - self.p_safe

    @property
    def p_safe(self) -> float:
        if self.label is Label.SAFE:
            return self.confidence_percent / 100
        return 1 - self.p_explicit

    @property
    def probabilities(self) -> tuple[float, float]:
        """(p_safe, p_explicit)"""
        return (self.p_safe, self.p_explicit)

    @property
    def clean_text(self) -> str:
        # No redaction is applied
        return self.raw_text

    @property
    def is_explicit(self) -> bool:
        return self.label is Label.EXPLICIT

    @property
    def classification(self) -> str:
        return "Explicit Content" if self.is_explicit else "Safe Content"

    @property
    def overall(self) -> str:
        return self.label.value

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "label": self.label.value,
            "classification": self.classification,
            "confidence_percent": self.confidence_percent,
            "probabilities": {"safe": self.p_safe, "explicit": self.p_explicit},
            "raw_text": self.raw_text,
            "clean_text": self.clean_text,
        }


def is_service_error(text: str) -> bool:
    """Check if the reply is an error reported by the service itself."""
    return text.startswith(ERROR_MARKER)


def infer_label(text: str) -> Label:
    """Pick the label from the reply vocabulary.

    "non-sexual" contains "sexual", so its presence vetoes the explicit hit.
    """
    lowered = text.lower()
    if EXPLICIT_TERM in lowered and SAFE_TERM not in lowered:
        return Label.EXPLICIT
    return Label.SAFE


def extract_confidence(text: str) -> float:
    """Extract the confidence percentage, clamped to [0, 100].

    Falls back to DEFAULT_CONFIDENCE when no ``Confidence:`` figure exists.
    """
    match = CONFIDENCE_PATTERN.search(text)
    if not match:
        return DEFAULT_CONFIDENCE

    value = float(match.group(1))
    clamped = max(0.0, min(100.0, value))
    if clamped != value:
        logger.warning("confidence_out_of_range", value=value, clamped=clamped)
    return clamped


def interpret_reply(text: str) -> ClassificationResult:
    """Turn a reply into a ClassificationResult.

    Raises:
        ServiceReportedError: If the reply starts with ``Error:``.
    """
    if is_service_error(text):
        raise ServiceReportedError(text)

    result = ClassificationResult(
        label=infer_label(text),
        confidence_percent=extract_confidence(text),
        raw_text=text,
    )
    logger.debug(
        "reply_interpreted",
        label=result.label.value,
        confidence=result.confidence_percent,
        reply=text[:200],
    )
    return result
