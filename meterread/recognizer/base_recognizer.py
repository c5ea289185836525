"""Meter Reader — Abstract Reading Recognizer."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from meterread.core.errors import RecognitionError
from meterread.models.measurement_models import BIGINT_MAX, BIGINT_MIN

READING_PROMPT = (
    "Measure the value of this meter and return only the entire value, "
    "an integer value and nothing more."
)

_INTEGER = re.compile(r"-?\d+")
_DIGIT_GROUP = re.compile(r"(?<=\d),(?=\d{3}\b)")


@dataclass(frozen=True)
class RecognitionResult:
    """What a recognizer returns for one staged image."""

    identifier: str
    artifact_url: Optional[str]
    value: int
    raw_text: str = ""


def parse_reading(text: str) -> int:
    """Pull the meter value out of a model reply.

    Comma thousands separators are dropped (``"1,234"`` -> 1234); the first integer
    in what remains is the reading.
    """
    cleaned = _DIGIT_GROUP.sub("", (text or "").strip())
    match = _INTEGER.search(cleaned)
    if match is None:
        raise RecognitionError(f"No integer in recognizer reply: {text!r}")
    value = int(match.group())
    if not BIGINT_MIN <= value <= BIGINT_MAX:
        raise RecognitionError(f"Recognized value out of range: {value}")
    return value


class ReadingRecognizer(ABC):
    """Abstract base for meter-image recognition.

    Implementations upload the staged image to their provider, ask for the
    meter's integer value and report the provider's identifier and URL for
    the uploaded artifact.
    """

    name: str = "base"

    @abstractmethod
    async def recognize(self, image_path: Path, mime_type: str) -> RecognitionResult:
        """Recognize the reading in the image at ``image_path``.

        Args:
            image_path: Local file holding the decoded image.
            mime_type: e.g. ``image/jpeg``.

        Returns:
            The recognition result.

        Raises:
            RecognitionError: on any provider failure or unusable reply.
        """
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this recognizer is configured and ready."""
        ...

    async def close(self) -> None:
        """Release the underlying client."""
        return None
