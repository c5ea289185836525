"""Meter Reader — Anthropic Claude Recognizer."""

from pathlib import Path
from typing import Optional

import httpx
from anthropic import APIError, AsyncAnthropic

from meterread.core.errors import RecognitionError
from meterread.core.logging import get_logger
from meterread.recognizer.base_recognizer import (
    READING_PROMPT,
    ReadingRecognizer,
    RecognitionResult,
    parse_reading,
)

logger = get_logger("recognizer.claude")

FILES_BETA = "files-api-2025-04-14"
FILES_URL = "https://api.anthropic.com/v1/files"


class ClaudeRecognizer(ReadingRecognizer):
    """Claude vision recognizer.

    The image goes through the Files API first so the stored file id can
    serve as the reading's identifier.
    """

    name = "claude"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "claude-sonnet-4-20250514",
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.client = (
            AsyncAnthropic(api_key=api_key, timeout=httpx.Timeout(timeout, connect=10.0))
            if api_key
            else None
        )

    def is_available(self) -> bool:
        return self.client is not None and bool(self.api_key)

    async def recognize(self, image_path: Path, mime_type: str) -> RecognitionResult:
        if not self.is_available():
            raise RecognitionError("Claude recognizer not configured")

        try:
            uploaded = await self.client.beta.files.upload(
                file=(image_path.name, image_path.read_bytes(), mime_type),
            )
            response = await self.client.beta.messages.create(
                model=self.model,
                max_tokens=64,
                betas=[FILES_BETA],
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {"type": "file", "file_id": uploaded.id},
                            },
                            {"type": "text", "text": READING_PROMPT},
                        ],
                    }
                ],
            )
        except APIError as e:
            logger.error(f"Claude recognition failed: {e}", extra={"provider": self.name})
            raise RecognitionError(f"Claude request failed: {e}") from e

        text = response.content[0].text if response.content else ""
        value = parse_reading(text)
        logger.info(
            f"Claude read value {value}",
            extra={"provider": self.name, "measure_uuid": uploaded.id},
        )
        return RecognitionResult(
            identifier=uploaded.id,
            artifact_url=f"{FILES_URL}/{uploaded.id}",
            value=value,
            raw_text=text,
        )

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
