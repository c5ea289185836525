"""Meter Reader — OpenAI Vision Recognizer."""

from pathlib import Path
from typing import Optional

import httpx
from openai import AsyncOpenAI, OpenAIError

from meterread.core.errors import RecognitionError
from meterread.core.logging import get_logger
from meterread.recognizer.base_recognizer import (
    READING_PROMPT,
    ReadingRecognizer,
    RecognitionResult,
    parse_reading,
)

logger = get_logger("recognizer.openai")

FILES_URL = "https://api.openai.com/v1/files"


class OpenAIRecognizer(ReadingRecognizer):
    """OpenAI recognizer (Files API upload + Responses API)."""

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.client = (
            AsyncOpenAI(api_key=api_key, timeout=httpx.Timeout(timeout, connect=10.0))
            if api_key
            else None
        )

    def is_available(self) -> bool:
        return self.client is not None and bool(self.api_key)

    async def recognize(self, image_path: Path, mime_type: str) -> RecognitionResult:
        if not self.is_available():
            raise RecognitionError("OpenAI recognizer not configured")

        try:
            uploaded = await self.client.files.create(
                file=(image_path.name, image_path.read_bytes(), mime_type),
                purpose="vision",
            )
            response = await self.client.responses.create(
                model=self.model,
                input=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "input_image", "file_id": uploaded.id, "detail": "auto"},
                            {"type": "input_text", "text": READING_PROMPT},
                        ],
                    }
                ],
            )
        except OpenAIError as e:
            logger.error(f"OpenAI recognition failed: {e}", extra={"provider": self.name})
            raise RecognitionError(f"OpenAI request failed: {e}") from e

        text = response.output_text or ""
        value = parse_reading(text)
        logger.info(
            f"OpenAI read value {value}",
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
