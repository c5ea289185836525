"""Meter Reader — Recognizer Selection."""

from typing import Optional

from meterread.config import Settings
from meterread.core.logging import get_logger
from meterread.recognizer.base_recognizer import ReadingRecognizer
from meterread.recognizer.claude_recognizer import ClaudeRecognizer
from meterread.recognizer.openai_recognizer import OpenAIRecognizer

logger = get_logger("recognizer.registry")

PROVIDER_ORDER = ("claude", "openai")


def _create(name: str, settings: Settings) -> ReadingRecognizer:
    timeout = settings.recognition_timeout_seconds
    if name == "claude":
        return ClaudeRecognizer(settings.anthropic_api_key, settings.claude_model, timeout)
    if name == "openai":
        return OpenAIRecognizer(settings.openai_api_key, settings.openai_model, timeout)
    raise ValueError(f"Unknown recognizer provider: {name}")


def build_recognizer(settings: Settings) -> Optional[ReadingRecognizer]:
    """Build the configured recognizer.

    ``auto`` tries each provider in PROVIDER_ORDER and keeps the first one
    with credentials. Returns None when nothing usable is configured.
    """
    provider_name = settings.recognizer_provider.lower()
    names = PROVIDER_ORDER if provider_name == "auto" else (provider_name,)

    for name in names:
        recognizer = _create(name, settings)
        if recognizer.is_available():
            logger.info(f"Recognizer selected: {name}", extra={"provider": name})
            return recognizer

    logger.error(
        "No recognizer configured. Set ANTHROPIC_API_KEY or OPENAI_API_KEY in .env."
    )
    return None
