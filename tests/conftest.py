"""Pytest configuration and shared fixtures for Meter Reader tests.

- In-memory SQLite database per test
- Fake recognizer (no provider calls)
- FastAPI TestClient wired to both
"""

import asyncio
import base64
from pathlib import Path
from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from meterread.config import Settings
from meterread.database import init_db
from meterread.main import create_app
from meterread.recognizer.base_recognizer import ReadingRecognizer, RecognitionResult

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-meter-photo"
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


class FakeRecognizer(ReadingRecognizer):
    """Records every call and returns a fixed reading."""

    name = "fake"

    def __init__(self, value: int = 1234, error: Optional[Exception] = None, delay: float = 0.0):
        self.value = value
        self.error = error
        self.delay = delay
        self.calls = []

    def is_available(self) -> bool:
        return True

    async def recognize(self, image_path: Path, mime_type: str) -> RecognitionResult:
        self.calls.append(
            {"path": image_path, "mime_type": mime_type, "data": image_path.read_bytes()}
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        identifier = f"files/reading-{len(self.calls)}"
        return RecognitionResult(
            identifier=identifier,
            artifact_url=f"https://files.example.com/{identifier}",
            value=self.value,
            raw_text=str(self.value),
        )


def make_submission(**overrides) -> dict:
    payload = {
        "image": PNG_DATA_URI,
        "customer_code": "cust123",
        "measure_datetime": "15/03/2024",
        "measure_type": "WATER",
    }
    payload.update(overrides)
    return payload


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = {
        "database_url": "sqlite://",
        "anthropic_api_key": None,
        "openai_api_key": None,
        "staging_dir": str(tmp_path),
        "duplicate_scope": "customer",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def engine():
    """Fresh in-memory database shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def client(engine, settings, recognizer) -> Generator[TestClient, None, None]:
    app = create_app(settings=settings, engine=engine, recognizer=recognizer)
    with TestClient(app) as client:
        yield client
