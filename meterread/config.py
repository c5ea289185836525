"""Meter Reader — Central Configuration via Pydantic Settings."""

from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Database ──
    database_url: str = ""

    # ── Recognition Providers ──
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    recognizer_provider: str = "auto"  # auto | claude | openai
    claude_model: str = "claude-sonnet-4-20250514"
    openai_model: str = "gpt-4o-mini"
    recognition_timeout_seconds: float = 60.0

    # ── Intake ──
    staging_dir: Optional[str] = None  # None = system temp dir
    max_image_mb: int = 10
    duplicate_scope: str = "customer"  # customer | global

    # ── App ──
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        return "sqlite:///./meterread.db"

    @property
    def max_image_bytes(self) -> int:
        return self.max_image_mb * 1024 * 1024

    @property
    def duplicates_per_customer(self) -> bool:
        return self.duplicate_scope.lower() != "global"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
