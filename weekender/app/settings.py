from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = REPO_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", extra="ignore"
    )

    DEBUG: bool = False

    # persistence directory (defaults to ~/.weekender-data)
    DATA_DIR: Path | None = None
    DATABASE_URL: str | None = None

    # CORS allow origins (comma-separated). Default empty (no cross-origin).
    CORS_ALLOW_ORIGINS: str = ""

    # Used to build share links; falls back to the request base URL when unset
    PUBLIC_BASE_URL: str | None = None
    SHARE_CODE_BYTES: int = 16

    # Vision / caption extractor (OpenAI-compatible chat completions)
    OPENAI_API_KEY: str | None = None
    OPENAI_API_KEY_EXPIRES_AT: datetime | None = None
    OPENAI_API_BASE: str = "https://api.openai.com/v1"
    OPENAI_TIMEOUT_SECONDS: float = 60.0
    OPENAI_CONNECT_TIMEOUT_SECONDS: float = 5.0
    EXTRACTION_MODEL: str = "gpt-4o"
    EXTRACTION_CAPTION_MODEL: str = "gpt-4o"
    EXTRACTION_MAX_TOKENS: int = 4096
    EXTRACTION_MIN_CONFIDENCE: float = 0.3

    # Provider photos (Google Places media API)
    GOOGLE_PLACES_API_KEY: str | None = None
    GOOGLE_PLACES_MEDIA_BASE: str = "https://places.googleapis.com/v1"
    PHOTO_MAX_WIDTH_PX: int = 800
    PHOTO_PROXY_PATH: str = "/photos/proxy"

    # "Combine your trip" suggestions
    NEARBY_THRESHOLD_MINUTES: int = 20
    NEARBY_LIMIT: int = 4

    # Observability
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_RELEASE: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2

    @property
    def allow_origins(self) -> list[str]:
        s = (self.CORS_ALLOW_ORIGINS or "").strip()
        if s == "*":
            return ["*"]
        if s == "":
            return []
        return [part.strip() for part in s.split(",") if part.strip()]

    @property
    def data_dir(self) -> Path:
        # Blank values in `.env` would otherwise resolve to the repository root.
        def _materialize(path: Path) -> Path:
            path.mkdir(parents=True, exist_ok=True)
            return path

        raw_env = os.getenv("DATA_DIR")
        if raw_env is not None:
            trimmed = raw_env.strip()
            if trimmed:
                return _materialize(Path(trimmed).expanduser().resolve())
            return _materialize(Path.home() / ".weekender-data")

        if self.DATA_DIR is not None:
            candidate = Path(self.DATA_DIR).expanduser()
            candidate_str = str(candidate).strip()
            if candidate_str and candidate_str not in {".", "./", ".\\"}:
                return _materialize(candidate.resolve())
        return _materialize(Path.home() / ".weekender-data")

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        default_path = self.data_dir / "weekender.db"
        return f"sqlite:///{default_path}"

    @property
    def async_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///"):
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.async_database_url.startswith("sqlite")


settings = Settings()
