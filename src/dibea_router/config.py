"""Environment-based configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

from dibea_router.constants import ReplyBackend

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and environment variables."""

    # Lexicon (None = bundled default.yaml)
    lexicon_path: Path | None = None

    # Reply generator
    reply_backend: ReplyBackend = ReplyBackend.NONE
    reply_webhook_url: str = ""
    reply_webhook_timeout_seconds: float = 10.0

    # Model chain (first = primary, rest = fallbacks tried in order)
    litellm_model_chain: Annotated[list[str], NoDecode] = [
        "openai/gpt-4.1-mini",
        "openai/gpt-4.0-mini",
    ]
    llm_timeout_seconds: int = 30

    # Directories
    log_dir: Path = Path("logs")

    # Logging
    log_level: str = "INFO"

    # API
    api_key: str = ""
    cors_origins: str = "http://localhost:3000"

    # Observability
    trace_enabled: bool = True

    @field_validator("reply_backend", mode="before")
    @classmethod
    def _parse_backend(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or ReplyBackend.NONE
        return v

    @field_validator("litellm_model_chain", mode="before")
    @classmethod
    def _parse_chain(cls, v: Any) -> Any:
        """Accept comma-separated string or JSON array."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("litellm_model_chain")
    @classmethod
    def _validate_chain(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError(
                "litellm_model_chain must contain at least one model"
            )
        seen: set[str] = set()
        dupes: list[str] = []
        for m in v:
            if m in seen:
                dupes.append(m)
            seen.add(m)
        if dupes:
            logger.warning(
                "Duplicate models in LITELLM_MODEL_CHAIN: %s",
                ", ".join(dupes),
            )
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        return [
            o.strip() for o in self.cors_origins.split(",") if o.strip()
        ]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "extra": "ignore",
    }
