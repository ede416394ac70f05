"""Configuration settings for RapFlow.

Values come from the process environment; ``main.py`` loads a ``.env`` file
first so keys can live next to the project.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_GROQ_MODEL = "llama-3.1-8b-instant"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_WATERMARK = "RapGen"
DEFAULT_TEMPERATURE = 0.85
DEFAULT_TIMEOUT_S = 60.0


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


@dataclass(frozen=True)
class BackendConfig:
    api_key: str
    base_url: str
    model: str
    temperature: float = DEFAULT_TEMPERATURE
    timeout_s: float = DEFAULT_TIMEOUT_S

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class AppConfig:
    environment: str = "development"
    backend: BackendConfig = field(
        default_factory=lambda: BackendConfig(api_key="", base_url=DEFAULT_OPENAI_BASE_URL, model=DEFAULT_OPENAI_MODEL)
    )
    beats_dir: Optional[Path] = None
    export_dir: Optional[Path] = None
    watermark: str = DEFAULT_WATERMARK
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def expose_error_details(self) -> bool:
        return not self.is_production

    @classmethod
    def from_env(cls) -> "AppConfig":
        environment = _env("RAPFLOW_ENV") or _env("NODE_ENV") or "development"

        # Groq key wins when both are present
        api_key = _env("GROQ_API_KEY") or _env("OPENAI_API_KEY")
        groq_base_url = _env("GROQ_BASE_URL")
        if groq_base_url:
            base_url = groq_base_url
            model = _env("GROQ_MODEL_NAME", DEFAULT_GROQ_MODEL)
        else:
            base_url = _env("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL)
            model = _env("OPENAI_MODEL_NAME", DEFAULT_OPENAI_MODEL)

        try:
            timeout_s = float(_env("RAPFLOW_REQUEST_TIMEOUT", str(DEFAULT_TIMEOUT_S)))
        except ValueError:
            logger.warning("Ignoring invalid RAPFLOW_REQUEST_TIMEOUT=%r", os.getenv("RAPFLOW_REQUEST_TIMEOUT"))
            timeout_s = DEFAULT_TIMEOUT_S

        beats_dir = _env("RAPFLOW_BEATS_DIR")
        export_dir = _env("RAPFLOW_EXPORT_DIR")

        return cls(
            environment=environment,
            backend=BackendConfig(
                api_key=api_key,
                base_url=base_url.rstrip("/"),
                model=model,
                timeout_s=timeout_s,
            ),
            beats_dir=Path(beats_dir) if beats_dir else None,
            export_dir=Path(export_dir) if export_dir else None,
            watermark=_env("RAPFLOW_WATERMARK", DEFAULT_WATERMARK),
            log_level=_env("RAPFLOW_LOG_LEVEL", "INFO").upper(),
        )


def validate_environment(config: AppConfig) -> bool:
    """Warn about a missing API key. The app still starts without one."""
    if not config.backend.has_api_key:
        logger.warning(
            "No API key found. Generation will fail until GROQ_API_KEY or OPENAI_API_KEY is set in .env"
        )
        return False
    return True
