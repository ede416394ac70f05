from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from rapflow.core.config import BackendConfig
from rapflow.core.errors import (
    ConfigurationError,
    EmptyResponseError,
    UpstreamError,
)
from rapflow.core.models import GenerationRequest, LengthProfile

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to generate lyrics"

SYSTEM_PROMPT = (
    "You are a Grammy-winning rap lyricist. Write vivid, original rap verses with strong "
    "imagery and internal rhymes. Provide lyrics only, no explanations."
)


def build_messages(request: GenerationRequest, profile: LengthProfile) -> list[dict]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                f'Write a {profile.label} rap verse about the theme "{request.theme}" '
                f"with a {request.mood} vibe. Keep each line punchy and rhythmic."
            ),
        },
    ]


def error_payload(exc: BaseException, expose_details: bool) -> dict:
    """Failure body in the shape the web frontend used to receive."""
    payload = {"error": GENERIC_FAILURE}
    if expose_details:
        detail = getattr(exc, "detail", None) or str(exc)
        if detail:
            payload["details"] = detail
    return payload


class LyricsClient:
    """OpenAI-compatible chat-completions client (OpenAI or Groq)."""

    def __init__(self, config: BackendConfig, session: Optional[requests.Session] = None,
                 user_agent: str = "rapflow/0.1"):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def generate(self, request: GenerationRequest, profile: LengthProfile) -> str:
        if not self.config.has_api_key:
            raise ConfigurationError(
                GENERIC_FAILURE,
                detail="API key missing. Set GROQ_API_KEY or OPENAI_API_KEY in your .env file.",
            )

        payload = {
            "model": self.config.model,
            "temperature": self.config.temperature,
            "max_tokens": profile.generation_budget,
            "messages": build_messages(request, profile),
        }
        headers = {"Authorization": f"Bearer {self.config.api_key}"}

        try:
            r = self.session.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=headers,
                timeout=self.config.timeout_s,
            )
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            logger.error("Error generating lyrics: %s", e)
            raise UpstreamError(GENERIC_FAILURE, detail=str(e)) from e
        except ValueError as e:
            # body was not JSON
            raise UpstreamError(GENERIC_FAILURE, detail=f"Invalid response body: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError(GENERIC_FAILURE, detail=f"Unexpected response shape: {e}") from e

        lyrics = (content or "").strip()
        if not lyrics:
            raise EmptyResponseError("empty response", detail="Backend returned an empty response")
        return lyrics

    def health(self) -> dict:
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
