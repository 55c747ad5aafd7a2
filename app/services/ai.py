"""
Client for the external AI services (OpenAI-compatible HTTP API).

- analyze(text)         -> DreamInterpretation  (POST /chat/completions, strict JSON schema)
- generate_image(prompt) -> str url              (POST /images/generations)

Every call is bounded by `timeout`. No retries: a timeout surfaces as
UpstreamTimeoutError (retryable by the caller), anything else as
UpstreamFailureError.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from app.core.config import settings
from app.core.errors import UpstreamFailureError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

ANALYSIS_SYSTEM_PROMPT = (
    "You are a professional dream analyst versed in psychology and dream "
    "interpretation. Analyse the user's dream and cover three aspects:\n"
    "1. Symbolism: the symbolic meaning of the main elements and images.\n"
    "2. Emotional analysis: the emotional state and feelings the dream reflects.\n"
    "3. Psychological insight: what the dream may reveal about the unconscious.\n\n"
    "Use a warm, professional tone, avoid absolute judgements and offer "
    "thought-provoking readings. Keep each part to roughly 100-150 words."
)

ANALYSIS_SCHEMA: dict[str, Any] = {
    "name": "dream_analysis",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "symbolism": {
                "type": "string",
                "description": "Symbolic meaning of the main elements of the dream",
            },
            "emotionalAnalysis": {
                "type": "string",
                "description": "Emotional state reflected by the dream",
            },
            "psychologicalInsight": {
                "type": "string",
                "description": "Interpretation from a psychological perspective",
            },
        },
        "required": ["symbolism", "emotionalAnalysis", "psychologicalInsight"],
        "additionalProperties": False,
    },
}


@dataclass
class DreamInterpretation:
    symbolism: str
    emotional_analysis: str
    psychological_insight: str


class DreamAIClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        image_model: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.AI_BASE_URL).rstrip("/")
        self.model = model or settings.AI_MODEL
        self.image_model = image_model or settings.AI_IMAGE_MODEL
        self.timeout = timeout if timeout is not None else settings.AI_TIMEOUT_SECONDS
        key = api_key if api_key is not None else settings.AI_API_KEY
        headers = {"content-type": "application/json"}
        if key:
            headers["authorization"] = f"Bearer {key}"
        self._client = httpx.Client(
            timeout=httpx.Timeout(self.timeout),
            headers=headers,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    # ---------- public API ----------
    def analyze(self, text: str) -> DreamInterpretation:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
                {"role": "user", "content": f"Please analyse this dream:\n\n{text}"},
            ],
            "response_format": {"type": "json_schema", "json_schema": ANALYSIS_SCHEMA},
        }
        data = self._post("/chat/completions", payload)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise UpstreamFailureError("AI analysis response had no message content.")
        if not isinstance(content, str) or not content:
            raise UpstreamFailureError("AI analysis response had no message content.")
        return _parse_interpretation(content)

    def generate_image(self, prompt: str) -> str:
        payload = {"model": self.image_model, "prompt": prompt, "n": 1}
        data = self._post("/images/generations", payload)
        try:
            url = data["data"][0]["url"]
        except (KeyError, IndexError, TypeError):
            raise UpstreamFailureError("Image generation response had no URL.", service="image")
        if not isinstance(url, str) or not url:
            raise UpstreamFailureError("Image generation response had no URL.", service="image")
        return url

    # ---------- internals ----------
    def _post(self, path: str, payload: dict) -> dict:
        service = "image" if path.startswith("/images") else "ai"
        url = f"{self.base_url}{path}"
        try:
            r = self._client.post(url, json=payload)
        except httpx.TimeoutException:
            logger.warning("AI call %s timed out after %ss", path, self.timeout)
            raise UpstreamTimeoutError(service=service, timeout=self.timeout)
        except httpx.HTTPError as exc:
            logger.warning("AI call %s failed: %s", path, exc)
            raise UpstreamFailureError(f"AI request failed: {exc}", service=service)

        if not 200 <= r.status_code < 300:
            logger.warning("AI call %s returned %s: %s", path, r.status_code, r.text[:200])
            raise UpstreamFailureError(
                f"AI service returned HTTP {r.status_code}.", service=service
            )
        try:
            return r.json()
        except ValueError:
            raise UpstreamFailureError("AI service returned invalid JSON.", service=service)


def _parse_interpretation(content: str) -> DreamInterpretation:
    try:
        parsed = json.loads(content)
    except ValueError:
        raise UpstreamFailureError("AI analysis was not valid JSON.")
    if not isinstance(parsed, dict):
        raise UpstreamFailureError("AI analysis was not a JSON object.")

    missing = [
        k for k in ("symbolism", "emotionalAnalysis", "psychologicalInsight")
        if not isinstance(parsed.get(k), str)
    ]
    if missing:
        raise UpstreamFailureError(f"AI analysis is missing fields: {', '.join(missing)}.")
    return DreamInterpretation(
        symbolism=parsed["symbolism"],
        emotional_analysis=parsed["emotionalAnalysis"],
        psychological_insight=parsed["psychologicalInsight"],
    )


_client: Optional[DreamAIClient] = None


def get_ai_client() -> DreamAIClient:
    """FastAPI dependency. One shared client per process."""
    global _client
    if _client is None:
        _client = DreamAIClient()
    return _client


def close_ai_client() -> None:
    """Release the shared client's connections; the next request builds a new one."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
