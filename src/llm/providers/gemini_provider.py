from __future__ import annotations
import logging
import os
import re
from typing import Optional

import httpx
from todo_ai.errors import ModelAuthError
from .base import LLMProvider, default_timeout_s, provider_errors, raise_for_provider_status

logger = logging.getLogger(__name__)

_KEY_ENV_VARS = (
    "GEMINI_API_KEY",
    "GOOGLE_GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "GOOGLE_GENERATIVE_AI_API_KEY",
)


def clean_api_key(raw: str) -> str:
    """
    Undo the usual copy/paste accidents in a deployed key.

    "GEMINI_API_KEY=AIza..." keeps only the value; whitespace and characters
    outside [A-Za-z0-9_-] are dropped.
    """
    key = raw or ""
    if "=" in key:
        key = key.split("=", 1)[1]
        logger.warning("Stripped variable name prefix from Gemini API key")
    return re.sub(r"[^A-Za-z0-9_-]", "", key)


class GeminiProvider(LLMProvider):
    def __init__(self, timeout_s: Optional[float] = None):
        raw_key = next((os.getenv(name) for name in _KEY_ENV_VARS if os.getenv(name)), "")
        self.api_key = clean_api_key(raw_key)
        self.model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash").strip()
        self.base_url = os.getenv(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ).strip()
        self.timeout_s = timeout_s or default_timeout_s()

        if not self.api_key:
            raise ModelAuthError(f"None of {', '.join(_KEY_ENV_VARS)} is set")
        if not self.api_key.startswith("AIza"):
            raise ModelAuthError("Gemini API key has an unexpected format")

    def generate(self, *, system: str, user: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": self.api_key}
        payload = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": user}]}],
            "generationConfig": {
                "temperature": 0.2,
                "responseMimeType": "application/json",
            },
        }

        with provider_errors("gemini"):
            with httpx.Client(timeout=self.timeout_s) as client:
                r = client.post(url, headers=headers, json=payload)
            raise_for_provider_status(r, "gemini")
            data = r.json()
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(p.get("text", "") for p in parts)
