from __future__ import annotations
import os
from typing import Optional

import httpx
from todo_ai.errors import ModelAuthError
from .base import LLMProvider, default_timeout_s, provider_errors, raise_for_provider_status

class OpenAIProvider(LLMProvider):
    def __init__(self, timeout_s: Optional[float] = None):
        self.api_key = os.getenv("OPENAI_API_KEY", "").strip()
        self.model = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
        self.base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()
        self.timeout_s = timeout_s or default_timeout_s()

        if not self.api_key:
            raise ModelAuthError("OPENAI_API_KEY is missing")

    def generate(self, *, system: str, user: str) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
        }

        with provider_errors("openai"):
            with httpx.Client(timeout=self.timeout_s) as client:
                r = client.post(url, headers=headers, json=payload)
            raise_for_provider_status(r, "openai")
            data = r.json()
            return data["choices"][0]["message"]["content"]
