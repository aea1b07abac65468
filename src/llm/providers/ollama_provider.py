from __future__ import annotations
import os
from typing import Optional

import httpx
from .base import LLMProvider, default_timeout_s, provider_errors, raise_for_provider_status

class OllamaProvider(LLMProvider):
    def __init__(self, timeout_s: Optional[float] = None):
        self.model = os.getenv("OLLAMA_MODEL", "llama3.1").strip()
        self.base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").strip()
        self.timeout_s = timeout_s or default_timeout_s()

    def generate(self, *, system: str, user: str) -> str:
        url = f"{self.base_url}/api/chat"
        payload = {
            "model": self.model,
            "stream": False,
            "format": "json",
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "options": {"temperature": 0.2},
        }

        with provider_errors("ollama"):
            with httpx.Client(timeout=self.timeout_s) as client:
                r = client.post(url, json=payload)
            raise_for_provider_status(r, "ollama")
            data = r.json()
            return data["message"]["content"]
