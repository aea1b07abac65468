from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from typing import Any, Callable, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from llm.providers.base import LLMProvider
from todo_ai.errors import ModelError, ModelProviderError, ModelSchemaViolation, ModelTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def get_provider(name: str, timeout_s: Optional[float] = None) -> LLMProvider:
    """Build the configured provider. Imports are local so unused providers cost nothing."""
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider
        return OpenAIProvider(timeout_s=timeout_s)
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider
        return OllamaProvider(timeout_s=timeout_s)
    if name == "gemini":
        from llm.providers.gemini_provider import GeminiProvider
        return GeminiProvider(timeout_s=timeout_s)
    if name == "mock":
        from llm.providers.mock_provider import MockProvider
        return MockProvider()
    raise ModelProviderError(f"Unknown LLM provider: {name!r}")


def extract_json_object(raw: str) -> dict[str, Any]:
    """
    Pull the first JSON object out of model text.

    Tolerates markdown fences, chatter around the object and trailing commas.
    Anything that still is not a JSON object is a schema violation.
    """
    cleaned = re.sub(r"^```(?:json)?\s*", "", (raw or "").strip())
    cleaned = re.sub(r"\s*```$", "", cleaned)

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        raise ModelSchemaViolation("Model reply contains no JSON object")
    candidate = cleaned[start : end + 1]

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        try:
            data = json.loads(re.sub(r",\s*([}\]])", r"\1", candidate))
        except json.JSONDecodeError as e:
            raise ModelSchemaViolation("Model reply is not valid JSON") from e

    if not isinstance(data, dict):
        raise ModelSchemaViolation("Model reply is not a JSON object")
    return data


class LLMClient:
    """Single-shot structured calls against one provider. No retries here."""

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    def complete(self, *, system: str, user: str) -> str:
        start = time.monotonic()
        try:
            return self.provider.generate(system=system, user=user)
        except ModelError:
            raise
        except Exception as e:
            raise ModelProviderError(f"Provider call failed: {e}") from e
        finally:
            logger.info(f"LLM call finished in {time.monotonic() - start:.2f}s")

    def generate_json(self, *, system: str, user: str, schema: Type[M]) -> M:
        raw = self.complete(system=system, user=user)
        data = extract_json_object(raw)
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            raise ModelSchemaViolation(
                f"Model reply does not match {schema.__name__}: {e.error_count()} error(s)"
            ) from e


async def call_with_deadline(func: Callable[..., T], *args, deadline_s: Optional[float], **kwargs) -> T:
    """
    Run a blocking model call in a worker thread under one overall deadline.

    httpx timeouts apply per connect/read/write phase; this one covers the
    whole call.
    The worker thread is abandoned, not interrupted, when the deadline passes.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(func, *args, **kwargs), timeout=deadline_s)
    except asyncio.TimeoutError as e:
        raise ModelTimeout(f"No model reply within {deadline_s}s") from e
