from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

import httpx

from todo_ai.config import Settings
from todo_ai.errors import (
    ModelAuthError,
    ModelProviderError,
    ModelRateLimited,
    ModelTimeout,
)


def default_timeout_s() -> float:
    """LLM_TIMEOUT_S, for providers built outside get_provider(settings)."""
    return Settings.from_env().llm_timeout_s


class LLMProvider(ABC):
    @abstractmethod
    def generate(self, *, system: str, user: str) -> str:
        """
        Must return the model output as TEXT (we'll parse/validate JSON in LLMClient).
        """
        raise NotImplementedError


def raise_for_provider_status(response: httpx.Response, provider: str) -> None:
    """Map a provider's HTTP error status onto the model error taxonomy."""
    status = response.status_code
    if status < 400:
        return

    detail = f"{provider} returned HTTP {status}: {response.text[:300]}"
    if status == 429:
        raise ModelRateLimited(detail)
    if status in (401, 403):
        raise ModelAuthError(detail)
    if status in (408, 504):
        raise ModelTimeout(detail)
    raise ModelProviderError(detail)


@contextmanager
def provider_errors(provider: str) -> Iterator[None]:
    """Translate transport-level httpx failures into typed model errors."""
    try:
        yield
    except httpx.TimeoutException as e:
        raise ModelTimeout(f"{provider} request timed out: {e}") from e
    except httpx.TransportError as e:
        raise ModelProviderError(f"{provider} transport error: {e}") from e
    except (KeyError, IndexError, TypeError, ValueError) as e:
        # Unexpected envelope (not the model's JSON, which LLMClient validates)
        raise ModelProviderError(f"{provider} returned an unexpected response: {e}") from e
