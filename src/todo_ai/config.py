from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, read from the environment once at startup."""

    llm_provider: str = "openai"
    llm_timeout_s: float = 10.0
    timezone: str = "UTC"
    default_user_id: str = "default"
    use_database: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            llm_provider=os.getenv("LLM_PROVIDER", "openai").strip().lower(),
            llm_timeout_s=float(os.getenv("LLM_TIMEOUT_S", "10")),
            timezone=os.getenv("APP_TIMEZONE", "UTC").strip(),
            default_user_id=os.getenv("DEFAULT_USER_ID", "default").strip(),
            use_database=_env_flag("USE_DATABASE", "false"),
        )

    def now(self) -> datetime:
        return datetime.now(ZoneInfo(self.timezone))
