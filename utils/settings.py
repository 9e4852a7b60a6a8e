"""Environment-driven configuration for the forensics service.

Values are read from the process environment (a `.env` file is loaded first
when present) every time `Settings.from_env()` is called.
"""

import os
from dataclasses import dataclass
from typing import Iterable, Optional

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

DEFAULT_MODEL = "gpt-5"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024
DEFAULT_MAX_SESSIONS = 100
DEFAULT_SESSION_TTL_SECONDS = 30 * 60.0
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from exc


def _env_log_level(name: str = "LOG_LEVEL", default: str = "INFO") -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        raise RuntimeError(f"{name} must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return level


@dataclass(frozen=True)
class Settings:
    """Application configuration."""

    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_MODEL
    openai_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    max_sessions: int = DEFAULT_MAX_SESSIONS
    session_ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment."""
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL") or DEFAULT_MODEL,
            openai_timeout_seconds=_env_number("OPENAI_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, float),
            max_upload_bytes=_env_number("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES, int),
            max_sessions=_env_number("MAX_SESSIONS", DEFAULT_MAX_SESSIONS, int),
            session_ttl_seconds=_env_number("SESSION_TTL_SECONDS", DEFAULT_SESSION_TTL_SECONDS, float),
            log_level=_env_log_level(),
        )

    def validate_required(self, required: Iterable[str] = ("openai_api_key",)) -> None:
        """Raise RuntimeError naming every required setting that is unset."""
        missing = [name.upper() for name in required if not getattr(self, name, None)]
        if missing:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Set them in the environment or a .env file."
            )
