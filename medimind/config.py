"""
MediMind Configuration

Settings are read from the environment after loading an optional .env file.

Variables:
- MEDIMIND_BACKEND:       "json" (default) or "rest"
- MEDIMIND_STORAGE_PATH:  JSON store path (default ~/.medimind/schedules.json)
- SUPABASE_URL:           REST backend project URL
- SUPABASE_ANON_KEY:      REST backend API key
- MEDIMIND_REST_TIMEOUT:  REST request timeout in seconds (default 10)
- MEDIMIND_TICK_SECONDS:  Reminder check interval in seconds (default 60)
- MEDIMIND_LOG_LEVEL:     Logging level name (default INFO)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

BACKENDS = {"json", "rest"}


class ConfigError(Exception):
    """Raised when settings are missing or invalid"""
    pass


def load_env_file(env_path: Optional[Path] = None) -> bool:
    """
    Load environment variables from a .env file if it exists.

    Already-set variables win over the file.

    Returns:
        True if a file was loaded
    """
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return False
    load_dotenv(env_path, override=False)
    logger.debug(f"Loaded environment from {env_path}")
    return True


def _number(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {raw!r}")
    return value


@dataclass
class Settings:
    """Runtime configuration resolved from environment variables."""

    backend: str = "json"
    storage_path: Optional[Path] = None
    rest_url: Optional[str] = None
    rest_api_key: Optional[str] = None
    rest_timeout: float = 10.0
    tick_seconds: float = 60.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Build settings from a mapping (default: os.environ).

        Raises:
            ConfigError: If a value is invalid or REST settings are incomplete
        """
        env = os.environ if env is None else env

        backend = env.get("MEDIMIND_BACKEND", "json").strip().lower()
        if backend not in BACKENDS:
            raise ConfigError(f"MEDIMIND_BACKEND must be one of {sorted(BACKENDS)}, got {backend!r}")

        storage = env.get("MEDIMIND_STORAGE_PATH")

        settings = cls(
            backend=backend,
            storage_path=Path(storage).expanduser() if storage else None,
            rest_url=env.get("SUPABASE_URL") or None,
            rest_api_key=env.get("SUPABASE_ANON_KEY") or None,
            rest_timeout=_number(env, "MEDIMIND_REST_TIMEOUT", 10.0),
            tick_seconds=_number(env, "MEDIMIND_TICK_SECONDS", 60.0),
            log_level=env.get("MEDIMIND_LOG_LEVEL", "INFO").upper(),
        )

        if settings.backend == "rest":
            if not settings.rest_url:
                raise ConfigError("SUPABASE_URL is required for the rest backend")
            if not settings.rest_api_key:
                raise ConfigError("SUPABASE_ANON_KEY is required for the rest backend")

        return settings
