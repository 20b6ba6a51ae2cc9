# ─────────────────────────────────────────────────────────────────
# config.py — Service Settings
#
# Every tunable value comes from an environment variable (or a
# local .env file during development). Nothing else in the project
# reads os.environ directly — it imports `settings` from here.
# ─────────────────────────────────────────────────────────────────

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv
# load_dotenv → copies KEY=value lines from .env into os.environ
# Variables already set in the real environment are NOT overwritten


def _get_env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc


def _get_env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name) or default
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    service_name: str = "alarm-control"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Defaults for a device that has never saved a config
    default_light_threshold: int = 300

    # Pagination for GET /api/logs
    log_default_limit: int = 50
    log_max_limit: int = 1000


def load_settings() -> Settings:
    """Build Settings from the environment (and .env, if present)."""

    load_dotenv()

    return Settings(
        service_name=os.getenv("SERVICE_NAME", "alarm-control"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_get_env_int("PORT", 3001),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_get_env_list("CORS_ORIGINS", "*"),
        default_light_threshold=_get_env_int("DEFAULT_LIGHT_THRESHOLD", 300),
        log_default_limit=_get_env_int("LOG_DEFAULT_LIMIT", 50),
        log_max_limit=_get_env_int("LOG_MAX_LIMIT", 1000),
    )


settings = load_settings()
