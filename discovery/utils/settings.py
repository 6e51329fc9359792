# discovery/utils/settings.py
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# ✅ Load environment variables from .env if present
load_dotenv()

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}; using {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive; using {default}")
        return default
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}; using {default}")
        return default


@dataclass(frozen=True)
class DiscoverySettings:
    default_radius_miles: float = 50.0
    content_collection: str = "reviews"
    content_status: Optional[str] = None
    history_limit: int = 20
    maps_api_key: Optional[str] = None
    nominatim_user_agent: str = "discovery_app"
    max_sessions: int = 1000
    session_idle_seconds: float = 1800.0

    @classmethod
    def from_env(cls) -> "DiscoverySettings":
        return cls(
            default_radius_miles=_env_float("DISCOVERY_DEFAULT_RADIUS_MILES", 50.0),
            content_collection=os.environ.get("DISCOVERY_CONTENT_COLLECTION", "reviews"),
            content_status=os.environ.get("DISCOVERY_CONTENT_STATUS") or None,
            history_limit=_env_int("DISCOVERY_HISTORY_LIMIT", 20),
            maps_api_key=os.environ.get("Maps_API_KEY") or None,
            nominatim_user_agent=os.environ.get("NOMINATIM_USER_AGENT", "discovery_app"),
            max_sessions=_env_int("DISCOVERY_MAX_SESSIONS", 1000),
            session_idle_seconds=_env_float("DISCOVERY_SESSION_IDLE_SECONDS", 1800.0),
        )
