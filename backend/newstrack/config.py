"""Runtime configuration for NewsTrack, read from the environment."""

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


DATABASE_PATH = Path(
    os.getenv(
        "NEWSTRACK_DB_PATH",
        str(Path(__file__).parent.parent / "newstrack.db"),
    )
)

USER_AGENT = os.getenv(
    "NEWSTRACK_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

# Timeouts (seconds)
FETCH_TIMEOUT = _env_float("NEWSTRACK_FETCH_TIMEOUT", 15.0)
SEARCH_TIMEOUT = _env_float("NEWSTRACK_SEARCH_TIMEOUT", 10.0)
PROBE_TIMEOUT = _env_float("NEWSTRACK_PROBE_TIMEOUT", 10.0)
NAV_IDLE_TIMEOUT = _env_float("NEWSTRACK_NAV_IDLE_TIMEOUT", 45.0)
NAV_LOADED_TIMEOUT = _env_float("NEWSTRACK_NAV_LOADED_TIMEOUT", 30.0)
SUBPAGE_TIMEOUT = _env_float("NEWSTRACK_SUBPAGE_TIMEOUT", 15.0)
REQUEST_DEADLINE = _env_float("NEWSTRACK_REQUEST_DEADLINE", 120.0)

# Delays applied after navigation so client-rendered content can populate
SETTLE_DELAY = _env_float("NEWSTRACK_SETTLE_DELAY", 3.0)
SUBPAGE_SETTLE_DELAY = _env_float("NEWSTRACK_SUBPAGE_SETTLE_DELAY", 1.0)

# Crawl bounds
MAX_ARTICLE_LINKS = _env_int("NEWSTRACK_MAX_ARTICLE_LINKS", 30)
MAX_SUBPAGES = _env_int("NEWSTRACK_MAX_SUBPAGES", 15)
MAX_RECORDS = 50

# Rendered browser pool
RENDERING_ENABLED = _env_bool("NEWSTRACK_RENDERING_ENABLED", True)
BROWSER_POOL_SIZE = _env_int("NEWSTRACK_BROWSER_POOL_SIZE", 4)

# Result cache
RESULT_CACHE_TTL_MINUTES = _env_int("NEWSTRACK_CACHE_TTL_MINUTES", 60)

# "weighted" draws a plausible section, "unclassified" labels it honestly
SECTION_FALLBACK = os.getenv("NEWSTRACK_SECTION_FALLBACK", "weighted").lower()

# Optional LLM topic labelling
ANALYZER_USE_LLM = _env_bool("NEWSTRACK_ANALYZER_USE_LLM", True)

CORS_ORIGINS = _env_list(
    "NEWSTRACK_CORS_ORIGINS",
    [
        "http://localhost:8080",
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:8080",
    ],
)

LOG_LEVEL = os.getenv("NEWSTRACK_LOG_LEVEL", "INFO").upper()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
