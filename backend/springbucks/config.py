"""Application configuration."""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DB_PATH = BASE_DIR / "data" / "springbucks.db"
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite+aiosqlite:///{DB_PATH}"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Cache settings (Redis when REDIS_URL is set, in-memory otherwise)
REDIS_URL = os.getenv("REDIS_URL")
CACHE_NAMESPACE = os.getenv("CACHE_NAMESPACE", "coffee")
CACHE_TTL_MS = int(os.getenv("CACHE_TTL_MS", "60000"))
CACHE_OP_TIMEOUT_MS = int(os.getenv("CACHE_OP_TIMEOUT_MS", "500"))
STORE_TIMEOUT_MS = int(os.getenv("STORE_TIMEOUT_MS", "5000"))
CACHE_STRICT = _env_flag("CACHE_STRICT", False)
CACHE_NULL_VALUES = _env_flag("CACHE_NULL_VALUES", False)
CACHE_SINGLE_FLIGHT = _env_flag("CACHE_SINGLE_FLIGHT", True)
CACHE_WARM_INTERVAL = int(os.getenv("CACHE_WARM_INTERVAL", "0"))  # seconds, 0 = off

CURRENCY = os.getenv("CURRENCY", "CNY")
SEED_CATALOG = _env_flag("SEED_CATALOG", True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Ensure data directory exists (only needed for local SQLite, skip if DATABASE_URL is overridden)
if not os.getenv("DATABASE_URL"):
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
