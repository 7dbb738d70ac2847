"""Runtime configuration defaults for the cache, API and logging."""

from __future__ import annotations

import os


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


CACHE_DB_PATH = os.environ.get("QUICKORDER_CACHE_DB", "data/quickorder.db")

API_BASE_URL = os.environ.get("QUICKORDER_API_URL", "https://quick-order-server-y11j.onrender.com").rstrip("/")

# The hosted backend sleeps when idle; the first request can take ~30s.
FETCH_TIMEOUT_SECONDS = _env_float("QUICKORDER_FETCH_TIMEOUT", 30.0)
WRITE_TIMEOUT_SECONDS = _env_float("QUICKORDER_WRITE_TIMEOUT", 15.0)
HEALTH_TIMEOUT_SECONDS = 5.0
HEALTH_POLL_SECONDS = 15.0

DEBUG_LOG_PATH = os.environ.get("QUICKORDER_DEBUG_LOG", "/tmp/quickorder-debug.log")
