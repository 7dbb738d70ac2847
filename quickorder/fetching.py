"""Network fetch with timeout, cache fallback and an empty default."""

from __future__ import annotations

import asyncio
import enum
import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

import httpx

from quickorder.api import ApiError
from quickorder.cache import LocalCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures that mean "the live value is unavailable", as opposed to bugs.
FETCH_FAILURES = (asyncio.TimeoutError, httpx.HTTPError, ApiError, OSError, ValueError, TypeError)


class FetchSource(enum.Enum):
    """Where a loaded value came from."""

    LIVE = "live"
    CACHED = "cached"
    DEFAULT = "default"


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    value: T
    source: FetchSource


def read_cached(cache: LocalCache, cache_key: str, decode: Callable[[Any], T]) -> T | None:
    """Decode the cached value for ``cache_key``; None on miss or corruption."""
    try:
        raw = cache.get_json(cache_key)
        if raw is None:
            return None
        return decode(raw)
    except (ValueError, TypeError) as exc:
        logger.warning("corrupt cache entry key=%s error=%r", cache_key, exc)
        return None
    except sqlite3.Error as exc:
        logger.warning("cache read failed key=%s error=%r", cache_key, exc)
        return None


def write_cached(cache: LocalCache, cache_key: str, payload: Any) -> None:
    try:
        cache.set_json(cache_key, payload)
    except sqlite3.Error as exc:
        logger.warning("cache write failed key=%s error=%r", cache_key, exc)


async def fetch_with_fallback(
    network_call: Callable[[], Awaitable[Any]],
    cache: LocalCache,
    cache_key: str,
    default: T,
    timeout: float,
    decode: Callable[[Any], T],
) -> FetchResult[T]:
    """Fetch live data, falling back to the cache and then to ``default``.

    Never raises for reachability or parse problems. A successful live fetch
    overwrites the cache with the raw payload. A live ``null`` is not cached and
    falls through to the cache. No retries happen here.
    """
    try:
        payload = await asyncio.wait_for(network_call(), timeout=timeout)
        if payload is not None:
            value = decode(payload)
            write_cached(cache, cache_key, payload)
            return FetchResult(value, FetchSource.LIVE)
        logger.info("live fetch returned null key=%s", cache_key)
    except FETCH_FAILURES as exc:
        logger.warning("live fetch failed key=%s error=%r", cache_key, exc)

    cached = read_cached(cache, cache_key, decode)
    if cached is not None:
        return FetchResult(cached, FetchSource.CACHED)

    logger.warning("no cached value key=%s; using default", cache_key)
    return FetchResult(default, FetchSource.DEFAULT)
