"""Loaders for profile, vendors, items and the local order history.

Read-path loaders never raise: a network problem falls back to the cache, and
a cache problem falls back to an empty default.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Iterable

from quickorder.api import ApiClient
from quickorder.cache import LocalCache
from quickorder.config import FETCH_TIMEOUT_SECONDS
from quickorder.constant import (
    COMMON_VENDOR_ID,
    DEFAULT_RESTAURANT_NAME,
    HISTORY_KEY,
    PROFILE_KEY,
    RESTAURANT_KEY,
    VENDORS_KEY,
    vendor_items_key,
)
from quickorder.fetching import FetchResult, fetch_with_fallback, read_cached, write_cached
from quickorder.models import (
    CatalogItem,
    OrderHistoryEntry,
    Profile,
    Vendor,
    migrate_history_record,
    migrate_item_record,
    migrate_list,
    migrate_profile_record,
    migrate_vendor_record,
)

logger = logging.getLogger(__name__)


def decode_vendors(raw: Any) -> list[Vendor]:
    return migrate_list(raw, migrate_vendor_record)


def decode_history(raw: Any) -> list[OrderHistoryEntry]:
    return migrate_list(raw, migrate_history_record)


def _items_decoder(vendor_id: str):
    def decode(raw: Any) -> list[CatalogItem]:
        items = migrate_list(raw, migrate_item_record)
        return [item for item in items if item.vendor_id in {vendor_id, COMMON_VENDOR_ID}]

    return decode


async def load_profile(
    api: ApiClient, cache: LocalCache, timeout: float = FETCH_TIMEOUT_SECONDS
) -> FetchResult[Profile | None]:
    return await fetch_with_fallback(api.get_profile, cache, PROFILE_KEY, None, timeout, migrate_profile_record)


async def load_vendors(
    api: ApiClient, cache: LocalCache, timeout: float = FETCH_TIMEOUT_SECONDS
) -> FetchResult[list[Vendor]]:
    return await fetch_with_fallback(api.get_vendors, cache, VENDORS_KEY, [], timeout, decode_vendors)


async def load_items(
    api: ApiClient, cache: LocalCache, vendor_id: str, timeout: float = FETCH_TIMEOUT_SECONDS
) -> FetchResult[list[CatalogItem]]:
    """Items scoped to ``vendor_id`` together with the common catalog."""
    return await fetch_with_fallback(
        lambda: api.get_items(vendor_id),
        cache,
        vendor_items_key(vendor_id),
        [],
        timeout,
        _items_decoder(vendor_id),
    )


def cached_vendors(cache: LocalCache) -> list[Vendor]:
    return read_cached(cache, VENDORS_KEY, decode_vendors) or []


def cached_profile(cache: LocalCache) -> Profile | None:
    return read_cached(cache, PROFILE_KEY, migrate_profile_record)


def save_vendors(cache: LocalCache, vendors: Iterable[Vendor]) -> None:
    write_cached(cache, VENDORS_KEY, [vendor.to_dict() for vendor in vendors])


def load_history(cache: LocalCache) -> list[OrderHistoryEntry]:
    """Most-recent-first order history; empty on a miss or a corrupt entry."""
    return read_cached(cache, HISTORY_KEY, decode_history) or []


def save_history(cache: LocalCache, entries: Iterable[OrderHistoryEntry]) -> None:
    write_cached(cache, HISTORY_KEY, [entry.to_dict() for entry in entries])


def saved_restaurant_name(cache: LocalCache) -> str | None:
    try:
        name = cache.get(RESTAURANT_KEY)
    except sqlite3.Error as exc:
        logger.warning("cache read failed key=%s error=%r", RESTAURANT_KEY, exc)
        return None
    return name or None


def save_restaurant_name(cache: LocalCache, name: str) -> None:
    try:
        cache.set(RESTAURANT_KEY, name)
    except sqlite3.Error as exc:
        logger.warning("cache write failed key=%s error=%r", RESTAURANT_KEY, exc)


def restaurant_name_for(profile: Profile | None, cache: LocalCache) -> str:
    if profile is not None and profile.shop_name:
        return profile.shop_name
    return saved_restaurant_name(cache) or DEFAULT_RESTAURANT_NAME


async def load_restaurant_name(
    api: ApiClient, cache: LocalCache, timeout: float = FETCH_TIMEOUT_SECONDS
) -> str:
    """Profile shop name, else the locally saved name, else the default."""
    result = await load_profile(api, cache, timeout)
    return restaurant_name_for(result.value, cache)
