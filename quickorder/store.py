"""In-memory order composition store.

One ``OrderStore`` is created per session and handed to whatever needs it; it
owns the working set of catalog items, the vendor list, the restaurant name
and the order history. Mutations apply to memory immediately; cache and
network writes are side effects.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import replace
from typing import Awaitable, Callable, Iterable, TypeVar
from uuid import uuid4

from quickorder.api import ApiClient
from quickorder.cache import LocalCache
from quickorder.config import FETCH_TIMEOUT_SECONDS, WRITE_TIMEOUT_SECONDS
from quickorder.constant import COMMON_VENDOR_ID, DEFAULT_QUANTITY, DEFAULT_RESTAURANT_NAME, MIN_QUANTITY, UNITS
from quickorder.fetching import FETCH_FAILURES, FetchSource
from quickorder.loaders import (
    cached_profile,
    cached_vendors,
    load_history,
    load_items,
    load_profile,
    load_vendors,
    restaurant_name_for,
    save_history,
    save_restaurant_name,
    save_vendors,
)
from quickorder.models import CatalogItem, OrderHistoryEntry, Profile, Vendor, migrate_vendor_record
from quickorder.validation import validate_vendor

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class WriteError(Exception):
    """A user-initiated write did not reach the server; local state was reverted."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class VendorNotFoundError(LookupError):
    """A vendor id no longer matches any known vendor."""


class OrderStore:
    """Single source of truth for the in-progress order and its reference data."""

    def __init__(
        self,
        api: ApiClient,
        cache: LocalCache,
        fetch_timeout: float = FETCH_TIMEOUT_SECONDS,
        write_timeout: float = WRITE_TIMEOUT_SECONDS,
    ) -> None:
        self.api = api
        self.cache = cache
        self.fetch_timeout = fetch_timeout
        self.write_timeout = write_timeout

        self.items: list[CatalogItem] = []
        self.vendors: list[Vendor] = []
        self.history: list[OrderHistoryEntry] = []
        self.profile: Profile | None = None
        self.restaurant_name = DEFAULT_RESTAURANT_NAME
        self.current_vendor_id: str | None = None
        self.state = StoreState.UNINITIALIZED
        self.sources: dict[str, FetchSource] = {}
        self._listeners: list[Callable[[], None]] = []

    @property
    def is_loading(self) -> bool:
        return self.state is not StoreState.READY

    def add_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # Loading

    async def load(self) -> None:
        """Seed from the cache, then sync profile and vendors with the server."""
        self.state = StoreState.LOADING
        try:
            self.vendors = cached_vendors(self.cache)
            self.profile = cached_profile(self.cache)
            self.restaurant_name = restaurant_name_for(self.profile, self.cache)
            self.history = load_history(self.cache)
            self._notify()
            await self.refresh_data()
        finally:
            self.state = StoreState.READY
            self._notify()

    async def refresh_data(self) -> None:
        """Re-run the profile and vendor loaders; readiness does not change."""
        profile_result, vendors_result = await asyncio.gather(
            load_profile(self.api, self.cache, self.fetch_timeout),
            load_vendors(self.api, self.cache, self.fetch_timeout),
        )
        self.vendors = list(vendors_result.value)
        self.sources["vendors"] = vendors_result.source
        self.sources["profile"] = profile_result.source
        if profile_result.value is not None:
            self.profile = profile_result.value
        self.restaurant_name = restaurant_name_for(self.profile, self.cache)
        logger.info(
            "refresh vendors=%d vendors_source=%s profile_source=%s",
            len(self.vendors),
            vendors_result.source.value,
            profile_result.source.value,
        )
        self._notify()

    async def load_vendor_items(self, vendor_id: str) -> None:
        """Install the catalog for ``vendor_id`` (plus common items) as the working set."""
        result = await load_items(self.api, self.cache, vendor_id, self.fetch_timeout)
        self.items = list(result.value)
        self.current_vendor_id = vendor_id
        self.sources["items"] = result.source
        logger.info("items vendor=%s count=%d source=%s", vendor_id, len(self.items), result.source.value)
        self._notify()

    async def close(self) -> None:
        """Tear down the session; the store must not be used afterwards."""
        self._listeners.clear()
        await self.api.close()

    # Queries

    def find_item(self, item_id: str) -> CatalogItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def find_vendor(self, vendor_id: str | None) -> Vendor | None:
        for vendor in self.vendors:
            if vendor.id == vendor_id:
                return vendor
        return None

    def selected_items(self) -> list[CatalogItem]:
        return [item for item in self.items if item.selected]

    # Working set

    def set_items(self, items: Iterable[CatalogItem]) -> None:
        self.items = list(items)
        self._notify()

    def toggle_selection(self, item_id: str) -> None:
        item = self.find_item(item_id)
        if item is None:
            return
        item.selected = not item.selected
        self._notify()

    def set_quantity(self, item_id: str, value: float) -> None:
        """Negative values are ignored; anything below the floor becomes 0.5."""
        if value < 0:
            return
        item = self.find_item(item_id)
        if item is None:
            return
        item.quantity = max(MIN_QUANTITY, value)
        self._notify()

    def set_unit(self, item_id: str, unit: str) -> None:
        if unit not in UNITS:
            raise ValueError(f"unknown unit {unit!r}")
        item = self.find_item(item_id)
        if item is None:
            return
        item.unit = unit
        self._notify()

    def select_all(self) -> None:
        for item in self.items:
            item.selected = True
        self._notify()

    def deselect_all(self) -> None:
        for item in self.items:
            item.selected = False
        self._notify()

    def add_item(self, name: str, unit: str, category: str) -> CatalogItem:
        item = CatalogItem(
            id=uuid4().hex,
            vendor_id=COMMON_VENDOR_ID,
            name=name,
            unit=unit,
            category=category,
            price="0",
            selected=False,
            quantity=DEFAULT_QUANTITY,
        )
        self.items.append(item)
        self._notify()
        return item

    def remove_item(self, item_id: str) -> None:
        self.items = [item for item in self.items if item.id != item_id]
        self._notify()

    def reset_selections(self) -> None:
        """Clear the cart for the next order."""
        for item in self.items:
            item.selected = False
            item.quantity = DEFAULT_QUANTITY
        self._notify()

    # Vendors (local)

    def add_vendor(self, name: str, phone: str) -> Vendor:
        vendor = Vendor(id=uuid4().hex, name=name, phone=phone)
        self.vendors.append(vendor)
        self._notify()
        return vendor

    def remove_vendor(self, vendor_id: str) -> Vendor | None:
        vendor = self.find_vendor(vendor_id)
        if vendor is None:
            return None
        self.vendors = [v for v in self.vendors if v.id != vendor_id]
        self._notify()
        return vendor

    def update_vendor(self, vendor_id: str, name: str, phone: str) -> Vendor | None:
        vendor = self.find_vendor(vendor_id)
        if vendor is None:
            return None
        updated = replace(vendor, name=name, phone=phone)
        self._replace_vendor(vendor_id, updated)
        self._notify()
        return updated

    def _replace_vendor(self, vendor_id: str, vendor: Vendor) -> None:
        self.vendors = [vendor if v.id == vendor_id else v for v in self.vendors]

    # Vendors (server-backed, optimistic with rollback)

    async def _write(self, call: Callable[[], Awaitable[T]], action: str) -> T:
        try:
            return await asyncio.wait_for(call(), timeout=self.write_timeout)
        except FETCH_FAILURES as exc:
            logger.warning("write failed action=%s error=%r", action, exc)
            raise WriteError(f"Failed to {action}: {exc}", cause=exc) from exc

    async def create_vendor(self, name: str, phone: str) -> Vendor:
        name, phone = validate_vendor(name, phone)
        provisional = self.add_vendor(name, phone)
        try:
            raw = await self._write(lambda: self.api.create_vendor(name, phone), "add vendor")
        except WriteError:
            self.vendors = [v for v in self.vendors if v.id != provisional.id]
            self._notify()
            raise

        created = provisional
        if raw is not None:
            try:
                created = migrate_vendor_record(raw)
            except ValueError:
                logger.warning("unreadable vendor in create response: %r", raw)
        self._replace_vendor(provisional.id, created)
        save_vendors(self.cache, self.vendors)
        self._notify()
        logger.info("vendor created id=%s", created.id)
        return created

    async def edit_vendor(self, vendor_id: str, name: str, phone: str) -> Vendor:
        name, phone = validate_vendor(name, phone)
        previous = self.find_vendor(vendor_id)
        if previous is None:
            raise VendorNotFoundError(vendor_id)

        updated = self.update_vendor(vendor_id, name, phone)
        try:
            raw = await self._write(
                lambda: self.api.update_vendor(vendor_id, {"name": name, "phone": phone}), "update vendor"
            )
        except WriteError:
            self._replace_vendor(vendor_id, previous)
            self._notify()
            raise

        if raw is not None:
            try:
                updated = migrate_vendor_record(raw)
                self._replace_vendor(vendor_id, updated)
            except ValueError:
                logger.warning("unreadable vendor in update response: %r", raw)
        save_vendors(self.cache, self.vendors)
        self._notify()
        logger.info("vendor updated id=%s", vendor_id)
        return updated

    async def delete_vendor(self, vendor_id: str) -> None:
        index = next((idx for idx, v in enumerate(self.vendors) if v.id == vendor_id), None)
        if index is None:
            raise VendorNotFoundError(vendor_id)

        removed = self.vendors[index]
        self.remove_vendor(vendor_id)
        try:
            await self._write(lambda: self.api.delete_vendor(vendor_id), "delete vendor")
        except WriteError:
            self.vendors.insert(min(index, len(self.vendors)), removed)
            self._notify()
            raise

        save_vendors(self.cache, self.vendors)
        logger.info("vendor deleted id=%s", vendor_id)

    # Restaurant identity

    def update_restaurant_name(self, name: str) -> None:
        self.restaurant_name = name
        save_restaurant_name(self.cache, name)
        self._notify()

    # History

    def add_history_entry(self, entry: OrderHistoryEntry) -> OrderHistoryEntry:
        """Store ``entry`` under a fresh id as the most recent order."""
        stored = replace(entry, id=uuid4().hex)
        self.history = [stored, *self.history]
        save_history(self.cache, self.history)
        self._notify()
        return stored

    def delete_history_entry(self, entry_id: str) -> None:
        self.history = [entry for entry in self.history if entry.id != entry_id]
        save_history(self.cache, self.history)
        self._notify()

    def clear_history(self) -> None:
        self.history = []
        save_history(self.cache, self.history)
        self._notify()
