"""Sending an order and recording it in the local history."""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable

from quickorder.fetching import FETCH_FAILURES
from quickorder.messages import (
    build_messaging_uri,
    build_web_messaging_uri,
    generate_order_message,
    order_total,
    unit_label,
)
from quickorder.models import CatalogItem, HistoryItem, OrderHistoryEntry, Vendor
from quickorder.store import OrderStore, VendorNotFoundError

logger = logging.getLogger(__name__)


class SendError(Exception):
    """No handler accepted the WhatsApp link."""


@dataclass(frozen=True)
class SendResult:
    message: str
    uri: str
    entry: OrderHistoryEntry
    recorded_remotely: bool


def snapshot_items(items: Iterable[CatalogItem]) -> tuple[HistoryItem, ...]:
    """Copy name/quantity/unit label of the selected items by value."""
    return tuple(
        HistoryItem(name=item.name, quantity=item.quantity, unit=unit_label(item.unit))
        for item in items
        if item.selected
    )


def record_order(
    store: OrderStore, vendor: Vendor, message: str, now: datetime | None = None
) -> OrderHistoryEntry:
    """Append the current selection to the history as a sent order."""
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    entry = OrderHistoryEntry(
        id="",
        date=timestamp,
        vendor_name=vendor.name,
        vendor_phone=vendor.phone,
        items=snapshot_items(store.items),
        message=message,
    )
    return store.add_history_entry(entry)


async def _post_order_record(store: OrderStore, vendor: Vendor, total: str, items_count: int) -> bool:
    try:
        await asyncio.wait_for(
            store.api.create_order(vendor.id, total, items_count), timeout=store.write_timeout
        )
    except FETCH_FAILURES as exc:
        logger.warning("order record not saved vendor=%s error=%r", vendor.id, exc)
        return False
    return True


async def send_order(
    store: OrderStore,
    vendor: Vendor | None,
    open_url: Callable[[str], bool] = webbrowser.open,
) -> SendResult | None:
    """Open the WhatsApp link for the current selection and record the order.

    Returns None when nothing is selected. Once the link is open the order is
    written to history and the cart is reset; only then is the order record
    posted to the server.
    """
    if vendor is None:
        raise VendorNotFoundError("Vendor not found")

    selected = store.selected_items()
    if not selected:
        return None

    message = generate_order_message(selected, vendor.name, store.restaurant_name)
    uri = build_messaging_uri(vendor.phone, message)
    if not open_url(uri):
        uri = build_web_messaging_uri(vendor.phone, message)
        if not open_url(uri):
            raise SendError("Could not open WhatsApp. Please try again.")

    total = order_total(selected)
    entry = record_order(store, vendor, message)
    store.reset_selections()
    recorded = await _post_order_record(store, vendor, str(total), len(selected))
    logger.info("order sent vendor=%s items=%d total=%s recorded=%s", vendor.id, len(selected), total, recorded)
    return SendResult(message=message, uri=uri, entry=entry, recorded_remotely=recorded)
