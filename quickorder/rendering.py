"""Rendering helpers for the terminal UI."""

from __future__ import annotations

from datetime import datetime

from rich.text import Text

from quickorder.constant import CATEGORY_BADGE_STYLES, CATEGORY_BADGES
from quickorder.fetching import FetchSource
from quickorder.messages import format_money, format_quantity, line_total, parse_price, unit_label
from quickorder.models import CatalogItem, OrderHistoryEntry, Vendor


def badge_style(category: str) -> str:
    """Return a consistent badge style for category tags."""
    return CATEGORY_BADGE_STYLES.get(category, "bold #0b1f0f on #5fbf72")


def format_item_label(item: CatalogItem) -> Text:
    """Render a catalog row: check box, category tag, name, quantity and price."""
    text = Text()
    text.append("[x] " if item.selected else "[ ] ", style="bold" if item.selected else "")
    badge = CATEGORY_BADGES.get(item.category)
    if badge:
        text.append(badge, style=badge_style(item.category))
        text.append(" ")
    text.append(item.name, style="bold" if item.selected else "")
    text.append(f"  {format_quantity(item.quantity)} {unit_label(item.unit)}")
    if parse_price(item.price):
        text.append(f"  @ {format_money(parse_price(item.price))}", style="dim")
        if item.selected:
            text.append(f" = {format_money(line_total(item))}")
    return text


def format_vendor_label(vendor: Vendor) -> Text:
    text = Text(vendor.name, style="bold" if vendor.is_special else "")
    text.append(f"  +{vendor.phone}", style="dim")
    if vendor.is_special:
        text.append(" ★", style="yellow")
    return text


def format_history_label(entry: OrderHistoryEntry) -> Text:
    """Render one history row as ``date  vendor  (n items)``."""
    try:
        when = datetime.fromisoformat(entry.date).strftime("%d %b %Y %H:%M")
    except ValueError:
        when = entry.date
    text = Text()
    text.append(when, style="dim")
    text.append(f"  {entry.vendor_name}")
    count = len(entry.items)
    text.append(f"  ({count} item{'s' if count != 1 else ''})", style="dim")
    return text


def format_source_note(source: FetchSource | None) -> str:
    if source is FetchSource.CACHED:
        return "offline: showing saved data"
    if source is FetchSource.DEFAULT:
        return "offline: nothing saved yet"
    return ""
