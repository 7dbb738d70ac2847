"""Order message, total and WhatsApp link formatting.

Everything here is pure: the same items, names and prices always produce the
same text, byte for byte. History entries store that text verbatim.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Iterable
from urllib.parse import quote

from quickorder.constant import (
    CURRENCY_SYMBOL,
    UNIT_LABELS,
    WHATSAPP_URI_TEMPLATE,
    WHATSAPP_WEB_URI_TEMPLATE,
)
from quickorder.models import CatalogItem

_CENTS = Decimal("0.01")
_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)")


def unit_label(unit: str) -> str:
    """Short label for a unit value, e.g. ``litre`` -> ``L``."""
    return UNIT_LABELS.get(unit, unit)


def parse_price(text: str | None) -> Decimal:
    """Parse an exact-text price; anything unreadable counts as zero."""
    raw = (text or "").strip()
    if not raw:
        return Decimal("0")
    try:
        value = Decimal(raw)
    except InvalidOperation:
        match = _LEADING_NUMBER.match(raw)
        if match is None:
            return Decimal("0")
        value = Decimal(match.group(0))
    if not value.is_finite():
        return Decimal("0")
    return value


def format_quantity(quantity: float) -> str:
    """Render 2.0 as ``2`` and 0.5 as ``0.5``."""
    if float(quantity).is_integer():
        return str(int(quantity))
    return str(quantity)


def to_cents(amount: Decimal) -> Decimal:
    """Round half-up to 2 places at whatever precision the amount needs."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{to_cents(amount)}"


def line_total(item: CatalogItem) -> Decimal:
    return parse_price(item.price) * Decimal(str(item.quantity))


def selected_only(items: Iterable[CatalogItem]) -> list[CatalogItem]:
    return [item for item in items if item.selected]


def order_total(items: Iterable[CatalogItem]) -> Decimal:
    """Sum of price x quantity over selected items, rounded to cents."""
    total = sum((line_total(item) for item in selected_only(items)), Decimal("0"))
    return to_cents(total)


def format_order_line(item: CatalogItem) -> str:
    quantity = format_quantity(item.quantity)
    price = parse_price(item.price)
    return (
        f"  • {item.name} ({quantity} {unit_label(item.unit)}) - "
        f"{format_money(price)} x {quantity} = {format_money(line_total(item))}"
    )


def generate_order_message(items: Iterable[CatalogItem], vendor_name: str, restaurant_name: str) -> str:
    """Build the WhatsApp order text; empty when nothing is selected."""
    selected = selected_only(items)
    if not selected:
        return ""

    item_lines = "\n".join(format_order_line(item) for item in selected)
    total = order_total(selected)
    return (
        f"Hello {vendor_name} \U0001F44B\n\n"
        "Please send the following items:\n\n"
        f"{item_lines}\n\n"
        f"*Total Amount: {format_money(total)}*\n\n"
        f"Thank you\n- {restaurant_name}"
    )


def build_messaging_uri(phone_digits: str, message: str) -> str:
    """wa.me deep link carrying ``message`` for ``phone_digits``."""
    return WHATSAPP_URI_TEMPLATE.format(phone=phone_digits, text=quote(message, safe=""))


def build_web_messaging_uri(phone_digits: str, message: str) -> str:
    return WHATSAPP_WEB_URI_TEMPLATE.format(phone=phone_digits, text=quote(message, safe=""))
