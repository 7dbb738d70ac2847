"""Domain models for quickorder.

Records arrive from the API and the local cache in the server's camelCase
shape, and older cached copies may lack fields added later (``price``,
``vendorId``, ``imageKey``, ``isSpecial``). The ``migrate_*`` functions are the
only way raw records become models, so every older shape is bridged here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from quickorder.constant import (
    CATEGORIES,
    COMMON_VENDOR_ID,
    DEFAULT_CATEGORY,
    DEFAULT_QUANTITY,
    DEFAULT_UNIT,
    MIN_QUANTITY,
    UNITS,
)


class RecordError(ValueError):
    """A raw record is too damaged to migrate."""


@dataclass
class CatalogItem:
    """A sellable grocery line plus its per-session order state."""

    id: str
    vendor_id: str
    name: str
    unit: str
    category: str
    price: str = "0"
    image_key: str | None = None
    selected: bool = False
    quantity: float = DEFAULT_QUANTITY

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "vendorId": self.vendor_id,
            "name": self.name,
            "unit": self.unit,
            "category": self.category,
            "price": self.price,
            "imageKey": self.image_key,
            "selected": self.selected,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class Vendor:
    """A supplier reachable over WhatsApp."""

    id: str
    name: str
    phone: str
    is_special: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "phone": self.phone, "isSpecial": self.is_special}


@dataclass(frozen=True)
class Profile:
    """The shop's identity."""

    id: str
    shop_name: str
    owner_name: str = ""
    phone: str = ""
    address: str = ""
    gst: str | None = None
    turnover: str = ""
    role: str = ""
    language: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "shopName": self.shop_name,
            "ownerName": self.owner_name,
            "phone": self.phone,
            "address": self.address,
            "gst": self.gst,
            "turnover": self.turnover,
            "role": self.role,
            "language": self.language,
        }


@dataclass(frozen=True)
class HistoryItem:
    """Value snapshot of one ordered line; never references the live catalog."""

    name: str
    quantity: float
    unit: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "quantity": self.quantity, "unit": self.unit}


@dataclass(frozen=True)
class OrderHistoryEntry:
    """An order as it was sent."""

    id: str
    date: str
    vendor_name: str
    vendor_phone: str
    items: tuple[HistoryItem, ...] = field(default_factory=tuple)
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "vendorName": self.vendor_name,
            "vendorPhone": self.vendor_phone,
            "items": [item.to_dict() for item in self.items],
            "message": self.message,
        }


def _pick(record: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if name in record and record[name] is not None:
            return record[name]
    return default


def _require_text(record: Mapping[str, Any], *names: str) -> str:
    value = _pick(record, *names)
    if value is None or not str(value).strip():
        raise RecordError(f"record is missing {names[0]!r}")
    return str(value)


_TRUE_TEXT = {"true", "1", "yes"}
_FALSE_TEXT = {"false", "0", "no", ""}


def _coerce_bool(raw: Any, default: bool = False) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUE_TEXT:
            return True
        if text in _FALSE_TEXT:
            return False
    return default


def _coerce_quantity(raw: Any) -> float:
    try:
        quantity = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_QUANTITY
    if not math.isfinite(quantity):
        return DEFAULT_QUANTITY
    return max(MIN_QUANTITY, quantity)


def migrate_item_record(record: Mapping[str, Any]) -> CatalogItem:
    """Build a catalog item from any persisted or wire shape."""
    if not isinstance(record, Mapping):
        raise RecordError("item record must be an object")

    unit = str(_pick(record, "unit", default=DEFAULT_UNIT))
    if unit not in UNITS:
        unit = DEFAULT_UNIT
    category = str(_pick(record, "category", default=DEFAULT_CATEGORY))
    if category not in CATEGORIES:
        category = DEFAULT_CATEGORY

    image_key = _pick(record, "imageKey", "image_key")
    return CatalogItem(
        id=_require_text(record, "id"),
        vendor_id=str(_pick(record, "vendorId", "vendor_id", default=COMMON_VENDOR_ID)),
        name=_require_text(record, "name"),
        unit=unit,
        category=category,
        price=str(_pick(record, "price", default="0")),
        image_key=str(image_key) if image_key is not None else None,
        selected=_coerce_bool(_pick(record, "selected")),
        quantity=_coerce_quantity(_pick(record, "quantity", default=DEFAULT_QUANTITY)),
    )


def migrate_vendor_record(record: Mapping[str, Any]) -> Vendor:
    """Build a vendor from any persisted or wire shape."""
    if not isinstance(record, Mapping):
        raise RecordError("vendor record must be an object")
    return Vendor(
        id=_require_text(record, "id"),
        name=_require_text(record, "name"),
        phone=str(_pick(record, "phone", default="")),
        is_special=_coerce_bool(_pick(record, "isSpecial", "is_special")),
    )


def migrate_profile_record(record: Mapping[str, Any]) -> Profile:
    """Build a profile from any persisted or wire shape."""
    if not isinstance(record, Mapping):
        raise RecordError("profile record must be an object")
    gst = _pick(record, "gst")
    return Profile(
        id=str(_pick(record, "id", default="")),
        shop_name=_require_text(record, "shopName", "shop_name"),
        owner_name=str(_pick(record, "ownerName", "owner_name", default="")),
        phone=str(_pick(record, "phone", default="")),
        address=str(_pick(record, "address", default="")),
        gst=str(gst) if gst else None,
        turnover=str(_pick(record, "turnover", default="")),
        role=str(_pick(record, "role", default="")),
        language=str(_pick(record, "language", default="")),
    )


def migrate_history_record(record: Mapping[str, Any]) -> OrderHistoryEntry:
    """Build a history entry from its persisted shape."""
    if not isinstance(record, Mapping):
        raise RecordError("history record must be an object")
    raw_items = _pick(record, "items", default=[])
    if not isinstance(raw_items, list):
        raise RecordError("history items must be a list")

    items = tuple(
        HistoryItem(
            name=str(_pick(raw, "name", default="")),
            quantity=_coerce_quantity(_pick(raw, "quantity", default=DEFAULT_QUANTITY)),
            unit=str(_pick(raw, "unit", default="")),
        )
        for raw in raw_items
        if isinstance(raw, Mapping)
    )
    return OrderHistoryEntry(
        id=_require_text(record, "id"),
        date=str(_pick(record, "date", default="")),
        vendor_name=str(_pick(record, "vendorName", "vendor_name", default="")),
        vendor_phone=str(_pick(record, "vendorPhone", "vendor_phone", default="")),
        items=items,
        message=str(_pick(record, "message", default="")),
    )


def migrate_list(raw: Any, migrate) -> list:
    """Migrate a list of raw records, dropping the ones that cannot be read.

    A non-empty list in which no record can be read is rejected as a whole.
    """
    if not isinstance(raw, list):
        raise RecordError("expected a list of records")
    migrated = []
    for record in raw:
        try:
            migrated.append(migrate(record))
        except RecordError:
            continue
    if raw and not migrated:
        raise RecordError(f"none of {len(raw)} records could be read")
    return migrated
