"""Fixed catalog enumerations, cache keys and defaults."""

from __future__ import annotations

# Unit value -> short label shown in messages and lists.
UNIT_LABELS: dict[str, str] = {
    "g": "g",
    "kg": "kg",
    "litre": "L",
    "pieces": "pcs",
    "bunch": "bunch",
    "tray": "tray",
    "packet": "pkt",
}

UNITS: list[str] = list(UNIT_LABELS)

DEFAULT_UNIT = "pieces"

CATEGORIES: list[str] = [
    "Vegetables",
    "Dairy",
    "Meat & Eggs",
    "Staples",
    "Spices & Herbs",
]

DEFAULT_CATEGORY = "Staples"

# Items tagged with this vendor id show up under every vendor.
COMMON_VENDOR_ID = "common"

DEFAULT_RESTAURANT_NAME = "My Restaurant"

CURRENCY_SYMBOL = "₹"

MIN_QUANTITY = 0.5
DEFAULT_QUANTITY = 1

VENDORS_KEY = "@quickorder_vendors_v3"
RESTAURANT_KEY = "@quickorder_restaurant"
HISTORY_KEY = "@quickorder_history"
PROFILE_KEY = "@quickorder_profile"
_VENDOR_ITEMS_KEY_PREFIX = "@quickorder_items_v3_"


def vendor_items_key(vendor_id: str) -> str:
    """Cache key holding the item list for one vendor."""
    return f"{_VENDOR_ITEMS_KEY_PREFIX}{vendor_id}"


WHATSAPP_URI_TEMPLATE = "https://wa.me/{phone}?text={text}"
WHATSAPP_WEB_URI_TEMPLATE = "https://web.whatsapp.com/send?phone={phone}&text={text}"

CATEGORY_BADGE_STYLES: dict[str, str] = {
    "Vegetables": "bold #0b1f0f on #5fbf72",
    "Dairy": "bold #0b1f33 on #9cc7f0",
    "Meat & Eggs": "bold #ffffff on #b23a48",
    "Staples": "bold #1f1a0b on #e0c069",
    "Spices & Herbs": "bold #ffffff on #8a4fb5",
}

CATEGORY_BADGES: dict[str, str] = {
    "Vegetables": "VEG",
    "Dairy": "DRY",
    "Meat & Eggs": "M&E",
    "Staples": "STP",
    "Spices & Herbs": "SPC",
}
