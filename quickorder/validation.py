"""Form validation run before any store mutation or network call."""

from __future__ import annotations

import re

from quickorder.constant import CATEGORIES, UNITS

_PHONE_SEPARATORS = re.compile(r"[\s\-()]")


class ValidationError(ValueError):
    """User input was rejected; nothing was changed."""


def normalize_phone(phone: str) -> str:
    """Reduce a typed phone number to the digits-only form wa.me expects."""
    cleaned = _PHONE_SEPARATORS.sub("", phone or "")
    if cleaned.startswith("+"):
        cleaned = cleaned[1:]
    return cleaned


def validate_vendor(name: str, phone: str) -> tuple[str, str]:
    """Return the cleaned ``(name, phone)`` or raise ``ValidationError``."""
    cleaned_name = (name or "").strip()
    if not cleaned_name:
        raise ValidationError("Vendor name cannot be empty.")
    cleaned_phone = normalize_phone(phone)
    if not re.fullmatch(r"[0-9]+", cleaned_phone):
        raise ValidationError("Phone number must be numeric and not empty.")
    return cleaned_name, cleaned_phone


def validate_item(name: str, unit: str, category: str) -> tuple[str, str, str]:
    cleaned_name = (name or "").strip()
    if not cleaned_name:
        raise ValidationError("Item name cannot be empty.")
    cleaned_unit = (unit or "").strip()
    if cleaned_unit not in UNITS:
        raise ValidationError(f"Unit must be one of: {', '.join(UNITS)}.")
    if category not in CATEGORIES:
        raise ValidationError(f"Category must be one of: {', '.join(CATEGORIES)}.")
    return cleaned_name, cleaned_unit, category


def validate_restaurant_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Restaurant name cannot be empty.")
    return cleaned
