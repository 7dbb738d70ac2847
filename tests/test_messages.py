from decimal import Decimal

import pytest

from quickorder.messages import (
    build_messaging_uri,
    build_web_messaging_uri,
    format_money,
    format_quantity,
    generate_order_message,
    order_total,
    parse_price,
    unit_label,
)
from quickorder.models import CatalogItem


def _item(name, price, quantity, unit="kg", selected=True):
    return CatalogItem(id=name, vendor_id="v1", name=name, unit=unit, category="Staples",
                       price=price, selected=selected, quantity=quantity)


def test_onion_example(sample_items):
    message = generate_order_message(sample_items, "Ramesh", "My Restaurant")

    assert message == (
        "Hello Ramesh 👋\n\n"
        "Please send the following items:\n\n"
        "  • Onion (2 kg) - ₹20.00 x 2 = ₹40.00\n\n"
        "*Total Amount: ₹40.00*\n\n"
        "Thank you\n- My Restaurant"
    )
    assert "Rice" not in message


def test_nothing_selected_gives_empty_string(sample_items):
    for item in sample_items:
        item.selected = False
    assert generate_order_message(sample_items, "Ramesh", "My Restaurant") == ""
    assert generate_order_message([], "", "") == ""


def test_message_is_deterministic(sample_items):
    first = generate_order_message(sample_items, "Ramesh", "Asha Kitchen")
    second = generate_order_message(sample_items, "Ramesh", "Asha Kitchen")
    assert first.encode("utf-8") == second.encode("utf-8")


def test_total_with_fractional_and_missing_prices():
    items = [
        _item("Butter", "12.50", 0.5),
        _item("Salt", "", 3),
        _item("Mystery", "abc", 2),
        _item("Milk", "10", 1.5, unit="litre"),
        _item("Ignored", "999", 1, selected=False),
    ]

    assert order_total(items) == Decimal("21.25")
    message = generate_order_message(items, "Suresh", "Asha Kitchen")
    assert "*Total Amount: ₹21.25*" in message
    assert "  • Butter (0.5 kg) - ₹12.50 x 0.5 = ₹6.25" in message
    assert "  • Milk (1.5 L) - ₹10.00 x 1.5 = ₹15.00" in message
    assert "  • Salt (3 kg) - ₹0.00 x 3 = ₹0.00" in message


def test_total_rounds_to_cents():
    assert order_total([_item("Ginger", "0.333", 1)]) == Decimal("0.33")
    assert order_total([_item("Garlic", "0.125", 1)]) == Decimal("0.13")


@pytest.mark.parametrize("unit,label", [("litre", "L"), ("pieces", "pcs"), ("packet", "pkt"), ("kg", "kg"),
                                        ("crate", "crate")])
def test_unit_labels(unit, label):
    assert unit_label(unit) == label


def test_parse_price_is_lenient():
    assert parse_price("20.00") == Decimal("20.00")
    assert parse_price(" 15 ") == Decimal("15")
    assert parse_price("12.5kg") == Decimal("12.5")
    assert parse_price(None) == Decimal("0")
    assert parse_price("NaN") == Decimal("0")
    assert parse_price("free") == Decimal("0")


def test_format_quantity():
    assert format_quantity(2) == "2"
    assert format_quantity(2.0) == "2"
    assert format_quantity(0.5) == "0.5"


def test_messaging_uri_encodes_message():
    uri = build_messaging_uri("919876543210", "Hi there\n*Total: ₹40.00*")

    assert uri.startswith("https://wa.me/919876543210?text=")
    assert uri.endswith("Hi%20there%0A%2ATotal%3A%20%E2%82%B940.00%2A")


def test_web_messaging_uri():
    assert build_web_messaging_uri("9198", "a&b") == "https://web.whatsapp.com/send?phone=9198&text=a%26b"


def test_very_large_prices_still_format():
    huge = "1" + "0" * 28
    items = [_item("Saffron", huge, 1)]

    assert format_money(Decimal(huge)) == "₹" + huge + ".00"
    assert order_total(items) == Decimal(huge + ".00")
    assert f"*Total Amount: ₹{huge}.00*" in generate_order_message(items, "Ramesh", "Asha Kitchen")
