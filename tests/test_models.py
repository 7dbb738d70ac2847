import pytest

from quickorder.models import (
    RecordError,
    migrate_history_record,
    migrate_item_record,
    migrate_list,
    migrate_profile_record,
    migrate_vendor_record,
)


def test_item_from_oldest_shape_gets_defaults():
    item = migrate_item_record({"id": "a", "name": "Tomato", "unit": "kg", "category": "Vegetables"})

    assert item.vendor_id == "common"
    assert item.price == "0"
    assert item.image_key is None
    assert item.selected is False
    assert item.quantity == 1


def test_item_from_wire_shape():
    item = migrate_item_record({
        "id": "a", "vendorId": "v1", "name": "Paneer", "unit": "g", "category": "Dairy",
        "price": "320.00", "imageKey": "paneer", "selected": True, "quantity": 3,
    })

    assert item.vendor_id == "v1"
    assert item.price == "320.00"
    assert item.image_key == "paneer"
    assert item.selected is True
    assert item.quantity == 3


def test_item_unknown_enumerations_fall_back():
    item = migrate_item_record({"id": "a", "name": "Salt", "unit": "sack", "category": "Misc"})

    assert item.unit == "pieces"
    assert item.category == "Staples"


def test_item_quantity_below_floor_is_clamped():
    item = migrate_item_record({"id": "a", "name": "Chilli", "unit": "g", "category": "Spices & Herbs",
                                "quantity": 0.1})
    assert item.quantity == 0.5


def test_item_without_id_is_rejected():
    with pytest.raises(RecordError):
        migrate_item_record({"name": "Ghost", "unit": "kg"})


def test_vendor_without_special_flag():
    vendor = migrate_vendor_record({"id": "v1", "name": "Ramesh", "phone": "9198"})
    assert vendor.is_special is False


def test_profile_requires_shop_name():
    with pytest.raises(RecordError):
        migrate_profile_record({"id": "p1", "ownerName": "Asha"})

    profile = migrate_profile_record({"id": "p1", "shopName": "Asha Kitchen", "gst": ""})
    assert profile.shop_name == "Asha Kitchen"
    assert profile.gst is None


def test_history_entry_survives_persistence_shape():
    raw = {
        "id": "h1",
        "date": "2025-01-02T10:00:00+00:00",
        "vendorName": "Ramesh",
        "vendorPhone": "9198",
        "items": [{"name": "Onion", "quantity": 2, "unit": "kg"}],
        "message": "Hello",
    }
    entry = migrate_history_record(raw)

    assert entry.to_dict() == raw
    assert entry.items[0].name == "Onion"


def test_migrate_list_drops_damaged_records():
    records = [{"id": "v1", "name": "A", "phone": "1"}, {"name": "no id"}, "junk"]
    assert [v.id for v in migrate_list(records, migrate_vendor_record)] == ["v1"]


def test_migrate_list_rejects_non_list():
    with pytest.raises(RecordError):
        migrate_list({"id": "v1"}, migrate_vendor_record)


def test_migrate_list_rejects_list_with_nothing_readable():
    with pytest.raises(RecordError):
        migrate_list([{"oops": 1}, {"oops": 2}], migrate_vendor_record)
    assert migrate_list([], migrate_vendor_record) == []


@pytest.mark.parametrize("raw,expected", [("false", False), ("False", False), ("0", False), (0, False),
                                          ("true", True), (1, True), (True, True), ("maybe", False)])
def test_flags_are_parsed_strictly(raw, expected):
    vendor = migrate_vendor_record({"id": "v1", "name": "Ramesh", "phone": "9198", "isSpecial": raw})
    item = migrate_item_record({"id": "a", "name": "Onion", "selected": raw})
    assert vendor.is_special is expected
    assert item.selected is expected


@pytest.mark.parametrize("raw", ["inf", float("inf"), float("-inf"), "nan"])
def test_non_finite_quantity_falls_back_to_default(raw):
    item = migrate_item_record({"id": "a", "name": "Onion", "quantity": raw})
    assert item.quantity == 1
