import asyncio
import json
from datetime import datetime, timezone

import pytest

from quickorder.history import SendError, record_order, send_order, snapshot_items
from quickorder.loaders import load_history
from quickorder.models import Vendor
from quickorder.store import VendorNotFoundError

RAMESH = Vendor(id="v1", name="Ramesh", phone="919876543210")


class Opener:
    def __init__(self, *answers):
        self.answers = list(answers) or [True]
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        return self.answers.pop(0) if self.answers else True


@pytest.fixture
def order_store(store, sample_items):
    store.set_items(sample_items)
    store.vendors = [RAMESH]
    store.current_vendor_id = RAMESH.id
    return store


def test_snapshot_copies_selected_lines_by_value(sample_items):
    snapshot = snapshot_items(sample_items)

    assert [(i.name, i.quantity, i.unit) for i in snapshot] == [("Onion", 2, "kg")]


def test_history_survives_catalog_changes(order_store):
    entry = record_order(order_store, RAMESH, "Hello",
                         now=datetime(2025, 1, 2, 10, 0, tzinfo=timezone.utc))

    order_store.find_item("i1").name = "Red Onion"
    order_store.remove_item("i1")

    assert entry.items[0].name == "Onion"
    assert order_store.history[0].items[0].name == "Onion"
    assert entry.date == "2025-01-02T10:00:00+00:00"


def test_send_order_records_then_resets(order_store, backend, cache):
    backend.reply("POST", "/api/orders", status=201, body={"id": "o1"})
    opener = Opener(True)

    result = asyncio.run(send_order(order_store, RAMESH, opener))

    assert opener.urls == [result.uri]
    assert result.uri.startswith("https://wa.me/919876543210?text=Hello%20Ramesh")
    assert result.recorded_remotely is True
    assert order_store.history[0].message == result.message
    assert load_history(cache)[0].vendor_name == "Ramesh"
    assert not order_store.selected_items()
    assert all(item.quantity == 1 for item in order_store.items)

    payload = json.loads(backend.sent("POST", "/api/orders")[0].content)
    assert payload == {"vendorId": "v1", "totalAmount": "40.00", "itemsCount": 1}


def test_history_kept_when_order_record_fails(order_store, backend):
    backend.reply("POST", "/api/orders", status=500, body={"error": "db down"})

    result = asyncio.run(send_order(order_store, RAMESH, Opener(True)))

    assert result.recorded_remotely is False
    assert len(order_store.history) == 1
    assert order_store.history[0].items[0].quantity == 2
    assert not order_store.selected_items()


def test_web_fallback_when_app_link_refused(order_store, backend):
    backend.offline = True
    opener = Opener(False, True)

    result = asyncio.run(send_order(order_store, RAMESH, opener))

    assert len(opener.urls) == 2
    assert result.uri.startswith("https://web.whatsapp.com/send?phone=919876543210&text=")


def test_no_handler_leaves_cart_and_history_untouched(order_store):
    with pytest.raises(SendError):
        asyncio.run(send_order(order_store, RAMESH, Opener(False, False)))

    assert order_store.history == []
    assert [item.id for item in order_store.selected_items()] == ["i1"]


def test_missing_vendor(order_store):
    with pytest.raises(VendorNotFoundError):
        asyncio.run(send_order(order_store, order_store.find_vendor("gone"), Opener()))


def test_nothing_selected(order_store):
    order_store.deselect_all()
    opener = Opener()

    assert asyncio.run(send_order(order_store, RAMESH, opener)) is None
    assert opener.urls == []


def test_cart_is_reset_before_order_record_is_posted(order_store, monkeypatch):
    seen = []

    async def create_order(vendor_id, total_amount, items_count):
        seen.append((len(order_store.history), [i.id for i in order_store.selected_items()]))
        return {"id": "o1"}

    monkeypatch.setattr(order_store.api, "create_order", create_order)

    result = asyncio.run(send_order(order_store, RAMESH, Opener(True)))

    assert seen == [(1, [])]
    assert result.recorded_remotely is True


def test_cancelled_order_record_leaves_cart_reset(order_store, monkeypatch):
    async def scenario():
        posting = asyncio.Event()

        async def create_order(vendor_id, total_amount, items_count):
            posting.set()
            await asyncio.sleep(60)

        monkeypatch.setattr(order_store.api, "create_order", create_order)
        task = asyncio.ensure_future(send_order(order_store, RAMESH, Opener(True)))
        await posting.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert len(order_store.history) == 1
    assert not order_store.selected_items()
