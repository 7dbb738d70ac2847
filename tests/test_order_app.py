import asyncio

import pytest

from quickorder.history_modal import HistoryModal
from quickorder.models import HistoryItem, OrderHistoryEntry, Vendor
from quickorder.order_app import QuickOrderApp
from quickorder.store import StoreState
from quickorder.vendor_modal import VendorModal


async def _settle(pilot, store):
    for _ in range(100):
        if store.state is StoreState.READY:
            return
        await pilot.pause(0.02)


@pytest.fixture
def app(store, backend):
    backend.reply("GET", "/api/health", body={"status": "ok"})
    return QuickOrderApp(store, open_url=lambda url: True)


def test_health_timer_is_stopped_and_api_closed_on_exit(app, store):
    async def scenario():
        async with app.run_test() as pilot:
            await _settle(pilot, store)
            assert app._health_timer is not None

    asyncio.run(scenario())

    assert app._health_timer is None
    assert store.api.is_closed is True


def test_store_is_loading_until_startup_loaders_settle(app, store, monkeypatch, vendor_payload):
    async def scenario():
        gate = asyncio.Event()

        async def get_vendors():
            await gate.wait()
            return vendor_payload

        monkeypatch.setattr(store.api, "get_vendors", get_vendors)
        async with app.run_test() as pilot:
            await pilot.pause()
            assert store.state is StoreState.LOADING
            assert store.is_loading is True

            gate.set()
            await _settle(pilot, store)
            assert store.is_loading is False
            assert [v.id for v in store.vendors] == ["v1", "v2"]

    asyncio.run(scenario())


def test_item_removal_needs_a_second_press(app, store, sample_items):
    async def scenario():
        async with app.run_test() as pilot:
            await _settle(pilot, store)
            store.set_items(sample_items)
            app.item_selected_index = 0

            await pilot.press("d")
            assert [item.id for item in store.items] == ["i1", "i2"]

            await pilot.press("j", "d")
            assert [item.id for item in store.items] == ["i1", "i2"]

            await pilot.press("d")
            assert [item.id for item in store.items] == ["i1"]

    asyncio.run(scenario())


def test_category_filter_cycles_through_categories(app, store, sample_items):
    async def scenario():
        async with app.run_test() as pilot:
            await _settle(pilot, store)
            store.set_items(sample_items)

            await pilot.press("c")
            assert app.category_filter == "Vegetables"
            assert [item.name for item in app._visible_items()] == ["Onion"]

            await pilot.press("c", "c", "c")
            assert app.category_filter == "Staples"
            assert [item.name for item in app._visible_items()] == ["Rice"]

            await pilot.press("c", "c")
            assert app.category_filter is None
            assert len(app._visible_items()) == 2

    asyncio.run(scenario())


def test_vendor_delete_needs_a_second_press(app, store, backend):
    backend.reply("DELETE", "/api/vendors/v1", status=204)

    async def scenario():
        async with app.run_test() as pilot:
            await _settle(pilot, store)
            store.vendors = [Vendor(id="v1", name="Ramesh", phone="9198")]
            await app.push_screen(VendorModal(store))
            await pilot.pause()

            await pilot.press("x")
            assert backend.sent("DELETE", "/api/vendors/v1") == []

            await pilot.press("x")
            for _ in range(50):
                if backend.sent("DELETE", "/api/vendors/v1"):
                    break
                await pilot.pause(0.02)
            assert store.vendors == []
            assert len(backend.sent("DELETE", "/api/vendors/v1")) == 1

    asyncio.run(scenario())


def test_history_delete_needs_a_second_press(app, store):
    async def scenario():
        async with app.run_test() as pilot:
            await _settle(pilot, store)
            store.add_history_entry(OrderHistoryEntry(
                id="", date="2025-01-02T10:00:00+00:00", vendor_name="Ramesh",
                vendor_phone="9198", items=(HistoryItem(name="Onion", quantity=2, unit="kg"),),
                message="Hello",
            ))
            await app.push_screen(HistoryModal(store))
            await pilot.pause()

            await pilot.press("d")
            assert len(store.history) == 1

            await pilot.press("d")
            assert store.history == []

    asyncio.run(scenario())
