"""
Pytest fixtures shared across the quickorder tests.

The backend is replaced by an ``httpx.MockTransport`` routed through
``FakeBackend`` so no test touches the network.
"""
import json

import httpx
import pytest

from quickorder.api import ApiClient
from quickorder.cache import LocalCache
from quickorder.models import CatalogItem
from quickorder.store import OrderStore


class FakeBackend:
    """Routes ``(method, path)`` to canned ``(status, body)`` replies."""

    def __init__(self):
        self.routes = {}
        self.requests = []
        self.offline = False

    def reply(self, method, path, status=200, body=None):
        self.routes[(method, path)] = (status, body)

    def handler(self, request):
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("backend unreachable", request=request)
        status, body = self.routes.get((request.method, request.url.path), (404, {"error": "not found"}))
        if status == 204:
            return httpx.Response(204)
        return httpx.Response(status, content=json.dumps(body).encode("utf-8"),
                              headers={"Content-Type": "application/json"})

    def sent(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api(backend):
    return ApiClient("http://backend.test", timeout=2.0, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def cache(tmp_path):
    return LocalCache(tmp_path / "cache.db")


@pytest.fixture
def store(api, cache):
    return OrderStore(api, cache, fetch_timeout=2.0, write_timeout=2.0)


@pytest.fixture
def sample_items():
    """Onion selected at 2 kg, Rice unselected."""
    return [
        CatalogItem(id="i1", vendor_id="v1", name="Onion", unit="kg", category="Vegetables",
                    price="20.00", selected=True, quantity=2),
        CatalogItem(id="i2", vendor_id="common", name="Rice", unit="kg", category="Staples",
                    price="50.00", selected=False, quantity=1),
    ]


@pytest.fixture
def vendor_payload():
    return [
        {"id": "v1", "name": "Ramesh", "phone": "919876543210", "isSpecial": False},
        {"id": "v2", "name": "Suresh Dairy", "phone": "919812345678"},
    ]
