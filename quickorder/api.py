"""REST client for the QuickOrder backend.

Handles:
- health checks
- profile and item reads
- vendor reads/writes
- order records
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from quickorder.config import API_BASE_URL, FETCH_TIMEOUT_SECONDS, HEALTH_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ApiClient:
    """Thin async wrapper over the backend's JSON endpoints.

    Every method returns the decoded JSON payload as-is so callers can cache
    the raw response.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        params: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        response = await self._client.request(
            method,
            path,
            json=payload,
            params=params,
            timeout=timeout if timeout is not None else self.timeout,
        )
        if not response.is_success:
            text = response.text or response.reason_phrase
            raise ApiError(response.status_code, text)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def check_health(self) -> bool:
        """Return True when the backend answers ``{"status": "ok"}``; never raises."""
        try:
            data = await self._request("GET", "/api/health", timeout=HEALTH_TIMEOUT_SECONDS)
        except (httpx.HTTPError, ApiError, ValueError) as exc:
            logger.debug("health check failed: %r", exc)
            return False
        return isinstance(data, dict) and data.get("status") == "ok"

    # Profile

    async def get_profile(self) -> Any:
        return await self._request("GET", "/api/profile")

    # Items

    async def get_items(self, vendor_id: str) -> Any:
        return await self._request("GET", "/api/items", params={"vendorId": vendor_id})

    # Vendors

    async def get_vendors(self) -> Any:
        return await self._request("GET", "/api/vendors")

    async def create_vendor(self, name: str, phone: str) -> Any:
        return await self._request("POST", "/api/vendors", payload={"name": name, "phone": phone})

    async def update_vendor(self, vendor_id: str, changes: dict[str, Any]) -> Any:
        return await self._request("PATCH", f"/api/vendors/{vendor_id}", payload=changes)

    async def delete_vendor(self, vendor_id: str) -> None:
        """Delete a vendor; the server cascades to its items and orders."""
        await self._request("DELETE", f"/api/vendors/{vendor_id}")

    # Orders

    async def create_order(self, vendor_id: str, total_amount: str, items_count: int) -> Any:
        return await self._request(
            "POST",
            "/api/orders",
            payload={"vendorId": vendor_id, "totalAmount": total_amount, "itemsCount": items_count},
        )
