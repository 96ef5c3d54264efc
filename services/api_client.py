"""
API Client -- thin async HTTP client for the SecretLease backend.

Used by scripts and integration checks. The client keeps only the bearer
token issued by the server; account state is always re-read from the API.

Configuration:
    BACKEND_URL env var or fallback to http://localhost:8000
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from config_env import BACKEND_URL

logger = logging.getLogger(__name__)

TIMEOUT = 30.0


class APIError(Exception):
    """Non-2xx response; carries the backend's error code and field detail."""

    def __init__(self, status_code: int, code: str, detail: str, fields: Optional[dict] = None):
        super().__init__(f"{status_code} {code}: {detail}")
        self.status_code = status_code
        self.code = code
        self.detail = detail
        self.fields = fields or {}


class SecretLeaseAPI:
    """Async HTTP client for the SecretLease FastAPI backend."""

    def __init__(
        self,
        base_url: str = BACKEND_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.token = token

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=TIMEOUT,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def _request(self, method: str, path: str, **kwargs):
        client = await self._get_client()
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        resp = await client.request(method, path, headers=headers, **kwargs)
        if resp.is_error:
            try:
                body = resp.json()
            except ValueError:
                body = {"detail": resp.text}
            logger.error("%s %s failed with %d: %s", method, path, resp.status_code, body.get("detail"))
            raise APIError(
                resp.status_code,
                body.get("code", "error"),
                body.get("detail", ""),
                body.get("fields"),
            )
        return resp.json()

    def logout(self):
        self.token = None

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def health(self) -> dict:
        """Check if the backend is alive."""
        try:
            return await self._request("GET", "/health")
        except (APIError, httpx.HTTPError) as e:
            logger.warning("Backend health check failed: %s", e)
            return {"status": "unavailable", "error": str(e)}

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def register(
        self,
        email: str,
        password: str,
        payment_method: str,
        transaction_hash: str,
        payment_email: Optional[str] = None,
        wallet_address: Optional[str] = None,
    ) -> dict:
        data = await self._request("POST", "/auth/register", json={
            "email": email,
            "password": password,
            "payment_method": payment_method,
            "payment_email": payment_email,
            "wallet_address": wallet_address,
            "transaction_hash": transaction_hash,
        })
        self.token = data["token"]
        return data["user"]

    async def login(self, email: str, password: str) -> dict:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    # ------------------------------------------------------------------
    # Current user
    # ------------------------------------------------------------------

    async def me(self, screen: Optional[str] = None, has_results: bool = False) -> dict:
        params = {"has_results": has_results}
        if screen:
            params["screen"] = screen
        return await self._request("GET", "/users/me", params=params)

    async def favorites(self) -> list:
        return await self._request("GET", "/users/favorites")

    async def add_favorite(self, listing_id: str) -> list:
        return (await self._request("POST", f"/users/favorites/{listing_id}"))["favorites"]

    async def remove_favorite(self, listing_id: str) -> list:
        return (await self._request("DELETE", f"/users/favorites/{listing_id}"))["favorites"]

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def search(
        self,
        city: Optional[str] = None,
        max_budget: Optional[int] = None,
        sort_by: str = "newest",
    ) -> dict:
        params = {"sort_by": sort_by}
        if city:
            params["city"] = city
        if max_budget is not None:
            params["max_budget"] = max_budget
        return await self._request("GET", "/listings/search", params=params)

    async def get_listing(self, listing_id: str) -> dict:
        return await self._request("GET", f"/listings/{listing_id}")

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    async def payment_config(self) -> dict:
        return await self._request("GET", "/config/payment")

    async def submit_payment(self, amount: float, method: str) -> dict:
        return await self._request("POST", "/transactions", json={"amount": amount, "method": method})

    async def transactions(self, status: Optional[str] = None) -> list:
        params = {"status": status} if status else None
        return await self._request("GET", "/transactions", params=params)

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def get_stats(self) -> dict:
        return await self._request("GET", "/admin/stats")

    async def pending_signups(self) -> list:
        return await self._request("GET", "/admin/pending-signups")

    async def approve_user(self, account_id: str) -> dict:
        return await self._request("POST", f"/admin/approve-user/{account_id}")

    async def reject_user(self, account_id: str) -> dict:
        return await self._request("POST", f"/admin/reject-user/{account_id}")

    async def approve_transaction(self, transaction_id: str) -> dict:
        return await self._request("PUT", f"/transactions/{transaction_id}/approve")

    async def reject_transaction(self, transaction_id: str) -> dict:
        return await self._request("PUT", f"/transactions/{transaction_id}/reject")

    async def update_config(self, **fields) -> dict:
        return await self._request("PUT", "/admin/config", json=fields)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_api_client: Optional[SecretLeaseAPI] = None


def get_api_client() -> SecretLeaseAPI:
    """Get or create the global API client singleton."""
    global _api_client
    if _api_client is None:
        _api_client = SecretLeaseAPI()
    return _api_client
