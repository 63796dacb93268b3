"""Client for the marketplace REST API.

The marketplace owns providers, bookings, quotes, reviews, authentication and
payments. The portal forwards the caller's credentials on every call so the
marketplace keeps doing its own access control.
"""

import logging
from typing import Any, Optional

import httpx
from fastapi import HTTPException

from ..config import MARKETPLACE_API_TIMEOUT, MARKETPLACE_API_URL, MARKETPLACE_SERVICE_TOKEN

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Raised when the marketplace API cannot satisfy a request"""

    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload


def create_http_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Shared connection pool for marketplace calls"""
    return httpx.AsyncClient(
        base_url=MARKETPLACE_API_URL,
        timeout=MARKETPLACE_API_TIMEOUT,
        headers={"Accept": "application/json"},
        transport=transport,
    )


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or f"Marketplace returned HTTP {response.status_code}", None

    if isinstance(data, dict):
        for field in ("message", "error", "detail"):
            if isinstance(data.get(field), str) and data[field]:
                return data[field], data
    return f"Marketplace returned HTTP {response.status_code}", data


class MarketplaceClient:
    """Thin async wrapper around the marketplace REST endpoints"""

    def __init__(self, http: httpx.AsyncClient, credentials: Optional[dict[str, Any]] = None):
        self.http = http
        credentials = credentials or {}
        self.headers: dict[str, str] = dict(credentials.get("headers") or {})
        self.cookies: dict[str, str] = dict(credentials.get("cookies") or {})

    def _cookie_header(self) -> dict[str, str]:
        if not self.cookies:
            return {}
        return {"Cookie": "; ".join(f"{k}={v}" for k, v in self.cookies.items())}

    async def send(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send a request and raise MarketplaceError on failure"""
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}

        headers = {**self.headers, **self._cookie_header()}

        try:
            response = await self.http.request(method, path, params=params, json=json, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"⏰ Marketplace timeout on {method} {path}")
            raise MarketplaceError(504, "Marketplace API timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Marketplace unreachable on {method} {path}: {e}")
            raise MarketplaceError(503, "Marketplace API unavailable") from e

        if response.status_code >= 400:
            message, payload = _error_message(response)
            if response.status_code >= 500:
                logger.error(f"❌ Marketplace error {response.status_code} on {method} {path}: {message}")
                raise MarketplaceError(502, message, payload)
            logger.warning(f"⚠️ Marketplace rejected {method} {path}: {response.status_code} {message}")
            raise MarketplaceError(response.status_code, message, payload)

        return response

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> Any:
        response = await self.send(method, path, params=params, json=json)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MarketplaceError(502, "Marketplace returned an invalid response") from e

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, params: Optional[dict] = None) -> Any:
        return await self.request("POST", path, params=params, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("DELETE", path, params=params)

    async def get_raw(self, method: str, path: str, json: Any = None) -> httpx.Response:
        """Return the raw response (file exports)"""
        return await self.send(method, path, json=json)


def without_none(body: dict) -> dict:
    """
    Leave unset optional fields out of a request body

    Marketplace request schemas accept a missing optional field but reject
    an explicit null.
    """
    return {k: v for k, v in body.items() if v is not None}


def total_of(payload: Any) -> int:
    """Total row count from a paginated marketplace response"""
    if not isinstance(payload, dict):
        return 0
    for key in ("pagination", "meta"):
        block = payload.get(key)
        if isinstance(block, dict) and block.get("total") is not None:
            return int(block["total"])
    return 0


def items_of(payload: Any, key: str) -> list:
    """List of rows under `key`, or the payload itself when it is a list"""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        value = payload.get(key)
        if isinstance(value, list):
            return value
        if isinstance(payload.get("data"), list):
            return payload["data"]
    return []


def item_of(payload: Any, key: str) -> dict:
    """Single record wrapped as {key: {...}} or returned bare"""
    if isinstance(payload, dict):
        value = payload.get(key)
        if isinstance(value, dict):
            return value
        return payload
    return {}


def raise_not_found(e: MarketplaceError, what: str):
    """Upstream 404 becomes a portal 404; anything else propagates"""
    if e.status_code == 404:
        raise HTTPException(status_code=404, detail=f"{what} not found") from e
    raise e


def service_credentials() -> dict:
    """Credentials for background jobs and scripts acting without a caller"""
    if not MARKETPLACE_SERVICE_TOKEN:
        raise RuntimeError("MARKETPLACE_SERVICE_TOKEN is not set")
    return {"headers": {"Authorization": f"Bearer {MARKETPLACE_SERVICE_TOKEN}"}}
