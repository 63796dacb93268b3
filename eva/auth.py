import hashlib
import json
import logging
from typing import Optional

import httpx
from fastapi import Depends, HTTPException, Request

from .cache import cache
from .config import SESSION_CACHE_TTL, SESSION_COOKIE_NAMES
from .schemas import SessionUser
from .services.marketplace_client import MarketplaceClient, MarketplaceError, create_http_client

logger = logging.getLogger(__name__)

ROLE_ALIASES = {
    "ADMINISTRATOR": "ADMIN",
    "ADMIN": "ADMIN",
    "VENDOR": "VENDOR",
    "PROVIDER": "VENDOR",
    "PROFESSIONAL": "VENDOR",
    "USER": "USER",
    "CLIENT": "USER",
}


def extract_credentials(request: Request) -> dict:
    """Collect the bearer token and session cookies to forward upstream"""
    headers = {}
    authorization = request.headers.get("authorization")
    if authorization:
        headers["Authorization"] = authorization

    cookies = {
        name: request.cookies[name] for name in SESSION_COOKIE_NAMES if request.cookies.get(name)
    }
    return {"headers": headers, "cookies": cookies}


def session_cache_key(credentials: dict) -> Optional[str]:
    """Cache key of a resolved session: SHA-256 of the forwarded credentials"""
    if not credentials["headers"] and not credentials["cookies"]:
        return None
    raw = json.dumps(credentials, sort_keys=True)
    return f"session:{hashlib.sha256(raw.encode()).hexdigest()}"


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared httpx client stored on the application state"""
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        client = create_http_client()
        request.app.state.http_client = client
    return client


async def get_marketplace(
    request: Request, http: httpx.AsyncClient = Depends(get_http_client)
) -> MarketplaceClient:
    """Marketplace client acting on behalf of the caller"""
    return MarketplaceClient(http, extract_credentials(request))


def normalize_role(role: Optional[str]) -> str:
    return ROLE_ALIASES.get((role or "USER").upper(), "USER")


def session_user_from_payload(payload: dict) -> SessionUser:
    # /api/auth/me answers either {user: {...}} or the user itself
    data = payload.get("user", payload) if isinstance(payload, dict) else {}
    if not data or not data.get("id"):
        raise HTTPException(status_code=401, detail="Not authenticated")

    provider = data.get("provider") or {}
    return SessionUser(
        id=str(data["id"]),
        email=data.get("email") or "",
        name=data.get("name"),
        role=normalize_role(data.get("role")),
        image=data.get("image"),
        providerId=data.get("providerId") or provider.get("id"),
    )


async def get_current_user(
    request: Request, marketplace: MarketplaceClient = Depends(get_marketplace)
) -> SessionUser:
    """Resolve the caller through the marketplace session endpoint"""
    credentials = extract_credentials(request)
    cache_key = session_cache_key(credentials)
    if cache_key is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please sign in to the marketplace first.",
        )

    cached = cache.get(cache_key)
    if cached:
        return SessionUser(**cached)

    try:
        payload = await marketplace.get("/api/auth/me")
    except MarketplaceError as e:
        if e.status_code in (401, 403, 404):
            logger.info(f"🔒 Session rejected by marketplace: {e.status_code}")
            raise HTTPException(status_code=401, detail="Session expired or invalid") from e
        raise

    user = session_user_from_payload(payload or {})
    cache.set(cache_key, user.model_dump(), SESSION_CACHE_TTL)
    logger.debug(f"✅ Resolved session for {user.email} ({user.role})")
    return user


def require_roles(*roles: str):
    """
    Dependency factory restricting a route to given roles (admins always pass)

    Example:
        @router.get("/vendor/dashboard")
        async def dashboard(user: SessionUser = Depends(require_roles("VENDOR"))):
            ...
    """

    async def checker(user: SessionUser = Depends(get_current_user)) -> SessionUser:
        if user.is_admin or user.role in roles:
            return user
        logger.warning(f"⚠️ User {user.id} with role {user.role} denied (needs {roles})")
        raise HTTPException(status_code=403, detail="You do not have access to this area")

    return checker


require_vendor = require_roles("VENDOR")
require_admin = require_roles("ADMIN")
