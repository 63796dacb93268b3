"""
Response hardening for the portal API

The portal serves JSON and CSV downloads only, so the content policy
denies everything and only the portal frontends may frame it. Responses
are no-store unless a route chose its own Cache-Control.
"""

import logging
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .config import ENVIRONMENT, FRONTEND_ORIGINS

logger = logging.getLogger(__name__)

DISABLED_FEATURES = (
    "accelerometer",
    "camera",
    "geolocation",
    "gyroscope",
    "magnetometer",
    "microphone",
    "payment",
    "usb",
)


def content_security_policy(frame_origins: Optional[list[str]] = None) -> str:
    origins = FRONTEND_ORIGINS if frame_origins is None else frame_origins
    ancestors = " ".join(origins) or "'none'"
    return "; ".join(
        [
            "default-src 'none'",
            f"frame-ancestors {ancestors}",
            "base-uri 'none'",
            "form-action 'none'",
        ]
    )


def static_headers(production: bool = ENVIRONMENT == "production") -> dict[str, str]:
    headers = {
        "X-Frame-Options": "SAMEORIGIN",
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Content-Security-Policy": content_security_policy(),
        "Permissions-Policy": ", ".join(f"{feature}=()" for feature in DISABLED_FEATURES),
        "X-Permitted-Cross-Domain-Policies": "none",
    }
    if production:
        headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = tuple(exclude_paths or ())
        self.headers = static_headers()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        if self.exclude_paths and request.url.path.startswith(self.exclude_paths):
            return response

        response.headers.update(self.headers)
        # CSV exports set their own
        response.headers.setdefault("Cache-Control", "no-store, no-cache, must-revalidate")
        return response
