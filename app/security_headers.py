"""
Response hardening for the admin API.

The API only serves JSON, CSV exports and invoice PDFs to the dashboard, so the
content policy denies everything except framing by the dashboard itself (the invoice
preview embeds the PDF endpoint).
"""

import logging
import os
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

IS_PRODUCTION = os.getenv("ENVIRONMENT", "development").lower() == "production"
ADMIN_URL = os.getenv("ADMIN_URL", "http://localhost:3000")

DEFAULT_CACHE_CONTROL = "no-store, no-cache, must-revalidate"

# Browser features the dashboard never needs from API responses
DISABLED_FEATURES = ("camera", "geolocation", "microphone", "payment", "usb", "interest-cohort")


def build_security_headers(admin_url: str = ADMIN_URL, production: bool = IS_PRODUCTION) -> dict:
    csp = "; ".join(
        [
            "default-src 'none'",
            f"frame-ancestors 'self' {admin_url}",
            "img-src 'self' data:",
            "base-uri 'none'",
            "form-action 'self'",
        ]
    )
    headers = {
        "X-Frame-Options": "SAMEORIGIN",
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "same-origin",
        "Content-Security-Policy": csp,
        "Permissions-Policy": ", ".join(f"{feature}=()" for feature in DISABLED_FEATURES),
    }
    if production:
        headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the admin API security headers; exports keep their own Cache-Control"""

    def __init__(self, app, exclude_paths: Optional[list[str]] = None, admin_url: str = ADMIN_URL):
        super().__init__(app)
        self.exclude_paths = tuple(exclude_paths or ())
        self.headers = build_security_headers(admin_url)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        if request.url.path.startswith(self.exclude_paths):
            return response

        response.headers.update(self.headers)
        response.headers.setdefault("Cache-Control", DEFAULT_CACHE_CONTROL)
        return response
