"""
Security headers middleware

Adds hardening headers to every API response:
- X-Frame-Options / frame-ancestors: only the ViraWeb frontend may embed responses
- Content-Security-Policy: Supabase and Stripe are the only third-party origins
- Strict-Transport-Security: production only
- Cache-Control: no-store unless the route set its own (sitemap, robots)
"""

import logging
import os
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .config import CORS_ORIGINS, SUPABASE_URL

logger = logging.getLogger(__name__)

IS_PRODUCTION = os.getenv("ENVIRONMENT", "development").lower() == "production"


def get_csp_policy() -> str:
    """Content-Security-Policy for a JSON API whose frontend talks to Supabase and Stripe"""
    frame_ancestors = " ".join(["'self'"] + CORS_ORIGINS)
    supabase = SUPABASE_URL or "https://*.supabase.co"
    supabase_ws = supabase.replace("https://", "wss://", 1)

    directives = [
        "default-src 'self'",
        f"frame-ancestors {frame_ancestors}",
        "script-src 'self' https://js.stripe.com",
        "style-src 'self' https://fonts.googleapis.com",
        "font-src 'self' data: https://fonts.gstatic.com",
        "img-src 'self' data: blob: https:",
        "frame-src 'self' https://js.stripe.com https://hooks.stripe.com https://checkout.stripe.com",
        f"connect-src 'self' {supabase} {supabase_ws} https://api.stripe.com",
        "base-uri 'none'",
        "form-action 'self' https://checkout.stripe.com",
    ]

    policy = "; ".join(directives)
    logger.debug(f"🔒 Generated CSP policy: {policy}")
    return policy


def get_permissions_policy() -> str:
    features = [
        "accelerometer=()",
        "camera=()",
        "geolocation=()",
        "gyroscope=()",
        "magnetometer=()",
        "microphone=()",
        "usb=()",
        # Stripe Checkout uses the Payment Request API
        'payment=(self "https://js.stripe.com")',
    ]
    return ", ".join(features)


def get_security_headers_dict() -> dict:
    headers = {
        "X-Frame-Options": "SAMEORIGIN",
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Content-Security-Policy": get_csp_policy(),
        "Permissions-Policy": get_permissions_policy(),
        "X-Permitted-Cross-Domain-Policies": "none",
        "Cross-Origin-Opener-Policy": "same-origin-allow-popups",
    }
    if IS_PRODUCTION:
        headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the headers from get_security_headers_dict() to all responses"""

    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or []
        self.headers = get_security_headers_dict()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        path = request.url.path
        if any(path.startswith(excluded) for excluded in self.exclude_paths):
            return response

        for name, value in self.headers.items():
            response.headers[name] = value

        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"

        # Cross-Origin-Resource-Policy is left to the CORS middleware
        return response
