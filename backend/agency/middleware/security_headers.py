"""Middleware to add common security headers to responses."""

from typing import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

DEFAULT_HEADERS = {
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'none'",
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security headers to every response.

    Responses under any of ``no_store_prefixes`` also get
    ``Cache-Control: no-store`` so balances and checkout links are never
    cached by browsers or proxies.
    """

    def __init__(self, app: ASGIApp, no_store_prefixes: Iterable[str] = ()) -> None:
        super().__init__(app)
        self.no_store_prefixes = tuple(no_store_prefixes)

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in DEFAULT_HEADERS.items():
            response.headers.setdefault(name, value)
        if self.no_store_prefixes and request.url.path.startswith(self.no_store_prefixes):
            response.headers["Cache-Control"] = "no-store"
        return response
