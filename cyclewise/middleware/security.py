"""Security headers for the JSON API.

Energy scores and symptom logs are personal health data, so API responses
are never cached by intermediaries.  HSTS is only sent in production where
the API sits behind TLS.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from cyclewise.config import Settings, get_settings

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Cache-Control": "no-store",
}

HSTS_HEADER = ("Strict-Transport-Security", "max-age=63072000; includeSubDomains")

# Swagger UI needs scripts and styles from the CDN
_DOCS_PATHS = ("/docs", "/redoc")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: Any, settings: Settings | None = None) -> None:
        super().__init__(app)
        s = settings or get_settings()
        self._hsts = s.environment == "production"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        is_docs = request.url.path.startswith(_DOCS_PATHS)
        for header, value in SECURITY_HEADERS.items():
            if is_docs and header == "Content-Security-Policy":
                continue
            response.headers.setdefault(header, value)
        if self._hsts:
            response.headers.setdefault(*HSTS_HEADER)
        return response
