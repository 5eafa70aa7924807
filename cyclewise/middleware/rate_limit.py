"""In-memory sliding-window rate limiter keyed by client IP.

Scores are cheap but event titles can reach a remote estimator, so every
route except the exempt ones (health checks) shares one per-client budget.
Counts are per process; run a single worker or front it with a shared limiter.
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict, deque
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from cyclewise.config import Settings, get_settings

logger = logging.getLogger("cyclewise.ratelimit")

WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP sliding window of ``rate_limit_per_minute`` requests."""

    def __init__(self, app: Any, settings: Settings | None = None) -> None:
        super().__init__(app)
        s = settings or get_settings()
        self._max_requests = s.rate_limit_per_minute
        self._exempt = tuple(s.rate_limit_exempt_paths)
        # ip -> request timestamps, oldest first
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    @staticmethod
    def _client_ip(request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _expire(self, hits: deque[float], now: float) -> None:
        cutoff = now - WINDOW_SECONDS
        while hits and hits[0] <= cutoff:
            hits.popleft()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path.startswith(self._exempt):
            return await call_next(request)

        ip = self._client_ip(request)
        now = time.monotonic()
        hits = self._hits[ip]
        self._expire(hits, now)

        if len(hits) >= self._max_requests:
            retry_after = int(WINDOW_SECONDS - (now - hits[0]))
            logger.warning("Rate limit hit for %s on %s", ip, request.url.path)
            return Response(
                content='{"detail":"Rate limit exceeded"}',
                status_code=429,
                media_type="application/json",
                headers={"Retry-After": str(max(retry_after, 1))},
            )

        hits.append(now)
        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self._max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(self._max_requests - len(hits), 0))
        return response
