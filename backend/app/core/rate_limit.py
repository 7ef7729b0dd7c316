"""Per-client request throttling for the search and recommendation endpoints.

Limits are held in process memory, so each worker counts on its own.
"""

from __future__ import annotations

import logging
import math
import time
from collections import defaultdict, deque

from fastapi import HTTPException, Request, status

from app.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window limiter keyed by client IP."""

    def __init__(self, name: str, max_requests: int = 60, window_seconds: int = 60):
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    @staticmethod
    def client_key(request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _window(self, key: str, now: float) -> deque[float]:
        hits = self._hits[key]
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()
        return hits

    def check(self, request: Request) -> None:
        """Record the request or raise 429 with a Retry-After hint."""
        now = time.monotonic()
        key = self.client_key(request)
        hits = self._window(key, now)

        if len(hits) >= self.max_requests:
            retry_after = max(1, math.ceil(hits[0] + self.window_seconds - now))
            logger.warning(
                "%s rate limit hit by %s", self.name, key,
                extra={"category": self.name, "client_ip": key},
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Too many {self.name} requests. Max {self.max_requests} per {self.window_seconds}s.",
                headers={"Retry-After": str(retry_after)},
            )
        hits.append(now)

    def reset(self) -> None:
        self._hits.clear()


search_limiter = RateLimiter("search", max_requests=settings.search_rate_limit)
recommendation_limiter = RateLimiter("recommendation", max_requests=settings.recommendation_rate_limit)
