"""Per-client sliding-window rate limiting for inbound requests."""

from __future__ import annotations

import math
import time
from typing import Callable

from fastapi import HTTPException, Request, status


class RateLimiter:
    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, list[float]] = {}

    @property
    def tracked_clients(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float) -> None:
        stale = [key for key, hits in self._hits.items() if not hits or now - hits[-1] >= self.window_seconds]
        for key in stale:
            del self._hits[key]

    def hit(self, key: str) -> float | None:
        """Record a request for ``key``; return seconds to wait when over the limit."""
        now = self._clock()
        self._sweep(now)
        recent = [t for t in self._hits.get(key, ()) if now - t < self.window_seconds]
        if len(recent) >= self.max_requests:
            self._hits[key] = recent
            return max(0.0, self.window_seconds - (now - recent[0]))
        recent.append(now)
        self._hits[key] = recent
        return None

    def enforce(self, request: Request) -> None:
        if self.max_requests <= 0:
            return
        key = request.client.host if request.client else "unknown"
        retry_after = self.hit(key)
        if retry_after is None:
            return
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded. Max {self.max_requests} requests per {self.window_seconds:g}s.",
            headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
        )
