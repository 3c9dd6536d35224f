from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0


@dataclass(frozen=True)
class _Sample:
    at: float
    duration_ms: float
    error: bool


@dataclass(frozen=True)
class RequestStats:
    avg_response_ms: float
    requests_per_minute: int
    error_rate: float  # percent of requests in the window answered with 5xx


class RequestMetrics:
    """Rolling one-minute window of request timings and outcomes."""

    def __init__(self, window: float = WINDOW_SECONDS, clock=time.monotonic) -> None:
        self._window = window
        self._clock = clock
        self._samples: deque[_Sample] = deque()

    def _prune(self, now: float) -> None:
        while self._samples and now - self._samples[0].at > self._window:
            self._samples.popleft()

    def record(self, duration_ms: float, status_code: int) -> None:
        now = self._clock()
        self._samples.append(_Sample(now, duration_ms, status_code >= 500))
        self._prune(now)

    def snapshot(self) -> RequestStats:
        self._prune(self._clock())
        total = len(self._samples)
        if total == 0:
            return RequestStats(avg_response_ms=0.0, requests_per_minute=0, error_rate=0.0)

        avg = sum(s.duration_ms for s in self._samples) / total
        errors = sum(1 for s in self._samples if s.error)
        return RequestStats(
            avg_response_ms=round(avg, 2),
            requests_per_minute=round(total * 60.0 / self._window),
            error_rate=round(errors / total * 100, 2),
        )


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """Feeds every response's timing into ``app.state.request_metrics``."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            metrics: RequestMetrics | None = getattr(request.app.state, "request_metrics", None)
            if metrics is not None:
                metrics.record((time.perf_counter() - start) * 1000, status_code)
