import asyncio
import time
from collections import defaultdict, deque
from collections.abc import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.routing import Match

from app.core.errors import error_payload
from app.core.settings import Settings

UNMATCHED_ROUTE = "<unmatched>"


def route_template(request: Request) -> str:
    """The path template the request will be routed to, e.g. `/api/movies/{imdb_id}`."""
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return UNMATCHED_ROUTE


class SlidingWindowLimiter:
    def __init__(self, window_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[tuple[str, str], deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float) -> None:
        cutoff = now - self.window_seconds
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now

    async def allow(self, key: tuple[str, str], limit: int) -> bool:
        now = self._clock()
        async with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            hits = self._hits[key]
            while hits and hits[0] <= now - self.window_seconds:
                hits.popleft()
            if len(hits) >= limit:
                return False
            hits.append(now)
            return True


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Caps calls per client and route so a single browser can't drain the shared OMDB key quota."""

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings
        self.limiter = SlidingWindowLimiter()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path.startswith("/health"):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        route = route_template(request)
        limit = self.settings.rate_limit_per_minute
        if not await self.limiter.allow((route, client_ip), limit):
            # handlers registered on the app don't see exceptions raised in middleware
            return JSONResponse(
                status_code=429,
                content=error_payload("rate_limited", "Too many requests", {"route": route, "limit_per_minute": limit}),
            )

        return await call_next(request)
