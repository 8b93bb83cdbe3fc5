"""
Rate Limiting Dependency

Per-route, per-client request throttling applied as a FastAPI
dependency, so expensive AI endpoints can carry tighter limits than the
rest of the API.

Design Considerations:
- Sliding window per client identifier
- Retry-After header on rejection
- In-process store; a shared store is needed when running several workers
"""

import logging
import time
from collections import deque
from typing import Deque, Dict, Optional

from fastapi import HTTPException, Request
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window rate limiter used as a route dependency.

    Example:
        parse_limiter = RateLimiter(window_seconds=60, max_requests=10)

        @router.post("/parse", dependencies=[Depends(parse_limiter)])
        async def parse(...): ...
    """

    def __init__(self, window_seconds: int, max_requests: int, name: str = "default"):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.name = name
        self.client_requests: Dict[str, Deque[float]] = {}

        logger.info(
            f"Rate limiter '{name}' initialized: {max_requests} requests per {window_seconds} seconds"
        )

    async def __call__(self, request: Request) -> None:
        client_id = self._get_client_identifier(request)
        retry_after = self.check(client_id)
        if retry_after is not None:
            logger.warning(f"Rate limit '{self.name}' exceeded for client {client_id}")
            raise HTTPException(
                status_code=HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later.",
                headers={"Retry-After": str(retry_after)},
            )

    def check(self, client_id: str, now: Optional[float] = None) -> Optional[int]:
        """
        Record a request for ``client_id``.

        Returns:
            None when the request is allowed, else seconds until a slot frees up
        """
        now = time.time() if now is None else now
        window_start = now - self.window_seconds
        requests = self.client_requests.setdefault(client_id, deque())

        while requests and requests[0] <= window_start:
            requests.popleft()

        if len(requests) >= self.max_requests:
            return max(1, int(requests[0] + self.window_seconds - now) + 1)

        requests.append(now)
        return None

    def reset(self) -> None:
        self.client_requests.clear()

    def _get_client_identifier(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"
