"""
Per-client request throttling for write endpoints (likes, messages).

State lives in process memory, so limits are per worker.
"""

import hashlib
import logging
import math
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from ..config import RL_LIKE_LIMIT, RL_MESSAGE_LIMIT, RL_WINDOW_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatePolicy:
    name: str
    limit: int
    window_seconds: int


@dataclass
class RateDecision:
    allowed: bool
    retry_after_seconds: int = 0


LIKE_POLICY = RatePolicy("match_like", RL_LIKE_LIMIT, RL_WINDOW_SECONDS)
MESSAGE_POLICY = RatePolicy("message_send", RL_MESSAGE_LIMIT, RL_WINDOW_SECONDS)


class SlidingWindowLimiter:
    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, policy: RatePolicy, identity: str) -> RateDecision:
        """Record one request for ``identity`` unless the policy's window is full."""
        now = self._clock()
        key = f"{policy.name}:{identity}"
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - policy.window_seconds:
                hits.popleft()
            if len(hits) >= policy.limit:
                wait = math.ceil(hits[0] + policy.window_seconds - now)
                return RateDecision(allowed=False, retry_after_seconds=max(1, wait))
            hits.append(now)
        return RateDecision(allowed=True)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


limiter = SlidingWindowLimiter()


def client_identity(request: Request) -> str:
    auth = request.headers.get("authorization", "").strip()
    if auth.lower().startswith("bearer ") and auth[7:].strip():
        # JWTs share their header segment; only a digest of the whole token tells clients apart.
        return "token:" + hashlib.sha256(auth[7:].strip().encode("utf-8")).hexdigest()[:16]
    forwarded = request.headers.get("x-forwarded-for", "").strip()
    if forwarded:
        return "ip:" + forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return "ip:" + request.client.host
    return "unknown"


def rate_limited(policy: RatePolicy):
    """Route dependency enforcing ``policy``; 429 with Retry-After once exhausted."""

    def _check(request: Request) -> None:
        identity = client_identity(request)
        decision = limiter.hit(policy, identity)
        if decision.allowed:
            return
        logger.info("[rate_limit] %s blocked %s retry_after=%ss", policy.name, identity, decision.retry_after_seconds)
        raise HTTPException(
            status_code=429,
            detail=f"Too many requests. Retry in {decision.retry_after_seconds}s",
            headers={"Retry-After": str(decision.retry_after_seconds)},
        )

    return Depends(_check)
