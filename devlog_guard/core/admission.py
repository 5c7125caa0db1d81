"""
Admission control for generation requests.

Decides, before any generation cost is incurred, whether a request may
proceed.

Enforcement Order:
1. Per-client rate limit - sliding one-hour window, consumed on attempt
2. Monthly budget - spend and token ceilings read from the usage ledger
"""

import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Deque, Dict, Mapping, Optional

from devlog_guard.observability.logger import get_logger

from .ledger import UsageLedger

log = get_logger("admission")

DEFAULT_CLIENT_ID = "127.0.0.1"

# Consulted in order; the forwarded-for chain may hold several addresses
CLIENT_ID_HEADERS = ("x-forwarded-for", "x-real-ip", "cf-connecting-ip")

HTTP_TOO_MANY_REQUESTS = 429
HTTP_FORBIDDEN = 403


class AdmissionStatus(Enum):
    """Outcome of an admission check."""
    ALLOWED = "allowed"
    RATE_LIMITED = "rate_limited"
    BUDGET_EXCEEDED = "budget_exceeded"


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a single rate-limit check."""
    allowed: bool
    limit: int
    count: int
    remaining: int
    reset_at: Optional[datetime]
    retry_after: int = 0


@dataclass(frozen=True)
class RateLimitInfo:
    """Read-only view of a client's current window."""
    request_count: int
    remaining: int
    oldest_timestamp: Optional[float]


@dataclass(frozen=True)
class BudgetRejection:
    """Metadata attached to a budget-exceeded rejection.

    ceiling names the limit that tripped: "cost" or "tokens".
    """
    ceiling: str
    spent: float
    limit: float
    tokens_used: int
    token_limit: int
    resets_at: datetime


@dataclass(frozen=True)
class AdmissionDecision:
    """Structured allow/reject verdict."""
    status: AdmissionStatus
    message: str = ""
    rate_limit: Optional[RateLimitResult] = None
    budget: Optional[BudgetRejection] = None

    @property
    def allowed(self) -> bool:
        return self.status == AdmissionStatus.ALLOWED

    @property
    def http_status(self) -> int:
        if self.status == AdmissionStatus.RATE_LIMITED:
            return HTTP_TOO_MANY_REQUESTS
        if self.status == AdmissionStatus.BUDGET_EXCEEDED:
            return HTTP_FORBIDDEN
        return 200


class AdmissionRejected(Exception):
    """Raised when a request is refused admission."""
    def __init__(self, decision: AdmissionDecision):
        super().__init__(decision.message)
        self.decision = decision


def client_id_from_headers(headers: Mapping[str, str]) -> str:
    """Derive a client identifier from proxy headers.

    Prefers the first address of X-Forwarded-For, then X-Real-IP, then
    CF-Connecting-IP. Falls back to a placeholder for untraceable origins.

    Args:
        headers: Request headers (any mapping; lookup is case-insensitive)

    Returns:
        Client identifier string
    """
    normalized = {str(k).lower(): v for k, v in headers.items()}

    forwarded = normalized.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    for name in CLIENT_ID_HEADERS[1:]:
        value = (normalized.get(name) or "").strip()
        if value:
            return value

    return DEFAULT_CLIENT_ID


class RateLimiter:
    """Sliding-window request limiter keyed by client identifier.

    Each client's window is an ascending deque of request timestamps. The
    check-then-append sequence runs under one lock so two concurrent
    requests cannot both take the last slot.
    """

    def __init__(
        self,
        max_requests: int = 3,
        window_seconds: float = 3600,
        clock: Callable[[], float] = time.time,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be > 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def check(self, client_id: str) -> RateLimitResult:
        """Check and consume one request slot for a client.

        Args:
            client_id: Client identifier

        Returns:
            RateLimitResult; when not allowed, retry_after is the number of
            whole seconds until the oldest request leaves the window
        """
        with self._lock:
            now = self._clock()
            # Idle clients are dropped at most once per window length
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            window = self._windows.setdefault(client_id, deque())
            self._expire(window, now)

            if len(window) >= self.max_requests:
                oldest = window[0]
                return RateLimitResult(
                    allowed=False,
                    limit=self.max_requests,
                    count=len(window),
                    remaining=0,
                    reset_at=_to_datetime(oldest + self.window_seconds),
                    retry_after=math.ceil(self.window_seconds - (now - oldest)),
                )

            window.append(now)
            return RateLimitResult(
                allowed=True,
                limit=self.max_requests,
                count=len(window),
                remaining=self.max_requests - len(window),
                reset_at=_to_datetime(window[0] + self.window_seconds),
            )

    def info(self, client_id: str) -> RateLimitInfo:
        """Inspect a client's window without consuming a slot."""
        with self._lock:
            window = self._windows.get(client_id)
            if not window:
                return RateLimitInfo(0, self.max_requests, None)
            now = self._clock()
            live = [ts for ts in window if now - ts < self.window_seconds]
            return RateLimitInfo(
                request_count=len(live),
                remaining=max(0, self.max_requests - len(live)),
                oldest_timestamp=live[0] if live else None,
            )

    def cleanup(self) -> int:
        """Expire old timestamps and drop empty windows.

        Returns:
            Number of client windows removed
        """
        with self._lock:
            return self._sweep(self._clock())

    @property
    def tracked_clients(self) -> int:
        """Number of client windows currently held."""
        with self._lock:
            return len(self._windows)

    def _sweep(self, now: float) -> int:
        removed = 0
        for client_id in list(self._windows):
            window = self._windows[client_id]
            self._expire(window, now)
            if not window:
                del self._windows[client_id]
                removed += 1
        self._last_sweep = now
        return removed

    def _expire(self, window: Deque[float], now: float) -> None:
        while window and now - window[0] >= self.window_seconds:
            window.popleft()


class AdmissionGuard:
    """Runs the rate and budget checks in enforcement order."""

    def __init__(self, rate_limiter: RateLimiter, ledger: UsageLedger):
        self.rate_limiter = rate_limiter
        self.ledger = ledger

    def check(self, client_id: str) -> AdmissionDecision:
        """Decide whether a client's request may proceed.

        The rate-limit slot is consumed even if the budget check then
        rejects the request.

        Args:
            client_id: Client identifier

        Returns:
            AdmissionDecision
        """
        rate = self.rate_limiter.check(client_id)
        if not rate.allowed:
            log.warning(
                "rate_limited",
                client_id=client_id,
                count=rate.count,
                retry_after=rate.retry_after,
            )
            return AdmissionDecision(
                status=AdmissionStatus.RATE_LIMITED,
                message=(
                    f"Too many requests. Maximum {rate.limit} requests per "
                    f"{_describe_window(self.rate_limiter.window_seconds)} allowed."
                ),
                rate_limit=rate,
            )

        status = self.ledger.get_budget_status()
        if status.is_exceeded:
            ceiling = "cost" if status.estimated_cost >= status.budget_limit else "tokens"
            log.warning(
                "budget_exceeded",
                client_id=client_id,
                month=status.month,
                ceiling=ceiling,
                spent_usd=str(status.estimated_cost),
                total_tokens=status.total_tokens,
            )
            return AdmissionDecision(
                status=AdmissionStatus.BUDGET_EXCEEDED,
                message=(
                    f"Monthly {'budget' if ceiling == 'cost' else 'token'} limit reached. "
                    "Generation paused until next month."
                ),
                rate_limit=rate,
                budget=BudgetRejection(
                    ceiling=ceiling,
                    spent=float(status.estimated_cost),
                    limit=float(status.budget_limit),
                    tokens_used=status.total_tokens,
                    token_limit=status.max_monthly_tokens,
                    resets_at=status.resets_at,
                ),
            )

        return AdmissionDecision(status=AdmissionStatus.ALLOWED, rate_limit=rate)

    def admit(self, client_id: str) -> AdmissionDecision:
        """Like check(), but raise when the request is refused.

        Raises:
            AdmissionRejected: If the rate or budget check fails
        """
        decision = self.check(client_id)
        if not decision.allowed:
            raise AdmissionRejected(decision)
        return decision


def _to_datetime(epoch_seconds: float) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)


def _describe_window(seconds: float) -> str:
    if seconds == 3600:
        return "hour"
    return f"{seconds:g} seconds"
