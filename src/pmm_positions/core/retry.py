"""Retry policy for single JSON-RPC requests."""

from __future__ import annotations

import random
from dataclasses import dataclass

import httpx

from ..config import RetryConfig

RETRYABLE_HTTP_STATUSES = frozenset({429, 502, 503, 504})

INITIAL_BACKOFF_SECONDS = 0.25
JITTER_RATIO = 0.1


def is_retryable_http_status(status: int | None) -> bool:
    return status in RETRYABLE_HTTP_STATUSES


def is_retryable_exception(exc: BaseException) -> bool:
    # Connect/read timeouts, resets and DNS failures; never programming errors.
    return isinstance(exc, (httpx.TransportError, OSError))


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Attempt budget plus capped exponential backoff with jitter."""

    max_attempts: int
    max_backoff_seconds: float
    total_budget_seconds: float

    @classmethod
    def from_config(cls, config: RetryConfig) -> "RetryPolicy":
        return cls(
            max_attempts=config.max_attempts,
            max_backoff_seconds=config.max_backoff_seconds,
            total_budget_seconds=config.total_retry_budget_seconds,
        )

    def allows(self, *, attempt: int, elapsed_seconds: float) -> bool:
        """Whether another attempt may follow ``attempt`` (1-based)."""

        if attempt >= self.max_attempts:
            return False
        return elapsed_seconds <= self.total_budget_seconds

    def backoff_seconds(
        self,
        attempt: int,
        *,
        rng: random.Random | None = None,
        retry_after: float | None = None,
    ) -> float:
        """Delay before the attempt following ``attempt``.

        A server-supplied ``retry_after`` wins over the computed delay but is
        still capped at ``max_backoff_seconds``.
        """

        if retry_after is not None:
            return max(0.0, min(self.max_backoff_seconds, retry_after))
        base = min(self.max_backoff_seconds, INITIAL_BACKOFF_SECONDS * float(2 ** (attempt - 1)))
        if base <= 0:
            return 0.0
        source = rng or random
        jitter = base * JITTER_RATIO * (source.random() * 2.0 - 1.0)
        return max(0.0, base + jitter)


__all__ = [
    "RETRYABLE_HTTP_STATUSES",
    "is_retryable_http_status",
    "is_retryable_exception",
    "RetryPolicy",
]
