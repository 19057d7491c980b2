"""Async JSON-RPC transport with retry, throttling, and envelope evaluation."""

from __future__ import annotations

import asyncio
import itertools
import logging
import random
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

import httpx

from ..config import PositionsClientConfig
from .async_throttling import AsyncMinIntervalThrottler
from .errors import PmmConnectivityError, PmmProtocolError
from .response_parsing import extract_rpc_result, parse_json_payload
from .retry import RetryPolicy, is_retryable_exception, is_retryable_http_status
from .transport_shared import (
    build_default_headers,
    build_default_timeout,
    build_rpc_payload,
    retry_after_seconds,
)

logger = logging.getLogger("pmm_positions")


class AsyncTransportClient(Protocol):
    async def post(self, url: str, *, json: object) -> object: ...
    async def aclose(self) -> None: ...


class AsyncRpcTransport:
    """JSON-RPC 2.0 over HTTP POST, bound to one endpoint URL.

    Transport failures and HTTP 429/502/503/504 are retried within the
    configured attempt and time budget. A JSON-RPC ``error`` member is an
    answer, not a transient failure, and is raised without retrying.
    """

    def __init__(
        self,
        rpc_url: str,
        config: PositionsClientConfig,
        *,
        client: AsyncTransportClient | None = None,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
        clock: Callable[[], float] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._retry = RetryPolicy.from_config(config.retry)
        self._sleep = sleeper or _default_sleep
        self._clock = clock or time.monotonic
        self._rng = rng or random.Random()
        self._ids = itertools.count(1)
        self._closed = False

        self._throttler = AsyncMinIntervalThrottler(
            config.throttling.min_wait_interval_seconds,
            clock=self._clock,
            sleeper=self._sleep,
        )
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers=build_default_headers(config),
            timeout=build_default_timeout(config),
        )

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            await self._client.aclose()

    async def request(self, method: str, params: Sequence[object] = ()) -> object:
        if self._closed:
            raise PmmConnectivityError("transport is already closed")

        started_at = self._clock()
        attempt = 0

        while True:
            attempt += 1
            request_id = next(self._ids)
            await self._throttler.wait()
            logger.debug("rpc start method=%s id=%s attempt=%s", method, request_id, attempt)

            try:
                response = await self._client.post(
                    self._rpc_url,
                    json=build_rpc_payload(request_id, method, list(params)),
                )
            except Exception as exc:
                if not is_retryable_exception(exc):
                    raise
                if await self._backoff(method, attempt, started_at, reason=exc.__class__.__name__):
                    continue
                raise PmmConnectivityError(
                    f"network/transport error calling {method}",
                    cause="network",
                ) from exc

            http_status = getattr(response, "status_code", None)
            if is_retryable_http_status(http_status):
                if await self._backoff(
                    method,
                    attempt,
                    started_at,
                    reason=f"http_{http_status}",
                    retry_after=retry_after_seconds(response),
                ):
                    continue
                raise PmmConnectivityError(
                    f"endpoint kept answering HTTP {http_status}",
                    http_status=http_status,
                    cause="http",
                )

            return self._evaluate(method, request_id, response, http_status)

    def _evaluate(
        self,
        method: str,
        request_id: int,
        response: object,
        http_status: int | None,
    ) -> object:
        try:
            body = parse_json_payload(response, http_status=http_status)  # type: ignore[arg-type]
        except PmmProtocolError:
            if http_status is not None and http_status >= 500:
                # Gateways answer outages with HTML error pages.
                raise PmmConnectivityError(
                    f"endpoint failed with HTTP {http_status}",
                    http_status=http_status,
                    cause="http",
                ) from None
            logger.error("rpc parse error method=%s id=%s http_status=%s", method, request_id, http_status)
            raise

        result, error = extract_rpc_result(body, request_id=request_id, http_status=http_status)
        if error is not None:
            logger.debug(
                "rpc error method=%s id=%s code=%s cause=%s",
                method,
                request_id,
                error.code,
                error.cause,
            )
            raise error
        return result

    async def _backoff(
        self,
        method: str,
        attempt: int,
        started_at: float,
        *,
        reason: str,
        retry_after: float | None = None,
    ) -> bool:
        if not self._retry.allows(attempt=attempt, elapsed_seconds=self._clock() - started_at):
            logger.error("rpc giving up method=%s attempt=%s reason=%s", method, attempt, reason)
            return False
        delay = self._retry.backoff_seconds(attempt, rng=self._rng, retry_after=retry_after)
        logger.warning(
            "rpc retrying method=%s attempt=%s reason=%s delay_seconds=%.3f",
            method,
            attempt,
            reason,
            delay,
        )
        await self._sleep(delay)
        return True


async def _default_sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


__all__ = [
    "AsyncTransportClient",
    "AsyncRpcTransport",
]
