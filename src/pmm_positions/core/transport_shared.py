"""httpx client defaults and JSON-RPC request/response helpers."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from ..config import PositionsClientConfig

JSONRPC_VERSION = "2.0"


def build_default_headers(config: PositionsClientConfig) -> Mapping[str, str]:
    return {
        "Accept": "application/json",
        "Accept-Encoding": "gzip",
        "Content-Type": "application/json",
        "User-Agent": config.user_agent,
    }


def build_default_timeout(config: PositionsClientConfig) -> httpx.Timeout:
    return httpx.Timeout(
        connect=config.transport.timeout_connect_seconds,
        read=config.transport.timeout_read_seconds,
        write=config.transport.timeout_write_seconds,
        pool=config.transport.timeout_pool_seconds,
    )


def build_rpc_payload(request_id: int, method: str, params: list[object]) -> dict[str, object]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "method": method,
        "params": params,
    }


def retry_after_seconds(response: object) -> float | None:
    """Parse a delta-seconds ``Retry-After`` header; HTTP dates are ignored."""

    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


__all__ = [
    "JSONRPC_VERSION",
    "build_default_headers",
    "build_default_timeout",
    "build_rpc_payload",
    "retry_after_seconds",
]
