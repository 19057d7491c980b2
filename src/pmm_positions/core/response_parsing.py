"""JSON-RPC response envelope parsing."""

from __future__ import annotations

from typing import Protocol

from .errors import (
    PmmError,
    PmmProtocolError,
    classify_rpc_error,
)


class JsonPayloadResponse(Protocol):
    def json(self) -> object: ...


def parse_json_payload(
    response: JsonPayloadResponse,
    *,
    http_status: int | None,
) -> dict[str, object]:
    """Parse response JSON payload and map parse failures to domain errors."""

    try:
        payload = response.json()
    except Exception as exc:
        raise PmmProtocolError(
            "response body is not valid JSON",
            http_status=http_status,
        ) from exc

    if not isinstance(payload, dict):
        # Batched JSON-RPC arrays are never sent by this client.
        raise PmmProtocolError(
            "response JSON root must be an object",
            http_status=http_status,
        )
    return payload


def extract_rpc_result(
    payload: dict[str, object],
    *,
    request_id: int,
    http_status: int | None,
) -> tuple[object, PmmError | None]:
    """Return ``(result, error)`` for a single JSON-RPC response envelope."""

    if payload.get("jsonrpc") != "2.0":
        return None, PmmProtocolError(
            "response is not a JSON-RPC 2.0 envelope",
            http_status=http_status,
        )
    if payload.get("id") != request_id:
        return None, PmmProtocolError(
            f"response id {payload.get('id')!r} does not match request id {request_id}",
            http_status=http_status,
        )
    if "error" in payload and payload["error"] is not None:
        return None, classify_rpc_error(payload["error"], http_status=http_status)  # type: ignore[arg-type]
    if "result" not in payload:
        return None, PmmProtocolError(
            "JSON-RPC response has neither result nor error",
            http_status=http_status,
        )
    return payload["result"], None


__all__ = [
    "parse_json_payload",
    "extract_rpc_result",
]
