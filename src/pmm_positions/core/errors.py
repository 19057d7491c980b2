"""Error types and JSON-RPC error mapping."""

from __future__ import annotations

from collections.abc import Mapping

_REVERT_CODES = frozenset({3})


def _to_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return int(text)
    return None


def extract_error_code(error: Mapping[str, object] | None) -> int | None:
    if not isinstance(error, Mapping):
        return None
    return _to_int(error.get("code"))


def extract_error_message(error: Mapping[str, object] | None) -> str | None:
    if not isinstance(error, Mapping):
        return None
    value = error.get("message")
    return str(value) if value is not None else None


def extract_error_data(error: Mapping[str, object] | None) -> str | None:
    if not isinstance(error, Mapping):
        return None
    value = error.get("data")
    if isinstance(value, str):
        return value
    # Some nodes nest revert data one level down.
    if isinstance(value, Mapping) and isinstance(value.get("data"), str):
        return str(value["data"])
    return None


class PmmError(Exception):
    """Base exception for this package."""

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        http_status: int | None = None,
        cause: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.http_status = http_status
        self.cause = cause


class PmmValidationError(PmmError):
    """Invalid input; raised before any remote call is made."""


class PmmConnectivityError(PmmError):
    """Endpoint unreachable, liveness probe failed, or retries exhausted."""


class PmmClientClosedError(PmmError):
    """Raised when client is used after close."""


class PmmProtocolError(PmmError):
    """Response is not a well-formed JSON-RPC envelope."""


class PmmRpcError(PmmError):
    """The node answered with a JSON-RPC error object."""

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        data: str | None = None,
        http_status: int | None = None,
        cause: str | None = None,
    ) -> None:
        super().__init__(message, code=code, http_status=http_status, cause=cause)
        self.data = data

    @property
    def is_revert(self) -> bool:
        if self.code in _REVERT_CODES:
            return True
        return "revert" in str(self).lower()


class PmmDecodeError(PmmError):
    """Return data does not match the expected ABI shape."""


class PmmBatchFailure(PmmError):
    """An aggregate request failed as a whole."""


class PmmDiscoveryError(PmmError):
    """LP token enumeration stopped on an unexpected error."""


class PmmTimeoutError(PmmError):
    """The caller's deadline expired before the run completed."""


def classify_rpc_error(
    error: Mapping[str, object] | None,
    *,
    http_status: int | None,
) -> PmmRpcError | PmmProtocolError:
    """Map a JSON-RPC ``error`` member to a domain exception."""

    if not isinstance(error, Mapping):
        return PmmProtocolError(
            "JSON-RPC error member must be an object",
            http_status=http_status,
        )
    code = extract_error_code(error)
    message = extract_error_message(error) or "JSON-RPC request failed"
    cause = "revert" if (code in _REVERT_CODES or "revert" in message.lower()) else "rpc"
    return PmmRpcError(
        message,
        code=code,
        data=extract_error_data(error),
        http_status=http_status,
        cause=cause,
    )


__all__ = [
    "PmmError",
    "PmmValidationError",
    "PmmConnectivityError",
    "PmmClientClosedError",
    "PmmProtocolError",
    "PmmRpcError",
    "PmmDecodeError",
    "PmmBatchFailure",
    "PmmDiscoveryError",
    "PmmTimeoutError",
    "extract_error_code",
    "extract_error_message",
    "extract_error_data",
    "classify_rpc_error",
]
