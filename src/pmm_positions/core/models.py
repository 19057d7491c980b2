"""Core call/result models shared by the batch executor and the codec."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Call:
    target: str
    data: bytes


@dataclass(slots=True, frozen=True)
class CallResult:
    """Outcome of one call inside a batch; index-aligned to the submitted calls."""

    success: bool
    data: bytes = b""

    @classmethod
    def failed(cls) -> "CallResult":
        return cls(success=False, data=b"")


@dataclass(slots=True, frozen=True)
class DecodedResult:
    success: bool
    value: object | None = None
    error: str | None = None


__all__ = [
    "Call",
    "CallResult",
    "DecodedResult",
]
