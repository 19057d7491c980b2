"""ABI call encoding and return-data decoding.

The codec is pure: it turns ``(interface, function, args)`` into calldata and
turns raw return bytes back into Python values, raising ``PmmDecodeError``
whenever the bytes do not fit the declared output types.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from .errors import PmmDecodeError, PmmValidationError
from .models import CallResult, DecodedResult


def collapse_type(param: Mapping[str, object]) -> str:
    """Return the canonical type string, expanding tuple components."""

    raw_type = str(param["type"])
    if not raw_type.startswith("tuple"):
        return raw_type
    components = param.get("components") or []
    inner = ",".join(collapse_type(c) for c in components)  # type: ignore[union-attr]
    return f"({inner}){raw_type[len('tuple'):]}"


def _split_top_level(text: str) -> list[str]:
    out: list[str] = []
    depth = 0
    start = 0
    for idx, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            out.append(text[start:idx])
            start = idx + 1
    tail = text[start:]
    if tail:
        out.append(tail)
    return out


def _normalize_value(type_str: str, value: object) -> object:
    if type_str.endswith("]"):
        element_type = type_str[: type_str.rindex("[")]
        return tuple(_normalize_value(element_type, item) for item in value)  # type: ignore[union-attr]
    if type_str.startswith("("):
        component_types = _split_top_level(type_str[1:-1])
        return tuple(
            _normalize_value(t, v)
            for t, v in zip(component_types, value)  # type: ignore[call-overload]
        )
    if type_str == "address":
        return to_checksum_address(value)  # type: ignore[arg-type]
    return value


@dataclass(slots=True, frozen=True)
class AbiFunction:
    name: str
    input_types: tuple[str, ...]
    output_types: tuple[str, ...]
    selector: bytes

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"


class ContractInterface:
    """Function lookup over a JSON ABI."""

    def __init__(self, abi: Sequence[Mapping[str, object]]) -> None:
        self._by_name: dict[str, AbiFunction] = {}
        self._by_selector: dict[bytes, AbiFunction] = {}
        for entry in abi:
            if entry.get("type", "function") != "function":
                continue
            name = str(entry["name"])
            input_types = tuple(collapse_type(p) for p in entry.get("inputs") or [])  # type: ignore[union-attr]
            output_types = tuple(collapse_type(p) for p in entry.get("outputs") or [])  # type: ignore[union-attr]
            signature = f"{name}({','.join(input_types)})"
            function = AbiFunction(
                name=name,
                input_types=input_types,
                output_types=output_types,
                selector=function_signature_to_4byte_selector(signature),
            )
            if name in self._by_name:
                raise ValueError(f"overloaded function {name!r} is not supported")
            self._by_name[name] = function
            self._by_selector[function.selector] = function

    def function(self, name: str) -> AbiFunction:
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"function {name!r} is not part of this interface") from None

    def function_by_selector(self, selector: bytes) -> AbiFunction | None:
        return self._by_selector.get(bytes(selector))


def encode_call(
    interface: ContractInterface,
    fn_name: str,
    args: Sequence[object] = (),
) -> bytes:
    function = interface.function(fn_name)
    if len(args) != len(function.input_types):
        raise PmmValidationError(
            f"{function.signature} expects {len(function.input_types)} arguments, got {len(args)}"
        )
    try:
        encoded_args = abi_encode(list(function.input_types), list(args))
    except (EncodingError, TypeError, ValueError) as exc:
        raise PmmValidationError(f"cannot encode arguments for {function.signature}: {exc}") from exc
    return function.selector + encoded_args


def decode_values(types: Sequence[str], data: bytes) -> tuple[object, ...]:
    try:
        decoded = abi_decode(list(types), bytes(data))
    except (DecodingError, OverflowError, TypeError, ValueError) as exc:
        raise PmmDecodeError(
            f"cannot decode {len(data)} bytes as ({','.join(types)}): {exc}",
            cause="decode",
        ) from exc
    return tuple(_normalize_value(t, v) for t, v in zip(types, decoded))


def decode_output(interface: ContractInterface, fn_name: str, data: bytes) -> object:
    """Decode return data; a single output value is unwrapped."""

    function = interface.function(fn_name)
    values = decode_values(function.output_types, data)
    if len(values) == 1:
        return values[0]
    return values


def decode_arguments(interface: ContractInterface, calldata: bytes) -> tuple[AbiFunction, tuple[object, ...]]:
    """Split calldata into its function and decoded arguments."""

    function = interface.function_by_selector(bytes(calldata[:4]))
    if function is None:
        raise PmmDecodeError(f"unknown selector 0x{bytes(calldata[:4]).hex()}", cause="decode")
    return function, decode_values(function.input_types, calldata[4:])


def decode_call_results(
    results: Sequence[CallResult],
    interface: ContractInterface,
    fn_name: str,
) -> list[DecodedResult]:
    decoded: list[DecodedResult] = []
    for result in results:
        if not result.success:
            decoded.append(DecodedResult(success=False, error="call failed"))
            continue
        try:
            value = decode_output(interface, fn_name, result.data)
        except PmmDecodeError as exc:
            decoded.append(DecodedResult(success=False, error=f"decode failed: {exc}"))
            continue
        decoded.append(DecodedResult(success=True, value=value))
    return decoded


__all__ = [
    "AbiFunction",
    "ContractInterface",
    "collapse_type",
    "encode_call",
    "decode_values",
    "decode_output",
    "decode_arguments",
    "decode_call_results",
]
