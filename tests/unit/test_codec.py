from __future__ import annotations

import pytest
from eth_abi import encode as abi_encode

from pmm_positions.core.batch import MULTICALL3
from pmm_positions.core.codec import (
    ContractInterface,
    collapse_type,
    decode_arguments,
    decode_call_results,
    decode_output,
    encode_call,
)
from pmm_positions.core.errors import PmmDecodeError, PmmValidationError
from pmm_positions.core.models import CallResult
from pmm_positions.core.scanner import CREDIT_VAULT
from pmm_positions.positions.calls import NATIVE_LP_TOKEN
from tests.shared.fake_chain import OWNER, addr


def test_selectors_match_well_known_erc20_functions():
    assert NATIVE_LP_TOKEN.function("decimals").selector == bytes.fromhex("313ce567")
    assert NATIVE_LP_TOKEN.function("symbol").selector == bytes.fromhex("95d89b41")


def test_collapse_type_expands_tuple_arrays():
    assert MULTICALL3.function("aggregate3").input_types == ("(address,bool,bytes)[]",)
    assert MULTICALL3.function("aggregate3").output_types == ("(bool,bytes)[]",)
    assert collapse_type({"type": "uint256"}) == "uint256"


def test_encode_call_without_arguments_is_selector_only():
    assert encode_call(NATIVE_LP_TOKEN, "underlying") == NATIVE_LP_TOKEN.function("underlying").selector


def test_encode_call_arguments_decode_back_checksummed():
    token = addr(0x2001)
    data = encode_call(CREDIT_VAULT, "positions", [OWNER.lower(), token])
    function, args = decode_arguments(CREDIT_VAULT, data)
    assert function.signature == "positions(address,address)"
    assert args == (OWNER, token)


def test_encode_call_rejects_wrong_argument_count():
    with pytest.raises(PmmValidationError, match="expects 1 arguments"):
        encode_call(CREDIT_VAULT, "allLPTokens", [])


def test_encode_call_rejects_unencodable_argument():
    with pytest.raises(PmmValidationError):
        encode_call(CREDIT_VAULT, "allLPTokens", [-1])


def test_unknown_function_name_raises_key_error():
    with pytest.raises(KeyError):
        CREDIT_VAULT.function("totalSupply")


def test_overloaded_functions_are_rejected():
    abi = [
        {"type": "function", "name": "f", "inputs": [], "outputs": []},
        {"type": "function", "name": "f", "inputs": [{"type": "uint256"}], "outputs": []},
    ]
    with pytest.raises(ValueError, match="overloaded"):
        ContractInterface(abi)


def test_decode_output_unwraps_single_value():
    assert decode_output(CREDIT_VAULT, "positions", abi_encode(["int256"], [-5])) == -5
    assert decode_output(NATIVE_LP_TOKEN, "symbol", abi_encode(["string"], ["USDC"])) == "USDC"


def test_decode_output_returns_checksummed_addresses():
    raw = abi_encode(["address"], [addr(0xBEEF).lower()])
    assert decode_output(NATIVE_LP_TOKEN, "underlying", raw) == addr(0xBEEF)


def test_decode_output_rejects_empty_return_data():
    with pytest.raises(PmmDecodeError):
        decode_output(NATIVE_LP_TOKEN, "decimals", b"")


def test_decode_output_rejects_out_of_range_uint8():
    with pytest.raises(PmmDecodeError):
        decode_output(NATIVE_LP_TOKEN, "decimals", abi_encode(["uint256"], [300]))


def test_decode_arguments_rejects_unknown_selector():
    with pytest.raises(PmmDecodeError, match="unknown selector"):
        decode_arguments(CREDIT_VAULT, b"\xde\xad\xbe\xef")


def test_decode_call_results_keeps_index_alignment():
    results = [
        CallResult(success=True, data=abi_encode(["int256"], [7])),
        CallResult.failed(),
        CallResult(success=True, data=b"\x01"),
    ]
    decoded = decode_call_results(results, CREDIT_VAULT, "positions")
    assert [item.success for item in decoded] == [True, False, False]
    assert decoded[0].value == 7
    assert decoded[1].error == "call failed"
    assert decoded[2].error.startswith("decode failed")
