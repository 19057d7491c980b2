from __future__ import annotations

from pmm_positions.core.errors import (
    PmmError,
    PmmProtocolError,
    PmmRpcError,
    classify_rpc_error,
    extract_error_code,
    extract_error_data,
)


def test_classify_code_3_is_revert():
    err = classify_rpc_error({"code": 3, "message": "execution reverted", "data": "0x"}, http_status=200)
    assert isinstance(err, PmmRpcError)
    assert err.is_revert
    assert err.cause == "revert"
    assert err.data == "0x"


def test_classify_revert_message_without_code_3_is_revert():
    err = classify_rpc_error({"code": -32000, "message": "Execution Reverted"}, http_status=200)
    assert isinstance(err, PmmRpcError)
    assert err.is_revert
    assert err.code == -32000


def test_classify_generic_rpc_error_is_not_revert():
    err = classify_rpc_error({"code": -32005, "message": "limit exceeded"}, http_status=200)
    assert isinstance(err, PmmRpcError)
    assert not err.is_revert
    assert err.cause == "rpc"


def test_classify_non_object_error_is_protocol_error():
    err = classify_rpc_error("boom", http_status=200)  # type: ignore[arg-type]
    assert isinstance(err, PmmProtocolError)


def test_error_helpers_tolerate_string_codes_and_nested_data():
    assert extract_error_code({"code": "-32000"}) == -32000
    assert extract_error_code({"code": True}) is None
    assert extract_error_data({"data": {"data": "0x08c379a0"}}) == "0x08c379a0"


def test_all_errors_share_base_attributes():
    err = PmmRpcError("x", code=1, http_status=200, cause="rpc")
    assert isinstance(err, PmmError)
    assert (err.code, err.http_status, err.cause) == (1, 200, "rpc")
