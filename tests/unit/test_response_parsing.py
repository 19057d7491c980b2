from __future__ import annotations

import json

import pytest

from pmm_positions.core.errors import PmmProtocolError, PmmRpcError
from pmm_positions.core.response_parsing import extract_rpc_result, parse_json_payload
from tests.shared.transport import Response


def test_parse_json_payload_maps_invalid_json_to_protocol_error():
    response = Response(200, json.JSONDecodeError("bad", "x", 0))
    with pytest.raises(PmmProtocolError):
        parse_json_payload(response, http_status=200)


def test_parse_json_payload_rejects_batch_arrays():
    with pytest.raises(PmmProtocolError, match="root must be an object"):
        parse_json_payload(Response(200, [{"jsonrpc": "2.0"}]), http_status=200)


def test_extract_result_returns_result_member():
    result, error = extract_rpc_result(
        {"jsonrpc": "2.0", "id": 4, "result": "0x10"},
        request_id=4,
        http_status=200,
    )
    assert (result, error) == ("0x10", None)


def test_extract_result_allows_null_result():
    result, error = extract_rpc_result(
        {"jsonrpc": "2.0", "id": 1, "result": None},
        request_id=1,
        http_status=200,
    )
    assert result is None and error is None


def test_extract_result_rejects_mismatched_id():
    _, error = extract_rpc_result(
        {"jsonrpc": "2.0", "id": 9, "result": "0x"},
        request_id=1,
        http_status=200,
    )
    assert isinstance(error, PmmProtocolError)


def test_extract_result_rejects_non_jsonrpc_envelope():
    _, error = extract_rpc_result({"id": 1, "result": "0x"}, request_id=1, http_status=200)
    assert isinstance(error, PmmProtocolError)


def test_extract_result_maps_error_member():
    _, error = extract_rpc_result(
        {"jsonrpc": "2.0", "id": 1, "error": {"code": 3, "message": "execution reverted"}},
        request_id=1,
        http_status=200,
    )
    assert isinstance(error, PmmRpcError)
    assert error.is_revert


def test_extract_result_rejects_envelope_without_result_or_error():
    _, error = extract_rpc_result({"jsonrpc": "2.0", "id": 1}, request_id=1, http_status=200)
    assert isinstance(error, PmmProtocolError)
