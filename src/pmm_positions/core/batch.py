"""Batched read calls through Multicall3 ``aggregate3``.

Every call is submitted with ``allowFailure=True`` so one revert never aborts
its neighbours. When the aggregate request itself fails, the chunk degrades
to serial ``eth_call`` requests. Results always line up index-for-index with
the submitted calls.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from eth_utils import to_checksum_address

from .abi import MULTICALL3_ABI
from .codec import ContractInterface, decode_output, encode_call
from .connection import AsyncConnection
from .errors import PmmBatchFailure, PmmConnectivityError, PmmError
from .models import Call, CallResult

logger = logging.getLogger("pmm_positions")

MULTICALL3 = ContractInterface(MULTICALL3_ABI)


def chunk_calls(calls: Sequence[Call], *, chunk_size: int) -> tuple[tuple[Call, ...], ...]:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    return tuple(
        tuple(calls[i : i + chunk_size])
        for i in range(0, len(calls), chunk_size)
    )


class AsyncBatchExecutor:
    """Executes many independent read calls in chunked aggregate requests."""

    def __init__(self, connection: AsyncConnection, multicall_address: str) -> None:
        self._connection = connection
        self._multicall_address = to_checksum_address(multicall_address)
        self.aggregate_requests = 0

    async def execute_batch(
        self,
        calls: Sequence[Call],
        *,
        block: int | None = None,
        chunk_size: int,
    ) -> list[CallResult]:
        chunks = chunk_calls(calls, chunk_size=chunk_size)
        results: list[CallResult] = []
        for chunk_index, chunk in enumerate(chunks):
            logger.debug(
                "batch chunk start chunk_index=%s/%s calls=%s",
                chunk_index + 1,
                len(chunks),
                len(chunk),
            )
            try:
                chunk_results = await self._aggregate(chunk, block=block)
            except PmmBatchFailure as exc:
                logger.warning(
                    "batch chunk failed; falling back to individual calls chunk_index=%s cause=%s",
                    chunk_index + 1,
                    exc.cause,
                )
                chunk_results = await self._execute_serially(chunk, block=block)
            results.extend(chunk_results)

        if len(results) != len(calls):
            raise RuntimeError(
                f"batch produced {len(results)} results for {len(calls)} calls"
            )
        return results

    async def execute_batch_with_retry(
        self,
        calls: Sequence[Call],
        *,
        max_retries: int,
        block: int | None = None,
        chunk_size: int,
    ) -> list[CallResult]:
        results = await self.execute_batch(calls, block=block, chunk_size=chunk_size)

        for retry in range(max_retries):
            failed_indices = [index for index, result in enumerate(results) if not result.success]
            if not failed_indices:
                break
            logger.info(
                "retrying failed calls count=%s attempt=%s/%s",
                len(failed_indices),
                retry + 1,
                max_retries,
            )
            retry_results = await self.execute_batch(
                [calls[index] for index in failed_indices],
                block=block,
                chunk_size=chunk_size,
            )
            for index, result in zip(failed_indices, retry_results):
                results[index] = result

        return results

    async def _aggregate(self, chunk: Sequence[Call], *, block: int | None) -> list[CallResult]:
        payload = encode_call(
            MULTICALL3,
            "aggregate3",
            [[(to_checksum_address(call.target), True, call.data) for call in chunk]],
        )
        self.aggregate_requests += 1
        try:
            raw = await self._connection.call(self._multicall_address, payload, block)
            decoded = decode_output(MULTICALL3, "aggregate3", raw)
        except PmmError as exc:
            raise PmmBatchFailure(
                f"aggregate3 request failed: {exc}",
                code=exc.code,
                http_status=exc.http_status,
                cause=exc.cause or exc.__class__.__name__,
            ) from exc

        entries = list(decoded)  # type: ignore[call-overload]
        if len(entries) != len(chunk):
            raise PmmBatchFailure(
                f"aggregate3 returned {len(entries)} results for {len(chunk)} calls",
                cause="length_mismatch",
            )
        return [CallResult(success=bool(success), data=bytes(data)) for success, data in entries]

    async def _execute_serially(
        self,
        chunk: Sequence[Call],
        *,
        block: int | None,
    ) -> list[CallResult]:
        results: list[CallResult] = []
        connectivity_failures = 0
        for call in chunk:
            try:
                data = await self._connection.call(call.target, call.data, block)
            except PmmConnectivityError as exc:
                connectivity_failures += 1
                logger.warning(
                    "individual call failed target=%s cause=%s",
                    call.target,
                    exc.cause,
                )
                results.append(CallResult.failed())
                continue
            except PmmError as exc:
                logger.debug(
                    "individual call failed target=%s cause=%s",
                    call.target,
                    exc.cause,
                )
                results.append(CallResult.failed())
                continue
            results.append(CallResult(success=True, data=data))

        if chunk and connectivity_failures == len(chunk):
            raise PmmConnectivityError(
                "connectivity lost: aggregate and every individual call failed",
                cause="network",
            )
        return results


__all__ = [
    "MULTICALL3",
    "chunk_calls",
    "AsyncBatchExecutor",
]
