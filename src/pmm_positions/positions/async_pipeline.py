"""Async orchestration of the LP token → underlying → position pipeline."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

from eth_utils import to_checksum_address

from ..config import ZERO_ADDRESS, BatchConfig, PositionsClientConfig
from ..core.batch import AsyncBatchExecutor
from ..core.codec import decode_call_results, decode_output
from ..core.connection import AsyncConnectionPool
from ..core.errors import PmmDecodeError
from ..core.models import CallResult
from ..core.scanner import CREDIT_VAULT, scan_lp_tokens
from .calls import (
    CALLS_PER_LP_TOKEN,
    NATIVE_LP_TOKEN,
    build_metadata_calls,
    build_position_calls,
)
from .formatting import format_units
from .models import (
    LpTokenMetadata,
    NetworkInfo,
    PositionEntry,
    PositionReport,
    PositionResult,
    PositionSummary,
)
from .validators import normalize_owner, validate_block, validate_chain_id

logger = logging.getLogger("pmm_positions")


def fallback_metadata(lp_token: str, batch: BatchConfig) -> LpTokenMetadata:
    return LpTokenMetadata(
        lp_token=lp_token,
        underlying=lp_token,
        decimals=batch.fallback_decimals,
        symbol=batch.fallback_symbol,
        is_lp_token=False,
    )


def metadata_from_results(
    lp_token: str,
    results: Sequence[CallResult],
    batch: BatchConfig,
) -> LpTokenMetadata:
    """Build one metadata entry from its underlying/decimals/symbol results."""

    if len(results) != CALLS_PER_LP_TOKEN or not all(r.success for r in results):
        logger.warning("metadata calls failed lp_token=%s; using fallback", lp_token)
        return fallback_metadata(lp_token, batch)

    underlying_result, decimals_result, symbol_result = results
    try:
        underlying = decode_output(NATIVE_LP_TOKEN, "underlying", underlying_result.data)
        decimals = decode_output(NATIVE_LP_TOKEN, "decimals", decimals_result.data)
        symbol = decode_output(NATIVE_LP_TOKEN, "symbol", symbol_result.data)
    except PmmDecodeError as exc:
        # Decode failures are indistinguishable from failed calls downstream.
        logger.warning("metadata decode failed lp_token=%s error=%s; using fallback", lp_token, exc)
        return fallback_metadata(lp_token, batch)

    if str(underlying).lower() == ZERO_ADDRESS:
        logger.debug("lp token has no underlying lp_token=%s; using fallback", lp_token)
        return fallback_metadata(lp_token, batch)

    return LpTokenMetadata(
        lp_token=lp_token,
        underlying=str(underlying),
        decimals=int(decimals),  # type: ignore[call-overload]
        symbol=str(symbol),
        is_lp_token=True,
    )


def join_positions(
    metadata: Sequence[LpTokenMetadata],
    results: Sequence[PositionResult],
) -> list[PositionEntry]:
    if len(metadata) != len(results):
        raise RuntimeError(
            f"position results ({len(results)}) are misaligned with metadata ({len(metadata)})"
        )
    entries: list[PositionEntry] = []
    for token, result in zip(metadata, results):
        if not result.success or result.position == 0:
            continue
        entries.append(
            PositionEntry(
                token_address=token.underlying,
                token_symbol=token.symbol,
                lp_token_address=token.lp_token if token.is_lp_token else None,
                position=result.position,
                position_formatted=format_units(result.position, token.decimals),
                decimals=token.decimals,
            )
        )
    return entries


class AsyncPositionService:
    """Resolves a PMM's positions across every LP token of a CreditVault."""

    def __init__(
        self,
        pool: AsyncConnectionPool,
        config: PositionsClientConfig,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._pool = pool
        self._config = config
        self._clock = clock or time.monotonic

    async def list_positions(
        self,
        owner: str,
        chain_id: int,
        block: int | None = None,
    ) -> PositionReport:
        owner = normalize_owner(owner)
        chain_id = validate_chain_id(chain_id, self._config)
        block = validate_block(block)
        network = self._config.network(chain_id)
        started_at = self._clock()

        logger.info(
            "positions start owner=%s chain_id=%s block=%s",
            owner,
            chain_id,
            "latest" if block is None else block,
        )

        lp_tokens = await self.fetch_lp_tokens(chain_id, block=block)
        if not lp_tokens:
            logger.info("positions completed owner=%s lp_tokens=0", owner)
            return PositionReport(
                chain_id=chain_id,
                chain_name=network.name,
                owner=owner,
                block=block,
                positions=(),
                summary=PositionSummary(
                    total_tokens=0,
                    tokens_with_positions=0,
                    elapsed_seconds=self._clock() - started_at,
                ),
            )

        metadata = await self.resolve_underlying_tokens(chain_id, lp_tokens, block=block)
        results = await self.fetch_positions(
            chain_id,
            owner,
            [token.underlying for token in metadata],
            block=block,
        )
        entries = join_positions(metadata, results)

        summary = PositionSummary(
            total_tokens=len(metadata),
            tokens_with_positions=len(entries),
            elapsed_seconds=self._clock() - started_at,
        )
        logger.info(
            "positions completed owner=%s lp_tokens=%s with_positions=%s",
            owner,
            summary.total_tokens,
            summary.tokens_with_positions,
        )
        return PositionReport(
            chain_id=chain_id,
            chain_name=network.name,
            owner=owner,
            block=block,
            positions=entries,
            summary=summary,
        )

    async def fetch_lp_tokens(self, chain_id: int, *, block: int | None = None) -> list[str]:
        network = self._config.network(chain_id)
        connection = await self._pool.connect(chain_id)
        return await scan_lp_tokens(
            connection,
            network.credit_vault_address,
            block=block,
            safety_cap=self._config.batch.scan_safety_cap,
        )

    async def resolve_underlying_tokens(
        self,
        chain_id: int,
        lp_tokens: Sequence[str],
        *,
        block: int | None = None,
    ) -> list[LpTokenMetadata]:
        if not lp_tokens:
            return []
        network = self._config.network(chain_id)
        batch = self._config.batch
        executor = AsyncBatchExecutor(await self._pool.connect(chain_id), network.multicall3_address)

        calls = build_metadata_calls(lp_tokens)
        logger.info("metadata start lp_tokens=%s calls=%s", len(lp_tokens), len(calls))
        results = await executor.execute_batch_with_retry(
            calls,
            max_retries=batch.max_call_retries,
            block=block,
            chunk_size=batch.metadata_batch_size * CALLS_PER_LP_TOKEN,
        )

        metadata: list[LpTokenMetadata] = []
        for index, lp_token in enumerate(lp_tokens):
            offset = index * CALLS_PER_LP_TOKEN
            metadata.append(
                metadata_from_results(
                    to_checksum_address(lp_token),
                    results[offset : offset + CALLS_PER_LP_TOKEN],
                    batch,
                )
            )
        logger.info(
            "metadata completed lp_tokens=%s resolved=%s",
            len(metadata),
            sum(1 for token in metadata if token.is_lp_token),
        )
        return metadata

    async def fetch_positions(
        self,
        chain_id: int,
        owner: str,
        tokens: Sequence[str],
        *,
        block: int | None = None,
    ) -> list[PositionResult]:
        if not tokens:
            return []
        network = self._config.network(chain_id)
        batch = self._config.batch
        executor = AsyncBatchExecutor(await self._pool.connect(chain_id), network.multicall3_address)

        calls = build_position_calls(network.credit_vault_address, owner, tokens)
        logger.info("position lookup start tokens=%s", len(tokens))
        raw_results = await executor.execute_batch_with_retry(
            calls,
            max_retries=batch.max_call_retries,
            block=block,
            chunk_size=batch.position_batch_size,
        )

        results: list[PositionResult] = []
        for token, decoded in zip(tokens, decode_call_results(raw_results, CREDIT_VAULT, "positions")):
            if not decoded.success:
                logger.warning("position lookup failed token=%s error=%s", token, decoded.error)
                results.append(PositionResult(token=token, position=0, success=False, error=decoded.error))
                continue
            results.append(PositionResult(token=token, position=int(decoded.value), success=True))  # type: ignore[call-overload]
        return results

    async def get_current_block(self, chain_id: int) -> int:
        chain_id = validate_chain_id(chain_id, self._config)
        connection = await self._pool.connect(chain_id)
        return await connection.block_number()

    async def get_network_info(self, chain_id: int) -> NetworkInfo:
        chain_id = validate_chain_id(chain_id, self._config)
        network = self._config.network(chain_id)
        connection = await self._pool.connect(chain_id)
        return NetworkInfo(
            chain_id=await connection.remote_chain_id(),
            name=network.name,
            block_number=await connection.block_number(),
            rpc_url=network.rpc_url,
            native_currency=network.native_currency,
            explorer_url=network.explorer_url,
        )


__all__ = [
    "fallback_metadata",
    "metadata_from_results",
    "join_positions",
    "AsyncPositionService",
]
