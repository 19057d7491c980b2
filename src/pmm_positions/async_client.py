"""Public async client entrypoint."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType

from .client_shared import resolve_client_config
from .config import PositionsClientConfig
from .core.connection import AsyncConnectionPool
from .core.errors import PmmClientClosedError, PmmTimeoutError, PmmValidationError
from .positions.async_pipeline import AsyncPositionService
from .positions.models import NetworkInfo, PositionReport

logger = logging.getLogger("pmm_positions")


class AsyncPositionsClient:
    """Public async PMM positions client."""

    def __init__(
        self,
        *,
        config: PositionsClientConfig | None = None,
        pool: AsyncConnectionPool | None = None,
        service: AsyncPositionService | None = None,
    ) -> None:
        self._config = resolve_client_config(config)

        self._pool = pool or AsyncConnectionPool(self._config)
        self._service = service or AsyncPositionService(self._pool, self._config)
        self._closed = False

    @property
    def config(self) -> PositionsClientConfig:
        return self._config

    def _ensure_open(self) -> None:
        if self._closed:
            raise PmmClientClosedError("AsyncPositionsClient is already closed")

    async def list_positions(
        self,
        owner: str,
        chain_id: int,
        block: int | None = None,
        *,
        timeout_seconds: float | None = None,
    ) -> PositionReport:
        """Resolve every non-zero position of ``owner`` on ``chain_id``.

        ``timeout_seconds`` (or ``config.request_deadline_seconds``) bounds the
        whole run; on expiry in-flight work is cancelled and
        ``PmmTimeoutError`` is raised instead of returning partial data.
        """

        self._ensure_open()
        deadline = timeout_seconds if timeout_seconds is not None else self._config.request_deadline_seconds
        if deadline is not None and deadline <= 0:
            raise PmmValidationError("timeout_seconds must be > 0")

        run = self._service.list_positions(owner, chain_id, block)
        if deadline is None:
            return await run
        try:
            return await asyncio.wait_for(run, timeout=deadline)
        except asyncio.TimeoutError as exc:
            logger.error(
                "positions deadline expired owner=%s chain_id=%s timeout_seconds=%s",
                owner,
                chain_id,
                deadline,
            )
            raise PmmTimeoutError(
                f"position fetch exceeded {deadline}s",
                cause="deadline",
            ) from exc

    async def get_current_block(self, chain_id: int) -> int:
        self._ensure_open()
        return await self._service.get_current_block(chain_id)

    async def get_network_info(self, chain_id: int) -> NetworkInfo:
        self._ensure_open()
        return await self._service.get_network_info(chain_id)

    async def close(self) -> None:
        if self._closed:
            return
        await self._pool.close()
        self._closed = True

    async def __aenter__(self) -> "AsyncPositionsClient":
        self._ensure_open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False


__all__ = [
    "AsyncPositionsClient",
]
