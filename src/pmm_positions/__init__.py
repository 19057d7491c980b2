"""Public package exports for the PMM positions client."""

from .async_client import AsyncPositionsClient
from .config import PositionsClientConfig

__all__ = ["AsyncPositionsClient", "PositionsClientConfig"]
