"""Config resolution shared by client entry points."""

from __future__ import annotations

import os
from collections.abc import Mapping

from .config import PositionsClientConfig, networks_from_env
from .core.errors import PmmValidationError


def resolve_client_config(
    config: PositionsClientConfig | None,
    *,
    environ: Mapping[str, str] | None = None,
) -> PositionsClientConfig:
    """Return a validated config.

    Without an explicit ``config`` the default network table is used, with
    ``<PREFIX>_RPC_URL`` / ``<PREFIX>_CREDIT_VAULT_ADDRESS`` overrides read
    from ``environ`` (``os.environ`` by default).
    """

    if config is None:
        config = PositionsClientConfig(
            networks=networks_from_env(os.environ if environ is None else environ),
        )
    try:
        config.validate()
    except ValueError as exc:
        raise PmmValidationError(str(exc)) from exc
    return config


__all__ = [
    "resolve_client_config",
]
