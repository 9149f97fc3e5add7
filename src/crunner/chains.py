"""Chain Endpoint Resolver - static chain table plus URL overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

import httpx

from .config import chain_rpc_var
from .errors import InvalidRpcUrl, UnsupportedChain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainEndpoint:
    name: str
    rpc_url: str
    chain_id: int


CHAINS: dict[str, ChainEndpoint] = {
    "bsc": ChainEndpoint("bsc", "https://bsc-dataseed.binance.org/", 56),
    "ethereum": ChainEndpoint("ethereum", "https://rpc.ankr.com/eth", 1),
    "polygon": ChainEndpoint("polygon", "https://polygon-rpc.com/", 137),
}


def validate_rpc_url(url: str) -> str:
    """
    Check that ``url`` is an absolute http(s) URL.

    Raises:
        InvalidRpcUrl: If httpx cannot parse it, or it has no host or a non-http scheme
    """
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InvalidRpcUrl(f"Invalid RPC URL '{url}': {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidRpcUrl(f"Invalid RPC URL '{url}': expected an http(s) URL with a host")
    return url


def resolve_chain(name: str, rpc_url: Optional[str] = None) -> ChainEndpoint:
    """
    Look up a chain by short name (case-insensitive).

    Args:
        name: Chain short name, e.g. "bsc"
        rpc_url: Explicit endpoint URL; wins over ``CRUNNER_<CHAIN>_RPC``

    Raises:
        UnsupportedChain: If the name is not in the table
        InvalidRpcUrl: If the override URL is malformed
    """
    key = name.strip().lower()
    endpoint = CHAINS.get(key)
    if endpoint is None:
        raise UnsupportedChain(
            f"Unknown chain '{name}' (expected one of: {', '.join(sorted(CHAINS))})"
        )

    override = rpc_url or os.environ.get(chain_rpc_var(key))
    if override:
        endpoint = replace(endpoint, rpc_url=validate_rpc_url(override))

    logger.debug("chain %s -> %s (chain id %d)", key, endpoint.rpc_url, endpoint.chain_id)
    return endpoint
