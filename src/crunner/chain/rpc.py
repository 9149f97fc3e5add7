"""
JSON-RPC Client for EVM-compatible chains.

Lightweight alternative to web3.py: uses httpx for HTTP.
Exposes exactly the primitives the dispatcher needs: eth_call,
eth_estimateGas, eth_gasPrice, eth_getBalance, eth_getCode,
eth_getTransactionCount and eth_sendRawTransaction. No retries.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Optional

import httpx

from ..codec import hex_to_bytes
from ..errors import JsonRpcError, RpcTransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _to_int(value: Any, method: str) -> int:
    if not isinstance(value, str):
        raise RpcTransportError(f"Malformed {method} result: {value!r}")
    try:
        return int(value, 16)
    except ValueError as exc:
        raise RpcTransportError(f"Malformed {method} result: {value!r}") from exc


def _to_bytes(value: Any, method: str) -> bytes:
    if not isinstance(value, str):
        raise RpcTransportError(f"Malformed {method} result: {value!r}")
    try:
        return hex_to_bytes(value)
    except ValueError as exc:
        raise RpcTransportError(f"Malformed {method} result: {value!r}") from exc


class JsonRpcClient:
    """
    Synchronous JSON-RPC 2.0 client over a single httpx connection pool.

    Use as a context manager so the connection is closed when the
    invocation ends.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)

    def __enter__(self) -> "JsonRpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def request(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            JsonRpcError: If the endpoint returned an error object
            RpcTransportError: On connection failure, timeout, or a malformed response
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        logger.debug("-> %s %s", method, params)

        try:
            response = self._client.post(self.rpc_url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RpcTransportError(f"{method} request to {self.rpc_url} failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        # Some nodes answer reverts with a 4xx/5xx status and a JSON-RPC error body.
        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            error = data["error"]
            raise JsonRpcError(
                method,
                error.get("code"),
                str(error.get("message", "")),
                error.get("data"),
            )

        if response.is_error:
            raise RpcTransportError(
                f"{method} request to {self.rpc_url} failed with HTTP {response.status_code}"
            )
        if not isinstance(data, dict) or "result" not in data:
            raise RpcTransportError(f"Malformed JSON-RPC response for {method}")

        logger.debug("<- %s %s", method, data["result"])
        return data["result"]

    # ---------------------------------------------------------------------------
    # eth_* primitives
    # ---------------------------------------------------------------------------

    def call(self, tx: dict[str, Any], block: str = "latest") -> bytes:
        """Read-only contract call; returns the raw return bytes."""
        return _to_bytes(self.request("eth_call", [tx, block]), "eth_call")

    def estimate_gas(self, tx: dict[str, Any]) -> int:
        return _to_int(self.request("eth_estimateGas", [tx]), "eth_estimateGas")

    def gas_price(self) -> int:
        """Current gas price in wei."""
        return _to_int(self.request("eth_gasPrice", []), "eth_gasPrice")

    def get_balance(self, address: str, block: str = "latest") -> int:
        """Native balance in wei."""
        return _to_int(self.request("eth_getBalance", [address, block]), "eth_getBalance")

    def get_code(self, address: str, block: str = "latest") -> bytes:
        return _to_bytes(self.request("eth_getCode", [address, block]), "eth_getCode")

    def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return _to_int(
            self.request("eth_getTransactionCount", [address, block]),
            "eth_getTransactionCount",
        )

    def send_raw_transaction(self, raw_tx: str) -> str:
        """
        Send a signed raw transaction.

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        result = self.request("eth_sendRawTransaction", [raw_tx])
        if not isinstance(result, str):
            raise RpcTransportError(f"Malformed eth_sendRawTransaction result: {result!r}")
        return result
