"""Shared fixtures: a recording fake JSON-RPC client and well-known addresses."""

from __future__ import annotations

from typing import Any, Optional

import pytest

from crunner.errors import JsonRpcError

TOKEN = "0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c"
OWNER = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
SPENDER = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"

# Deterministic throwaway key (never funded)
TEST_PRIVATE_KEY = "0x" + "11" * 32


class FakeRpcClient:
    """
    Stand-in for JsonRpcClient that records every primitive invoked.

    Results are taken from the constructor arguments; an ``error`` maps a
    method name to the JsonRpcError it should raise.
    """

    def __init__(
        self,
        call_result: bytes = b"",
        gas_estimate: int = 21_000,
        gas_price: int = 5_000_000_000,
        balance: int = 0,
        code: bytes = b"\x60\x80",
        nonce: int = 0,
        tx_hash: str = "0x" + "ab" * 32,
        errors: Optional[dict[str, JsonRpcError]] = None,
    ) -> None:
        self.call_result = call_result
        self.gas_estimate = gas_estimate
        self._gas_price = gas_price
        self.balance = balance
        self.code = code
        self.nonce = nonce
        self.tx_hash = tx_hash
        self.errors = errors or {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def __enter__(self) -> "FakeRpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        pass

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        if method in self.errors:
            raise self.errors[method]

    @property
    def methods(self) -> list[str]:
        return [name for name, _ in self.calls]

    def call(self, tx: dict[str, Any], block: str = "latest") -> bytes:
        self._record("eth_call", tx, block)
        return self.call_result

    def estimate_gas(self, tx: dict[str, Any]) -> int:
        self._record("eth_estimateGas", tx)
        return self.gas_estimate

    def gas_price(self) -> int:
        self._record("eth_gasPrice")
        return self._gas_price

    def get_balance(self, address: str, block: str = "latest") -> int:
        self._record("eth_getBalance", address, block)
        return self.balance

    def get_code(self, address: str, block: str = "latest") -> bytes:
        self._record("eth_getCode", address, block)
        return self.code

    def get_transaction_count(self, address: str, block: str = "pending") -> int:
        self._record("eth_getTransactionCount", address, block)
        return self.nonce

    def send_raw_transaction(self, raw_tx: str) -> str:
        self._record("eth_sendRawTransaction", raw_tx)
        return self.tx_hash


@pytest.fixture()
def fake_client() -> FakeRpcClient:
    return FakeRpcClient()
