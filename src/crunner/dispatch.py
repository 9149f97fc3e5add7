"""
Dispatcher - run a validated CallRequest against an endpoint.

Each CallMode maps to exactly one execution path. Paths are strictly
sequential, perform no retries, and never share state.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterator, Optional, Protocol, Union

from .chain.tx import build_contract_tx
from .codec import (
    BALANCE_SIGNIFICANT_DIGITS,
    ERROR_STRING_SELECTOR,
    PANIC_SELECTOR,
    ReturnType,
    decode_result,
    decode_revert_reason,
    format_native,
    to_native,
)
from .errors import (
    ContractExecutionError,
    EstimationFailed,
    JsonRpcError,
    NotAContractError,
    SigningError,
)
from .request import CallMode, CallRequest

logger = logging.getLogger(__name__)

# JSON-RPC error code geth uses for execution reverts
EXECUTION_ERROR_CODE = 3


# ============ Collaborators ============


class RpcClient(Protocol):
    def call(self, tx: dict[str, Any], block: str = "latest") -> bytes: ...

    def estimate_gas(self, tx: dict[str, Any]) -> int: ...

    def gas_price(self) -> int: ...

    def get_balance(self, address: str, block: str = "latest") -> int: ...

    def get_code(self, address: str, block: str = "latest") -> bytes: ...

    def get_transaction_count(self, address: str, block: str = "pending") -> int: ...

    def send_raw_transaction(self, raw_tx: str) -> str: ...


class Signer(Protocol):
    @property
    def address(self) -> str: ...

    def sign_transaction(self, tx: dict[str, Any]) -> str: ...


# ============ Results ============


@dataclass(frozen=True)
class DecodedValue:
    """Decoded getter value; ``native`` is set for RPC-ETH balances."""

    text: str
    native: Optional[str] = None


@dataclass(frozen=True)
class GasEstimate:
    units: int
    unit_price_wei: int

    @property
    def total_wei(self) -> int:
        return self.units * self.unit_price_wei

    @property
    def unit_price(self) -> Decimal:
        return to_native(self.unit_price_wei)

    @property
    def total(self) -> Decimal:
        return to_native(self.total_wei)


@dataclass(frozen=True)
class TxHash:
    value: str


DispatchResult = Union[DecodedValue, GasEstimate, TxHash]


# ============ Revert handling ============


def is_execution_error(error: JsonRpcError) -> bool:
    if error.code == EXECUTION_ERROR_CODE or "revert" in error.rpc_message.lower():
        return True
    data = error.data if isinstance(error.data, str) else ""
    return data[2:10].lower() in (ERROR_STRING_SELECTOR.hex(), PANIC_SELECTOR.hex())


def revert_reason(error: JsonRpcError) -> Optional[str]:
    """Best available revert reason: decoded revert data, then the node's message."""
    data = error.data
    if isinstance(data, dict):
        data = data.get("data") or data.get("result")
    reason = decode_revert_reason(data)
    if reason:
        return reason

    message = error.rpc_message
    prefix = "execution reverted:"
    if message.lower().startswith(prefix):
        return message[len(prefix):].strip() or None
    return None


@contextmanager
def _execution_guard(what: str, estimating: bool = False) -> Iterator[None]:
    try:
        yield
    except JsonRpcError as exc:
        if estimating:
            raise EstimationFailed(f"Gas estimation for {what} failed", revert_reason(exc)) from exc
        if is_execution_error(exc):
            raise ContractExecutionError(f"Execution of {what} reverted", revert_reason(exc)) from exc
        raise


def ensure_contract(client: RpcClient, address: str) -> None:
    """
    Fail when ``address`` holds no code, i.e. is an externally owned account.

    Raises:
        NotAContractError: If eth_getCode returns empty code
    """
    if not client.get_code(address):
        raise NotAContractError(f"Address {address} is an EOA, not a contract")


# ============ Dispatcher ============


class Dispatcher:
    """
    Execute CallRequests against one endpoint.

    Args:
        client: JSON-RPC transport
        chain_id: Chain id of the endpoint, used when signing
        signer: Required for Set calls only
    """

    def __init__(self, client: RpcClient, chain_id: int, signer: Optional[Signer] = None) -> None:
        self.client = client
        self.chain_id = chain_id
        self.signer = signer
        self._handlers = {
            CallMode.GET: self._get,
            CallMode.RPC_ETH: self._rpc_eth,
            CallMode.ESTIMATE_GAS: self._estimate_gas,
            CallMode.SET: self._set,
        }

    def dispatch(self, request: CallRequest) -> DispatchResult:
        logger.info("dispatching %s %s to %s", request.mode.value, request.signature, request.contract)
        return self._handlers[request.mode](request)

    def _get(self, request: CallRequest) -> DecodedValue:
        tx = {"to": request.contract, "data": request.call_data()}
        with _execution_guard(request.signature):
            raw = self.client.call(tx, "latest")
        return DecodedValue(decode_result(raw, request.return_type))

    def _rpc_eth(self, request: CallRequest) -> DecodedValue:
        # balance is the only RPC-ETH method
        wei = self.client.get_balance(request.contract, "latest")
        raw = wei.to_bytes(32, "big")
        return DecodedValue(
            decode_result(raw, ReturnType.U256),
            native=format_native(wei, BALANCE_SIGNIFICANT_DIGITS),
        )

    def _estimate_gas(self, request: CallRequest) -> GasEstimate:
        tx = {"from": request.sender, "to": request.contract, "data": request.call_data()}
        with _execution_guard(request.signature, estimating=True):
            units = self.client.estimate_gas(tx)
        price = self.client.gas_price()
        logger.debug("estimate %d gas at %d wei", units, price)
        return GasEstimate(units=units, unit_price_wei=price)

    def _set(self, request: CallRequest) -> TxHash:
        if self.signer is None:
            raise SigningError("No signer configured for setter call")
        if self.signer.address.lower() != (request.sender or "").lower():
            raise SigningError(
                f"Signer address {self.signer.address} does not match sender {request.sender}"
            )

        data = request.call_data()
        nonce = self.client.get_transaction_count(self.signer.address, "pending")
        gas_price = self.client.gas_price()
        gas = request.gas_limit
        if gas is None:
            with _execution_guard(request.signature, estimating=True):
                gas = self.client.estimate_gas(
                    {"from": request.sender, "to": request.contract, "data": data}
                )

        tx = build_contract_tx(
            chain_id=self.chain_id,
            nonce=nonce,
            to=request.contract,
            data=data,
            gas=gas,
            gas_price=gas_price,
        )
        raw_tx = self.signer.sign_transaction(tx)
        with _execution_guard(request.signature):
            tx_hash = self.client.send_raw_transaction(raw_tx)
        logger.info("broadcast %s", tx_hash)
        return TxHash(tx_hash)
