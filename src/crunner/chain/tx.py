"""
Transaction Builder - Assemble unsigned setter transactions.

Signing lives in ``crunner.wallet.eth``; sending lives in the dispatcher.
"""

from __future__ import annotations

from typing import Any

from ..codec import to_checksum_address


def build_contract_tx(
    chain_id: int,
    nonce: int,
    to: str,
    data: str,
    gas: int,
    gas_price: int,
    value: int = 0,
) -> dict[str, Any]:
    """
    Build a legacy contract call transaction (unsigned).

    Args:
        chain_id: Numeric chain id of the resolved endpoint
        nonce: Sender nonce
        to: Contract address
        data: 0x-prefixed calldata
        gas: Gas limit
        gas_price: Gas price in wei
        value: Native value in wei (default: 0)

    Returns:
        Unsigned transaction dict accepted by eth-account
    """
    return {
        "to": to_checksum_address(to),
        "data": data,
        "value": value,
        "nonce": nonce,
        "gas": gas,
        "gasPrice": gas_price,
        "chainId": chain_id,
    }
