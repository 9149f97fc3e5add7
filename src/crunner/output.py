"""Output Formatter - render a DispatchResult as one line of plain text."""

from __future__ import annotations

from .codec import format_decimal
from .dispatch import DecodedValue, DispatchResult, GasEstimate, TxHash


def render(result: DispatchResult) -> str:
    """
    Render a dispatch result.

    - DecodedValue: the decoded text, followed by the native-token amount
      for RPC-ETH balances
    - GasEstimate: gas units, gas price and total fee, prices in native token
    - TxHash: the 0x-prefixed transaction hash
    """
    if isinstance(result, DecodedValue):
        if result.native is not None:
            return f"{result.text} {result.native}"
        return result.text
    if isinstance(result, GasEstimate):
        return f"{result.units} {format_decimal(result.unit_price)} {format_decimal(result.total)}"
    if isinstance(result, TxHash):
        value = result.value
        return value if value.startswith("0x") else "0x" + value
    raise TypeError(f"Unknown dispatch result: {result!r}")
