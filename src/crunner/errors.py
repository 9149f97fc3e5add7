"""
Error taxonomy for crunner.

Every failure the tool reports derives from ``CrunnerError``; the CLI maps
the ``exit_code`` class attribute straight onto the process exit status.
Input validation errors are raised before any network I/O happens.
"""

from __future__ import annotations

from typing import Any, Optional


class CrunnerError(RuntimeError):
    exit_code: int = 1


# ============ Input validation (local, pre-network) ============


class InputValidationError(CrunnerError):
    exit_code = 2


class ParamDecodeError(InputValidationError):
    pass


class InvalidAddress(ParamDecodeError):
    pass


class InvalidNumeric(ParamDecodeError):
    pass


class InvalidBool(ParamDecodeError):
    pass


class InvalidBytes(ParamDecodeError):
    pass


class ArityMismatch(InputValidationError):
    def __init__(self, function: str, expected: int, supplied: int) -> None:
        super().__init__(
            f"'{function}' takes {expected} parameter(s) but {supplied} were supplied"
        )
        self.function = function
        self.expected = expected
        self.supplied = supplied


class InvalidSignature(InputValidationError):
    pass


class MissingReturnType(InputValidationError):
    pass


class MissingSenderAddress(InputValidationError):
    pass


class EnsureSetterRequired(InputValidationError):
    pass


class InvalidRpcUrl(InputValidationError):
    pass


# ============ Unsupported operations ============


class UnsupportedOperation(CrunnerError):
    exit_code = 3


class UnsupportedRpcMethod(UnsupportedOperation):
    pass


class UnsupportedReturnType(UnsupportedOperation):
    pass


class UnsupportedParamType(UnsupportedOperation):
    pass


class UnsupportedChain(UnsupportedOperation):
    pass


# ============ Network / chain ============


class RpcTransportError(CrunnerError):
    exit_code = 4


class JsonRpcError(RpcTransportError):
    """The endpoint answered with a JSON-RPC ``error`` object."""

    def __init__(
        self,
        method: str,
        code: Optional[int],
        message: str,
        data: Any = None,
    ) -> None:
        super().__init__(f"RPC error from {method} (code={code}): {message}")
        self.method = method
        self.code = code
        self.rpc_message = message
        self.data = data


class ContractExecutionError(CrunnerError):
    exit_code = 5

    def __init__(self, message: str, reason: Optional[str] = None) -> None:
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.reason = reason


class EstimationFailed(ContractExecutionError):
    pass


class ResultDecodeError(CrunnerError):
    exit_code = 6


class SigningError(CrunnerError):
    exit_code = 7


class NotAContractError(CrunnerError):
    exit_code = 8
