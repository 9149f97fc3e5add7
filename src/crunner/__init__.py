__version__ = "0.1.1"

__all__ = [
    # Codec
    "ParamSpec",
    "ReturnType",
    "decode_result",
    "encode_params",
    "format_native",
    "normalize_address",
    # Request model
    "CallMode",
    "CallRequest",
    "build_request",
    "resolve_mode",
    # Chains
    "ChainEndpoint",
    "resolve_chain",
    # Dispatch
    "DecodedValue",
    "Dispatcher",
    "GasEstimate",
    "TxHash",
    "render",
    # Errors
    "CrunnerError",
    "InputValidationError",
    "UnsupportedOperation",
    "RpcTransportError",
    "ContractExecutionError",
    "ResultDecodeError",
    "SigningError",
]

from .codec import (
    ParamSpec,
    ReturnType,
    decode_result,
    encode_params,
    format_native,
    normalize_address,
)
from .request import CallMode, CallRequest, build_request, resolve_mode
from .chains import ChainEndpoint, resolve_chain
from .dispatch import DecodedValue, Dispatcher, GasEstimate, TxHash
from .output import render
from .errors import (
    ContractExecutionError,
    CrunnerError,
    InputValidationError,
    ResultDecodeError,
    RpcTransportError,
    SigningError,
    UnsupportedOperation,
)
