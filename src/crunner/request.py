"""
Request Model - the validated, immutable "what to call and how".

``build_request`` runs every check in a fixed order and raises on the
first failure, so nothing reaches the network unless the whole request
is consistent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union

from .chain.abi import DEFAULT_ABI, function_input_types
from .codec import (
    FunctionSignature,
    ReturnType,
    bind_params,
    canonical_type,
    encode_call_data,
    encode_params,
    infer_type,
    normalize_address,
    parse_signature,
)
from .errors import (
    ArityMismatch,
    EnsureSetterRequired,
    InvalidSignature,
    MissingReturnType,
    MissingSenderAddress,
    UnsupportedOperation,
    UnsupportedReturnType,
    UnsupportedRpcMethod,
)

logger = logging.getLogger(__name__)

RPC_ETH_METHODS = frozenset({"balance"})


class CallMode(Enum):
    GET = "get"
    SET = "set"
    ESTIMATE_GAS = "estimate-gas"
    RPC_ETH = "rpc-eth"


@dataclass(frozen=True)
class CallRequest:
    """
    Fully validated call intent, consumed once by the dispatcher.

    Attributes:
        contract: Checksummed target address
        function: Bare function (or RPC-ETH method) name
        input_types: Canonical ABI input types, in signature order
        args: Encoded parameter values, aligned with ``input_types``
        mode: Execution path
        return_type: Present for Get and RpcEth only
        sender: Checksummed sender for EstimateGas and Set
        gas_limit: Explicit gas limit for Set; estimated when None
    """

    contract: str
    function: str
    input_types: tuple[str, ...]
    args: tuple[Any, ...]
    mode: CallMode
    return_type: Optional[ReturnType] = None
    sender: Optional[str] = None
    gas_limit: Optional[int] = None

    @property
    def signature(self) -> str:
        return f"{self.function}({','.join(self.input_types)})"

    def call_data(self) -> str:
        return encode_call_data(self.function, self.input_types, self.args)


def resolve_mode(*, ensure_setter: bool, dry_run_estimate_gas: bool, rpc_eth: bool) -> CallMode:
    """
    Pick the execution path from the CLI mode flags.

    A call with neither ``--fn-ret-type`` nor ``--ensure-setter`` resolves to
    Get and is rejected later for its missing return type.
    """
    if rpc_eth:
        if ensure_setter or dry_run_estimate_gas:
            raise UnsupportedOperation(
                "--rpc-eth cannot be combined with --ensure-setter or --dry-run-estimate-gas"
            )
        return CallMode.RPC_ETH
    if dry_run_estimate_gas:
        if not ensure_setter:
            raise EnsureSetterRequired("--dry-run-estimate-gas requires the --ensure-setter flag")
        return CallMode.ESTIMATE_GAS
    if ensure_setter:
        return CallMode.SET
    return CallMode.GET


def _resolve_input_types(
    signature: FunctionSignature,
    params: Sequence[str],
    abi: Sequence[dict[str, Any]],
) -> tuple[str, ...]:
    if signature.input_types is not None:
        return signature.input_types

    candidates = function_input_types(abi, signature.name)
    if candidates:
        for types in candidates:
            if len(types) == len(params):
                return tuple(canonical_type(t) for t in types)
        raise ArityMismatch(signature.name, len(candidates[0]), len(params))

    return tuple(infer_type(p) for p in params)


def build_request(
    *,
    contract_address: str,
    fn_name: str,
    mode: CallMode,
    params: Sequence[str] = (),
    return_type: Union[ReturnType, str, None] = None,
    sender: Union[str, Callable[[], str], None] = None,
    gas_limit: Optional[int] = None,
    abi: Optional[Sequence[dict[str, Any]]] = None,
) -> CallRequest:
    """
    Assemble and validate a CallRequest.

    Checks, first failure wins:
      1. contract address well-formed
      2. function name non-empty (and a valid signature)
      3. Get has a return type
      4. RpcEth method is supported and returns U256
      5. EstimateGas / Set have a sender address
      6. parameter arity and types

    ``sender`` may be a callable (the setter key's address); it is only
    invoked once every check has passed, so a bad key never hides an
    input error.

    Raises:
        InputValidationError: For malformed or missing input
        UnsupportedOperation: For unknown RPC-ETH methods or return types
    """
    # 1
    contract = normalize_address(contract_address)

    # 2
    if not fn_name or not fn_name.strip():
        raise InvalidSignature("Function name must not be empty")
    signature = parse_signature(fn_name)

    if isinstance(return_type, str):
        return_type = ReturnType.parse(return_type)

    # 3
    if mode is CallMode.GET and return_type is None:
        raise MissingReturnType(
            "--fn-ret-type is required for a getter call "
            "(pass --ensure-setter to call a setter instead)"
        )

    # 4
    if mode is CallMode.RPC_ETH:
        if signature.name not in RPC_ETH_METHODS or signature.input_types:
            raise UnsupportedRpcMethod(
                f"Unsupported RPC-ETH method '{fn_name}' "
                f"(supported: {', '.join(sorted(RPC_ETH_METHODS))})"
            )
        if return_type is None:
            return_type = ReturnType.U256
        elif return_type is not ReturnType.U256:
            raise UnsupportedReturnType(
                f"RPC-ETH '{signature.name}' returns U256, not {return_type.value}"
            )

    if mode is CallMode.SET and return_type is not None:
        logger.debug("ignoring return type %s for setter call", return_type.value)
        return_type = None
    if mode is CallMode.ESTIMATE_GAS:
        return_type = None

    # 5
    if mode in (CallMode.ESTIMATE_GAS, CallMode.SET):
        if not sender:
            if mode is CallMode.ESTIMATE_GAS:
                raise MissingSenderAddress("--estimate-gas-from-addr is required with --dry-run-estimate-gas")
            raise MissingSenderAddress("A sender address is required for setter calls (set CRUNNER_SETTER_SECRETKEY)")
        if not callable(sender):
            sender = normalize_address(sender)
    else:
        sender = None

    # 6
    if mode is CallMode.RPC_ETH:
        input_types: tuple[str, ...] = ()
    else:
        input_types = _resolve_input_types(signature, params, DEFAULT_ABI if abi is None else abi)
    specs = bind_params(signature.name, params, input_types)
    args = encode_params(specs)

    if callable(sender):
        sender = normalize_address(sender())

    request = CallRequest(
        contract=contract,
        function=signature.name,
        input_types=tuple(spec.type_tag for spec in specs),
        args=args,
        mode=mode,
        return_type=return_type,
        sender=sender,
        gas_limit=gas_limit,
    )
    logger.debug("built %s request for %s on %s", mode.value, request.signature, contract)
    return request
