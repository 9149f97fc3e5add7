"""
Value Codec - Convert between command-line text and ABI values.

Encoding turns raw string tokens plus ABI type tags into Python values that
eth-abi accepts, then into 0x-prefixed call data. Decoding turns raw return
bytes back into display text. Everything here is pure: no I/O, no hidden
state, no locale dependence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, localcontext
from enum import Enum
from typing import Any, Optional, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_hash.auto import keccak

from .errors import (
    ArityMismatch,
    InvalidAddress,
    InvalidBool,
    InvalidBytes,
    InvalidNumeric,
    InvalidSignature,
    ParamDecodeError,
    ResultDecodeError,
    UnsupportedParamType,
    UnsupportedReturnType,
)

# Native-token precision is the same on every supported chain.
NATIVE_DECIMALS = 18
BALANCE_SIGNIFICANT_DIGITS = 16

ERROR_STRING_SELECTOR = bytes.fromhex("08c379a0")
PANIC_SELECTOR = bytes.fromhex("4e487b71")

_ADDRESS_RE = re.compile(r"^(0x)?[0-9a-f]{40}$", re.IGNORECASE)
_HEX_NUMBER_RE = re.compile(r"^0x[0-9a-f]+$", re.IGNORECASE)
_DECIMAL_RE = re.compile(r"^[0-9]+$")
_SIGNED_DECIMAL_RE = re.compile(r"^-?[0-9]+$")
_SIGNATURE_RE = re.compile(r"^\s*([A-Za-z_$][A-Za-z0-9_$]*)\s*(?:\((.*)\))?\s*$")
_UINT_RE = re.compile(r"^uint(\d*)$")
_INT_RE = re.compile(r"^int(\d*)$")
_FIXED_BYTES_RE = re.compile(r"^bytes(\d+)$")


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParamSpec:
    """A single call parameter: the raw token and the ABI type it must become."""

    raw: str
    type_tag: str


@dataclass(frozen=True)
class FunctionSignature:
    """
    Parsed ``--fn-name`` value.

    Attributes:
        name: Bare function name
        input_types: Declared parameter types, or None when only a name was given
    """

    name: str
    input_types: Optional[tuple[str, ...]] = None

    def render(self, input_types: Sequence[str]) -> str:
        return f"{self.name}({','.join(input_types)})"


class ReturnType(Enum):
    STRING = "String"
    U256 = "U256"
    BOOL = "Bool"
    ADDRESS = "Address"
    BYTES = "Bytes"
    BYTES32 = "Bytes32"

    @property
    def abi_type(self) -> str:
        return _RETURN_ABI_TYPES[self]

    @classmethod
    def parse(cls, text: str) -> "ReturnType":
        for member in cls:
            if member.value.lower() == text.strip().lower():
                return member
        choices = ", ".join(m.value for m in cls)
        raise UnsupportedReturnType(f"Unknown return type '{text}' (expected one of: {choices})")


_RETURN_ABI_TYPES = {
    ReturnType.STRING: "string",
    ReturnType.U256: "uint256",
    ReturnType.BOOL: "bool",
    ReturnType.ADDRESS: "address",
    ReturnType.BYTES: "bytes",
    ReturnType.BYTES32: "bytes32",
}


# ---------------------------------------------------------------------------
# Hex / address helpers
# ---------------------------------------------------------------------------


def strip_0x(text: str) -> str:
    return text[2:] if text[:2].lower() == "0x" else text


def add_0x(text: str) -> str:
    return text if text[:2].lower() == "0x" else "0x" + text


def hex_to_bytes(text: str) -> bytes:
    return bytes.fromhex(strip_0x(text))


def is_address(text: str) -> bool:
    return bool(_ADDRESS_RE.match(text.strip()))


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format.

    eth-account requires checksummed addresses in transaction fields.
    """
    addr = strip_0x(address).lower()
    addr_hash = keccak(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def normalize_address(text: str) -> str:
    """
    Validate a 20-byte hex address and return it checksummed.

    Accepts any casing, with or without the ``0x`` prefix.

    Raises:
        InvalidAddress: If the length or hex-ness is wrong
    """
    if not isinstance(text, str) or not is_address(text):
        raise InvalidAddress(f"Invalid address '{text}': expected 40 hex characters")
    return to_checksum_address(text.strip())


# ---------------------------------------------------------------------------
# Signatures and type tags
# ---------------------------------------------------------------------------


def canonical_type(type_tag: str) -> str:
    """
    Normalize an ABI type tag (``uint`` -> ``uint256``) and reject unsupported ones.

    Raises:
        UnsupportedParamType: For arrays, tuples, and unknown tags
    """
    tag = type_tag.strip()
    if tag in ("address", "bool", "string", "bytes"):
        return tag

    for pattern, prefix in ((_UINT_RE, "uint"), (_INT_RE, "int")):
        match = pattern.match(tag)
        if match:
            bits = int(match.group(1) or 256)
            if bits % 8 or not 8 <= bits <= 256:
                raise UnsupportedParamType(f"Invalid integer width in '{type_tag}'")
            return f"{prefix}{bits}"

    match = _FIXED_BYTES_RE.match(tag)
    if match:
        size = int(match.group(1))
        if not 1 <= size <= 32:
            raise UnsupportedParamType(f"Invalid fixed-bytes size in '{type_tag}'")
        return tag

    raise UnsupportedParamType(f"Unsupported parameter type '{type_tag}'")


def parse_signature(text: str) -> FunctionSignature:
    """
    Parse ``name`` or ``name(type1,type2)``.

    Raises:
        InvalidSignature: If the text is not a function name or signature
        UnsupportedParamType: If a declared type is not supported
    """
    match = _SIGNATURE_RE.match(text or "")
    if not match:
        raise InvalidSignature(f"Invalid function name or signature '{text}'")

    name, inner = match.group(1), match.group(2)
    if inner is None:
        return FunctionSignature(name=name)

    inner = inner.strip()
    if not inner:
        return FunctionSignature(name=name, input_types=())
    types = tuple(canonical_type(t) for t in inner.split(","))
    return FunctionSignature(name=name, input_types=types)


def infer_type(token: str) -> str:
    """Guess the ABI type of an untyped token: address, number, or string."""
    if is_address(token):
        return "address"
    if _HEX_NUMBER_RE.match(token) or _DECIMAL_RE.match(token):
        return "uint256"
    return "string"


def function_selector(name: str, input_types: Sequence[str]) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    sig = f"{name}({','.join(input_types)})"
    return keccak(sig.encode("utf-8"))[:4]


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------


def bind_params(
    function: str, tokens: Sequence[str], input_types: Sequence[str]
) -> list[ParamSpec]:
    """
    Pair raw tokens with their declared types.

    Raises:
        ArityMismatch: If the counts differ; checked before any parsing
    """
    if len(tokens) != len(input_types):
        raise ArityMismatch(function, len(input_types), len(tokens))
    return [ParamSpec(raw=t, type_tag=canonical_type(ty)) for t, ty in zip(tokens, input_types)]


def _parse_integer(raw: str, type_tag: str, bits: int, signed: bool) -> int:
    text = raw.strip()
    if _HEX_NUMBER_RE.match(text):
        value = int(text, 16)
    elif (_SIGNED_DECIMAL_RE if signed else _DECIMAL_RE).match(text):
        value = int(text, 10)
    else:
        raise InvalidNumeric(f"Invalid {type_tag} value '{raw}': expected decimal or 0x-prefixed hex")

    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise InvalidNumeric(f"Value '{raw}' does not fit in {type_tag}")
    return value


def _parse_bytes(raw: str, type_tag: str, size: Optional[int]) -> bytes:
    try:
        value = hex_to_bytes(raw.strip())
    except ValueError as exc:
        raise InvalidBytes(f"Invalid {type_tag} value '{raw}': not hex") from exc
    if size is not None and len(value) != size:
        raise InvalidBytes(f"Invalid {type_tag} value '{raw}': expected {size} bytes, got {len(value)}")
    return value


def parse_param(spec: ParamSpec) -> Any:
    """
    Convert one ParamSpec into the Python value eth-abi expects.

    Raises:
        ParamDecodeError: Subclass matching the failing type
    """
    raw, tag = spec.raw, spec.type_tag

    if tag == "address":
        try:
            return normalize_address(raw).lower()
        except InvalidAddress as exc:
            raise InvalidAddress(f"Invalid address parameter '{raw}'") from exc
    if tag == "string":
        return raw
    if tag == "bool":
        lowered = raw.strip().lower()
        if lowered not in ("true", "false"):
            raise InvalidBool(f"Invalid bool value '{raw}': expected true or false")
        return lowered == "true"
    if tag == "bytes":
        return _parse_bytes(raw, tag, None)

    match = _FIXED_BYTES_RE.match(tag)
    if match:
        return _parse_bytes(raw, tag, int(match.group(1)))
    match = _UINT_RE.match(tag)
    if match:
        return _parse_integer(raw, tag, int(match.group(1)), signed=False)
    match = _INT_RE.match(tag)
    if match:
        return _parse_integer(raw, tag, int(match.group(1)), signed=True)

    raise UnsupportedParamType(f"Unsupported parameter type '{tag}'")


def encode_params(specs: Sequence[ParamSpec]) -> tuple[Any, ...]:
    """Parse every ParamSpec; the first failure aborts the whole call."""
    return tuple(parse_param(spec) for spec in specs)


def encode_call_data(name: str, input_types: Sequence[str], args: Sequence[Any]) -> str:
    """
    ABI-encode a function call.

    Args:
        name: Function name
        input_types: Canonical ABI input types
        args: Values produced by ``encode_params``

    Returns:
        0x-prefixed hex encoded calldata
    """
    selector = function_selector(name, input_types)
    try:
        encoded_args = encode(list(input_types), list(args)) if input_types else b""
    except EncodingError as exc:
        raise ParamDecodeError(f"Cannot ABI-encode parameters for {name}: {exc}") from exc
    return "0x" + selector.hex() + encoded_args.hex()


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------


def decode_value(raw: bytes, return_type: ReturnType) -> Any:
    """
    ABI-decode a single return value.

    Raises:
        ResultDecodeError: On empty or malformed return data
    """
    if not raw:
        raise ResultDecodeError(
            f"Empty return data; cannot decode {return_type.value} "
            f"(is the function name and contract correct?)"
        )
    try:
        (value,) = decode([return_type.abi_type], raw)
    except (DecodingError, UnicodeDecodeError) as exc:
        raise ResultDecodeError(f"Malformed {return_type.value} return data: {exc}") from exc
    return value


def render_value(value: Any, return_type: ReturnType) -> str:
    if return_type is ReturnType.BOOL:
        return "true" if value else "false"
    if return_type is ReturnType.ADDRESS:
        return to_checksum_address(value)
    if return_type in (ReturnType.BYTES, ReturnType.BYTES32):
        return "0x" + bytes(value).hex()
    return str(value)


def decode_result(raw: bytes, return_type: ReturnType) -> str:
    """Decode raw return bytes into their display string."""
    return render_value(decode_value(raw, return_type), return_type)


def to_native(wei: int) -> Decimal:
    """Exact native-token amount of ``wei``."""
    return Decimal(f"{int(wei)}e-{NATIVE_DECIMALS}")


def format_native(wei: int, significant_digits: Optional[int] = None) -> str:
    """Render a wei amount as a native-token decimal string (see ``format_decimal``)."""
    return format_decimal(to_native(wei), significant_digits)


def format_decimal(amount: Decimal, significant_digits: Optional[int] = None) -> str:
    """
    Render a native-token amount as a plain decimal string.

    With ``significant_digits`` the amount is rounded half-to-even to that
    many significant digits. Trailing zeros are stripped, keeping one
    fractional digit.
    """
    if significant_digits is not None:
        with localcontext() as ctx:
            ctx.prec = significant_digits
            ctx.rounding = ROUND_HALF_EVEN
            amount = +amount

    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text + ".0" if "." not in text else text


def decode_revert_reason(data: Any) -> Optional[str]:
    """Extract a human-readable reason from ``Error(string)`` or ``Panic(uint256)`` revert data."""
    if not isinstance(data, str) or not data.startswith("0x"):
        return None
    try:
        raw = hex_to_bytes(data)
    except ValueError:
        return None

    selector, body = raw[:4], raw[4:]
    try:
        if selector == ERROR_STRING_SELECTOR:
            (reason,) = decode(["string"], body)
            return reason
        if selector == PANIC_SELECTOR:
            (code,) = decode(["uint256"], body)
            return f"panic code {hex(code)}"
    except (DecodingError, UnicodeDecodeError):
        return None
    return None
