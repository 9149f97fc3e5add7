"""Unit tests for the value codec: parameter parsing, call data, result decoding."""

from __future__ import annotations

from decimal import Decimal

import pytest
from eth_abi import encode

from crunner.codec import (
    FunctionSignature,
    ParamSpec,
    ReturnType,
    bind_params,
    canonical_type,
    decode_result,
    decode_revert_reason,
    encode_call_data,
    encode_params,
    format_decimal,
    format_native,
    function_selector,
    infer_type,
    normalize_address,
    parse_param,
    parse_signature,
    to_checksum_address,
    to_native,
)
from crunner.errors import (
    ArityMismatch,
    InvalidAddress,
    InvalidBool,
    InvalidBytes,
    InvalidNumeric,
    InvalidSignature,
    ResultDecodeError,
    UnsupportedParamType,
    UnsupportedReturnType,
)

from conftest import OWNER, SPENDER


class TestAddress:
    @pytest.mark.parametrize(
        "text",
        [
            OWNER,
            OWNER.lower(),
            OWNER.upper().replace("0X", "0x"),
            OWNER[2:],
            OWNER[2:].upper(),
        ],
    )
    def test_accepts_40_hex_chars(self, text: str) -> None:
        assert normalize_address(text) == OWNER

    @pytest.mark.parametrize(
        "text",
        [
            OWNER[:-1],
            OWNER + "0",
            "0x" + "g" * 40,
            "0x",
            "",
            "0x0x" + "a" * 38,
        ],
    )
    def test_rejects_other_lengths_or_non_hex(self, text: str) -> None:
        with pytest.raises(InvalidAddress):
            normalize_address(text)

    def test_eip55_checksum(self) -> None:
        assert to_checksum_address(SPENDER.lower()) == SPENDER
        assert to_checksum_address("0xdbf03b407c01e7cd3cbea99509d93f8dddc8c6fb") == (
            "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
        )


class TestSignature:
    def test_bare_name(self) -> None:
        assert parse_signature("allowance") == FunctionSignature("allowance")

    def test_full_signature_canonicalizes_aliases(self) -> None:
        sig = parse_signature("transfer(address, uint)")
        assert sig.name == "transfer"
        assert sig.input_types == ("address", "uint256")

    def test_empty_parens(self) -> None:
        assert parse_signature("name()").input_types == ()

    @pytest.mark.parametrize("text", ["", "foo(", "1abc", "foo bar"])
    def test_rejects_malformed(self, text: str) -> None:
        with pytest.raises(InvalidSignature):
            parse_signature(text)

    @pytest.mark.parametrize("tag", ["uint7", "uint264", "bytes33", "address[]", "tuple"])
    def test_rejects_unsupported_types(self, tag: str) -> None:
        with pytest.raises(UnsupportedParamType):
            canonical_type(tag)

    def test_known_selectors(self) -> None:
        assert function_selector("approve", ["address", "uint256"]).hex() == "095ea7b3"
        assert function_selector("balanceOf", ["address"]).hex() == "70a08231"
        assert function_selector("name", []).hex() == "06fdde03"


class TestInference:
    def test_address(self) -> None:
        assert infer_type(OWNER) == "address"

    def test_hex_and_decimal_numbers(self) -> None:
        assert infer_type("0x1f") == "uint256"
        assert infer_type("1000") == "uint256"

    def test_everything_else_is_string(self) -> None:
        assert infer_type("hello") == "string"
        assert infer_type("12abc") == "string"


class TestParseParam:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("0", 0),
            ("1000", 1000),
            ("0xff", 255),
            ("0XFF", 255),
            (str(2**256 - 1), 2**256 - 1),
            (hex(2**256 - 1), 2**256 - 1),
        ],
    )
    def test_uint256(self, raw: str, expected: int) -> None:
        assert parse_param(ParamSpec(raw, "uint256")) == expected

    @pytest.mark.parametrize("raw", [str(2**256), "-1", "1.5", "abc", "0x", "1_000", ""])
    def test_uint256_rejects(self, raw: str) -> None:
        with pytest.raises(InvalidNumeric):
            parse_param(ParamSpec(raw, "uint256"))

    def test_uint8_range(self) -> None:
        assert parse_param(ParamSpec("255", "uint8")) == 255
        with pytest.raises(InvalidNumeric):
            parse_param(ParamSpec("256", "uint8"))

    def test_signed_int(self) -> None:
        assert parse_param(ParamSpec("-128", "int8")) == -128
        with pytest.raises(InvalidNumeric):
            parse_param(ParamSpec("-129", "int8"))

    @pytest.mark.parametrize("raw, expected", [("true", True), ("FALSE", False), ("True", True)])
    def test_bool(self, raw: str, expected: bool) -> None:
        assert parse_param(ParamSpec(raw, "bool")) is expected

    @pytest.mark.parametrize("raw", ["yes", "1", ""])
    def test_bool_rejects(self, raw: str) -> None:
        with pytest.raises(InvalidBool):
            parse_param(ParamSpec(raw, "bool"))

    def test_string_passes_through_literally(self) -> None:
        raw = '  "quoted" \\n with spaces '
        assert parse_param(ParamSpec(raw, "string")) == raw

    def test_bytes(self) -> None:
        assert parse_param(ParamSpec("0xdeadbeef", "bytes")) == bytes.fromhex("deadbeef")
        assert parse_param(ParamSpec("deadbeef", "bytes4")) == bytes.fromhex("deadbeef")

    def test_fixed_bytes_length_checked(self) -> None:
        with pytest.raises(InvalidBytes):
            parse_param(ParamSpec("0xdead", "bytes4"))
        with pytest.raises(InvalidBytes):
            parse_param(ParamSpec("0xzz", "bytes"))

    def test_address_param_is_lowercased(self) -> None:
        assert parse_param(ParamSpec(OWNER, "address")) == OWNER.lower()


class TestEncode:
    def test_arity_mismatch_before_parsing(self) -> None:
        # "not-a-number" would fail parsing; the count check must win
        with pytest.raises(ArityMismatch) as exc_info:
            bind_params("approve", ["not-a-number"], ["address", "uint256"])
        assert exc_info.value.expected == 2
        assert exc_info.value.supplied == 1

    def test_first_bad_param_fails_the_call(self) -> None:
        specs = bind_params("approve", [SPENDER, "oops"], ["address", "uint256"])
        with pytest.raises(InvalidNumeric):
            encode_params(specs)

    def test_call_data(self) -> None:
        specs = bind_params("approve", [SPENDER, "1000"], ["address", "uint256"])
        data = encode_call_data("approve", ["address", "uint256"], encode_params(specs))
        expected = encode(["address", "uint256"], [SPENDER.lower(), 1000]).hex()
        assert data == "0x095ea7b3" + expected

    def test_call_data_without_args(self) -> None:
        assert encode_call_data("name", [], []) == "0x06fdde03"


class TestDecode:
    def test_string(self) -> None:
        raw = encode(["string"], ["Wrapped BNB"])
        assert decode_result(raw, ReturnType.STRING) == "Wrapped BNB"

    @pytest.mark.parametrize("token", ["0", "12345", "0x3635c9adc5dea00000", str(2**256 - 1)])
    def test_numeric_round_trip(self, token: str) -> None:
        value = parse_param(ParamSpec(token, "uint256"))
        raw = encode(["uint256"], [value])
        assert decode_result(raw, ReturnType.U256) == str(int(token, 0))

    def test_bool_address_bytes(self) -> None:
        assert decode_result(encode(["bool"], [True]), ReturnType.BOOL) == "true"
        assert decode_result(encode(["address"], [OWNER.lower()]), ReturnType.ADDRESS) == OWNER
        assert decode_result(encode(["bytes"], [b"\x01\x02"]), ReturnType.BYTES) == "0x0102"
        assert decode_result(encode(["bytes32"], [b"\x00" * 32]), ReturnType.BYTES32) == "0x" + "00" * 32

    def test_empty_return_data_is_an_error(self) -> None:
        with pytest.raises(ResultDecodeError):
            decode_result(b"", ReturnType.STRING)

    def test_truncated_string_is_an_error(self) -> None:
        raw = encode(["string"], ["hello world"])[:40]
        with pytest.raises(ResultDecodeError):
            decode_result(raw, ReturnType.STRING)

    def test_decode_is_deterministic(self) -> None:
        raw = encode(["uint256"], [4876566977257765806422])
        outputs = {decode_result(raw, ReturnType.U256) for _ in range(5)}
        assert outputs == {"4876566977257765806422"}

    def test_return_type_parse(self) -> None:
        assert ReturnType.parse("u256") is ReturnType.U256
        with pytest.raises(UnsupportedReturnType):
            ReturnType.parse("Float")


class TestFormatNative:
    def test_exact_gas_values(self) -> None:
        assert format_native(5_000_000_000) == "0.000000005"
        assert format_native(25242 * 5_000_000_000) == "0.00012621"

    def test_balance_rounding(self) -> None:
        assert format_native(4876566977257765806422, 16) == "4876.566977257766"

    def test_round_half_even(self) -> None:
        # 1.0000000000000005 and 1.0000000000000015 at 16 significant digits
        assert format_native(1_000_000_000_000_000_500, 16) == "1.0"
        assert format_native(1_000_000_000_000_001_500, 16) == "1.000000000000002"

    def test_whole_amounts_keep_one_decimal(self) -> None:
        assert format_native(0) == "0.0"
        assert format_native(10**18) == "1.0"

    def test_exact_without_rounding(self) -> None:
        assert format_native(1) == "0.000000000000000001"

    def test_format_decimal(self) -> None:
        assert format_decimal(Decimal("0.000126210")) == "0.00012621"
        assert format_decimal(Decimal("4876.5669772577658064"), 16) == "4876.566977257766"
        assert format_decimal(to_native(3 * 10**18)) == "3.0"


class TestRevertReason:
    def test_error_string(self) -> None:
        data = "0x08c379a0" + encode(["string"], ["Ownable: caller is not the owner"]).hex()
        assert decode_revert_reason(data) == "Ownable: caller is not the owner"

    def test_panic(self) -> None:
        data = "0x4e487b71" + encode(["uint256"], [0x11]).hex()
        assert decode_revert_reason(data) == "panic code 0x11"

    @pytest.mark.parametrize("data", [None, "", "0x", "0x12345678", "not hex", 42])
    def test_unknown_payloads(self, data: object) -> None:
        assert decode_revert_reason(data) is None
