import pytest

from transform_engine.basex import (
    Base,
    base91_decode,
    base91_encode,
    basex_decode,
    basex_encode,
    decode_bytes,
    encode_bytes,
)
from transform_engine.errors import (
    AlphabetLengthMismatchError,
    CustomAlphabetUnsupportedError,
    ErrorKind,
    InvalidAlphabetError,
    InvalidUtf8OutputError,
    MalformedInputError,
    UnknownBaseError,
)

ALL_BASES = ["base16", "base32", "base58", "base62", "base64", "base85", "base91"]
SAMPLES = ["", "a", "hello world", "Grüße, 世界 🌍", "0123456789abcdeffedcba9876543210"]


@pytest.mark.parametrize("base", ALL_BASES)
@pytest.mark.parametrize("text", SAMPLES)
def test_round_trip_with_default_alphabet(base, text):
    assert basex_decode(basex_encode(text, base), base) == text


def test_known_encodings():
    assert basex_encode("hello", "base16") == "68656c6c6f"
    assert basex_encode("hello", "base32") == "NBSWY3DP"
    assert basex_encode("hello", "base64") == "aGVsbG8="
    assert basex_encode("hello world", "base58") == "StV1DL6CwTryKyV"
    assert basex_encode("hello", "base85") == "Xk~0{Zv"


def test_base_name_is_case_insensitive():
    assert basex_encode("hi", "BASE16") == basex_encode("hi", "base16")
    assert Base.parse(" Base64 ") is Base.BASE64


def test_unknown_base():
    with pytest.raises(UnknownBaseError) as exc:
        basex_encode("x", "base36")
    assert exc.value.kind is ErrorKind.UNKNOWN_BASE


@pytest.mark.parametrize("base,zero_symbol", [("base58", "1"), ("base62", "0")])
def test_leading_zero_bytes_survive(base, zero_symbol):
    data = bytes([0x00, 0x00, 0x01])
    encoded = encode_bytes(data, base)
    assert encoded.startswith(zero_symbol * 2)
    decoded = decode_bytes(encoded, base)
    assert len(decoded) == 3
    assert decoded == data


def test_leading_zero_bytes_use_first_symbol():
    assert encode_bytes(bytes([0, 0, 1]), "base58") == "112"
    assert encode_bytes(bytes([0, 0]), "base58") == "11"
    assert decode_bytes("11", "base58") == b"\x00\x00"
    assert encode_bytes(b"", "base62") == ""
    assert decode_bytes("", "base62") == b""


def test_big_integer_custom_alphabet_of_any_radix():
    binary = "01"
    assert encode_bytes(b"\x05", "base58", binary) == "101"
    assert decode_bytes("101", "base58", binary) == b"\x05"
    assert decode_bytes(encode_bytes(b"\x00\xff", "base62", "abc"), "base62", "abc") == b"\x00\xff"


def test_big_integer_alphabet_needs_two_symbols():
    with pytest.raises(InvalidAlphabetError):
        basex_encode("x", "base58", "A")


def test_big_integer_decode_strips_whitespace_and_rejects_foreign_symbols():
    encoded = basex_encode("hello world", "base58")
    assert basex_decode(f"  {encoded[:5]}\n{encoded[5:]} ", "base58") == "hello world"
    with pytest.raises(MalformedInputError):
        basex_decode("0OIl", "base58")


@pytest.mark.parametrize("base", ["base85", "base91"])
def test_custom_alphabet_rejected_for_static_tables(base):
    with pytest.raises(CustomAlphabetUnsupportedError) as exc:
        basex_encode("anything", base, "X")
    assert exc.value.kind is ErrorKind.CUSTOM_ALPHABET_UNSUPPORTED
    with pytest.raises(CustomAlphabetUnsupportedError):
        basex_decode("anything", base, "X")


def test_alphabet_length_mismatch_reports_expected_and_actual():
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+"
    assert len(alphabet) == 63
    with pytest.raises(AlphabetLengthMismatchError) as exc:
        basex_encode("x", "base64", alphabet)
    assert exc.value.details["expected"] == 64
    assert exc.value.details["actual"] == 63
    assert exc.value.to_dict()["kind"] == "AlphabetLengthMismatch"


def test_empty_alphabet_falls_back_to_default():
    assert basex_encode("hello", "base64", "") == "aGVsbG8="


def test_custom_fixed_width_alphabet():
    url_safe = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
    data = bytes([0xFB, 0xFF, 0xBF])
    assert encode_bytes(data, "base64", url_safe) == "-_-_"
    assert decode_bytes("-_-_", "base64", url_safe) == data
    with pytest.raises(MalformedInputError):
        decode_bytes("+/+/", "base64", url_safe)


def test_custom_hex_alphabet_is_strict():
    upper = "0123456789ABCDEF"
    assert encode_bytes(b"\xab", "base16", upper) == "AB"
    assert decode_bytes("AB", "base16", upper) == b"\xab"
    with pytest.raises(MalformedInputError):
        decode_bytes("ab", "base16", upper)


def test_fixed_width_alphabet_symbol_rules():
    with pytest.raises(InvalidAlphabetError):
        basex_encode("x", "base16", "0123456789abcdea")
    with pytest.raises(InvalidAlphabetError):
        basex_encode("x", "base32", "ABCDEFGHIJKLMNOPQRSTUVWXYZ23456=")


def test_default_hex_decode_is_case_insensitive_and_whitespace_tolerant():
    assert basex_decode("68 65\n6C 6c 6F", "base16") == "hello"


def test_base64_decode_is_strict_about_padding():
    assert basex_decode("aGVs\nbG8=", "base64") == "hello"
    with pytest.raises(MalformedInputError):
        basex_decode("aGVsbG8", "base64")
    with pytest.raises(MalformedInputError):
        basex_decode("aGVs*G8=", "base64")


def test_base32_decode_is_strict():
    with pytest.raises(MalformedInputError):
        basex_decode("nbswy3dp", "base32")
    with pytest.raises(MalformedInputError):
        basex_decode("NBSWY3D", "base32")


def test_base85_strips_whitespace_but_base91_does_not():
    b85 = basex_encode("hello world", "base85")
    assert basex_decode(b85[:4] + " \n" + b85[4:], "base85") == "hello world"

    b91 = basex_encode("hello world", "base91")
    with pytest.raises(MalformedInputError):
        basex_decode(b91[:4] + " " + b91[4:], "base91")


def test_base91_binary_round_trip():
    data = bytes(range(256))
    assert base91_decode(base91_encode(data)) == data


def test_non_utf8_payload_is_reported_separately():
    with pytest.raises(InvalidUtf8OutputError) as exc:
        basex_decode("ff", "base16")
    assert exc.value.kind is ErrorKind.INVALID_UTF8_OUTPUT
    assert decode_bytes("ff", "base16") == b"\xff"
