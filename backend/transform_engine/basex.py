"""Radix codecs for the base-x encoder tool.

Three families share one entry point:

* fixed-width (base16/32/64): RFC 4648 bit-packing, optional custom alphabet
  of exactly ``radix`` symbols substituted position by position;
* big-integer (base58/62): the input is one big-endian unsigned integer
  re-expressed in ``len(alphabet)`` digits, leading zero bytes preserved as
  leading ``alphabet[0]`` symbols;
* static-table (base85/91): built-in alphabets only.
"""

import base64
import binascii
import logging
from enum import Enum
from typing import Optional

from .errors import (
    AlphabetLengthMismatchError,
    CustomAlphabetUnsupportedError,
    InvalidAlphabetError,
    MalformedInputError,
    UnknownBaseError,
)
from .normalize import bytes_to_text, decode_hex, strip_whitespace

logger = logging.getLogger(__name__)


class Base(str, Enum):
    BASE16 = "base16"
    BASE32 = "base32"
    BASE58 = "base58"
    BASE62 = "base62"
    BASE64 = "base64"
    BASE85 = "base85"
    BASE91 = "base91"

    @classmethod
    def parse(cls, value) -> "Base":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        raise UnknownBaseError(str(value))

    @property
    def radix(self) -> int:
        return int(self.value[4:])


# (canonical alphabet produced by the stdlib codec, default alphabet, padded)
_FIXED_WIDTH = {
    Base.BASE16: ("0123456789ABCDEF", "0123456789abcdef", False),
    Base.BASE32: ("ABCDEFGHIJKLMNOPQRSTUVWXYZ234567", "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567", True),
    Base.BASE64: (
        "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/",
        "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/",
        True,
    ),
}

_BIG_INTEGER = {
    # Bitcoin
    Base.BASE58: "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz",
    Base.BASE62: "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz",
}

BASE85_ALPHABET = (
    "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
    "!#$%&()*+-;<=>?@^_`{|}~"
)
BASE91_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
    "!#$%&()*+,./:;<=>?@[]^_`{|}~\""
)
_BASE91_LOOKUP = {ch: i for i, ch in enumerate(BASE91_ALPHABET)}

PAD = "="


def default_alphabets() -> dict:
    defaults = {base.value: entry[1] for base, entry in _FIXED_WIDTH.items()}
    defaults.update({base.value: alphabet for base, alphabet in _BIG_INTEGER.items()})
    defaults[Base.BASE85.value] = BASE85_ALPHABET
    defaults[Base.BASE91.value] = BASE91_ALPHABET
    return defaults


# --- Alphabet validation ---

def _check_symbols(base: Base, alphabet: str, padded: bool):
    if len(set(alphabet)) != len(alphabet):
        raise InvalidAlphabetError(base.value, "symbols must be unique")
    if any(ch.isspace() for ch in alphabet):
        raise InvalidAlphabetError(base.value, "whitespace is not allowed")
    if padded and PAD in alphabet:
        raise InvalidAlphabetError(base.value, f"'{PAD}' is reserved for padding")


def validate_alphabet(base: Base, alphabet: Optional[str]) -> Optional[str]:
    """Check a requested custom alphabet against ``base``.

    Returns the alphabet to use, or None when the base's default applies.
    An empty string counts as no custom alphabet.
    """
    if not alphabet:
        return None

    if base in _FIXED_WIDTH:
        actual = len(alphabet)
        if actual != base.radix:
            raise AlphabetLengthMismatchError(base.value, base.radix, actual)
        _check_symbols(base, alphabet, padded=_FIXED_WIDTH[base][2])
        return alphabet

    if base in _BIG_INTEGER:
        if len(alphabet) < 2:
            raise InvalidAlphabetError(base.value, "at least 2 symbols are required")
        _check_symbols(base, alphabet, padded=False)
        return alphabet

    raise CustomAlphabetUnsupportedError(base.value)


# --- Fixed-width (base16/32/64) ---

def _stdlib_encode(base: Base, data: bytes) -> bytes:
    if base is Base.BASE16:
        return base64.b16encode(data)
    elif base is Base.BASE32:
        return base64.b32encode(data)
    return base64.b64encode(data)


def _stdlib_decode(base: Base, text: str) -> bytes:
    if base is Base.BASE16:
        return base64.b16decode(text)
    elif base is Base.BASE32:
        return base64.b32decode(text)
    return base64.b64decode(text, validate=True)


def encode_fixed_width(data: bytes, base: Base, alphabet: Optional[str] = None) -> str:
    canonical, default, _ = _FIXED_WIDTH[base]
    target = alphabet or default
    encoded = _stdlib_encode(base, data).decode("ascii")
    if target != canonical:
        encoded = encoded.translate(str.maketrans(canonical, target))
    return encoded


def decode_fixed_width(text: str, base: Base, alphabet: Optional[str] = None) -> bytes:
    clean = strip_whitespace(text)
    if base is Base.BASE16 and alphabet is None:
        # Default hex accepts either case
        return decode_hex(clean, "base16")

    canonical, default, padded = _FIXED_WIDTH[base]
    target = alphabet or default
    allowed = set(target)
    if padded:
        allowed.add(PAD)
    for pos, ch in enumerate(clean):
        if ch not in allowed:
            raise MalformedInputError(f"invalid {base.value} symbol {ch!r} at position {pos}")

    if target != canonical:
        clean = clean.translate(str.maketrans(target, canonical))
    try:
        return _stdlib_decode(base, clean)
    except (binascii.Error, ValueError) as e:
        raise MalformedInputError(f"invalid {base.value} data: {e}")


# --- Big-integer (base58/62 and arbitrary radix) ---

def encode_big_integer(data: bytes, alphabet: str) -> str:
    radix = len(alphabet)
    num = int.from_bytes(data, "big")
    digits = []
    while num > 0:
        num, rem = divmod(num, radix)
        digits.append(alphabet[rem])
    leading_zeros = len(data) - len(data.lstrip(b"\x00"))
    return alphabet[0] * leading_zeros + "".join(reversed(digits))


def decode_big_integer(text: str, alphabet: str) -> bytes:
    radix = len(alphabet)
    lookup = {symbol: value for value, symbol in enumerate(alphabet)}
    clean = strip_whitespace(text)

    num = 0
    for pos, ch in enumerate(clean):
        digit = lookup.get(ch)
        if digit is None:
            raise MalformedInputError(f"invalid symbol {ch!r} at position {pos}")
        num = num * radix + digit

    leading_zeros = len(clean) - len(clean.lstrip(alphabet[0]))
    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * leading_zeros + body


# --- Static-table (base85/91) ---

def base85_encode(data: bytes) -> str:
    return base64.b85encode(data).decode("ascii")


def base85_decode(text: str) -> bytes:
    clean = strip_whitespace(text)
    try:
        return base64.b85decode(clean)
    except (binascii.Error, ValueError) as e:
        raise MalformedInputError(f"invalid base85 data: {e}")


def base91_encode(data: bytes) -> str:
    b = 0
    n = 0
    out = []
    for byte in data:
        b |= byte << n
        n += 8
        if n > 13:
            v = b & 8191
            if v > 88:
                b >>= 13
                n -= 13
            else:
                v = b & 16383
                b >>= 14
                n -= 14
            out.append(BASE91_ALPHABET[v % 91])
            out.append(BASE91_ALPHABET[v // 91])
    if n:
        out.append(BASE91_ALPHABET[b % 91])
        if n > 7 or b > 90:
            out.append(BASE91_ALPHABET[b // 91])
    return "".join(out)


def base91_decode(text: str) -> bytes:
    # Not whitespace-stripped: anything outside the table is rejected
    v = -1
    b = 0
    n = 0
    out = bytearray()
    for pos, ch in enumerate(text):
        c = _BASE91_LOOKUP.get(ch)
        if c is None:
            raise MalformedInputError(f"invalid base91 symbol {ch!r} at position {pos}")
        if v < 0:
            v = c
            continue
        v += c * 91
        b |= v << n
        n += 13 if (v & 8191) > 88 else 14
        while True:
            out.append(b & 255)
            b >>= 8
            n -= 8
            if n <= 7:
                break
        v = -1
    if v >= 0:
        out.append((b | v << n) & 255)
    return bytes(out)


# --- Dispatch ---

def encode_bytes(data: bytes, base, alphabet: Optional[str] = None) -> str:
    base = Base.parse(base)
    alphabet = validate_alphabet(base, alphabet)
    logger.debug("basex encode %s (%d bytes, custom alphabet: %s)", base.value, len(data), alphabet is not None)

    if base in _FIXED_WIDTH:
        return encode_fixed_width(data, base, alphabet)
    elif base in _BIG_INTEGER:
        return encode_big_integer(data, alphabet or _BIG_INTEGER[base])
    elif base is Base.BASE85:
        return base85_encode(data)
    elif base is Base.BASE91:
        return base91_encode(data)
    raise UnknownBaseError(base.value)


def decode_bytes(text: str, base, alphabet: Optional[str] = None) -> bytes:
    base = Base.parse(base)
    alphabet = validate_alphabet(base, alphabet)
    logger.debug("basex decode %s (%d chars, custom alphabet: %s)", base.value, len(text), alphabet is not None)

    if base in _FIXED_WIDTH:
        return decode_fixed_width(text, base, alphabet)
    elif base in _BIG_INTEGER:
        return decode_big_integer(text, alphabet or _BIG_INTEGER[base])
    elif base is Base.BASE85:
        return base85_decode(text)
    elif base is Base.BASE91:
        return base91_decode(text)
    raise UnknownBaseError(base.value)


def basex_encode(text: str, base, alphabet: Optional[str] = None) -> str:
    return encode_bytes(text.encode("utf-8"), base, alphabet)


def basex_decode(text: str, base, alphabet: Optional[str] = None) -> str:
    return bytes_to_text(decode_bytes(text, base, alphabet))
