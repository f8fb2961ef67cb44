import base64
import binascii

from .errors import InvalidUtf8OutputError, MalformedInputError
from .schemas import CipherFormat


def strip_whitespace(text: str) -> str:
    return "".join(ch for ch in text if not ch.isspace())


def decode_hex(text: str, what: str = "hex") -> bytes:
    clean = strip_whitespace(text)
    try:
        return base64.b16decode(clean, casefold=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedInputError(f"invalid {what}: {e}")


def decode_base64(text: str, what: str = "base64") -> bytes:
    clean = strip_whitespace(text)
    try:
        return base64.b64decode(clean, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedInputError(f"invalid {what}: {e}")


def encode_output(data: bytes, fmt: CipherFormat) -> str:
    if fmt is CipherFormat.HEX:
        return data.hex()
    elif fmt is CipherFormat.BASE64:
        return base64.b64encode(data).decode("ascii")
    raise ValueError(f"Unhandled format: {fmt}")


def decode_input(text: str, fmt: CipherFormat) -> bytes:
    if fmt is CipherFormat.HEX:
        return decode_hex(text)
    elif fmt is CipherFormat.BASE64:
        return decode_base64(text)
    raise ValueError(f"Unhandled format: {fmt}")


def bytes_to_text(data: bytes, what: str = "Decoded data") -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidUtf8OutputError(what)
