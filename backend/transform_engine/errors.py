from enum import Enum
from typing import Any, Dict


class ErrorKind(str, Enum):
    UNKNOWN_BASE = "UnknownBase"
    ALPHABET_LENGTH_MISMATCH = "AlphabetLengthMismatch"
    INVALID_ALPHABET = "InvalidAlphabet"
    CUSTOM_ALPHABET_UNSUPPORTED = "CustomAlphabetUnsupported"
    MALFORMED_INPUT = "MalformedInput"
    INVALID_UTF8_OUTPUT = "InvalidUtf8Output"
    MISSING_IV = "MissingIv"
    MISSING_IV_TYPE = "MissingIvType"
    WRONG_KEY_OR_IV_LENGTH = "WrongKeyOrIvLength"
    DATA_NOT_BLOCK_ALIGNED = "DataNotBlockAligned"
    INVALID_PKCS7_PADDING = "InvalidPkcs7Padding"
    UNSUPPORTED_BIT_ORDER = "UnsupportedBitOrder"


class EngineError(ValueError):
    """Base class for every failure the engine reports to its caller.

    Each subclass pins a single ``ErrorKind`` and stores the structured
    fields (lengths, field names, offending values) in ``details`` so the
    boundary can render them without parsing the message.
    """

    kind: ErrorKind

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, **self.details}


class UnknownBaseError(EngineError):
    kind = ErrorKind.UNKNOWN_BASE

    def __init__(self, base: str):
        super().__init__(f"Unknown base: {base}", base=base)


class AlphabetLengthMismatchError(EngineError):
    kind = ErrorKind.ALPHABET_LENGTH_MISMATCH

    def __init__(self, base: str, expected: int, actual: int):
        super().__init__(
            f"Custom alphabet for {base} must be {expected} characters, got {actual}",
            base=base,
            expected=expected,
            actual=actual,
        )


class InvalidAlphabetError(EngineError):
    kind = ErrorKind.INVALID_ALPHABET

    def __init__(self, base: str, reason: str):
        super().__init__(f"Invalid alphabet for {base}: {reason}", base=base, reason=reason)


class CustomAlphabetUnsupportedError(EngineError):
    kind = ErrorKind.CUSTOM_ALPHABET_UNSUPPORTED

    def __init__(self, base: str):
        super().__init__(f"Custom alphabet not supported for {base}", base=base)


class MalformedInputError(EngineError):
    kind = ErrorKind.MALFORMED_INPUT

    def __init__(self, reason: str):
        super().__init__(f"Malformed input: {reason}", reason=reason)


class InvalidUtf8OutputError(EngineError):
    kind = ErrorKind.INVALID_UTF8_OUTPUT

    def __init__(self, what: str = "Decoded data"):
        super().__init__(f"{what} is not valid UTF-8 text")


class MissingIvError(EngineError):
    kind = ErrorKind.MISSING_IV

    def __init__(self, mode: str):
        super().__init__(f"IV is required for {mode.upper()} mode", mode=mode)


class MissingIvTypeError(EngineError):
    kind = ErrorKind.MISSING_IV_TYPE

    def __init__(self):
        super().__init__("ivType is required when IV is provided")


class WrongKeyOrIvLengthError(EngineError):
    kind = ErrorKind.WRONG_KEY_OR_IV_LENGTH

    def __init__(self, field: str, actual: int, expected: int = 16):
        super().__init__(
            f"{field} must be {expected} bytes, got {actual} bytes",
            field=field,
            expected=expected,
            actual=actual,
        )


class DataNotBlockAlignedError(EngineError):
    kind = ErrorKind.DATA_NOT_BLOCK_ALIGNED

    def __init__(self, length: int, block_size: int = 16):
        super().__init__(
            f"Data length must be a multiple of {block_size} bytes, got {length}",
            length=length,
            block_size=block_size,
        )


class InvalidPkcs7PaddingError(EngineError):
    kind = ErrorKind.INVALID_PKCS7_PADDING

    def __init__(self):
        super().__init__("Invalid PKCS7 padding")


class UnsupportedBitOrderError(EngineError):
    kind = ErrorKind.UNSUPPORTED_BIT_ORDER

    def __init__(self, value: str):
        super().__init__(
            f"Unsupported bitOrder: {value} (expected 'msb' or 'lsb')", value=value
        )
