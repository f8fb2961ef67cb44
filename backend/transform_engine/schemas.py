from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _WireEnum(str, Enum):
    # Wire values are case-insensitive
    @classmethod
    def _missing_(cls, value: Any):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class Sm4Mode(_WireEnum):
    ECB = "ecb"
    CBC = "cbc"
    CFB = "cfb"
    OFB = "ofb"
    CTR = "ctr"


class Sm4Padding(_WireEnum):
    PKCS7 = "pkcs7"
    ZERO = "zero"
    NONE = "none"


class CipherFormat(_WireEnum):
    HEX = "hex"
    BASE64 = "base64"


class KeyType(_WireEnum):
    TEXT = "text"
    HEX = "hex"


def _lower_wire_value(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


Byte = Annotated[int, Field(ge=0, le=255)]


class EncodingRequest(BaseModel):
    input: str
    base: str
    alphabet: Optional[str] = None


class CipherRequest(BaseModel):
    """SM4 request. ``format`` is the output format on encrypt and the
    input format on decrypt."""

    model_config = ConfigDict(populate_by_name=True)

    input: str
    mode: Sm4Mode
    padding: Sm4Padding
    format: CipherFormat
    key: str
    key_type: KeyType = Field(alias="keyType")
    iv: Optional[str] = None
    iv_type: Optional[KeyType] = Field(default=None, alias="ivType")

    @field_validator("mode", "padding", "format", "key_type", "iv_type", mode="before")
    @classmethod
    def _case_insensitive(cls, value):
        return _lower_wire_value(value)


class StreamCipherRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: List[Byte]
    iv: List[Byte]
    data: List[Byte]
    bit_order: Optional[str] = Field(default=None, alias="bitOrder")


class TriviumTextRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    input: str
    format: CipherFormat = CipherFormat.HEX
    key: str = ""
    key_type: KeyType = Field(default=KeyType.TEXT, alias="keyType")
    iv: str = ""
    iv_type: KeyType = Field(default=KeyType.TEXT, alias="ivType")
    bit_order: Optional[str] = Field(default=None, alias="bitOrder")

    @field_validator("format", "key_type", "iv_type", mode="before")
    @classmethod
    def _case_insensitive(cls, value):
        return _lower_wire_value(value)


class TextResult(BaseModel):
    output: str


class BytesResult(BaseModel):
    data: List[int]
