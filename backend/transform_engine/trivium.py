"""Trivium stream cipher (80-bit key, 80-bit IV).

``bit_order`` only selects how bits are read out of each key/IV byte while
loading the registers. Keystream bits are always packed LSB-first into output
bytes (bit 0 of the stream is the least significant bit of the first byte).
"""

import logging
from enum import Enum
from typing import Optional

import numpy as np

from .errors import UnsupportedBitOrderError
from .normalize import bytes_to_text, decode_hex, decode_input, encode_output
from .schemas import KeyType, TriviumTextRequest

logger = logging.getLogger(__name__)

KEY_BYTES = 10
IV_BYTES = 10
WARMUP_CYCLES = 4 * 288

_MASK_1 = (1 << 93) - 1
_MASK_2 = (1 << 84) - 1
_MASK_3 = (1 << 111) - 1


class BitOrder(str, Enum):
    MSB = "big"
    LSB = "little"


_BIT_ORDER_SPELLINGS = {
    "msb": BitOrder.MSB,
    "msb-first": BitOrder.MSB,
    "msb_first": BitOrder.MSB,
    "lsb": BitOrder.LSB,
    "lsb-first": BitOrder.LSB,
    "lsb_first": BitOrder.LSB,
}


def parse_bit_order(value: Optional[str]) -> BitOrder:
    if value is None:
        return BitOrder.MSB
    order = _BIT_ORDER_SPELLINGS.get(value.strip().lower())
    if order is None:
        raise UnsupportedBitOrderError(value)
    return order


def _normalize_to_fixed(data: bytes, length: int) -> bytes:
    return bytes(data[:length]).ljust(length, b"\x00")


def _load_register(data: bytes, length: int, bit_order: BitOrder) -> int:
    # Register bit i holds the i-th bit read from the input in ``bit_order``
    raw = np.frombuffer(_normalize_to_fixed(data, length), dtype=np.uint8)
    bits = np.unpackbits(raw, bitorder=bit_order.value)
    return int.from_bytes(np.packbits(bits, bitorder="little").tobytes(), "little")


def _bit(reg: int, idx: int) -> int:
    return (reg >> idx) & 1


class Trivium:
    def __init__(self, key: bytes, iv: bytes, bit_order: BitOrder = BitOrder.MSB):
        # s1: 80 key bits then 13 zeros
        self.r1 = _load_register(key, KEY_BYTES, bit_order)
        # s2: 80 IV bits then 4 zeros
        self.r2 = _load_register(iv, IV_BYTES, bit_order)
        # s3: 108 zeros then three ones
        self.r3 = 0b111 << 108

        for _ in range(WARMUP_CYCLES):
            self._step()

    def _step(self) -> int:
        r1, r2, r3 = self.r1, self.r2, self.r3

        t1 = _bit(r1, 65) ^ _bit(r1, 92)
        t2 = _bit(r2, 68) ^ _bit(r2, 83)
        t3 = _bit(r3, 65) ^ _bit(r3, 110)
        z = t1 ^ t2 ^ t3

        t1 ^= (_bit(r1, 90) & _bit(r1, 91)) ^ _bit(r2, 77)
        t2 ^= (_bit(r2, 81) & _bit(r2, 82)) ^ _bit(r3, 86)
        t3 ^= (_bit(r3, 108) & _bit(r3, 109)) ^ _bit(r1, 68)

        self.r1 = ((r1 << 1) & _MASK_1) | t3
        self.r2 = ((r2 << 1) & _MASK_2) | t1
        self.r3 = ((r3 << 1) & _MASK_3) | t2
        return z

    def keystream(self, length: int) -> bytes:
        if length < 0:
            raise ValueError("length must be >= 0")
        bits = np.fromiter((self._step() for _ in range(length * 8)), dtype=np.uint8, count=length * 8)
        return np.packbits(bits, bitorder="little").tobytes()

    def xor(self, data: bytes) -> bytes:
        stream = np.frombuffer(self.keystream(len(data)), dtype=np.uint8)
        payload = np.frombuffer(bytes(data), dtype=np.uint8)
        return np.bitwise_xor(payload, stream).tobytes()


def trivium_xor(key: bytes, iv: bytes, data: bytes, bit_order: Optional[str] = None) -> bytes:
    order = parse_bit_order(bit_order)
    logger.debug("trivium xor %d bytes (bit order %s)", len(data), order.name)
    return Trivium(bytes(key), bytes(iv), order).xor(bytes(data))


# --- Text helpers ---

def parse_trivium_key(value: str, key_type: KeyType) -> bytes:
    if not value:
        return bytes(KEY_BYTES)
    if key_type is KeyType.HEX:
        # Hex is read as a big-endian 80-bit value
        return _normalize_to_fixed(decode_hex(value, "Trivium hex"), KEY_BYTES)[::-1]
    elif key_type is KeyType.TEXT:
        return _normalize_to_fixed(value.encode("utf-8"), KEY_BYTES)
    raise ValueError(f"Unhandled key type: {key_type}")


def trivium_encrypt(request: TriviumTextRequest) -> str:
    key = parse_trivium_key(request.key, request.key_type)
    iv = parse_trivium_key(request.iv, request.iv_type)
    ciphertext = trivium_xor(key, iv, request.input.encode("utf-8"), request.bit_order)
    return encode_output(ciphertext, request.format)


def trivium_decrypt(request: TriviumTextRequest) -> str:
    key = parse_trivium_key(request.key, request.key_type)
    iv = parse_trivium_key(request.iv, request.iv_type)
    ciphertext = decode_input(request.input, request.format)
    return bytes_to_text(trivium_xor(key, iv, ciphertext, request.bit_order), "Decrypted data")
