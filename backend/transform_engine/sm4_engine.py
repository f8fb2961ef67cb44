import logging
from typing import Optional

from .errors import (
    DataNotBlockAlignedError,
    InvalidPkcs7PaddingError,
    MissingIvError,
    MissingIvTypeError,
    WrongKeyOrIvLengthError,
)
from .normalize import bytes_to_text, decode_hex, decode_input, encode_output
from .schemas import CipherRequest, KeyType, Sm4Mode, Sm4Padding

logger = logging.getLogger(__name__)

BLOCK_SIZE = 16

SBOX = [
    0xD6, 0x90, 0xE9, 0xFE, 0xCC, 0xE1, 0x3D, 0xB7, 0x16, 0xB6, 0x14, 0xC2, 0x28, 0xFB, 0x2C, 0x05,
    0x2B, 0x67, 0x9A, 0x76, 0x2A, 0xBE, 0x04, 0xC3, 0xAA, 0x44, 0x13, 0x26, 0x49, 0x86, 0x06, 0x99,
    0x9C, 0x42, 0x50, 0xF4, 0x91, 0xEF, 0x98, 0x7A, 0x33, 0x54, 0x0B, 0x43, 0xED, 0xCF, 0xAC, 0x62,
    0xE4, 0xB3, 0x1C, 0xA9, 0xC9, 0x08, 0xE8, 0x95, 0x80, 0xDF, 0x94, 0xFA, 0x75, 0x8F, 0x3F, 0xA6,
    0x47, 0x07, 0xA7, 0xFC, 0xF3, 0x73, 0x17, 0xBA, 0x83, 0x59, 0x3C, 0x19, 0xE6, 0x85, 0x4F, 0xA8,
    0x68, 0x6B, 0x81, 0xB2, 0x71, 0x64, 0xDA, 0x8B, 0xF8, 0xEB, 0x0F, 0x4B, 0x70, 0x56, 0x9D, 0x35,
    0x1E, 0x24, 0x0E, 0x5E, 0x63, 0x58, 0xD1, 0xA2, 0x25, 0x22, 0x7C, 0x3B, 0x01, 0x21, 0x78, 0x87,
    0xD4, 0x00, 0x46, 0x57, 0x9F, 0xD3, 0x27, 0x52, 0x4C, 0x36, 0x02, 0xE7, 0xA0, 0xC4, 0xC8, 0x9E,
    0xEA, 0xBF, 0x8A, 0xD2, 0x40, 0xC7, 0x38, 0xB5, 0xA3, 0xF7, 0xF2, 0xCE, 0xF9, 0x61, 0x15, 0xA1,
    0xE0, 0xAE, 0x5D, 0xA4, 0x9B, 0x34, 0x1A, 0x55, 0xAD, 0x93, 0x32, 0x30, 0xF5, 0x8C, 0xB1, 0xE3,
    0x1D, 0xF6, 0xE2, 0x2E, 0x82, 0x66, 0xCA, 0x60, 0xC0, 0x29, 0x23, 0xAB, 0x0D, 0x53, 0x4E, 0x6F,
    0xD5, 0xDB, 0x37, 0x45, 0xDE, 0xFD, 0x8E, 0x2F, 0x03, 0xFF, 0x6A, 0x72, 0x6D, 0x6C, 0x5B, 0x51,
    0x8D, 0x1B, 0xAF, 0x92, 0xBB, 0xDD, 0xBC, 0x7F, 0x11, 0xD9, 0x5C, 0x41, 0x1F, 0x10, 0x5A, 0xD8,
    0x0A, 0xC1, 0x31, 0x88, 0xA5, 0xCD, 0x7B, 0xBD, 0x2D, 0x74, 0xD0, 0x12, 0xB8, 0xE5, 0xB4, 0xB0,
    0x89, 0x69, 0x97, 0x4A, 0x0C, 0x96, 0x77, 0x7E, 0x65, 0xB9, 0xF1, 0x09, 0xC5, 0x6E, 0xC6, 0x84,
    0x18, 0xF0, 0x7D, 0xEC, 0x3A, 0xDC, 0x4D, 0x20, 0x79, 0xEE, 0x5F, 0x3E, 0xD7, 0xCB, 0x39, 0x48,
]

FK = [0xA3B1BAC6, 0x56AA3350, 0x677D9197, 0xB27022DC]

# CK[i] byte j = (4i + j) * 7 mod 256
CK = [
    int.from_bytes(bytes(((4 * i + j) * 7) & 0xFF for j in range(4)), "big")
    for i in range(32)
]


def _rotl(x: int, n: int) -> int:
    return ((x << n) | (x >> (32 - n))) & 0xFFFFFFFF


def _xor_bytes(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


class SM4:
    def __init__(self, key: bytes):
        if len(key) != BLOCK_SIZE:
            raise WrongKeyOrIvLengthError("Key", len(key))
        self.rounds = 32
        self.rk = self._key_expansion(key)

    def _tau(self, word: int) -> int:
        # Non-linear step: the S-box on each byte of the word
        return (
            (SBOX[(word >> 24) & 0xFF] << 24)
            | (SBOX[(word >> 16) & 0xFF] << 16)
            | (SBOX[(word >> 8) & 0xFF] << 8)
            | SBOX[word & 0xFF]
        )

    def _t(self, word: int) -> int:
        b = self._tau(word)
        return b ^ _rotl(b, 2) ^ _rotl(b, 10) ^ _rotl(b, 18) ^ _rotl(b, 24)

    def _t_prime(self, word: int) -> int:
        b = self._tau(word)
        return b ^ _rotl(b, 13) ^ _rotl(b, 23)

    def _key_expansion(self, key: bytes) -> list:
        k = [int.from_bytes(key[4 * i:4 * i + 4], "big") ^ FK[i] for i in range(4)]
        rk = []
        for i in range(self.rounds):
            k.append(k[i] ^ self._t_prime(k[i + 1] ^ k[i + 2] ^ k[i + 3] ^ CK[i]))
            rk.append(k[i + 4])
        return rk

    def _crypt_block(self, block: bytes, round_keys) -> bytes:
        x = [int.from_bytes(block[4 * i:4 * i + 4], "big") for i in range(4)]
        for i, rk in enumerate(round_keys):
            x.append(x[i] ^ self._t(x[i + 1] ^ x[i + 2] ^ x[i + 3] ^ rk))
        # Reverse transform R: output (X35, X34, X33, X32)
        return b"".join(word.to_bytes(4, "big") for word in reversed(x[-4:]))

    def _encrypt_block_core(self, block: bytes) -> bytes:
        return self._crypt_block(block, self.rk)

    def _decrypt_block_core(self, block: bytes) -> bytes:
        return self._crypt_block(block, reversed(self.rk))

    # --- Block modes (no implicit padding) ---

    def _check_aligned(self, data: bytes):
        if len(data) % BLOCK_SIZE != 0:
            raise DataNotBlockAlignedError(len(data), BLOCK_SIZE)

    def encrypt_ecb(self, data: bytes) -> bytes:
        self._check_aligned(data)
        out = bytearray()
        for i in range(0, len(data), BLOCK_SIZE):
            out += self._encrypt_block_core(data[i:i + BLOCK_SIZE])
        return bytes(out)

    def decrypt_ecb(self, data: bytes) -> bytes:
        self._check_aligned(data)
        out = bytearray()
        for i in range(0, len(data), BLOCK_SIZE):
            out += self._decrypt_block_core(data[i:i + BLOCK_SIZE])
        return bytes(out)

    def encrypt_cbc(self, data: bytes, iv: bytes) -> bytes:
        self._check_aligned(data)
        out = bytearray()
        prev_block = iv
        for i in range(0, len(data), BLOCK_SIZE):
            prev_block = self._encrypt_block_core(_xor_bytes(data[i:i + BLOCK_SIZE], prev_block))
            out += prev_block
        return bytes(out)

    def decrypt_cbc(self, data: bytes, iv: bytes) -> bytes:
        self._check_aligned(data)
        out = bytearray()
        prev_block = iv
        for i in range(0, len(data), BLOCK_SIZE):
            chunk = data[i:i + BLOCK_SIZE]
            out += _xor_bytes(self._decrypt_block_core(chunk), prev_block)
            prev_block = chunk
        return bytes(out)

    # --- Stream-like modes (length preserving) ---

    def _cfb(self, data: bytes, iv: bytes, decrypt: bool) -> bytes:
        out = bytearray()
        register = iv
        for i in range(0, len(data), BLOCK_SIZE):
            chunk = data[i:i + BLOCK_SIZE]
            result = _xor_bytes(chunk, self._encrypt_block_core(register))
            out += result
            # Full 128-bit feedback of the ciphertext block
            register = chunk if decrypt else result
        return bytes(out)

    def encrypt_cfb(self, data: bytes, iv: bytes) -> bytes:
        return self._cfb(data, iv, decrypt=False)

    def decrypt_cfb(self, data: bytes, iv: bytes) -> bytes:
        return self._cfb(data, iv, decrypt=True)

    def ofb(self, data: bytes, iv: bytes) -> bytes:
        out = bytearray()
        register = iv
        for i in range(0, len(data), BLOCK_SIZE):
            register = self._encrypt_block_core(register)
            out += _xor_bytes(data[i:i + BLOCK_SIZE], register)
        return bytes(out)

    def ctr(self, data: bytes, iv: bytes) -> bytes:
        out = bytearray()
        counter = int.from_bytes(iv, "big")
        for i in range(0, len(data), BLOCK_SIZE):
            keystream = self._encrypt_block_core(counter.to_bytes(BLOCK_SIZE, "big"))
            out += _xor_bytes(data[i:i + BLOCK_SIZE], keystream)
            counter = (counter + 1) & ((1 << 128) - 1)
        return bytes(out)

    def encrypt_mode(self, mode: Sm4Mode, data: bytes, iv: Optional[bytes] = None) -> bytes:
        if mode is Sm4Mode.ECB:
            return self.encrypt_ecb(data)
        if iv is None:
            raise MissingIvError(mode.value)
        if mode is Sm4Mode.CBC:
            return self.encrypt_cbc(data, iv)
        elif mode is Sm4Mode.CFB:
            return self.encrypt_cfb(data, iv)
        elif mode is Sm4Mode.OFB:
            return self.ofb(data, iv)
        elif mode is Sm4Mode.CTR:
            return self.ctr(data, iv)
        raise ValueError(f"Unhandled SM4 mode: {mode}")

    def decrypt_mode(self, mode: Sm4Mode, data: bytes, iv: Optional[bytes] = None) -> bytes:
        if mode is Sm4Mode.ECB:
            return self.decrypt_ecb(data)
        if iv is None:
            raise MissingIvError(mode.value)
        if mode is Sm4Mode.CBC:
            return self.decrypt_cbc(data, iv)
        elif mode is Sm4Mode.CFB:
            return self.decrypt_cfb(data, iv)
        elif mode is Sm4Mode.OFB:
            return self.ofb(data, iv)
        elif mode is Sm4Mode.CTR:
            return self.ctr(data, iv)
        raise ValueError(f"Unhandled SM4 mode: {mode}")


# --- Padding ---

def _pkcs7_pad(data: bytes) -> bytes:
    pad_len = BLOCK_SIZE - (len(data) % BLOCK_SIZE)
    return data + bytes([pad_len] * pad_len)


def _pkcs7_unpad(data: bytes) -> bytes:
    if not data or len(data) % BLOCK_SIZE != 0:
        raise InvalidPkcs7PaddingError()
    pad_len = data[-1]
    if pad_len == 0 or pad_len > BLOCK_SIZE or pad_len > len(data):
        raise InvalidPkcs7PaddingError()
    if any(b != pad_len for b in data[-pad_len:]):
        raise InvalidPkcs7PaddingError()
    return data[:-pad_len]


def apply_padding(data: bytes, padding: Sm4Padding) -> bytes:
    if padding is Sm4Padding.PKCS7:
        return _pkcs7_pad(data)
    elif padding is Sm4Padding.ZERO:
        rem = len(data) % BLOCK_SIZE
        if rem:
            return data + b"\x00" * (BLOCK_SIZE - rem)
        return data
    elif padding is Sm4Padding.NONE:
        if len(data) % BLOCK_SIZE != 0:
            raise DataNotBlockAlignedError(len(data), BLOCK_SIZE)
        return data
    raise ValueError(f"Unhandled padding: {padding}")


def remove_padding(data: bytes, padding: Sm4Padding) -> bytes:
    if padding is Sm4Padding.PKCS7:
        return _pkcs7_unpad(data)
    elif padding is Sm4Padding.ZERO:
        # Lossy when the plaintext itself ends in zero bytes
        return data.rstrip(b"\x00")
    elif padding is Sm4Padding.NONE:
        return data
    raise ValueError(f"Unhandled padding: {padding}")


# --- Key / IV resolution ---

def parse_fixed_16(value: str, key_type: KeyType, field: str) -> bytes:
    if key_type is KeyType.HEX:
        raw = decode_hex(value, f"{field} hex")
    elif key_type is KeyType.TEXT:
        raw = value.encode("utf-8")
    else:
        raise ValueError(f"Unhandled key type: {key_type}")
    if len(raw) != BLOCK_SIZE:
        raise WrongKeyOrIvLengthError(field, len(raw), BLOCK_SIZE)
    return raw


def require_iv(mode: Sm4Mode) -> bool:
    return mode is not Sm4Mode.ECB


def _resolve_key_iv(request: CipherRequest):
    key = parse_fixed_16(request.key, request.key_type, "Key")
    iv = None
    if require_iv(request.mode):
        if request.iv is None:
            raise MissingIvError(request.mode.value)
        if request.iv_type is None:
            raise MissingIvTypeError()
        iv = parse_fixed_16(request.iv, request.iv_type, "IV")
    return key, iv


# --- Byte and request level operations ---

def sm4_encrypt_bytes(plaintext: bytes, key: bytes, iv: Optional[bytes],
                      mode: Sm4Mode, padding: Sm4Padding) -> bytes:
    padded = apply_padding(plaintext, padding)
    return SM4(key).encrypt_mode(mode, padded, iv)


def sm4_decrypt_bytes(ciphertext: bytes, key: bytes, iv: Optional[bytes],
                      mode: Sm4Mode, padding: Sm4Padding) -> bytes:
    plaintext_padded = SM4(key).decrypt_mode(mode, ciphertext, iv)
    return remove_padding(plaintext_padded, padding)


def sm4_encrypt(request: CipherRequest) -> str:
    key, iv = _resolve_key_iv(request)
    logger.debug("sm4 encrypt %s/%s -> %s", request.mode.value, request.padding.value, request.format.value)
    ciphertext = sm4_encrypt_bytes(request.input.encode("utf-8"), key, iv, request.mode, request.padding)
    return encode_output(ciphertext, request.format)


def sm4_decrypt(request: CipherRequest) -> str:
    key, iv = _resolve_key_iv(request)
    logger.debug("sm4 decrypt %s/%s <- %s", request.mode.value, request.padding.value, request.format.value)
    ciphertext = decode_input(request.input, request.format)
    plaintext = sm4_decrypt_bytes(ciphertext, key, iv, request.mode, request.padding)
    return bytes_to_text(plaintext, "Decrypted data")
