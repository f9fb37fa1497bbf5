import base64
import struct
from cryptography.hazmat.primitives import hashes, hmac

from cryptutil.common.errors import LengthMismatch

WORD_SIZE = 4


def sha1(data: bytes) -> bytes:
    """Computes the SHA-1 digest of 'data' (20 bytes)."""
    digest = hashes.Hash(hashes.SHA1())
    digest.update(data)
    return digest.finalize()


def hmac_sha1(key: bytes, text: bytes) -> bytes:
    """Computes HMAC-SHA1 of 'text' under 'key' (20 bytes)."""
    h = hmac.HMAC(key, hashes.SHA1())
    h.update(text)
    return h.finalize()


def to_base64(data: bytes) -> str:
    """Encodes bytes into a standard, padded base64 string."""
    return base64.b64encode(data).decode('ascii')


def from_base64(s) -> bytes:
    """
    Decodes a standard, padded base64 string back into bytes.
    Raises binascii.Error on malformed input instead of skipping bad characters.
    """
    if isinstance(s, str):
        s = s.encode('ascii')
    return base64.b64decode(s, validate=True)


def long_to_binary(value: int) -> bytes:
    """
    Big-endian two's complement of 'value' in the fewest bytes that keep
    the sign bit right, so a non-negative value whose top bit would be set
    gets a single 0x00 prefix. Zero encodes as b'\\x00'.
    """
    # -2**(8k-1) still fits in k bytes
    length = (value + (value < 0)).bit_length() // 8 + 1
    return value.to_bytes(length, byteorder="big", signed=True)


def binary_to_long(data: bytes) -> int:
    """Inverse of long_to_binary. An empty string decodes to 0."""
    return int.from_bytes(data, byteorder="big", signed=True)


def long_to_base64(value: int) -> str:
    return to_base64(long_to_binary(value))


def base64_to_long(s) -> int:
    return binary_to_long(from_base64(s))


def pack_word(value: int) -> bytes:
    """Packs an unsigned 32-bit integer into 4 big-endian bytes."""
    return struct.pack(">L", value)


def unpack_word(data: bytes) -> int:
    """Unpacks exactly 4 big-endian bytes into an unsigned 32-bit integer."""
    if len(data) != WORD_SIZE:
        raise LengthMismatch(f"Expected {WORD_SIZE} bytes, got {len(data)}")
    return struct.unpack(">L", data)[0]


def strxor(x: bytes, y: bytes) -> bytes:
    """XORs two byte strings of equal length."""
    if len(x) != len(y):
        raise LengthMismatch(f"Cannot xor strings of length {len(x)} and {len(y)}")
    return bytes(a ^ b for a, b in zip(x, y))


def reversed_seq(seq):
    """Returns a reversed copy of a str, bytes, list or tuple, keeping its type."""
    if isinstance(seq, (str, bytes, list, tuple)):
        return seq[::-1]
    raise TypeError(f"Cannot reverse object of type {type(seq).__name__}")
