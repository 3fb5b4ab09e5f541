"""The single-byte XOR cipher used by the simple encryption service."""

from __future__ import annotations

from typing import Union

NONCE_BYTES = 192 // 8
BUFFER_SIZE = 128
_KEY_SLOTS = 8

BytesLike = Union[bytes, bytearray]


def encrypt(plaintext: BytesLike, nonce: BytesLike, key: BytesLike) -> bytes:
    """XOR every byte of ``plaintext`` with ``key[nonce[0] % 8]``.

    The working buffer holds :data:`BUFFER_SIZE` bytes; longer plaintexts
    are rejected.
    """
    if len(plaintext) > BUFFER_SIZE:
        raise ValueError(
            f"plaintext of {len(plaintext)} bytes exceeds {BUFFER_SIZE}-byte buffer"
        )
    if not nonce:
        raise ValueError("nonce must not be empty")
    index = nonce[0] % _KEY_SLOTS
    if len(key) <= index:
        raise ValueError(f"key too short for index {index}")
    mask = key[index]
    return bytes(byte ^ mask for byte in plaintext)


def ciphertext_length(plaintext_len: int) -> int:
    """Return the ciphertext length for a plaintext of the given length.

    The cipher adds no overhead, so the lengths are equal; a negative
    length is rejected.
    """
    length = int(plaintext_len)
    if length < 0:
        raise ValueError(f"plaintext length must not be negative, got {length}")
    return length