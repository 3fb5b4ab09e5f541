"""A Salsa20-based random generator that draws its seed from a memory image."""

from __future__ import annotations

import hashlib
import os
import struct
from typing import List, Optional, Union

PSRAM_START = 0x10000000
PSRAM_SIZE = 0x10000

KEY_BYTES = 32
NONCE_BYTES = 8
BLOCK_BYTES = 64
HASH_BYTES = 32
HASH_BLOCK_SIZE = 128
_POOL_BYTES = 16 * BLOCK_BYTES
_WORD_BYTES = 4
_SIZE_T_BYTES = 4

_HSIGMA = b"ThisIsJustAThirtyTwoBytesSeed..."
_SIGMA = struct.unpack("<4I", b"expand 32-byte k")

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF

BytesLike = Union[bytes, bytearray]


def _rotl(value: int, count: int) -> int:
    return ((value << count) & _MASK32) | (value >> (32 - count))


def _quarter(x: List[int], a: int, b: int, c: int, d: int) -> None:
    x[b] ^= _rotl((x[a] + x[d]) & _MASK32, 7)
    x[c] ^= _rotl((x[b] + x[a]) & _MASK32, 9)
    x[d] ^= _rotl((x[c] + x[b]) & _MASK32, 13)
    x[a] ^= _rotl((x[d] + x[c]) & _MASK32, 18)


def _block(key_words: tuple, nonce_words: tuple, counter: int) -> bytes:
    state = [
        _SIGMA[0], *key_words[:4], _SIGMA[1],
        *nonce_words, counter & _MASK32, (counter >> 32) & _MASK32,
        _SIGMA[2], *key_words[4:], _SIGMA[3],
    ]
    x = list(state)
    for _ in range(10):
        _quarter(x, 0, 4, 8, 12)
        _quarter(x, 5, 9, 13, 1)
        _quarter(x, 10, 14, 2, 6)
        _quarter(x, 15, 3, 7, 11)
        _quarter(x, 0, 1, 2, 3)
        _quarter(x, 5, 6, 7, 4)
        _quarter(x, 10, 11, 8, 9)
        _quarter(x, 15, 12, 13, 14)
    return struct.pack("<16I", *((a + b) & _MASK32 for a, b in zip(x, state)))


def salsa20_stream(length: int, nonce: BytesLike, key: BytesLike) -> bytes:
    """Return ``length`` bytes of Salsa20 keystream for an 8-byte nonce."""
    if length < 0:
        raise ValueError("length must not be negative")
    if len(nonce) != NONCE_BYTES:
        raise ValueError(f"nonce must be {NONCE_BYTES} bytes")
    if len(key) != KEY_BYTES:
        raise ValueError(f"key must be {KEY_BYTES} bytes")
    key_words = struct.unpack("<8I", bytes(key))
    nonce_words = struct.unpack("<2I", bytes(nonce))
    blocks = (length + BLOCK_BYTES - 1) // BLOCK_BYTES
    stream = b"".join(_block(key_words, nonce_words, counter) for counter in range(blocks))
    return stream[:length]


def salsa20_xor(data: BytesLike, nonce: BytesLike, key: BytesLike) -> bytes:
    """Encrypt or decrypt ``data`` by XOR with the Salsa20 keystream."""
    stream = salsa20_stream(len(data), nonce, key)
    return bytes(a ^ b for a, b in zip(data, stream))


class Salsa20Random:
    """Random bytes from a Salsa20 stream keyed once and rekeyed after each use.

    Lacking a clock or an entropy device, the nonce is seeded from a hash of
    a memory image (``entropy``); without one, operating-system randomness of
    the same size stands in.  Seeding happens lazily, on first use.
    """

    def __init__(self, entropy: Optional[BytesLike] = None) -> None:
        self._entropy = None if entropy is None else bytes(entropy)
        self.key = bytes(KEY_BYTES)
        self.nonce = 0
        self.initialized = False
        self._pool = bytearray(_POOL_BYTES)
        self._pool_left = 0

    def _seed(self) -> None:
        image = self._entropy if self._entropy is not None else os.urandom(PSRAM_SIZE)
        digest = hashlib.blake2b(image, digest_size=HASH_BYTES).digest()
        nonce = int.from_bytes(digest[:NONCE_BYTES], "little")
        if nonce == 0:
            raise RuntimeError("entropy source produced a zero nonce")
        self.nonce = nonce

    def _rekey(self, mix: BytesLike) -> None:
        self.key = bytes(a ^ b for a, b in zip(self.key, mix))

    def _nonce_bytes(self) -> bytes:
        return self.nonce.to_bytes(NONCE_BYTES, "little")

    def stir(self) -> None:
        """Discard buffered output, seed on first use and derive a fresh key."""
        self._pool = bytearray(_POOL_BYTES)
        self._pool_left = 0
        if not self.initialized:
            self._seed()
            self.initialized = True
        material = bytes(KEY_BYTES + HASH_BLOCK_SIZE)
        self.key = hashlib.blake2b(
            material[KEY_BYTES:], digest_size=KEY_BYTES, key=_HSIGMA
        ).digest()
        self._rekey(material[:KEY_BYTES])

    def _stir_if_needed(self) -> None:
        if not self.initialized:
            self.stir()

    def random(self) -> int:
        """Return a random 32-bit unsigned integer."""
        if self._pool_left <= 0:
            self._stir_if_needed()
            self._pool = bytearray(salsa20_stream(_POOL_BYTES, self._nonce_bytes(), self.key))
            self._pool_left = _POOL_BYTES - KEY_BYTES
            self._rekey(self._pool[self._pool_left:])
            self.nonce = (self.nonce + 1) & _MASK64
        self._pool_left -= _WORD_BYTES
        start = self._pool_left
        value = int.from_bytes(self._pool[start:start + _WORD_BYTES], "little")
        self._pool[start:start + _WORD_BYTES] = bytes(_WORD_BYTES)
        return value

    def buf(self, size: int) -> bytes:
        """Return ``size`` random bytes."""
        if not 0 <= size <= _MASK32:
            raise ValueError("size out of range")
        self._stir_if_needed()
        out = salsa20_stream(size, self._nonce_bytes(), self.key)
        self._rekey(size.to_bytes(_SIZE_T_BYTES, "little") + bytes(KEY_BYTES - _SIZE_T_BYTES))
        self.nonce = (self.nonce + 1) & _MASK64
        self.key = salsa20_xor(self.key, self._nonce_bytes(), self.key)
        return out

    def implementation_name(self) -> str:
        """Return the generator's name."""
        return "salsa20XMC"