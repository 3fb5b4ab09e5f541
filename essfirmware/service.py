"""The encryption service: read request packets, encrypt, answer with packets."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Callable, Iterable, Iterator, Optional, Sequence, Union

from nacl.exceptions import CryptoError
from nacl.secret import SecretBox

from . import crypto
from .packetizer import PacketError, encode_packet, receive

DEFAULT_XOR_KEY = bytes([0x42] * 8)
CHIP_ID_BYTES = 16
SECRETBOX_KEY_BYTES = 32


class Cipher(str, Enum):
    """The encryption the service applies."""

    XOR = "xor"
    SECRETBOX = "secretbox"


def derive_key(chip_id: Union[bytes, bytearray]) -> bytes:
    """Build a 32-byte key by repeating the chip id after a leading zero byte."""
    if len(chip_id) != CHIP_ID_BYTES:
        raise ValueError(f"chip id must be {CHIP_ID_BYTES} bytes")
    key = bytearray(SECRETBOX_KEY_BYTES)
    for i in range(1, SECRETBOX_KEY_BYTES):
        key[i] = chip_id[(i - 1) % CHIP_ID_BYTES]
    return bytes(key)


@dataclass
class EncryptionService:
    """Encrypts the text of each request with the configured cipher and key."""

    key: bytes = DEFAULT_XOR_KEY
    cipher: Cipher = Cipher.XOR
    nonce_source: Callable[[int], bytes] = os.urandom

    def __post_init__(self) -> None:
        self.cipher = Cipher(self.cipher)
        if self.cipher is Cipher.SECRETBOX and len(self.key) != SECRETBOX_KEY_BYTES:
            raise ValueError(f"secretbox key must be {SECRETBOX_KEY_BYTES} bytes")

    def _encrypt(self, text: bytes, nonce: bytes) -> bytes:
        if self.cipher is Cipher.XOR:
            ciphertext = crypto.encrypt(text, nonce, self.key)
            return ciphertext[:crypto.ciphertext_length(len(text))]
        return SecretBox(self.key).encrypt(text, nonce).ciphertext

    def handle(self, source: Iterable[int]) -> Optional[bytes]:
        """Process one request from ``source``.

        Returns the response packet, or ``None`` when the request was
        malformed or could not be encrypted.  Raises ``EOFError`` when the
        source runs dry.
        """
        try:
            request = receive(source)
        except PacketError:
            return None
        nonce = request.nonce
        if nonce is None:
            nonce = self.nonce_source(crypto.NONCE_BYTES)
        try:
            ciphertext = self._encrypt(request.text, nonce)
        except (ValueError, CryptoError):
            return None
        return encode_packet(ciphertext)

    def serve(self, source: Iterable[int], sink: BinaryIO) -> int:
        """Answer requests until ``source`` is exhausted; return how many were answered."""
        stream: Iterator[int] = iter(source)
        answered = 0
        while True:
            try:
                response = self.handle(stream)
            except EOFError:
                return answered
            if response is not None:
                sink.write(response)
                answered += 1


def _bytes_of(handle: BinaryIO) -> Iterator[int]:
    for chunk in iter(lambda: handle.read(4096), b""):
        yield from chunk


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the service over a byte stream."""
    parser = argparse.ArgumentParser(description="Encrypt framed requests.")
    parser.add_argument("--cipher", choices=[c.value for c in Cipher], default=Cipher.XOR.value)
    parser.add_argument("--chip-id", default="00" * CHIP_ID_BYTES,
                        help="chip id in hex, used to derive the secretbox key")
    parser.add_argument("--input", help="file to read requests from (default: stdin)")
    parser.add_argument("--output", help="file to write responses to (default: stdout)")
    args = parser.parse_args(argv)

    cipher = Cipher(args.cipher)
    if cipher is Cipher.SECRETBOX:
        try:
            chip_id = bytes.fromhex(args.chip_id)
            key = derive_key(chip_id)
        except ValueError as exc:
            parser.error(str(exc))
    else:
        key = DEFAULT_XOR_KEY
    service = EncryptionService(key=key, cipher=cipher)

    source = open(args.input, "rb") if args.input else sys.stdin.buffer
    sink = open(args.output, "wb") if args.output else sys.stdout.buffer
    try:
        service.serve(_bytes_of(source), sink)
        sink.flush()
    finally:
        if args.input:
            source.close()
        if args.output:
            sink.close()
    return 0