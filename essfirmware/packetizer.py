"""Framing of encryption requests and responses on a byte stream.

A request is ``SOH <header> STX <text> ETX`` where the header is the
base64url encoding of a three byte little-endian length followed by the
nonce, and the length counts the base64url characters of the text.
A response is ``STX <base64url ciphertext> ETX``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO, Iterable, Iterator, Optional, Tuple, Union

from .base64url import DecodeError, base64_length, decode, encode, isbase64
from .crypto import NONCE_BYTES

SOH = 0x01
STX = 0x02
ETX = 0x03

TEXTLEN_LEN = 3
HEADER_LEN = TEXTLEN_LEN + NONCE_BYTES
HEADER_B64_LEN = base64_length(HEADER_LEN)
MAX_TEXT_LEN = (1 << (8 * TEXTLEN_LEN)) - 1

_PAD = ord("=")

ByteSource = Union[Iterable[int], Iterator[int]]


class ErrorCode(IntEnum):
    """Reasons a packet can be rejected."""

    SUCCESSFUL = 0
    ILLEGAL_CHARACTER = 1
    HEADER_INCORRECT_SIZE = 2
    HEADER_DECODING_FAILED = 3
    NONCE_ALLOCATION_FAILED = 4
    TEXT_ALLOCATION_FAILED = 5
    TEXT_INCORRECT_SIZE = 6
    TEXT_DECODING_FAILED = 7
    CIPHERTEXT_ALLOCATION_FAILED = 8
    CIPHERTEXT_TOO_LARGE = 9


class PacketError(Exception):
    """Raised when an incoming packet is malformed."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None) -> None:
        super().__init__(message or code.name.lower().replace("_", " "))
        self.code = code


@dataclass
class Plaintext:
    """A decoded encryption request."""

    text: bytes
    nonce: Optional[bytes] = None


def _next_byte(stream: Iterator[int]) -> int:
    try:
        return next(stream)
    except StopIteration:
        raise EOFError("byte source exhausted") from None


def _collect(stream: Iterator[int], count: int, terminator: int,
             size_error: ErrorCode) -> str:
    chars = []
    while len(chars) < count:
        value = _next_byte(stream)
        if value > 0xFF:
            continue
        if value == terminator:
            raise PacketError(size_error, "premature terminator")
        if isbase64(value) or value == _PAD:
            chars.append(chr(value))
        else:
            raise PacketError(ErrorCode.ILLEGAL_CHARACTER,
                              f"illegal character 0x{value:02x}")
    if _next_byte(stream) != terminator:
        raise PacketError(size_error, "missing terminator")
    return "".join(chars)


def read_header(source: ByteSource) -> Tuple[int, bytes]:
    """Read a header following SOH up to STX; return (text length, nonce)."""
    stream = iter(source)
    encoded = _collect(stream, HEADER_B64_LEN, STX, ErrorCode.HEADER_INCORRECT_SIZE)
    try:
        header = decode(encoded)
    except DecodeError as exc:
        raise PacketError(ErrorCode.HEADER_DECODING_FAILED, str(exc)) from exc
    if len(header) != HEADER_LEN:
        raise PacketError(ErrorCode.HEADER_INCORRECT_SIZE,
                          f"decoded header has {len(header)} bytes")
    text_len = int.from_bytes(header[:TEXTLEN_LEN], "little")
    return text_len, bytes(header[TEXTLEN_LEN:])


def read_text(source: ByteSource, text_len: int) -> bytes:
    """Read ``text_len`` base64url characters up to ETX and decode them."""
    stream = iter(source)
    encoded = _collect(stream, text_len, ETX, ErrorCode.TEXT_INCORRECT_SIZE)
    try:
        return decode(encoded)
    except DecodeError as exc:
        raise PacketError(ErrorCode.TEXT_DECODING_FAILED, str(exc)) from exc


def receive(source: ByteSource) -> Plaintext:
    """Skip to the next SOH, then read one complete request."""
    stream = iter(source)
    while _next_byte(stream) != SOH:
        pass
    text_len, nonce = read_header(stream)
    text = read_text(stream, text_len)
    return Plaintext(text=text, nonce=nonce)


def encode_packet(ciphertext: Union[bytes, bytearray]) -> bytes:
    """Frame ``ciphertext`` as a response packet."""
    return bytes([STX]) + encode(ciphertext).encode("ascii") + bytes([ETX])


def send(ciphertext: Union[bytes, bytearray], sink: BinaryIO) -> bytes:
    """Write the response packet for ``ciphertext`` to ``sink`` and return it."""
    packet = encode_packet(ciphertext)
    sink.write(packet)
    return packet


def build_request(text: Union[bytes, bytearray], nonce: Union[bytes, bytearray]) -> bytes:
    """Build the request packet a client sends for ``text`` and ``nonce``."""
    if len(nonce) != NONCE_BYTES:
        raise ValueError(f"nonce must be {NONCE_BYTES} bytes")
    encoded_text = encode(text)
    if len(encoded_text) > MAX_TEXT_LEN:
        raise ValueError("text too long for the length field")
    header = len(encoded_text).to_bytes(TEXTLEN_LEN, "little") + bytes(nonce)
    return (bytes([SOH]) + encode(header).encode("ascii") + bytes([STX])
            + encoded_text.encode("ascii") + bytes([ETX]))