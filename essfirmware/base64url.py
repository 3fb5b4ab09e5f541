"""Base64 encoding with the URL-safe alphabet and strict padding rules."""

from __future__ import annotations

from typing import Optional, Union

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
PAD = "="

_VALUES = {char: index for index, char in enumerate(ALPHABET)}

TextLike = Union[str, bytes, bytearray]


class DecodeError(ValueError):
    """Raised when input is not valid base64url data."""


def base64_length(inlen: int) -> int:
    """Return the length of the padded encoding of ``inlen`` bytes."""
    if inlen < 0:
        raise ValueError("length must not be negative")
    return ((inlen + 2) // 3) * 4


def _as_char(ch: Union[int, str, bytes]) -> Optional[str]:
    if isinstance(ch, int):
        return chr(ch) if 0 <= ch <= 0xFF else None
    if isinstance(ch, (bytes, bytearray)):
        if len(ch) != 1:
            raise ValueError("expected a single byte")
        return chr(ch[0])
    if len(ch) != 1:
        raise ValueError("expected a single character")
    return ch


def isbase64(ch: Union[int, str, bytes]) -> bool:
    """Tell whether ``ch`` belongs to the alphabet; padding does not."""
    char = _as_char(ch)
    return char is not None and char in _VALUES


def encode(data: Union[bytes, bytearray], limit: Optional[int] = None) -> str:
    """Encode ``data``; with ``limit``, return at most that many characters."""
    pieces = []
    for start in range(0, len(data), 3):
        chunk = data[start:start + 3]
        first = chunk[0]
        second = chunk[1] if len(chunk) > 1 else 0
        third = chunk[2] if len(chunk) > 2 else 0
        pieces.append(ALPHABET[first >> 2])
        pieces.append(ALPHABET[((first << 4) | (second >> 4)) & 0x3F])
        pieces.append(ALPHABET[((second << 2) | (third >> 6)) & 0x3F]
                      if len(chunk) > 1 else PAD)
        pieces.append(ALPHABET[third & 0x3F] if len(chunk) > 2 else PAD)
    encoded = "".join(pieces)
    if limit is not None:
        if limit < 0:
            raise ValueError("limit must not be negative")
        encoded = encoded[:limit]
    return encoded


def _as_text(text: TextLike) -> str:
    if isinstance(text, (bytes, bytearray)):
        return bytes(text).decode("latin-1")
    return text


def decode(text: TextLike, max_length: Optional[int] = None) -> bytes:
    """Decode padded base64url ``text``.

    The whole input is validated; with ``max_length`` only that many decoded
    bytes are returned.  Raises :class:`DecodeError` on malformed input.
    """
    source = _as_text(text)
    if len(source) % 4:
        raise DecodeError("input length is not a multiple of four")
    out = bytearray()
    last_quad = len(source) - 4
    for start in range(0, len(source), 4):
        a, b, c, d = source[start:start + 4]
        if a not in _VALUES or b not in _VALUES:
            raise DecodeError(f"invalid character at offset {start}")
        va, vb = _VALUES[a], _VALUES[b]
        out.append(((va << 2) | (vb >> 4)) & 0xFF)
        if c == PAD:
            if start != last_quad or d != PAD:
                raise DecodeError(f"misplaced padding at offset {start + 2}")
            continue
        if c not in _VALUES:
            raise DecodeError(f"invalid character at offset {start + 2}")
        vc = _VALUES[c]
        out.append(((vb << 4) & 0xF0) | (vc >> 2))
        if d == PAD:
            if start != last_quad:
                raise DecodeError(f"misplaced padding at offset {start + 3}")
            continue
        if d not in _VALUES:
            raise DecodeError(f"invalid character at offset {start + 3}")
        out.append(((vc << 6) & 0xC0) | _VALUES[d])
    if max_length is not None:
        if max_length < 0:
            raise ValueError("max_length must not be negative")
        del out[max_length:]
    return bytes(out)