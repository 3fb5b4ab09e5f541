"""Morse code signalling on a single LED, with a two-button front end."""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import List, Optional

DOT_MS = 100
DASH_MS = 3 * DOT_MS
INTER_ELEMENT_MS = DOT_MS
INTER_CHARACTER_MS = 3 * DOT_MS
INTER_WORD_MS = 7 * DOT_MS
REPEAT_PAUSE_MS = 5000

DEFAULT_MESSAGE = "I CAN MORSE"

_CODES = dict(zip(
    string.ascii_uppercase + string.digits,
    [
        ".-", "-...", "-.-.", "-..", ".", "..-.", "--.", "....", "..", ".---",
        "-.-", ".-..", "--", "-.", "---", ".--.", "--.-", ".-.", "...", "-",
        "..-", "...-", ".--", "-..-", "-.--", "--..",
        "-----", ".----", "..---", "...--", "....-", ".....", "-....", "--...",
        "---..", "----.",
    ],
))

_UINT32 = 0xFFFFFFFF
_UINT8 = 0xFF


@dataclass(frozen=True)
class Signal:
    """The LED held on or off for a number of milliseconds."""

    on: bool
    duration_ms: int


def _code_for(ch: str) -> Optional[str]:
    if ch in string.ascii_letters or ch in string.digits:
        return _CODES[ch.upper()]
    return None


def to_morse(message: str) -> List[List[str]]:
    """Return the codes of each word; characters without a code are dropped."""
    words = []
    for word in message.split():
        codes = [code for code in map(_code_for, word) if code is not None]
        if codes:
            words.append(codes)
    return words


def timeline(message: str) -> List[Signal]:
    """Return the LED on/off sequence that signals ``message``.

    Adjacent periods with the LED in the same state are merged.
    """
    signals: List[Signal] = []

    def emit(on: bool, duration: int) -> None:
        if signals and signals[-1].on == on:
            signals[-1] = Signal(on, signals[-1].duration_ms + duration)
        else:
            signals.append(Signal(on, duration))

    last = len(message) - 1
    for i, ch in enumerate(message):
        if ch == " ":
            emit(False, INTER_WORD_MS)
            continue
        code = _code_for(ch)
        if code is None:
            continue
        for j, element in enumerate(code):
            emit(True, DOT_MS if element == "." else DASH_MS)
            if j < len(code) - 1:
                emit(False, INTER_ELEMENT_MS)
        if i < last and message[i + 1] != " ":
            emit(False, INTER_CHARACTER_MS)
    return signals


def total_duration(message: str) -> int:
    """Return how many milliseconds signalling ``message`` takes."""
    return sum(signal.duration_ms for signal in timeline(message))


@dataclass
class ButtonMessenger:
    """Decide what to signal when either of the two buttons is pressed.

    Button 1 sends the fixed message and records when it was pressed;
    button 2 sends the time between the last two presses of button 1.
    """

    message: str = DEFAULT_MESSAGE
    timestamps: List[int] = field(default_factory=lambda: [0, 0])
    press_count: int = 0

    def button1_pressed(self, now_ms: int) -> str:
        """Record a press of button 1 and return the message to signal."""
        self.timestamps = [now_ms & _UINT32, self.timestamps[0]]
        self.press_count = (self.press_count + 1) & _UINT8
        return self.message

    def button2_pressed(self, now_ms: int) -> str:
        """Return the interval to signal for a press of button 2."""
        if self.press_count == 0:
            elapsed = 0
        elif self.press_count == 1:
            elapsed = self.timestamps[0]
        else:
            elapsed = (self.timestamps[0] - self.timestamps[1]) & _UINT32
        return str(elapsed)