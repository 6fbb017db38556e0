"""Text encodings: binary, hex, duodecimal, Base64, Morse, reverse.

WHY: The converter's text mode shows a string in several classic
encodings. Each is a per-character mapping except Base64 and reverse,
which work on the whole string.

HOW: One small BaseTextAlgorithm subclass per encoding. Code-point based
encodings format ``ord(char)`` in the target base and join the pieces with
single spaces.

RULES:
- binary, hex and duodecimal work on Unicode code points, not UTF-16 code
  units: U+1F600 is one value ("1f600"), never a surrogate pair
- binary: base 2, zero-padded to 8 digits per character
- hex: lowercase base 16, zero-padded to 2 digits per character
- duodecimal: base 12 with digits 0-9 a b, no padding
- base64: encodes the Latin-1 bytes of the text; characters above U+00FF
  raise ValueError
- morse: upper-cased; letters, digits and space ("/") are mapped, any
  other character passes through unchanged
- reverse: characters in reverse order
"""

from __future__ import annotations

import base64

from multi_converter.converters.base import BaseTextAlgorithm

MORSE_CODE: dict[str, str] = {
    "A": ".-", "B": "-...", "C": "-.-.", "D": "-..", "E": ".", "F": "..-.",
    "G": "--.", "H": "....", "I": "..", "J": ".---", "K": "-.-", "L": ".-..",
    "M": "--", "N": "-.", "O": "---", "P": ".--.", "Q": "--.-", "R": ".-.",
    "S": "...", "T": "-", "U": "..-", "V": "...-", "W": ".--", "X": "-..-",
    "Y": "-.--", "Z": "--..", "1": ".----", "2": "..---", "3": "...--",
    "4": "....-", "5": ".....", "6": "-....", "7": "--...", "8": "---..",
    "9": "----.", "0": "-----", " ": "/",
}

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base(value: int, base: int) -> str:
    """Format a non-negative integer in ``base`` (2–36) with lowercase digits."""
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, base)
        digits.append(_DIGITS[remainder])
    return "".join(reversed(digits))


class BinaryAlgorithm(BaseTextAlgorithm):
    @property
    def name(self) -> str:
        return "Binary"

    def convert(self, text: str) -> str:
        return " ".join(format(ord(char), "08b") for char in text)


class HexAlgorithm(BaseTextAlgorithm):
    @property
    def name(self) -> str:
        return "Hexadecimal"

    def convert(self, text: str) -> str:
        return " ".join(format(ord(char), "02x") for char in text)


class DuodecimalAlgorithm(BaseTextAlgorithm):
    """Character codes in base 12."""

    @property
    def name(self) -> str:
        return "Duodecimal"

    def convert(self, text: str) -> str:
        return " ".join(to_base(ord(char), 12) for char in text)


class Base64Algorithm(BaseTextAlgorithm):
    """Base64 of the text's Latin-1 bytes.

    Only characters up to U+00FF have a single-byte representation; anything
    wider is rejected instead of being silently re-encoded as UTF-8.
    """

    @property
    def name(self) -> str:
        return "Base64"

    def convert(self, text: str) -> str:
        try:
            raw = text.encode("latin-1")
        except UnicodeEncodeError as exc:
            raise ValueError(
                "Invalid input for Base64: {!r} is outside Latin-1".format(
                    exc.object[exc.start:exc.end]
                )
            ) from exc
        return base64.b64encode(raw).decode("ascii")


class MorseAlgorithm(BaseTextAlgorithm):
    @property
    def name(self) -> str:
        return "Morse Code"

    def convert(self, text: str) -> str:
        return " ".join(MORSE_CODE.get(char, char) for char in text.upper())


class ReverseAlgorithm(BaseTextAlgorithm):
    @property
    def name(self) -> str:
        return "Reverse"

    def convert(self, text: str) -> str:
        return text[::-1]
