"""Abstract text algorithm base and shared output container.

WHY: The CLI and API treat every text algorithm the same way — look it up
by key, run it, show the result — so each algorithm shares one small
interface. Binary outputs (images, WAV) share a common container so the
shells can save or stream them without knowing where they came from.

HOW: BaseTextAlgorithm is an ABC with a ``name`` property and a
``convert()`` method. ConverterOutput bundles a file suffix, content, and
MIME type.

RULES:
- ``suffix`` starts with a dot, e.g. ``".png"``
- The caller is responsible for prepending the source filename stem
- Text algorithms are pure: no I/O, no state between calls

To add a text algorithm:
1. Subclass BaseTextAlgorithm in converters/text.py
2. Implement ``name`` and ``convert()``
3. Register it in TEXT_ALGORITHMS in converters/__init__.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ConverterOutput:
    """One converted file.

    Attributes:
        suffix: File suffix appended to the output stem, e.g. ``".webp"``.
        content: The converted bytes (or text).
        media_type: MIME type of the content, e.g. ``"image/webp"``.
    """

    suffix: str
    content: Union[str, bytes]
    media_type: str

    @property
    def default_filename(self) -> str:
        return "converted{}".format(self.suffix)


class BaseTextAlgorithm(ABC):
    """Abstract base for text-to-text encodings."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable algorithm name, e.g. 'Morse Code'."""

    @abstractmethod
    def convert(self, text: str) -> str:
        """Return ``text`` rendered in this encoding.

        Raises:
            ValueError: ``text`` cannot be represented in this encoding.
        """
