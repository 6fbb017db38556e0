"""Abstract audio decoder capability.

WHY: Container and codec parsing (MP3, AAC, Ogg, ...) is delegated to an
external library. The orchestrator only needs "bytes in, float planes out",
so it depends on this interface and never on a specific decoding API.
Tests inject fakes returning canned DecodedAudio or raising errors.

HOW: AudioDecoder is an ABC with one async method, ``decode()``. It is
async because real decoders do slow work and concurrent conversions must
not block each other.

RULES:
- decode() returns DecodedAudio or raises UnsupportedFormatError /
  CorruptDataError; nothing else is part of the contract
- The media type is a hint only; implementations must not reject input
  because the hint disagrees with the content
- Implementations hold no state between calls

To add a decoder:
1. Subclass AudioDecoder
2. Implement ``name`` and ``decode()``
3. Register it in DECODERS in decoders/__init__.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from multi_converter.core.models import DecodedAudio


class AudioDecoder(ABC):
    """Turns encoded audio bytes into per-channel float samples."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable decoder name, e.g. 'FFmpeg (PyAV)'."""

    @abstractmethod
    async def decode(self, data: bytes, mime_type_hint: str) -> DecodedAudio:
        """Decode ``data`` into float sample planes.

        Args:
            data: Encoded audio bytes.
            mime_type_hint: Declared media type of ``data``, e.g. "audio/mpeg".

        Returns:
            DecodedAudio with the source's own sample rate and channel count.

        Raises:
            UnsupportedFormatError: The container or codec is not recognized.
            CorruptDataError: The container parsed but its data is damaged.
        """
