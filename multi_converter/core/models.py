"""Data types flowing through the audio conversion pipeline.

WHY: Each pipeline stage hands a well-typed value to the next one:
encoded bytes → decoded float planes → interleaved int16 PCM → WAV bytes.
Keeping these as small immutable dataclasses makes every stage a pure
function of its input and lets tests build any intermediate directly.

HOW: Four frozen dataclasses —
  EncodedAudioInput — opaque bytes plus a declared media type
  DecodedAudio      — sample rate and per-channel float samples
  PcmBuffer         — interleaved little-endian int16 samples (numpy)
  WavFile           — the final byte sequence tagged "audio/wav"

RULES:
- Nothing is mutated after construction; PcmBuffer arrays are read-only
- DecodedAudio validates its invariants on construction and raises
  CorruptDataError, since a violation means the decoder broke its contract
- Samples in DecodedAudio may lie outside [-1, 1]; clamping is the
  quantizer's job
- Objects are created per conversion and never shared or cached
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from multi_converter.core.errors import CorruptDataError, InvalidParametersError

WAV_MEDIA_TYPE = "audio/wav"
WAV_HEADER_SIZE = 44
BYTES_PER_SAMPLE = 2


@dataclass(frozen=True)
class EncodedAudioInput:
    """Raw encoded audio as received from the caller.

    Attributes:
        data: The encoded bytes (MP3, OGG, WAV, ...).
        media_type: Declared media type; a decode hint only, never validated.
        filename: Original filename, if known (used for output naming).
    """

    data: bytes
    media_type: str = "application/octet-stream"
    filename: Optional[str] = None


@dataclass(frozen=True)
class DecodedAudio:
    """Per-channel floating-point samples produced by a decoder.

    ``channel_data`` is an ordered sequence of channels; each channel is an
    ordered sequence of floats, all of the same length. Lists, tuples and
    numpy arrays are all accepted.
    """

    sample_rate: int
    channel_data: Sequence[Sequence[float]]

    def __post_init__(self) -> None:
        if isinstance(self.sample_rate, bool) or not isinstance(self.sample_rate, (int, np.integer)):
            raise CorruptDataError(
                "Decoder returned a non-integer sample rate: {!r}".format(self.sample_rate)
            )
        if self.sample_rate < 1:
            raise CorruptDataError(
                "Decoder returned sample rate {} (must be >= 1)".format(self.sample_rate)
            )
        if len(self.channel_data) < 1:
            raise CorruptDataError("Decoder returned no audio channels")
        lengths = {len(channel) for channel in self.channel_data}
        if len(lengths) != 1:
            raise CorruptDataError(
                "Decoder returned channels of unequal length: {}".format(sorted(lengths))
            )

    @property
    def channel_count(self) -> int:
        return len(self.channel_data)

    @property
    def frame_count(self) -> int:
        return len(self.channel_data[0])

    @property
    def duration_s(self) -> float:
        return self.frame_count / self.sample_rate


@dataclass(frozen=True)
class PcmBuffer:
    """Interleaved signed 16-bit samples, frame-major and channel-minor.

    The sample for frame ``i`` and channel ``c`` sits at index
    ``i * channel_count + c``.
    """

    samples: np.ndarray
    channel_count: int

    def __post_init__(self) -> None:
        if self.channel_count < 1:
            raise InvalidParametersError(
                "PCM buffer needs at least one channel, got {}".format(self.channel_count)
            )
        samples = np.ascontiguousarray(self.samples, dtype="<i2").reshape(-1)
        if samples.size % self.channel_count:
            raise InvalidParametersError(
                "{} samples do not divide into {} channels".format(
                    samples.size, self.channel_count
                )
            )
        samples.setflags(write=False)
        # frozen dataclass: bypass __setattr__ to store the normalized array
        object.__setattr__(self, "samples", samples)

    @property
    def frame_count(self) -> int:
        return self.samples.size // self.channel_count

    @property
    def byte_length(self) -> int:
        return self.samples.size * BYTES_PER_SAMPLE

    def to_bytes(self) -> bytes:
        """Serialize as raw little-endian int16 bytes."""
        return self.samples.tobytes()

    def __len__(self) -> int:
        return int(self.samples.size)


@dataclass(frozen=True)
class WavFile:
    """A complete RIFF/WAVE file: 44-byte header followed by PCM data."""

    content: bytes
    media_type: str = field(default=WAV_MEDIA_TYPE)

    suffix = ".wav"
    default_filename = "converted.wav"

    @property
    def header(self) -> bytes:
        return self.content[:WAV_HEADER_SIZE]

    @property
    def data(self) -> bytes:
        return self.content[WAV_HEADER_SIZE:]

    def __len__(self) -> int:
        return len(self.content)
