"""Canonical 44-byte WAV header builder, reader, and container assembler.

WHY: Every WAV consumer expects the same RIFF/WAVE/fmt/data layout. Writing
the header by hand (instead of through the ``wave`` module) keeps the output
byte-exact and lets the builder reject parameters that would not fit the
32-bit and 16-bit fields, rather than silently wrapping them.

HOW: build_header() packs the fields with struct in one little-endian
format string. read_header() unpacks the same layout and checks the
constants, so tests and the CLI ``inspect`` command can verify output.
assemble_wav() concatenates a header and PCM payload into a WavFile.

RULES:
- Layout (offset: field): 0 "RIFF", 4 ChunkSize = 36 + data length,
  8 "WAVE", 12 "fmt ", 16 Subchunk1Size = 16, 20 AudioFormat = 1 (PCM),
  22 NumChannels, 24 SampleRate, 28 ByteRate, 32 BlockAlign,
  34 BitsPerSample = 16, 36 "data", 40 Subchunk2Size = data length
- ByteRate = sample_rate × channels × 2, BlockAlign = channels × 2
- Out-of-range parameters raise InvalidParametersError; nothing is truncated
- build_header() is pure: identical inputs give identical bytes
"""

from __future__ import annotations

import logging
import numbers
import struct
from typing import NamedTuple, Union

from multi_converter.core.errors import (
    CorruptDataError,
    InvalidParametersError,
    ResourceExhaustionError,
)
from multi_converter.core.models import (
    BYTES_PER_SAMPLE,
    WAV_HEADER_SIZE,
    PcmBuffer,
    WavFile,
)

logger = logging.getLogger(__name__)

_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")

_RIFF_OVERHEAD = 36  # header bytes counted by ChunkSize (everything after offset 8)
_FMT_CHUNK_SIZE = 16
_PCM_FORMAT_TAG = 1
_BITS_PER_SAMPLE = BYTES_PER_SAMPLE * 8

UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF
MAX_DATA_BYTE_LENGTH = UINT32_MAX - _RIFF_OVERHEAD


class WavHeader(NamedTuple):
    """Fields recovered from a canonical 44-byte PCM header."""

    sample_rate: int
    channel_count: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_byte_length: int


def _require_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParametersError(
            "{} must be an integer, got {!r}".format(name, value)
        )
    return int(value)


def build_header(sample_rate: int, channel_count: int, data_byte_length: int) -> bytes:
    """Build the 44-byte RIFF/WAVE header for 16-bit PCM.

    Args:
        sample_rate: Samples per second per channel (Hz), >= 1.
        channel_count: Number of interleaved channels, >= 1.
        data_byte_length: Size of the PCM payload in bytes.

    Returns:
        Exactly 44 bytes.

    Raises:
        InvalidParametersError: Any value is non-integer, non-positive
            (data length: negative), or too large for its header field.
    """
    sample_rate = _require_int("sample_rate", sample_rate)
    channel_count = _require_int("channel_count", channel_count)
    data_byte_length = _require_int("data_byte_length", data_byte_length)

    if sample_rate <= 0:
        raise InvalidParametersError("sample_rate must be positive, got {}".format(sample_rate))
    if channel_count <= 0:
        raise InvalidParametersError("channel_count must be positive, got {}".format(channel_count))
    if data_byte_length < 0:
        raise InvalidParametersError(
            "data_byte_length must not be negative, got {}".format(data_byte_length)
        )
    if data_byte_length > MAX_DATA_BYTE_LENGTH:
        raise InvalidParametersError(
            "data_byte_length {} exceeds the WAV limit of {} bytes".format(
                data_byte_length, MAX_DATA_BYTE_LENGTH
            )
        )

    block_align = channel_count * BYTES_PER_SAMPLE
    byte_rate = sample_rate * block_align
    if sample_rate > UINT32_MAX:
        raise InvalidParametersError("sample_rate {} does not fit in 32 bits".format(sample_rate))
    if block_align > UINT16_MAX:
        raise InvalidParametersError(
            "channel_count {} gives a block align that does not fit in 16 bits".format(
                channel_count
            )
        )
    if byte_rate > UINT32_MAX:
        raise InvalidParametersError(
            "byte rate {} ({} Hz x {} channels) does not fit in 32 bits".format(
                byte_rate, sample_rate, channel_count
            )
        )

    return _HEADER_STRUCT.pack(
        b"RIFF",
        _RIFF_OVERHEAD + data_byte_length,
        b"WAVE",
        b"fmt ",
        _FMT_CHUNK_SIZE,
        _PCM_FORMAT_TAG,
        channel_count,
        sample_rate,
        byte_rate,
        block_align,
        _BITS_PER_SAMPLE,
        b"data",
        data_byte_length,
    )


def read_header(data: bytes) -> WavHeader:
    """Parse a canonical 44-byte 16-bit PCM header.

    Only the layout written by build_header() is accepted; WAV files with
    extra chunks (LIST, fact, ...) or other sample formats are rejected.

    Raises:
        CorruptDataError: The bytes are too short or a constant field differs.
    """
    if len(data) < WAV_HEADER_SIZE:
        raise CorruptDataError(
            "WAV header needs {} bytes, got {}".format(WAV_HEADER_SIZE, len(data))
        )

    (
        riff,
        chunk_size,
        wave,
        fmt,
        fmt_size,
        format_tag,
        channel_count,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        data_id,
        data_byte_length,
    ) = _HEADER_STRUCT.unpack_from(data)

    if riff != b"RIFF" or wave != b"WAVE":
        raise CorruptDataError("Not a RIFF/WAVE file")
    if fmt != b"fmt " or fmt_size != _FMT_CHUNK_SIZE or data_id != b"data":
        raise CorruptDataError("Not a canonical 44-byte WAV header")
    if format_tag != _PCM_FORMAT_TAG or bits_per_sample != _BITS_PER_SAMPLE:
        raise CorruptDataError(
            "Unsupported sample format (tag {}, {} bits)".format(format_tag, bits_per_sample)
        )
    if chunk_size != _RIFF_OVERHEAD + data_byte_length:
        raise CorruptDataError(
            "RIFF chunk size {} disagrees with data length {}".format(
                chunk_size, data_byte_length
            )
        )

    return WavHeader(
        sample_rate=sample_rate,
        channel_count=channel_count,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        data_byte_length=data_byte_length,
    )


def assemble_wav(header: bytes, pcm: Union[PcmBuffer, bytes]) -> WavFile:
    """Concatenate a header and PCM payload into a WavFile.

    The payload may be a PcmBuffer or already-serialized bytes. Nothing is
    transformed; calling this twice with the same inputs gives equal files.
    """
    try:
        payload = pcm.to_bytes() if isinstance(pcm, PcmBuffer) else bytes(pcm)
        content = b"".join((header, payload))
    except MemoryError:
        raise ResourceExhaustionError(
            "Out of memory assembling a WAV file with a {}-byte header".format(len(header))
        )
    logger.debug("Assembled WAV file of %d bytes", len(content))
    return WavFile(content=content)


def build_wav(pcm: PcmBuffer, sample_rate: int) -> WavFile:
    """Build the header for ``pcm`` and assemble the complete file."""
    header = build_header(sample_rate, pcm.channel_count, pcm.byte_length)
    return assemble_wav(header, pcm)
