"""Sample interleaver and 16-bit quantizer.

WHY: Decoders hand back one float array per channel, but WAV stores
interleaved signed 16-bit integers. This module is the only place floats
become integers, so its rounding rules decide whether output is
bit-exact across runs and platforms.

HOW: Vectorised with numpy over a (channels, frames) matrix:
  1. reject any NaN or ±inf sample (CorruptDataError)
  2. clamp to [-1.0, 1.0]
  3. scale asymmetrically: ×32768 for values <= 0, ×32767 for values > 0
  4. truncate toward zero (np.trunc, never round-half-even or floor)
  5. transpose to frame-major order and cast to little-endian int16

RULES:
- 1.0 → 32767, -1.0 → -32768, 0.0 → 0, anything above 1.0 behaves as 1.0
- Output index of (frame i, channel c) is i * channel_count + c
- Zero frames produce an empty buffer, not an error
- MemoryError while allocating becomes ResourceExhaustionError
"""

from __future__ import annotations

import logging

import numpy as np

from multi_converter.core.errors import CorruptDataError, ResourceExhaustionError
from multi_converter.core.models import DecodedAudio, PcmBuffer

logger = logging.getLogger(__name__)

NEGATIVE_SCALE = 32768.0
POSITIVE_SCALE = 32767.0


def _locate_non_finite(samples: np.ndarray) -> tuple[int, int]:
    """Return (channel, frame) of the first non-finite sample in frame order."""
    bad = np.argwhere(~np.isfinite(samples.T))
    frame, channel = bad[0]
    return int(channel), int(frame)


def quantize_samples(samples: np.ndarray) -> np.ndarray:
    """Clamp, scale, and truncate float samples to int16 values.

    Works on any array shape; the caller is responsible for ordering.
    Inputs must already be known to be finite.
    """
    clamped = np.clip(samples, -1.0, 1.0)
    scaled = np.where(clamped > 0.0, clamped * POSITIVE_SCALE, clamped * NEGATIVE_SCALE)
    return np.trunc(scaled).astype("<i2")


def interleave_and_quantize(audio: DecodedAudio) -> PcmBuffer:
    """Convert per-channel float samples into one interleaved int16 buffer.

    Args:
        audio: Decoded audio with ``channel_count`` equal-length channels.

    Returns:
        A PcmBuffer of ``frame_count * channel_count`` samples.

    Raises:
        CorruptDataError: A sample is NaN or infinite.
        ResourceExhaustionError: The buffers could not be allocated.
    """
    try:
        planes = np.asarray(audio.channel_data, dtype=np.float64)
        planes = planes.reshape(audio.channel_count, audio.frame_count)

        if not np.isfinite(planes).all():
            channel, frame = _locate_non_finite(planes)
            raise CorruptDataError(
                "Non-finite sample {!r} at channel {}, frame {}".format(
                    float(planes[channel, frame]), channel, frame
                )
            )

        # (channels, frames) → (frames, channels) → flat frame-major vector
        interleaved = quantize_samples(planes).T.reshape(-1)
    except MemoryError:
        raise ResourceExhaustionError(
            "Out of memory quantizing {} frames x {} channels".format(
                audio.frame_count, audio.channel_count
            )
        )

    logger.debug(
        "Quantized %d frames x %d channels to int16",
        audio.frame_count,
        audio.channel_count,
    )
    return PcmBuffer(samples=interleaved, channel_count=audio.channel_count)
