"""Shared test fixtures for the multi_converter test suite.

WHY: The orchestrator, CLI, and API tests all need decoders that return
canned DecodedAudio or raise a chosen error, plus small real audio and
image files to push through the production decoders.

HOW: FakeDecoder implements the AudioDecoder interface without touching
FFmpeg. make_wav_bytes() writes a 16-bit PCM WAV with the standard
library ``wave`` module, independent of the code under test.
make_image_bytes() draws a small image with Pillow.

RULES:
- Fakes record every call so tests can assert the decoder was used
- The stereo scenario is the two-frame 44.1 kHz case shared across the suite
"""

from __future__ import annotations

import asyncio
import io
import wave
from typing import List, Optional, Sequence, Tuple

import av
import numpy as np
import pytest
from PIL import Image

from multi_converter.core.models import DecodedAudio
from multi_converter.decoders.base import AudioDecoder


class FakeDecoder(AudioDecoder):
    """Decoder returning a canned result or raising a canned error."""

    def __init__(
        self,
        result: Optional[DecodedAudio] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.result = result
        self.error = error
        self.calls: List[Tuple[bytes, str]] = []

    @property
    def name(self) -> str:
        return "Fake"

    async def decode(self, data: bytes, mime_type_hint: str) -> DecodedAudio:
        self.calls.append((data, mime_type_hint))
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.result


class BlockingDecoder(AudioDecoder):
    """Decoder that suspends until ``release`` is set (for cancellation tests)."""

    def __init__(self, result: DecodedAudio) -> None:
        self.result = result
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    @property
    def name(self) -> str:
        return "Blocking"

    async def decode(self, data: bytes, mime_type_hint: str) -> DecodedAudio:
        self.started.set()
        await self.release.wait()
        return self.result


def make_wav_bytes(
    frames: Sequence[Sequence[int]],
    sample_rate: int = 8000,
) -> bytes:
    """Write int16 frames (one tuple per frame, one value per channel) as WAV."""
    channels = len(frames[0]) if frames else 1
    raw = b"".join(
        value.to_bytes(2, "little", signed=True) for frame in frames for value in frame
    )
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as handle:
        handle.setnchannels(channels)
        handle.setsampwidth(2)
        handle.setframerate(sample_rate)
        handle.writeframes(raw)
    return buffer.getvalue()


def make_encoded_audio(
    container_format: str,
    codec: str,
    sample_rate: int = 44100,
    seconds: float = 1.0,
) -> bytes:
    """Encode a stereo sine with PyAV, e.g. ('mp3', 'libmp3lame') or ('adts', 'aac').

    Skips the calling test when the local FFmpeg build lacks the encoder.
    """
    try:
        av.Codec(codec, "w")
    except ValueError:
        pytest.skip("FFmpeg encoder {!r} not available".format(codec))

    total = int(sample_rate * seconds)
    t = np.arange(total) / sample_rate
    wave_data = (0.4 * np.sin(2 * np.pi * 440.0 * t) * 32767).astype(np.int16)
    interleaved = np.repeat(wave_data, 2).reshape(1, -1)

    buffer = io.BytesIO()
    with av.open(buffer, mode="w", format=container_format) as container:
        stream = container.add_stream(codec, rate=sample_rate)
        stream.codec_context.layout = "stereo"
        frame = av.AudioFrame.from_ndarray(interleaved, format="s16", layout="stereo")
        frame.sample_rate = sample_rate
        frame.pts = 0
        for packet in stream.encode(frame):
            container.mux(packet)
        for packet in stream.encode(None):
            container.mux(packet)
    return buffer.getvalue()


def make_image_bytes(
    size: Tuple[int, int] = (32, 16),
    mode: str = "RGBA",
    color=(255, 0, 0, 128),
    fmt: str = "PNG",
) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def stereo_scenario() -> DecodedAudio:
    """44.1 kHz stereo, two frames: L = [0.0, 1.0], R = [-1.0, 0.0]."""
    return DecodedAudio(sample_rate=44100, channel_data=[[0.0, 1.0], [-1.0, 0.0]])


@pytest.fixture
def mono_silence() -> DecodedAudio:
    return DecodedAudio(sample_rate=16000, channel_data=[[0.0] * 4])


@pytest.fixture
def stereo_wav_bytes() -> bytes:
    """A real 8 kHz stereo 16-bit WAV file with five frames."""
    return make_wav_bytes(
        [(0, 0), (16384, -16384), (32767, -32768), (-1, 1), (1000, -1000)],
        sample_rate=8000,
    )
