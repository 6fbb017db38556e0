"""Production audio decoder backed by FFmpeg through PyAV.

WHY: The converter accepts whatever audio a user has (MP3, AAC/M4A, Ogg
Vorbis/Opus, FLAC, WebM, WAV, ...). FFmpeg already parses all of these;
PyAV exposes its demuxers and decoders as Python objects, so this module
only has to classify failures and hand back float planes.

HOW: The blocking FFmpeg work runs in a worker thread via
asyncio.to_thread(). The container is opened from an in-memory BytesIO,
first with a demuxer chosen from the MIME hint and, if that attempt fails
for any reason or yields no frames, by content probing. Every decoded
frame goes through an AudioResampler that converts the sample *format* to
planar float32 at the source's own rate and layout, then frames are
concatenated per channel with numpy.

RULES:
- Container cannot be opened or has no audio stream → UnsupportedFormatError
- A packet fails to decode → CorruptDataError
- Only the first audio stream is decoded
- No resampling: output sample rate is the source sample rate
- The MIME hint is never used to reject input: only a failure of the
  content-probing attempt reaches the caller
"""

from __future__ import annotations

import asyncio
import io
import logging
from typing import List, Optional

import av
import numpy as np
from av.error import FFmpegError

from multi_converter.core.errors import ConversionError, CorruptDataError, UnsupportedFormatError
from multi_converter.core.models import DecodedAudio
from multi_converter.decoders.base import AudioDecoder

logger = logging.getLogger(__name__)

# MIME type → FFmpeg demuxer name used as the first opening attempt
MIME_TO_DEMUXER = {
    "audio/aac": "aac",
    "audio/aiff": "aiff",
    "audio/x-aiff": "aiff",
    "audio/amr": "amr",
    "audio/flac": "flac",
    "audio/x-flac": "flac",
    "audio/mp3": "mp3",
    "audio/mpeg": "mp3",
    "audio/mp4": "mp4",
    "audio/x-m4a": "mp4",
    "audio/ogg": "ogg",
    "audio/opus": "ogg",
    "audio/wav": "wav",
    "audio/wave": "wav",
    "audio/x-wav": "wav",
    "audio/webm": "webm",
}

_FLOAT_PLANAR = "fltp"


def demuxer_for(mime_type_hint: str) -> Optional[str]:
    """Return the FFmpeg demuxer for a MIME hint, ignoring parameters and case."""
    base = mime_type_hint.split(";", 1)[0].strip().lower()
    return MIME_TO_DEMUXER.get(base)


class PyAVDecoder(AudioDecoder):
    """Decode any FFmpeg-supported audio container into float planes."""

    @property
    def name(self) -> str:
        return "FFmpeg (PyAV)"

    async def decode(self, data: bytes, mime_type_hint: str) -> DecodedAudio:
        return await asyncio.to_thread(self._decode_sync, data, mime_type_hint)

    def _open(self, data: bytes, demuxer: Optional[str]) -> av.container.InputContainer:
        try:
            return av.open(io.BytesIO(data), mode="r", format=demuxer)
        except FFmpegError as exc:
            raise UnsupportedFormatError(
                "Unrecognized audio container: {}".format(exc)
            ) from exc

    def _decode_sync(self, data: bytes, mime_type_hint: str) -> DecodedAudio:
        if not data:
            raise UnsupportedFormatError("Input is empty")

        demuxer = demuxer_for(mime_type_hint)
        if demuxer is not None:
            try:
                decoded = self._decode_container(data, demuxer)
            except ConversionError as exc:
                logger.debug(
                    "Demuxer %r from hint %r failed (%s), probing content instead",
                    demuxer,
                    mime_type_hint,
                    exc,
                )
            else:
                if decoded.frame_count:
                    return decoded
                logger.debug(
                    "Demuxer %r from hint %r decoded no frames, probing content instead",
                    demuxer,
                    mime_type_hint,
                )
        return self._decode_container(data, None)

    def _decode_container(self, data: bytes, demuxer: Optional[str]) -> DecodedAudio:
        """Decode the first audio stream; ``demuxer=None`` lets FFmpeg probe."""
        container = self._open(data, demuxer)
        try:
            if not container.streams.audio:
                raise UnsupportedFormatError("Input contains no audio stream")
            stream = container.streams.audio[0]
            codec_context = stream.codec_context
            sample_rate = codec_context.sample_rate
            channel_count = len(codec_context.layout.channels)

            planes: List[np.ndarray] = []
            resampler: Optional[av.AudioResampler] = None
            try:
                for frame in container.decode(stream):
                    if resampler is None:
                        resampler = av.AudioResampler(
                            format=_FLOAT_PLANAR,
                            layout=frame.layout,
                            rate=frame.sample_rate,
                        )
                        sample_rate = frame.sample_rate
                        channel_count = len(frame.layout.channels)
                    for converted in resampler.resample(frame):
                        planes.append(converted.to_ndarray())
                if resampler is not None:
                    # flush samples buffered inside the resampler
                    for converted in resampler.resample(None):
                        planes.append(converted.to_ndarray())
            except FFmpegError as exc:
                raise CorruptDataError("Audio data failed to decode: {}".format(exc)) from exc
        finally:
            container.close()

        if channel_count < 1:
            raise UnsupportedFormatError("Audio stream reports no channels")
        if not planes and not sample_rate:
            # demuxer accepted the bytes but found nothing it could decode
            raise UnsupportedFormatError("No decodable audio found in input")

        if planes:
            channel_data = np.concatenate(planes, axis=1)
        else:
            channel_data = np.zeros((channel_count, 0), dtype=np.float32)

        logger.debug(
            "Decoded %d frames x %d channels at %d Hz",
            channel_data.shape[1],
            channel_data.shape[0],
            sample_rate,
        )
        return DecodedAudio(sample_rate=int(sample_rate), channel_data=channel_data)
