"""Conversion orchestrator: decode → quantize → header → assemble.

WHY: The four stages must run in strict order (the header needs the final
PCM byte length) and every failure must surface as exactly one classified
error with no partial output. Tracking an explicit state per conversion
makes both properties observable and testable.

HOW: AudioConversion owns one conversion. ``run()`` walks the state machine

    idle → decoding → quantizing → header_building → assembling → done

and moves to ``failed`` (carrying the ConversionError) from any stage, or
to ``cancelled`` if the caller abandons the conversion while the decoder
is suspended. Only decoding awaits; the other stages are synchronous.

RULES:
- One AudioConversion per conversion; run() may be called only once
- A failed or cancelled conversion never exposes a WavFile
- Decoder errors that are not ConversionError are classified as
  CorruptDataError; MemoryError anywhere becomes ResourceExhaustionError
- No retries: decoding a malformed file twice will not succeed
- No shared state between instances, so independent conversions can run
  concurrently without locks
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Optional

from multi_converter.core.errors import (
    ConversionError,
    CorruptDataError,
    ResourceExhaustionError,
)
from multi_converter.core.models import DecodedAudio, EncodedAudioInput, PcmBuffer, WavFile
from multi_converter.core.pcm import interleave_and_quantize
from multi_converter.core.wav import assemble_wav, build_header
from multi_converter.decoders.base import AudioDecoder

logger = logging.getLogger(__name__)


class ConversionState(str, enum.Enum):
    """States of a single audio conversion.

    Inherits from str so values serialize cleanly to JSON and logs.
    ``done``, ``failed`` and ``cancelled`` are terminal.
    """

    IDLE = "idle"
    DECODING = "decoding"
    QUANTIZING = "quantizing"
    HEADER_BUILDING = "header_building"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {ConversionState.DONE, ConversionState.FAILED, ConversionState.CANCELLED}
)


class AudioConversion:
    """State machine for converting one encoded audio input to WAV.

    Attributes:
        state: Current ConversionState.
        result: The WavFile once ``state`` is DONE, else None.
        error: The terminal ConversionError once ``state`` is FAILED, else None.
    """

    def __init__(self, decoder: AudioDecoder) -> None:
        self._decoder = decoder
        self.state = ConversionState.IDLE
        self.result: Optional[WavFile] = None
        self.error: Optional[ConversionError] = None

    def _enter(self, state: ConversionState) -> None:
        logger.debug("Conversion %s -> %s", self.state.value, state.value)
        self.state = state

    def _fail(self, error: ConversionError) -> ConversionError:
        logger.warning(
            "Audio conversion failed while %s: %s", self.state.value, error
        )
        self.error = error
        self.result = None
        self.state = ConversionState.FAILED
        return error

    async def run(self, source: EncodedAudioInput) -> WavFile:
        """Run every stage and return the WAV file.

        Raises:
            ConversionError: The terminal, classified failure.
            asyncio.CancelledError: The caller cancelled during decoding.
            RuntimeError: This conversion has already been run.
        """
        if self.state is not ConversionState.IDLE:
            raise RuntimeError(
                "Conversion already run (state: {})".format(self.state.value)
            )

        self._enter(ConversionState.DECODING)
        try:
            decoded = await self._decoder.decode(source.data, source.media_type)
        except asyncio.CancelledError:
            self._enter(ConversionState.CANCELLED)
            raise
        except ConversionError as exc:
            raise self._fail(exc)
        except MemoryError:
            raise self._fail(ResourceExhaustionError("Out of memory while decoding"))
        except Exception as exc:
            logger.exception("Decoder %s raised an unclassified error", self._decoder.name)
            raise self._fail(CorruptDataError("Decoder failed: {}".format(exc))) from exc

        if not isinstance(decoded, DecodedAudio):
            raise self._fail(
                CorruptDataError(
                    "Decoder returned {} instead of DecodedAudio".format(
                        type(decoded).__name__
                    )
                )
            )

        try:
            self._enter(ConversionState.QUANTIZING)
            pcm: PcmBuffer = interleave_and_quantize(decoded)

            self._enter(ConversionState.HEADER_BUILDING)
            header = build_header(decoded.sample_rate, decoded.channel_count, pcm.byte_length)

            self._enter(ConversionState.ASSEMBLING)
            wav = assemble_wav(header, pcm)
        except ConversionError as exc:
            raise self._fail(exc)
        except MemoryError:
            raise self._fail(
                ResourceExhaustionError(
                    "Out of memory while {}".format(self.state.value.replace("_", " "))
                )
            )

        self.result = wav
        self._enter(ConversionState.DONE)
        logger.info(
            "Converted %s (%s) to WAV: %d Hz, %d channel(s), %d frames, %d bytes",
            source.filename or "<bytes>",
            source.media_type,
            decoded.sample_rate,
            decoded.channel_count,
            decoded.frame_count,
            len(wav),
        )
        return wav


async def convert_audio_to_wav(
    data: bytes,
    media_type: str = "application/octet-stream",
    decoder: Optional[AudioDecoder] = None,
    filename: Optional[str] = None,
) -> WavFile:
    """Convert encoded audio bytes to a 16-bit PCM WAV file.

    Args:
        data: Encoded audio (any container the decoder understands).
        media_type: Declared media type, used only as a decode hint.
        decoder: Decoder to use; defaults to the PyAV decoder.
        filename: Source filename, for log messages only.

    Returns:
        The WavFile, media type "audio/wav".

    Raises:
        ConversionError: One of the four classified failure kinds.
    """
    if decoder is None:
        from multi_converter.decoders import default_decoder

        decoder = default_decoder()

    conversion = AudioConversion(decoder)
    return await conversion.run(
        EncodedAudioInput(data=data, media_type=media_type, filename=filename)
    )
