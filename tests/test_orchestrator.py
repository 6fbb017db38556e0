"""Tests for the audio conversion orchestrator state machine.

WHY: The orchestrator decides which stages run, in what order, and what
the caller sees when one fails. A missed transition would leak partial
results or misreport the failure kind.

HOW: Fake decoders from conftest.py return canned DecodedAudio or raise
chosen errors; async runs are driven with asyncio.run().

RULES:
- No FFmpeg involvement here (see test_pyav_decoder.py)
- Every failure test checks state, error kind, and absence of a result
"""

from __future__ import annotations

import asyncio
import math
import struct

import pytest

from multi_converter.core.errors import (
    ConversionErrorKind,
    CorruptDataError,
    InvalidParametersError,
    ResourceExhaustionError,
    UnsupportedFormatError,
)
from multi_converter.core.models import DecodedAudio, EncodedAudioInput
from multi_converter.core.orchestrator import (
    AudioConversion,
    ConversionState,
    convert_audio_to_wav,
)

from tests.conftest import BlockingDecoder, FakeDecoder


def _run(conversion: AudioConversion, data: bytes = b"encoded", media_type: str = "audio/mpeg"):
    return asyncio.run(conversion.run(EncodedAudioInput(data=data, media_type=media_type)))


class TestSuccessfulConversion:
    def test_stereo_scenario(self, stereo_scenario):
        conversion = AudioConversion(FakeDecoder(result=stereo_scenario))
        wav = _run(conversion)

        assert len(wav) == 52
        assert wav.media_type == "audio/wav"
        chunk_size, = struct.unpack_from("<I", wav.content, 4)
        byte_rate, = struct.unpack_from("<I", wav.content, 28)
        block_align, = struct.unpack_from("<H", wav.content, 32)
        data_size, = struct.unpack_from("<I", wav.content, 40)
        assert (chunk_size, byte_rate, block_align, data_size) == (44, 176400, 4, 8)
        assert struct.unpack("<4h", wav.data) == (0, -32768, 32767, 0)

    def test_terminal_state_is_done(self, stereo_scenario):
        conversion = AudioConversion(FakeDecoder(result=stereo_scenario))
        wav = _run(conversion)
        assert conversion.state is ConversionState.DONE
        assert conversion.state.is_terminal
        assert conversion.result is wav
        assert conversion.error is None

    def test_passes_bytes_and_hint_to_decoder(self, stereo_scenario):
        decoder = FakeDecoder(result=stereo_scenario)
        _run(AudioConversion(decoder), data=b"\x01\x02", media_type="audio/ogg")
        assert decoder.calls == [(b"\x01\x02", "audio/ogg")]

    def test_zero_frames_gives_header_only_file(self):
        decoder = FakeDecoder(result=DecodedAudio(sample_rate=44100, channel_data=[[], []]))
        wav = _run(AudioConversion(decoder))
        assert len(wav) == 44
        assert struct.unpack_from("<I", wav.content, 40)[0] == 0

    def test_stage_order(self, stereo_scenario, monkeypatch):
        conversion = AudioConversion(FakeDecoder(result=stereo_scenario))
        seen = []
        original = conversion._enter

        def recording_enter(state):
            seen.append(state)
            original(state)

        monkeypatch.setattr(conversion, "_enter", recording_enter)
        _run(conversion)
        assert seen == [
            ConversionState.DECODING,
            ConversionState.QUANTIZING,
            ConversionState.HEADER_BUILDING,
            ConversionState.ASSEMBLING,
            ConversionState.DONE,
        ]

    def test_convenience_function(self, stereo_scenario):
        wav = asyncio.run(
            convert_audio_to_wav(b"x", "audio/mpeg", decoder=FakeDecoder(result=stereo_scenario))
        )
        assert len(wav) == 52

    def test_cannot_run_twice(self, stereo_scenario):
        conversion = AudioConversion(FakeDecoder(result=stereo_scenario))
        _run(conversion)
        with pytest.raises(RuntimeError, match="already run"):
            _run(conversion)


class TestFailedConversion:
    def test_unsupported_format_from_decoder(self):
        conversion = AudioConversion(FakeDecoder(error=UnsupportedFormatError("not audio")))
        with pytest.raises(UnsupportedFormatError):
            _run(conversion)
        assert conversion.state is ConversionState.FAILED
        assert conversion.error.kind is ConversionErrorKind.UNSUPPORTED_FORMAT
        assert conversion.result is None

    def test_corrupt_data_from_decoder(self):
        conversion = AudioConversion(FakeDecoder(error=CorruptDataError("bad packet")))
        with pytest.raises(CorruptDataError):
            _run(conversion)
        assert conversion.state is ConversionState.FAILED
        assert conversion.result is None

    def test_non_finite_sample_fails_in_quantizing(self):
        audio = DecodedAudio(sample_rate=8000, channel_data=[[0.0, math.nan]])
        conversion = AudioConversion(FakeDecoder(result=audio))
        with pytest.raises(CorruptDataError, match="Non-finite"):
            _run(conversion)
        assert conversion.state is ConversionState.FAILED
        assert conversion.error.kind is ConversionErrorKind.CORRUPT_DATA
        assert conversion.result is None

    def test_unclassified_decoder_error_becomes_corrupt_data(self):
        conversion = AudioConversion(FakeDecoder(error=RuntimeError("boom")))
        with pytest.raises(CorruptDataError, match="boom"):
            _run(conversion)
        assert conversion.state is ConversionState.FAILED

    def test_memory_error_becomes_resource_exhaustion(self):
        conversion = AudioConversion(FakeDecoder(error=MemoryError()))
        with pytest.raises(ResourceExhaustionError):
            _run(conversion)
        assert conversion.error.kind is ConversionErrorKind.RESOURCE_EXHAUSTION

    def test_wrong_decoder_return_type(self):
        conversion = AudioConversion(FakeDecoder(result=[[0.0]]))
        with pytest.raises(CorruptDataError, match="instead of DecodedAudio"):
            _run(conversion)

    def test_header_parameter_error(self):
        # Too many channels for the 16-bit BlockAlign field
        audio = DecodedAudio(sample_rate=8000, channel_data=[[]] * 40000)
        conversion = AudioConversion(FakeDecoder(result=audio))
        with pytest.raises(InvalidParametersError):
            _run(conversion)
        assert conversion.state is ConversionState.FAILED
        assert conversion.result is None

    def test_no_retry_after_failure(self):
        decoder = FakeDecoder(error=UnsupportedFormatError("not audio"))
        with pytest.raises(UnsupportedFormatError):
            _run(AudioConversion(decoder))
        assert len(decoder.calls) == 1


class TestConcurrencyAndCancellation:
    def test_cancel_during_decode_skips_later_stages(self, stereo_scenario):
        async def scenario():
            decoder = BlockingDecoder(result=stereo_scenario)
            conversion = AudioConversion(decoder)
            task = asyncio.ensure_future(
                conversion.run(EncodedAudioInput(data=b"x", media_type="audio/mpeg"))
            )
            await decoder.started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            return conversion

        conversion = asyncio.run(scenario())
        assert conversion.state is ConversionState.CANCELLED
        assert conversion.result is None
        assert conversion.error is None

    def test_independent_conversions_run_concurrently(self, stereo_scenario, mono_silence):
        second = AudioConversion(FakeDecoder(result=mono_silence))

        async def scenario():
            blocking = BlockingDecoder(result=stereo_scenario)
            first = AudioConversion(blocking)
            slow = asyncio.ensure_future(first.run(EncodedAudioInput(data=b"a")))
            await blocking.started.wait()
            # The second conversion completes while the first is still decoding
            fast_wav = await second.run(EncodedAudioInput(data=b"b"))
            assert first.state is ConversionState.DECODING
            blocking.release.set()
            slow_wav = await slow
            return first, slow_wav, fast_wav

        first, slow_wav, fast_wav = asyncio.run(scenario())
        assert len(slow_wav) == 52
        assert len(fast_wav) == 44 + 8
        assert first.state is second.state is ConversionState.DONE
