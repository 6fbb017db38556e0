"""Tests for the FastAPI conversion API.

WHY: Validates every endpoint's happy path and the translation of
conversion failures into HTTP status codes. Front-ends branch on these
codes, so the mapping is part of the contract.

HOW: FastAPI TestClient drives the app in-process. The audio decoder is
swapped for a FakeDecoder through app.dependency_overrides so audio
tests never touch FFmpeg; image and text endpoints run for real.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Dependency overrides are cleared after each test
- Error bodies are checked for both ``detail`` and ``kind``
"""

from __future__ import annotations

import io
import struct

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from multi_converter import __version__, config
from multi_converter.core.errors import (
    CorruptDataError,
    InvalidParametersError,
    ResourceExhaustionError,
    UnsupportedFormatError,
)
from multi_converter.server.app import app, get_decoder

from tests.conftest import FakeDecoder, make_image_bytes


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_decoder():
    """Install a decoder for the /audio/wav endpoint; returns it for inspection."""

    def install(decoder):
        app.dependency_overrides[get_decoder] = lambda: decoder
        return decoder

    return install


def _upload(name: str, content: bytes, content_type: str):
    return {"file": (name, io.BytesIO(content), content_type)}


# ---------------------------------------------------------------------------
# POST /audio/wav
# ---------------------------------------------------------------------------


class TestConvertAudio:
    def test_returns_wav(self, client, use_decoder, stereo_scenario):
        decoder = use_decoder(FakeDecoder(result=stereo_scenario))
        response = client.post("/audio/wav", files=_upload("song.mp3", b"mp3 bytes", "audio/mpeg"))

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/wav"
        assert response.headers["content-disposition"] == 'attachment; filename="song.wav"'
        assert len(response.content) == 52
        assert response.content[:4] == b"RIFF"
        assert struct.unpack("<4h", response.content[44:]) == (0, -32768, 32767, 0)
        assert decoder.calls == [(b"mp3 bytes", "audio/mpeg")]

    def test_unsafe_filename_is_sanitized(self, client, use_decoder, mono_silence):
        use_decoder(FakeDecoder(result=mono_silence))
        response = client.post(
            "/audio/wav", files=_upload("track#1.ogg", b"x", "audio/ogg")
        )
        assert response.headers["content-disposition"] == 'attachment; filename="track1.wav"'

    def test_unusable_filename_falls_back_to_default(self, client, use_decoder, mono_silence):
        use_decoder(FakeDecoder(result=mono_silence))
        response = client.post("/audio/wav", files=_upload("###.mp3", b"x", "audio/mpeg"))
        assert response.headers["content-disposition"] == 'attachment; filename="converted.wav"'

    @pytest.mark.parametrize("error,status,kind", [
        (UnsupportedFormatError("not audio"), 415, "unsupported_format"),
        (CorruptDataError("bad packet"), 422, "corrupt_data"),
        (InvalidParametersError("bad rate"), 400, "invalid_parameters"),
        (ResourceExhaustionError("too big"), 507, "resource_exhaustion"),
    ])
    def test_error_status_mapping(self, client, use_decoder, error, status, kind):
        use_decoder(FakeDecoder(error=error))
        response = client.post("/audio/wav", files=_upload("a.mp3", b"x", "audio/mpeg"))
        assert response.status_code == status
        assert response.json() == {"detail": error.message, "kind": kind}

    def test_upload_too_large(self, client, use_decoder, stereo_scenario, monkeypatch):
        decoder = use_decoder(FakeDecoder(result=stereo_scenario))
        monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 4)
        response = client.post("/audio/wav", files=_upload("a.mp3", b"0123456789", "audio/mpeg"))
        assert response.status_code == 413
        assert decoder.calls == []

    def test_missing_file(self, client):
        response = client.post("/audio/wav")
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# POST /image/{format}
# ---------------------------------------------------------------------------


class TestConvertImage:
    def test_png_to_webp(self, client):
        response = client.post(
            "/image/webp", files=_upload("logo.png", make_image_bytes(), "image/png")
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/webp"
        assert response.headers["content-disposition"] == 'attachment; filename="logo.webp"'
        assert Image.open(io.BytesIO(response.content)).format == "WEBP"

    def test_jpg_alias(self, client):
        response = client.post(
            "/image/jpg", files=_upload("photo.png", make_image_bytes(), "image/png")
        )
        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="photo.jpeg"'

    def test_unusable_filename_falls_back_to_default(self, client):
        response = client.post(
            "/image/jpeg", files=_upload("!!!.png", make_image_bytes(), "image/png")
        )
        assert response.headers["content-disposition"] == 'attachment; filename="converted.jpeg"'

    def test_unknown_format(self, client):
        response = client.post(
            "/image/tiff", files=_upload("a.png", make_image_bytes(), "image/png")
        )
        assert response.status_code == 404
        assert "tiff" in response.json()["detail"]

    def test_not_an_image(self, client):
        response = client.post("/image/png", files=_upload("a.png", b"nope", "image/png"))
        assert response.status_code == 415
        assert response.json()["kind"] == "unsupported_format"


# ---------------------------------------------------------------------------
# POST /text
# ---------------------------------------------------------------------------


class TestConvertText:
    def test_morse(self, client):
        response = client.post("/text", json={"algorithm": "morse", "text": "sos"})
        assert response.status_code == 200
        assert response.json() == {"algorithm": "morse", "result": "... --- ..."}

    def test_base64_outside_latin1(self, client):
        response = client.post("/text", json={"algorithm": "base64", "text": "☃"})
        assert response.status_code == 400
        assert "Base64" in response.json()["detail"]

    def test_unknown_algorithm(self, client):
        response = client.post("/text", json={"algorithm": "rot13", "text": "abc"})
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# GET /formats, GET /health, OpenAPI
# ---------------------------------------------------------------------------


class TestListFormats:
    def test_lists_everything(self, client):
        body = client.get("/formats").json()
        assert [a["key"] for a in body["text_algorithms"]] == [
            "base64", "binary", "duodecimal", "hex", "morse", "reverse",
        ]
        assert [f["key"] for f in body["image_formats"]] == ["ico", "jpeg", "png", "webp"]
        assert body["audio_formats"] == ["audio/wav"]

    def test_image_format_structure(self, client):
        formats = {f["key"]: f for f in client.get("/formats").json()["image_formats"]}
        assert formats["ico"] == {
            "key": "ico", "name": "ICO", "media_type": "image/x-icon", "suffix": ".ico",
        }


class TestHealthCheck:
    def test_health_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


class TestOpenAPISchema:
    def test_all_endpoints_in_schema(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        for path in ("/audio/wav", "/image/{image_format}", "/text", "/formats", "/health"):
            assert path in paths
