"""Configuration constants, supported formats, and .env loading.

WHY: Centralizes the values the CLI and HTTP shells need (upload limits,
image quality, icon size, log level, server bind address) so they are easy
to find and override. The conversion core reads none of these; it is a
pure function of its inputs.

HOW: python-dotenv loads the .env file on import. Constants are plain
module-level values, each overridable through a MULTI_CONVERTER_* variable.
configure_logging() wires the standard logging module once per process.

RULES:
- All defaults can be overridden via environment variables
- Invalid numeric overrides raise ValueError naming the variable
- SUPPORTED_AUDIO_EXTENSIONS is lowercase, with a leading dot
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _int_from_env(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to ``default``."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError("{} must be an integer, got {!r}".format(name, raw))
    if value <= 0:
        raise ValueError("{} must be positive, got {}".format(name, value))
    return value


# ---------------------------------------------------------------------------
# Supported audio file extensions and their media types
# ---------------------------------------------------------------------------

AUDIO_MEDIA_TYPES: dict[str, str] = {
    ".aac": "audio/aac",
    ".aiff": "audio/aiff",
    ".amr": "audio/amr",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
    ".mp3": "audio/mpeg",
    ".mp4": "audio/mp4",
    ".oga": "audio/ogg",
    ".ogg": "audio/ogg",
    ".opus": "audio/opus",
    ".wav": "audio/wav",
    ".webm": "audio/webm",
}
"""Extension → media type hint passed to the decoder (lowercase, with dot)."""

SUPPORTED_AUDIO_EXTENSIONS: set[str] = set(AUDIO_MEDIA_TYPES)

DEFAULT_AUDIO_MEDIA_TYPE = "application/octet-stream"
"""Hint used when the extension is unknown; the decoder probes the content."""


def guess_audio_media_type(filename: str) -> str:
    """Map a filename to the media type hint for the decoder.

    Unknown extensions return DEFAULT_AUDIO_MEDIA_TYPE rather than failing:
    the hint never decides whether a file can be decoded.
    """
    ext = os.path.splitext(filename)[1].lower()
    return AUDIO_MEDIA_TYPES.get(ext, DEFAULT_AUDIO_MEDIA_TYPE)


# ---------------------------------------------------------------------------
# Converter defaults
# ---------------------------------------------------------------------------

MAX_UPLOAD_BYTES = _int_from_env("MULTI_CONVERTER_MAX_UPLOAD_BYTES", 200 * 1024 * 1024)
IMAGE_QUALITY = _int_from_env("MULTI_CONVERTER_IMAGE_QUALITY", 90)
ICON_MAX_SIZE = _int_from_env("MULTI_CONVERTER_ICON_MAX_SIZE", 256)

# ---------------------------------------------------------------------------
# Logging and server
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("MULTI_CONVERTER_LOG_LEVEL", "INFO").upper()
API_HOST = os.getenv("MULTI_CONVERTER_HOST", "127.0.0.1")
API_PORT = _int_from_env("MULTI_CONVERTER_PORT", 8000)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the CLI and API processes.

    Library code only creates module loggers; handlers are installed here,
    by the process entry points.
    """
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=_LOG_FORMAT,
    )
