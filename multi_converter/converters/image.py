"""Raster image re-encoding between PNG, JPEG, WebP, and ICO.

WHY: Users need to hand an image to tools that only accept one container
(favicons, JPEG-only uploaders, WebP for the web). Pillow already decodes
and encodes all of these; this module decides the pixel handling each
target needs.

HOW: The input is decoded into an RGBA image, then prepared per target:
  ico  — scaled down to fit within ICON_MAX_SIZE, aspect ratio kept
  jpeg — transparency flattened onto a white background (RGB)
  png / webp — saved as RGBA
Lossy targets are written at IMAGE_QUALITY.

RULES:
- Input Pillow cannot identify → UnsupportedFormatError
- Truncated or damaged input → CorruptDataError
- Decompression-bomb sized input → ResourceExhaustionError
- Icons are never upscaled
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Any, Dict

from PIL import Image, UnidentifiedImageError

from multi_converter.config import ICON_MAX_SIZE, IMAGE_QUALITY
from multi_converter.converters.base import ConverterOutput
from multi_converter.core.errors import (
    CorruptDataError,
    ResourceExhaustionError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)

_WHITE = (255, 255, 255)


@dataclass(frozen=True)
class ImageTarget:
    """An output image container.

    Attributes:
        name: Human-readable name, e.g. 'WebP'.
        pil_format: Pillow format identifier passed to ``Image.save``.
        media_type: MIME type of the encoded output.
        suffix: File suffix including the dot.
        lossy: Whether ``quality`` applies.
    """

    name: str
    pil_format: str
    media_type: str
    suffix: str
    lossy: bool = False


def fit_within(width: int, height: int, max_size: int) -> tuple[int, int]:
    """Scale (width, height) down to fit a max_size square, keeping aspect ratio."""
    if width <= max_size and height <= max_size:
        return width, height
    ratio = min(max_size / width, max_size / height)
    return max(1, int(width * ratio)), max(1, int(height * ratio))


def _flatten_on_white(image: Image.Image) -> Image.Image:
    background = Image.new("RGB", image.size, _WHITE)
    background.paste(image, mask=image.getchannel("A"))
    return background


def _prepare(image: Image.Image, target: ImageTarget, icon_max_size: int) -> Image.Image:
    rgba = image.convert("RGBA")
    if target.pil_format == "JPEG":
        return _flatten_on_white(rgba)
    if target.pil_format == "ICO":
        size = fit_within(rgba.width, rgba.height, icon_max_size)
        if size != rgba.size:
            rgba = rgba.resize(size, Image.Resampling.LANCZOS)
    return rgba


def convert_image(
    data: bytes,
    target: ImageTarget,
    quality: int = IMAGE_QUALITY,
    icon_max_size: int = ICON_MAX_SIZE,
) -> ConverterOutput:
    """Re-encode image bytes into ``target``.

    Args:
        data: Encoded input image in any format Pillow can read.
        target: Output container, usually from IMAGE_FORMATS.
        quality: Encoder quality for lossy targets (1–100).
        icon_max_size: Largest icon edge in pixels.

    Returns:
        ConverterOutput with the encoded bytes and the target's media type.

    Raises:
        UnsupportedFormatError: Pillow cannot identify the input.
        CorruptDataError: The input is truncated or damaged.
        ResourceExhaustionError: The input exceeds Pillow's pixel limit.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            source_format = image.format
            prepared = _prepare(image, target, icon_max_size)
    except UnidentifiedImageError as exc:
        raise UnsupportedFormatError("Unrecognized image format") from exc
    except Image.DecompressionBombError as exc:
        raise ResourceExhaustionError(str(exc)) from exc
    except (OSError, SyntaxError, ValueError) as exc:
        raise CorruptDataError("Image data is damaged: {}".format(exc)) from exc

    options: Dict[str, Any] = {}
    if target.lossy:
        options["quality"] = quality
    if target.pil_format == "ICO":
        options["sizes"] = [prepared.size]

    buffer = io.BytesIO()
    prepared.save(buffer, format=target.pil_format, **options)

    logger.info(
        "Converted %s image %dx%d to %s",
        source_format,
        prepared.width,
        prepared.height,
        target.name,
    )
    return ConverterOutput(
        suffix=target.suffix,
        content=buffer.getvalue(),
        media_type=target.media_type,
    )
