"""Text algorithm and image format registries.

WHY: The CLI and API layers need a single lookup to find a text algorithm
or image target by name. Central dicts make it trivial to add one: write
the class or target, add one line here.

HOW: TEXT_ALGORITHMS maps keys to algorithm *classes* (callers instantiate:
``TEXT_ALGORITHMS["morse"]().convert("sos")``). IMAGE_FORMATS maps keys to
ImageTarget instances. MIME aliases such as "image/x-icon" resolve through
resolve_image_format().

RULES:
- Keys are lowercase identifiers (used in CLI arguments and URLs)
- Every entry must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from multi_converter.converters.image import ImageTarget
from multi_converter.converters.text import (
    Base64Algorithm,
    BinaryAlgorithm,
    DuodecimalAlgorithm,
    HexAlgorithm,
    MorseAlgorithm,
    ReverseAlgorithm,
)

if TYPE_CHECKING:
    from multi_converter.converters.base import BaseTextAlgorithm

TEXT_ALGORITHMS: dict[str, type[BaseTextAlgorithm]] = {
    "binary": BinaryAlgorithm,
    "hex": HexAlgorithm,
    "duodecimal": DuodecimalAlgorithm,
    "base64": Base64Algorithm,
    "morse": MorseAlgorithm,
    "reverse": ReverseAlgorithm,
}

IMAGE_FORMATS: dict[str, ImageTarget] = {
    "png": ImageTarget(name="PNG", pil_format="PNG", media_type="image/png", suffix=".png"),
    "jpeg": ImageTarget(
        name="JPEG", pil_format="JPEG", media_type="image/jpeg", suffix=".jpeg", lossy=True
    ),
    "webp": ImageTarget(
        name="WebP", pil_format="WEBP", media_type="image/webp", suffix=".webp", lossy=True
    ),
    "ico": ImageTarget(name="ICO", pil_format="ICO", media_type="image/x-icon", suffix=".ico"),
}

_IMAGE_ALIASES = {
    "jpg": "jpeg",
    "image/jpg": "jpeg",
    "image/x-icon": "ico",
    "image/vnd.microsoft.icon": "ico",
}


def resolve_image_format(name: str) -> ImageTarget:
    """Look up an image target by key, alias, or MIME type.

    Raises:
        KeyError: ``name`` does not match any registered target.
    """
    key = name.strip().lower()
    key = _IMAGE_ALIASES.get(key, key)
    if key.startswith("image/"):
        key = key[len("image/"):]
    return IMAGE_FORMATS[key]
