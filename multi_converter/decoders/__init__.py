"""Audio decoder registry.

WHY: The CLI, API, and orchestrator need one lookup for the decoder to use
without importing a specific implementation everywhere.

HOW: DECODERS maps string keys to decoder *classes*; default_decoder()
instantiates the production one.

RULES:
- Keys are snake_case identifiers
- Values are AudioDecoder subclasses (not instances)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from multi_converter.decoders.pyav import PyAVDecoder

if TYPE_CHECKING:
    from multi_converter.decoders.base import AudioDecoder

DECODERS: dict[str, type[AudioDecoder]] = {
    "pyav": PyAVDecoder,
}

DEFAULT_DECODER = "pyav"


def default_decoder() -> AudioDecoder:
    """Return a fresh instance of the production decoder."""
    return DECODERS[DEFAULT_DECODER]()
