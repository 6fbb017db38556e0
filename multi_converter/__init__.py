"""Multi-format converter — text encodings, raster images, audio to WAV.

WHY: Users need one place to turn arbitrary audio (MP3, AAC, OGG, ...)
into canonical 16-bit PCM WAV, re-encode images between common raster
containers, and render text in a handful of encodings. The audio path is
the only one with real engineering in it: decode, interleave, quantize,
and write a byte-exact RIFF/WAVE container.

HOW: Three layers —
  decoders   — turn encoded audio bytes into float sample planes (PyAV)
  core       — quantize, build the 44-byte header, assemble, orchestrate
  converters — thin text/image converters registered by key
CLI and HTTP shells sit on top and only translate errors for their users.

RULES:
- The core never touches files, environment variables, or the network
- Every conversion is independent; nothing is cached across conversions
- Failures are classified into exactly one ConversionErrorKind
"""

__version__ = "0.1.0"
