"""Error taxonomy shared by every conversion path.

WHY: Callers (CLI, HTTP API, tests) must be able to tell the four failure
kinds apart without parsing messages: an unrecognized container, damaged
data, out-of-range header parameters, and allocation failure. Each kind
maps to a different user-facing response.

HOW: One base class, ConversionError, carries a ConversionErrorKind and a
message. Each kind has its own subclass so callers can catch precisely or
catch the base and switch on ``kind``.

RULES:
- Every failure surfaced by the core is exactly one of these subclasses
- No stage retries; these errors are terminal for the conversion
- ``kind`` values are lowercase strings (stable for JSON responses)
"""

from __future__ import annotations

import enum


class ConversionErrorKind(str, enum.Enum):
    """Classification of a terminal conversion failure."""

    UNSUPPORTED_FORMAT = "unsupported_format"
    CORRUPT_DATA = "corrupt_data"
    INVALID_PARAMETERS = "invalid_parameters"
    RESOURCE_EXHAUSTION = "resource_exhaustion"


class ConversionError(Exception):
    """Base class for classified conversion failures.

    Subclasses set ``kind``; the message is kept separately so shells can
    render it without the kind prefix.
    """

    kind: ConversionErrorKind

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return "{}: {}".format(self.kind.value, self.message)


class UnsupportedFormatError(ConversionError):
    """The decoder cannot recognize or parse the input container or codec."""

    kind = ConversionErrorKind.UNSUPPORTED_FORMAT


class CorruptDataError(ConversionError):
    """The container parsed but its data is malformed or not finite."""

    kind = ConversionErrorKind.CORRUPT_DATA


class InvalidParametersError(ConversionError):
    """Sample rate, channel count, or data length is out of range for WAV."""

    kind = ConversionErrorKind.INVALID_PARAMETERS


class ResourceExhaustionError(ConversionError):
    """Memory allocation failed while building a large buffer."""

    kind = ConversionErrorKind.RESOURCE_EXHAUSTION
