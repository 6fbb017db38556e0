"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: One model per request or response body. All fields carry
Field(description=...) so they show up in the /docs UI.

RULES:
- Enum values match registry keys exactly (text algorithms)
- Error bodies always carry ``detail``; conversion errors add ``kind``
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class TextAlgorithmKey(str, Enum):
    """Available text algorithm identifiers.

    RULES:
    - Values match keys in multi_converter.converters.TEXT_ALGORITHMS exactly
    """

    binary = "binary"
    hex = "hex"
    duodecimal = "duodecimal"
    base64 = "base64"
    morse = "morse"
    reverse = "reverse"


class TextConversionRequest(BaseModel):
    """Text to convert and the algorithm to apply."""

    algorithm: TextAlgorithmKey = Field(description="Text algorithm to apply.")
    text: str = Field(description="Input text.")

    model_config = {"json_schema_extra": {
        "examples": [{"algorithm": "morse", "text": "SOS"}]
    }}


class TextConversionResponse(BaseModel):
    """Converted text."""

    algorithm: str = Field(description="Text algorithm that was applied.")
    result: str = Field(description="The converted text.")


class AlgorithmInfo(BaseModel):
    key: str = Field(description="Algorithm identifier used in API requests.")
    name: str = Field(description="Human-readable algorithm name.")


class ImageFormatInfo(BaseModel):
    key: str = Field(description="Format identifier used in the /image/{format} path.")
    name: str = Field(description="Human-readable format name.")
    media_type: str = Field(description="MIME type of the converted image.")
    suffix: str = Field(description="File suffix of the converted image.")


class FormatsResponse(BaseModel):
    """Everything the API can convert to."""

    text_algorithms: List[AlgorithmInfo] = Field(description="Available text algorithms.")
    image_formats: List[ImageFormatInfo] = Field(description="Available image targets.")
    audio_formats: List[str] = Field(description="Audio output media types.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    - kind is set for classified conversion failures, else omitted
    """

    detail: str = Field(description="Human-readable error description.")
    kind: Optional[str] = Field(
        default=None,
        description="Conversion error kind, e.g. 'unsupported_format'.",
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
