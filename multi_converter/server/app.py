"""FastAPI application exposing the converters over HTTP.

WHY: Browser front-ends and scripts need an HTTP surface to upload audio
or images and get converted files back, and to run text conversions.
FastAPI provides request validation, OpenAPI docs, and async request
handling so several conversions can proceed at once.

HOW: Each conversion is a single request/response — the file is uploaded,
converted in-process, and returned as the response body. Audio decoding
awaits the decoder (which runs FFmpeg in a worker thread); image encoding
runs in the threadpool. ConversionError is translated to an HTTP status by
one exception handler.

RULES:
- UnsupportedFormat → 415, CorruptData → 422, InvalidParameters → 400,
  ResourceExhaustion → 507; body is {"detail": ..., "kind": ...}
- Uploads larger than MAX_UPLOAD_BYTES → 413
- Download filenames are sanitized to the upload's stem plus the new suffix
- The decoder is a dependency (get_decoder) so tests can override it
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from multi_converter import __version__, config
from multi_converter.converters import IMAGE_FORMATS, TEXT_ALGORITHMS, resolve_image_format
from multi_converter.converters.image import convert_image
from multi_converter.core.errors import ConversionError, ConversionErrorKind
from multi_converter.core.models import WAV_MEDIA_TYPE
from multi_converter.core.orchestrator import convert_audio_to_wav
from multi_converter.decoders import default_decoder
from multi_converter.decoders.base import AudioDecoder
from multi_converter.server.models import (
    AlgorithmInfo,
    ErrorResponse,
    FormatsResponse,
    HealthResponse,
    ImageFormatInfo,
    TextConversionRequest,
    TextConversionResponse,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    ConversionErrorKind.UNSUPPORTED_FORMAT: 415,
    ConversionErrorKind.CORRUPT_DATA: 422,
    ConversionErrorKind.INVALID_PARAMETERS: 400,
    ConversionErrorKind.RESOURCE_EXHAUSTION: 507,
}

_CONVERSION_ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid parameters"},
    413: {"model": ErrorResponse, "description": "Upload too large"},
    415: {"model": ErrorResponse, "description": "Unsupported input format"},
    422: {"model": ErrorResponse, "description": "Corrupt input data"},
    507: {"model": ErrorResponse, "description": "Out of memory"},
}

app = FastAPI(
    title="Multi-Format Converter API",
    description=(
        "Convert audio in any FFmpeg-supported container to 16-bit PCM WAV, "
        "re-encode raster images between PNG, JPEG, WebP and ICO, and render "
        "text as binary, hex, duodecimal, Base64, Morse or reversed."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Dependencies, error handling, helpers
# ---------------------------------------------------------------------------


def get_decoder() -> AudioDecoder:
    """Provide a fresh decoder per request."""
    return default_decoder()


@app.exception_handler(ConversionError)
async def _conversion_error_handler(request: Request, exc: ConversionError) -> JSONResponse:
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=ERROR_STATUS_CODES[exc.kind],
        content={"detail": exc.message, "kind": exc.kind.value},
    )


async def _read_upload(upload: UploadFile) -> bytes:
    """Read an upload, rejecting it once it passes MAX_UPLOAD_BYTES."""
    limit = config.MAX_UPLOAD_BYTES
    content = await upload.read(limit + 1)
    if len(content) > limit:
        raise HTTPException(
            status_code=413,
            detail="Upload exceeds the {}-byte limit".format(limit),
        )
    return content


def _download_name(upload_name: Optional[str], default_filename: str) -> str:
    """Return a safe attachment filename.

    The upload's sanitized stem gets the suffix of ``default_filename``;
    when nothing of the stem survives, ``default_filename`` is used as is.
    """
    stem = Path(upload_name or "").stem
    stem = "".join(ch for ch in stem if ch.isalnum() or ch in "-_ ").strip()
    if not stem:
        return default_filename
    return "{}{}".format(stem, Path(default_filename).suffix)


# ---------------------------------------------------------------------------
# Endpoints: Audio
# ---------------------------------------------------------------------------


@app.post(
    "/audio/wav",
    tags=["audio"],
    summary="Convert audio to 16-bit PCM WAV",
    description=(
        "Upload an audio file in any container FFmpeg can decode. The response "
        "body is the canonical 44-byte-header WAV file at the source sample "
        "rate and channel count."
    ),
    response_class=Response,
    responses={200: {"content": {WAV_MEDIA_TYPE: {}}}, **_CONVERSION_ERRORS},
)
async def convert_audio(
    file: Annotated[UploadFile, File(description="Audio file to convert")],
    decoder: Annotated[AudioDecoder, Depends(get_decoder)],
) -> Response:
    data = await _read_upload(file)
    wav = await convert_audio_to_wav(
        data,
        media_type=file.content_type or "application/octet-stream",
        decoder=decoder,
        filename=file.filename,
    )
    return Response(
        content=wav.content,
        media_type=wav.media_type,
        headers={
            "Content-Disposition": 'attachment; filename="{}"'.format(
                _download_name(file.filename, wav.default_filename)
            )
        },
    )


# ---------------------------------------------------------------------------
# Endpoints: Images
# ---------------------------------------------------------------------------


@app.post(
    "/image/{image_format}",
    tags=["images"],
    summary="Re-encode an image",
    description="Upload an image and receive it re-encoded as png, jpeg, webp or ico.",
    response_class=Response,
    responses={404: {"model": ErrorResponse, "description": "Unknown format"}, **_CONVERSION_ERRORS},
)
async def convert_image_endpoint(
    image_format: str,
    file: Annotated[UploadFile, File(description="Image file to convert")],
) -> Response:
    try:
        target = resolve_image_format(image_format)
    except KeyError:
        raise HTTPException(
            status_code=404,
            detail="Unknown image format '{}'. Available: {}".format(
                image_format, ", ".join(sorted(IMAGE_FORMATS))
            ),
        )

    data = await _read_upload(file)
    output = await run_in_threadpool(convert_image, data, target)
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={
            "Content-Disposition": 'attachment; filename="{}"'.format(
                _download_name(file.filename, output.default_filename)
            )
        },
    )


# ---------------------------------------------------------------------------
# Endpoints: Text
# ---------------------------------------------------------------------------


@app.post(
    "/text",
    response_model=TextConversionResponse,
    tags=["text"],
    summary="Convert text",
    responses={400: {"model": ErrorResponse, "description": "Text not representable"}},
)
async def convert_text(request: TextConversionRequest) -> TextConversionResponse:
    algorithm = TEXT_ALGORITHMS[request.algorithm.value]()
    try:
        result = algorithm.convert(request.text)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return TextConversionResponse(algorithm=request.algorithm.value, result=result)


# ---------------------------------------------------------------------------
# Endpoints: Formats and health
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=FormatsResponse,
    tags=["formats"],
    summary="List available conversions",
)
async def list_formats() -> FormatsResponse:
    return FormatsResponse(
        text_algorithms=[
            AlgorithmInfo(key=key, name=cls().name)
            for key, cls in sorted(TEXT_ALGORITHMS.items())
        ],
        image_formats=[
            ImageFormatInfo(
                key=key,
                name=target.name,
                media_type=target.media_type,
                suffix=target.suffix,
            )
            for key, target in sorted(IMAGE_FORMATS.items())
        ],
        audio_formats=[WAV_MEDIA_TYPE],
    )


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the multi-converter-api console script."""
    import uvicorn

    config.configure_logging()
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
