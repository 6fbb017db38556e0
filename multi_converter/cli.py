"""Command-line interface for the multi-format converter.

WHY: Users need a simple way to convert files from the terminal and to
check what a produced WAV file contains. The CLI wires together the
decoder, the audio pipeline, and the text/image converters behind one
command with four subcommands.

HOW: Uses argparse subparsers:
  audio INPUT              — decode any audio file and write <stem>.wav
  text ALGORITHM [TEXT]    — print TEXT (or stdin) in the chosen encoding
  image INPUT FORMAT       — re-encode an image and write <stem>.<ext>
  inspect WAV_FILE         — print the parsed 44-byte header
The audio pipeline is async and runs via asyncio.run().

RULES:
- Status messages go to stderr; converted text goes to stdout
- Output files are saved next to the source (or to --output-dir)
- Output naming: {stem}{suffix}, numeric suffix on conflict (song-2.wav)
- ConversionError → "Error (<kind>): <message>" on stderr, exit code 1
- Usage errors exit with code 2 (argparse default)
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from multi_converter.config import (
    SUPPORTED_AUDIO_EXTENSIONS,
    configure_logging,
    guess_audio_media_type,
)
from multi_converter.converters import IMAGE_FORMATS, TEXT_ALGORITHMS, resolve_image_format
from multi_converter.converters.image import convert_image
from multi_converter.core.errors import ConversionError
from multi_converter.core.orchestrator import convert_audio_to_wav
from multi_converter.core.wav import read_header


def _status(msg: str) -> None:
    """Print a status message to stderr.

    Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _fail_conversion(exc: ConversionError) -> None:
    """Report a classified conversion failure as "Error (<kind>): <message>"."""
    print("Error ({}): {}".format(exc.kind.value, exc.message), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    WHY: Users may convert the same file several times. Overwriting earlier
    output would lose work.

    HOW: Try {stem}{suffix}; on conflict insert -2, -3, ... before the
    extension until a free name is found.

    Args:
        stem: Source filename stem (without extension).
        suffix: Output suffix including the dot (e.g. ".wav").
        output_dir: Directory to save the output file.

    Returns:
        A Path that does not yet exist.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    counter = 2
    while True:
        candidate = output_dir / "{}-{}{}".format(stem, counter, suffix)
        if not candidate.exists():
            return candidate
        counter += 1


def _resolve_paths(input_file: str, output_dir: Optional[str]) -> tuple:
    """Validate the input file and output directory; exit on failure."""
    input_path = Path(input_file).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    out_dir = Path(output_dir).resolve() if output_dir else input_path.parent
    if not out_dir.is_dir():
        _fail("Output directory does not exist: {}".format(out_dir))
    return input_path, out_dir


def _run_audio(args: argparse.Namespace) -> None:
    input_path, output_dir = _resolve_paths(args.input_file, args.output_dir)

    ext = input_path.suffix.lower()
    if ext not in SUPPORTED_AUDIO_EXTENSIONS:
        # The decoder probes content, so an unknown extension is only a warning
        _status("Warning: unrecognized audio extension '{}', probing content".format(ext))

    media_type = args.media_type or guess_audio_media_type(input_path.name)
    _status("Decoding {} ({})...".format(input_path.name, media_type))

    try:
        wav = asyncio.run(
            convert_audio_to_wav(
                input_path.read_bytes(),
                media_type=media_type,
                filename=input_path.name,
            )
        )
    except ConversionError as exc:
        _fail_conversion(exc)

    header = read_header(wav.header)
    output_path = _resolve_output_path(input_path.stem, wav.suffix, output_dir)
    output_path.write_bytes(wav.content)

    _status("  {} Hz, {} channel(s), {} data bytes".format(
        header.sample_rate, header.channel_count, header.data_byte_length,
    ))
    _status("Saved: {}".format(output_path))


def _run_text(args: argparse.Namespace) -> None:
    text = args.text if args.text is not None else sys.stdin.read().rstrip("\n")
    algorithm = TEXT_ALGORITHMS[args.algorithm]()
    try:
        result = algorithm.convert(text)
    except ValueError as exc:
        _fail(str(exc))
    print(result)


def _run_image(args: argparse.Namespace) -> None:
    input_path, output_dir = _resolve_paths(args.input_file, args.output_dir)
    try:
        target = resolve_image_format(args.format)
    except KeyError:
        _fail("Unknown image format '{}'. Available formats: {}".format(
            args.format, ", ".join(sorted(IMAGE_FORMATS)),
        ))

    _status("Converting {} to {}...".format(input_path.name, target.name))
    try:
        output = convert_image(input_path.read_bytes(), target)
    except ConversionError as exc:
        _fail_conversion(exc)

    output_path = _resolve_output_path(input_path.stem, output.suffix, output_dir)
    output_path.write_bytes(output.content)
    _status("Saved: {}".format(output_path))


def _run_inspect(args: argparse.Namespace) -> None:
    path = Path(args.wav_file)
    if not path.is_file():
        _fail("File not found: {}".format(path))

    with path.open("rb") as handle:
        raw = handle.read(44)
    try:
        header = read_header(raw)
    except ConversionError as exc:
        _fail_conversion(exc)

    for field_name, value in header._asdict().items():
        print("{}: {}".format(field_name, value))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Separate from main() so tests can inspect the parser without running
    a conversion.
    """
    parser = argparse.ArgumentParser(
        prog="multi_converter",
        description="Convert audio to 16-bit PCM WAV, re-encode images, "
                    "and render text in classic encodings.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: MULTI_CONVERTER_LOG_LEVEL or INFO).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    audio = subparsers.add_parser("audio", help="Convert an audio file to WAV.")
    audio.add_argument("input_file", help="Path to the audio file to convert.")
    audio.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save the WAV file (default: same as input file).",
    )
    audio.add_argument(
        "--media-type",
        default=None,
        help="Media type hint for the decoder (default: guessed from extension).",
    )
    audio.set_defaults(handler=_run_audio)

    text = subparsers.add_parser("text", help="Render text in another encoding.")
    text.add_argument("algorithm", choices=sorted(TEXT_ALGORITHMS), help="Text algorithm.")
    text.add_argument("text", nargs="?", default=None, help="Text to convert (default: stdin).")
    text.set_defaults(handler=_run_text)

    image = subparsers.add_parser("image", help="Re-encode an image.")
    image.add_argument("input_file", help="Path to the image to convert.")
    image.add_argument(
        "format",
        help="Target format: {} (MIME types also accepted).".format(
            ", ".join(sorted(IMAGE_FORMATS))
        ),
    )
    image.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save the image (default: same as input file).",
    )
    image.set_defaults(handler=_run_image)

    inspect = subparsers.add_parser("inspect", help="Print the header of a WAV file.")
    inspect.add_argument("wav_file", help="Path to a WAV file written by this tool.")
    inspect.set_defaults(handler=_run_inspect)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m multi_converter`` and the console script.

    argv=None means use sys.argv; an explicit list is for testing.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    args.handler(args)


if __name__ == "__main__":
    main()
