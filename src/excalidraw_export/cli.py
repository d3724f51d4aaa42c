"""Command-line interface for exporting diagrams to SVG/PNG."""
from __future__ import annotations

import argparse
import json
import os
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from . import __version__
from .document import InputError, load_document
from .export import detect_format, format_bytes
from .fonts import FontProvider
from .logger import configure_logging, enable_debug, get_logger
from .raster import rasterize
from .renderer import render_to_svg
from .resources import load_usage

LOGGER = get_logger(__name__)

DEBUG_ENV_VAR = "EXCALIDRAW_EXPORT_DEBUG"


@dataclass
class CliError(Exception):
    code: str
    message: str
    hint: Optional[str] = None
    exit_code: int = 1
    file: Optional[str] = None
    retryable: bool = True


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="excalidraw-export",
        description="Export Excalidraw diagrams to PNG or SVG.",
        epilog=load_usage(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", nargs="?", help="Input .excalidraw file")
    parser.add_argument("--text", help="Raw diagram JSON")
    parser.add_argument("-o", "--output", help="Output path (default: <input>.png)")
    parser.add_argument("--svg", action="store_true", help="Export as SVG instead of PNG")
    parser.add_argument("--scale", type=float, default=2.0, help="Zoom factor for PNG (default: 2)")
    background = parser.add_mutually_exclusive_group()
    background.add_argument("--background", metavar="COLOR", help="Override the background color")
    background.add_argument(
        "--no-background", action="store_true", help="Transparent background"
    )
    parser.add_argument("--stdout", action="store_true", help="Write the result to stdout")
    parser.add_argument("--error-format", choices=["text", "json"], default="text")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def _read_input(path: Optional[str], text: Optional[str]) -> tuple[str, Optional[Path]]:
    if path and text is not None:
        raise CliError(
            "E_ARGS",
            "--text cannot be combined with file input",
            hint="Use either FILE or --text.",
            exit_code=2,
        )

    if text is not None:
        return text, None

    if path:
        input_path = Path(path)
        if not input_path.exists():
            raise CliError(
                "E_IO_READ",
                f"input file not found: {input_path}",
                exit_code=2,
                file=str(input_path),
            )
        try:
            return input_path.read_text(encoding="utf-8"), input_path
        except UnicodeDecodeError as exc:
            raise CliError(
                "E_IO_READ",
                f"input file is not valid UTF-8: {input_path}",
                hint=str(exc),
                exit_code=2,
                file=str(input_path),
            )
        except OSError as exc:
            raise CliError(
                "E_IO_READ",
                f"failed to read input file: {input_path}",
                hint=str(exc),
                exit_code=2,
                file=str(input_path),
            )

    if sys.stdin.isatty():
        raise CliError(
            "E_ARGS",
            "no input provided",
            hint="Pass an .excalidraw FILE, --text, or pipe JSON into stdin.",
            exit_code=2,
        )

    try:
        data = sys.stdin.read()
    except UnicodeDecodeError as exc:
        raise CliError(
            "E_IO_READ",
            "stdin is not valid UTF-8",
            hint=str(exc),
            exit_code=2,
        )
    if not data.strip():
        raise CliError(
            "E_ARGS",
            "stdin was empty",
            hint="Pipe Excalidraw JSON into stdin.",
            exit_code=2,
        )
    return data, None


def _write_bytes(path: Path, content: bytes) -> None:
    try:
        path.write_bytes(content)
    except OSError as exc:
        raise CliError(
            "E_IO_WRITE",
            f"failed to write output file: {path}",
            hint=str(exc),
            exit_code=4,
            file=str(path),
        )


def _error_from_exception(exc: Exception) -> CliError:
    if isinstance(exc, CliError):
        return exc
    if isinstance(exc, InputError):
        return CliError(
            "E_PARSE_JSON",
            str(exc),
            hint="Ensure the input is an Excalidraw JSON document.",
            exit_code=2,
            retryable=True,
        )
    return CliError(
        "E_INTERNAL",
        str(exc) or exc.__class__.__name__,
        hint="Re-run with --debug to see traceback.",
        exit_code=1,
        retryable=False,
    )


def _emit_error(err: CliError, *, error_format: str) -> None:
    if error_format == "json":
        payload = {
            "ok": False,
            "code": err.code,
            "message": err.message,
            "file": err.file,
            "hint": err.hint,
            "retryable": err.retryable,
        }
        sys.stderr.write(json.dumps(payload) + "\n")
        return

    sys.stderr.write(f"error[{err.code}]: {err.message}\n")
    if err.hint:
        sys.stderr.write(f"hint: {err.hint}\n")


def _resolve_output(args: argparse.Namespace, source_path: Optional[Path]) -> tuple[str, Optional[Path]]:
    if args.svg:
        fmt = "svg"
    elif args.output:
        fmt = detect_format(args.output)
    else:
        fmt = "png"

    if args.stdout:
        return fmt, None
    if args.output:
        return fmt, Path(args.output)
    if source_path is None:
        return fmt, None
    return fmt, source_path.with_suffix("." + fmt)


def _handle_export(args: argparse.Namespace) -> int:
    if args.stdout and args.output:
        raise CliError(
            "E_ARGS",
            "--stdout and --output are mutually exclusive",
            hint="Choose either --stdout or --output.",
            exit_code=2,
        )
    if args.scale <= 0:
        raise CliError(
            "E_ARGS",
            "--scale must be > 0",
            hint="Use a positive scale factor like 1 or 2.",
            exit_code=2,
        )

    source, source_path = _read_input(args.input, args.text)
    fmt, output_path = _resolve_output(args, source_path)
    LOGGER.debug("Exporting %s as %s to %s", source_path or "<stdin>", fmt, output_path or "<stdout>")
    background = "transparent" if args.no_background else args.background

    document = load_document(source)
    svg_text = render_to_svg(document, background=background, fonts=FontProvider())

    if fmt == "svg":
        payload = svg_text.encode("utf-8")
        width = height = None
    else:
        try:
            image = rasterize(svg_text, zoom=args.scale)
        except Exception as exc:
            raise CliError(
                "E_RASTERIZE",
                f"failed to rasterize diagram: {exc}",
                hint="Check that cairo is installed, or export with --svg.",
                exit_code=5,
                retryable=False,
            ) from exc
        payload = image.png
        width, height = image.width, image.height

    if output_path is None:
        if fmt == "svg":
            sys.stdout.write(svg_text)
            if not svg_text.endswith("\n"):
                sys.stdout.write("\n")
        else:
            sys.stdout.buffer.write(payload)
        return 0

    _write_bytes(output_path, payload)
    if width is not None and height is not None:
        print(f"Wrote {output_path} ({width}x{height}, {format_bytes(len(payload))})")
    else:
        print(f"Wrote {output_path} ({format_bytes(len(payload))})")
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    configure_logging()
    parser = _build_parser()

    if not raw_argv and sys.stdin.isatty():
        parser.print_usage(sys.stderr)
        err = CliError(
            "E_ARGS",
            "no input provided",
            hint="Run excalidraw-export --help for usage.",
            exit_code=2,
        )
        _emit_error(err, error_format="text")
        return err.exit_code

    debug_enabled = "--debug" in raw_argv or os.getenv(DEBUG_ENV_VAR) == "1"
    if debug_enabled:
        enable_debug()
    error_format = "text"
    if "--error-format" in raw_argv:
        idx = raw_argv.index("--error-format")
        if idx + 1 < len(raw_argv):
            error_format = raw_argv[idx + 1]

    try:
        args = parser.parse_args(raw_argv)
        error_format = args.error_format
        return _handle_export(args)
    except UsageError as exc:
        err = CliError(
            "E_ARGS",
            str(exc),
            hint="Run excalidraw-export --help for usage.",
            exit_code=2,
        )
        _emit_error(err, error_format=error_format)
        return err.exit_code
    except Exception as exc:  # pragma: no cover - exercised in integration tests
        err = _error_from_exception(exc)
        _emit_error(err, error_format=error_format)
        if debug_enabled:
            traceback.print_exc(file=sys.stderr)
        return err.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
