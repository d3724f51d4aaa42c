"""File-level export: read a document, render it, write SVG or PNG."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .document import InputError, load_document
from .fonts import FontProvider
from .logger import get_logger
from .raster import rasterize
from .renderer import render_to_svg

LOGGER = get_logger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class ExportResult:
    format: str
    path: Path
    size: int
    width: Optional[int] = None
    height: Optional[int] = None


def detect_format(output_path: PathLike) -> str:
    return "svg" if Path(output_path).suffix.lower() == ".svg" else "png"


def export_source(
    source: str,
    *,
    fmt: str = "png",
    scale: float = 2.0,
    background: Optional[str] = None,
    fonts: Optional[FontProvider] = None,
) -> Union[str, bytes]:
    """Render JSON source text to SVG text or PNG bytes."""
    document = load_document(source)
    svg_text = render_to_svg(document, background=background, fonts=fonts)
    if fmt == "svg":
        return svg_text
    return rasterize(svg_text, zoom=scale).png


def export_diagram(
    input_path: PathLike,
    output_path: PathLike,
    *,
    fmt: Optional[str] = None,
    scale: float = 2.0,
    background: Optional[str] = None,
    fonts: Optional[FontProvider] = None,
) -> ExportResult:
    input_path = Path(input_path)
    output_path = Path(output_path)
    fmt = fmt or detect_format(output_path)
    if fmt not in {"svg", "png"}:
        raise ValueError(f"unsupported export format: {fmt}")

    try:
        source = input_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InputError(f"{input_path} is not valid UTF-8: {exc}") from exc
    document = load_document(source)
    svg_text = render_to_svg(document, background=background, fonts=fonts)

    if fmt == "svg":
        data = svg_text.encode("utf-8")
        output_path.write_bytes(data)
        LOGGER.info("Wrote SVG %s (%s)", output_path, format_bytes(len(data)))
        return ExportResult(format="svg", path=output_path, size=len(data))

    image = rasterize(svg_text, zoom=scale)
    output_path.write_bytes(image.png)
    LOGGER.info("Wrote PNG %s (%dx%d, %s)", output_path, image.width, image.height, format_bytes(len(image.png)))
    return ExportResult(
        format="png",
        path=output_path,
        size=len(image.png),
        width=image.width,
        height=image.height,
    )


def format_bytes(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
