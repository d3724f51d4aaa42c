"""SVG to PNG rasterization."""
from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image

from .logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class RasterImage:
    png: bytes
    width: int
    height: int


def rasterize(svg_text: str, *, zoom: float = 2.0, font_loading: bool = True) -> RasterImage:
    """Render ``svg_text`` to PNG bytes, scaled by ``zoom``.

    Fonts are resolved by cairo from the system font configuration and any
    ``@font-face`` data embedded in the SVG. cairosvg always does this, so
    ``font_loading`` is accepted for interface compatibility and has no
    effect. Backend errors are not caught.
    """
    if zoom <= 0:
        raise ValueError("zoom must be > 0")
    import cairosvg

    png = cairosvg.svg2png(bytestring=svg_text.encode("utf-8"), scale=zoom)
    with Image.open(io.BytesIO(png)) as image:
        width, height = image.size
    LOGGER.info("Rasterized SVG at %sx zoom to %dx%d PNG", zoom, width, height)
    return RasterImage(png=png, width=width, height=height)
