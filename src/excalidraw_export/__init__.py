"""Public API for excalidraw_export."""
__version__ = "0.3.0"

from .document import Document, Element, InputError, load_document, parse_document
from .export import ExportResult, export_diagram, export_source
from .fonts import FontProvider
from .raster import RasterImage, rasterize
from .renderer import render_to_svg
from .sketch import SketchGenerator

__all__ = [
    "Document",
    "Element",
    "ExportResult",
    "FontProvider",
    "InputError",
    "RasterImage",
    "SketchGenerator",
    "export_diagram",
    "export_source",
    "load_document",
    "parse_document",
    "rasterize",
    "render_to_svg",
]
