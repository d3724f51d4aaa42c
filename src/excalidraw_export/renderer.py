"""Compose per-element SVG fragments into one image."""
from __future__ import annotations

from typing import Any, List, Mapping, Optional, Union

from .document import Document, parse_document, resolve_background
from .fonts import DEFAULT_FONTS, FontProvider
from .geometry import bounding_box, canvas_layout, element_transform, opacity_value
from .logger import get_logger
from .shapes import render_element
from .sketch import SketchGenerator
from .svg import SVG_NS, escape_xml

LOGGER = get_logger(__name__)


def render_to_svg(
    document: Union[Document, Mapping[str, Any]],
    *,
    background: Optional[str] = None,
    fonts: Optional[FontProvider] = None,
    sketcher: Optional[SketchGenerator] = None,
) -> str:
    """Render a diagram document to a standalone SVG string.

    ``background`` overrides the document background; pass ``"transparent"``
    to leave the canvas unpainted. ``fonts`` supplies the embedded font block
    and ``sketcher`` the hand-drawn path generator.
    """
    if not isinstance(document, Document):
        document = parse_document(document)
    fonts = fonts if fonts is not None else DEFAULT_FONTS
    sketcher = sketcher if sketcher is not None else SketchGenerator()

    elements = [element for element in document.elements if not element.is_deleted]
    if not elements:
        layout = canvas_layout(None)
        LOGGER.debug("Empty document; emitting %dx%d canvas", layout.width, layout.height)
        return f'<svg xmlns="{SVG_NS}" width="{layout.width}" height="{layout.height}"></svg>'

    layout = canvas_layout(bounding_box(elements))
    color = resolve_background(document, background)

    groups: List[str] = []
    for element in elements:
        fragments = render_element(element, document.files, sketcher)
        if not fragments:
            continue
        opacity = opacity_value(element)
        opacity_attr = f' opacity="{opacity}"' if opacity is not None else ""
        groups.append(
            f'<g transform="{element_transform(element, layout)}"{opacity_attr}>\n'
            + "\n".join(fragments)
            + "\n</g>"
        )
    LOGGER.debug(
        "Rendered %d of %d elements onto %dx%d canvas",
        len(groups),
        len(elements),
        layout.width,
        layout.height,
    )

    parts = [
        f'<svg xmlns="{SVG_NS}" width="{layout.width}" height="{layout.height}" '
        f'viewBox="0 0 {layout.width} {layout.height}">',
        fonts.style_block(),
    ]
    if color is not None:
        parts.append(f'<rect width="100%" height="100%" fill="{escape_xml(color)}"/>')
    parts.extend(groups)
    parts.append("</svg>")
    return "\n".join(part for part in parts if part)
