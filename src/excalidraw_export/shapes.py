"""Per-element SVG renderers.

Each renderer is a pure function ``(element, files, sketcher) -> [svg, ...]``
returning zero or more SVG fragments in the element's own (untranslated)
coordinate space. Renderers are looked up by element type in ``RENDERERS``.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional, Sequence

from .document import Element, FileResource, Point
from .fonts import font_stack
from .geometry import arrowhead_wings
from .logger import get_logger
from .sketch import (
    PASS_FILL,
    PASS_FILL_SKETCH,
    PASS_STROKE,
    Drawable,
    SketchGenerator,
    SketchOp,
    SketchOptions,
)
from .svg import DASH_PATTERNS, dash_array, dash_attr, escape_xml, fixed, fmt
from .text import layout_text, text_block_to_svg

LOGGER = get_logger(__name__)

ROUNDED_CORNER_RATIO = 0.25
ARROWHEAD_SEED_OFFSET = 100
FRAME_LABEL_GAP = 6.0
FRAME_LABEL_SIZE = 14.0

Renderer = Callable[[Element, Mapping[str, FileResource], SketchGenerator], List[str]]


def ops_to_path(ops: Sequence[SketchOp], precision: int = 2) -> str:
    parts: List[str] = []
    for item in ops:
        d = [fixed(value, precision) for value in item.data]
        if item.op == "move":
            parts.append(f"M{d[0]} {d[1]}")
        elif item.op == "lineTo":
            parts.append(f"L{d[0]} {d[1]}")
        elif item.op == "bcurveTo":
            parts.append(f"C{d[0]} {d[1]},{d[2]} {d[3]},{d[4]} {d[5]}")
    return " ".join(parts)


def passes_to_svg(drawable: Drawable) -> List[str]:
    o = drawable.options
    fragments: List[str] = []
    for sketch_pass in drawable.sets:
        d = ops_to_path(sketch_pass.ops)
        if not d:
            continue
        if sketch_pass.kind == PASS_STROKE:
            dashes = ""
            if o.stroke_line_dash:
                dashes = f' stroke-dasharray="{" ".join(fmt(v) for v in o.stroke_line_dash)}"'
            fragments.append(
                f'<path d="{d}" stroke="{escape_xml(o.stroke)}" stroke-width="{fmt(o.stroke_width)}" '
                f'fill="none" stroke-linecap="round" stroke-linejoin="round"{dashes}/>'
            )
        elif sketch_pass.kind == PASS_FILL:
            fragments.append(f'<path d="{d}" stroke="none" fill="{escape_xml(o.fill or "none")}"/>')
        elif sketch_pass.kind == PASS_FILL_SKETCH:
            weight = o.fill_weight if o.fill_weight > 0 else o.stroke_width / 2
            fragments.append(
                f'<path d="{d}" stroke="{escape_xml(o.fill or o.stroke)}" stroke-width="{fmt(weight)}" '
                f'fill="none" stroke-linecap="round"/>'
            )
    return fragments


def sketch_options(element: Element, *, seed: Optional[int] = None, styled: bool = True) -> SketchOptions:
    """Sketch options for an element; ``styled=False`` drops fill and dashes."""
    fill = None
    fill_style = "solid"
    if styled and element.has_fill():
        fill = element.background_color
        fill_style = element.fill_style or "solid"
    return SketchOptions(
        seed=element.seed if seed is None else seed,
        roughness=element.roughness,
        stroke_width=element.stroke_width,
        stroke=element.stroke_color,
        fill=fill,
        fill_style=fill_style,
        stroke_line_dash=DASH_PATTERNS.get(element.stroke_style) if styled else None,
        bowing=1.0 if element.roughness > 0 else 0.0,
    )


def render_rectangle(element: Element, files: Mapping[str, FileResource], sketcher: SketchGenerator) -> List[str]:
    if element.roundness and element.roughness == 0:
        return _clean_rounded_rect(element)
    drawable = sketcher.generate(
        "rectangle", (element.x, element.y, element.width, element.height), sketch_options(element)
    )
    return passes_to_svg(drawable)


def _clean_rounded_rect(element: Element) -> List[str]:
    radius = fmt(min(element.width, element.height) * ROUNDED_CORNER_RATIO)
    box = (
        f'x="{fmt(element.x)}" y="{fmt(element.y)}" '
        f'width="{fmt(element.width)}" height="{fmt(element.height)}" rx="{radius}"'
    )
    fragments: List[str] = []
    if element.has_fill():
        fragments.append(f'<rect {box} fill="{escape_xml(element.background_color)}" stroke="none"/>')
    fragments.append(
        f'<rect {box} fill="none" stroke="{escape_xml(element.stroke_color)}" '
        f'stroke-width="{fmt(element.stroke_width)}"{dash_attr(element.stroke_style)}/>'
    )
    return fragments


def render_ellipse(element: Element, files: Mapping[str, FileResource], sketcher: SketchGenerator) -> List[str]:
    cx, cy = element.center()
    drawable = sketcher.generate("ellipse", (cx, cy, element.width, element.height), sketch_options(element))
    return passes_to_svg(drawable)


def render_diamond(element: Element, files: Mapping[str, FileResource], sketcher: SketchGenerator) -> List[str]:
    cx, cy = element.center()
    vertices = [
        (cx, element.y),
        (element.x + element.width, cy),
        (cx, element.y + element.height),
        (element.x, cy),
    ]
    return passes_to_svg(sketcher.generate("polygon", vertices, sketch_options(element)))


def render_line(element: Element, files: Mapping[str, FileResource], sketcher: SketchGenerator) -> List[str]:
    points = element.absolute_points()
    if len(points) < 2:
        return []

    options = sketch_options(element)
    if len(points) == 2:
        (x1, y1), (x2, y2) = points
        drawable = sketcher.generate("line", (x1, y1, x2, y2), options)
    elif element.roundness:
        drawable = sketcher.generate("curve", points, options)
    else:
        drawable = sketcher.generate("linear_path", points, options)

    fragments = passes_to_svg(drawable)
    if element.end_arrowhead:
        fragments.append(_arrowhead(element, points[-2], points[-1], sketcher, "end"))
    if element.start_arrowhead:
        fragments.append(_arrowhead(element, points[1], points[0], sketcher, "start"))
    return fragments


def _arrowhead(
    element: Element, tail: Point, tip: Point, sketcher: SketchGenerator, end: str
) -> str:
    wing1, wing2 = arrowhead_wings(tail, tip, element.stroke_width)
    if element.roughness == 0:
        d = (
            f"M{fixed(wing1[0])} {fixed(wing1[1])} L{fixed(tip[0])} {fixed(tip[1])} "
            f"L{fixed(wing2[0])} {fixed(wing2[1])}"
        )
        body = [
            f'<path d="{d}" stroke="{escape_xml(element.stroke_color)}" '
            f'stroke-width="{fmt(element.stroke_width)}" fill="none" '
            f'stroke-linecap="round" stroke-linejoin="round"/>'
        ]
    else:
        options = sketch_options(element, seed=element.seed + ARROWHEAD_SEED_OFFSET, styled=False)
        body = []
        for wing in (wing1, wing2):
            drawable = sketcher.generate("line", (tip[0], tip[1], wing[0], wing[1]), options)
            body.extend(passes_to_svg(drawable))
    return f'<g class="arrowhead arrowhead-{end}">' + "".join(body) + "</g>"


def render_freedraw(element: Element, files: Mapping[str, FileResource], sketcher: SketchGenerator) -> List[str]:
    points = element.absolute_points()
    if len(points) < 2:
        return []
    d = "M" + " L".join(f"{fixed(x)} {fixed(y)}" for x, y in points)
    return [
        f'<path d="{d}" stroke="{escape_xml(element.stroke_color)}" stroke-width="{fmt(element.stroke_width)}" '
        f'fill="none" stroke-linecap="round" stroke-linejoin="round"/>'
    ]


def render_text(element: Element, files: Mapping[str, FileResource], sketcher: SketchGenerator) -> List[str]:
    return [text_block_to_svg(layout_text(element), element.stroke_color)]


def render_image(element: Element, files: Mapping[str, FileResource], sketcher: SketchGenerator) -> List[str]:
    resource = files.get(element.file_id) if files and element.file_id else None
    if resource is None:
        LOGGER.debug("Image %s references missing file %r; skipped", element.id, element.file_id)
        return []
    return [
        f'<image x="{fmt(element.x)}" y="{fmt(element.y)}" width="{fmt(element.width)}" '
        f'height="{fmt(element.height)}" href="{escape_xml(resource.href())}" preserveAspectRatio="none"/>'
    ]


def render_frame(element: Element, files: Mapping[str, FileResource], sketcher: SketchGenerator) -> List[str]:
    fragments = [
        f'<rect x="{fmt(element.x)}" y="{fmt(element.y)}" width="{fmt(element.width)}" '
        f'height="{fmt(element.height)}" fill="none" stroke="{escape_xml(element.stroke_color)}" '
        f'stroke-width="1" stroke-dasharray="{dash_array("dashed")}"/>'
    ]
    if element.name:
        fragments.append(
            f'<text x="{fixed(element.x)}" y="{fixed(element.y - FRAME_LABEL_GAP)}" '
            f'font-family="{escape_xml(font_stack(2))}" font-size="{fmt(FRAME_LABEL_SIZE)}" '
            f'fill="{escape_xml(element.stroke_color)}">{escape_xml(element.name)}</text>'
        )
    return fragments


RENDERERS: Dict[str, Renderer] = {
    "rectangle": render_rectangle,
    "ellipse": render_ellipse,
    "diamond": render_diamond,
    "line": render_line,
    "arrow": render_line,
    "text": render_text,
    "freedraw": render_freedraw,
    "image": render_image,
    "frame": render_frame,
}


def render_element(
    element: Element, files: Mapping[str, FileResource], sketcher: SketchGenerator
) -> List[str]:
    renderer = RENDERERS.get(element.type)
    if renderer is None:
        LOGGER.debug("Skipping unsupported element type %r", element.type)
        return []
    return renderer(element, files, sketcher)
