"""Multi-line text layout."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .document import Element
from .fonts import font_stack
from .svg import escape_xml, fixed, fmt

LINE_HEIGHT_RATIO = 1.25

_ANCHORS = {
    "left": ("start", 0.0),
    "center": ("middle", 0.5),
    "right": ("end", 1.0),
}


@dataclass(frozen=True)
class TextBlock:
    x: float
    y: float
    anchor: str
    font_family: str
    font_size: float
    line_height: float
    lines: Tuple[str, ...]

    @property
    def height(self) -> float:
        return len(self.lines) * self.line_height


def split_lines(text: str) -> List[str]:
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def layout_text(element: Element) -> TextBlock:
    font_size = element.font_size
    line_height = font_size * LINE_HEIGHT_RATIO
    lines = split_lines(element.text)

    anchor, factor = _ANCHORS.get(element.text_align, _ANCHORS["left"])
    x = element.x + element.width * factor

    y = element.y + font_size
    if element.vertical_align == "middle" and element.height:
        block_height = len(lines) * line_height
        y = element.y + (element.height - block_height) / 2 + font_size

    return TextBlock(
        x=x,
        y=y,
        anchor=anchor,
        font_family=font_stack(element.font_family),
        font_size=font_size,
        line_height=line_height,
        lines=tuple(lines),
    )


def text_block_to_svg(block: TextBlock, fill: str) -> str:
    x = fixed(block.x)
    tspans = "".join(
        f'<tspan x="{x}" dy="{0 if index == 0 else fmt(block.line_height)}">{escape_xml(line)}</tspan>'
        for index, line in enumerate(block.lines)
    )
    return (
        f'<text x="{x}" y="{fixed(block.y)}" font-family="{escape_xml(block.font_family)}" '
        f'font-size="{fmt(block.font_size)}" fill="{escape_xml(fill)}" '
        f'text-anchor="{block.anchor}">{tspans}</text>'
    )
