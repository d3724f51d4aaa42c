"""Small helpers for writing SVG markup as text."""
from __future__ import annotations

import math
from typing import Optional

SVG_NS = "http://www.w3.org/2000/svg"

DASH_PATTERNS = {
    "dashed": (12.0, 8.0),
    "dotted": (3.0, 6.0),
}

_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
)


def fixed(value: float, precision: int = 2) -> str:
    """Format with a fixed number of decimals, normalizing negative zero."""
    text = f"{value:.{precision}f}"
    if text.startswith("-") and float(text) == 0:
        return text[1:]
    return text


def fmt(value: float) -> str:
    """Compact number formatting: integers without a fraction, else up to 3 decimals."""
    if math.isclose(value, round(value)):
        return str(int(round(value)))
    return f"{value:.3f}".rstrip("0").rstrip(".")


def escape_xml(text: str) -> str:
    for raw, entity in _XML_ESCAPES:
        text = text.replace(raw, entity)
    return text


def dash_array(stroke_style: str) -> Optional[str]:
    pattern = DASH_PATTERNS.get(stroke_style)
    return " ".join(fmt(v) for v in pattern) if pattern else None


def dash_attr(stroke_style: str) -> str:
    dashes = dash_array(stroke_style)
    return f' stroke-dasharray="{dashes}"' if dashes else ""
