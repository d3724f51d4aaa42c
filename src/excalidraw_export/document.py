"""Document model and normalization for Excalidraw JSON input."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_STROKE_COLOR = "#1e1e1e"
DEFAULT_STROKE_WIDTH = 2.0
DEFAULT_ROUGHNESS = 1.0
DEFAULT_FONT_SIZE = 20.0
DEFAULT_BACKGROUND = "#ffffff"
TRANSPARENT = "transparent"

POINT_BASED_TYPES = frozenset({"line", "arrow", "freedraw"})

Point = Tuple[float, float]


class InputError(ValueError):
    """Raised when input cannot be parsed as a diagram document."""


@dataclass(frozen=True)
class FileResource:
    file_id: str
    mime_type: Optional[str]
    data_url: str

    def href(self) -> str:
        if self.data_url.startswith("data:"):
            return self.data_url
        mime = self.mime_type or "application/octet-stream"
        return f"data:{mime};base64,{self.data_url}"


@dataclass(frozen=True)
class Element:
    type: str
    id: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    angle: float = 0.0
    opacity: float = 100.0
    is_deleted: bool = False
    stroke_color: str = DEFAULT_STROKE_COLOR
    background_color: str = TRANSPARENT
    fill_style: str = "solid"
    stroke_width: float = DEFAULT_STROKE_WIDTH
    stroke_style: str = "solid"
    roughness: float = DEFAULT_ROUGHNESS
    seed: int = 1
    roundness: bool = False
    points: Tuple[Point, ...] = ()
    start_arrowhead: Optional[str] = None
    end_arrowhead: Optional[str] = None
    text: str = ""
    font_size: float = DEFAULT_FONT_SIZE
    font_family: int = 1
    text_align: str = "left"
    vertical_align: str = "top"
    file_id: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_point_based(self) -> bool:
        return self.type in POINT_BASED_TYPES

    def absolute_points(self) -> List[Point]:
        return [(self.x + px, self.y + py) for px, py in self.points]

    def center(self) -> Point:
        return self.x + self.width / 2, self.y + self.height / 2

    def has_fill(self) -> bool:
        return bool(self.background_color) and self.background_color != TRANSPARENT


@dataclass
class Document:
    elements: Tuple[Element, ...] = ()
    background: Optional[str] = None
    files: Dict[str, FileResource] = field(default_factory=dict)


def load_document(text: str) -> Document:
    """Parse JSON text into a normalized document."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InputError(
            f"Failed to parse diagram JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}"
        ) from exc
    if not isinstance(raw, dict):
        raise InputError("Diagram document must be a JSON object")
    return parse_document(raw)


def parse_document(raw: Mapping[str, Any]) -> Document:
    """Normalize an already decoded document.

    A missing or malformed ``elements`` array is treated as an empty
    document. Deleted elements are dropped here so nothing downstream ever
    sees them.
    """
    raw_elements = raw.get("elements")
    if not isinstance(raw_elements, list):
        raw_elements = []

    elements: List[Element] = []
    dropped = 0
    for entry in raw_elements:
        if not isinstance(entry, dict):
            dropped += 1
            continue
        element = parse_element(entry)
        if element.is_deleted:
            dropped += 1
            continue
        elements.append(element)
    if dropped:
        LOGGER.debug("Dropped %d deleted or malformed elements", dropped)

    app_state = raw.get("appState")
    background = None
    if isinstance(app_state, dict):
        value = app_state.get("viewBackgroundColor")
        if isinstance(value, str):
            background = value

    return Document(
        elements=tuple(elements),
        background=background,
        files=_parse_files(raw.get("files")),
    )


def parse_element(raw: Mapping[str, Any]) -> Element:
    stroke_width = _number(raw.get("strokeWidth"), 0.0)
    seed = int(_number(raw.get("seed"), 0.0))
    text = raw.get("text") or raw.get("originalText") or ""
    return Element(
        type=str(raw.get("type") or ""),
        id=_optional_str(raw.get("id")),
        x=_number(raw.get("x"), 0.0),
        y=_number(raw.get("y"), 0.0),
        width=_number(raw.get("width"), 0.0),
        height=_number(raw.get("height"), 0.0),
        angle=_number(raw.get("angle"), 0.0),
        opacity=_number(raw.get("opacity"), 100.0),
        is_deleted=bool(raw.get("isDeleted", False)),
        stroke_color=_optional_str(raw.get("strokeColor")) or DEFAULT_STROKE_COLOR,
        background_color=_optional_str(raw.get("backgroundColor")) or TRANSPARENT,
        fill_style=_optional_str(raw.get("fillStyle")) or "solid",
        stroke_width=stroke_width or DEFAULT_STROKE_WIDTH,
        stroke_style=_optional_str(raw.get("strokeStyle")) or "solid",
        roughness=_number(raw.get("roughness"), DEFAULT_ROUGHNESS),
        seed=seed or 1,
        roundness=bool(raw.get("roundness")),
        points=_parse_points(raw.get("points")),
        start_arrowhead=_optional_str(raw.get("startArrowhead")),
        end_arrowhead=_optional_str(raw.get("endArrowhead")),
        text=str(text),
        font_size=_number(raw.get("fontSize"), 0.0) or DEFAULT_FONT_SIZE,
        font_family=int(_number(raw.get("fontFamily"), 1.0)),
        text_align=_optional_str(raw.get("textAlign")) or "left",
        vertical_align=_optional_str(raw.get("verticalAlign")) or "top",
        file_id=_optional_str(raw.get("fileId")),
        name=_optional_str(raw.get("name")),
    )


def resolve_background(document: Document, override: Optional[str] = None) -> Optional[str]:
    """Pick the canvas background, returning ``None`` for a transparent canvas."""
    if override is not None:
        color = override
    elif document.background is not None:
        color = document.background
    else:
        color = DEFAULT_BACKGROUND
    color = color.strip()
    if not color or color.lower() == TRANSPARENT:
        return None
    return color


def _parse_files(raw: Any) -> Dict[str, FileResource]:
    if not isinstance(raw, dict):
        return {}
    files: Dict[str, FileResource] = {}
    for file_id, entry in raw.items():
        if not isinstance(entry, dict):
            continue
        data_url = entry.get("dataURL")
        if not isinstance(data_url, str) or not data_url:
            continue
        files[str(file_id)] = FileResource(
            file_id=str(file_id),
            mime_type=_optional_str(entry.get("mimeType")),
            data_url=data_url,
        )
    return files


def _parse_points(raw: Any) -> Tuple[Point, ...]:
    if not isinstance(raw, list):
        return ()
    points: List[Point] = []
    for item in raw:
        if not isinstance(item, (list, tuple)) or len(item) < 2:
            continue
        px = _number(item[0], None)
        py = _number(item[1], None)
        if px is None or py is None:
            continue
        points.append((px, py))
    return tuple(points)


def _number(value: Any, default: Optional[float]) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)
