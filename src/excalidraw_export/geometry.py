"""Bounding boxes, canvas layout, per-element transforms and arrowhead geometry."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .document import Element, Point
from .svg import fixed

PADDING = 40
EMPTY_CANVAS_SIZE = 100

ARROWHEAD_MIN_LENGTH = 15.0
ARROWHEAD_STROKE_MULTIPLIER = 6.0
ARROWHEAD_SPREAD = math.pi / 6


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def merge(self, other: Optional["BoundingBox"]) -> "BoundingBox":
        if other is None:
            return self
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "BoundingBox":
        xs: List[float] = []
        ys: List[float] = []
        for x, y in points:
            xs.append(x)
            ys.append(y)
        if not xs:
            raise ValueError("cannot bound an empty point set")
        return cls(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class CanvasLayout:
    width: int
    height: int
    offset_x: float
    offset_y: float


def rotate_point(point: Point, center: Point, angle: float) -> Point:
    px, py = point
    cx, cy = center
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    dx = px - cx
    dy = py - cy
    return cx + dx * cos_a - dy * sin_a, cy + dx * sin_a + dy * cos_a


def element_corners(element: Element) -> List[Point]:
    """Four corners of the element frame, rotated about the element center."""
    if element.is_point_based and element.points:
        local = BoundingBox.from_points(element.absolute_points())
    else:
        local = BoundingBox(
            element.x, element.y, element.x + element.width, element.y + element.height
        )
    corners = [
        (local.min_x, local.min_y),
        (local.max_x, local.min_y),
        (local.max_x, local.max_y),
        (local.min_x, local.max_y),
    ]
    if not element.angle:
        return corners
    center = element.center()
    return [rotate_point(corner, center, element.angle) for corner in corners]


def element_bounds(element: Element) -> BoundingBox:
    return BoundingBox.from_points(element_corners(element))


def bounding_box(elements: Iterable[Element]) -> Optional[BoundingBox]:
    bbox: Optional[BoundingBox] = None
    for element in elements:
        if element.is_deleted:
            continue
        bounds = element_bounds(element)
        bbox = bounds if bbox is None else bbox.merge(bounds)
    return bbox


def canvas_layout(bbox: Optional[BoundingBox]) -> CanvasLayout:
    if bbox is None:
        return CanvasLayout(EMPTY_CANVAS_SIZE, EMPTY_CANVAS_SIZE, 0.0, 0.0)
    return CanvasLayout(
        width=max(math.ceil(bbox.width), 1) + PADDING * 2,
        height=max(math.ceil(bbox.height), 1) + PADDING * 2,
        offset_x=PADDING - bbox.min_x,
        offset_y=PADDING - bbox.min_y,
    )


def element_transform(element: Element, layout: CanvasLayout) -> str:
    """Group transform: canvas translation outside, own rotation inside."""
    transform = f"translate({fixed(layout.offset_x)},{fixed(layout.offset_y)})"
    if element.angle:
        cx, cy = element.center()
        degrees = math.degrees(element.angle)
        transform += f" rotate({fixed(degrees)},{fixed(cx)},{fixed(cy)})"
    return transform


def opacity_value(element: Element) -> Optional[str]:
    if element.opacity < 100:
        return fixed(max(element.opacity, 0.0) / 100)
    return None


def arrowhead_length(stroke_width: float) -> float:
    return max(ARROWHEAD_MIN_LENGTH, stroke_width * ARROWHEAD_STROKE_MULTIPLIER)


def arrowhead_wings(tail: Point, tip: Point, stroke_width: float) -> Tuple[Point, Point]:
    """Wing points for an arrowhead at ``tip`` pointing away from ``tail``."""
    angle = math.atan2(tip[1] - tail[1], tip[0] - tail[0])
    length = arrowhead_length(stroke_width)
    wing1 = (
        tip[0] - length * math.cos(angle - ARROWHEAD_SPREAD),
        tip[1] - length * math.sin(angle - ARROWHEAD_SPREAD),
    )
    wing2 = (
        tip[0] - length * math.cos(angle + ARROWHEAD_SPREAD),
        tip[1] - length * math.sin(angle + ARROWHEAD_SPREAD),
    )
    return wing1, wing2
