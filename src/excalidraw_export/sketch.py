"""Deterministic hand-drawn path synthesis.

Shapes are turned into one or more *passes* (stroke, solid fill, hachure
fill), each a list of drawing ops with absolute coordinates. Every control
point is jittered by a seeded pseudo-random stream, so the same seed and
options always reproduce the same output. Roughness 0 collapses all jitter
and yields plain geometry.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

Point = Tuple[float, float]

PASS_STROKE = "path"
PASS_FILL = "fillPath"
PASS_FILL_SKETCH = "fillSketch"

OP_MOVE = "move"
OP_LINE = "lineTo"
OP_CURVE = "bcurveTo"

_INT32 = 0xFFFFFFFF
_LCG_MULTIPLIER = 48271


@dataclass(frozen=True)
class SketchOp:
    op: str
    data: Tuple[float, ...]


@dataclass
class SketchPass:
    kind: str
    ops: List[SketchOp] = field(default_factory=list)


@dataclass(frozen=True)
class SketchOptions:
    seed: int = 1
    roughness: float = 1.0
    stroke_width: float = 1.0
    stroke: str = "#000"
    fill: Optional[str] = None
    fill_style: str = "hachure"
    stroke_line_dash: Optional[Tuple[float, ...]] = None
    bowing: float = 1.0
    max_randomness_offset: float = 2.0
    curve_tightness: float = 0.0
    curve_fitting: float = 0.95
    curve_step_count: float = 9.0
    hachure_angle: float = -41.0
    hachure_gap: float = -1.0
    fill_weight: float = -1.0
    disable_multi_stroke: bool = False
    disable_multi_stroke_fill: bool = False
    preserve_vertices: bool = False


@dataclass
class Drawable:
    shape: str
    sets: List[SketchPass]
    options: SketchOptions


class _Random:
    """Park-Miller style LCG matching the 31-bit stream of the JS generator."""

    def __init__(self, seed: int) -> None:
        self._state = _to_int32(seed)

    def next(self) -> float:
        self._state = _to_int32(_LCG_MULTIPLIER * self._state)
        return (self._state & 0x7FFFFFFF) / 2**31


def _to_int32(value: int) -> int:
    value &= _INT32
    if value >= 2**31:
        value -= 2**32
    return value


class _Sketcher:
    """Random stream plus the jitter primitives for one generated shape."""

    def __init__(self, options: SketchOptions) -> None:
        self.o = options
        self._random = _Random(options.seed or 1)

    def reseeded(self) -> "_Sketcher":
        return _Sketcher(replace(self.o, seed=(self.o.seed or 1) + 1))

    def random(self) -> float:
        return self._random.next()

    def offset(self, low: float, high: float, gain: float = 1.0) -> float:
        return self.o.roughness * gain * (self.random() * (high - low) + low)

    def offset_opt(self, x: float, gain: float = 1.0) -> float:
        return self.offset(-x, x, gain)

    def line(
        self, x1: float, y1: float, x2: float, y2: float, move: bool, overlay: bool
    ) -> List[SketchOp]:
        o = self.o
        length_sq = (x1 - x2) ** 2 + (y1 - y2) ** 2
        length = math.sqrt(length_sq)
        if length < 200:
            gain = 1.0
        elif length > 500:
            gain = 0.4
        else:
            gain = -0.0016668 * length + 1.233334

        offset = o.max_randomness_offset
        if offset * offset * 100 > length_sq:
            offset = length / 10
        half_offset = offset / 2
        diverge = 0.2 + self.random() * 0.2
        mid_x = o.bowing * o.max_randomness_offset * (y2 - y1) / 200
        mid_y = o.bowing * o.max_randomness_offset * (x1 - x2) / 200
        mid_x = self.offset_opt(mid_x, gain)
        mid_y = self.offset_opt(mid_y, gain)
        jitter = half_offset if overlay else offset

        def rnd() -> float:
            return self.offset_opt(jitter, gain)

        def vertex() -> float:
            return 0.0 if o.preserve_vertices else rnd()

        ops: List[SketchOp] = []
        if move:
            ops.append(SketchOp(OP_MOVE, (x1 + vertex(), y1 + vertex())))
        ops.append(
            SketchOp(
                OP_CURVE,
                (
                    mid_x + x1 + (x2 - x1) * diverge + rnd(),
                    mid_y + y1 + (y2 - y1) * diverge + rnd(),
                    mid_x + x1 + 2 * (x2 - x1) * diverge + rnd(),
                    mid_y + y1 + 2 * (y2 - y1) * diverge + rnd(),
                    x2 + vertex(),
                    y2 + vertex(),
                ),
            )
        )
        return ops

    def double_line(
        self, x1: float, y1: float, x2: float, y2: float, filling: bool = False
    ) -> List[SketchOp]:
        single = self.o.disable_multi_stroke_fill if filling else self.o.disable_multi_stroke
        ops = self.line(x1, y1, x2, y2, True, False)
        if single:
            return ops
        return ops + self.line(x1, y1, x2, y2, True, True)

    def linear_path(self, points: Sequence[Point], close: bool) -> List[SketchOp]:
        count = len(points)
        if count == 2:
            return self.double_line(points[0][0], points[0][1], points[1][0], points[1][1])
        ops: List[SketchOp] = []
        if count < 2:
            return ops
        for start, end in zip(points, points[1:]):
            ops.extend(self.double_line(start[0], start[1], end[0], end[1]))
        if close:
            last, first = points[-1], points[0]
            ops.extend(self.double_line(last[0], last[1], first[0], first[1]))
        return ops

    def curve_through(self, points: Sequence[Point], close_point: Optional[Point] = None) -> List[SketchOp]:
        count = len(points)
        ops: List[SketchOp] = []
        if count > 3:
            s = 1 - self.o.curve_tightness
            ops.append(SketchOp(OP_MOVE, (points[1][0], points[1][1])))
            for i in range(1, count - 2):
                prev_pt, cur, nxt, after = points[i - 1], points[i], points[i + 1], points[i + 2]
                ops.append(
                    SketchOp(
                        OP_CURVE,
                        (
                            cur[0] + (s * nxt[0] - s * prev_pt[0]) / 6,
                            cur[1] + (s * nxt[1] - s * prev_pt[1]) / 6,
                            nxt[0] + (s * cur[0] - s * after[0]) / 6,
                            nxt[1] + (s * cur[1] - s * after[1]) / 6,
                            nxt[0],
                            nxt[1],
                        ),
                    )
                )
            if close_point is not None:
                ro = self.o.max_randomness_offset
                ops.append(
                    SketchOp(
                        OP_LINE,
                        (close_point[0] + self.offset_opt(ro), close_point[1] + self.offset_opt(ro)),
                    )
                )
        elif count == 3:
            ops.append(SketchOp(OP_MOVE, (points[1][0], points[1][1])))
            ops.append(
                SketchOp(
                    OP_CURVE,
                    (points[1][0], points[1][1], points[2][0], points[2][1], points[2][0], points[2][1]),
                )
            )
        elif count == 2:
            ops.extend(self.line(points[0][0], points[0][1], points[1][0], points[1][1], True, True))
        return ops

    def curve_with_offset(self, points: Sequence[Point], offset: float) -> List[SketchOp]:
        jittered: List[Point] = []
        first = points[0]
        for _ in range(2):
            jittered.append((first[0] + self.offset_opt(offset), first[1] + self.offset_opt(offset)))
        for index in range(1, len(points)):
            point = points[index]
            jittered.append((point[0] + self.offset_opt(offset), point[1] + self.offset_opt(offset)))
            if index == len(points) - 1:
                jittered.append((point[0] + self.offset_opt(offset), point[1] + self.offset_opt(offset)))
        return self.curve_through(jittered)

    def ellipse_params(self, width: float, height: float) -> Tuple[float, float, float]:
        o = self.o
        psq = math.sqrt(math.pi * 2 * math.sqrt(((width / 2) ** 2 + (height / 2) ** 2) / 2))
        step_count = math.ceil(max(o.curve_step_count, (o.curve_step_count / math.sqrt(200)) * psq))
        increment = (math.pi * 2) / step_count
        rx = abs(width / 2)
        ry = abs(height / 2)
        fit_randomness = 1 - o.curve_fitting
        rx += self.offset_opt(rx * fit_randomness)
        ry += self.offset_opt(ry * fit_randomness)
        return increment, rx, ry

    def ellipse_points(
        self,
        increment: float,
        cx: float,
        cy: float,
        rx: float,
        ry: float,
        offset: float,
        overlap: float,
    ) -> Tuple[List[Point], List[Point]]:
        core: List[Point] = []
        every: List[Point] = []
        if self.o.roughness == 0:
            increment /= 4
            every.append((cx + rx * math.cos(-increment), cy + ry * math.sin(-increment)))
            angle = 0.0
            while angle <= math.pi * 2:
                point = (cx + rx * math.cos(angle), cy + ry * math.sin(angle))
                core.append(point)
                every.append(point)
                angle += increment
            every.append((cx + rx, cy))
            every.append((cx + rx * math.cos(increment), cy + ry * math.sin(increment)))
            return every, core

        rad_offset = self.offset_opt(0.5) - math.pi / 2

        def jittered(scale: float, angle: float) -> Point:
            return (
                self.offset_opt(offset) + cx + scale * rx * math.cos(angle),
                self.offset_opt(offset) + cy + scale * ry * math.sin(angle),
            )

        every.append(jittered(0.9, rad_offset - increment))
        end_angle = math.pi * 2 + rad_offset - 0.01
        angle = rad_offset
        while angle < end_angle:
            point = jittered(1.0, angle)
            core.append(point)
            every.append(point)
            angle += increment
        every.append(jittered(1.0, rad_offset + math.pi * 2 + overlap * 0.5))
        every.append(jittered(0.98, rad_offset + overlap))
        every.append(jittered(0.9, rad_offset + overlap * 0.5))
        return every, core

    def ellipse(
        self, cx: float, cy: float, params: Tuple[float, float, float]
    ) -> Tuple[List[SketchOp], List[Point]]:
        increment, rx, ry = params
        overlap = increment * self.offset(0.1, self.offset(0.4, 1.0))
        every, core = self.ellipse_points(increment, cx, cy, rx, ry, 1.0, overlap)
        ops = self.curve_through(every)
        if not self.o.disable_multi_stroke and self.o.roughness != 0:
            second, _ = self.ellipse_points(increment, cx, cy, rx, ry, 1.5, 0.0)
            ops += self.curve_through(second)
        return ops, core

    def solid_fill(self, points: Sequence[Point]) -> SketchPass:
        ops: List[SketchOp] = []
        if len(points) > 2:
            offset = self.o.max_randomness_offset
            first = points[0]
            ops.append(SketchOp(OP_MOVE, (first[0] + self.offset_opt(offset), first[1] + self.offset_opt(offset))))
            for point in points[1:]:
                ops.append(
                    SketchOp(OP_LINE, (point[0] + self.offset_opt(offset), point[1] + self.offset_opt(offset)))
                )
        return SketchPass(PASS_FILL, ops)

    def hachure_fill(self, points: Sequence[Point]) -> SketchPass:
        gap = self.o.hachure_gap
        if gap < 0:
            gap = self.o.stroke_width * 4
        gap = max(gap, 0.1)
        angles = [self.o.hachure_angle + 90]
        if self.o.fill_style == "cross-hatch":
            angles.append(self.o.hachure_angle + 180)
        ops: List[SketchOp] = []
        for angle in angles:
            for start, end in _hachure_lines(points, gap, angle):
                ops.extend(self.double_line(start[0], start[1], end[0], end[1], filling=True))
        return SketchPass(PASS_FILL_SKETCH, ops)

    def fill(self, points: Sequence[Point]) -> SketchPass:
        if self.o.fill_style == "solid":
            return self.solid_fill(points)
        return self.hachure_fill(points)


def _rotate(point: Point, degrees: float) -> Point:
    rad = math.radians(degrees)
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)
    x, y = point
    return x * cos_a - y * sin_a, x * sin_a + y * cos_a


def _hachure_lines(polygon: Sequence[Point], gap: float, angle: float) -> List[Tuple[Point, Point]]:
    """Parallel scan lines clipped to ``polygon`` at ``angle`` degrees."""
    if len(polygon) < 3:
        return []
    rotated = [_rotate(point, angle) for point in polygon]
    edges = list(zip(rotated, rotated[1:] + rotated[:1]))
    min_y = min(y for _, y in rotated)
    max_y = max(y for _, y in rotated)

    segments: List[Tuple[Point, Point]] = []
    y = min_y + gap / 2
    while y < max_y:
        crossings: List[float] = []
        for (x1, y1), (x2, y2) in edges:
            if y1 == y2:
                continue
            if (y1 <= y < y2) or (y2 <= y < y1):
                crossings.append(x1 + (y - y1) * (x2 - x1) / (y2 - y1))
        crossings.sort()
        for index in range(0, len(crossings) - 1, 2):
            start = _rotate((crossings[index], y), -angle)
            end = _rotate((crossings[index + 1], y), -angle)
            segments.append((start, end))
        y += gap
    return segments


class SketchGenerator:
    """Produces sketch passes for primitive shapes.

    ``generate(kind, geometry, options)`` is the single entry point; geometry
    is ``(x, y, width, height)`` for rectangles, ``(cx, cy, width, height)``
    for ellipses, ``(x1, y1, x2, y2)`` for lines and a point sequence for
    polygons, linear paths and curves.
    """

    def __init__(self) -> None:
        self._builders: Dict[str, Callable[[Sequence, SketchOptions], List[SketchPass]]] = {
            "rectangle": self._rectangle,
            "ellipse": self._ellipse,
            "polygon": self._polygon,
            "line": self._line,
            "linear_path": self._linear_path,
            "curve": self._curve,
        }

    def generate(self, kind: str, geometry: Sequence, options: SketchOptions) -> Drawable:
        builder = self._builders.get(kind)
        if builder is None:
            raise ValueError(f"unsupported sketch shape: {kind}")
        return Drawable(shape=kind, sets=builder(geometry, options), options=options)

    def _rectangle(self, geometry: Sequence, options: SketchOptions) -> List[SketchPass]:
        x, y, width, height = geometry
        corners = [(x, y), (x + width, y), (x + width, y + height), (x, y + height)]
        return self._polygon(corners, options)

    def _polygon(self, geometry: Sequence, options: SketchOptions) -> List[SketchPass]:
        points = [(float(px), float(py)) for px, py in geometry]
        sketcher = _Sketcher(options)
        outline = SketchPass(PASS_STROKE, sketcher.linear_path(points, close=True))
        passes: List[SketchPass] = []
        if options.fill:
            passes.append(sketcher.fill(points))
        passes.append(outline)
        return passes

    def _ellipse(self, geometry: Sequence, options: SketchOptions) -> List[SketchPass]:
        cx, cy, width, height = geometry
        sketcher = _Sketcher(options)
        params = sketcher.ellipse_params(width, height)
        outline_ops, core = sketcher.ellipse(cx, cy, params)
        passes: List[SketchPass] = []
        if options.fill:
            if options.fill_style == "solid":
                fill_ops, _ = sketcher.ellipse(cx, cy, params)
                passes.append(SketchPass(PASS_FILL, fill_ops))
            else:
                passes.append(sketcher.hachure_fill(core))
        passes.append(SketchPass(PASS_STROKE, outline_ops))
        return passes

    def _line(self, geometry: Sequence, options: SketchOptions) -> List[SketchPass]:
        x1, y1, x2, y2 = geometry
        return [SketchPass(PASS_STROKE, _Sketcher(options).double_line(x1, y1, x2, y2))]

    def _linear_path(self, geometry: Sequence, options: SketchOptions) -> List[SketchPass]:
        points = [(float(px), float(py)) for px, py in geometry]
        return [SketchPass(PASS_STROKE, _Sketcher(options).linear_path(points, close=False))]

    def _curve(self, geometry: Sequence, options: SketchOptions) -> List[SketchPass]:
        points = [(float(px), float(py)) for px, py in geometry]
        if len(points) < 2:
            return [SketchPass(PASS_STROKE, [])]
        sketcher = _Sketcher(options)
        ops = sketcher.curve_with_offset(points, 1 * (1 + options.roughness * 0.2))
        if not options.disable_multi_stroke:
            ops += sketcher.reseeded().curve_with_offset(points, 1.5 * (1 + options.roughness * 0.22))
        return [SketchPass(PASS_STROKE, ops)]
