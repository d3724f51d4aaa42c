from __future__ import annotations

import sys
import unittest
from pathlib import Path
from unittest import mock

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from excalidraw_export.document import FileResource, parse_element
from excalidraw_export.shapes import (
    ARROWHEAD_SEED_OFFSET,
    ops_to_path,
    passes_to_svg,
    render_element,
    sketch_options,
)
from excalidraw_export.sketch import Drawable, SketchGenerator, SketchOp, SketchOptions, SketchPass

BASE = {
    "seed": 42,
    "roughness": 1,
    "strokeWidth": 2,
    "strokeColor": "#1e1e1e",
    "backgroundColor": "transparent",
    "fillStyle": "solid",
    "strokeStyle": "solid",
    "opacity": 100,
    "angle": 0,
}


def _el(**kwargs):
    raw = dict(BASE)
    raw.update(kwargs)
    return parse_element(raw)


def _render(element, files=None, sketcher=None) -> str:
    return "\n".join(render_element(element, files or {}, sketcher or SketchGenerator()))


class PathConversionTests(unittest.TestCase):
    def test_ops_to_path(self) -> None:
        ops = [
            SketchOp("move", (1, 2)),
            SketchOp("lineTo", (3.456, 4)),
            SketchOp("bcurveTo", (1, 2, 3, 4, 5, 6)),
        ]
        self.assertEqual(
            ops_to_path(ops),
            "M1.00 2.00 L3.46 4.00 C1.00 2.00,3.00 4.00,5.00 6.00",
        )

    def test_empty_ops(self) -> None:
        self.assertEqual(ops_to_path([]), "")

    def test_pass_kinds_map_to_attributes(self) -> None:
        ops = [SketchOp("move", (0, 0)), SketchOp("lineTo", (10, 10))]
        drawable = Drawable(
            "rectangle",
            [SketchPass("path", ops), SketchPass("fillPath", ops), SketchPass("fillSketch", ops)],
            SketchOptions(stroke="#111111", stroke_width=4, fill="#eeeeee"),
        )
        stroke, fill, sketch = passes_to_svg(drawable)
        self.assertIn('stroke="#111111" stroke-width="4" fill="none"', stroke)
        self.assertIn('stroke="none" fill="#eeeeee"', fill)
        self.assertIn('stroke="#eeeeee" stroke-width="2"', sketch)

    def test_dash_applies_to_stroke_pass(self) -> None:
        drawable = Drawable(
            "line",
            [SketchPass("path", [SketchOp("move", (0, 0)), SketchOp("lineTo", (1, 1))])],
            SketchOptions(stroke_line_dash=(12.0, 8.0)),
        )
        self.assertIn('stroke-dasharray="12 8"', passes_to_svg(drawable)[0])

    def test_sketch_options_from_element(self) -> None:
        opts = sketch_options(_el(type="rectangle", backgroundColor="#ff0000", strokeStyle="dotted"))
        self.assertEqual(opts.fill, "#ff0000")
        self.assertEqual(opts.stroke_line_dash, (3.0, 6.0))
        self.assertEqual(opts.bowing, 1.0)
        self.assertEqual(sketch_options(_el(type="rectangle", roughness=0)).bowing, 0.0)


class RectangleTests(unittest.TestCase):
    def test_sketched_rectangle(self) -> None:
        svg = _render(_el(type="rectangle", x=10, y=20, width=100, height=50))
        self.assertIn("<path", svg)
        self.assertIn('stroke="#1e1e1e"', svg)

    def test_clean_rounded_rectangle_bypasses_generator(self) -> None:
        sketcher = mock.Mock(spec=SketchGenerator)
        el = _el(
            type="rectangle", x=10, y=20, width=100, height=50,
            roughness=0, roundness={"type": 3}, backgroundColor="#a5d8ff",
        )
        svg = _render(el, sketcher=sketcher)
        sketcher.generate.assert_not_called()
        self.assertEqual(svg.count("<rect"), 2)
        self.assertIn('rx="12.5"', svg)
        self.assertIn('fill="#a5d8ff" stroke="none"', svg)

    def test_clean_rectangle_without_fill_is_single_stroke(self) -> None:
        el = _el(type="rectangle", width=80, height=40, roughness=0, roundness={"type": 3}, strokeStyle="dashed")
        svg = _render(el)
        self.assertEqual(svg.count("<rect"), 1)
        self.assertIn('stroke-dasharray="12 8"', svg)

    def test_rough_rectangle_uses_generator(self) -> None:
        sketcher = mock.Mock(wraps=SketchGenerator())
        _render(_el(type="rectangle", x=0, y=0, width=80, height=40, roundness={"type": 3}), sketcher=sketcher)
        sketcher.generate.assert_called_once()
        self.assertEqual(sketcher.generate.call_args[0][0], "rectangle")

    def test_sketched_rectangle_is_deterministic(self) -> None:
        el = _el(type="rectangle", x=0, y=0, width=80, height=40, backgroundColor="#ff0000", fillStyle="hachure")
        self.assertEqual(_render(el), _render(el))


class ClosedShapeTests(unittest.TestCase):
    def test_ellipse_centered_on_element(self) -> None:
        sketcher = mock.Mock(wraps=SketchGenerator())
        svg = _render(_el(type="ellipse", x=50, y=50, width=100, height=60), sketcher=sketcher)
        self.assertIn("<path", svg)
        kind, geometry, _ = sketcher.generate.call_args[0]
        self.assertEqual(kind, "ellipse")
        self.assertEqual(tuple(geometry), (100.0, 80.0, 100.0, 60.0))

    def test_diamond_vertices(self) -> None:
        sketcher = mock.Mock(wraps=SketchGenerator())
        svg = _render(_el(type="diamond", x=0, y=0, width=80, height=40), sketcher=sketcher)
        self.assertIn("<path", svg)
        kind, vertices, _ = sketcher.generate.call_args[0]
        self.assertEqual(kind, "polygon")
        self.assertEqual(list(vertices), [(40.0, 0.0), (80.0, 20.0), (40.0, 40.0), (0.0, 20.0)])


class LineTests(unittest.TestCase):
    def test_straight_line_has_no_arrowheads(self) -> None:
        svg = _render(_el(type="line", x=0, y=0, points=[[0, 0], [100, 0]]))
        self.assertIn("<path", svg)
        self.assertNotIn("arrowhead", svg)

    def test_end_arrowhead_only(self) -> None:
        svg = _render(_el(type="arrow", x=0, y=0, points=[[0, 0], [100, 0]], endArrowhead="arrow"))
        self.assertEqual(svg.count('class="arrowhead'), 1)
        self.assertIn("arrowhead-end", svg)
        self.assertNotIn("arrowhead-start", svg)
        self.assertGreaterEqual(svg.count("<path"), 2)

    def test_line_honors_arrowhead_flag(self) -> None:
        svg = _render(_el(type="line", x=0, y=0, points=[[0, 0], [100, 0]], endArrowhead="arrow"))
        self.assertEqual(svg.count('class="arrowhead'), 1)

    def test_bidirectional_arrow(self) -> None:
        svg = _render(
            _el(type="arrow", x=0, y=0, points=[[0, 0], [100, 0]], startArrowhead="arrow", endArrowhead="arrow")
        )
        self.assertIn("arrowhead-start", svg)
        self.assertIn("arrowhead-end", svg)
        self.assertGreaterEqual(svg.count("<path"), 3)

    def test_clean_arrowhead_is_single_polyline(self) -> None:
        svg = _render(_el(type="arrow", x=0, y=0, roughness=0, points=[[0, 0], [100, 0]], endArrowhead="arrow"))
        head = svg[svg.index('class="arrowhead'):]
        self.assertEqual(head.count("<path"), 1)
        self.assertRegex(head, r'd="M87\.01 7\.50 L100\.00 0\.00 L87\.01 -7\.50"')

    def test_clean_start_arrowhead_points_back_along_first_segment(self) -> None:
        svg = _render(
            _el(type="arrow", x=0, y=0, roughness=0, points=[[0, 0], [100, 0]], startArrowhead="arrow", endArrowhead=None)
        )
        self.assertNotIn("arrowhead-end", svg)
        self.assertRegex(
            svg, r'<g class="arrowhead arrowhead-start"><path d="M12\.99 -7\.50 L0\.00 0\.00 L12\.99 7\.50"'
        )

    def test_arrowheads_follow_their_own_segments(self) -> None:
        svg = _render(
            _el(
                type="arrow",
                x=0,
                y=0,
                roughness=0,
                points=[[0, 0], [0, 100], [100, 100]],
                startArrowhead="arrow",
                endArrowhead="arrow",
            )
        )
        self.assertRegex(
            svg, r'<g class="arrowhead arrowhead-start"><path d="M7\.50 12\.99 L0\.00 0\.00 L-7\.50 12\.99"'
        )
        self.assertRegex(
            svg, r'<g class="arrowhead arrowhead-end"><path d="M87\.01 107\.50 L100\.00 100\.00 L87\.01 92\.50"'
        )

    def test_rough_arrowhead_uses_offset_seed(self) -> None:
        sketcher = mock.Mock(wraps=SketchGenerator())
        _render(_el(type="arrow", x=0, y=0, points=[[0, 0], [100, 0]], endArrowhead="arrow"), sketcher=sketcher)
        seeds = [call[0][2].seed for call in sketcher.generate.call_args_list]
        self.assertEqual(seeds, [42, 42 + ARROWHEAD_SEED_OFFSET, 42 + ARROWHEAD_SEED_OFFSET])

    def test_multi_point_linear_and_curved(self) -> None:
        sketcher = mock.Mock(wraps=SketchGenerator())
        _render(_el(type="line", x=0, y=0, points=[[0, 0], [50, 50], [100, 0]]), sketcher=sketcher)
        self.assertEqual(sketcher.generate.call_args[0][0], "linear_path")
        svg = _render(
            _el(type="line", x=0, y=0, points=[[0, 0], [50, 50], [100, 0]], roundness={"type": 2}),
            sketcher=sketcher,
        )
        self.assertEqual(sketcher.generate.call_args[0][0], "curve")
        self.assertIn("C", svg)

    def test_insufficient_points(self) -> None:
        self.assertEqual(render_element(_el(type="line", points=[[0, 0]]), {}, SketchGenerator()), [])
        self.assertEqual(render_element(_el(type="arrow"), {}, SketchGenerator()), [])


class FreedrawTests(unittest.TestCase):
    def test_polyline_through_points(self) -> None:
        svg = _render(_el(type="freedraw", x=10, y=10, points=[[0, 0], [5, 10], [15, 20]]))
        self.assertIn('d="M10.00 10.00 L15.00 20.00 L25.00 30.00"', svg)
        self.assertIn('fill="none"', svg)

    def test_bypasses_generator(self) -> None:
        sketcher = mock.Mock(spec=SketchGenerator)
        _render(_el(type="freedraw", points=[[0, 0], [1, 1]], backgroundColor="#ff0000"), sketcher=sketcher)
        sketcher.generate.assert_not_called()

    def test_insufficient_points(self) -> None:
        self.assertEqual(render_element(_el(type="freedraw", points=[[0, 0]]), {}, SketchGenerator()), [])


class TextShapeTests(unittest.TestCase):
    def test_text_element(self) -> None:
        svg = _render(_el(type="text", x=10, y=20, width=100, height=24, text="Hello", fontSize=20, fontFamily=1))
        self.assertIn("<text", svg)
        self.assertIn("Hello", svg)
        self.assertIn("Virgil", svg)

    def test_monospace_family(self) -> None:
        svg = _render(_el(type="text", x=0, y=0, width=10, height=10, text="code", fontFamily=3))
        self.assertIn("Cascadia", svg)


class ImageTests(unittest.TestCase):
    def test_image_with_resource(self) -> None:
        files = {"img1": FileResource("img1", "image/png", "data:image/png;base64,abc123")}
        svg = _render(_el(type="image", x=10, y=20, width=200, height=150, fileId="img1"), files=files)
        self.assertIn("<image", svg)
        self.assertIn("data:image/png;base64,abc123", svg)
        self.assertIn('width="200"', svg)
        self.assertIn('height="150"', svg)
        self.assertNotIn("stroke", svg)

    def test_missing_resource_is_skipped(self) -> None:
        el = _el(type="image", x=10, y=20, width=200, height=150, fileId="missing")
        self.assertEqual(render_element(el, {}, SketchGenerator()), [])
        self.assertEqual(render_element(el, None, SketchGenerator()), [])


class FrameTests(unittest.TestCase):
    def test_frame_with_label(self) -> None:
        svg = _render(_el(type="frame", x=10, y=20, width=400, height=300, name="My Frame"))
        self.assertIn("<rect", svg)
        self.assertIn("stroke-dasharray", svg)
        self.assertIn('fill="none"', svg)
        self.assertIn(">My Frame</text>", svg)
        self.assertIn('y="14.00"', svg)

    def test_frame_without_label(self) -> None:
        svg = _render(_el(type="frame", x=10, y=20, width=400, height=300))
        self.assertIn("<rect", svg)
        self.assertNotIn("<text", svg)


class DispatchTests(unittest.TestCase):
    def test_unknown_type_is_skipped(self) -> None:
        self.assertEqual(render_element(_el(type="embeddable"), {}, SketchGenerator()), [])


if __name__ == "__main__":
    unittest.main()
