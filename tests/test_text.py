from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from excalidraw_export.document import Element
from excalidraw_export.text import escape_xml, layout_text, split_lines, text_block_to_svg


def _text(**kwargs) -> Element:
    base = dict(type="text", x=10.0, y=20.0, width=100.0, height=50.0, text="Hello", font_size=20.0)
    base.update(kwargs)
    return Element(**base)


class LayoutTests(unittest.TestCase):
    def test_left_top_defaults(self) -> None:
        block = layout_text(_text())
        self.assertEqual((block.x, block.y, block.anchor), (10.0, 40.0, "start"))
        self.assertEqual(block.line_height, 25.0)

    def test_center_and_right_alignment(self) -> None:
        center = layout_text(_text(text_align="center"))
        right = layout_text(_text(text_align="right"))
        self.assertEqual((center.x, center.anchor), (60.0, "middle"))
        self.assertEqual((right.x, right.anchor), (110.0, "end"))

    def test_middle_vertical_alignment_centers_block(self) -> None:
        block = layout_text(_text(text="a\nb", vertical_align="middle", height=100.0))
        # block height 50 centered in 100 -> top at y + 25, baseline one font size lower
        self.assertEqual(block.y, 20.0 + 25.0 + 20.0)

    def test_middle_without_height_falls_back_to_top(self) -> None:
        block = layout_text(_text(vertical_align="middle", height=0.0))
        self.assertEqual(block.y, 40.0)

    def test_lines_split_on_any_newline(self) -> None:
        self.assertEqual(split_lines("a\r\nb\nc"), ["a", "b", "c"])
        self.assertEqual(layout_text(_text(text="one\ntwo\nthree")).lines, ("one", "two", "three"))

    def test_unknown_family_uses_hand_drawn_face(self) -> None:
        self.assertIn("Virgil", layout_text(_text(font_family=99)).font_family)
        self.assertIn("sans-serif", layout_text(_text(font_family=2)).font_family)


class EmitTests(unittest.TestCase):
    def test_one_tspan_per_line(self) -> None:
        svg = text_block_to_svg(layout_text(_text(text="Line 1\nLine 2")), "#000")
        self.assertEqual(svg.count("<tspan"), 2)
        self.assertIn('dy="0"', svg)
        self.assertIn('dy="25"', svg)

    def test_special_characters_are_escaped(self) -> None:
        svg = text_block_to_svg(layout_text(_text(text='A < B & C > "D"')), "#000")
        self.assertIn("A &lt; B &amp; C &gt; &quot;D&quot;", svg)

    def test_escape_xml(self) -> None:
        self.assertEqual(escape_xml('<a href="x">&</a>'), "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;")
        self.assertEqual(escape_xml("plain"), "plain")


if __name__ == "__main__":
    unittest.main()
