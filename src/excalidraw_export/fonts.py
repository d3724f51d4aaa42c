"""Font family mapping and the embedded @font-face block."""
from __future__ import annotations

import base64
import os
import threading
from pathlib import Path
from typing import Optional

from .logger import get_logger
from .resources import FONT_FILE, load_font_bytes

LOGGER = get_logger(__name__)

FONT_ENV_VAR = "EXCALIDRAW_EXPORT_FONT"

FONT_FAMILIES = {
    1: "Virgil, Segoe UI Emoji, cursive",
    2: "Helvetica, Arial, sans-serif",
    3: "Cascadia, Fira Code, monospace",
}


def font_stack(family_id: Optional[int]) -> str:
    return FONT_FAMILIES.get(family_id, FONT_FAMILIES[1])


class FontProvider:
    """Loads the hand-drawn font once and serves it as an SVG style block.

    The font is read lazily on first use under a lock and cached for the
    life of the provider. A missing font file yields an empty block.
    """

    def __init__(self, font_path: Optional[Path] = None) -> None:
        self._font_path = font_path
        self._lock = threading.Lock()
        self._block: Optional[str] = None

    def style_block(self) -> str:
        if self._block is None:
            with self._lock:
                if self._block is None:
                    self._block = self._build_block()
        return self._block

    def _build_block(self) -> str:
        data = self._read_font()
        if not data:
            return ""
        encoded = base64.b64encode(data).decode("ascii")
        return (
            "<defs><style>\n"
            "@font-face {\n"
            "  font-family: 'Virgil';\n"
            f"  src: url('data:font/woff2;base64,{encoded}') format('woff2');\n"
            "  font-weight: normal;\n"
            "  font-style: normal;\n"
            "}\n"
            "</style></defs>"
        )

    def _read_font(self) -> bytes:
        path = self._font_path
        if path is None and os.getenv(FONT_ENV_VAR):
            path = Path(os.environ[FONT_ENV_VAR])
        try:
            if path is not None:
                return path.read_bytes()
            return load_font_bytes(FONT_FILE)
        except OSError as exc:
            LOGGER.debug("Font not embedded (%s): %s", path or FONT_FILE, exc)
            return b""


class NullFontProvider(FontProvider):
    """Provider that never embeds a font."""

    def style_block(self) -> str:
        return ""


DEFAULT_FONTS = FontProvider()
