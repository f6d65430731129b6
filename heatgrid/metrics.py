from __future__ import annotations

from typing import Protocol, Sequence

from heatgrid.options import FontSpec
from heatgrid.raster.draw_text import text_size


class TextMeasurer(Protocol):
    def measure(self, text: str, font: FontSpec) -> tuple[int, int]:
        """Return ``(width, height)`` of ``text`` drawn unrotated; empty text is ``(0, 0)``."""
        ...


class RasterTextMeasurer:
    """Measures text with the same Pillow fonts the raster surface draws with."""

    def measure(self, text: str, font: FontSpec) -> tuple[int, int]:
        w, h = text_size(text, font_family=font.family, font_size_px=font.size_px)
        if w > 0 and font.embolden_px > 1:
            # emboldening smears glyphs right by embolden_px - 1 pixels
            w += font.embolden_px - 1
        return (w, h)


def max_text_size(measurer: TextMeasurer, texts: Sequence[str], font: FontSpec) -> tuple[int, int]:
    """Largest width and largest height over ``texts``; ``(0, 0)`` when there is nothing to measure."""
    max_w = 0
    max_h = 0
    for text in texts:
        w, h = measurer.measure(text, font)
        max_w = max(max_w, w)
        max_h = max(max_h, h)
    return (max_w, max_h)
