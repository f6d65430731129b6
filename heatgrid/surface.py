from __future__ import annotations

from typing import Protocol

import numpy as np

from heatgrid.gradient import RGB
from heatgrid.options import FontSpec
from heatgrid.raster import blit, draw_text, fill_rect, new_canvas


class DrawingSurface(Protocol):
    """Backend-agnostic drawing target the renderer issues its calls against."""

    def fill_rect(self, x: int, y: int, width: int, height: int, color: RGB) -> None:
        ...

    def draw_text(self, x: int, y: int, text: str, font: FontSpec, color: RGB, rotate_deg: int = 0) -> None:
        """Draw ``text`` with its rotated box's top-left corner at ``(x, y)``."""
        ...

    def draw_image(self, x: int, y: int, image_h_w_4: np.ndarray) -> None:
        ...

    def to_rgba(self) -> np.ndarray:
        ...


class RasterSurface:
    """Numpy RGBA canvas surface backed by the Pillow text rasterizer."""

    def __init__(self, width: int, height: int, background: RGB = (255, 255, 255)) -> None:
        self.width = width
        self.height = height
        self._canvas = new_canvas(width, height, (*background, 255))

    def fill_rect(self, x: int, y: int, width: int, height: int, color: RGB) -> None:
        fill_rect(self._canvas, x, y, width, height, (*color, 255))

    def draw_text(self, x: int, y: int, text: str, font: FontSpec, color: RGB, rotate_deg: int = 0) -> None:
        draw_text(
            self._canvas,
            x,
            y,
            text,
            (*color, 255),
            font_family=font.family,
            font_size_px=font.size_px,
            embolden_px=font.embolden_px,
            rotate_deg=rotate_deg,
        )

    def draw_image(self, x: int, y: int, image_h_w_4: np.ndarray) -> None:
        blit(self._canvas, image_h_w_4, x, y)

    def to_rgba(self) -> np.ndarray:
        return self._canvas.copy()
