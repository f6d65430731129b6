from .canvas import RGBA, blit, fill_rect, new_canvas
from .draw_text import DEFAULT_FONT_FAMILY, draw_text, text_size

__all__ = [
    "DEFAULT_FONT_FAMILY",
    "RGBA",
    "blit",
    "draw_text",
    "fill_rect",
    "new_canvas",
    "text_size",
]
