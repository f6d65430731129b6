from __future__ import annotations

from functools import lru_cache
import logging
import math
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from heatgrid.raster.canvas import RGBA


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 20.0
SANS_FONT_FALLBACK_PATTERNS = (
    "calibri",
    "dejavusans",
    "liberationsans",
    "helvetica",
    "arial",
    "verdana",
)
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
    Path("C:/Windows/Fonts"),
)
FONT_SUFFIXES = (".ttf", ".otf", ".ttc")

FontLike = ImageFont.FreeTypeFont | ImageFont.ImageFont


def draw_text(
    dst: np.ndarray,
    x: int,
    y: int,
    text: str,
    color: RGBA,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    embolden_px: int = 1,
    rotate_deg: int = 0,
) -> None:
    """Draw ``text`` with its (rotated) line box anchored at top-left ``(x, y)``."""
    if not text:
        return
    font = _load_font(font_family, font_size_px)
    coverage = _glyph_coverage(text, font)
    if embolden_px > 1:
        coverage = _smear_right(coverage, embolden_px - 1)
    turns = _quarter_turns(rotate_deg)
    if turns:
        coverage = np.rot90(coverage, k=turns)
    _composite_coverage(dst, x, y, coverage, color)


def text_size(
    text: str,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    rotate_deg: int = 0,
) -> tuple[int, int]:
    """Advance width and line height of ``text``; empty text measures as ``(0, 0)``."""
    if not text:
        return (0, 0)
    font = _load_font(font_family, font_size_px)
    w = _advance_width(text, font)
    h = _line_height(font)
    if _quarter_turns(rotate_deg) % 2 == 1:
        return (h, w)
    return (w, h)


def _advance_width(text: str, font: FontLike) -> int:
    return max(0, int(math.ceil(font.getlength(text))))


def _line_height(font: FontLike) -> int:
    if isinstance(font, ImageFont.FreeTypeFont):
        ascent, descent = font.getmetrics()
        return max(1, int(ascent + descent))
    # bitmap fallback fonts expose no metrics
    return max(1, int(font.getbbox("Ag")[3]))


@lru_cache(maxsize=256)
def _glyph_coverage(text: str, font: FontLike) -> np.ndarray:
    """Anti-aliased coverage of one line of text, one byte per pixel, origin at the line's top-left."""
    image = Image.new("L", (max(1, _advance_width(text, font)), _line_height(font)), 0)
    ImageDraw.Draw(image).text((0, 0), text, fill=255, font=font)
    coverage = np.asarray(image, dtype=np.uint8)
    coverage.flags.writeable = False
    return coverage


def _smear_right(coverage: np.ndarray, px: int) -> np.ndarray:
    out = np.pad(coverage, ((0, 0), (0, px)))
    for shift in range(1, px + 1):
        np.maximum(out[:, shift : shift + coverage.shape[1]], coverage, out=out[:, shift : shift + coverage.shape[1]])
    return out


def _composite_coverage(dst: np.ndarray, x: int, y: int, coverage: np.ndarray, color: RGBA) -> None:
    h, w = coverage.shape
    top, left = max(0, y), max(0, x)
    bottom, right = min(dst.shape[0], y + h), min(dst.shape[1], x + w)
    if bottom <= top or right <= left:
        return

    alpha = coverage[top - y : bottom - y, left - x : right - x].astype(np.float32) * (color[3] / (255.0 * 255.0))
    if not np.any(alpha > 0):
        return
    alpha = alpha[:, :, None]
    region = dst[top:bottom, left:right]
    ink = np.asarray(color[:3], dtype=np.float32)
    region[:, :, :3] = np.rint(ink * alpha + region[:, :, :3].astype(np.float32) * (1.0 - alpha)).astype(np.uint8)
    region[:, :, 3] = np.maximum(region[:, :, 3], np.rint(alpha[:, :, 0] * 255.0).astype(np.uint8))


@lru_cache(maxsize=64)
def _load_font(font_family: str, font_size_px: float) -> FontLike:
    size = max(1, int(round(font_size_px)))
    path = _resolve_font_path(font_family)
    if path is None:
        LOGGER.warning("no font file matched %r; using Pillow's default font", font_family)
        return ImageFont.load_default(size=size)
    try:
        return ImageFont.truetype(str(path), size=size)
    except OSError as exc:
        LOGGER.warning("failed to load font %s (%s); using Pillow's default font", path, exc)
        return ImageFont.load_default(size=size)


@lru_cache(maxsize=1)
def _installed_fonts() -> tuple[Path, ...]:
    found = [
        path
        for base in FONT_DIRS
        if base.is_dir()
        for path in base.rglob("*")
        if path.suffix.lower() in FONT_SUFFIXES
    ]
    return tuple(sorted(found))


def _resolve_font_path(font_family: str) -> Path | None:
    """Exact file-stem match first, then prefix match, trying the sans fallbacks in order."""
    wanted = font_family.strip() or DEFAULT_FONT_FAMILY
    fonts = [(path.stem.lower().replace(" ", ""), path) for path in _installed_fonts()]
    for pattern in (wanted.lower(),) + SANS_FONT_FALLBACK_PATTERNS:
        key = pattern.replace(" ", "")
        exact = next((path for stem, path in fonts if stem == key), None)
        if exact is not None:
            return exact
        prefixed = next((path for stem, path in fonts if stem.startswith(key)), None)
        if prefixed is not None:
            return prefixed
    return None


def _quarter_turns(rotate_deg: int) -> int:
    if rotate_deg % 90 != 0:
        raise ValueError("rotate_deg must be a multiple of 90")
    return (rotate_deg // 90) % 4
