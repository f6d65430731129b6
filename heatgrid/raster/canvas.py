from __future__ import annotations

import numpy as np


RGBA = tuple[int, int, int, int]


def new_canvas(width: int, height: int, color: RGBA = (255, 255, 255, 255)) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("canvas width/height must be > 0")
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def _clip_rect(dst: np.ndarray, x: int, y: int, width: int, height: int) -> tuple[int, int, int, int] | None:
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(dst.shape[1], x + width)
    y1 = min(dst.shape[0], y + height)
    if x1 <= x0 or y1 <= y0:
        return None
    return x0, y0, x1, y1


def fill_rect(dst: np.ndarray, x: int, y: int, width: int, height: int, color: RGBA) -> None:
    clipped = _clip_rect(dst, x, y, width, height)
    if clipped is None:
        return
    x0, y0, x1, y1 = clipped
    patch = dst[y0:y1, x0:x1]
    if color[3] >= 255:
        patch[:, :] = np.asarray(color, dtype=np.uint8)
        return
    a = color[3] / 255.0
    inv = 1.0 - a
    patch[:, :, :3] = (np.asarray(color[0:3], dtype=np.float32) * a + patch[:, :, :3].astype(np.float32) * inv).astype(np.uint8)
    patch[:, :, 3] = 255


def blit(dst: np.ndarray, src: np.ndarray, x0: int = 0, y0: int = 0) -> None:
    h, w, _ = src.shape
    clipped = _clip_rect(dst, x0, y0, w, h)
    if clipped is None:
        return
    cx0, cy0, cx1, cy1 = clipped

    view = dst[cy0:cy1, cx0:cx1]
    patch = src[cy0 - y0 : cy1 - y0, cx0 - x0 : cx1 - x0]
    alpha = patch[:, :, 3:4].astype(np.float32) / 255.0
    inv = 1.0 - alpha
    view[:, :, :3] = (patch[:, :, :3] * alpha + view[:, :, :3] * inv).astype(np.uint8)
    view[:, :, 3] = 255
