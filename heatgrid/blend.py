from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

import numpy as np
from PIL import Image

from heatgrid.axis import Axis
from heatgrid.data import DataPoint, ValueBounds
from heatgrid.errors import HeatmapConfigError
from heatgrid.gradient import Gradient, get_color
from heatgrid.layout import locate_points
from heatgrid.options import BLEND_SCALE_MAX, BLEND_SCALE_MIN


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlendResult:
    """Every stage of the smoothing pass as ``(H, W, 4)`` uint8 RGBA arrays."""

    miniature: np.ndarray
    mask: np.ndarray
    bilinear: np.ndarray
    masked: np.ndarray
    final: np.ndarray


def blend_cells(
    points: Sequence[DataPoint],
    x_axis: Axis,
    y_axis: Axis,
    gradient: Gradient,
    bounds: ValueBounds,
    *,
    scale: int,
    target_size: tuple[int, int],
) -> BlendResult:
    """Produce a smoothly blended heat map bitmap of ``target_size`` ``(width, height)``.

    The miniature holds one pixel per cell and is upscaled bilinearly by ``scale``. An
    opacity mask at the same intermediate size restores hard edges around cells without
    data, then a nearest-neighbour upscale brings the result to the grid's pixel size.
    """
    if scale < BLEND_SCALE_MIN or scale > BLEND_SCALE_MAX:
        raise HeatmapConfigError(
            f"the colour blend scale must be between {BLEND_SCALE_MIN} and {BLEND_SCALE_MAX}, inclusive"
        )
    target_w, target_h = target_size
    if target_w <= 0 or target_h <= 0:
        raise HeatmapConfigError("blend target width/height must be > 0")

    x_count = x_axis.count
    y_count = y_axis.count
    mid_w = x_count * scale
    mid_h = y_count * scale

    miniature = np.zeros((y_count, x_count, 4), dtype=np.uint8)
    mask = np.zeros((mid_h, mid_w, 4), dtype=np.uint8)
    for lp in locate_points(points, x_axis, y_axis):
        if lp.point.value is None:
            continue
        r, g, b = get_color(gradient, bounds.normalize(lp.point.value))
        miniature[lp.iy, lp.ix] = (r, g, b, 255)
        mask[lp.iy * scale : (lp.iy + 1) * scale, lp.ix * scale : (lp.ix + 1) * scale] = 255

    bilinear = np.array(
        Image.fromarray(miniature).resize((mid_w, mid_h), resample=Image.Resampling.BILINEAR),
        dtype=np.uint8,
    )

    # destination-in: keep the smoothed colour, multiply its alpha by the mask's
    masked = bilinear.copy()
    masked[:, :, 3] = (bilinear[:, :, 3].astype(np.uint16) * mask[:, :, 3].astype(np.uint16) // 255).astype(np.uint8)

    final = np.array(
        Image.fromarray(masked).resize((target_w, target_h), resample=Image.Resampling.NEAREST),
        dtype=np.uint8,
    )
    LOGGER.debug(
        "blended %dx%d cells via %dx%d intermediate to %dx%d",
        x_count,
        y_count,
        mid_w,
        mid_h,
        target_w,
        target_h,
    )
    return BlendResult(miniature=miniature, mask=mask, bilinear=bilinear, masked=masked, final=final)
