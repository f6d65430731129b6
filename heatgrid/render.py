from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image

from heatgrid.axis import Axis
from heatgrid.blend import blend_cells
from heatgrid.data import DataPoint, compute_value_bounds, normalize_points
from heatgrid.gradient import RGB, get_color
from heatgrid.layout import LayoutResult, compute_layout, locate_points
from heatgrid.metrics import RasterTextMeasurer, TextMeasurer
from heatgrid.options import DEFAULT_OPTIONS, LayoutOptions, validate_options
from heatgrid.surface import DrawingSurface, RasterSurface


LOGGER = logging.getLogger(__name__)

WHITE: RGB = (255, 255, 255)
LIGHT_GREY: RGB = (210, 210, 210)
# A gradient whose top colour is brighter than this on every channel vanishes on white.
BRIGHT_CHANNEL_THRESHOLD = 240


def resolve_background(options: LayoutOptions) -> RGB:
    if options.background_color is not None:
        return options.background_color
    top = get_color(options.gradient, 1.0)
    if all(channel > BRIGHT_CHANNEL_THRESHOLD for channel in top):
        return LIGHT_GREY
    return WHITE


class HeatMap:
    """Heat map chart over two categorical axes.

    ``layout`` computes geometry only, ``render`` draws onto a surface in a fixed order:
    background, title, legend, axis titles, axis labels, cells, in-cell values, gridlines.
    """

    def __init__(
        self,
        x_axis: Axis,
        y_axis: Axis,
        title: str = "",
        options: LayoutOptions | None = DEFAULT_OPTIONS,
        *,
        measurer: TextMeasurer | None = None,
    ) -> None:
        self.x_axis = x_axis
        self.y_axis = y_axis
        self.title = title or ""
        self.options = options
        self.measurer = measurer or RasterTextMeasurer()

    def layout(self, data: Any) -> LayoutResult:
        points = normalize_points(data)
        return self._layout(points)

    def render(self, data: Any, surface: DrawingSurface | None = None) -> np.ndarray:
        points = normalize_points(data)
        layout = self._layout(points)
        options = self.options
        if surface is None:
            surface = RasterSurface(layout.image_width, layout.image_height, resolve_background(options))
        LOGGER.debug(
            "rendering heat map %dx%d with %d data points",
            layout.image_width,
            layout.image_height,
            len(points),
        )
        self.draw(points, layout, surface)
        return surface.to_rgba()

    def save_png(self, path: str | Path, data: Any) -> Path:
        out_path = Path(path)
        frame = self.render(data)
        Image.fromarray(frame).save(out_path, format="PNG")
        return out_path

    def draw(self, points: list[DataPoint], layout: LayoutResult, surface: DrawingSurface) -> None:
        options = self.options
        gradient = options.gradient

        surface.fill_rect(0, 0, layout.image_width, layout.image_height, resolve_background(options))

        for line in layout.title_placements:
            surface.draw_text(line.x, line.y, line.text, options.title_font, options.title_color)

        for entry in layout.legend_entries:
            box = entry.box
            surface.fill_rect(box.x, box.y, box.width, box.height, get_color(gradient, entry.color_factor))
        for rect in layout.legend_frame_rects():
            surface.fill_rect(rect.x, rect.y, rect.width, rect.height, options.gridline_color)
        for entry in layout.legend_entries:
            label = entry.label_placement
            if label is not None:
                surface.draw_text(label.x, label.y, label.text, options.legend_label_font, options.legend_label_color)

        for axis_title in (layout.x_title, layout.y_title):
            if axis_title is not None:
                surface.draw_text(
                    axis_title.x,
                    axis_title.y,
                    axis_title.text,
                    options.axis_title_font,
                    options.axis_title_color,
                    rotate_deg=axis_title.rotate_deg,
                )

        for label in (*layout.x_labels, *layout.y_labels):
            surface.draw_text(
                label.x,
                label.y,
                label.text,
                options.axis_label_font,
                options.axis_label_color,
                rotate_deg=label.rotate_deg,
            )

        if options.blend_colors:
            LOGGER.debug("drawing cells through the blend pass at scale %d", options.blend_scale)
            grid = layout.grid
            blended = blend_cells(
                points,
                self.x_axis,
                self.y_axis,
                gradient,
                layout.bounds,
                scale=options.blend_scale,
                target_size=(grid.width, grid.height),
            )
            surface.draw_image(grid.x, grid.y, blended.final)
        else:
            for lp in locate_points(points, self.x_axis, self.y_axis):
                if lp.point.value is None:
                    continue
                cell = layout.cell_rect(lp.ix, lp.iy)
                color = get_color(gradient, layout.bounds.normalize(lp.point.value))
                surface.fill_rect(cell.x, cell.y, cell.width, cell.height, color)

        for value in layout.grid_values:
            surface.draw_text(value.x, value.y, value.text, options.grid_values_font, options.grid_values_color)

        for rect in layout.gridline_rects():
            surface.fill_rect(rect.x, rect.y, rect.width, rect.height, options.gridline_color)

    def _layout(self, points: list[DataPoint]) -> LayoutResult:
        options = validate_options(self.options)
        bounds = compute_value_bounds(points, options.lower_bound, options.upper_bound)
        return compute_layout(
            points,
            self.x_axis,
            self.y_axis,
            options,
            self.measurer,
            title=self.title,
            bounds=bounds,
        )
