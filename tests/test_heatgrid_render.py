from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

import numpy as np
from PIL import Image

from heatgrid import (
    BASIC,
    Axis,
    DataPoint,
    FontSpec,
    HeatMap,
    HeatmapConfigError,
    HeatmapDataError,
    LayoutOptions,
    get_color,
)

Z_ORDER = ("background", "title", "legend", "axis_titles", "axis_labels", "cells", "grid_values", "gridlines")


class _FixedWidthMeasurer:
    def measure(self, text: str, font: FontSpec) -> tuple[int, int]:
        if not text:
            return (0, 0)
        return (len(text) * int(font.size_px // 2), int(font.size_px))


class _RecordingSurface:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def fill_rect(self, x: int, y: int, width: int, height: int, color: tuple[int, int, int]) -> None:
        self.calls.append(("fill", x, y, width, height, color))

    def draw_text(self, x: int, y: int, text: str, font: FontSpec, color: tuple[int, int, int], rotate_deg: int = 0) -> None:
        self.calls.append(("text", x, y, text, color, rotate_deg))

    def draw_image(self, x: int, y: int, image_h_w_4: np.ndarray) -> None:
        self.calls.append(("image", x, y, image_h_w_4.shape))

    def to_rgba(self) -> np.ndarray:
        return np.zeros((1, 1, 4), dtype=np.uint8)


COLOURED = LayoutOptions(
    show_gridlines=True,
    gridline_color=(1, 2, 3),
    title_color=(4, 5, 6),
    axis_title_color=(7, 8, 9),
    axis_label_color=(10, 11, 12),
    legend_label_color=(13, 14, 15),
    grid_values_color=(16, 17, 18),
    show_grid_values=True,
)


def _chart(options: LayoutOptions = COLOURED, **kwargs) -> HeatMap:
    x_axis = Axis.of("Letters", "a", "b")
    y_axis = Axis.of("Numbers", "c", "d")
    return HeatMap(x_axis, y_axis, "Chart", options, **kwargs)


POINTS = [("a", "c", 0.0), ("b", "c", 5.0), ("a", "d", 10.0), ("b", "d", None)]


class DrawOrderTests(unittest.TestCase):
    def _phase(self, call: tuple, chart: HeatMap, layout) -> str:
        options = chart.options
        text_phases = {
            options.title_color: "title",
            options.legend_label_color: "legend",
            options.axis_title_color: "axis_titles",
            options.axis_label_color: "axis_labels",
            options.grid_values_color: "grid_values",
        }
        if call[0] == "text":
            return text_phases[call[4]]
        if call[0] == "image":
            return "cells"
        _, x, y, w, h, color = call
        if (x, y, w, h) == (0, 0, layout.image_width, layout.image_height):
            return "background"
        if x >= layout.legend_boxes.x:
            return "legend"
        if color == options.gridline_color:
            return "gridlines"
        return "cells"

    def test_draw_calls_follow_z_order(self) -> None:
        chart = _chart(measurer=_FixedWidthMeasurer())
        surface = _RecordingSurface()
        chart.render(POINTS, surface)
        layout = chart.layout(POINTS)

        phases = [self._phase(call, chart, layout) for call in surface.calls]
        ranks = [Z_ORDER.index(p) for p in phases]
        self.assertEqual(ranks, sorted(ranks))
        self.assertEqual(set(phases), set(Z_ORDER))

    def test_null_cells_are_not_filled_or_labelled(self) -> None:
        chart = _chart(measurer=_FixedWidthMeasurer())
        surface = _RecordingSurface()
        chart.render(POINTS, surface)
        layout = chart.layout(POINTS)
        null_cell = layout.cell_rect(1, 1)
        cell_fills = [c for c in surface.calls if c[0] == "fill" and (c[1], c[2]) == (null_cell.x, null_cell.y)]
        self.assertEqual(cell_fills, [])
        values = [c[3] for c in surface.calls if c[0] == "text" and c[4] == COLOURED.grid_values_color]
        self.assertEqual(sorted(values), ["0", "10", "5"])

    def test_blend_path_draws_one_image_over_the_grid(self) -> None:
        chart = _chart(COLOURED.replace(blend_colors=True, blend_scale=4), measurer=_FixedWidthMeasurer())
        surface = _RecordingSurface()
        with self.assertLogs("heatgrid.render", level="DEBUG") as logs:
            chart.render(POINTS, surface)
        layout = chart.layout(POINTS)
        images = [c for c in surface.calls if c[0] == "image"]
        self.assertEqual(len(images), 1)
        _, x, y, shape = images[0]
        self.assertEqual((x, y), (layout.grid.x, layout.grid.y))
        self.assertEqual(shape, (layout.grid.height, layout.grid.width, 4))
        self.assertTrue(any("blend" in line for line in logs.output))

    def test_blended_image_covers_the_whole_grid_with_thick_gridlines(self) -> None:
        options = COLOURED.replace(blend_colors=True, gridline_width=3)
        chart = _chart(options, measurer=_FixedWidthMeasurer())
        surface = _RecordingSurface()
        chart.render(POINTS, surface)
        layout = chart.layout(POINTS)
        grid = layout.grid
        self.assertEqual(grid.width, 2 * layout.cell_width + 3 * 3)
        images = [c for c in surface.calls if c[0] == "image"]
        self.assertEqual(images, [("image", grid.x, grid.y, (grid.height, grid.width, 4))])

    def test_errors_abort_before_drawing(self) -> None:
        surface = _RecordingSurface()
        with self.assertRaises(HeatmapDataError):
            _chart(measurer=_FixedWidthMeasurer()).render([], surface)
        with self.assertRaises(HeatmapDataError):
            _chart(measurer=_FixedWidthMeasurer()).render(None, surface)
        with self.assertRaises(HeatmapConfigError):
            _chart(LayoutOptions(cell_height=0), measurer=_FixedWidthMeasurer()).render(POINTS, surface)
        with self.assertRaises(HeatmapConfigError):
            _chart(None, measurer=_FixedWidthMeasurer()).render(POINTS, surface)
        with self.assertRaises(HeatmapDataError):
            _chart(measurer=_FixedWidthMeasurer()).render([("zz", "c", 1.0)], surface)
        self.assertEqual(surface.calls, [])


class RasterRenderTests(unittest.TestCase):
    def test_flat_render_colours_cells(self) -> None:
        chart = _chart(LayoutOptions())
        layout = chart.layout(POINTS)
        frame = chart.render(POINTS)
        self.assertEqual(frame.shape, (layout.image_height, layout.image_width, 4))
        self.assertEqual(frame.dtype, np.uint8)
        np.testing.assert_array_equal(frame[0, 0], [255, 255, 255, 255])

        first = layout.cell_rect(0, 0)
        self.assertEqual(tuple(int(c) for c in frame[first.y + 2, first.x + 2, :3]), get_color(BASIC, 0.0))
        top = layout.cell_rect(0, 1)
        self.assertEqual(tuple(int(c) for c in frame[top.y + 2, top.x + 2, :3]), get_color(BASIC, 1.0))
        empty = layout.cell_rect(1, 1)
        np.testing.assert_array_equal(frame[empty.center_y, empty.center_x], [255, 255, 255, 255])

    def test_blended_render_keeps_null_cells_clear(self) -> None:
        chart = _chart(LayoutOptions(blend_colors=True))
        layout = chart.layout(POINTS)
        frame = chart.render(POINTS)
        empty = layout.cell_rect(1, 1)
        np.testing.assert_array_equal(frame[empty.center_y, empty.center_x], [255, 255, 255, 255])
        first = layout.cell_rect(0, 0)
        self.assertNotEqual(tuple(int(c) for c in frame[first.y + 2, first.x + 2, :3]), (255, 255, 255))

    def test_uniform_values_use_top_colour(self) -> None:
        chart = _chart(LayoutOptions())
        points = [("a", "c", 4.0), ("b", "d", 4.0)]
        layout = chart.layout(points)
        frame = chart.render(points)
        for ix, iy in ((0, 0), (1, 1)):
            cell = layout.cell_rect(ix, iy)
            self.assertEqual(tuple(int(c) for c in frame[cell.center_y, cell.center_x, :3]), get_color(BASIC, 1.0))

    def test_save_png_writes_frame(self) -> None:
        chart = _chart(LayoutOptions())
        with tempfile.TemporaryDirectory() as tmp:
            path = chart.save_png(Path(tmp) / "chart.png", POINTS)
            with Image.open(path) as image:
                self.assertEqual(image.format, "PNG")
                layout = chart.layout(POINTS)
                self.assertEqual(image.size, (layout.image_width, layout.image_height))

    def test_monthly_volume_end_to_end(self) -> None:
        x_axis = Axis.from_range("Month", 1, 12)
        y_axis = Axis.from_range("Year", 2018, 2025)
        cells = [(month, year) for year in range(2018, 2026) for month in range(1, 13)][:80]
        points = [DataPoint(month, year, 500000 + i * (3000000 / 79)) for i, (month, year) in enumerate(cells)]
        options = LayoutOptions(
            gradient=BASIC,
            legend_steps=7,
            lower_bound=500000,
            upper_bound=3500000,
            show_gridlines=True,
        )
        chart = HeatMap(x_axis, y_axis, "Events volume by month", options)
        layout = chart.layout(points)
        labels = [entry.label for entry in layout.legend_entries]
        self.assertTrue(labels[0].startswith("<="))
        self.assertTrue(labels[6].startswith(">="))
        self.assertEqual(layout.image_width, sum(size for _, size in layout.horizontal_offsets))
        frame = chart.render(points)
        self.assertEqual(frame.shape[:2], (layout.image_height, layout.image_width))


if __name__ == "__main__":
    unittest.main()
