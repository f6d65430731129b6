from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

from heatgrid.axis import Axis
from heatgrid.data import DataPoint, ValueBounds, compute_value_bounds
from heatgrid.errors import HeatmapConfigError, HeatmapDataError
from heatgrid.formatting import DecimalFormat
from heatgrid.metrics import TextMeasurer, max_text_size
from heatgrid.options import MIN_LEGEND_STEPS, FontSpec, LayoutOptions, validate_options


LOGGER = logging.getLogger(__name__)

# Room left around in-cell values, split evenly between both sides.
GRID_VALUE_MARGIN = 8
MIN_AUTO_LEGEND_STEPS = 5
LEGEND_LOWER_PREFIX = "<= "
LEGEND_UPPER_PREFIX = ">= "


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center_x(self) -> int:
        return self.x + self.width // 2

    @property
    def center_y(self) -> int:
        return self.y + self.height // 2


@dataclass(frozen=True)
class TextPlacement:
    """Text anchored by the top-left corner of its drawn (possibly rotated) box."""

    text: str
    x: int
    y: int
    width: int
    height: int
    rotate_deg: int = 0


@dataclass(frozen=True)
class TitleLine:
    text: str
    width: int
    height: int


@dataclass(frozen=True)
class LegendEntry:
    value: float
    label: str
    color_factor: float
    box: Rect
    label_placement: TextPlacement | None


@dataclass(frozen=True)
class LocatedPoint:
    point: DataPoint
    ix: int
    iy: int


@dataclass(frozen=True)
class LayoutResult:
    image_width: int
    image_height: int
    cell_width: int
    cell_height: int
    gridline_width: int
    x_count: int
    y_count: int
    x_labels_rotated: bool
    bounds: ValueBounds
    grid: Rect
    title_lines: tuple[TitleLine, ...]
    title_placements: tuple[TextPlacement, ...]
    x_title: TextPlacement | None
    y_title: TextPlacement | None
    x_label_row: Rect | None
    y_label_column: Rect | None
    x_labels: tuple[TextPlacement, ...]
    y_labels: tuple[TextPlacement, ...]
    legend_boxes: Rect | None
    legend_labels: Rect | None
    legend_entries: tuple[LegendEntry, ...]
    grid_values: tuple[TextPlacement, ...]
    horizontal_offsets: tuple[tuple[str, int], ...]
    vertical_offsets: tuple[tuple[str, int], ...]

    @property
    def title_block(self) -> Rect | None:
        if not self.title_placements:
            return None
        top = self.title_placements[0].y
        height = len(self.title_lines) * self.title_lines[0].height
        width = max(line.width for line in self.title_lines)
        return Rect(self.image_width // 2 - width // 2, top, width, height)

    def cell_rect(self, ix: int, iy: int) -> Rect:
        gw = self.gridline_width
        return Rect(
            x=self.grid.x + gw + ix * (self.cell_width + gw),
            y=self.grid.y + gw + iy * (self.cell_height + gw),
            width=self.cell_width,
            height=self.cell_height,
        )

    def gridline_rects(self) -> list[Rect]:
        gw = self.gridline_width
        if gw <= 0:
            return []
        rects = [
            Rect(self.grid.x, self.grid.y + row * (self.cell_height + gw), self.grid.width, gw)
            for row in range(self.y_count + 1)
        ]
        rects.extend(
            Rect(self.grid.x + col * (self.cell_width + gw), self.grid.y, gw, self.grid.height)
            for col in range(self.x_count + 1)
        )
        return rects

    def legend_frame_rects(self) -> list[Rect]:
        box = self.legend_boxes
        if box is None:
            return []
        gw = self.gridline_width
        if gw <= 0:
            # 1px outline around the colour boxes
            return [
                Rect(box.x, box.y, box.width, 1),
                Rect(box.x, box.bottom - 1, box.width, 1),
                Rect(box.x, box.y, 1, box.height),
                Rect(box.right - 1, box.y, 1, box.height),
            ]
        rects = [
            Rect(box.x, box.y + row * (self.cell_height + gw), box.width, gw)
            for row in range(len(self.legend_entries) + 1)
        ]
        rects.append(Rect(box.x, box.y, gw, box.height))
        rects.append(Rect(box.right - gw, box.y, gw, box.height))
        return rects


def locate_points(points: Sequence[DataPoint], x_axis: Axis, y_axis: Axis) -> list[LocatedPoint]:
    located: list[LocatedPoint] = []
    for point in points:
        ix = x_axis.index_of(point.x)
        if ix is None:
            raise HeatmapDataError(f"x key {point.x!r} is not on the X-axis")
        iy = y_axis.index_of(point.y)
        if iy is None:
            raise HeatmapDataError(f"y key {point.y!r} is not on the Y-axis")
        located.append(LocatedPoint(point=point, ix=ix, iy=iy))
    return located


def wrap_title(title: str, max_width: int, measurer: TextMeasurer, font: FontSpec) -> tuple[TitleLine, ...]:
    """Greedy word wrap of ``title`` into lines no wider than ``max_width``.

    A word that is wider than ``max_width`` on its own still gets a line of its own, so
    the wrap always makes progress.
    """
    lines: list[TitleLine] = []
    current = ""

    def commit(text: str, width: int | None = None, height: int | None = None) -> None:
        if width is None or height is None:
            width, height = measurer.measure(text, font)
        lines.append(TitleLine(text=text, width=width, height=height))

    for word in title.split():
        if not current:
            current = word
            continue
        candidate = f"{current} {word}"
        width, height = measurer.measure(candidate, font)
        if width < max_width:
            current = candidate
            continue
        if width == max_width:
            commit(candidate, width, height)
            current = ""
            continue
        commit(current)
        current = word

    if current:
        commit(current)
    return tuple(lines)


def build_legend_values(bounds: ValueBounds, steps: int) -> list[float]:
    if steps < MIN_LEGEND_STEPS:
        raise HeatmapConfigError(f"the number of legend steps must be at least {MIN_LEGEND_STEPS}")
    increment = bounds.value_range / (steps - 1)
    values = [bounds.minimum]
    values.extend(bounds.minimum + i * increment for i in range(1, steps - 1))
    values.append(bounds.maximum)
    return values


def format_legend_labels(values: Sequence[float], bounds: ValueBounds, formatter: DecimalFormat) -> list[str]:
    labels = [formatter.format(v) for v in values]
    if labels and bounds.min_clamped:
        labels[0] = LEGEND_LOWER_PREFIX + labels[0]
    if labels and bounds.max_clamped:
        labels[-1] = LEGEND_UPPER_PREFIX + labels[-1]
    return labels


def _starts(offsets: Sequence[tuple[str, int]]) -> dict[str, int]:
    out: dict[str, int] = {}
    position = 0
    for name, size in offsets:
        out[name] = position
        position += size
    return out


def compute_layout(
    points: Sequence[DataPoint],
    x_axis: Axis,
    y_axis: Axis,
    options: LayoutOptions,
    measurer: TextMeasurer,
    *,
    title: str = "",
    bounds: ValueBounds | None = None,
) -> LayoutResult:
    """Compute the geometry of every heat map element.

    Each step only consumes values computed by earlier steps: label metrics, cell size,
    label rotation, legend, horizontal offsets, title wrap and finally vertical offsets.
    """
    validate_options(options)
    if x_axis is None or x_axis.count < 1:
        raise HeatmapConfigError("the X-axis is undefined")
    if y_axis is None or y_axis.count < 1:
        raise HeatmapConfigError("the Y-axis is undefined")
    if not points:
        raise HeatmapDataError("missing data")

    located = locate_points(points, x_axis, y_axis)
    if bounds is None:
        bounds = compute_value_bounds(points, options.lower_bound, options.upper_bound)

    gw = options.effective_gridline_width
    pad = options.label_padding
    x_count = x_axis.count
    y_count = y_axis.count

    # Axis labels share one font, so one label height serves both axes.
    x_label_w, x_label_h = max_text_size(measurer, x_axis.labels() if options.show_x_labels else [], options.axis_label_font)
    y_label_w, y_label_h = max_text_size(measurer, y_axis.labels() if options.show_y_labels else [], options.axis_label_font)
    label_h = max(x_label_h, y_label_h)

    value_texts: list[tuple[LocatedPoint, str]] = []
    if options.show_grid_values:
        value_format = DecimalFormat(options.grid_values_format)
        value_texts = [(lp, value_format.format(lp.point.value)) for lp in located if lp.point.value is not None]
    value_w, value_h = max_text_size(measurer, [text for _, text in value_texts], options.grid_values_font)

    x_title_w, x_title_h = measurer.measure(x_axis.title, options.axis_title_font) if x_axis.title else (0, 0)
    y_title_w, y_title_h = measurer.measure(y_axis.title, options.axis_title_font) if y_axis.title else (0, 0)

    cell_w = options.cell_width
    cell_h = options.cell_height
    if options.show_x_labels:
        cell_w = max(cell_w, label_h + pad)
    if options.show_y_labels:
        cell_h = max(cell_h, label_h + pad)
    if options.show_grid_values:
        cell_w = max(cell_w, value_w + GRID_VALUE_MARGIN)
        cell_h = max(cell_h, value_h + GRID_VALUE_MARGIN)

    rotated = False
    x_row_h = 0
    if options.show_x_labels:
        rotated = options.rotate_x_labels or x_label_w > cell_w + gw - pad
        # Rotated labels stand on end, so the row is as tall as the widest label.
        x_row_h = x_label_w if rotated else x_label_h

    legend_values: list[float] = []
    legend_texts: list[str] = []
    legend_label_w = legend_label_h = 0
    legend_boxes_w = legend_h = 0
    if options.show_legend:
        steps = options.legend_steps if options.legend_steps is not None else max(y_count, MIN_AUTO_LEGEND_STEPS)
        legend_values = build_legend_values(bounds, steps)
        legend_texts = format_legend_labels(legend_values, bounds, DecimalFormat(options.legend_format))
        legend_label_w, legend_label_h = max_text_size(measurer, legend_texts, options.legend_label_font)
        legend_boxes_w = cell_w + 2 * gw
        legend_h = cell_h * steps + (steps + 1) * gw

    grid_w = x_count * cell_w + (x_count + 1) * gw
    grid_h = y_count * cell_h + (y_count + 1) * gw

    horizontal: list[tuple[str, int]] = [("left_padding", options.outer_padding)]
    if y_axis.title:
        horizontal += [("y_title", y_title_h), ("y_title_padding", options.axis_title_padding)]
    if options.show_y_labels:
        horizontal += [("y_labels", y_label_w), ("y_label_padding", pad)]
    horizontal.append(("grid", grid_w))
    if options.show_legend:
        horizontal += [
            ("legend_padding", options.legend_padding),
            ("legend_boxes", legend_boxes_w),
            ("legend_label_padding", pad),
            ("legend_labels", legend_label_w),
        ]
    horizontal.append(("right_padding", options.outer_padding))
    image_width = sum(size for _, size in horizontal)
    hx = _starts(horizontal)

    title_lines = wrap_title(title or "", image_width - 2 * options.outer_padding, measurer, options.title_font)
    line_h = title_lines[0].height if title_lines else 0
    title_h = len(title_lines) * line_h

    labels_above = options.show_x_labels and not options.x_labels_below
    labels_below = options.show_x_labels and options.x_labels_below
    vertical: list[tuple[str, int]] = [("top_padding", options.outer_padding)]
    if title_lines:
        vertical += [("title", title_h), ("title_padding", options.title_padding)]
    if x_axis.title:
        vertical += [("x_title", x_title_h), ("x_title_padding", options.axis_title_padding)]
    if labels_above:
        vertical += [("x_labels", x_row_h), ("x_label_padding", pad)]
    vertical.append(("grid", max(grid_h, legend_h)))
    if labels_below:
        vertical += [("x_label_padding", pad), ("x_labels", x_row_h)]
    vertical.append(("bottom_padding", options.outer_padding))
    image_height = sum(size for _, size in vertical)
    vy = _starts(vertical)

    grid = Rect(hx["grid"], vy["grid"], grid_w, grid_h)

    def cell_origin(ix: int, iy: int) -> tuple[int, int]:
        return (grid.x + gw + ix * (cell_w + gw), grid.y + gw + iy * (cell_h + gw))

    title_placements = tuple(
        TextPlacement(
            text=line.text,
            x=image_width // 2 - line.width // 2,
            y=vy["title"] + i * line_h,
            width=line.width,
            height=line.height,
        )
        for i, line in enumerate(title_lines)
    )

    x_title = None
    if x_axis.title:
        x_title = TextPlacement(x_axis.title, grid.center_x - x_title_w // 2, vy["x_title"], x_title_w, x_title_h)
    y_title = None
    if y_axis.title:
        # drawn rotated a quarter turn counter-clockwise, so width and height swap
        y_title = TextPlacement(y_axis.title, hx["y_title"], grid.center_y - y_title_w // 2, y_title_h, y_title_w, 90)

    x_label_row = None
    x_labels: list[TextPlacement] = []
    if options.show_x_labels:
        # labels below hang directly under the grid even when a taller legend stretches the block
        row_y = vy["x_labels"] if labels_above else grid.bottom + pad
        x_label_row = Rect(grid.x, row_y, grid_w, x_row_h)
        for entry in x_axis:
            w, h = measurer.measure(entry.label, options.axis_label_font)
            left, _ = cell_origin(entry.index, 0)
            center = left + cell_w // 2
            if rotated:
                box_w, box_h, rotate_deg = h, w, 90
            else:
                box_w, box_h, rotate_deg = w, h, 0
            # above the grid labels hug the grid (bottom aligned); below they hang from the top
            top = x_label_row.bottom - box_h if labels_above else x_label_row.y
            x_labels.append(TextPlacement(entry.label, center - box_w // 2, top, box_w, box_h, rotate_deg))

    y_label_column = None
    y_labels: list[TextPlacement] = []
    if options.show_y_labels:
        y_label_column = Rect(hx["y_labels"], grid.y, y_label_w, grid_h)
        for entry in y_axis:
            w, h = measurer.measure(entry.label, options.axis_label_font)
            _, top = cell_origin(0, entry.index)
            # right aligned against the grid
            y_labels.append(TextPlacement(entry.label, y_label_column.right - w, top + cell_h // 2 - h // 2, w, h))

    grid_values: list[TextPlacement] = []
    for lp, text in value_texts:
        w, h = measurer.measure(text, options.grid_values_font)
        left, top = cell_origin(lp.ix, lp.iy)
        grid_values.append(TextPlacement(text, left + cell_w // 2 - w // 2, top + cell_h // 2 - h // 2, w, h))

    legend_boxes = None
    legend_labels = None
    legend_entries: list[LegendEntry] = []
    if options.show_legend:
        # centred on the grid only when the grid is at least as tall as the legend
        legend_y = grid.center_y - legend_h // 2 if grid_h >= legend_h else grid.y
        legend_boxes = Rect(hx["legend_boxes"], legend_y, legend_boxes_w, legend_h)
        legend_labels = Rect(hx["legend_labels"], legend_y, legend_label_w, legend_h)
        steps = len(legend_values)
        has_range = bounds.value_range > 0
        for i, (value, label) in enumerate(zip(legend_values, legend_texts)):
            row = steps - 1 - i  # maximum on top
            box = Rect(legend_boxes.x + gw, legend_y + gw + row * (cell_h + gw), cell_w, cell_h)
            if i == 0:
                factor = 0.0
            elif i == steps - 1:
                factor = 1.0
            else:
                factor = bounds.normalize(value)
            placement = None
            if has_range or i in (0, steps - 1):
                w, h = measurer.measure(label, options.legend_label_font)
                placement = TextPlacement(label, legend_labels.x, box.center_y - h // 2, w, h)
            legend_entries.append(LegendEntry(value=value, label=label, color_factor=factor, box=box, label_placement=placement))

    LOGGER.debug(
        "heat map layout %dx%d: cells %dx%d, grid %dx%d, x labels rotated=%s, %d title line(s)",
        image_width,
        image_height,
        cell_w,
        cell_h,
        x_count,
        y_count,
        rotated,
        len(title_lines),
    )

    return LayoutResult(
        image_width=image_width,
        image_height=image_height,
        cell_width=cell_w,
        cell_height=cell_h,
        gridline_width=gw,
        x_count=x_count,
        y_count=y_count,
        x_labels_rotated=rotated,
        bounds=bounds,
        grid=grid,
        title_lines=title_lines,
        title_placements=title_placements,
        x_title=x_title,
        y_title=y_title,
        x_label_row=x_label_row,
        y_label_column=y_label_column,
        x_labels=tuple(x_labels),
        y_labels=tuple(y_labels),
        legend_boxes=legend_boxes,
        legend_labels=legend_labels,
        legend_entries=tuple(legend_entries),
        grid_values=tuple(grid_values),
        horizontal_offsets=tuple(horizontal),
        vertical_offsets=tuple(vertical),
    )
