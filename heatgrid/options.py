from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping

from heatgrid.errors import HeatmapConfigError
from heatgrid.formatting import DecimalFormat
from heatgrid.gradient import BASIC, RGB, Gradient, HueWheel, StopList
from heatgrid.raster.draw_text import DEFAULT_FONT_FAMILY


BLEND_SCALE_MIN = 2
BLEND_SCALE_MAX = 20
MIN_LEGEND_STEPS = 2


@dataclass(frozen=True)
class FontSpec:
    family: str = DEFAULT_FONT_FAMILY
    size_px: float = 20.0
    embolden_px: int = 1


BASIC_FONT = FontSpec()
AXIS_TITLE_FONT = FontSpec(size_px=20.0, embolden_px=2)
TITLE_FONT = FontSpec(size_px=36.0, embolden_px=2)

BLACK: RGB = (0, 0, 0)


@dataclass(frozen=True)
class LayoutOptions:
    """Every knob of a heat map render. Build with keywords; check with :func:`validate_options`."""

    cell_width: int = 50
    cell_height: int = 50

    show_gridlines: bool = False
    gridline_width: int = 1
    gridline_color: RGB = BLACK

    label_padding: int = 10
    axis_title_padding: int = 20
    title_padding: int = 40
    legend_padding: int = 40
    outer_padding: int = 5

    show_x_labels: bool = True
    show_y_labels: bool = True
    x_labels_below: bool = False
    rotate_x_labels: bool = False

    show_legend: bool = True
    legend_steps: int | None = None
    legend_format: str = "0.##"

    show_grid_values: bool = False
    grid_values_format: str = "0.#"

    blend_colors: bool = False
    blend_scale: int = 3

    lower_bound: float | None = None
    upper_bound: float | None = None

    gradient: Gradient = BASIC
    background_color: RGB | None = None

    axis_label_font: FontSpec = BASIC_FONT
    axis_title_font: FontSpec = AXIS_TITLE_FONT
    title_font: FontSpec = TITLE_FONT
    legend_label_font: FontSpec = BASIC_FONT
    grid_values_font: FontSpec = BASIC_FONT

    axis_label_color: RGB = BLACK
    axis_title_color: RGB = BLACK
    title_color: RGB = BLACK
    legend_label_color: RGB = BLACK
    grid_values_color: RGB = BLACK

    def replace(self, **changes: Any) -> "LayoutOptions":
        return replace(self, **changes)

    @property
    def effective_gridline_width(self) -> int:
        return self.gridline_width if self.show_gridlines else 0


DEFAULT_OPTIONS = LayoutOptions()


def validate_options(options: LayoutOptions | None) -> LayoutOptions:
    """Single validation pass over a complete option set. Returns ``options`` unchanged."""
    if options is None:
        raise HeatmapConfigError("the heat map options are undefined")
    if not isinstance(options, LayoutOptions):
        raise HeatmapConfigError(f"options must be LayoutOptions, got {type(options)!r}")

    if options.cell_width < 1:
        raise HeatmapConfigError("cell width must be at least 1")
    if options.cell_height < 1:
        raise HeatmapConfigError("cell height must be at least 1")

    if options.gridline_width < 0:
        raise HeatmapConfigError("gridline width cannot be negative")
    if options.show_gridlines and options.gridline_width < 1:
        raise HeatmapConfigError("gridline width must be at least 1 when gridlines are enabled")

    for name in ("label_padding", "axis_title_padding", "title_padding", "legend_padding", "outer_padding"):
        if getattr(options, name) < 0:
            raise HeatmapConfigError(f"{name.replace('_', ' ')} cannot be negative")

    if options.legend_steps is not None and options.legend_steps < MIN_LEGEND_STEPS:
        raise HeatmapConfigError(f"the number of legend steps must be at least {MIN_LEGEND_STEPS}")
    if options.blend_scale < BLEND_SCALE_MIN or options.blend_scale > BLEND_SCALE_MAX:
        raise HeatmapConfigError(
            f"the colour blend scale must be between {BLEND_SCALE_MIN} and {BLEND_SCALE_MAX}, inclusive"
        )

    if (
        options.lower_bound is not None
        and options.upper_bound is not None
        and options.lower_bound > options.upper_bound
    ):
        raise HeatmapConfigError("lower bound must not exceed upper bound")

    if not isinstance(options.gradient, (StopList, HueWheel)):
        raise HeatmapConfigError(f"unsupported gradient type: {type(options.gradient)!r}")

    # Parse once so a bad pattern fails before layout starts.
    DecimalFormat(options.legend_format)
    DecimalFormat(options.grid_values_format)

    for f in fields(options):
        value = getattr(options, f.name)
        if isinstance(value, FontSpec):
            _validate_font(f.name, value)
        elif f.name.endswith("_color") and value is not None:
            _validate_rgb(f.name, value)

    return options


def options_from_mapping(overrides: Mapping[str, Any] | None = None) -> LayoutOptions:
    """Merge ``overrides`` onto the defaults, rejecting unknown keys, then validate."""
    known = {f.name for f in fields(LayoutOptions)}
    changes: dict[str, Any] = {}
    if overrides:
        for key, value in overrides.items():
            if key not in known:
                raise HeatmapConfigError(f"unknown heat map option: {key}")
            if isinstance(value, Mapping) and key.endswith("_font"):
                value = FontSpec(**{**asdict(getattr(DEFAULT_OPTIONS, key)), **value})
            elif isinstance(value, list) and key.endswith("_color"):
                value = tuple(value)
            changes[key] = value
    return validate_options(replace(DEFAULT_OPTIONS, **changes))


def _validate_font(name: str, font: FontSpec) -> None:
    if not isinstance(font.family, str) or not font.family.strip():
        raise HeatmapConfigError(f"`{name}` family must be a non-empty string")
    if font.size_px <= 0:
        raise HeatmapConfigError(f"`{name}` size must be a positive number")
    if font.embolden_px < 1:
        raise HeatmapConfigError(f"`{name}` embolden_px must be at least 1")


def _validate_rgb(name: str, color: Any) -> None:
    if (
        not isinstance(color, tuple)
        or len(color) != 3
        or any(not isinstance(c, int) or c < 0 or c > 255 for c in color)
    ):
        raise HeatmapConfigError(f"`{name}` must be an (r, g, b) tuple of 0..255 integers")
