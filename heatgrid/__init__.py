from .axis import Axis, AxisEntry
from .blend import BlendResult, blend_cells
from .data import DataPoint, ValueBounds, compute_value_bounds, normalize_points
from .errors import HeatmapConfigError, HeatmapDataError, HeatmapError
from .formatting import DecimalFormat
from .gradient import (
    BASIC,
    BLACK_RED_ORANGE,
    CANNED_GRADIENTS,
    COLOR_BLIND,
    CUBEHELIX,
    EXTENDED,
    GREY,
    SMOOTH,
    TWO_COLOR,
    WHITE_HOT,
    Gradient,
    HueWheel,
    StopList,
    canned_gradient,
    get_color,
    hsb_to_rgb,
    parse_hex_color,
)
from .layout import (
    LayoutResult,
    LegendEntry,
    Rect,
    TextPlacement,
    TitleLine,
    build_legend_values,
    compute_layout,
    format_legend_labels,
    wrap_title,
)
from .metrics import RasterTextMeasurer, TextMeasurer
from .options import DEFAULT_OPTIONS, FontSpec, LayoutOptions, options_from_mapping, validate_options
from .render import HeatMap, resolve_background
from .surface import DrawingSurface, RasterSurface

__all__ = [
    "Axis",
    "AxisEntry",
    "BASIC",
    "BLACK_RED_ORANGE",
    "BlendResult",
    "CANNED_GRADIENTS",
    "COLOR_BLIND",
    "CUBEHELIX",
    "DEFAULT_OPTIONS",
    "DataPoint",
    "DecimalFormat",
    "DrawingSurface",
    "EXTENDED",
    "FontSpec",
    "GREY",
    "Gradient",
    "HeatMap",
    "HeatmapConfigError",
    "HeatmapDataError",
    "HeatmapError",
    "HueWheel",
    "LayoutOptions",
    "LayoutResult",
    "LegendEntry",
    "RasterSurface",
    "RasterTextMeasurer",
    "Rect",
    "SMOOTH",
    "StopList",
    "TWO_COLOR",
    "TextMeasurer",
    "TextPlacement",
    "TitleLine",
    "ValueBounds",
    "WHITE_HOT",
    "blend_cells",
    "build_legend_values",
    "canned_gradient",
    "compute_layout",
    "compute_value_bounds",
    "format_legend_labels",
    "get_color",
    "hsb_to_rgb",
    "normalize_points",
    "options_from_mapping",
    "resolve_background",
    "validate_options",
    "wrap_title",
]
