from __future__ import annotations

import colorsys
from dataclasses import dataclass, field
import math
import re
from typing import Literal, Sequence, TypeAlias

from heatgrid.errors import HeatmapConfigError


RGB = tuple[int, int, int]
HueDirection = Literal["clockwise", "counterclockwise"]

_HEX_COLOR = re.compile(r"^#?[0-9a-fA-F]{6}$")


def parse_hex_color(code: str) -> RGB:
    if not isinstance(code, str) or not _HEX_COLOR.match(code):
        raise HeatmapConfigError(f"colour must be a hex string (#RRGGBB), got {code!r}")
    raw = code.lstrip("#")
    return (int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16))


def hsb_to_rgb(hue: float, saturation: float, brightness: float) -> RGB:
    """Convert a hue/saturation/brightness triple to RGB. Hue wraps modulo 1.0."""
    h = hue - math.floor(hue)
    r, g, b = colorsys.hsv_to_rgb(h, saturation, brightness)
    return (int(r * 255.0 + 0.5), int(g * 255.0 + 0.5), int(b * 255.0 + 0.5))


def _check_unit_value(value: float) -> float:
    value = float(value)
    if not (0.0 <= value <= 1.0):
        raise HeatmapConfigError(f"gradient value is out of bounds: {value}")
    return value


@dataclass(frozen=True)
class StopList:
    """Gradient interpolated linearly between an ordered list of colour stops."""

    colors: tuple[RGB, ...]

    def __post_init__(self) -> None:
        stops = tuple(_coerce_rgb(c) for c in self.colors)
        if len(stops) < 2:
            raise HeatmapConfigError("a minimum of 2 colour stops is required")
        object.__setattr__(self, "colors", stops)

    @classmethod
    def from_hex(cls, *codes: str) -> "StopList":
        return cls(tuple(parse_hex_color(code) for code in codes))

    def get_color(self, value: float) -> RGB:
        value = _check_unit_value(value)
        stops = self.colors
        position = value * (len(stops) - 1)
        index = int(math.floor(position))
        if index == len(stops) - 1:
            return stops[index]
        fraction = position - index
        c1 = stops[index]
        c2 = stops[index + 1]
        return (
            int(c1[0] * (1.0 - fraction) + c2[0] * fraction),
            int(c1[1] * (1.0 - fraction) + c2[1] * fraction),
            int(c1[2] * (1.0 - fraction) + c2[2] * fraction),
        )


@dataclass(frozen=True)
class HueWheel:
    """Smooth gradient sweeping the colour wheel from ``hue_start`` to ``hue_end`` degrees."""

    hue_start: float
    hue_end: float
    saturation: float = 1.0
    brightness: float = 1.0
    direction: HueDirection = "clockwise"
    start: float = field(init=False, repr=False)
    span: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        start = float(self.hue_start)
        end = float(self.hue_end)
        if start < 0.0 or start > 360.0:
            raise HeatmapConfigError("hue_start must be between 0 and 360 (inclusive)")
        if end < 0.0 or end > 360.0:
            raise HeatmapConfigError("hue_end must be between 0 and 360 (inclusive)")
        if start == end:
            raise HeatmapConfigError("hue_start and hue_end cannot be the same")
        if not (0.0 <= float(self.saturation) <= 1.0):
            raise HeatmapConfigError("saturation must be between 0 and 1 (inclusive)")
        if not (0.0 <= float(self.brightness) <= 1.0):
            raise HeatmapConfigError("brightness must be between 0 and 1 (inclusive)")
        if self.direction not in ("clockwise", "counterclockwise"):
            raise HeatmapConfigError(f"unsupported hue direction: {self.direction!r}")

        # Keep the sweep monotonic across the 0/360 degree seam.
        if self.direction == "clockwise" and start > end:
            end += 360.0
        elif self.direction == "counterclockwise" and end > start:
            start += 360.0

        object.__setattr__(self, "start", start / 360.0)
        object.__setattr__(self, "span", abs(start / 360.0 - end / 360.0))

    def get_color(self, value: float) -> RGB:
        value = _check_unit_value(value)
        offset = value * self.span
        hue = self.start + offset if self.direction == "clockwise" else self.start - offset
        return hsb_to_rgb(hue, float(self.saturation), float(self.brightness))


Gradient: TypeAlias = StopList | HueWheel


def get_color(gradient: Gradient, value: float) -> RGB:
    if isinstance(gradient, StopList):
        return gradient.get_color(value)
    if isinstance(gradient, HueWheel):
        return gradient.get_color(value)
    raise HeatmapConfigError(f"unsupported gradient type: {type(gradient)!r}")


def _coerce_rgb(color: Sequence[int] | str) -> RGB:
    if isinstance(color, str):
        return parse_hex_color(color)
    if len(color) != 3:
        raise HeatmapConfigError(f"colour stops must be (r, g, b) triples, got {color!r}")
    r, g, b = (int(c) for c in color)
    for channel in (r, g, b):
        if channel < 0 or channel > 255:
            raise HeatmapConfigError(f"colour channel out of range 0..255: {color!r}")
    return (r, g, b)


SMOOTH = HueWheel(240, 360, 1.0, 1.0, "clockwise")

EXTENDED = StopList.from_hex(
    "#3288bd", "#65c1a5", "#91d5a6", "#c9e89a", "#eaf79b", "#fcffba",
    "#fffbba", "#fee492", "#fdc771", "#fda159", "#f46c43", "#d53e4f",
)

BASIC = StopList.from_hex("#1d4877", "#1b8a5a", "#fbb021", "#f68838", "#ee3e32")

TWO_COLOR = StopList.from_hex("#0000FF", "#FF0000")

COLOR_BLIND = StopList.from_hex("#e4ff7a", "#ffe81a", "#ffbd00", "#ffa000", "#fc7f00")

BLACK_RED_ORANGE = StopList.from_hex("#000000", "#8e060a", "#fda32b")

WHITE_HOT = StopList.from_hex("#000000", "#8e060a", "#fda32b", "#FFCF9F", "#FEF9FF")

# Dave Green's cubehelix scheme, 50 steps.
CUBEHELIX = StopList.from_hex(
    "#000000", "#090309", "#100614", "#160a1f", "#190f2b", "#1a1536", "#1a1c3f", "#182448",
    "#152d4e", "#123752", "#104153", "#0e4b53", "#0d544f", "#0e5d4b", "#126644", "#176d3d",
    "#207336", "#2a782f", "#387b29", "#477d25", "#577d23", "#697d24", "#7b7c28", "#8d7a2f",
    "#9e7938", "#ae7745", "#bd7654", "#c87564", "#d27677", "#d9788a", "#dd7b9d", "#de80af",
    "#de86c1", "#db8dd1", "#d795de", "#d29fe9", "#cca9f1", "#c7b3f7", "#c3bdfa", "#c0c8fb",
    "#bed1fa", "#bfdaf8", "#c2e2f6", "#c7e9f3", "#cdeff1", "#d6f3f0", "#e0f7f0", "#eafaf3",
    "#f5fdf8", "#ffffff",
)

GREY = StopList.from_hex("#E3E3E3", "#000000")

CANNED_GRADIENTS: tuple[Gradient, ...] = (
    SMOOTH,
    EXTENDED,
    BASIC,
    TWO_COLOR,
    COLOR_BLIND,
    BLACK_RED_ORANGE,
    WHITE_HOT,
    CUBEHELIX,
    GREY,
)


def canned_gradient(index: int) -> Gradient:
    if index < 0 or index >= len(CANNED_GRADIENTS):
        raise HeatmapConfigError(f"invalid gradient index; must be between 0 and {len(CANNED_GRADIENTS) - 1}")
    return CANNED_GRADIENTS[index]
