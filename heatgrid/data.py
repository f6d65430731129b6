from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
import math
from typing import Any, Hashable

from heatgrid.errors import HeatmapConfigError, HeatmapDataError


try:
    import pandas as pd
except ImportError:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


@dataclass(frozen=True)
class DataPoint:
    """One heat map cell. ``value=None`` marks a cell with no data."""

    x: Hashable
    y: Hashable
    value: float | None = None

    @property
    def has_value(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class ValueBounds:
    minimum: float
    maximum: float
    min_clamped: bool = False
    max_clamped: bool = False

    @property
    def clamped(self) -> bool:
        return self.min_clamped or self.max_clamped

    @property
    def value_range(self) -> float:
        return self.maximum - self.minimum

    def normalize(self, value: float) -> float:
        """Map ``value`` to the gradient's [0, 1] input. A zero range maps everything to 1.0."""
        v = float(value)
        if self.clamped:
            v = max(min(v, self.maximum), self.minimum)
        span = self.value_range
        if span == 0:
            return 1.0
        return min(1.0, max(0.0, (v - self.minimum) / span))


def normalize_points(data: Any) -> list[DataPoint]:
    """Coerce supported inputs into a list of :class:`DataPoint`.

    Accepts a sequence of ``DataPoint``, ``(x, y, value)`` tuples or mappings with
    ``x``/``y``/``value`` keys, or a pandas DataFrame with those columns.
    """
    if data is None:
        raise HeatmapDataError("missing data")

    if pd is not None and isinstance(data, pd.DataFrame):
        missing = [c for c in ("x", "y", "value") if c not in data.columns]
        if missing:
            raise HeatmapDataError(f"data frame is missing columns: {', '.join(missing)}")
        records: Sequence[Any] = list(data[["x", "y", "value"]].itertuples(index=False, name=None))
    elif isinstance(data, Sequence) and not isinstance(data, (str, bytes, bytearray)):
        records = data
    else:
        raise HeatmapDataError(f"unsupported data input type: {type(data)!r}")

    if len(records) == 0:
        raise HeatmapDataError("missing data")

    return [_coerce_point(raw, index=i) for i, raw in enumerate(records)]


def _coerce_point(raw: Any, *, index: int) -> DataPoint:
    if isinstance(raw, DataPoint):
        return DataPoint(x=raw.x, y=raw.y, value=_coerce_value(raw.value, index=index))
    if isinstance(raw, Mapping):
        try:
            return DataPoint(x=raw["x"], y=raw["y"], value=_coerce_value(raw.get("value"), index=index))
        except KeyError as exc:
            raise HeatmapDataError(f"data record {index} is missing key {exc.args[0]!r}") from exc
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes, bytearray)):
        if len(raw) != 3:
            raise HeatmapDataError(f"data record {index} must be an (x, y, value) triple")
        x, y, value = raw
        return DataPoint(x=x, y=y, value=_coerce_value(value, index=index))
    raise HeatmapDataError(f"unsupported data record at index {index}: {raw!r}")


def _coerce_value(raw: Any, *, index: int) -> float | None:
    if raw is None:
        return None
    if isinstance(raw, Decimal):
        raw = float(raw)
    if isinstance(raw, bool):
        raise HeatmapDataError(f"data record {index} has a non-numeric value: {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise HeatmapDataError(f"data record {index} has a non-numeric value: {raw!r}") from exc
    if math.isnan(value):
        return None
    if math.isinf(value):
        raise HeatmapDataError(f"data record {index} has a non-finite value: {raw!r}")
    return value


def compute_value_bounds(
    points: Sequence[DataPoint],
    lower: float | None = None,
    upper: float | None = None,
) -> ValueBounds:
    """Resolve the colour scale range. A supplied bound replaces the data-derived one."""
    if lower is not None and upper is not None:
        if lower > upper:
            raise HeatmapConfigError("lower bound must not exceed upper bound")
        return ValueBounds(minimum=float(lower), maximum=float(upper), min_clamped=True, max_clamped=True)

    values = [p.value for p in points if p.value is not None]
    if not values:
        raise HeatmapDataError("data contains no values to derive the colour scale from")

    minimum = float(lower) if lower is not None else float(min(values))
    maximum = float(upper) if upper is not None else float(max(values))
    if minimum > maximum:
        raise HeatmapConfigError(f"colour scale bounds are inverted: {minimum} > {maximum}")
    return ValueBounds(
        minimum=minimum,
        maximum=maximum,
        min_clamped=lower is not None,
        max_clamped=upper is not None,
    )
