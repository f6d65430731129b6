from __future__ import annotations

import logging
import math
from pathlib import Path

from heatgrid import BASIC, SMOOTH, Axis, DataPoint, HeatMap, LayoutOptions

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def build_points() -> list[DataPoint]:
    """Seasonal event volumes for 2018-2025 with the last 16 months not yet reported."""
    points: list[DataPoint] = []
    for i, year in enumerate(range(2018, 2026)):
        for month in range(1, 13):
            index = i * 12 + (month - 1)
            if index >= 80:
                points.append(DataPoint(month, year, None))
                continue
            season = 0.5 + 0.5 * math.sin((month - 3) / 12.0 * 2.0 * math.pi)
            trend = index / 79.0
            points.append(DataPoint(month, year, 500000 + 3000000 * (0.6 * trend + 0.4 * season)))
    return points


def build_chart(*, blend: bool = False) -> HeatMap:
    x_axis = Axis("Month", to_label=lambda m: MONTH_NAMES[m - 1]).add_entries(*range(1, 13))
    y_axis = Axis.from_range("Year", 2018, 2025)
    options = LayoutOptions(
        gradient=SMOOTH if blend else BASIC,
        legend_steps=7,
        lower_bound=500000,
        upper_bound=3500000,
        legend_format="#,##0",
        show_gridlines=not blend,
        blend_colors=blend,
        blend_scale=6,
    )
    return HeatMap(x_axis, y_axis, "Events volume by month, 2018 to 2025", options)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    out_dir = Path(__file__).resolve().parent / "out"
    out_dir.mkdir(parents=True, exist_ok=True)
    points = build_points()

    flat_path = build_chart(blend=False).save_png(out_dir / "monthly_volume.png", points)
    blended_path = build_chart(blend=True).save_png(out_dir / "monthly_volume_blended.png", points)

    print(f"wrote {flat_path}")
    print(f"wrote {blended_path}")


if __name__ == "__main__":
    main()
