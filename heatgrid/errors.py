from __future__ import annotations


class HeatmapError(ValueError):
    """Base class for every error raised while validating or laying out a heat map."""


class HeatmapConfigError(HeatmapError):
    pass


class HeatmapDataError(HeatmapError):
    pass
