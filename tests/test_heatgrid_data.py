from __future__ import annotations

from decimal import Decimal
import importlib.util
import unittest

from heatgrid import (
    DataPoint,
    HeatmapConfigError,
    HeatmapDataError,
    ValueBounds,
    compute_value_bounds,
    normalize_points,
)


class NormalizePointsTests(unittest.TestCase):
    def test_accepts_points_tuples_and_mappings(self) -> None:
        points = normalize_points(
            [
                DataPoint("a", 1, 2.0),
                ("b", 2, 3),
                {"x": "c", "y": 3, "value": Decimal("4.5")},
                {"x": "d", "y": 4},
            ]
        )
        self.assertEqual(
            points,
            [
                DataPoint("a", 1, 2.0),
                DataPoint("b", 2, 3.0),
                DataPoint("c", 3, 4.5),
                DataPoint("d", 4, None),
            ],
        )

    def test_nan_means_no_data(self) -> None:
        (point,) = normalize_points([("a", "b", float("nan"))])
        self.assertIsNone(point.value)
        self.assertFalse(point.has_value)

    def test_rejects_missing_or_empty_data(self) -> None:
        for data in (None, [], ()):
            with self.subTest(data=data), self.assertRaisesRegex(HeatmapDataError, "missing data"):
                normalize_points(data)

    def test_rejects_malformed_records(self) -> None:
        with self.assertRaisesRegex(HeatmapDataError, "triple"):
            normalize_points([("a", "b")])
        with self.assertRaisesRegex(HeatmapDataError, "non-numeric"):
            normalize_points([("a", "b", "lots")])
        with self.assertRaisesRegex(HeatmapDataError, "non-numeric"):
            normalize_points([("a", "b", True)])
        with self.assertRaisesRegex(HeatmapDataError, "missing key"):
            normalize_points([{"x": "a", "value": 1}])
        with self.assertRaisesRegex(HeatmapDataError, "non-finite"):
            normalize_points([("a", "b", float("inf"))])

    @unittest.skipIf(importlib.util.find_spec("pandas") is None, "pandas not installed")
    def test_accepts_data_frame(self) -> None:
        import pandas as pd

        frame = pd.DataFrame({"x": [1, 2], "y": ["a", "b"], "value": [1.5, None]})
        points = normalize_points(frame)
        self.assertEqual(points[0], DataPoint(1, "a", 1.5))
        self.assertIsNone(points[1].value)

    @unittest.skipIf(importlib.util.find_spec("pandas") is None, "pandas not installed")
    def test_data_frame_requires_columns(self) -> None:
        import pandas as pd

        with self.assertRaisesRegex(HeatmapDataError, "missing columns: value"):
            normalize_points(pd.DataFrame({"x": [1], "y": [2]}))


class ValueBoundsTests(unittest.TestCase):
    def test_bounds_from_data_skip_nulls(self) -> None:
        points = [DataPoint(0, 0, 4.0), DataPoint(1, 0, None), DataPoint(2, 0, -1.0)]
        self.assertEqual(compute_value_bounds(points), ValueBounds(-1.0, 4.0, False, False))

    def test_one_sided_clamp_takes_other_bound_from_data(self) -> None:
        points = [DataPoint(0, 0, 4.0), DataPoint(1, 0, 10.0)]
        bounds = compute_value_bounds(points, lower=5.0)
        self.assertEqual(bounds, ValueBounds(5.0, 10.0, True, False))
        bounds = compute_value_bounds(points, upper=8.0)
        self.assertEqual(bounds, ValueBounds(4.0, 8.0, False, True))

    def test_two_sided_clamp_ignores_data(self) -> None:
        bounds = compute_value_bounds([DataPoint(0, 0, None)], lower=1.0, upper=2.0)
        self.assertEqual(bounds, ValueBounds(1.0, 2.0, True, True))

    def test_inverted_clamp_is_config_error(self) -> None:
        points = [DataPoint(0, 0, 4.0)]
        with self.assertRaises(HeatmapConfigError):
            compute_value_bounds(points, lower=3.0, upper=1.0)
        with self.assertRaisesRegex(HeatmapConfigError, "inverted"):
            compute_value_bounds(points, lower=10.0)

    def test_all_null_data_cannot_derive_bounds(self) -> None:
        with self.assertRaisesRegex(HeatmapDataError, "no values"):
            compute_value_bounds([DataPoint(0, 0, None)])

    def test_normalize(self) -> None:
        bounds = ValueBounds(0.0, 10.0)
        self.assertEqual(bounds.normalize(0.0), 0.0)
        self.assertEqual(bounds.normalize(2.5), 0.25)
        self.assertEqual(bounds.normalize(10.0), 1.0)

    def test_normalize_caps_values_beyond_clamps(self) -> None:
        bounds = ValueBounds(5.0, 10.0, True, True)
        self.assertEqual(bounds.normalize(1.0), 0.0)
        self.assertEqual(bounds.normalize(50.0), 1.0)

    def test_zero_range_normalizes_to_one(self) -> None:
        bounds = compute_value_bounds([DataPoint(0, 0, 7.0), DataPoint(1, 0, 7.0)])
        self.assertEqual(bounds.value_range, 0.0)
        self.assertEqual(bounds.normalize(7.0), 1.0)


if __name__ == "__main__":
    unittest.main()
