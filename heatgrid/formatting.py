from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Context, Decimal, InvalidOperation
import math

from heatgrid.errors import HeatmapConfigError


_PATTERN_CHARS = set("0#,.")
_CONTEXT = Context(prec=64)


class DecimalFormat:
    """Number formatter for ``0``/``#`` digit patterns such as ``0.##`` or ``#,##0.00``.

    ``0`` marks a required digit, ``#`` an optional one, ``,`` a grouping separator and
    ``.`` the decimal separator. Rounding is half-even. Instances are cheap; build one per
    render rather than sharing them.
    """

    def __init__(self, pattern: str) -> None:
        if not isinstance(pattern, str) or not pattern:
            raise HeatmapConfigError("decimal format pattern must be a non-empty string")
        # a negative sub-pattern only changes the prefix, which we always render as '-'
        positive = pattern.split(";", 1)[0]
        bad = set(positive) - _PATTERN_CHARS
        if bad:
            raise HeatmapConfigError(f"unsupported characters in decimal format {pattern!r}: {''.join(sorted(bad))}")
        if positive.count(".") > 1:
            raise HeatmapConfigError(f"decimal format {pattern!r} has more than one decimal separator")
        integer, _, fraction = positive.partition(".")
        if "," in fraction:
            raise HeatmapConfigError(f"decimal format {pattern!r} has a grouping separator in the fraction")
        if "0" in fraction and "#" in fraction and fraction.index("#") < fraction.rindex("0"):
            raise HeatmapConfigError(f"decimal format {pattern!r} has an optional digit before a required one")

        self.pattern = pattern
        self.min_integer_digits = integer.count("0")
        self.min_fraction_digits = fraction.count("0")
        self.max_fraction_digits = len(fraction)
        self.grouping_size = len(integer) - integer.rindex(",") - 1 if "," in integer else 0

    def format(self, value: float) -> str:
        value = float(value)
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "-∞" if value < 0 else "∞"

        quant = Decimal(1).scaleb(-self.max_fraction_digits)
        try:
            q = Decimal(value).quantize(quant, rounding=ROUND_HALF_EVEN, context=_CONTEXT)
        except InvalidOperation as exc:
            raise HeatmapConfigError(f"value {value!r} cannot be formatted with {self.pattern!r}") from exc

        negative = q < 0
        text = format(abs(q), "f")
        integer, _, fraction = text.partition(".")

        fraction = fraction[: self.max_fraction_digits]
        while len(fraction) > self.min_fraction_digits and fraction.endswith("0"):
            fraction = fraction[:-1]

        integer = integer.lstrip("0")
        if len(integer) < self.min_integer_digits:
            integer = integer.rjust(self.min_integer_digits, "0")
        if self.grouping_size > 0 and integer:
            integer = _group_digits(integer, self.grouping_size)

        out = integer + ("." + fraction if fraction else "")
        if not out:
            out = "0"
        if negative and out.strip("0.,"):
            out = "-" + out
        return out

    __call__ = format

    def __repr__(self) -> str:
        return f"DecimalFormat({self.pattern!r})"


def _group_digits(digits: str, size: int) -> str:
    groups: list[str] = []
    while len(digits) > size:
        groups.append(digits[-size:])
        digits = digits[:-size]
    groups.append(digits)
    return ",".join(reversed(groups))
