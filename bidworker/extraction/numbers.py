"""Parsing of numbers that arrive as free text from model output or user edits."""

import math
import re

from bidworker.extraction.models import Measurement

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
_NOISE = re.compile(r"[$,]")


def parse_number(value: object) -> float | None:
    """Return the numeric value of ``value`` or None.

    Strings are read like ``"$1,250.50 per SF"``: currency symbols and
    thousands separators are dropped and the leading numeric token is used,
    so ``"1 1/2"`` reads as 1. Booleans, non-finite numbers and anything
    unparseable give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None
    match = _LEADING_NUMBER.match(_NOISE.sub("", value).strip())
    if match is None:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


def positive_or_none(value: object) -> float | None:
    number = parse_number(value)
    if number is None or number <= 0:
        return None
    return number


def resolve_quantity(measurement: Measurement) -> float:
    """Single scalar quantity of a measurement.

    Priority: quantity, square_feet, linear_feet, count. Returns 0.0 when
    none of them is positive.
    """
    for candidate in (
        measurement.quantity,
        measurement.square_feet,
        measurement.linear_feet,
        measurement.count,
    ):
        number = positive_or_none(candidate)
        if number is not None:
            return number
    return 0.0
