"""Normalization of free-text measurements such as "3,550 SF" or "3 EA"."""

import re
from dataclasses import dataclass
from typing import Any

from bidworker.extraction.models import Measurement
from bidworker.extraction.numbers import parse_number, positive_or_none


@dataclass(frozen=True)
class _UnitRule:
    unit: str
    target_field: str
    tokens: tuple[str, ...]


# Evaluated in order; earlier rules win when two units match at the same position.
_UNIT_RULES: tuple[_UnitRule, ...] = (
    _UnitRule(
        "SF",
        "square_feet",
        (r"sf", r"sq\.?\s*ft\.?", r"sq\.?\s*feet", r"square\s+f(?:ee|oo)t", r"ft2", r"ft²"),
    ),
    _UnitRule(
        "LF",
        "linear_feet",
        (r"lf", r"lin\.?\s*ft\.?", r"ln\.?\s*ft\.?", r"linear\s+f(?:ee|oo)t"),
    ),
    _UnitRule("EA", "count", (r"ea\.?", r"each", r"pcs?\.?", r"pieces?")),
    _UnitRule("CY", "quantity", (r"cy", r"cu\.?\s*yds?\.?", r"cubic\s+yards?")),
    _UnitRule("SY", "quantity", (r"sy", r"sq\.?\s*yds?\.?", r"square\s+yards?")),
)

_RULE_BY_UNIT = {rule.unit: rule for rule in _UNIT_RULES}

_NUMBER = r"(?<![\d.])(?P<number>\d+(?:\.\d+)?|\.\d+)"
_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")
_EDGE_NOISE = " \t-–:;,/()[]"

_NUMBER_UNIT_PATTERNS = tuple(
    (
        rule,
        re.compile(
            _NUMBER + r"\s*(?:-\s*)?(?:" + "|".join(rule.tokens) + r")(?![a-z])",
            re.IGNORECASE,
        ),
    )
    for rule in _UNIT_RULES
)
_BARE_UNIT_PATTERNS = tuple(
    (rule, re.compile(r"(?<![a-z])(?:" + "|".join(rule.tokens) + r")(?![a-z])", re.IGNORECASE))
    for rule in _UNIT_RULES
)
_UNIT_TOKEN_PATTERNS = tuple(
    (rule, re.compile(r"(?:" + "|".join(rule.tokens) + r")", re.IGNORECASE))
    for rule in _UNIT_RULES
)


def normalize_measurement(text: object) -> Measurement:
    """Parse a free-text measurement into a Measurement.

    The earliest ``<number> <unit>`` pair wins and its value goes into the
    field for that unit. Whatever is left of the text is kept in
    ``dimensions``. A unit token without a number sets only ``unit``. Text
    with no recognizable unit comes back with ``unit=None`` and the raw text
    in ``dimensions``.
    """
    if not isinstance(text, str):
        return Measurement()
    raw = text.strip()
    if not raw:
        return Measurement()
    cleaned = _THOUSANDS_SEPARATOR.sub("", raw)

    best: tuple[int, int, _UnitRule, re.Match[str]] | None = None
    for order, (rule, pattern) in enumerate(_NUMBER_UNIT_PATTERNS):
        match = pattern.search(cleaned)
        if match is None:
            continue
        key = (match.start(), order)
        if best is None or key < best[:2]:
            best = (match.start(), order, rule, match)
    if best is not None:
        _, _, rule, match = best
        value = parse_number(match.group("number"))
        return _build(rule, value, _remainder(cleaned, match))

    for rule, pattern in _BARE_UNIT_PATTERNS:
        match = pattern.search(cleaned)
        if match is not None:
            return Measurement(unit=rule.unit, dimensions=_remainder(cleaned, match))

    return Measurement(dimensions=raw)


def normalize_unit(token: object) -> str | None:
    """Canonical unit code for a unit token such as "sq ft" or "each"."""
    if not isinstance(token, str):
        return None
    stripped = token.strip()
    for rule, pattern in _UNIT_TOKEN_PATTERNS:
        if pattern.fullmatch(stripped):
            return rule.unit
    return None


def coerce_measurement(raw: object) -> Measurement:
    """Build a Measurement from a model-supplied object or measurement text."""
    if isinstance(raw, Measurement):
        return raw
    if isinstance(raw, str):
        return normalize_measurement(raw)
    if not isinstance(raw, dict):
        return Measurement()

    values = {
        "quantity": positive_or_none(raw.get("quantity")),
        "square_feet": positive_or_none(raw.get("squareFeet")),
        "linear_feet": positive_or_none(raw.get("linearFeet")),
        "count": positive_or_none(raw.get("count")),
    }
    dimensions = _text_or_none(raw.get("dimensions"))
    unit = normalize_unit(raw.get("unit"))

    if unit is None:
        unit = _unit_from_populated_field(values)
    if unit is None:
        if all(value is None for value in values.values()):
            text = _text_or_none(raw.get("measurementText"))
            if text is not None:
                return normalize_measurement(text)
        return Measurement(
            quantity=values["quantity"],
            square_feet=values["square_feet"],
            linear_feet=values["linear_feet"],
            count=values["count"],
            dimensions=dimensions,
        )

    rule = _RULE_BY_UNIT[unit]
    value = values[rule.target_field]
    if value is None:
        # A filled type field outranks a declared unit it contradicts.
        populated_unit = _unit_from_populated_field(values)
        if populated_unit is not None:
            rule = _RULE_BY_UNIT[populated_unit]
            value = values[rule.target_field]
        else:
            value = values["quantity"]
    return _build(rule, value, dimensions)


def measurement_type(measurement: Measurement) -> str:
    """Coarse kind of quantity: area, linear, count, volume or unknown."""
    if (measurement.square_feet or 0) > 0:
        return "area"
    if (measurement.linear_feet or 0) > 0:
        return "linear"
    if (measurement.count or 0) > 0:
        return "count"
    if (measurement.quantity or 0) > 0:
        if measurement.unit == "CY":
            return "volume"
        if measurement.unit == "SY":
            return "area"
    return "unknown"


def _build(rule: _UnitRule, value: float | None, dimensions: str | None) -> Measurement:
    fields: dict[str, Any] = {rule.target_field: value}
    return Measurement(unit=rule.unit, dimensions=dimensions, **fields)


def _unit_from_populated_field(values: dict[str, float | None]) -> str | None:
    for rule in _UNIT_RULES:
        if rule.target_field != "quantity" and values[rule.target_field] is not None:
            return rule.unit
    return None


def _remainder(text: str, match: re.Match[str]) -> str | None:
    before = text[: match.start()].strip(_EDGE_NOISE)
    after = text[match.end() :].strip(_EDGE_NOISE)
    remainder = " ".join(part for part in (before, after) if part)
    return remainder or None


def _text_or_none(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None

