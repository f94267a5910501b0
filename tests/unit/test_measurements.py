import pytest

from bidworker.extraction.measurements import (
    coerce_measurement,
    measurement_type,
    normalize_measurement,
    normalize_unit,
)
from bidworker.extraction.models import Measurement


class TestNormalizeMeasurement:
    def test_square_feet_with_thousands(self) -> None:
        m = normalize_measurement("3,550 SF")
        assert m.unit == "SF"
        assert m.square_feet == 3550.0
        assert m.dimensions is None

    def test_linear_feet(self) -> None:
        m = normalize_measurement("75 linear feet")
        assert m.unit == "LF"
        assert m.linear_feet == 75.0

    def test_each(self) -> None:
        m = normalize_measurement("12 EA")
        assert m.unit == "EA"
        assert m.count == 12.0

    def test_cubic_yards_go_to_quantity(self) -> None:
        m = normalize_measurement("40 CY")
        assert m.unit == "CY"
        assert m.quantity == 40.0

    def test_square_yards(self) -> None:
        m = normalize_measurement("15 sq yd")
        assert m.unit == "SY"
        assert m.quantity == 15.0

    def test_remainder_kept_as_dimensions(self) -> None:
        m = normalize_measurement("Level 2 - 1,200 sq ft (approx)")
        assert m.square_feet == 1200.0
        assert m.dimensions == "Level 2 approx"

    def test_earliest_match_wins(self) -> None:
        m = normalize_measurement("3 EA at 20 LF each")
        assert m.unit == "EA"
        assert m.count == 3.0

    def test_bare_unit(self) -> None:
        m = normalize_measurement("per SF")
        assert m.unit == "SF"
        assert m.square_feet is None

    def test_no_unit(self) -> None:
        m = normalize_measurement("entire second floor")
        assert m.unit is None
        assert m.dimensions == "entire second floor"

    def test_empty(self) -> None:
        assert normalize_measurement("  ") == Measurement()
        assert normalize_measurement(None) == Measurement()


class TestNormalizeUnit:
    @pytest.mark.parametrize(
        ("token", "expected"),
        [("sq ft", "SF"), ("LF", "LF"), ("each", "EA"), ("cu yd", "CY"), ("SY", "SY")],
    )
    def test_known_tokens(self, token: str, expected: str) -> None:
        assert normalize_unit(token) == expected

    def test_unknown(self) -> None:
        assert normalize_unit("tons") is None
        assert normalize_unit(None) is None


class TestCoerceMeasurement:
    def test_passes_measurement_through(self) -> None:
        m = Measurement(count=2, unit="EA")
        assert coerce_measurement(m) is m

    def test_text(self) -> None:
        assert coerce_measurement("20 LF").linear_feet == 20.0

    def test_camel_case_object(self) -> None:
        m = coerce_measurement({"squareFeet": "1,200", "unit": "sq ft", "dimensions": "10x120"})
        assert m.unit == "SF"
        assert m.square_feet == 1200.0
        assert m.dimensions == "10x120"

    def test_unit_inferred_from_field(self) -> None:
        m = coerce_measurement({"linearFeet": 40})
        assert m.unit == "LF"
        assert m.linear_feet == 40.0

    def test_quantity_moved_into_unit_field(self) -> None:
        m = coerce_measurement({"quantity": 5, "unit": "EA"})
        assert m.count == 5.0
        assert m.quantity is None

    def test_declared_unit_does_not_move_other_field(self) -> None:
        m = coerce_measurement({"unit": "SF", "linearFeet": 10})
        assert m.unit == "LF"
        assert m.linear_feet == 10.0
        assert m.square_feet is None

    def test_measurement_text_fallback(self) -> None:
        m = coerce_measurement({"measurementText": "300 SF"})
        assert m.square_feet == 300.0

    def test_other_types(self) -> None:
        assert coerce_measurement(42) == Measurement()


class TestMeasurementType:
    def test_kinds(self) -> None:
        assert measurement_type(Measurement(square_feet=1)) == "area"
        assert measurement_type(Measurement(linear_feet=1)) == "linear"
        assert measurement_type(Measurement(count=1)) == "count"
        assert measurement_type(Measurement(quantity=1, unit="CY")) == "volume"
        assert measurement_type(Measurement(quantity=1, unit="SY")) == "area"
        assert measurement_type(Measurement()) == "unknown"
