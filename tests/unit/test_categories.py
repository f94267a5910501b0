import pytest

from bidworker.extraction.categories import ALLOWED_CATEGORIES, normalize_category


class TestNormalizeCategory:
    @pytest.mark.parametrize("value", sorted(ALLOWED_CATEGORIES))
    def test_allowed_values_pass_through(self, value: str) -> None:
        assert normalize_category(value) == value

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("HVAC", "hvac"),
            ("MEP", "electrical"),
            ("Demolition", "other"),
            ("Flooring", "floor"),
            ("Clean Up", "cleanup"),
            ("Sprinklers", "fire protection"),
            ("  Walls ", "wall"),
        ],
    )
    def test_aliases(self, raw: str, expected: str) -> None:
        assert normalize_category(raw) == expected

    def test_first_of_comma_list(self) -> None:
        assert normalize_category("ceiling, electrical") == "ceiling"

    def test_unknown_is_other(self) -> None:
        assert normalize_category("landscaping") == "other"

    def test_missing_is_other(self) -> None:
        assert normalize_category(None) == "other"
        assert normalize_category("") == "other"
