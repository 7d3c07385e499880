import pytest

from airgraph.core.Values import EPSILON, nearly_equal, number_or_zero, parse_optional_number


class TestParseOptionalNumber:

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_input_is_absent(self, raw):
        assert parse_optional_number(raw) is None

    @pytest.mark.parametrize("raw, expected", [
        ("12", 12.0),
        ("-3.5", -3.5),
        (" 7 ", 7.0),
        ("1e3", 1000.0),
        ("0", 0.0),
        (4, 4.0),
        (2.25, 2.25),
    ])
    def test_numeric_input(self, raw, expected):
        assert parse_optional_number(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "12abc", "nan", "inf", "-Infinity", float("nan"), float("inf"), True, [1]])
    def test_invalid_or_non_finite_input_is_absent(self, raw):
        assert parse_optional_number(raw) is None

    def test_huge_integer_does_not_raise(self):
        assert parse_optional_number(10 ** 400) is None

    def test_explicit_zero_is_not_absent(self):
        """"0" must stay distinguishable from an empty field."""
        assert parse_optional_number("0") == 0.0
        assert parse_optional_number("0") is not None

    def test_number_or_zero(self):
        assert number_or_zero("") == 0.0
        assert number_or_zero("oops") == 0.0
        assert number_or_zero("5") == 5.0


class TestNearlyEqual:

    def test_default_tolerance(self):
        assert EPSILON == 1e-6

    def test_exact_boundary_is_equal(self):
        assert nearly_equal(0.0, 1e-6) is True
        assert nearly_equal(1e-6, 0.0) is True

    def test_just_past_boundary_is_not_equal(self):
        assert nearly_equal(0.0, 1.1e-6) is False

    def test_small_difference(self):
        assert nearly_equal(12.0, 12.0000001) is True
        assert nearly_equal(12.0, 12.1) is False

    def test_custom_tolerance(self):
        assert nearly_equal(10.0, 10.4, eps=0.5) is True
        assert nearly_equal(10.0, 10.6, eps=0.5) is False
