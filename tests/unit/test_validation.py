"""Unit tests for input coercion and identity patterns"""

import pytest
from fin5_gateway.domain.models import EmploymentType, InflowTrend
from fin5_gateway.domain.validation import (
    is_valid_aadhaar,
    is_valid_pan,
    mask_aadhaar,
    round_half_up,
    to_number,
    to_optional_number,
    to_text,
)


@pytest.mark.parametrize(
    "value,expected",
    [(None, 0.0), (True, 0.0), ("abc", 0.0), (float("nan"), 0.0), (float("inf"), 0.0), ("42.5", 42.5), (7, 7.0)],
)
def test_to_number(value, expected):
    assert to_number(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [(None, None), (False, None), ("n/a", None), (float("nan"), None), ("", None), ("12000", 12000.0), (0, 0.0)],
)
def test_to_optional_number(value, expected):
    assert to_optional_number(value) == expected


def test_to_text():
    assert to_text(None) == ""
    assert to_text(42) == "42"
    assert to_text("SALARIED") == "SALARIED"


@pytest.mark.parametrize("value,expected", [(2.5, 3), (3.5, 4), (2.4999, 2), (400.5, 401)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_pan_and_aadhaar_patterns():
    assert is_valid_pan("ABCDE1234F")
    assert not is_valid_pan("abcde1234f")
    assert not is_valid_pan("ABCDE1234FX")
    assert is_valid_aadhaar("123456789012")
    assert not is_valid_aadhaar("12345678901")
    assert not is_valid_aadhaar(None)


def test_mask_aadhaar():
    assert mask_aadhaar("123456789012") == "1234****9012"
    assert mask_aadhaar("bad") == "bad"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("salaried", EmploymentType.SALARIED),
        ("Self Employed", EmploymentType.SELF_EMPLOYED),
        ("self-employed", EmploymentType.SELF_EMPLOYED),
        ("astronaut", EmploymentType.OTHER),
        (None, EmploymentType.OTHER),
    ],
)
def test_employment_type_parse(raw, expected):
    assert EmploymentType.parse(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [("rising", InflowTrend.INCREASING), ("Falling", InflowTrend.DECREASING), ("stable", InflowTrend.STABLE), ("??", InflowTrend.STABLE)],
)
def test_inflow_trend_parse(raw, expected):
    assert InflowTrend.parse(raw) == expected
