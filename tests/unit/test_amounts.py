import math
from decimal import Decimal

import pytest

from bitty_exchange.services.amounts import (
    ConversionStrategy,
    PLACEHOLDER,
    TokenAmount,
    format_amount,
    format_currency,
    format_percent,
    format_token_summary,
    normalize_amount,
    to_raw_units,
    to_ui_amount,
)


@pytest.mark.parametrize("value", [None, float("nan"), float("inf"), -math.inf, "abc", "", "   ", "1_000", True, object(), [1]])
def test_normalize_returns_none_for_unusable_values(value):
    assert normalize_amount(value, 6) is None


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, 0.0),
        (42, 42.0),
        (-1.25, -1.25),
        ("3.5", 3.5),
        (" 7 ", 7.0),
        ("1e3", 1000.0),
        (Decimal("2.75"), 2.75),
    ],
)
def test_normalize_plain_values(value, expected):
    result = normalize_amount(value, 6)
    assert result == expected
    assert math.isfinite(result)


def test_normalize_rejects_non_finite_strings_and_decimals():
    assert normalize_amount("Infinity") is None
    assert normalize_amount("NaN") is None
    assert normalize_amount(Decimal("NaN")) is None


def test_structured_amount_exact_strategy():
    amount = TokenAmount(raw=123_456_789, token_decimals=6, strategy=ConversionStrategy.EXACT)
    assert normalize_amount(amount, 6) == pytest.approx(123.456789)


def test_structured_amount_numeric_strategy():
    amount = TokenAmount(raw=1_500_000_000, token_decimals=9, strategy=ConversionStrategy.NUMERIC)
    assert normalize_amount(amount, 9) == pytest.approx(1.5)


def test_structured_amount_fixed_strategy_rounds_to_requested_decimals():
    amount = TokenAmount(raw=1_234_567, token_decimals=6, strategy=ConversionStrategy.FIXED)
    assert normalize_amount(amount, 2) == 1.23
    assert normalize_amount(amount, 4) == 1.2346


def test_preferred_picks_most_precise_supported_strategy():
    amount = TokenAmount.preferred(10, 1, [ConversionStrategy.FIXED, ConversionStrategy.NUMERIC])
    assert amount.strategy is ConversionStrategy.NUMERIC

    exact = TokenAmount.preferred(10, 1, list(ConversionStrategy))
    assert exact.strategy is ConversionStrategy.EXACT

    with pytest.raises(ValueError):
        TokenAmount.preferred(10, 1, [])


def test_fixed_strategy_handles_amounts_beyond_default_decimal_precision():
    raw = 10 ** 30 + 123_456
    fixed = TokenAmount(raw=raw, token_decimals=6, strategy=ConversionStrategy.FIXED)
    exact = TokenAmount(raw=raw, token_decimals=6)

    assert normalize_amount(fixed, 2) == pytest.approx(1e24)
    assert normalize_amount(fixed, 2) == normalize_amount(exact, 6)
    assert exact.exact == Decimal("1000000000000000000000000.123456")


def test_structured_amount_overflowing_float_is_none():
    amount = TokenAmount(raw=10 ** 400, token_decimals=0)
    assert normalize_amount(amount, 0) is None


def test_ui_and_raw_unit_conversion():
    assert to_ui_amount(2_500_000_000, 9) == 2.5
    assert to_ui_amount("not-a-number", 9) is None
    assert to_raw_units(1.5, 9) == 1_500_000_000
    assert to_raw_units(0.1234567, 6) == 123_456


def test_format_percent_examples():
    assert format_percent(-3.456) == "-3.46%"
    assert format_percent(2) == "+2.00%"
    assert format_percent(None) == "—"
    assert format_percent(float("nan")) == PLACEHOLDER
    assert format_percent(-0.0) == "+0.00%"
    assert format_percent(1.23456, 3) == "+1.235%"


def test_format_amount_trims_trailing_zeros_and_groups():
    assert format_amount(1234.5) == "1,234.5"
    assert format_amount(2) == "2"
    assert format_amount(0.1234567) == "0.123457"
    assert format_amount(1234567.891, 2) == "1,234,567.89"
    assert format_amount(None) == PLACEHOLDER
    assert format_amount(float("inf")) == PLACEHOLDER


def test_format_currency():
    assert format_currency(14775) == "$14,775.00"
    assert format_currency(0.5) == "$0.50"
    assert format_currency(-1.5) == "-$1.50"
    assert format_currency(None) == PLACEHOLDER


def test_format_token_summary():
    assert format_token_summary(1500, "BITTY") == "1,500 BITTY"
    assert format_token_summary(0.256, "SOL") == "0.26 SOL"
    assert format_token_summary(float("nan"), "SOL") == "SOL"
