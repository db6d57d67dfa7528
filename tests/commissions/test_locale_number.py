"""本地化数字解析与格式化测试。"""
from decimal import Decimal

import pytest

from commissions.locale_number import (
    format_brl,
    format_currency_number,
    format_grouped,
    format_rate_number,
    mask_currency_input,
    mask_rate_input,
    parse_locale_number,
    to_number,
)


class TestParseLocaleNumber:
    """parse_locale_number 解析规则。"""

    @pytest.mark.parametrize("text, expected", [
        ("1.250,50", Decimal("1250.50")),
        ("1250,00", Decimal("1250.00")),
        ("0,5", Decimal("0.5")),
        ("2000", Decimal("2000")),
        ("1.000.000", Decimal("1000000")),
        ("-3,5", Decimal("-3.5")),
        (",75", Decimal("0.75")),
        ("  42,1  ", Decimal("42.1")),
    ])
    def test_parses_brazilian_format(self, text, expected):
        assert parse_locale_number(text) == expected

    def test_extra_commas_join_fraction_digits(self):
        assert parse_locale_number("12,5,3") == Decimal("12.53")

    def test_partial_input_keeps_numeric_prefix(self):
        assert parse_locale_number("12,") == Decimal("12")
        assert parse_locale_number("15abc") == Decimal("15")

    @pytest.mark.parametrize("text", ["", "abc", "-", ",", None])
    def test_unparsable_returns_default(self, text):
        assert parse_locale_number(text) is None
        assert parse_locale_number(text, default=Decimal(0)) == Decimal(0)

    def test_numbers_pass_through(self):
        assert parse_locale_number(Decimal("6.25")) == Decimal("6.25")
        assert parse_locale_number(10) == Decimal("10")
        assert parse_locale_number(0.5) == Decimal("0.5")

    def test_non_finite_and_bool_return_default(self):
        assert parse_locale_number(float("nan")) is None
        assert parse_locale_number(Decimal("Infinity")) is None
        assert parse_locale_number(True) is None

    def test_no_truncation_at_parse_time(self):
        assert parse_locale_number("10,12345") == Decimal("10.12345")

    def test_to_number_defaults_to_zero(self):
        assert to_number("") == Decimal(0)
        assert to_number("x") == Decimal(0)
        assert to_number("3,5") == Decimal("3.5")


class TestFormatting:
    """格式化输出。"""

    def test_currency_has_two_decimals_without_grouping(self):
        assert format_currency_number(Decimal("1250")) == "1250,00"
        assert format_currency_number(Decimal("6.255")) == "6,26"
        assert format_currency_number(0) == "0,00"
        assert format_currency_number(None) == ""

    def test_rate_has_free_decimals(self):
        assert format_rate_number(Decimal("0.5000")) == "0,5"
        assert format_rate_number(Decimal("1.25")) == "1,25"
        assert format_rate_number(Decimal("100")) == "100"
        assert format_rate_number(None) == ""

    def test_grouped_and_brl(self):
        assert format_grouped(Decimal("1234567.891")) == "1.234.567,89"
        assert format_brl(Decimal("1250.5")) == "R$ 1.250,50"
        assert format_brl(None) == "R$ 0,00"

    @pytest.mark.parametrize("text", ["1.250,50", "0,01", "99999,99", "10,00", "7,5"])
    def test_currency_round_trip_is_stable(self, text):
        first = parse_locale_number(text)
        again = parse_locale_number(format_currency_number(first))
        assert again == first
        assert format_currency_number(again) == format_currency_number(first)


class TestInputMasks:
    """输入掩码。"""

    def test_rate_mask_keeps_digits_and_one_comma(self):
        assert mask_rate_input("1a2,3,4") == "12,34"
        assert mask_rate_input("0.5") == "05"
        assert mask_rate_input("") == ""

    def test_currency_mask_truncates_to_two_decimals(self):
        assert mask_currency_input("12,345") == "12,34"
        assert mask_currency_input("1,2,345") == "1,23"
        assert mask_currency_input("R$ 100") == "100"
