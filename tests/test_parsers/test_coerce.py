"""Tests for coerce-or-default helpers."""

import math

from src.parsers.coerce import (
    as_dict,
    get_path,
    normalize_address,
    to_bool,
    to_float,
    to_int,
    to_str,
    to_tax_percent,
)
from src.parsers.honeypot_is.client import parse_report


class TestNumbers:
    def test_to_float(self) -> None:
        assert to_float("22.5") == 22.5
        assert to_float(3) == 3.0
        assert to_float(None) is None
        assert to_float("abc") is None
        assert to_float({"usd": 1}) is None

    def test_to_float_rejects_nan_and_inf(self) -> None:
        assert to_float("nan") is None
        assert to_float(math.inf) is None

    def test_to_float_rejects_bool(self) -> None:
        assert to_float(True) is None

    def test_to_int(self) -> None:
        assert to_int("150000") == 150000
        assert to_int(12.9) == 12
        assert to_int("") is None


class TestTaxPercent:
    def test_fraction_and_percent_agree(self) -> None:
        """0.07 (fraction) and 7 (percent) are the same tax."""
        assert to_tax_percent(0.07) == 7.0
        assert to_tax_percent(7) == 7.0
        assert to_tax_percent("0.07") == 7.0

    def test_one_passes_through(self) -> None:
        assert to_tax_percent(1) == 1.0

    def test_zero(self) -> None:
        assert to_tax_percent(0) == 0.0

    def test_missing(self) -> None:
        assert to_tax_percent(None) is None
        assert to_tax_percent("n/a") is None


class TestFlagsAndStrings:
    def test_to_bool(self) -> None:
        assert to_bool(True) is True
        assert to_bool(False) is False
        assert to_bool("1") is True
        assert to_bool("false") is False
        assert to_bool(0) is False
        assert to_bool(None) is None
        assert to_bool("maybe") is None

    def test_to_str(self) -> None:
        assert to_str(" USDC ") == "USDC"
        assert to_str("") is None
        assert to_str(None) is None
        assert to_str(["x"]) is None


class TestPaths:
    def test_get_path(self) -> None:
        data = {"pair": {"liquidity": {"usd": 10}}}
        assert get_path(data, "pair", "liquidity", "usd") == 10
        assert get_path(data, "pair", "missing", "usd") is None
        assert get_path({"pair": "oops"}, "pair", "liquidity") is None

    def test_as_dict(self) -> None:
        assert as_dict({"a": 1}) == {"a": 1}
        assert as_dict(None) == {}
        assert as_dict([1, 2]) == {}


class TestNormalizeAddress:
    def test_adds_prefix_and_lowercases(self) -> None:
        raw = "A0B86991C6218B36C1D19D4A2E9EB0CE3606EB48"
        assert normalize_address(raw) == "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"

    def test_keeps_existing_prefix(self) -> None:
        raw = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
        assert normalize_address(raw) == "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"

    def test_malformed_is_not_rejected(self) -> None:
        assert normalize_address("0xnothex") == "0xnothex"


class TestOversizedValues:
    def test_huge_int_is_not_a_float(self) -> None:
        assert to_float(10**400) is None
        assert to_int(10**400) is None
        assert to_tax_percent(10**400) is None

    def test_huge_int_is_not_a_string(self) -> None:
        assert to_str(10**5000) is None

    def test_huge_holder_count_in_report(self) -> None:
        record = parse_report({"holderAnalysis": {"holders": 10**400, "top10Percent": 10**400}})

        assert record.ok
        assert record.holder_count is None
        assert record.top_10_holders_percent is None
