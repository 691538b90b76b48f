"""
tests/test_value_parsers.py

Unit tests for cell-level number and date normalization.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from overdose_trends.validators.value_parsers import date_key, parse_date, parse_number


class TestParseNumber:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1,234", 1234),
            ("  12 ", 12),
            ("1,234,567.5", 1234567.5),
            ("-3", -3),
            ("0", 0),
            ("1e3", 1000),
        ],
    )
    def test_parses_numeric_text(self, raw: str, expected: float) -> None:
        assert parse_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "12 deaths", "nan", "inf", "-Infinity"])
    def test_rejects_blank_and_non_numeric(self, raw: object) -> None:
        assert parse_number(raw) is None

    def test_finite_numbers_pass_through(self) -> None:
        assert parse_number(42) == 42
        assert parse_number(2.5) == 2.5

    def test_non_finite_float_is_rejected(self) -> None:
        assert parse_number(float("nan")) is None
        assert parse_number(float("inf")) is None

    def test_booleans_are_not_numbers(self) -> None:
        assert parse_number(True) is None

    @pytest.mark.parametrize("raw", ["1_000", "\u0661\u0662\u0663", "\uff11\uff12"])
    def test_rejects_underscores_and_non_ascii_digits(self, raw: str) -> None:
        assert parse_number(raw) is None


class TestParseDate:
    def test_iso_and_us_formats_share_a_key(self) -> None:
        iso = parse_date("2023-01-15")
        us = parse_date("01/15/2023")

        assert iso == date(2023, 1, 15)
        assert us == iso
        assert date_key(iso) == date_key(us) == "2023-01-15"

    @pytest.mark.parametrize(
        "raw",
        [
            "1/5/2023",
            "2023-01-05T00:00:00",
            "2023-01-05T10:30:00.000",
            "2023/01/05",
            "01/05/2023 12:00:00 AM",
            "January 5, 2023",
            " 2023-01-05 ",
        ],
    )
    def test_accepts_common_variants(self, raw: str) -> None:
        assert parse_date(raw) == date(2023, 1, 5)

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2023-01", date(2023, 1, 1)),
            ("2023/07", date(2023, 7, 1)),
            ("2023", date(2023, 1, 1)),
            ("Jan 15 2023", date(2023, 1, 15)),
            ("January 15 2023", date(2023, 1, 15)),
            ("January 2023", date(2023, 1, 1)),
            ("Sep 2021", date(2021, 9, 1)),
        ],
    )
    def test_accepts_reduced_precision_and_spelled_months(self, raw: str, expected: date) -> None:
        assert parse_date(raw) == expected

    def test_aware_timestamps_are_shifted_to_utc(self) -> None:
        assert parse_date("2023-01-15T23:30:00-05:00") == date(2023, 1, 16)
        assert parse_date("2023-01-15T23:30:00Z") == date(2023, 1, 15)

    def test_datetime_objects_are_truncated(self) -> None:
        eastern = timezone(timedelta(hours=-5))
        assert parse_date(datetime(2023, 1, 15, 22, 0, tzinfo=eastern)) == date(2023, 1, 16)
        assert parse_date(date(2020, 2, 29)) == date(2020, 2, 29)

    @pytest.mark.parametrize("raw", [None, "", "  ", "not a date", "13/45/2023", "02/30/2023", "2023-13-01"])
    def test_rejects_unparseable(self, raw: object) -> None:
        assert parse_date(raw) is None
