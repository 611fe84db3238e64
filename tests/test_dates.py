from datetime import date, datetime

import pytest

from bizsubs.core.dates import (
    financial_year_window,
    format_date_for_display,
    month_bounds,
    parse_date,
    parse_financial_year_end,
    strict_request_date,
    validate_date_format,
    validate_start_date,
)


def test_parse_date_accepts_rows_and_objects() -> None:
    assert parse_date("2025-08-04") == date(2025, 8, 4)
    assert parse_date("2025-08-04T10:30:00+00:00") == date(2025, 8, 4)
    assert parse_date(datetime(2025, 8, 4, 23, 59)) == date(2025, 8, 4)
    assert parse_date(None) is None
    assert parse_date("") is None
    with pytest.raises(ValueError):
        parse_date("04/08/2025")


def test_validate_date_format() -> None:
    assert validate_date_format("2025-08-04") == (True, None, date(2025, 8, 4))
    ok, error, _ = validate_date_format("2025-02-30")
    assert not ok and error == "Invalid date"
    ok, error, _ = validate_date_format("2025-8-4")
    assert not ok and "YYYY-MM-DD" in error


def test_strict_request_date() -> None:
    assert strict_request_date("2025-08-04") == date(2025, 8, 4)
    assert strict_request_date(date(2025, 8, 4)) == date(2025, 8, 4)
    assert strict_request_date(None) is None
    with pytest.raises(ValueError, match="YYYY-MM-DD"):
        strict_request_date("2025-08-04T00:00:00")
    with pytest.raises(ValueError, match="Invalid date"):
        strict_request_date("2025-02-30")


def test_validate_start_date_window() -> None:
    today = date(2025, 8, 4)
    assert validate_start_date(date(2024, 8, 4), today) == (True, None)
    assert validate_start_date(date(2024, 8, 3), today) == (False, "Start date cannot be more than one year ago")
    assert validate_start_date(date(2026, 8, 5), today) == (
        False,
        "Start date cannot be more than one year in the future",
    )


@pytest.mark.parametrize(
    "fmt, expected",
    [("US", "Aug 4, 2025"), ("EU", "4 Aug 2025"), ("ISO", "2025-08-04"), ("XX", "Aug 4, 2025")],
)
def test_format_date_for_display(fmt, expected) -> None:
    assert format_date_for_display(date(2025, 8, 4), fmt) == expected


def test_month_bounds() -> None:
    assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))


def test_financial_year_window() -> None:
    assert financial_year_window("06-30", date(2025, 3, 1)) == (date(2024, 7, 1), date(2025, 6, 30))
    assert financial_year_window("06-30", date(2025, 6, 30)) == (date(2024, 7, 1), date(2025, 6, 30))
    assert financial_year_window("06-30", date(2025, 7, 1)) == (date(2025, 7, 1), date(2026, 6, 30))
    assert financial_year_window("2023-12-31", date(2025, 5, 5)) == (date(2025, 1, 1), date(2025, 12, 31))


def test_financial_year_window_clamps_leap_day() -> None:
    assert financial_year_window("02-29", date(2025, 1, 10)) == (date(2024, 3, 1), date(2025, 2, 28))


def test_parse_financial_year_end_rejects_garbage() -> None:
    assert parse_financial_year_end(None) == (12, 31)
    for bad in ("13-01", "04-31", "june", "2025"):
        with pytest.raises(ValueError):
            parse_financial_year_end(bad)
