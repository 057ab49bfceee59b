from __future__ import annotations

import datetime as dt

import pytest

from dlrwatch.availability_filter import find_matches, format_match, parse_date
from dlrwatch.domain import DayAvailability, FacilityStatus, MalformedDate, Match

TARGET = dt.date(2024, 7, 1)


def _day(date: str, *facilities: tuple[str, bool], availability: str = "available") -> DayAvailability:
    return DayAvailability(
        date=date,
        availability=availability,
        facilities=tuple(FacilityStatus(facility_name=name, available=ok, blocked=False) for name, ok in facilities),
    )


def test_available_day_before_target_is_reported() -> None:
    matches = find_matches([_day("2024-06-15", ("DLR_CA", True))], TARGET)

    assert matches == [Match(date_iso="2024-06-15", facility_name="California Adventure Park")]
    assert format_match(matches[0]) == "2024-06-15: California Adventure Park is available"


@pytest.mark.parametrize("date", ["2024-07-01", "2024-07-05"])
def test_days_on_or_after_target_are_ignored(date: str) -> None:
    assert find_matches([_day(date, ("DLR_CA", True), ("DLR_DP", True))], TARGET) == []


def test_no_availability_sentinel_skips_day_regardless_of_facilities() -> None:
    day = _day("2024-06-15", ("DLR_CA", True), availability="cms-key-no-availability")
    assert find_matches([day], TARGET) == []


def test_sentinel_day_is_skipped_before_date_parsing() -> None:
    day = _day("not-a-date", ("DLR_CA", True), availability="cms-key-no-availability")
    assert find_matches([day], TARGET) == []


def test_unavailable_facilities_are_ignored() -> None:
    day = _day("2024-06-15", ("DLR_CA", False), ("DLR_DP", True))
    assert find_matches([day], TARGET) == [Match(date_iso="2024-06-15", facility_name="Disneyland Park")]


def test_unknown_facility_is_reported_with_blank_name() -> None:
    matches = find_matches([_day("2024-06-15", ("DLR_XX", True))], TARGET)

    assert matches == [Match(date_iso="2024-06-15", facility_name="")]
    assert format_match(matches[0]) == "2024-06-15:  is available"


def test_matches_keep_input_order() -> None:
    days = [
        _day("2024-06-20", ("DLR_DP", True), ("DLR_CA", True)),
        _day("2024-06-10", ("DLR_CA", True), ("DLR_DP", True)),
    ]

    assert find_matches(days, TARGET) == [
        Match("2024-06-20", "Disneyland Park"),
        Match("2024-06-20", "California Adventure Park"),
        Match("2024-06-10", "California Adventure Park"),
        Match("2024-06-10", "Disneyland Park"),
    ]


@pytest.mark.parametrize("raw", ["", "2024-6-15", "2024-06-15T00:00:00Z", "2024-02-30", "15.06.2024", "\u0662\u0660\u0662\u0664-06-15"])
def test_malformed_dates_raise(raw: str) -> None:
    with pytest.raises(MalformedDate):
        parse_date(raw)


def test_malformed_date_in_payload_raises() -> None:
    with pytest.raises(MalformedDate):
        find_matches([_day("2024/06/15", ("DLR_CA", True))], TARGET)


def test_parse_date_accepts_calendar_dates() -> None:
    assert parse_date("2024-02-29") == dt.date(2024, 2, 29)
