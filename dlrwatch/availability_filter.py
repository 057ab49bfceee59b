from __future__ import annotations

import datetime as dt
import re
from typing import Iterable

from dlrwatch.domain import NO_AVAILABILITY, PARK_NAMES, DayAvailability, Match, MalformedDate

DATE_FORMAT = "%Y-%m-%d"

# strptime alone accepts "2024-6-5"; the API always sends zero-padded dates.
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_date(raw: str) -> dt.date:
    if not _DATE_RE.fullmatch(raw):
        raise MalformedDate(f"Expected YYYY-MM-DD date, got {raw!r}")
    try:
        return dt.datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError as e:
        raise MalformedDate(f"Invalid calendar date: {raw!r}") from e


def find_matches(days: Iterable[DayAvailability], target: dt.date) -> list[Match]:
    """Available park/day pairs strictly before ``target``, in input order.

    Unknown facility codes are still reported, with a blank name.
    """

    matches: list[Match] = []
    for day in days:
        if day.availability == NO_AVAILABILITY:
            continue

        day_date = parse_date(day.date)
        for facility in day.facilities:
            if facility.available and day_date < target:
                matches.append(
                    Match(date_iso=day.date, facility_name=PARK_NAMES.get(facility.facility_name, ""))
                )
    return matches


def format_match(match: Match) -> str:
    return f"{match.date_iso}: {match.facility_name} is available"
