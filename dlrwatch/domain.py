from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

# Facility codes as they appear in the availability response
CALIFORNIA_ADVENTURE_PARK = "DLR_CA"
DISNEYLAND_PARK = "DLR_DP"

PARK_NAMES: dict[str, str] = {
    CALIFORNIA_ADVENTURE_PARK: "California Adventure Park",
    DISNEYLAND_PARK: "Disneyland Park",
}

# Day-level status meaning nothing is bookable that day, whatever the facilities say.
NO_AVAILABILITY = "cms-key-no-availability"


@dataclass(frozen=True)
class Credential:
    """Bearer token plus the instant after which it must not be used."""

    access_token: str
    token_type: str
    valid_until: dt.datetime

    def is_expired(self, now: dt.datetime) -> bool:
        return now >= self.valid_until


@dataclass(frozen=True)
class FacilityStatus:
    facility_name: str
    available: bool
    blocked: bool


@dataclass(frozen=True)
class DayAvailability:
    date: str  # YYYY-MM-DD, parsed lazily by the filter
    availability: str
    facilities: tuple[FacilityStatus, ...] = ()


@dataclass(frozen=True)
class Match:
    """A park that has availability on a day before the target date.

    facility_name is blank for codes missing from PARK_NAMES.
    """

    date_iso: str
    facility_name: str


class DLRWatchError(RuntimeError):
    """Base for every error that should stop the watcher."""


class InvalidArgument(DLRWatchError):
    pass


class AuthDenied(DLRWatchError):
    """Token endpoint answered 403: the User-Agent was rejected."""


class TransportError(DLRWatchError):
    pass


class DecodeError(DLRWatchError):
    pass


class MalformedTokenResponse(DLRWatchError):
    pass


class MalformedDate(DLRWatchError):
    pass
