from __future__ import annotations

import logging
from typing import Any

import httpx

from dlrwatch.domain import DayAvailability, DecodeError, FacilityStatus, TransportError

logger = logging.getLogger(__name__)

_DAYS_KEY = "calendar-availabilities"


def _field(obj: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    # Missing or null keys fall back to the zero value; a wrong type is a decode error.
    value = obj.get(key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise DecodeError(f"Field {key!r} must be {kind.__name__}, got {type(value).__name__}")
    return value


def _parse_facility(raw: Any) -> FacilityStatus:
    if not isinstance(raw, dict):
        raise DecodeError(f"Facility record must be an object, got {type(raw).__name__}")
    return FacilityStatus(
        facility_name=_field(raw, "facilityName", str, ""),
        available=_field(raw, "available", bool, False),
        blocked=_field(raw, "blocked", bool, False),
    )


def _parse_day(raw: Any) -> DayAvailability:
    if not isinstance(raw, dict):
        raise DecodeError(f"Day record must be an object, got {type(raw).__name__}")
    return DayAvailability(
        date=_field(raw, "date", str, ""),
        availability=_field(raw, "availability", str, ""),
        facilities=tuple(_parse_facility(f) for f in _field(raw, "facilities", list, [])),
    )


def parse_availability_payload(payload: Any) -> list[DayAvailability]:
    if not isinstance(payload, dict):
        raise DecodeError(f"Availability response must be a JSON object, got {type(payload).__name__}")
    return [_parse_day(d) for d in _field(payload, _DAYS_KEY, list, [])]


def query_availability(
    access_token: str,
    *,
    availability_url: str,
    user_agent: str,
    timeout_seconds: float,
    transport: httpx.BaseTransport | None = None,
) -> list[DayAvailability]:
    headers = {
        "User-Agent": user_agent,
        "Authorization": f"Bearer {access_token}",
    }

    try:
        with httpx.Client(timeout=timeout_seconds, transport=transport, follow_redirects=True) as client:
            r = client.get(availability_url, headers=headers)
    except httpx.DecodingError as e:
        raise DecodeError(f"Availability response body could not be decoded: {e}") from e
    except httpx.RequestError as e:
        raise TransportError(f"Availability request failed: {type(e).__name__}: {e}") from e

    # No status check here: an error page simply fails to decode.
    try:
        payload = r.json()
    except ValueError as e:
        raise DecodeError(f"Availability response is not valid JSON (HTTP {r.status_code})") from e

    days = parse_availability_payload(payload)
    logger.debug("Decoded %d day(s) from availability response (HTTP %s)", len(days), r.status_code)
    return days
