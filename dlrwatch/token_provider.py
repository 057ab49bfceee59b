from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any

import httpx

from dlrwatch.config import Settings
from dlrwatch.domain import (
    AuthDenied,
    Credential,
    DecodeError,
    MalformedTokenResponse,
    TransportError,
)

logger = logging.getLogger(__name__)

# Seconds shaved off the declared lifetime so a token never expires mid-request.
EXPIRY_MARGIN_SECONDS = 5

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _parse_lifetime(raw: Any) -> int:
    if raw is None:
        raw = ""
    if not isinstance(raw, str):
        raise DecodeError(f"Token response field expires_in must be a string, got {type(raw).__name__}")
    if not _INT_RE.fullmatch(raw):
        raise MalformedTokenResponse(f"Token lifetime is not an integer: {raw!r}")
    return int(raw)


def request_token(
    *,
    token_url: str,
    user_agent: str,
    timeout_seconds: float,
    now: dt.datetime,
    transport: httpx.BaseTransport | None = None,
) -> Credential:
    try:
        with httpx.Client(timeout=timeout_seconds, transport=transport, follow_redirects=True) as client:
            r = client.post(token_url, headers={"User-Agent": user_agent})
    except httpx.DecodingError as e:
        raise DecodeError(f"Token response body could not be decoded: {e}") from e
    except httpx.RequestError as e:
        raise TransportError(f"Token request failed: {type(e).__name__}: {e}") from e

    if r.status_code == httpx.codes.FORBIDDEN:
        raise AuthDenied("403 Forbidden from token endpoint - change USER_AGENT?")

    try:
        data = r.json()
    except ValueError as e:
        raise DecodeError(f"Token response is not valid JSON (HTTP {r.status_code})") from e

    if not isinstance(data, dict):
        raise DecodeError(f"Token response must be a JSON object, got {type(data).__name__}")

    access_token = data.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise DecodeError(f"Token response has no access_token (HTTP {r.status_code})")

    token_type = data.get("token_type", "")
    if not isinstance(token_type, str):
        raise DecodeError("Token response field token_type must be a string")

    lifetime = _parse_lifetime(data.get("expires_in"))

    return Credential(
        access_token=access_token,
        token_type=token_type,
        valid_until=now + dt.timedelta(seconds=lifetime - EXPIRY_MARGIN_SECONDS),
    )


def get_valid_credential(
    current: Credential | None,
    now: dt.datetime,
    *,
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
) -> Credential:
    """Return ``current`` while it is still valid, otherwise exchange for a new one.

    The caller owns the credential and threads the returned value into the next call.
    """

    if current is not None and not current.is_expired(now):
        return current

    logger.info("Requesting new token...")
    credential = request_token(
        token_url=settings.token_url,
        user_agent=settings.user_agent,
        timeout_seconds=settings.http_timeout_seconds,
        now=now,
        transport=transport,
    )
    logger.info("Token valid until %s", credential.valid_until.isoformat(timespec="seconds"))
    return credential
