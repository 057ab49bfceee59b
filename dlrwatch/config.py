from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# The token endpoint answers 403 to non-browser user agents (python-httpx included).
DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:98.0) Gecko/20100101 Firefox/98.0"

DEFAULT_TOKEN_URL = "https://disneyland.disney.go.com/com-shared/api/get-token/"
DEFAULT_AVAILABILITY_URL = (
    "https://cme-dlr.wdprapps.disney.com/availability/api/v2/availabilities/?sku=66282&sku=66283"
)


@dataclass(frozen=True)
class Settings:
    check_interval_seconds: int = 10

    # Reference behaviour had no timeout at all; a hung request would block the loop forever.
    http_timeout_seconds: float = 30.0

    # How many times a single availability fetch is attempted on transport errors.
    # 1 keeps the one-shot behaviour: the first network error is fatal.
    check_retry_attempts: int = 1

    user_agent: str = DEFAULT_USER_AGENT
    token_url: str = DEFAULT_TOKEN_URL
    availability_url: str = DEFAULT_AVAILABILITY_URL


def _positive_int(name: str, default: str) -> int:
    raw = os.getenv(name, default).strip()
    try:
        value = int(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name} value: {raw!r}. Expected integer.") from e
    if value < 1:
        raise RuntimeError(f"{name} must be >= 1")
    return value


def _positive_float(name: str, default: str) -> float:
    raw = os.getenv(name, default).strip()
    try:
        value = float(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name} value: {raw!r}. Expected number of seconds.") from e
    if value <= 0:
        raise RuntimeError(f"{name} must be > 0")
    return value


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Everything is optional: with no .env and no env vars we get the defaults above.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    return Settings(
        check_interval_seconds=_positive_int("CHECK_INTERVAL_SECONDS", "10"),
        http_timeout_seconds=_positive_float("HTTP_TIMEOUT_SECONDS", "30"),
        check_retry_attempts=_positive_int("CHECK_RETRY_ATTEMPTS", "1"),
        user_agent=os.getenv("USER_AGENT") or DEFAULT_USER_AGENT,
        token_url=os.getenv("TOKEN_URL") or DEFAULT_TOKEN_URL,
        availability_url=os.getenv("AVAILABILITY_URL") or DEFAULT_AVAILABILITY_URL,
    )
