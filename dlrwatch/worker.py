from __future__ import annotations

import datetime as dt
import logging
import time

from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from dlrwatch.availability_client import query_availability
from dlrwatch.availability_filter import find_matches, format_match
from dlrwatch.config import Settings
from dlrwatch.domain import Credential, DayAvailability, TransportError
from dlrwatch.token_provider import get_valid_credential

logger = logging.getLogger(__name__)


def _short_exc(retry_state: RetryCallState) -> str | None:
    if retry_state.outcome is None or not retry_state.outcome.failed:
        return None
    exc = retry_state.outcome.exception()
    if exc is None:
        return None
    msg = str(exc).strip()
    return f"{type(exc).__name__}: {msg}" if msg else type(exc).__name__


def _log_before_sleep(retry_state: RetryCallState) -> None:
    sleep_seconds = getattr(retry_state.next_action, "sleep", None)
    next_attempt = retry_state.attempt_number + 1
    reason = _short_exc(retry_state) or "unknown error"

    if sleep_seconds is None:
        logger.warning("Availability fetch failed (%s), retrying...", reason)
        return

    logger.warning(
        "Availability fetch failed (%s), attempt %s in %.0f sec.",
        reason,
        next_attempt,
        sleep_seconds,
    )


def _fetch_days(settings: Settings, access_token: str) -> list[DayAvailability]:
    return query_availability(
        access_token,
        availability_url=settings.availability_url,
        user_agent=settings.user_agent,
        timeout_seconds=settings.http_timeout_seconds,
    )


def _fetch_days_with_retry(settings: Settings, access_token: str) -> list[DayAvailability]:
    # Only network failures are retried, and only when CHECK_RETRY_ATTEMPTS > 1.
    decorated = retry(
        stop=stop_after_attempt(settings.check_retry_attempts),
        wait=wait_exponential(multiplier=2, min=2, max=8),
        retry=retry_if_exception_type(TransportError),
        before_sleep=_log_before_sleep,
        reraise=True,
    )(_fetch_days)

    return decorated(settings, access_token)


def run_check_once(settings: Settings, target: dt.date, credential: Credential | None = None) -> Credential:
    """Run one poll and print matches to stdout.

    Returns the credential that was used so the caller can pass it to the next check.
    """

    credential = get_valid_credential(credential, dt.datetime.now(dt.timezone.utc), settings=settings)

    days = _fetch_days_with_retry(settings, credential.access_token)
    matches = find_matches(days, target)

    for match in matches:
        print(format_match(match), flush=True)

    logger.info("Checked %d day(s): %d match(es) before %s", len(days), len(matches), target.isoformat())
    return credential


def run_forever(settings: Settings, target: dt.date) -> None:
    interval = settings.check_interval_seconds
    logger.info("Watcher started. Target=%s Interval=%ss", target.isoformat(), interval)

    # Ticks are measured from check starts. The first one fires after a full interval.
    credential: Credential | None = None
    next_tick = time.monotonic() + interval
    while True:
        delay = next_tick - time.monotonic()
        if delay > 0:
            time.sleep(delay)

        credential = run_check_once(settings, target, credential)

        next_tick += interval
        now = time.monotonic()
        if next_tick < now:
            # The check overran: drop the missed ticks, the latest one fires right away.
            skipped = int((now - next_tick) // interval)
            if skipped:
                logger.warning("Check took longer than %ss, skipping %d tick(s)", interval, skipped)
            next_tick += skipped * interval
