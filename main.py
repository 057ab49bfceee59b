import argparse
import logging

from dlrwatch.availability_filter import parse_date
from dlrwatch.config import load_settings
from dlrwatch.domain import InvalidArgument, MalformedDate
from dlrwatch.worker import run_check_once, run_forever

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def _parse_target(raw: str):
    try:
        return parse_date(raw)
    except MalformedDate as e:
        raise InvalidArgument(f"Target date must be YYYY-MM-DD, got {raw!r}") from e


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="DLRWatch: Disneyland Resort availability watcher")
    parser.add_argument("target_date", help="Report availability strictly before this date (YYYY-MM-DD)")
    parser.add_argument("--once", action="store_true", help="Run single check now and exit")
    args = parser.parse_args(argv)

    _setup_logging()

    # Every error ends up here: lower layers raise, only main decides to exit.
    try:
        target = _parse_target(args.target_date)
        settings = load_settings()

        if args.once:
            run_check_once(settings, target)
            return 0

        run_forever(settings, target)
        return 0

    except RuntimeError as e:
        logger.error("Fatal error (%s: %s)", type(e).__name__, e)
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted, exiting.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
