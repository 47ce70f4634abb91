"""Search babysitters by age, weekday and time of day."""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import UTC, datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from scripts import runtime
from sitterlink.adapters.current_user import StoreCurrentUser
from sitterlink.adapters.entity_store_factory import create_entity_store
from sitterlink.config.logging_config import get_logger
from sitterlink.config.settings import Settings, get_settings
from sitterlink.domain.exceptions import NonRetryableError, StoreError
from sitterlink.domain.matching_constants import DAY_NAMES
from sitterlink.domain.models import SearchResult, TimeOfDay
from sitterlink.services.display_formatting import (
    TIME_OF_DAY_LABELS,
    describe_available_days,
    display_name,
)
from sitterlink.services.time_window import day_of_week_of
from sitterlink.use_cases.search_babysitters import (
    build_match_query,
    search_babysitters_use_case,
)

logger = get_logger(__name__)


def _parse_day(value: str) -> int:
    lowered = value.strip().lower()
    for index, name in enumerate(DAY_NAMES):
        if lowered in (name.lower(), name[:3].lower()):
            return index
    try:
        day = int(lowered)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid weekday: {value!r}") from exc
    if not 0 <= day < len(DAY_NAMES):
        raise argparse.ArgumentTypeError("weekday must be 0 (Sunday) to 6 (Saturday)")
    return day


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search babysitters as a parent")
    parser.add_argument(
        "--user-id",
        help="Parent user id (defaults to CURRENT_USER_ID from settings)",
    )
    parser.add_argument("--age-min", type=int, help="Minimum babysitter age")
    parser.add_argument("--age-max", type=int, help="Maximum babysitter age")
    parser.add_argument(
        "--day",
        type=_parse_day,
        help="Weekday name or number, 0 = Sunday (defaults to today)",
    )
    parser.add_argument(
        "--time-of-day",
        choices=[bucket.value for bucket in TimeOfDay],
        default=TimeOfDay.ANYTIME.value,
        help="Time-of-day bucket",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs in JSON format",
    )
    return parser.parse_args(argv)


def _print_result(result: SearchResult) -> None:
    query = result.query
    print(
        f"{result.matched} of {result.total_candidates} babysitters available on "
        f"{DAY_NAMES[query.day_of_week]}, {TIME_OF_DAY_LABELS[query.time_of_day]}, "
        f"ages {query.age_min}-{query.age_max}"
    )
    for candidate in result.candidates:
        age = candidate.age if candidate.age is not None else "?"
        print(f"- {display_name(candidate.profile)} ({age}): {describe_available_days(candidate)}")


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    store = create_entity_store(settings)
    identity = StoreCurrentUser(store, args.user_id or settings.current_user_id)

    day = args.day
    if day is None:
        day = day_of_week_of(datetime.now(tz=UTC), settings.tz_default)

    try:
        query = build_match_query(
            args.age_min if args.age_min is not None else settings.search_default_age_min,
            args.age_max if args.age_max is not None else settings.search_default_age_max,
            day,
            args.time_of_day,
            age_floor=settings.search_age_floor,
            age_ceiling=settings.search_age_ceiling,
        )
        result = await search_babysitters_use_case(store, identity, query)
    except NonRetryableError as exc:
        logger.error("babysitter_search_rejected", error=str(exc))
        return 2
    except StoreError as exc:
        logger.error("babysitter_search_failed", error=str(exc))
        return 1

    _print_result(result)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    settings = get_settings()
    runtime.initialize_logging(settings, json_logs=args.json_logs)

    return asyncio.run(_run(args, settings))


if __name__ == "__main__":
    raise SystemExit(main())
