"""Weekly availability editing for babysitters.

Saving replaces the whole schedule: every stored entry is deleted, then one
entry is created per available day. The two steps are not atomic. When a
store call fails midway the operation stops, nothing is rolled back, and
the result reports how far it got; callers reload the schedule to see the
actual state.
"""

from collections.abc import Sequence
from time import perf_counter

from pydantic import ValidationError as PydanticValidationError

from sitterlink.config.logging_config import get_logger
from sitterlink.domain.exceptions import StoreError, ValidationError
from sitterlink.domain.matching_constants import DAYS_IN_WEEK
from sitterlink.domain.models import (
    AvailabilityEntry,
    AvailabilityReplaceResult,
    ScheduleDay,
    UserType,
)
from sitterlink.domain.protocols import CurrentUserProtocol, EntityStoreProtocol
from sitterlink.observability.metrics import USE_CASE_DURATION_SECONDS
from sitterlink.observability.tracing import correlation_scope
from sitterlink.use_cases.access import resolve_current_user

logger = get_logger(__name__)


def default_week() -> list[ScheduleDay]:
    """Seven unavailable days with the default 09:00-17:00 shift."""
    return [ScheduleDay(day_of_week=day) for day in range(DAYS_IN_WEEK)]


async def load_weekly_schedule(
    store: EntityStoreProtocol, babysitter_id: str
) -> list[ScheduleDay]:
    """Load a babysitter's schedule as seven editor rows.

    Days without a stored entry keep the defaults. If the fetch fails the
    default week is returned.
    """
    schedule = default_week()
    try:
        records = await store.availability.filter(babysitter_id=babysitter_id)
    except StoreError as exc:
        logger.warning(
            "availability_load_failed_using_defaults",
            babysitter_id=babysitter_id,
            error=str(exc),
        )
        return schedule

    for record in records:
        try:
            entry = AvailabilityEntry.model_validate(record)
        except PydanticValidationError as exc:
            logger.warning(
                "availability_record_invalid",
                babysitter_id=babysitter_id,
                record_id=record.get("id"),
                error=str(exc),
            )
            continue

        row = schedule[entry.day_of_week]
        if row.available:
            continue
        schedule[entry.day_of_week] = ScheduleDay(
            day_of_week=entry.day_of_week,
            available=True,
            start_time=entry.start_clock,
            end_time=entry.end_clock,
            id=entry.id,
        )
    return schedule


def validate_schedule(schedule: Sequence[ScheduleDay]) -> None:
    """Reject schedules listing the same weekday twice.

    Raises:
        ValidationError: On duplicate weekdays
    """
    seen: set[int] = set()
    for day in schedule:
        if day.day_of_week in seen:
            raise ValidationError(f"Weekday {day.day_of_week} appears more than once")
        seen.add(day.day_of_week)


async def replace_availability_use_case(
    store: EntityStoreProtocol,
    identity: CurrentUserProtocol,
    schedule: Sequence[ScheduleDay],
    *,
    correlation_id: str | None = None,
) -> AvailabilityReplaceResult:
    """Replace the current babysitter's weekly availability.

    Raises:
        ValidationError: If the schedule is invalid (before any store call)
        AuthenticationError: If nobody is logged in
        AccessDeniedError: If the current user is not a babysitter
    """
    validate_schedule(schedule)

    with correlation_scope(correlation_id) as bound_correlation_id:
        stage_start = perf_counter()
        try:
            babysitter = await resolve_current_user(identity, UserType.BABYSITTER)
            entries = [day.to_entry(babysitter.id) for day in schedule if day.available]

            deleted = 0
            created = 0
            try:
                existing = await store.availability.filter(babysitter_id=babysitter.id)
                for record in existing:
                    await store.availability.delete(record["id"])
                    deleted += 1
                for entry in entries:
                    await store.availability.create(entry.to_record())
                    created += 1
            except StoreError as exc:
                logger.error(
                    "availability_replace_interrupted",
                    correlation_id=bound_correlation_id,
                    babysitter_id=babysitter.id,
                    deleted=deleted,
                    created=created,
                    expected_created=len(entries),
                    error=str(exc),
                )
                return AvailabilityReplaceResult(
                    deleted=deleted,
                    created=created,
                    expected_created=len(entries),
                    ok=False,
                    error=str(exc),
                )

            logger.info(
                "availability_replaced",
                correlation_id=bound_correlation_id,
                babysitter_id=babysitter.id,
                deleted=deleted,
                created=created,
            )
            return AvailabilityReplaceResult(
                deleted=deleted,
                created=created,
                expected_created=len(entries),
                ok=True,
            )
        finally:
            USE_CASE_DURATION_SECONDS.labels(use_case="replace_availability").observe(
                perf_counter() - stage_start
            )


__all__ = [
    "default_week",
    "load_weekly_schedule",
    "replace_availability_use_case",
    "validate_schedule",
]
