"""Search babysitters use case.

Loads every babysitter who finished setup together with their weekly
availability, then applies the match filter for a parent's query.
"""

from datetime import UTC, datetime
from time import perf_counter

from pydantic import ValidationError as PydanticValidationError

from sitterlink.config.logging_config import get_logger
from sitterlink.config.settings import Settings
from sitterlink.domain.exceptions import StoreError, ValidationError
from sitterlink.domain.matching_constants import AGE_CEILING, AGE_FLOOR, DAYS_IN_WEEK
from sitterlink.domain.models import (
    AvailabilityEntry,
    Candidate,
    MatchQuery,
    SearchResult,
    TimeOfDay,
    UserProfile,
    UserType,
)
from sitterlink.domain.protocols import CurrentUserProtocol, EntityStoreProtocol
from sitterlink.observability.metrics import USE_CASE_DURATION_SECONDS
from sitterlink.observability.tracing import correlation_scope
from sitterlink.services.match_filter import MatchFilterEngine
from sitterlink.services.time_window import day_of_week_of
from sitterlink.use_cases.access import resolve_current_user

logger = get_logger(__name__)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def build_match_query(
    age_min: int,
    age_max: int,
    day_of_week: int,
    time_of_day: str | TimeOfDay,
    *,
    age_floor: int = AGE_FLOOR,
    age_ceiling: int = AGE_CEILING,
) -> MatchQuery:
    """Build a match query from raw filter input.

    Ages are clamped into ``[age_floor, age_ceiling]``; everything else is
    validated.

    Raises:
        ValidationError: On an unknown bucket, a weekday outside 0-6 or
            ``age_min > age_max`` after clamping
    """
    try:
        bucket = TimeOfDay(time_of_day)
    except ValueError as exc:
        raise ValidationError(f"Unknown time of day: {time_of_day!r}") from exc

    if not 0 <= day_of_week < DAYS_IN_WEEK:
        raise ValidationError(f"day_of_week must be in 0-6, got {day_of_week}")

    low = _clamp(age_min, age_floor, age_ceiling)
    high = _clamp(age_max, age_floor, age_ceiling)
    if low > high:
        raise ValidationError(f"age_min ({low}) must not exceed age_max ({high})")

    return MatchQuery(age_min=low, age_max=high, day_of_week=day_of_week, time_of_day=bucket)


def default_match_query(settings: Settings, now: datetime | None = None) -> MatchQuery:
    """Initial filter state: default age range, any time, today's weekday."""
    moment = now or datetime.now(tz=UTC)
    return build_match_query(
        settings.search_default_age_min,
        settings.search_default_age_max,
        day_of_week_of(moment, settings.tz_default),
        TimeOfDay.ANYTIME,
        age_floor=settings.search_age_floor,
        age_ceiling=settings.search_age_ceiling,
    )


async def load_candidate_availability(
    store: EntityStoreProtocol, candidate_id: str
) -> list[AvailabilityEntry]:
    """Load one babysitter's availability.

    A failed fetch or a malformed record only costs this candidate its
    schedule; it never aborts the search.
    """
    try:
        records = await store.availability.filter(babysitter_id=candidate_id)
    except StoreError as exc:
        logger.warning(
            "candidate_availability_unavailable",
            candidate_id=candidate_id,
            error=str(exc),
        )
        return []

    entries: list[AvailabilityEntry] = []
    for record in records:
        try:
            entries.append(AvailabilityEntry.model_validate(record))
        except PydanticValidationError as exc:
            logger.warning(
                "availability_record_invalid",
                candidate_id=candidate_id,
                record_id=record.get("id"),
                error=str(exc),
            )
    return entries


async def load_candidates(store: EntityStoreProtocol) -> list[Candidate]:
    """Load babysitters who completed setup, with their availability.

    Raises:
        StoreError: If the user list cannot be fetched
    """
    records = await store.users.list()
    profiles = [UserProfile.model_validate(record) for record in records]

    candidates: list[Candidate] = []
    for profile in profiles:
        if not (profile.is_babysitter and profile.completed_setup):
            continue
        availability = await load_candidate_availability(store, profile.id)
        candidates.append(Candidate(profile=profile, availability=availability))
    return candidates


async def search_babysitters_use_case(
    store: EntityStoreProtocol,
    identity: CurrentUserProtocol,
    query: MatchQuery,
    *,
    engine: MatchFilterEngine | None = None,
    correlation_id: str | None = None,
) -> SearchResult:
    """Find babysitters matching a parent's query.

    1. Resolve the current user and require the parent role
    2. Load babysitters who completed setup, with availability
    3. Filter by age, weekday and time of day (input order preserved)

    Raises:
        AuthenticationError: If nobody is logged in
        AccessDeniedError: If the current user is not a parent
        StoreError: If users cannot be listed

    Example:
        >>> query = build_match_query(18, 60, 3, "night")
        >>> result = await search_babysitters_use_case(store, identity, query)
        >>> result.matched
        2
    """
    with correlation_scope(correlation_id) as bound_correlation_id:
        stage_start = perf_counter()
        try:
            parent = await resolve_current_user(identity, UserType.PARENT)
            candidates = await load_candidates(store)
            matched = (engine or MatchFilterEngine()).filter(candidates, query)

            logger.info(
                "babysitter_search_completed",
                correlation_id=bound_correlation_id,
                parent_id=parent.id,
                candidates=len(candidates),
                matched=len(matched),
                time_of_day=query.time_of_day.value,
                day_of_week=query.day_of_week,
            )
            return SearchResult(
                query=query, candidates=matched, total_candidates=len(candidates)
            )
        finally:
            USE_CASE_DURATION_SECONDS.labels(use_case="search_babysitters").observe(
                perf_counter() - stage_start
            )


__all__ = [
    "build_match_query",
    "default_match_query",
    "load_candidate_availability",
    "load_candidates",
    "search_babysitters_use_case",
]
