"""Tests for the babysitter search use case."""

import asyncio
from datetime import UTC, datetime
from typing import Any

import pytest
from structlog.testing import capture_logs

from sitterlink.adapters.current_user import StoreCurrentUser
from sitterlink.adapters.memory_entity_store import InMemoryEntityStore
from sitterlink.config.settings import Settings
from sitterlink.domain.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    StoreError,
    ValidationError,
)
from sitterlink.domain.models import TimeOfDay
from sitterlink.use_cases.search_babysitters import (
    build_match_query,
    default_match_query,
    load_candidates,
    search_babysitters_use_case,
)


def _ids(result: Any) -> list[str]:
    return [candidate.id for candidate in result.candidates]


def test_build_match_query_clamps_ages() -> None:
    query = build_match_query(10, 95, 3, "night")

    assert (query.age_min, query.age_max) == (18, 70)
    assert query.time_of_day is TimeOfDay.NIGHT
    assert query.day_of_week == 3


def test_build_match_query_honours_custom_bounds() -> None:
    query = build_match_query(16, 30, 0, TimeOfDay.MORNING, age_floor=16, age_ceiling=25)

    assert (query.age_min, query.age_max) == (16, 25)


@pytest.mark.parametrize(
    ("age_min", "age_max", "day", "time_of_day"),
    [
        (18, 60, 3, "midnight"),
        (18, 60, 7, "night"),
        (18, 60, -1, "anytime"),
        (50, 30, 3, "anytime"),
    ],
)
def test_build_match_query_rejects_invalid_input(
    age_min: int, age_max: int, day: int, time_of_day: str
) -> None:
    with pytest.raises(ValidationError):
        build_match_query(age_min, age_max, day, time_of_day)


def test_default_match_query_uses_today_and_default_ages(settings: Settings) -> None:
    wednesday = datetime(2024, 10, 9, 12, 0, tzinfo=UTC)

    query = default_match_query(settings, now=wednesday)

    assert (query.age_min, query.age_max) == (18, 60)
    assert query.day_of_week == 3
    assert query.time_of_day is TimeOfDay.ANYTIME


def test_load_candidates_only_includes_completed_babysitters(
    marketplace_store: InMemoryEntityStore,
) -> None:
    candidates = asyncio.run(load_candidates(marketplace_store))

    assert [c.id for c in candidates] == [
        "sitter-day",
        "sitter-night",
        "sitter-senior",
        "sitter-noage",
    ]
    day = candidates[0]
    assert [entry.day_of_week for entry in day.availability] == [3, 1]


def test_search_night_returns_only_night_sitter(
    marketplace_store: InMemoryEntityStore, parent_identity: StoreCurrentUser
) -> None:
    query = build_match_query(18, 60, 3, "night")

    result = asyncio.run(
        search_babysitters_use_case(marketplace_store, parent_identity, query)
    )

    assert _ids(result) == ["sitter-night"]
    assert result.total_candidates == 4
    assert result.matched == 1


def test_search_anytime_filters_by_age_only(
    marketplace_store: InMemoryEntityStore, parent_identity: StoreCurrentUser
) -> None:
    query = build_match_query(18, 60, 5, "anytime")

    result = asyncio.run(
        search_babysitters_use_case(marketplace_store, parent_identity, query)
    )

    assert _ids(result) == ["sitter-day", "sitter-night"]


def test_search_wider_age_range_includes_senior(
    marketplace_store: InMemoryEntityStore, parent_identity: StoreCurrentUser
) -> None:
    query = build_match_query(18, 70, 3, "afternoon")

    result = asyncio.run(
        search_babysitters_use_case(marketplace_store, parent_identity, query)
    )

    assert _ids(result) == ["sitter-day", "sitter-senior"]


def test_search_logs_correlation_id(
    marketplace_store: InMemoryEntityStore, parent_identity: StoreCurrentUser
) -> None:
    query = build_match_query(18, 60, 3, "anytime")

    with capture_logs() as logs:
        asyncio.run(
            search_babysitters_use_case(
                marketplace_store, parent_identity, query, correlation_id="search-1"
            )
        )

    completed = [log for log in logs if log["event"] == "babysitter_search_completed"]
    assert completed[0]["correlation_id"] == "search-1"


def test_search_requires_parent_role(marketplace_store: InMemoryEntityStore) -> None:
    identity = StoreCurrentUser(marketplace_store, "sitter-day")
    query = build_match_query(18, 60, 3, "anytime")

    with pytest.raises(AccessDeniedError) as exc_info:
        asyncio.run(search_babysitters_use_case(marketplace_store, identity, query))

    assert exc_info.value.required_role == "parent"
    assert exc_info.value.actual_role == "babysitter"


def test_search_rejects_user_without_role(marketplace_store: InMemoryEntityStore) -> None:
    identity = StoreCurrentUser(marketplace_store, "new-user")
    query = build_match_query(18, 60, 3, "anytime")

    with pytest.raises(AccessDeniedError):
        asyncio.run(search_babysitters_use_case(marketplace_store, identity, query))


def test_search_requires_login(marketplace_store: InMemoryEntityStore) -> None:
    identity = StoreCurrentUser(marketplace_store, None)
    query = build_match_query(18, 60, 3, "anytime")

    with pytest.raises(AuthenticationError):
        asyncio.run(search_babysitters_use_case(marketplace_store, identity, query))


def test_availability_failure_only_empties_schedules(failing_store: Any) -> None:
    failing_store.availability.fail_operations.add("filter")
    identity = StoreCurrentUser(failing_store, "parent-1")

    anytime = asyncio.run(
        search_babysitters_use_case(
            failing_store, identity, build_match_query(18, 60, 3, "anytime")
        )
    )
    night = asyncio.run(
        search_babysitters_use_case(
            failing_store, identity, build_match_query(18, 60, 3, "night")
        )
    )

    assert _ids(anytime) == ["sitter-day", "sitter-night"]
    assert all(candidate.availability == [] for candidate in anytime.candidates)
    assert _ids(night) == []


def test_user_list_failure_propagates(failing_store: Any) -> None:
    identity = StoreCurrentUser(failing_store.inner, "parent-1")
    failing_store.users.fail_operations.add("list")

    with pytest.raises(StoreError):
        asyncio.run(
            search_babysitters_use_case(
                failing_store, identity, build_match_query(18, 60, 3, "anytime")
            )
        )
