"""Tests for babysitter match filtering and candidate specifications."""

from typing import Any

from sitterlink.domain.models import Candidate, MatchQuery, TimeOfDay
from sitterlink.domain.specifications import AgeInRangeSpec, Specification
from sitterlink.services.availability_index import AvailabilityIndex
from sitterlink.services.match_filter import AvailableDuringSpec, MatchFilterEngine


class _IdIn(Specification[Candidate]):
    def __init__(self, *ids: str) -> None:
        self.ids = set(ids)

    def is_satisfied_by(self, candidate: Candidate) -> bool:
        return candidate.id in self.ids


def _query(
    time_of_day: TimeOfDay = TimeOfDay.ANYTIME,
    day_of_week: int = 3,
    age_min: int = 18,
    age_max: int = 60,
) -> MatchQuery:
    return MatchQuery(
        age_min=age_min,
        age_max=age_max,
        day_of_week=day_of_week,
        time_of_day=time_of_day,
    )


def test_night_shift_past_midnight_matches_night(candidate_factory: Any) -> None:
    nia = candidate_factory("nia", 30, [(3, 23, 2)])

    matched = MatchFilterEngine().filter([nia], _query(TimeOfDay.NIGHT))

    assert matched == [nia]


def test_age_above_range_is_excluded(candidate_factory: Any) -> None:
    olga = candidate_factory("olga", 61, [(3, 8, 20)])

    assert MatchFilterEngine().filter([olga], _query(TimeOfDay.ANYTIME)) == []
    assert MatchFilterEngine().filter([olga], _query(TimeOfDay.MORNING)) == []


def test_age_bounds_are_inclusive(candidate_factory: Any) -> None:
    youngest = candidate_factory("a", 18)
    oldest = candidate_factory("b", 60)

    matched = MatchFilterEngine().filter([youngest, oldest], _query())

    assert matched == [youngest, oldest]


def test_unknown_age_never_matches(candidate_factory: Any) -> None:
    ned = candidate_factory("ned", None, [(3, 9, 17)])

    assert MatchFilterEngine().filter([ned], _query()) == []


def test_missing_day_excluded_unless_anytime(candidate_factory: Any) -> None:
    sam = candidate_factory("sam", 22, [(1, 9, 17)])

    assert MatchFilterEngine().filter([sam], _query(TimeOfDay.MORNING)) == []
    assert MatchFilterEngine().filter([sam], _query(TimeOfDay.ANYTIME)) == [sam]


def test_candidate_without_availability_matches_anytime(candidate_factory: Any) -> None:
    pia = candidate_factory("pia", 30)

    assert MatchFilterEngine().filter([pia], _query()) == [pia]
    assert MatchFilterEngine().filter([pia], _query(TimeOfDay.EVENING)) == []


def test_filter_preserves_order_and_is_idempotent(candidate_factory: Any) -> None:
    candidates = [
        candidate_factory("c3", 40, [(3, 13, 18)]),
        candidate_factory("c1", 25, [(3, 12, 14)]),
        candidate_factory("c2", 65, [(3, 12, 14)]),
        candidate_factory("c4", 33, [(3, 6, 9)]),
        candidate_factory("c5", 50, [(3, 10, 12)]),
    ]
    engine = MatchFilterEngine()
    query = _query(TimeOfDay.AFTERNOON)

    first = engine.filter(candidates, query)
    second = engine.filter(first, query)

    assert [c.id for c in first] == ["c3", "c1", "c5"]
    assert second == first


def test_empty_input_returns_empty_list() -> None:
    assert MatchFilterEngine().filter([], _query(TimeOfDay.NIGHT)) == []


def test_requested_weekday_is_used(candidate_factory: Any) -> None:
    sam = candidate_factory("sam", 22, [(1, 9, 12), (3, 18, 21)])

    assert MatchFilterEngine().filter([sam], _query(TimeOfDay.MORNING, 1)) == [sam]
    assert MatchFilterEngine().filter([sam], _query(TimeOfDay.MORNING, 3)) == []


def test_specifications_combine_with_and(candidate_factory: Any) -> None:
    young = candidate_factory("young", 20)
    old = candidate_factory("old", 65)
    adult = AgeInRangeSpec(18, 60)

    assert adult.is_satisfied_by(young)
    assert not adult.is_satisfied_by(old)
    assert adult.and_(_IdIn("young")).is_satisfied_by(young)
    assert not adult.and_(_IdIn("other")).is_satisfied_by(young)


def test_available_during_spec_uses_index(candidate_factory: Any) -> None:
    sam = candidate_factory("sam", 22, [(3, 18, 21)])
    index = AvailabilityIndex.from_candidates([sam])

    assert AvailableDuringSpec(index, 3, TimeOfDay.EVENING).is_satisfied_by(sam)
    assert not AvailableDuringSpec(index, 3, TimeOfDay.MORNING).is_satisfied_by(sam)
    assert not AvailableDuringSpec(index, 4, TimeOfDay.EVENING).is_satisfied_by(sam)
    assert AvailableDuringSpec(index, 4, TimeOfDay.ANYTIME).is_satisfied_by(sam)
