"""Babysitter match filtering.

Combines the age specification with a weekday availability specification
over a candidate list. The engine is stateless: every call builds its own
availability index, so re-running a filter on the same inputs yields the
same members in the same order.
"""

from collections.abc import Sequence

from sitterlink.config.logging_config import get_logger
from sitterlink.domain.models import Candidate, MatchQuery, TimeOfDay
from sitterlink.domain.specifications import AgeInRangeSpec, Specification
from sitterlink.services.availability_index import AvailabilityIndex
from sitterlink.services.time_window import entry_matches_bucket

logger = get_logger(__name__)


class AvailableDuringSpec(Specification[Candidate]):
    """Candidate has availability on a weekday overlapping a time bucket."""

    def __init__(
        self, index: AvailabilityIndex, day_of_week: int, time_of_day: TimeOfDay
    ) -> None:
        """Initialize with a prebuilt availability index.

        Args:
            index: Availability lookup for the candidates being filtered
            day_of_week: Requested weekday (0 = Sunday)
            time_of_day: Requested bucket
        """
        self.index = index
        self.day_of_week = day_of_week
        self.time_of_day = time_of_day

    def is_satisfied_by(self, candidate: Candidate) -> bool:
        if self.time_of_day is TimeOfDay.ANYTIME:
            return True
        entry = self.index.lookup(candidate, self.day_of_week)
        return entry_matches_bucket(entry, self.time_of_day)


class MatchFilterEngine:
    """Stable filter of candidates against a match query."""

    def build_specification(
        self, query: MatchQuery, index: AvailabilityIndex
    ) -> Specification[Candidate]:
        spec: Specification[Candidate] = AgeInRangeSpec(query.age_min, query.age_max)
        if query.time_of_day is not TimeOfDay.ANYTIME:
            spec = spec.and_(
                AvailableDuringSpec(index, query.day_of_week, query.time_of_day)
            )
        return spec

    def filter(
        self, candidates: Sequence[Candidate], query: MatchQuery
    ) -> list[Candidate]:
        """Return the candidates matching ``query`` in their input order.

        Args:
            candidates: Candidates with their availability loaded
            query: Age, weekday and time-of-day filter

        Returns:
            Matching candidates (empty list when nothing matches)
        """
        if not candidates:
            return []

        index = AvailabilityIndex.from_candidates(candidates)
        spec = self.build_specification(query, index)
        matched = [c for c in candidates if spec.is_satisfied_by(c)]

        logger.debug(
            "match_filter_applied",
            candidates=len(candidates),
            matched=len(matched),
            age_min=query.age_min,
            age_max=query.age_max,
            day_of_week=query.day_of_week,
            time_of_day=query.time_of_day.value,
        )
        return matched


__all__ = ["AvailableDuringSpec", "MatchFilterEngine"]
