"""Day-keyed lookup over candidates' weekly availability."""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from sitterlink.config.logging_config import get_logger
from sitterlink.domain.models import AvailabilityEntry, Candidate

logger = get_logger(__name__)


class AvailabilityIndex:
    """Immutable ``(candidate_id, day_of_week) -> entry`` mapping.

    Build a fresh index whenever the underlying availability changes. When a
    candidate has several entries for the same day, the first one wins.
    """

    def __init__(self, entries: Iterable[AvailabilityEntry]) -> None:
        by_day: dict[tuple[str, int], AvailabilityEntry] = {}
        duplicates = 0
        for entry in entries:
            key = (entry.candidate_id, entry.day_of_week)
            if key in by_day:
                duplicates += 1
                continue
            by_day[key] = entry

        if duplicates:
            logger.warning("availability_duplicate_days_ignored", count=duplicates)

        self._by_day = MappingProxyType(by_day)

    @classmethod
    def from_candidates(cls, candidates: Iterable[Candidate]) -> AvailabilityIndex:
        return cls(entry for candidate in candidates for entry in candidate.availability)

    def lookup(self, candidate: Candidate, day_of_week: int) -> AvailabilityEntry | None:
        return self._by_day.get((candidate.id, day_of_week))

    def __len__(self) -> int:
        return len(self._by_day)


__all__ = ["AvailabilityIndex"]
