"""Specification pattern for candidate filtering.

Specifications encapsulate business rules that can be:
- Combined with AND
- Reused across different contexts
- Tested independently
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from sitterlink.domain.models import Candidate

T = TypeVar("T")


class Specification(ABC, Generic[T]):
    """Base specification interface.

    A specification represents a business rule that can be checked
    against a candidate object.
    """

    @abstractmethod
    def is_satisfied_by(self, candidate: T) -> bool:
        """Check if candidate satisfies this specification.

        Args:
            candidate: Object to check

        Returns:
            True if candidate satisfies the specification
        """
        pass

    def and_(self, other: "Specification[T]") -> "AndSpecification[T]":
        """Combine with AND logic."""
        return AndSpecification(self, other)


class AndSpecification(Specification[T]):
    """AND combination of two specifications."""

    def __init__(self, left: Specification[T], right: Specification[T]) -> None:
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: T) -> bool:
        """Both specifications must be satisfied."""
        return self.left.is_satisfied_by(candidate) and self.right.is_satisfied_by(
            candidate
        )


# Candidate Specifications


class AgeInRangeSpec(Specification[Candidate]):
    """Candidate age within inclusive bounds."""

    def __init__(self, age_min: int, age_max: int) -> None:
        """Initialize with inclusive age bounds.

        Args:
            age_min: Lowest accepted age
            age_max: Highest accepted age
        """
        self.age_min = age_min
        self.age_max = age_max

    def is_satisfied_by(self, candidate: Candidate) -> bool:
        """Candidates without a recorded age never match."""
        age = candidate.age
        if age is None:
            return False
        return self.age_min <= age <= self.age_max
