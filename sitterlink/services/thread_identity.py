"""Canonical conversation identifiers."""

from sitterlink.domain.exceptions import ValidationError
from sitterlink.domain.messaging_constants import THREAD_ID_SEPARATOR


def thread_id_for(user_a: str, user_b: str) -> str:
    """Build the order-independent thread id for two participants.

    The identifiers are sorted lexicographically and joined, so
    ``thread_id_for(a, b) == thread_id_for(b, a)``.

    Raises:
        ValidationError: If either identifier is empty
    """
    if not user_a or not user_b:
        raise ValidationError("Thread participants must have non-empty ids")
    return THREAD_ID_SEPARATOR.join(sorted((user_a, user_b)))


__all__ = ["thread_id_for"]
