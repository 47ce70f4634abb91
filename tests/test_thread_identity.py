import pytest

from sitterlink.domain.exceptions import ValidationError
from sitterlink.services.thread_identity import thread_id_for


def test_thread_id_is_order_independent() -> None:
    assert thread_id_for("parent-1", "sitter-day") == "parent-1_sitter-day"
    assert thread_id_for("sitter-day", "parent-1") == "parent-1_sitter-day"


def test_thread_id_sorts_lexicographically() -> None:
    assert thread_id_for("b", "a") == "a_b"
    assert thread_id_for("10", "9") == "10_9"


def test_self_thread_repeats_identifier() -> None:
    assert thread_id_for("u1", "u1") == "u1_u1"


@pytest.mark.parametrize(("user_a", "user_b"), [("", "u1"), ("u1", ""), ("", "")])
def test_empty_identifiers_are_rejected(user_a: str, user_b: str) -> None:
    with pytest.raises(ValidationError):
        thread_id_for(user_a, user_b)
