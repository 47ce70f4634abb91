"""Fill the configured entity store with demo users, schedules and messages."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

sys.path.insert(0, str(Path(__file__).parent.parent))

from scripts import runtime
from sitterlink.adapters.entity_store_factory import create_entity_store
from sitterlink.config.logging_config import get_logger
from sitterlink.config.settings import get_settings
from sitterlink.domain.exceptions import StoreError
from sitterlink.domain.models import AvailabilityEntry
from sitterlink.domain.protocols import EntityStoreProtocol
from sitterlink.services.thread_identity import thread_id_for

logger = get_logger(__name__)

DEMO_USERS: list[dict[str, Any]] = [
    {
        "id": "parent-ana",
        "full_name": "Ana Torres",
        "email": "ana@example.com",
        "user_type": "parent",
        "completed_setup": True,
        "address": "12 Elm Street",
    },
    {
        "id": "sitter-bea",
        "full_name": "Bea Lind",
        "email": "bea@example.com",
        "user_type": "babysitter",
        "completed_setup": True,
        "age": 24,
        "bio": "Early-childhood student, first aid certified.",
    },
    {
        "id": "sitter-cal",
        "full_name": "Cal Okafor",
        "email": "cal@example.com",
        "user_type": "babysitter",
        "completed_setup": True,
        "age": 41,
        "bio": "Nurse working night shifts, happy to cover late evenings.",
    },
    {
        "id": "sitter-dee",
        "full_name": "Dee Marsh",
        "email": "dee@example.com",
        "user_type": "babysitter",
        "completed_setup": False,
        "age": 30,
    },
]

# (babysitter id, weekday with 0 = Sunday, start hour, end hour)
DEMO_AVAILABILITY: list[tuple[str, int, int, int]] = [
    ("sitter-bea", 1, 9, 17),
    ("sitter-bea", 3, 12, 20),
    ("sitter-bea", 6, 8, 12),
    ("sitter-cal", 3, 23, 2),
    ("sitter-cal", 5, 18, 23),
]

# (sender, receiver, content)
DEMO_MESSAGES: list[tuple[str, str, str]] = [
    ("parent-ana", "sitter-bea", "Hi Bea, are you free Wednesday afternoon?"),
    ("sitter-bea", "parent-ana", "Yes, from noon. How many kids?"),
    ("parent-ana", "sitter-cal", "Could you cover Wednesday night?"),
]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the entity store with demo data")
    parser.add_argument(
        "--db-path",
        help="SQLite file to seed (defaults to the configured store path)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs in JSON format",
    )
    return parser.parse_args(argv)


async def seed_demo_store(store: EntityStoreProtocol) -> dict[str, int]:
    """Create demo records, skipping users that already exist.

    Returns:
        Number of records created per entity kind
    """
    counts = {"users": 0, "availability": 0, "messages": 0}
    existing = {record["id"] for record in await store.users.list()}

    for user in DEMO_USERS:
        if user["id"] in existing:
            continue
        await store.users.create(user)
        counts["users"] += 1

    if counts["users"] == 0:
        logger.info("demo_store_already_seeded")
        return counts

    for babysitter_id, day, start_hour, end_hour in DEMO_AVAILABILITY:
        entry = AvailabilityEntry(
            candidate_id=babysitter_id,
            day_of_week=day,
            start_hour=start_hour,
            end_hour=end_hour,
        )
        await store.availability.create(entry.to_record())
        counts["availability"] += 1

    for sender_id, receiver_id, content in DEMO_MESSAGES:
        await store.messages.create(
            {
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "content": content,
                "thread_id": thread_id_for(sender_id, receiver_id),
                "read": False,
            }
        )
        counts["messages"] += 1

    logger.info("demo_store_seeded", **counts)
    return counts


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    settings = get_settings()
    runtime.initialize_logging(settings, json_logs=args.json_logs)

    update: dict[str, Any] = {"store_backend": "sqlite"}
    if args.db_path:
        update["store_db_path"] = args.db_path
    store = create_entity_store(settings.model_copy(update=update))

    try:
        counts = asyncio.run(seed_demo_store(store))
    except StoreError as exc:
        logger.error("demo_store_seed_failed", error=str(exc))
        return 1

    print(
        f"Seeded {counts['users']} users, {counts['availability']} availability "
        f"entries and {counts['messages']} messages"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
