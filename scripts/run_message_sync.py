"""Keep a user's conversation list in sync until interrupted."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from scripts import runtime
from sitterlink.adapters.current_user import StoreCurrentUser
from sitterlink.adapters.entity_store_factory import create_entity_store
from sitterlink.config.logging_config import get_logger
from sitterlink.config.settings import Settings, get_settings
from sitterlink.domain.exceptions import NonRetryableError, StoreError
from sitterlink.services.display_formatting import (
    conversation_preview,
    display_name,
    format_message_time,
)
from sitterlink.use_cases.messaging_session import MessagingSession, create_sync_loop

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the message sync loop")
    parser.add_argument(
        "--user-id",
        help="User id to sync (defaults to CURRENT_USER_ID from settings)",
    )
    parser.add_argument(
        "--interval-seconds",
        type=float,
        help="Override the configured sync interval",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Start the Prometheus exporter on the configured port",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs in JSON format",
    )
    parser.add_argument(
        "--run-once",
        action="store_true",
        help="Load conversations once, print them and exit",
    )
    args = parser.parse_args(argv)
    if args.interval_seconds is not None and args.interval_seconds <= 0:
        parser.error("--interval-seconds must be greater than 0")
    return args


def _print_conversations(session: MessagingSession, settings: Settings) -> None:
    user_id = session.current_user.id
    print(f"{len(session.conversations)} conversations, {session.unread_count} unread")
    for summary in session.conversations:
        marker = "*" if summary.unread else " "
        when = format_message_time(
            summary.latest_message.created_at, tz_name=settings.tz_default
        )
        print(
            f"{marker} {display_name(summary.other_user)} [{when}] "
            f"{conversation_preview(summary, user_id)}"
        )


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    store = create_entity_store(settings)
    identity = StoreCurrentUser(store, args.user_id or settings.current_user_id)

    try:
        session = await MessagingSession.start(store, identity)
    except NonRetryableError as exc:
        logger.error("messaging_session_rejected", error=str(exc))
        return 2
    except StoreError as exc:
        logger.error("messaging_session_start_failed", error=str(exc))
        return 1

    _print_conversations(session, settings)
    if args.run_once:
        return 0

    if args.interval_seconds is not None:
        settings = settings.model_copy(
            update={"sync_interval_seconds": args.interval_seconds}
        )

    controller = runtime.create_shutdown_controller()
    runtime.install_signal_handlers(controller)

    async with create_sync_loop(session, settings):
        await controller.wait()

    _print_conversations(session, settings)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    settings = get_settings()
    runtime.initialize_logging(settings, json_logs=args.json_logs)
    runtime.start_metrics(settings, enabled=args.metrics)

    return asyncio.run(_run(args, settings))


if __name__ == "__main__":
    raise SystemExit(main())
