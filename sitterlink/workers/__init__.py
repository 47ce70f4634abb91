"""Worker package exports."""

from sitterlink.workers.sync_loop import (
    TIMER_TRIGGER,
    USER_ACTION_TRIGGER,
    SyncLoop,
)

__all__ = [
    "SyncLoop",
    "TIMER_TRIGGER",
    "USER_ACTION_TRIGGER",
]
