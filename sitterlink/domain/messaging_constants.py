"""Constants for conversations and message synchronization."""

from typing import Final

THREAD_ID_SEPARATOR: Final[str] = "_"

DEFAULT_SYNC_INTERVAL_SECONDS: Final[float] = 10.0
"""Polling interval standing in for push delivery."""

UNKNOWN_USER_NAME: Final[str] = "Unknown User"
OWN_MESSAGE_PREFIX: Final[str] = "You: "

__all__ = [
    "DEFAULT_SYNC_INTERVAL_SECONDS",
    "OWN_MESSAGE_PREFIX",
    "THREAD_ID_SEPARATOR",
    "UNKNOWN_USER_NAME",
]
