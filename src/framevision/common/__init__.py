"""Common utilities for Frame Vision."""

from framevision.common.logging import get_logger, setup_logging
from framevision.common.events import EventBus, Event

__all__ = [
    "get_logger",
    "setup_logging",
    "EventBus",
    "Event",
]
