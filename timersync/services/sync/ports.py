"""Interfaces the sync core depends on.

The durable store and the broadcast channel are opaque collaborators; the
Supabase implementations live in timersync.infra.supabase and tests swap in
in-memory ones.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

from timersync.models import Timer, TimerSet

# Receives the raw broadcast body; shape validation is the receiver's job
BroadcastCallback = Callable[[Dict[str, Any]], None]
StatusListener = Callable[[bool], None]


class TimerStore(ABC):
    """Key-ordered durable table of timer records"""

    @abstractmethod
    async def read_all(self) -> List[Timer]:
        """Return every stored timer ordered by display position. Empty on failure."""

    @abstractmethod
    async def replace_all(self, timers: List[Timer]) -> bool:
        """Replace the whole table with timers. Returns False on failure."""


class BroadcastChannel(ABC):
    """Publish/subscribe channel that also delivers to the publisher"""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the channel is currently subscribed"""

    @abstractmethod
    async def publish(self, timer_set: TimerSet, timestamp_ms: int) -> None:
        """Send the whole set to every subscriber"""

    @abstractmethod
    async def subscribe(self, callback: BroadcastCallback) -> None:
        """Start delivering inbound payloads to callback"""

    @abstractmethod
    def on_status_change(self, listener: StatusListener) -> None:
        """Register a connection status listener"""

    @abstractmethod
    async def close(self) -> None:
        """Stop receiving; other participants are unaffected"""
