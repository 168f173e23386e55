"""Reconciliation Engine - owns the authoritative timer set"""
import asyncio
import logging
from collections import deque
from enum import Enum
from typing import Callable, Deque, Optional, Set, Tuple

from timersync.infra.local_cache import LocalFallbackCache
from timersync.models import TimerSet
from timersync.utils.clock import now_ms

from .ports import BroadcastChannel, TimerStore

logger = logging.getLogger(__name__)

# Publish timestamps remembered for self-echo detection (well over a grace window of ticks)
RECENT_PUBLISH_HISTORY = 32


class Origin(str, Enum):
    """Where a timer set came from"""
    LOCAL = "local"
    REMOTE = "remote"


class ReconciliationEngine:
    """
    Replaces the in-memory timer set wholesale with whatever arrives.

    There is no field-level merge and no version check: the last set to
    arrive wins. Local-origin sets are propagated (broadcast, cache, and
    store on request); remote-origin sets only update memory and the cache,
    the sender being responsible for persistence.
    """

    def __init__(
        self,
        store: TimerStore,
        channel: BroadcastChannel,
        cache: LocalFallbackCache,
        clock: Callable[[], int] = now_ms,
        publish_history: int = RECENT_PUBLISH_HISTORY,
    ):
        self._store = store
        self._channel = channel
        self._cache = cache
        self._clock = clock
        self._current = TimerSet()
        self._last_published_ms = 0
        self._recent_published: Deque[int] = deque(maxlen=publish_history)
        self._pending_writes: Set[asyncio.Task] = set()
        self.publish_count = 0
        self.persist_count = 0

    @property
    def current(self) -> TimerSet:
        return self._current

    @property
    def last_published_ms(self) -> int:
        """Timestamp of the last broadcast this participant sent (0 if none)"""
        return self._last_published_ms

    @property
    def recent_published_ms(self) -> Tuple[int, ...]:
        """Timestamps of this participant's recent broadcasts, oldest first"""
        return tuple(self._recent_published)

    def adopt(self, timer_set: TimerSet) -> TimerSet:
        """Take timer_set as authoritative without propagating it (remote semantics)"""
        self._current = timer_set
        self._cache.write(timer_set)
        return timer_set

    async def apply(self, incoming: TimerSet, origin: Origin, persist: bool = True) -> TimerSet:
        """
        Make incoming the authoritative set and propagate it according to origin.

        Args:
            incoming: Complete timer set
            origin: Origin.LOCAL for mutations and owned ticks, Origin.REMOTE for broadcasts
            persist: For local origin, whether to also write the durable store

        Returns:
            The new authoritative set
        """
        # State is swapped before the first await so that concurrent
        # callers always derive from the latest set.
        self._current = incoming
        self._cache.write(incoming)

        if origin == Origin.REMOTE:
            return incoming

        if persist:
            self._schedule_persist(incoming)

        timestamp = self._clock()
        self._last_published_ms = timestamp
        self._recent_published.append(timestamp)
        self.publish_count += 1
        await self._channel.publish(incoming, timestamp)
        return incoming

    def _schedule_persist(self, timer_set: TimerSet) -> None:
        self.persist_count += 1
        task = asyncio.create_task(self._persist(timer_set))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _persist(self, timer_set: TimerSet) -> None:
        ok = await self._store.replace_all(list(timer_set.timers))
        if not ok:
            logger.warning("Durable store write failed; next write will resend the full set")

    async def persist_now(self, timer_set: Optional[TimerSet] = None) -> bool:
        """Write the given (or current) set to the durable store and wait for it"""
        if timer_set is None:
            timer_set = self._current
        self.persist_count += 1
        return await self._store.replace_all(list(timer_set.timers))

    async def wait_for_pending_writes(self) -> None:
        if self._pending_writes:
            await asyncio.gather(*self._pending_writes, return_exceptions=True)
