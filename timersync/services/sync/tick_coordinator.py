"""Leader-Follower Tick Coordinator"""
import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from timersync import config
from timersync.models import TimerPayload, TimerSet
from timersync.utils.clock import now_ms

from .reconciliation import Origin, ReconciliationEngine

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Countdown responsibility of this participant"""
    LEADER = "leader"
    FOLLOWER = "follower"


def advance_running(timer_set: TimerSet) -> TimerSet:
    """Decrement every running timer by one unit. No floor, no auto-stop."""
    return TimerSet.of(
        timer.model_copy(update={"time_remaining": timer.time_remaining - 1})
        if timer.is_running else timer
        for timer in timer_set.timers
    )


class TickCoordinator:
    """
    Decides, every tick, whether this participant advances the countdown.

    There is no election message. A participant that has seen a broadcast
    from someone else within the grace window is a follower and skips its
    own countdown; otherwise it leads. Any local mutation clears the marker
    so the participant that started a timer drives it immediately.
    """

    def __init__(
        self,
        engine: ReconciliationEngine,
        clock: Callable[[], int] = now_ms,
        tick_interval_seconds: float = config.TICK_INTERVAL_SECONDS,
        grace_window_ticks: int = config.LEADER_GRACE_WINDOW_TICKS,
        persist_every_n_ticks: int = config.PERSIST_EVERY_N_TICKS,
        self_echo_deadband_ms: int = config.SELF_ECHO_DEADBAND_MS,
        lock: Optional[asyncio.Lock] = None,
    ):
        if tick_interval_seconds <= 0:
            raise ValueError("tick_interval_seconds must be positive")
        if persist_every_n_ticks <= 0:
            raise ValueError("persist_every_n_ticks must be positive")

        self._engine = engine
        self._clock = clock
        self._tick_interval_seconds = tick_interval_seconds
        self._grace_window_ms = int(grace_window_ticks * tick_interval_seconds * 1000)
        self._persist_every = persist_every_n_ticks
        self._deadband_ms = self_echo_deadband_ms
        self._lock = lock or asyncio.Lock()
        self._last_remote_broadcast_ms = 0
        self._owned_ticks = 0

    @property
    def owned_ticks(self) -> int:
        """Ticks on which this participant actually advanced running timers"""
        return self._owned_ticks

    @property
    def last_remote_broadcast_ms(self) -> int:
        return self._last_remote_broadcast_ms

    def is_follower(self, now: Optional[int] = None) -> bool:
        if self._last_remote_broadcast_ms <= 0:
            return False
        if now is None:
            now = self._clock()
        return now - self._last_remote_broadcast_ms < self._grace_window_ms

    def role(self, now: Optional[int] = None) -> Role:
        return Role.FOLLOWER if self.is_follower(now) else Role.LEADER

    def claim_leadership(self) -> None:
        """Forget the last remote broadcast so the next tick is ours"""
        self._last_remote_broadcast_ms = 0

    def on_broadcast(self, body: Dict[str, Any]) -> bool:
        """
        Handle an inbound broadcast body.

        Malformed bodies are dropped. A body whose timestamp is within the
        deadband of our own last publish is our echo and is ignored.
        Anything else comes from another participant: it becomes the
        authoritative set and this participant follows for the grace window.

        Returns:
            True if the set was accepted
        """
        try:
            payload = TimerPayload.model_validate(body)
            incoming = payload.to_timer_set()
        except ValidationError as e:
            logger.debug(f"Dropping malformed broadcast: {e.error_count()} errors")
            return False

        # Echoes can arrive after newer local publishes, so check them all
        if any(
            abs(payload.last_update - published) <= self._deadband_ms
            for published in self._engine.recent_published_ms
        ):
            return False

        self._last_remote_broadcast_ms = self._clock()
        self._engine.adopt(incoming)
        return True

    async def tick(self) -> Optional[TimerSet]:
        """
        Run one tick of countdown logic.

        Returns:
            The propagated set, or None if this tick was skipped (follower or idle)
        """
        now = self._clock()
        if self.is_follower(now):
            logger.debug("Following remote leader, skipping countdown")
            return None

        current = self._engine.current
        if not current.has_running():
            return None

        self._owned_ticks += 1
        persist = self._owned_ticks % self._persist_every == 0
        return await self._engine.apply(advance_running(current), Origin.LOCAL, persist=persist)

    async def run(self) -> None:
        """
        Tick forever on a fixed schedule; ticks never overlap.

        Sleeps until the next deadline rather than a full interval, so time
        spent inside a tick (publish round trips) does not stretch the period.
        """
        logger.info(f"Tick loop started (interval={self._tick_interval_seconds}s)")
        loop = asyncio.get_running_loop()
        next_deadline = loop.time() + self._tick_interval_seconds
        try:
            while True:
                await asyncio.sleep(max(0.0, next_deadline - loop.time()))
                next_deadline += self._tick_interval_seconds
                if next_deadline < loop.time():
                    # A tick overran a whole interval; resume the schedule from now
                    logger.warning("Tick loop fell behind, skipping missed intervals")
                    next_deadline = loop.time() + self._tick_interval_seconds
                try:
                    async with self._lock:
                        await self.tick()
                except Exception as e:
                    logger.error(f"Error during tick: {e}")
        finally:
            logger.info("Tick loop stopped")
