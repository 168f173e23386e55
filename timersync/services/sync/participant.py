"""Participant - one process taking part in timer synchronization"""
import asyncio
import logging
from typing import Callable, List, Optional

from pydantic import BaseModel

from timersync import config
from timersync.infra.local_cache import LocalFallbackCache
from timersync.models import Timer, TimerSet
from timersync.utils.clock import now_ms

from .lifecycle import TimerLifecycleController, default_timer_set
from .ports import BroadcastChannel, TimerStore
from .reconciliation import ReconciliationEngine
from .tick_coordinator import Role, TickCoordinator

logger = logging.getLogger(__name__)


class ParticipantStatus(BaseModel):
    """Snapshot for presentation layers"""
    timers: List[Timer]
    connected: bool
    role: Role
    owned_ticks: int
    last_remote_broadcast_ms: int


class Participant:
    """
    Context object owning the shared timer set and everything that touches it.

    Lifecycle:
        participant = Participant(store, channel, cache)
        await participant.start()   # bootstrap, subscribe, start ticking
        await participant.controller.start_timer(timer_id)
        await participant.stop()
    """

    def __init__(
        self,
        store: TimerStore,
        channel: BroadcastChannel,
        cache: LocalFallbackCache,
        clock: Callable[[], int] = now_ms,
        tick_interval_seconds: float = config.TICK_INTERVAL_SECONDS,
        grace_window_ticks: int = config.LEADER_GRACE_WINDOW_TICKS,
        persist_every_n_ticks: int = config.PERSIST_EVERY_N_TICKS,
        self_echo_deadband_ms: int = config.SELF_ECHO_DEADBAND_MS,
        label: str = config.DEFAULT_TIMER_LABEL,
        default_duration_seconds: int = config.DEFAULT_DURATION_SECONDS,
    ):
        self._store = store
        self._channel = channel
        self._cache = cache
        self._label = label
        self._default_duration_seconds = default_duration_seconds
        # Ticks and mutations are serialized on this lock
        self._lock = asyncio.Lock()
        self._tick_task: Optional[asyncio.Task] = None

        self.engine = ReconciliationEngine(store, channel, cache, clock=clock)
        self.coordinator = TickCoordinator(
            self.engine,
            clock=clock,
            tick_interval_seconds=tick_interval_seconds,
            grace_window_ticks=grace_window_ticks,
            persist_every_n_ticks=persist_every_n_ticks,
            self_echo_deadband_ms=self_echo_deadband_ms,
            lock=self._lock,
        )
        self.controller = TimerLifecycleController(
            self.engine, self.coordinator, lock=self._lock, label=label
        )

    @property
    def timers(self) -> TimerSet:
        return self.engine.current

    @property
    def is_connected(self) -> bool:
        return self._channel.is_connected

    @property
    def is_running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    async def bootstrap(self) -> TimerSet:
        """
        Load the initial timer set: durable store, then local cache, then defaults.

        Defaults are written to the cache and persisted before returning.
        """
        stored = await self._store.read_all()
        if stored:
            logger.info(f"Loaded {len(stored)} timers from database")
            return self.engine.adopt(TimerSet.of(stored))

        cached = self._cache.read()
        if cached is not None:
            logger.info(f"No timers in database, using {len(cached)} cached timers")
            return self.engine.adopt(cached)

        logger.info("No timers in database or cache, saving defaults")
        defaults = self.engine.adopt(
            default_timer_set(self._label, self._default_duration_seconds)
        )
        if not await self.engine.persist_now(defaults):
            logger.warning("Could not persist default timers")
        return defaults

    async def start(self, run_tick_loop: bool = True) -> None:
        await self.bootstrap()
        await self._channel.subscribe(self.coordinator.on_broadcast)
        if run_tick_loop:
            self._tick_task = asyncio.create_task(self.coordinator.run())

    async def stop(self) -> None:
        if self._tick_task is not None:
            self._tick_task.cancel()
            try:
                await self._tick_task
            except asyncio.CancelledError:
                pass
            self._tick_task = None
        await self.engine.wait_for_pending_writes()
        await self._channel.close()
        logger.info("Participant stopped")

    def status(self) -> ParticipantStatus:
        return ParticipantStatus(
            timers=list(self.engine.current.timers),
            connected=self._channel.is_connected,
            role=self.coordinator.role(),
            owned_ticks=self.coordinator.owned_ticks,
            last_remote_broadcast_ms=self.coordinator.last_remote_broadcast_ms,
        )
