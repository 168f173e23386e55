"""Timer Lifecycle Controller - user mutations on the shared timer set"""
import asyncio
import logging
import uuid
from typing import Callable, Optional

from timersync import config
from timersync.models import Timer, TimerSet, TimerState
from timersync.utils.time_format import to_seconds

from .reconciliation import Origin, ReconciliationEngine
from .tick_coordinator import TickCoordinator

logger = logging.getLogger(__name__)


def generate_timer_id() -> str:
    return uuid.uuid4().hex[:8]


def default_timer_set(
    label: str = config.DEFAULT_TIMER_LABEL,
    duration_seconds: int = config.DEFAULT_DURATION_SECONDS,
) -> TimerSet:
    """Two stopped timers used when neither store nor cache has anything"""
    return TimerSet.of(
        Timer(
            id=generate_timer_id(),
            name=f"{label} {n}",
            time_remaining=duration_seconds,
            total_time=duration_seconds,
            state=TimerState.STOPPED,
        )
        for n in (1, 2)
    )


def _update_one(timer_set: TimerSet, timer_id: str, **changes) -> TimerSet:
    return TimerSet.of(
        timer.model_copy(update=changes) if timer.id == timer_id else timer
        for timer in timer_set.timers
    )


class TimerLifecycleController:
    """
    Mutation API for the shared timer set.

    Every accepted operation builds a new set from the current one, makes
    this participant the countdown leader, and routes the set through the
    reconciliation engine as a local update (broadcast + persist).
    Rejected operations change nothing and send nothing.
    """

    def __init__(
        self,
        engine: ReconciliationEngine,
        coordinator: TickCoordinator,
        lock: Optional[asyncio.Lock] = None,
        label: str = config.DEFAULT_TIMER_LABEL,
        id_factory: Callable[[], str] = generate_timer_id,
    ):
        self._engine = engine
        self._coordinator = coordinator
        self._lock = lock or asyncio.Lock()
        self._label = label
        self._id_factory = id_factory

    @property
    def timers(self) -> TimerSet:
        return self._engine.current

    async def _mutate(self, operation: str, transform: Callable[[TimerSet], Optional[TimerSet]]) -> TimerSet:
        async with self._lock:
            current = self._engine.current
            updated = transform(current)
            if updated is None:
                logger.debug(f"{operation} rejected")
                return current

            self._coordinator.claim_leadership()
            logger.info(f"{operation} applied ({len(updated)} timers)")
            return await self._engine.apply(updated, Origin.LOCAL, persist=True)

    async def add_timer(
        self,
        duration_seconds: int = config.DEFAULT_DURATION_SECONDS,
        name: Optional[str] = None,
    ) -> TimerSet:
        def transform(current: TimerSet) -> Optional[TimerSet]:
            if duration_seconds < 0:
                return None
            timer_id = self._id_factory()
            while current.find(timer_id) is not None:
                timer_id = self._id_factory()
            timer = Timer(
                id=timer_id,
                name=name if name is not None else f"{self._label} {len(current) + 1}",
                time_remaining=duration_seconds,
                total_time=duration_seconds,
                state=TimerState.STOPPED,
            )
            return TimerSet.of([*current.timers, timer])

        return await self._mutate("add_timer", transform)

    async def remove_timer(self, timer_id: str) -> TimerSet:
        def transform(current: TimerSet) -> Optional[TimerSet]:
            # A set always keeps at least one timer
            if len(current) <= 1 or current.find(timer_id) is None:
                return None
            return TimerSet.of(t for t in current.timers if t.id != timer_id)

        return await self._mutate(f"remove_timer({timer_id})", transform)

    async def start_timer(self, timer_id: str) -> TimerSet:
        def transform(current: TimerSet) -> Optional[TimerSet]:
            timer = current.find(timer_id)
            if timer is None or timer.time_remaining <= 0:
                return None
            return _update_one(current, timer_id, state=TimerState.RUNNING)

        return await self._mutate(f"start_timer({timer_id})", transform)

    async def pause_timer(self, timer_id: str) -> TimerSet:
        def transform(current: TimerSet) -> Optional[TimerSet]:
            if current.find(timer_id) is None:
                return None
            return _update_one(current, timer_id, state=TimerState.PAUSED)

        return await self._mutate(f"pause_timer({timer_id})", transform)

    async def reset_timer(self, timer_id: str) -> TimerSet:
        def transform(current: TimerSet) -> Optional[TimerSet]:
            timer = current.find(timer_id)
            if timer is None:
                return None
            return _update_one(
                current, timer_id, time_remaining=timer.total_time, state=TimerState.STOPPED
            )

        return await self._mutate(f"reset_timer({timer_id})", transform)

    async def reset_all(self) -> TimerSet:
        def transform(current: TimerSet) -> TimerSet:
            return TimerSet.of(
                t.model_copy(update={"time_remaining": t.total_time, "state": TimerState.STOPPED})
                for t in current.timers
            )

        return await self._mutate("reset_all", transform)

    async def pause_all(self) -> TimerSet:
        def transform(current: TimerSet) -> TimerSet:
            return TimerSet.of(
                t.model_copy(update={"state": TimerState.PAUSED}) if t.is_running else t
                for t in current.timers
            )

        return await self._mutate("pause_all", transform)

    async def rename_timer(self, timer_id: str, name: str) -> TimerSet:
        def transform(current: TimerSet) -> Optional[TimerSet]:
            if current.find(timer_id) is None:
                return None
            return _update_one(current, timer_id, name=name)

        return await self._mutate(f"rename_timer({timer_id})", transform)

    async def retime_timer(self, timer_id: str, minutes: int, seconds: int) -> TimerSet:
        """Set a new duration; the timer is stopped so a concurrent tick cannot race it"""
        def transform(current: TimerSet) -> Optional[TimerSet]:
            if minutes < 0 or seconds < 0 or current.find(timer_id) is None:
                return None
            total = to_seconds(minutes, seconds)
            return _update_one(
                current, timer_id, time_remaining=total, total_time=total, state=TimerState.STOPPED
            )

        return await self._mutate(f"retime_timer({timer_id})", transform)
