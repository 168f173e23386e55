"""Timer domain models"""
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TimerState(str, Enum):
    """Timer state"""
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class Timer(BaseModel):
    """
    A single countdown timer.

    Wire and cache shapes use camelCase (timeRemaining, totalTime).
    time_remaining may go negative to show overrun.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    time_remaining: int
    total_time: int
    state: TimerState = TimerState.STOPPED

    @property
    def is_running(self) -> bool:
        return self.state == TimerState.RUNNING

    def progress_percentage(self) -> float:
        """Remaining time as a percentage of the configured duration"""
        if self.total_time == 0:
            return 0.0
        return self.time_remaining / self.total_time * 100


class TimerSet(BaseModel):
    """
    Ordered snapshot of every timer shared between participants.

    This is the unit of synchronization: broadcasts, persistence and
    reconciliation always carry a whole set.
    """
    model_config = ConfigDict(frozen=True)

    timers: Tuple[Timer, ...] = ()

    @field_validator("timers")
    @classmethod
    def _unique_ids(cls, timers: Tuple[Timer, ...]) -> Tuple[Timer, ...]:
        seen = set()
        for timer in timers:
            if timer.id in seen:
                raise ValueError(f"Duplicate timer id: {timer.id}")
            seen.add(timer.id)
        return timers

    @classmethod
    def of(cls, timers) -> "TimerSet":
        return cls(timers=tuple(timers))

    def __len__(self) -> int:
        return len(self.timers)

    def ids(self) -> List[str]:
        return [timer.id for timer in self.timers]

    def find(self, timer_id: str) -> Optional[Timer]:
        for timer in self.timers:
            if timer.id == timer_id:
                return timer
        return None

    def has_running(self) -> bool:
        return any(timer.is_running for timer in self.timers)

    def to_wire(self) -> List[dict]:
        """Client-shaped timer list used by broadcasts and the local cache"""
        return [timer.model_dump(by_alias=True, mode="json") for timer in self.timers]


class TimerPayload(BaseModel):
    """Broadcast payload sent on the realtime channel"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timers: List[Timer] = Field(min_length=1)
    last_update: int = Field(gt=0)

    def to_timer_set(self) -> TimerSet:
        return TimerSet.of(self.timers)


class TimerRow(BaseModel):
    """Durable store record, one row per timer"""
    id: str
    name: str
    time_remaining: int
    total_time: int
    state: TimerState
    display_order: int
    updated_at: Optional[datetime] = None

    @classmethod
    def from_timer(cls, timer: Timer, display_order: int) -> "TimerRow":
        return cls(
            id=timer.id,
            name=timer.name,
            time_remaining=timer.time_remaining,
            total_time=timer.total_time,
            state=timer.state,
            display_order=display_order,
        )

    def to_timer(self) -> Timer:
        return Timer(
            id=self.id,
            name=self.name,
            time_remaining=self.time_remaining,
            total_time=self.total_time,
            state=self.state,
        )
