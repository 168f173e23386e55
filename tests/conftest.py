from typing import Any, Dict, List

import pytest

from timersync.infra.local_cache import LocalFallbackCache
from timersync.models import Timer, TimerPayload, TimerSet, TimerState
from timersync.services.sync import BroadcastChannel, Participant, TimerStore


class FakeClock:
    """Millisecond clock advanced by hand"""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class InMemoryTimerStore(TimerStore):
    def __init__(self, timers: List[Timer] = None):
        self.timers: List[Timer] = list(timers or [])
        self.writes: List[List[Timer]] = []
        self.fail_reads = False
        self.fail_writes = False

    async def read_all(self) -> List[Timer]:
        if self.fail_reads:
            return []
        return list(self.timers)

    async def replace_all(self, timers: List[Timer]) -> bool:
        if self.fail_writes:
            return False
        self.writes.append(list(timers))
        self.timers = list(timers)
        return True


class BroadcastHub:
    """Delivers every published payload to every connected subscriber, sender included"""

    def __init__(self):
        self.channels: List["InMemoryChannel"] = []

    def channel(self) -> "InMemoryChannel":
        channel = InMemoryChannel(self)
        self.channels.append(channel)
        return channel

    def deliver(self, body: Dict[str, Any]) -> None:
        for channel in list(self.channels):
            if channel.is_connected and channel.callback is not None:
                channel.callback(body)


class InMemoryChannel(BroadcastChannel):
    def __init__(self, hub: BroadcastHub):
        self._hub = hub
        self._connected = False
        self._listeners = []
        self.callback = None
        self.sent: List[Dict[str, Any]] = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    def on_status_change(self, listener) -> None:
        self._listeners.append(listener)

    def set_connected(self, connected: bool) -> None:
        self._connected = connected
        for listener in self._listeners:
            listener(connected)

    async def subscribe(self, callback) -> None:
        self.callback = callback
        self.set_connected(True)

    async def publish(self, timer_set: TimerSet, timestamp_ms: int) -> None:
        if not self._connected:
            return
        body = TimerPayload(timers=list(timer_set.timers), last_update=timestamp_ms).model_dump(
            by_alias=True, mode="json"
        )
        self.sent.append(body)
        self._hub.deliver(body)

    async def close(self) -> None:
        self.callback = None
        self.set_connected(False)


def make_timer(timer_id: str, remaining: int = 300, total: int = None, state=TimerState.STOPPED, name=None):
    return Timer(
        id=timer_id,
        name=name or f"Speaker {timer_id}",
        time_remaining=remaining,
        total_time=remaining if total is None else total,
        state=state,
    )


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def hub():
    return BroadcastHub()


@pytest.fixture()
def store():
    return InMemoryTimerStore()


@pytest.fixture()
def make_participant(tmp_path, clock, hub, store):
    def _make(name: str = "a", store_override=None, **kwargs) -> Participant:
        participant = Participant(
            store=store_override or store,
            channel=hub.channel(),
            cache=LocalFallbackCache(tmp_path / f"{name}.json"),
            clock=clock,
            **kwargs,
        )
        return participant

    yield _make

