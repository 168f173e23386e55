from timersync.infra.local_cache import LocalFallbackCache
from timersync.models import TimerSet, TimerState
from timersync.services.sync import Origin, ReconciliationEngine

from conftest import make_timer


def _engine(tmp_path, store, hub, clock):
    channel = hub.channel()
    engine = ReconciliationEngine(store, channel, LocalFallbackCache(tmp_path / "cache.json"), clock=clock)
    return engine, channel


async def test_local_apply_broadcasts_caches_and_persists(tmp_path, store, hub, clock):
    engine, channel = _engine(tmp_path, store, hub, clock)
    await channel.subscribe(lambda body: None)
    timers = TimerSet.of([make_timer("a")])

    result = await engine.apply(timers, Origin.LOCAL)
    await engine.wait_for_pending_writes()

    assert result == timers
    assert engine.current == timers
    assert engine.last_published_ms == clock.now
    assert len(channel.sent) == 1
    assert channel.sent[0]["lastUpdate"] == clock.now
    assert store.writes == [list(timers.timers)]
    assert LocalFallbackCache(tmp_path / "cache.json").read() == timers


async def test_local_apply_without_persist_skips_store(tmp_path, store, hub, clock):
    engine, channel = _engine(tmp_path, store, hub, clock)
    await channel.subscribe(lambda body: None)

    await engine.apply(TimerSet.of([make_timer("a")]), Origin.LOCAL, persist=False)
    await engine.wait_for_pending_writes()

    assert len(channel.sent) == 1
    assert store.writes == []


async def test_remote_apply_only_updates_memory_and_cache(tmp_path, store, hub, clock):
    engine, channel = _engine(tmp_path, store, hub, clock)
    await channel.subscribe(lambda body: None)
    timers = TimerSet.of([make_timer("a", state=TimerState.RUNNING)])

    await engine.apply(timers, Origin.REMOTE)
    await engine.wait_for_pending_writes()

    assert engine.current == timers
    assert channel.sent == []
    assert store.writes == []
    assert engine.last_published_ms == 0
    assert LocalFallbackCache(tmp_path / "cache.json").read() == timers


async def test_apply_is_idempotent(tmp_path, store, hub, clock):
    engine, channel = _engine(tmp_path, store, hub, clock)
    await channel.subscribe(lambda body: None)
    timers = TimerSet.of([make_timer("a"), make_timer("b")])

    await engine.apply(timers, Origin.LOCAL)
    first = engine.current
    await engine.apply(timers, Origin.LOCAL)
    await engine.wait_for_pending_writes()

    assert engine.current == first == timers
    assert channel.sent[0]["timers"] == channel.sent[1]["timers"]
    assert store.writes[0] == store.writes[1]


async def test_last_writer_wins_by_arrival(tmp_path, store, hub, clock):
    engine, _ = _engine(tmp_path, store, hub, clock)
    older = TimerSet.of([make_timer("a", remaining=100)])
    newer = TimerSet.of([make_timer("a", remaining=90), make_timer("b")])

    await engine.apply(newer, Origin.REMOTE)
    await engine.apply(older, Origin.REMOTE)

    # No version check: whatever arrives last replaces the whole set
    assert engine.current == older


async def test_store_failure_is_not_fatal(tmp_path, store, hub, clock, caplog):
    engine, channel = _engine(tmp_path, store, hub, clock)
    await channel.subscribe(lambda body: None)
    store.fail_writes = True
    timers = TimerSet.of([make_timer("a")])

    await engine.apply(timers, Origin.LOCAL)
    await engine.wait_for_pending_writes()

    assert engine.current == timers
    assert len(channel.sent) == 1
    assert "Durable store write failed" in caplog.text


async def test_disconnected_channel_still_updates_cache(tmp_path, store, hub, clock):
    engine, channel = _engine(tmp_path, store, hub, clock)
    timers = TimerSet.of([make_timer("a")])

    await engine.apply(timers, Origin.LOCAL)
    await engine.wait_for_pending_writes()

    assert channel.sent == []
    assert store.writes == [list(timers.timers)]
    assert LocalFallbackCache(tmp_path / "cache.json").read() == timers


async def test_recent_publishes_are_kept_up_to_the_history_limit(tmp_path, store, hub, clock):
    channel = hub.channel()
    engine = ReconciliationEngine(
        store, channel, LocalFallbackCache(tmp_path / "cache.json"), clock=clock, publish_history=3
    )
    await channel.subscribe(lambda body: None)
    stamps = []
    for remaining in range(5):
        clock.advance(1000)
        stamps.append(clock.now)
        await engine.apply(TimerSet.of([make_timer("a", remaining=remaining)]), Origin.LOCAL, persist=False)

    assert engine.recent_published_ms == tuple(stamps[-3:])
    assert engine.last_published_ms == stamps[-1]
