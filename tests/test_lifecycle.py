from timersync.models import TimerState

from conftest import InMemoryTimerStore, make_timer


async def _started(make_participant, timers):
    store = InMemoryTimerStore(timers)
    p = make_participant(store_override=store)
    await p.start(run_tick_loop=False)
    return p, store


async def test_remove_last_timer_is_rejected(make_participant):
    p, store = await _started(make_participant, [make_timer("only")])

    result = await p.controller.remove_timer("only")
    await p.engine.wait_for_pending_writes()

    assert len(result) == 1
    assert p.timers.ids() == ["only"]
    assert p._channel.sent == []
    assert store.writes == []
    await p.stop()


async def test_remove_timer(make_participant):
    p, store = await _started(make_participant, [make_timer("a"), make_timer("b")])

    await p.controller.remove_timer("a")
    await p.engine.wait_for_pending_writes()

    assert p.timers.ids() == ["b"]
    assert store.timers == [make_timer("b")]
    await p.stop()


async def test_retime_stops_running_timer(make_participant):
    p, _ = await _started(
        make_participant, [make_timer("A", remaining=50, total=60, state=TimerState.RUNNING)]
    )

    await p.controller.retime_timer("A", 2, 0)

    timer = p.timers.find("A")
    assert (timer.time_remaining, timer.total_time, timer.state) == (120, 120, TimerState.STOPPED)
    await p.stop()


async def test_retime_rejects_negative_values(make_participant):
    p, _ = await _started(make_participant, [make_timer("A", remaining=60)])

    await p.controller.retime_timer("A", -1, 0)

    assert p.timers.find("A").total_time == 60
    assert p._channel.sent == []
    await p.stop()


async def test_start_requires_time_remaining(make_participant):
    p, _ = await _started(make_participant, [make_timer("a", remaining=0, total=60), make_timer("b", remaining=-5, total=60)])

    await p.controller.start_timer("a")
    await p.controller.start_timer("b")

    assert p.timers.find("a").state == TimerState.STOPPED
    assert p.timers.find("b").state == TimerState.STOPPED
    assert p._channel.sent == []
    await p.stop()


async def test_start_pause_reset(make_participant, clock):
    p, _ = await _started(make_participant, [make_timer("a", remaining=60)])

    await p.controller.start_timer("a")
    assert p.timers.find("a").state == TimerState.RUNNING

    clock.advance(1000)
    await p.coordinator.tick()
    await p.controller.pause_timer("a")
    paused = p.timers.find("a")
    assert (paused.state, paused.time_remaining) == (TimerState.PAUSED, 59)

    clock.advance(1000)
    await p.coordinator.tick()
    assert p.timers.find("a").time_remaining == 59

    await p.controller.reset_timer("a")
    reset = p.timers.find("a")
    assert (reset.state, reset.time_remaining, reset.total_time) == (TimerState.STOPPED, 60, 60)
    await p.stop()


async def test_pause_all_only_affects_running(make_participant):
    p, _ = await _started(make_participant, [
        make_timer("a", state=TimerState.RUNNING),
        make_timer("b", state=TimerState.STOPPED),
        make_timer("c", state=TimerState.PAUSED),
    ])

    await p.controller.pause_all()

    assert [t.state for t in p.timers.timers] == [TimerState.PAUSED, TimerState.STOPPED, TimerState.PAUSED]
    await p.stop()


async def test_reset_all(make_participant):
    p, _ = await _started(make_participant, [
        make_timer("a", remaining=-10, total=30, state=TimerState.RUNNING),
        make_timer("b", remaining=5, total=20, state=TimerState.PAUSED),
    ])

    await p.controller.reset_all()

    assert [(t.time_remaining, t.state) for t in p.timers.timers] == [
        (30, TimerState.STOPPED),
        (20, TimerState.STOPPED),
    ]
    await p.stop()


async def test_add_and_rename(make_participant):
    p, store = await _started(make_participant, [make_timer("a"), make_timer("b")])

    await p.controller.add_timer(90)
    added = p.timers.timers[-1]
    assert added.name == "Speaker 3"
    assert (added.time_remaining, added.total_time, added.state) == (90, 90, TimerState.STOPPED)
    assert added.id not in ("a", "b")

    await p.controller.rename_timer(added.id, "Keynote")
    await p.engine.wait_for_pending_writes()

    assert p.timers.find(added.id).name == "Keynote"
    assert [t.id for t in store.timers] == ["a", "b", added.id]
    await p.stop()


async def test_unknown_id_is_a_no_op(make_participant):
    p, _ = await _started(make_participant, [make_timer("a"), make_timer("b")])
    before = p.timers

    for op in (p.controller.start_timer, p.controller.pause_timer, p.controller.reset_timer, p.controller.remove_timer):
        assert await op("missing") == before
    assert await p.controller.rename_timer("missing", "x") == before

    assert p._channel.sent == []
    await p.stop()


async def test_mutations_produce_new_sets(make_participant):
    p, _ = await _started(make_participant, [make_timer("a")])
    before = p.timers

    after = await p.controller.rename_timer("a", "Renamed")

    assert before.find("a").name == "Speaker a"
    assert after.find("a").name == "Renamed"
    assert after is not before
    await p.stop()


async def test_mutations_broadcast_and_persist_immediately(make_participant):
    p, store = await _started(make_participant, [make_timer("a")])

    await p.controller.start_timer("a")
    await p.engine.wait_for_pending_writes()

    assert len(p._channel.sent) == 1
    assert p._channel.sent[0]["timers"][0]["state"] == "running"
    assert store.writes[-1][0].state == TimerState.RUNNING
    await p.stop()
