
import threading, time
import pytest
from zenith.config import Settings
from zenith.errors import SensorUnavailable, SessionStateError
from zenith.live import LiveSession


def _slow_session(clock, fixed_rng):
    # long interval so only explicit tick() calls produce snapshots
    return LiveSession(Settings(TICK_INTERVAL=3600), rng=fixed_rng, clock=clock)


def test_manual_ticks_produce_snapshots(clock, fixed_rng):
    live = _slow_session(clock, fixed_rng)
    live.start()
    live.on_gaze(True, 0.0)
    clock.advance(1.0)
    s1 = live.tick()
    clock.advance(1.0)
    s2 = live.tick()
    assert s1.timestamp == 1000 and s2.timestamp == 2000
    assert s1.confidence == 77.0 and s2.confidence == 79.0
    data = live.stop()
    assert [m.timestamp for m in data.metrics_history] == [1000, 2000]
    assert data.avg_confidence == pytest.approx(78.0)


def test_tick_after_stop_is_dropped(clock, fixed_rng):
    live = _slow_session(clock, fixed_rng)
    live.start()
    live.tick()
    data = live.stop()
    assert live.tick() is None
    assert len(data.metrics_history) == 1
    # stop is safe to repeat and returns the same result
    assert live.stop() is data


def test_start_twice_raises(clock, fixed_rng):
    live = _slow_session(clock, fixed_rng)
    live.start()
    try:
        with pytest.raises(SessionStateError):
            live.start()
    finally:
        live.stop()


def test_sensor_error_blocks_start(clock, fixed_rng):
    live = _slow_session(clock, fixed_rng)
    live.report_sensor_error("Permission denied")
    with pytest.raises(SensorUnavailable):
        live.start()
    assert not live.running
    live.clear_sensor_error()
    live.start()
    assert live.running
    live.stop()


def test_new_session_discards_previous_history(clock, fixed_rng):
    live = _slow_session(clock, fixed_rng)
    live.start()
    live.tick(); live.tick()
    first = live.stop()
    live.start()
    live.tick()
    second = live.stop()
    assert len(first.metrics_history) == 2
    assert len(second.metrics_history) == 1
    # engine state restarts from the configured seeds
    assert second.metrics_history[0].confidence == 72.0


def test_fillers_and_transcript(clock, fixed_rng):
    live = _slow_session(clock, fixed_rng)
    assert live.on_transcript("umm before start") == []
    live.start()
    assert live.on_transcript("Umm, so basically") == ["umm", "basically"]
    live.on_transcript("umm", final=False)
    live.on_transcript("umm like this")
    data = live.stop()
    assert data.filler_words == {"umm": 3, "basically": 1, "like": 1}
    assert data.transcript == "Umm, so basically umm like this"
    # late callback after stop is ignored
    live.on_transcript("umm")
    assert live.stop().filler_words == {"umm": 3, "basically": 1, "like": 1}


def test_intervention_fires_advisory(clock, fixed_rng):
    got = []
    done = threading.Event()

    def sink(msg):
        got.append(msg)
        done.set()

    s = Settings(TICK_INTERVAL=3600, INITIAL_STABILITY=20)
    live = LiveSession(s, advisory_sink=sink, rng=fixed_rng, clock=clock)
    live.start()
    live.on_gaze(False, 0.05)
    for _ in range(5):
        live.tick()
    assert done.wait(2.0)
    live.stop()
    assert got == ["Take a deep breath. Recalibrating focus."]
    assert any("Assistant:" in line for line in live.status().logs)


def test_raw_jitter_is_smoothed(clock, fixed_rng):
    live = _slow_session(clock, fixed_rng)
    live.on_gaze(True, 0.02, smoothed=False)
    assert live.sample().jitter == pytest.approx(0.002)
    live.on_gaze(True, 0.001)
    assert live.sample().jitter == pytest.approx(0.001)


def test_status(clock, fixed_rng):
    live = _slow_session(clock, fixed_rng)
    st = live.status()
    assert st.running is False and st.confidence == 75.0 and st.bpm == 72
    live.start()
    live.on_volume(140)
    live.tick()
    st = live.status()
    assert st.running and st.volume == 100.0
    assert len(st.heatmap) == 1
    assert st.last_snapshot is not None
    live.stop()
    assert live.status().heatmap == []


def test_reset_clears_last_session(clock, fixed_rng):
    live = _slow_session(clock, fixed_rng)
    live.start()
    live.tick()
    live.reset()
    assert live.last_session is None
    assert live.stop() is None


def test_tick_loop_runs_and_stops(fixed_rng):
    live = LiveSession(Settings(TICK_INTERVAL=0.02), rng=fixed_rng)
    live.start()
    time.sleep(0.2)
    data = live.stop()
    n = len(data.metrics_history)
    assert n >= 1
    stamps = [m.timestamp for m in data.metrics_history]
    assert stamps == sorted(stamps)
    # no tick fires after stop returns
    time.sleep(0.1)
    assert len(live.aggregator.history) == n
