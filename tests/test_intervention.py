import threading
from zenith.intervention import (
    ARMED, BELOW_THRESHOLD, FIRED,
    AdvisoryDispatcher, InterventionPolicy, InterventionState, advance,
)


class RecordingDispatcher:
    def __init__(self):
        self.messages = []

    def dispatch(self, message):
        self.messages.append(message)


def test_fires_once_per_sustained_dip():
    state = InterventionState()
    fired_at = []
    for i, v in enumerate([50, 30, 30, 30, 30]):
        state, fired = advance(state, v)
        if fired:
            fired_at.append(i)
    # third consecutive low value is the 4th element overall
    assert fired_at == [3]
    assert state.label == FIRED


def test_rearms_only_after_recovery():
    seq = [30, 30, 30, 30, 34.9, 35, 30, 30, 30, 20]
    state = InterventionState()
    fired_at = []
    for i, v in enumerate(seq):
        state, fired = advance(state, v)
        if fired:
            fired_at.append(i)
    assert fired_at == [2, 8]


def test_interrupted_dip_does_not_fire():
    state = InterventionState()
    fired_any = False
    for v in [30, 30, 40, 30, 30, 36, 30]:
        state, fired = advance(state, v)
        fired_any = fired_any or fired
    assert not fired_any


def test_state_labels():
    assert InterventionState().label == ARMED
    s, _ = advance(InterventionState(), 10)
    assert s.label == BELOW_THRESHOLD
    s, _ = advance(s, 90)
    assert s.label == ARMED


def test_policy_dispatches_message_once():
    disp = RecordingDispatcher()
    policy = InterventionPolicy(message="breathe", dispatcher=disp)
    results = [policy.observe(v) for v in [20, 20, 20, 20, 20]]
    assert results == [False, False, True, False, False]
    assert disp.messages == ["breathe"]
    policy.reset()
    assert policy.state == InterventionState()


def test_dispatcher_runs_sink_off_thread():
    seen = {}
    done = threading.Event()

    def sink(msg):
        seen["msg"] = msg
        seen["thread"] = threading.current_thread()
        done.set()

    t = AdvisoryDispatcher(sink).dispatch("hello")
    assert done.wait(2.0)
    t.join(2.0)
    assert seen["msg"] == "hello"
    assert seen["thread"] is not threading.main_thread()


def test_dispatcher_survives_sink_failure():
    def sink(msg):
        raise RuntimeError("speech engine missing")

    t = AdvisoryDispatcher(sink).dispatch("hello")
    t.join(2.0)
    assert not t.is_alive()
