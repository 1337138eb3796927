import pytest
from zenith.config import Settings
from zenith.engine import classify_emotion
from zenith.models import MetricSnapshot


class FixedRng:
    """Stands in for numpy's Generator; always draws the same integer."""
    def __init__(self, value=0):
        self.value = value
        self.calls = []

    def integers(self, low, high):
        self.calls.append((low, high))
        return self.value


class FakeClock:
    def __init__(self, t=100.0):
        self.t = t

    def __call__(self):
        return self.t

    def advance(self, dt):
        self.t += dt


@pytest.fixture
def settings():
    return Settings(GEMINI_API_KEY="")


@pytest.fixture
def fixed_rng():
    return FixedRng(0)


@pytest.fixture
def make_rng():
    return FixedRng


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_snapshot():
    def _make(stability=80.0, timestamp=0, confidence=75.0, eye_contact=True, bpm=72):
        return MetricSnapshot(
            timestamp=timestamp,
            confidence=confidence,
            eye_contact=eye_contact,
            bpm=bpm,
            emotion_stability=stability,
            emotion=classify_emotion(stability),
        )
    return _make
