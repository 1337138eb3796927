import pytest
from pydantic import ValidationError
from zenith.models import MetricSnapshot, SessionData, SessionReport, VolumeSample


def test_snapshot_bounds_and_frozen(make_snapshot):
    snap = make_snapshot(stability=55.0, timestamp=3000)
    assert snap.emotion == "NERVOUS"
    with pytest.raises(ValidationError):
        MetricSnapshot(timestamp=0, confidence=5.0, eye_contact=True, bpm=72,
                       emotion_stability=50.0, emotion="NERVOUS")
    with pytest.raises(ValidationError):
        snap.confidence = 90.0


def test_session_defaults_and_json_roundtrip(make_snapshot):
    empty = SessionData(duration=0.0)
    assert empty.dominant_emotion == "CONFIDENT"
    assert empty.metrics_history == () and empty.filler_words == {}

    data = SessionData(duration=2.0, filler_words={"umm": 1},
                       metrics_history=(make_snapshot(timestamp=1000), make_snapshot(timestamp=2000)))
    again = SessionData.model_validate_json(data.model_dump_json())
    assert again == data


def test_report_literals():
    with pytest.raises(ValidationError):
        SessionReport(session=SessionData(duration=0.0), rank="LEGEND", integrity="STABLE_AXIS",
                      total_fillers=0, advice="")
    assert VolumeSample(volume=12).volume == 12.0
