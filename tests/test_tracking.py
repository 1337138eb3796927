import numpy as np
import pytest
from zenith.tracking import (
    JITTER_LANDMARKS, LEFT_IRIS, LandmarkTracker, is_gaze_locked, landmark_displacement,
)


def _mesh(iris=(0.5, 0.45), shift=0.0):
    pts = np.full((478, 3), 0.5)
    pts[:, 0] += shift
    pts[LEFT_IRIS, :2] = iris
    return pts


def test_is_gaze_locked_window():
    assert is_gaze_locked((0.5, 0.45))
    assert is_gaze_locked((0.6, 0.5))
    assert not is_gaze_locked((0.63, 0.45))
    assert not is_gaze_locked((0.5, 0.30))


def test_landmark_displacement_sums_selected_points():
    a = np.zeros((478, 3))
    b = a.copy()
    b[:, 0] = 0.003
    b[:, 1] = 0.004
    assert landmark_displacement(a, b) == pytest.approx(0.005 * len(JITTER_LANDMARKS))


def test_tracker_smooths_jitter(settings):
    tr = LandmarkTracker(settings)
    gaze, jitter = tr.update(_mesh())
    assert gaze is True and jitter == 0.0
    gaze, jitter = tr.update(_mesh(shift=0.002))
    # raw displacement 5 * 0.002, smoothed with alpha 0.1
    assert jitter == pytest.approx(0.001)
    gaze, jitter = tr.update(_mesh(shift=0.002))
    assert jitter == pytest.approx(0.0009)


def test_tracker_gaze_off_axis(settings):
    tr = LandmarkTracker(settings)
    gaze, _ = tr.update(_mesh(iris=(0.9, 0.1)))
    assert gaze is False


def test_tracker_accuracy_and_face_lost(settings):
    tr = LandmarkTracker(settings)
    tr.update(_mesh())
    assert 0.0 < tr.tracking_accuracy <= 1.0
    tr.lost()
    assert tr.tracking_accuracy == 0.0
    assert tr.gaze_lock is False


def test_tracker_rejects_unrefined_mesh(settings):
    with pytest.raises(ValueError):
        LandmarkTracker(settings).update(np.zeros((468, 3)))
