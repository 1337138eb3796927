"""
Landmark-derived signals: gaze-lock, smoothed jitter and tracking accuracy.

Landmarks come from an external face-mesh detector (478 points with iris
refinement) as normalized (x, y[, z]) coordinates. Detection itself is not
done here.
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from zenith.config import Settings
from zenith.smoothing import smooth

# Nose tip, outer eye corners, mouth corners
JITTER_LANDMARKS: Tuple[int, ...] = (1, 33, 263, 61, 291)
LEFT_IRIS = 468
RIGHT_IRIS = 473


def landmark_displacement(prev: np.ndarray, cur: np.ndarray,
                          indices: Sequence[int] = JITTER_LANDMARKS) -> float:
    """Sum of planar (x, y) displacement of the selected landmarks between two frames."""
    idx = list(indices)
    delta = cur[idx, :2] - prev[idx, :2]
    return float(np.sum(np.sqrt(np.sum(delta * delta, axis=1))))


def is_gaze_locked(iris: Sequence[float], center: Tuple[float, float] = (0.5, 0.45),
                   window: float = 0.12) -> bool:
    """True when the iris point falls inside the acceptance window on both axes."""
    return abs(float(iris[0]) - center[0]) < window and abs(float(iris[1]) - center[1]) < window


class LandmarkTracker:
    """Turns per-frame landmark sets into the last-known gaze/jitter values."""

    def __init__(self, settings: Optional[Settings] = None):
        self.s = settings or Settings()
        self.jitter = 0.0
        self.gaze_lock = False
        self.tracking_accuracy = 0.8
        self._last: Optional[np.ndarray] = None

    def reset(self) -> None:
        self.jitter = 0.0
        self.gaze_lock = False
        self._last = None

    def update(self, landmarks) -> Tuple[bool, float]:
        """
        Consume one frame of landmarks.

        Returns:
            (gaze_lock, smoothed_jitter)
        """
        pts = np.asarray(landmarks, dtype=float)
        if pts.ndim != 2 or pts.shape[1] < 2 or pts.shape[0] <= LEFT_IRIS:
            raise ValueError(f"expected a refined face mesh (>{LEFT_IRIS} points), got shape {pts.shape}")

        if self._last is not None and self._last.shape[0] == pts.shape[0]:
            raw = landmark_displacement(self._last, pts)
            self.jitter = smooth(self.jitter, raw, self.s.JITTER_ALPHA)
        self._last = pts

        self.gaze_lock = is_gaze_locked(
            pts[LEFT_IRIS],
            center=(self.s.GAZE_CENTER_X, self.s.GAZE_CENTER_Y),
            window=self.s.GAZE_WINDOW,
        )
        self.tracking_accuracy = smooth(
            self.tracking_accuracy, 1.0 - min(1.0, self.jitter * 1000.0), self.s.TRACKING_ALPHA
        )
        return self.gaze_lock, self.jitter

    def lost(self) -> None:
        """No face in the current frame; jitter history is kept for when it returns."""
        self.tracking_accuracy = 0.0
        self.gaze_lock = False
