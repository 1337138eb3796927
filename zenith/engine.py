"""
Per-tick metric computation.

One call to MetricEngine.step turns the current gaze-lock and jitter plus the
previous rolling state into exactly one MetricSnapshot and the state to thread
into the next tick. No timers or shared state live here.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from zenith.config import Settings
from zenith.models import MetricSnapshot
from zenith.smoothing import clamp, smooth

logger = logging.getLogger(__name__)

STABLE_AT = 70.0
NERVOUS_AT = 40.0


@dataclass(frozen=True)
class EngineState:
    """Rolling values carried from one tick to the next."""
    stability: float
    confidence: float

    @classmethod
    def initial(cls, settings: Settings) -> "EngineState":
        return cls(stability=settings.INITIAL_STABILITY, confidence=settings.INITIAL_CONFIDENCE)


def classify_emotion(stability: float) -> str:
    """[70, 100] -> STABLE, [40, 70) -> NERVOUS, below 40 -> STRESSED."""
    if stability >= STABLE_AT:
        return "STABLE"
    if stability >= NERVOUS_AT:
        return "NERVOUS"
    return "STRESSED"


def stability_modifier(jitter: float, gaze_lock: bool,
                       jitter_scale: float = 5000.0, gaze_penalty: float = 15.0) -> float:
    """Raw per-tick stability estimate before smoothing."""
    return max(0.0, 100.0 - jitter * jitter_scale - (0.0 if gaze_lock else gaze_penalty))


class MetricEngine:
    """Computes one snapshot per tick; randomness comes from an injectable generator."""

    def __init__(self, settings: Optional[Settings] = None, rng=None):
        self.s = settings or Settings()
        # anything exposing integers(low, high) works, numpy Generator by default
        self.rng = rng if rng is not None else np.random.default_rng()

    def step(self, state: EngineState, gaze_lock: bool, jitter: float,
             timestamp: int) -> Tuple[MetricSnapshot, EngineState]:
        s = self.s
        modifier = stability_modifier(max(0.0, jitter), gaze_lock, s.JITTER_SCALE, s.GAZE_LOSS_PENALTY)
        prev_stability = clamp(state.stability, 0.0, 100.0)
        new_stability = clamp(smooth(prev_stability, modifier, s.STABILITY_ALPHA), 0.0, 100.0)

        drift = s.CONFIDENCE_GAIN if gaze_lock else -s.CONFIDENCE_DECAY
        new_confidence = clamp(state.confidence + drift, s.CONFIDENCE_MIN, s.CONFIDENCE_MAX)

        bpm = s.BPM_BASE + int(self.rng.integers(0, s.BPM_JITTER_MAX + 1))
        if new_stability < s.BPM_STRESS_BELOW:
            bpm += s.BPM_STRESS_BONUS

        snapshot = MetricSnapshot(
            timestamp=int(timestamp),
            confidence=float(new_confidence),
            eye_contact=bool(gaze_lock),
            bpm=max(0, bpm),
            emotion_stability=float(new_stability),
            emotion=classify_emotion(new_stability),
        )
        logger.debug(
            f"[engine] t={snapshot.timestamp}ms gaze={gaze_lock} jitter={jitter:.5f} "
            f"mod={modifier:.1f} stability={new_stability:.1f} conf={new_confidence:.0f} bpm={snapshot.bpm}"
        )
        return snapshot, EngineState(stability=new_stability, confidence=new_confidence)
