"""
Session aggregation: the append-only snapshot history of one session and its
reduction to SessionData on stop.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from zenith.errors import EmptySessionError, PreconditionViolation
from zenith.models import DEFAULT_DOMINANT_EMOTION, MetricSnapshot, SessionData
from zenith.smoothing import clamp

logger = logging.getLogger(__name__)


class SessionAggregator:
    """
    Owns the snapshot sequence, filler counts and transcript of the active session.

    With strict=True (default) recording outside a session raises
    PreconditionViolation. With strict=False the call is logged and dropped,
    which is what callback-driven producers racing a stop() need.
    """

    def __init__(self, strict: bool = True, clock: Callable[[], float] = time.monotonic):
        self.strict = strict
        self.clock = clock
        self._active = False
        self._start_time: Optional[float] = None
        self._history: List[MetricSnapshot] = []
        self._fillers: Dict[str, int] = {}
        self._transcript: List[str] = []

    # ---- read-only views ----
    @property
    def active(self) -> bool:
        return self._active

    @property
    def started_at(self) -> Optional[float]:
        return self._start_time

    @property
    def history(self) -> Tuple[MetricSnapshot, ...]:
        return tuple(self._history)

    @property
    def filler_words(self) -> Dict[str, int]:
        return dict(self._fillers)

    # ---- lifecycle ----
    def start(self) -> None:
        self._history = []
        self._fillers = {}
        self._transcript = []
        self._start_time = self.clock()
        self._active = True
        logger.debug(f"[session] started at {self._start_time:.3f}")

    def reset(self) -> None:
        """Discard everything, including the last stopped session's history."""
        self._active = False
        self._start_time = None
        self._history = []
        self._fillers = {}
        self._transcript = []

    def elapsed_ms(self) -> int:
        if self._start_time is None:
            return 0
        return max(0, int(round((self.clock() - self._start_time) * 1000.0)))

    def _check_active(self, op: str) -> bool:
        if self._active:
            return True
        if self.strict:
            raise PreconditionViolation(f"{op} called with no active session")
        logger.warning(f"[session] {op} ignored: no active session")
        return False

    # ---- recording ----
    def record_tick(self, snapshot: MetricSnapshot) -> None:
        if not self._check_active("record_tick"):
            return
        if self._history and snapshot.timestamp < self._history[-1].timestamp:
            raise ValueError(
                f"snapshot timestamp {snapshot.timestamp} precedes {self._history[-1].timestamp}"
            )
        self._history.append(snapshot)

    def record_filler(self, word: str) -> None:
        if not self._check_active("record_filler"):
            return
        self._fillers[word] = self._fillers.get(word, 0) + 1

    def record_transcript(self, text: str) -> None:
        if not self._check_active("record_transcript"):
            return
        text = (text or "").strip()
        if text:
            self._transcript.append(text)

    # ---- reduction ----
    def stop(self, allow_empty: bool = True) -> SessionData:
        """
        End the session and reduce it to SessionData.

        Raises:
            PreconditionViolation: no session is active (never started or already stopped).
            EmptySessionError: allow_empty is False and no tick was recorded.
        """
        if not self._active:
            raise PreconditionViolation("stop called with no active session")
        duration = max(0.0, self.clock() - self._start_time)
        self._active = False

        history = tuple(self._history)
        n = len(history)
        logger.debug(f"[session] stopped duration={duration:.2f}s ticks={n}")
        if n == 0 and not allow_empty:
            raise EmptySessionError("session stopped without recorded ticks")

        if n == 0:
            avg_conf = eye_pct = avg_bpm = avg_stab = 0.0
            dominant = DEFAULT_DOMINANT_EMOTION
        else:
            avg_conf = float(np.mean([m.confidence for m in history]))
            eye_pct = sum(1 for m in history if m.eye_contact) / n * 100.0
            avg_bpm = float(np.mean([m.bpm for m in history]))
            avg_stab = float(np.mean([m.emotion_stability for m in history]))
            dominant = history[-1].emotion

        return SessionData(
            duration=duration,
            filler_words=dict(self._fillers),
            avg_confidence=clamp(avg_conf, 0.0, 100.0),
            eye_contact_percentage=clamp(eye_pct, 0.0, 100.0),
            avg_bpm=avg_bpm,
            avg_emotion_stability=clamp(avg_stab, 0.0, 100.0),
            metrics_history=history,
            dominant_emotion=dominant,
            transcript=" ".join(self._transcript),
        )
