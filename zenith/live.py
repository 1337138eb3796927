# zenith/live.py
"""
Live session driver.

Sensor producers (landmark tracker, volume meter, speech recognizer) push
last-known values at their own cadence; a single tick thread reads them once
per TICK_INTERVAL and runs engine -> intervention -> aggregator.

- Ticks never overlap: tick() holds a lock for its whole body
- stop() clears the active flag under the same lock, so a tick landing after
  stop is dropped, then joins the tick thread so nothing fires afterwards
- The advisory is dispatched fire-and-forget
"""

from __future__ import annotations

import collections
import logging
import threading
import time
from typing import Callable, Deque, List, Optional

from zenith.config import Settings
from zenith.engine import EngineState, MetricEngine
from zenith.errors import SensorUnavailable, SessionStateError
from zenith.fluency import match_fillers
from zenith.heatmap import live_heatmap
from zenith.intervention import AdvisoryDispatcher, InterventionPolicy
from zenith.models import LiveStatus, MetricSnapshot, RawSample, SessionData
from zenith.session import SessionAggregator
from zenith.smoothing import clamp, smooth
from zenith.tracking import LandmarkTracker

logger = logging.getLogger(__name__)

LOG_LINES = 5


class LiveSession:
    """Runs one metrics session at a time on a background tick thread."""

    def __init__(self, settings: Optional[Settings] = None,
                 advisory_sink: Optional[Callable[[str], None]] = None,
                 rng=None, clock: Callable[[], float] = time.monotonic):
        self.s = settings or Settings()
        self.engine = MetricEngine(self.s, rng=rng)
        self.aggregator = SessionAggregator(strict=False, clock=clock)
        self.tracker = LandmarkTracker(self.s)
        self.policy = InterventionPolicy(
            threshold=self.s.INTERVENTION_THRESHOLD,
            required=self.s.INTERVENTION_TICKS,
            message=self.s.INTERVENTION_MESSAGE,
            dispatcher=AdvisoryDispatcher(self._advisory(advisory_sink)),
        )

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._started_wall: Optional[float] = None

        self._state = EngineState.initial(self.s)
        self._bpm = self.s.INITIAL_BPM
        self._last_snapshot: Optional[MetricSnapshot] = None
        self._last_session: Optional[SessionData] = None
        self._sensor_error: Optional[str] = None
        self._logs: Deque[str] = collections.deque(maxlen=LOG_LINES)

        # last known sensor values, one writer each
        self._gaze_lock = False
        self._jitter = 0.0
        self._volume = 0.0

    # ---- helpers ----
    def _log(self, msg: str) -> None:
        self._logs.appendleft(f"[AI_LOG]: {msg}")

    def _advisory(self, sink: Optional[Callable[[str], None]]) -> Callable[[str], None]:
        def deliver(message: str) -> None:
            self._log(f"Assistant: {message}")
            if sink is not None:
                sink(message)
            else:
                logger.info(f"[live] advisory: {message}")
        return deliver

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_session(self) -> Optional[SessionData]:
        return self._last_session

    # ---- sensor state ----
    def report_sensor_error(self, message: str) -> None:
        self._sensor_error = message or "HARDWARE_FAILURE"
        logger.warning(f"[live] sensor unavailable: {self._sensor_error}")

    def clear_sensor_error(self) -> None:
        self._sensor_error = None
        self._log("Sensors synchronized. System nominal.")

    def on_landmarks(self, landmarks) -> None:
        self._gaze_lock, self._jitter = self.tracker.update(landmarks)

    def on_face_lost(self) -> None:
        self.tracker.lost()
        self._gaze_lock = False

    def on_gaze(self, gaze_lock: bool, jitter: float, smoothed: bool = True) -> None:
        """Push gaze/jitter computed elsewhere; raw jitter is smoothed here."""
        jitter = max(0.0, float(jitter))
        if not smoothed:
            jitter = smooth(self._jitter, jitter, self.s.JITTER_ALPHA)
        self._gaze_lock = bool(gaze_lock)
        self._jitter = jitter

    def sample(self) -> RawSample:
        """Snapshot of the last known sensor values."""
        return RawSample(gaze_lock=self._gaze_lock, jitter=self._jitter, volume=self._volume)

    def on_volume(self, volume: float) -> None:
        self._volume = clamp(float(volume), 0.0, 100.0)

    def on_transcript(self, text: str, final: bool = True) -> List[str]:
        """Count fillers in a speech fragment; returns the words matched."""
        if not self._running:
            return []
        words = match_fillers(text, self.s.FILLER_WORDS)
        for w in words:
            self.aggregator.record_filler(w)
            self._log(f"Filler word detected: {w}")
        if final:
            self.aggregator.record_transcript(text)
        return words

    # ---- lifecycle ----
    def start(self) -> None:
        with self._lock:
            if self._sensor_error:
                raise SensorUnavailable(self._sensor_error)
            if self._running:
                raise SessionStateError("session already running")
            self._state = EngineState.initial(self.s)
            self._bpm = self.s.INITIAL_BPM
            self._last_snapshot = None
            self.policy.reset()
            self.aggregator.start()
            self._started_wall = time.time()
            self._stop_event = threading.Event()
            self._running = True
            self._thread = threading.Thread(target=self._tick_loop, args=(self._stop_event,), daemon=True)
            self._thread.start()
        self._log("Analysis initiated.")
        logger.info("[live] session started")

    def _tick_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.s.TICK_INTERVAL):
            try:
                self.tick()
            except Exception:
                logger.exception("[live] tick failed")

    def tick(self) -> Optional[MetricSnapshot]:
        """Run one evaluation cycle; returns None when no session is active."""
        with self._lock:
            if not self._running:
                return None
            raw = self.sample()
            snapshot, self._state = self.engine.step(
                self._state, raw.gaze_lock, raw.jitter, self.aggregator.elapsed_ms()
            )
            self.policy.observe(snapshot.emotion_stability)
            self.aggregator.record_tick(snapshot)
            self._bpm = snapshot.bpm
            self._last_snapshot = snapshot
            return snapshot

    def stop(self) -> Optional[SessionData]:
        """End the session; safe to call when not running (returns the last result)."""
        with self._lock:
            if not self._running:
                return self._last_session
            self._running = False
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._last_session = self.aggregator.stop()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(1.0, self.s.TICK_INTERVAL * 2))
        logger.info(
            f"[live] session stopped duration={self._last_session.duration:.1f}s "
            f"ticks={len(self._last_session.metrics_history)}"
        )
        return self._last_session

    def reset(self) -> None:
        """Drop the last report; a running session is stopped first."""
        self.stop()
        with self._lock:
            self._last_session = None
            self._last_snapshot = None
            self.aggregator.reset()

    def status(self) -> LiveStatus:
        with self._lock:
            history = self.aggregator.history if self._running else ()
            return LiveStatus(
                running=self._running,
                started_at=self._started_wall if self._running else None,
                sensor_error=self._sensor_error,
                confidence=self._state.confidence,
                emotion_stability=self._state.stability,
                bpm=self._bpm,
                gaze_lock=self._gaze_lock,
                volume=self._volume,
                tracking_accuracy=self.tracker.tracking_accuracy,
                filler_words=self.aggregator.filler_words if self._running else {},
                last_snapshot=self._last_snapshot,
                heatmap=live_heatmap(history),
                logs=list(self._logs),
            )
