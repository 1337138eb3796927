"""
Intervention on sustained instability.

A dip counts consecutive ticks with stability under the threshold. Once the
count reaches the required number the advisory fires, then stays latched until
stability recovers; a recovery re-arms the policy for the next dip.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

ARMED = "ARMED"
BELOW_THRESHOLD = "BELOW_THRESHOLD"
FIRED = "FIRED"


@dataclass(frozen=True)
class InterventionState:
    low_ticks: int = 0
    fired: bool = False

    @property
    def label(self) -> str:
        if self.fired:
            return FIRED
        if self.low_ticks > 0:
            return BELOW_THRESHOLD
        return ARMED


def advance(state: InterventionState, stability: float,
            threshold: float = 35.0, required: int = 3) -> Tuple[InterventionState, bool]:
    """
    Step the policy by one tick.

    Returns:
        (next_state, fired) where fired is True on the single tick that triggers.
    """
    if stability >= threshold:
        return InterventionState(), False
    low = state.low_ticks + 1
    if low >= required and not state.fired:
        return InterventionState(low_ticks=low, fired=True), True
    return InterventionState(low_ticks=low, fired=state.fired), False


def log_sink(message: str) -> None:
    logger.info(f"[advisory] {message}")


class AdvisoryDispatcher:
    """Fire-and-forget delivery of advisory messages on a daemon thread."""

    def __init__(self, sink: Optional[Callable[[str], None]] = None):
        self.sink = sink or log_sink

    def _deliver(self, message: str) -> None:
        try:
            self.sink(message)
        except Exception:
            logger.exception("[advisory] delivery failed")

    def dispatch(self, message: str) -> threading.Thread:
        t = threading.Thread(target=self._deliver, args=(message,), daemon=True)
        t.start()
        return t


class InterventionPolicy:
    """Holds the intervention state for a session and dispatches the advisory."""

    def __init__(self, threshold: float = 35.0, required: int = 3,
                 message: str = "Take a deep breath. Recalibrating focus.",
                 dispatcher: Optional[AdvisoryDispatcher] = None):
        self.threshold = float(threshold)
        self.required = int(required)
        self.message = message
        self.dispatcher = dispatcher or AdvisoryDispatcher()
        self.state = InterventionState()

    def reset(self) -> None:
        self.state = InterventionState()

    def observe(self, stability: float) -> bool:
        self.state, fired = advance(self.state, stability, self.threshold, self.required)
        if fired:
            logger.info(f"[intervention] stability below {self.threshold} for {self.state.low_ticks} ticks")
            self.dispatcher.dispatch(self.message)
        return fired
