"""
Exponential smoothing helpers.

Everything here is stateless: callers own the previous value and thread it
into the next call, so smoothing can be tested without a running capture loop.
"""
from __future__ import annotations


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def smooth(previous: float, sample: float, alpha: float) -> float:
    """
    Exponential moving average step.

    Args:
        previous: Value carried over from the last step.
        sample: New raw measurement.
        alpha: Weight of the new sample, in (0, 1].

    Returns:
        previous * (1 - alpha) + sample * alpha
    """
    if not (0.0 < alpha <= 1.0):
        raise ValueError(f"alpha must be in (0, 1], got {alpha}")
    return previous * (1.0 - alpha) + sample * alpha
