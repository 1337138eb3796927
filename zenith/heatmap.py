"""
Heat-map reduction of a snapshot history into bounded display buckets.
"""
from __future__ import annotations

import math
from typing import List, Optional, Sequence

import numpy as np

from zenith.models import HeatmapSegment, MetricSnapshot

MAX_BUCKETS = 60
ALERT_BELOW = 40.0
STABLE_BELOW = 70.0


def classify_stability(avg: float) -> str:
    if avg < ALERT_BELOW:
        return "ALERT"
    if avg < STABLE_BELOW:
        return "STABLE"
    return "ZENITH"


def reduce_heatmap(history: Sequence[MetricSnapshot], max_buckets: int = MAX_BUCKETS,
                   chunk_size: Optional[int] = None) -> List[HeatmapSegment]:
    """
    Partition the history into contiguous chunks and average stability per chunk.

    Args:
        history: Chronological snapshots.
        max_buckets: Upper bound on bucket count when chunk_size is derived; never above MAX_BUCKETS.
        chunk_size: Explicit chunk length; None derives ceil(n / min(max_buckets, n)).

    Returns:
        Buckets in chronological order. The last one may cover fewer snapshots.
    """
    n = len(history)
    if n == 0:
        return []
    if chunk_size is None:
        bucket_count = min(max(1, min(int(max_buckets), MAX_BUCKETS)), n)
        chunk_size = math.ceil(n / bucket_count)
    elif chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

    stability = np.fromiter((m.emotion_stability for m in history), dtype=float, count=n)
    out: List[HeatmapSegment] = []
    for i, start in enumerate(range(0, n, chunk_size)):
        end = min(start + chunk_size, n)
        avg = float(np.mean(stability[start:end]))
        out.append(HeatmapSegment(
            index=i,
            stability=avg,
            tag=classify_stability(avg),
            start_ms=history[start].timestamp,
            end_ms=history[end - 1].timestamp,
        ))
    return out


def live_heatmap(history: Sequence[MetricSnapshot]) -> List[HeatmapSegment]:
    """In-session form: one bucket per tick."""
    return reduce_heatmap(history, chunk_size=1)
