"""
Final session report: summary, heat-map, rank and advice in one view.
"""
from __future__ import annotations
from typing import Optional

from zenith.advice import generate_advice
from zenith.config import Settings
from zenith.heatmap import reduce_heatmap
from zenith.models import SessionData, SessionReport


def session_rank(session: SessionData) -> str:
    if (session.avg_confidence > 80 and session.eye_contact_percentage > 85
            and session.avg_emotion_stability > 80):
        return "ZENITH MASTER"
    if session.avg_confidence > 50:
        return "PROFESSIONAL"
    return "INITIATE"


def session_integrity(session: SessionData) -> str:
    return "STABLE_AXIS" if session.avg_emotion_stability > 70 else "DIVERGENT"


def build_report(session: SessionData, settings: Optional[Settings] = None,
                 advice: Optional[str] = None) -> SessionReport:
    """
    Assemble the report for a stopped session.

    If advice is None the external advice generator is called (with fallback).
    """
    settings = settings or Settings()
    if advice is None:
        advice = generate_advice(session, settings)
    return SessionReport(
        session=session,
        heatmap=reduce_heatmap(session.metrics_history, max_buckets=settings.HEATMAP_MAX_BUCKETS),
        rank=session_rank(session),
        integrity=session_integrity(session),
        total_fillers=sum(session.filler_words.values()),
        top_fillers=list(session.filler_words.keys())[:3],
        advice=advice,
    )
