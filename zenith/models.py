"""
Pydantic data models for the engine and the API.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional, Tuple

Emotion = Literal["STABLE", "NERVOUS", "STRESSED"]
HeatTag = Literal["ZENITH", "STABLE", "ALERT"]

DEFAULT_DOMINANT_EMOTION = "CONFIDENT"


class RawSample(BaseModel):
    """Last known sensor values read at a tick boundary."""
    gaze_lock: bool = False
    jitter: float = Field(default=0.0, ge=0.0)
    volume: float = Field(default=0.0, ge=0.0, le=100.0)


class MetricSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(ge=0)
    confidence: float = Field(ge=10.0, le=100.0)
    eye_contact: bool
    bpm: int = Field(ge=0)
    emotion_stability: float = Field(ge=0.0, le=100.0)
    emotion: Emotion


class SessionData(BaseModel):
    model_config = ConfigDict(frozen=True)

    duration: float = Field(ge=0.0)
    filler_words: Dict[str, int] = Field(default_factory=dict)
    avg_confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    eye_contact_percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    avg_bpm: float = Field(default=0.0, ge=0.0)
    avg_emotion_stability: float = Field(default=0.0, ge=0.0, le=100.0)
    metrics_history: Tuple[MetricSnapshot, ...] = ()
    dominant_emotion: str = DEFAULT_DOMINANT_EMOTION
    transcript: str = ""


class HeatmapSegment(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    stability: float
    tag: HeatTag
    start_ms: int
    end_ms: int


# report model


class SessionReport(BaseModel):
    session: SessionData
    heatmap: List[HeatmapSegment] = Field(default_factory=list)
    rank: Literal["ZENITH MASTER", "PROFESSIONAL", "INITIATE"]
    integrity: Literal["STABLE_AXIS", "DIVERGENT"]
    total_fillers: int
    top_fillers: List[str] = Field(default_factory=list)
    advice: str


# live model


class LiveStatus(BaseModel):
    running: bool
    started_at: float | None = None
    sensor_error: Optional[str] = None
    confidence: float
    emotion_stability: float
    bpm: int
    gaze_lock: bool
    volume: float
    tracking_accuracy: float
    filler_words: Dict[str, int] = Field(default_factory=dict)
    last_snapshot: MetricSnapshot | None = None
    heatmap: List[HeatmapSegment] = Field(default_factory=list)
    logs: List[str] = Field(default_factory=list)


# api input models


class LandmarkFrame(BaseModel):
    landmarks: List[List[float]]


class GazeSample(BaseModel):
    gaze_lock: bool
    jitter: float = Field(ge=0.0)
    smoothed: bool = True


class VolumeSample(BaseModel):
    volume: float


class TranscriptFragment(BaseModel):
    text: str
    final: bool = True


class SensorErrorReport(BaseModel):
    message: str = "HARDWARE_FAILURE"
