"""
Configuration for the session metrics engine.
"""
from pydantic import BaseModel
from typing import List
import os

DEFAULT_FILLER_WORDS = "umm,ahh,like,oh,basically,actually"


class Settings(BaseModel):
    """
    Runtime settings with environment-variable overrides.
    """
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Tick loop
    TICK_INTERVAL: float = float(os.getenv("TICK_INTERVAL", "1.0"))

    # Engine seeds (the values shown before the first tick)
    INITIAL_CONFIDENCE: float = float(os.getenv("INITIAL_CONFIDENCE", "75"))
    INITIAL_STABILITY: float = float(os.getenv("INITIAL_STABILITY", "85"))
    INITIAL_BPM: int = int(os.getenv("INITIAL_BPM", "72"))

    # Smoothing factors
    JITTER_ALPHA: float = float(os.getenv("JITTER_ALPHA", "0.1"))
    STABILITY_ALPHA: float = float(os.getenv("STABILITY_ALPHA", "0.3"))
    TRACKING_ALPHA: float = float(os.getenv("TRACKING_ALPHA", "0.05"))

    # Stability modifier
    JITTER_SCALE: float = float(os.getenv("JITTER_SCALE", "5000"))
    GAZE_LOSS_PENALTY: float = float(os.getenv("GAZE_LOSS_PENALTY", "15"))

    # Confidence drift
    CONFIDENCE_GAIN: float = float(os.getenv("CONFIDENCE_GAIN", "2"))
    CONFIDENCE_DECAY: float = float(os.getenv("CONFIDENCE_DECAY", "3"))
    CONFIDENCE_MIN: float = float(os.getenv("CONFIDENCE_MIN", "10"))
    CONFIDENCE_MAX: float = float(os.getenv("CONFIDENCE_MAX", "100"))

    # Heart-rate proxy
    BPM_BASE: int = int(os.getenv("BPM_BASE", "72"))
    BPM_JITTER_MAX: int = int(os.getenv("BPM_JITTER_MAX", "7"))
    BPM_STRESS_BONUS: int = int(os.getenv("BPM_STRESS_BONUS", "15"))
    BPM_STRESS_BELOW: float = float(os.getenv("BPM_STRESS_BELOW", "50"))

    # Intervention
    INTERVENTION_THRESHOLD: float = float(os.getenv("INTERVENTION_THRESHOLD", "35"))
    INTERVENTION_TICKS: int = int(os.getenv("INTERVENTION_TICKS", "3"))
    INTERVENTION_MESSAGE: str = os.getenv(
        "INTERVENTION_MESSAGE", "Take a deep breath. Recalibrating focus."
    )

    # Gaze window around the lens, in normalized image coordinates
    GAZE_CENTER_X: float = float(os.getenv("GAZE_CENTER_X", "0.5"))
    GAZE_CENTER_Y: float = float(os.getenv("GAZE_CENTER_Y", "0.45"))
    GAZE_WINDOW: float = float(os.getenv("GAZE_WINDOW", "0.12"))

    # Report
    HEATMAP_MAX_BUCKETS: int = int(os.getenv("HEATMAP_MAX_BUCKETS", "60"))
    FILLER_WORDS: List[str] = [w for w in os.getenv("FILLER_WORDS", DEFAULT_FILLER_WORDS).split(",")]

    # Advice generation (Gemini)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    ADVICE_MODEL: str = os.getenv("ADVICE_MODEL", "gemini-2.5-flash")
    ADVICE_TIMEOUT: float = float(os.getenv("ADVICE_TIMEOUT", "20"))

    # Local microphone collaborator
    DEVICE: str = (os.getenv("DEVICE", "cpu") or "cpu")
    WHISPER_MODEL: str = os.getenv("WHISPER_MODEL", "base")
    AUDIO_SAMPLE_RATE: int = int(os.getenv("AUDIO_SAMPLE_RATE", "16000"))
    LIVE_WINDOW_SECONDS: float = float(os.getenv("LIVE_WINDOW_SECONDS", "8"))
    LIVE_ASR_INTERVAL: float = float(os.getenv("LIVE_ASR_INTERVAL", "5"))

    def __init__(self, **data):
        super().__init__(**data)
        # Normalize filler vocabulary: trim, lower-case, drop blanks and duplicates
        words: List[str] = []
        for w in self.FILLER_WORDS:
            w = (w or "").strip().lower()
            if w and w not in words:
                words.append(w)
        object.__setattr__(self, "FILLER_WORDS", words)
        # Normalize DEVICE: strip comments/extra words, lower-case, validate
        dev = ((self.DEVICE or "").split() or ["cpu"])[0].lower()
        if dev not in ("cpu", "cuda"):
            dev = "cpu"
        object.__setattr__(self, "DEVICE", dev)
        object.__setattr__(self, "ADVICE_MODEL", (self.ADVICE_MODEL or "").strip() or "gemini-2.5-flash")
