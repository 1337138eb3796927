"""
Speech-to-text for the live filler counter.

Whisper is loaded once, on first use, from whichever thread asks first.
Its decoder tends to tidy up disfluencies, so the filler vocabulary is
passed as the initial prompt to keep words like "umm" in the text.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional, Union

import numpy as np
import whisper

from zenith.config import Settings

logger = logging.getLogger(__name__)

_model = None
_model_lock = threading.Lock()


def _ensure_model(settings: Settings):
    global _model
    with _model_lock:
        if _model is None:
            logger.info(f"[asr] loading whisper '{settings.WHISPER_MODEL}' on {settings.DEVICE}")
            _model = whisper.load_model(settings.WHISPER_MODEL, device=settings.DEVICE)
    return _model


def filler_prompt(settings: Settings) -> Optional[str]:
    """'Umm, ahh, like...' style prompt built from the configured vocabulary."""
    if not settings.FILLER_WORDS:
        return None
    words = ", ".join(settings.FILLER_WORDS)
    return words[0].upper() + words[1:] + "..."


def transcribe_audio(audio: Union[str, np.ndarray], settings: Settings) -> str:
    """
    Transcribe one capture window.

    Args:
        audio: Path to an audio file, or mono float samples at 16 kHz.
        settings: Whisper model, device and filler vocabulary.

    Returns:
        str: Stripped transcript text, "" for an empty window.
    """
    if not isinstance(audio, str):
        audio = np.asarray(audio, dtype=np.float32).reshape(-1)
        if audio.size == 0:
            return ""
    model = _ensure_model(settings)
    result = model.transcribe(
        audio,
        fp16=settings.DEVICE == "cuda",
        initial_prompt=filler_prompt(settings),
        # each window is decoded on its own
        condition_on_previous_text=False,
    )
    return (result.get("text", "") or "").strip()
