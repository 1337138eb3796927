"""
Session critique via Gemini, with local fallbacks.

google.generativeai is imported lazily so tests can monkeypatch
sys.modules['google.generativeai'] and so the engine works without it.
"""
from __future__ import annotations

import json
import logging
from typing import Optional

from zenith.config import Settings
from zenith.errors import AdviceGenerationFailure
from zenith.models import SessionData

logger = logging.getLogger(__name__)

EMPTY_ADVICE = "Exceptional performance. Maintain your current pace."
OFFLINE_ADVICE = "Analysis system offline. Your metrics speak for themselves."


def build_prompt(session: SessionData) -> str:
    return (
        "Analyze this public speaking session and provide a brief professional advice:\n"
        f"- Eye Contact: {session.eye_contact_percentage:.1f}%\n"
        f"- Avg Confidence: {session.avg_confidence:.1f}%\n"
        f"- Emotion Stability: {session.avg_emotion_stability:.1f}%\n"
        f"- Filler Words: {json.dumps(session.filler_words)}\n"
        f"- Avg BPM: {session.avg_bpm:.0f}\n\n"
        "Provide a 3-sentence professional critique focusing on confidence and emotional presence. "
        "Include one specific recommendation based on the stability score."
    )


def _load_model(settings: Settings):
    if not settings.GEMINI_API_KEY:
        raise AdviceGenerationFailure("GEMINI_API_KEY is not set")
    try:
        import google.generativeai as genai
    except Exception as e:
        raise AdviceGenerationFailure("google-generativeai import failed") from e
    try:
        genai.configure(api_key=settings.GEMINI_API_KEY)
        return genai, genai.GenerativeModel(settings.ADVICE_MODEL)
    except Exception as e:
        raise AdviceGenerationFailure(f"could not create model {settings.ADVICE_MODEL}: {e}") from e


def request_advice(session: SessionData, settings: Settings, model=None) -> str:
    """
    Ask the model for a critique.

    Raises:
        AdviceGenerationFailure: on any failure of the external call.
    """
    genai = None
    if model is None:
        genai, model = _load_model(settings)
    kwargs = {"request_options": {"timeout": settings.ADVICE_TIMEOUT}}
    if genai is not None:
        kwargs["generation_config"] = genai.GenerationConfig(temperature=0.7, top_p=1, top_k=1)
    try:
        response = model.generate_content(build_prompt(session), **kwargs)
        text = getattr(response, "text", "") or ""
    except Exception as e:
        raise AdviceGenerationFailure(f"advice request failed: {e}") from e
    return text.strip()


def generate_advice(session: SessionData, settings: Optional[Settings] = None, model=None) -> str:
    """Critique text for the report; never raises."""
    settings = settings or Settings()
    try:
        text = request_advice(session, settings, model=model)
    except AdviceGenerationFailure:
        logger.warning("[advice] generation failed; using offline fallback", exc_info=True)
        return OFFLINE_ADVICE
    return text or EMPTY_ADVICE
