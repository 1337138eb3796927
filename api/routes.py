"""
REST endpoints for live sessions and reports.
"""
from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
import logging

from zenith.audio import MicrophoneSource
from zenith.config import Settings
from zenith.errors import SensorUnavailable, SessionStateError
from zenith.live import LiveSession
from zenith.models import (
    GazeSample,
    LandmarkFrame,
    LiveStatus,
    SensorErrorReport,
    SessionData,
    SessionReport,
    TranscriptFragment,
    VolumeSample,
)
from zenith.report import build_report
from zenith.visual import encode_report_png


router = APIRouter()
settings = Settings()
logger = logging.getLogger(__name__)

live = LiveSession(settings)
state = {"report": None, "microphone": None}


def _stop_microphone() -> None:
    mic = state["microphone"]
    if mic is not None:
        mic.stop()
        state["microphone"] = None


@router.post("/live/start")
async def live_start(microphone: bool = False):
    """
    Start a metrics session.

    Args:
        microphone: Also capture the local microphone for volume and filler words.

    Returns:
        dict: {"status": "started"}; 409 when a session is already running or a sensor is unavailable.
    """
    if live.running:
        raise HTTPException(status_code=409, detail="Session already running")
    if microphone:
        mic = MicrophoneSource(settings, on_volume=live.on_volume, on_transcript=live.on_transcript)
        try:
            mic.start()
        except SensorUnavailable as e:
            live.report_sensor_error(str(e))
            raise HTTPException(status_code=409, detail=str(e))
        state["microphone"] = mic
    try:
        live.start()
    except SensorUnavailable as e:
        logger.warning(f"[api] start refused: {e}")
        _stop_microphone()
        raise HTTPException(status_code=409, detail=f"Sensor unavailable: {e}")
    except SessionStateError as e:
        if microphone:
            _stop_microphone()
        raise HTTPException(status_code=409, detail=str(e))
    state["report"] = None
    return {"status": "started"}


@router.post("/live/stop", response_model=SessionData)
async def live_stop():
    """Stop the running session and return its summary (or the last one)."""
    _stop_microphone()
    data = live.stop()
    if data is None:
        raise HTTPException(status_code=409, detail="No session has been recorded")
    return data


@router.get("/live/status", response_model=LiveStatus)
async def live_status():
    return live.status()


@router.post("/live/landmarks")
async def live_landmarks(frame: LandmarkFrame):
    try:
        live.on_landmarks(frame.landmarks)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"gaze_lock": live.tracker.gaze_lock, "jitter": live.tracker.jitter}


@router.post("/live/face-lost")
async def live_face_lost():
    live.on_face_lost()
    return {"gaze_lock": False}


@router.post("/live/gaze")
async def live_gaze(sample: GazeSample):
    live.on_gaze(sample.gaze_lock, sample.jitter, smoothed=sample.smoothed)
    return {"status": "ok"}


@router.post("/live/volume")
async def live_volume(sample: VolumeSample):
    live.on_volume(sample.volume)
    return {"status": "ok"}


@router.post("/live/transcript")
async def live_transcript(fragment: TranscriptFragment):
    words = live.on_transcript(fragment.text, final=fragment.final)
    return {"fillers": words}


@router.post("/live/sensor-error")
async def live_sensor_error(report: SensorErrorReport):
    live.report_sensor_error(report.message)
    return {"sensor_error": report.message}


@router.delete("/live/sensor-error")
async def live_sensor_clear():
    live.clear_sensor_error()
    return {"sensor_error": None}


def _current_report() -> SessionReport:
    if state["report"] is None:
        data = live.last_session
        if data is None:
            raise HTTPException(status_code=404, detail="No finished session")
        logger.debug("[api] building report for last session")
        state["report"] = build_report(data, settings)
    return state["report"]


@router.get("/report", response_model=SessionReport)
async def report():
    return _current_report()


@router.get("/report/image")
async def report_image():
    try:
        png = encode_report_png(_current_report())
    except RuntimeError as e:
        logger.exception("[api] report export failed")
        raise HTTPException(status_code=500, detail=str(e))
    return Response(content=png, media_type="image/png")


@router.post("/report/reset")
async def report_reset():
    _stop_microphone()
    live.reset()
    state["report"] = None
    return {"status": "reset"}
