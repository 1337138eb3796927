"""
Local microphone collaborator.

Captures mic audio with sounddevice and feeds a LiveSession:
- volume (0..100) from the RMS of every captured block
- every LIVE_ASR_INTERVAL seconds, a Whisper transcript of the audio captured since the
  previous one (up to max(LIVE_WINDOW_SECONDS, LIVE_ASR_INTERVAL) seconds)
"""
from __future__ import annotations

import collections
import logging
import math
import os
import tempfile
import threading
import time
from typing import Callable, Deque, Optional

import librosa
import numpy as np
import soundfile as sf

from zenith.config import Settings
from zenith.errors import SensorUnavailable

logger = logging.getLogger(__name__)

FLOOR_DB = -60.0
BLOCK_SECONDS = 0.05


def block_volume(block: np.ndarray) -> float:
    """Map the RMS level of an audio block onto 0..100 (-60 dBFS -> 0, 0 dBFS -> 100)."""
    y = np.asarray(block, dtype=np.float32).reshape(-1)
    if y.size == 0:
        return 0.0
    rms = librosa.feature.rms(y=y, frame_length=min(2048, y.size), hop_length=max(1, min(512, y.size)),
                              center=False)[0]
    db = float(np.max(librosa.amplitude_to_db(rms, ref=1.0, top_db=None)))
    return float(np.clip((db - FLOOR_DB) / -FLOOR_DB * 100.0, 0.0, 100.0))


def ring_blocks(settings: Settings) -> int:
    """Blocks needed to hold everything captured between two transcriptions."""
    span = max(settings.LIVE_WINDOW_SECONDS, settings.LIVE_ASR_INTERVAL)
    return max(1, int(math.ceil(round(span / BLOCK_SECONDS, 6))))


class MicrophoneSource:
    """Background microphone capture that pushes volume and transcript fragments."""

    def __init__(self, settings: Settings,
                 on_volume: Callable[[float], None],
                 on_transcript: Callable[[str], object],
                 transcribe: Optional[Callable[[str, Settings], str]] = None):
        self.s = settings
        self.on_volume = on_volume
        self.on_transcript = on_transcript
        self._transcribe = transcribe
        self._run = False
        self._thread: Optional[threading.Thread] = None
        self._ring: Deque[np.ndarray] = collections.deque(maxlen=ring_blocks(settings))
        self._lock = threading.Lock()
        self._stream = None

    # ---- lifecycle ----
    def start(self) -> None:
        if self._run:
            return
        # lazy import: PortAudio is only needed when a mic is actually used
        try:
            import sounddevice as sd
            sr = self.s.AUDIO_SAMPLE_RATE
            self._stream = sd.InputStream(callback=self._callback, channels=1, samplerate=sr,
                                          blocksize=int(sr * BLOCK_SECONDS))
            self._stream.start()
        except Exception as e:
            logger.exception("[audio] microphone unavailable")
            raise SensorUnavailable(f"Microphone unavailable: {e}") from e
        self._run = True
        self._thread = threading.Thread(target=self._asr_loop, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._run = False
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None

    # ---- capture ----
    def _callback(self, indata, frames, time_info, status):
        block = indata.copy().astype(np.float32).reshape(-1)
        with self._lock:
            self._ring.append(block)
        self.on_volume(block_volume(block))

    def _window(self) -> Optional[np.ndarray]:
        with self._lock:
            if not self._ring:
                return None
            audio = np.concatenate(list(self._ring), axis=0)
        max_len = int(self.s.AUDIO_SAMPLE_RATE * max(self.s.LIVE_WINDOW_SECONDS, self.s.LIVE_ASR_INTERVAL))
        return audio[-max_len:] if audio.shape[0] > max_len else audio

    def transcribe_window(self) -> str:
        """Transcribe the current audio window and forward the text; returns it."""
        audio = self._window()
        if audio is None:
            return ""
        transcribe = self._transcribe
        if transcribe is None:
            from zenith.asr import transcribe_audio  # lazy import to avoid loading torch at module import time
            transcribe = transcribe_audio

        # Whisper prefers a file path; write temp wav
        fd, tmp_path = tempfile.mkstemp(suffix=".wav")
        os.close(fd)
        try:
            sf.write(tmp_path, audio, self.s.AUDIO_SAMPLE_RATE)
            text = transcribe(tmp_path, self.s)
        finally:
            try:
                os.remove(tmp_path)
            except OSError:
                logger.warning(f"[audio] failed to cleanup tmp file: {tmp_path}")
        with self._lock:
            self._ring.clear()
        if text:
            self.on_transcript(text)
        return text

    def _asr_loop(self) -> None:
        next_t = time.time() + self.s.LIVE_ASR_INTERVAL
        while self._run:
            if time.time() >= next_t:
                try:
                    self.transcribe_window()
                except Exception:
                    logger.exception("[audio] transcription failed")
                next_t = time.time() + self.s.LIVE_ASR_INTERVAL
            time.sleep(0.05)
