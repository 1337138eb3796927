"""Report card rendering & export helpers.

- render_report_card: draw the session summary, heat-map strip and advice on a BGR canvas
- encode_report_png / export_report_image: PNG bytes or file for the export sink

Rendering reads the report only; the session data is never modified.
"""
from __future__ import annotations
import os
import textwrap
import cv2
import numpy as np
from typing import Tuple

from zenith.models import SessionReport

# BGR
GREEN = (65, 255, 0)
BLUE = (246, 130, 59)
RED = (68, 68, 239)
YELLOW = (8, 179, 234)
WHITE = (235, 235, 235)
GREY = (110, 110, 110)
BACKGROUND = (10, 10, 10)

TAG_COLORS = {"ZENITH": GREEN, "STABLE": BLUE, "ALERT": RED}
RANK_COLORS = {"ZENITH MASTER": GREEN, "PROFESSIONAL": (250, 165, 96), "INITIATE": YELLOW}

FONT = cv2.FONT_HERSHEY_SIMPLEX


def _ascii(text: str) -> str:
    # Hershey fonts only cover ASCII
    return text.encode("ascii", errors="replace").decode("ascii")


def _put(img: np.ndarray, text: str, org: Tuple[int, int], scale: float,
         color: Tuple[int, int, int], thickness: int = 1) -> None:
    cv2.putText(img, _ascii(text), org, FONT, scale, color, thickness, cv2.LINE_AA)


def _gauge(img: np.ndarray, x: int, y: int, w: int, label: str, value: float,
           color: Tuple[int, int, int]) -> None:
    _put(img, label.upper(), (x, y), 0.4, GREY)
    _put(img, f"{value:.1f}%", (x, y + 32), 0.9, WHITE, 2)
    cv2.rectangle(img, (x, y + 44), (x + w, y + 48), (40, 40, 40), -1)
    fill = int(w * max(0.0, min(100.0, value)) / 100.0)
    if fill > 0:
        cv2.rectangle(img, (x, y + 44), (x + fill, y + 48), color, -1)


def render_report_card(report: SessionReport, width: int = 960, height: int = 600) -> np.ndarray:
    """Draw the report on a new BGR image and return it."""
    img = np.full((height, width, 3), BACKGROUND, dtype=np.uint8)
    s = report.session
    pad = 40

    cv2.rectangle(img, (8, 8), (width - 9, height - 9), (20, 90, 30), 1)
    _put(img, "NEURAL PERFORMANCE SUMMARY", (pad, 50), 0.45, GREY)
    _put(img, report.rank, (pad, 100), 1.5, RANK_COLORS.get(report.rank, WHITE), 3)
    _put(img, "SESSION INTEGRITY", (width - 260, 50), 0.4, GREY)
    _put(img, report.integrity, (width - 260, 90), 0.8, WHITE, 2)

    # metric gauges
    col_w = (width - 2 * pad) // 4
    y = 150
    _gauge(img, pad, y, col_w - 30, "Iris Focus", s.eye_contact_percentage, GREEN)
    _gauge(img, pad + col_w, y, col_w - 30, "Neural Stability", s.avg_emotion_stability, BLUE)
    _gauge(img, pad + 2 * col_w, y, col_w - 30, "Projected Conf.", s.avg_confidence, GREEN)
    x = pad + 3 * col_w
    _put(img, "VOCAL FILLERS", (x, y), 0.4, GREY)
    _put(img, str(report.total_fillers), (x, y + 32), 0.9, WHITE, 2)
    _put(img, (" / ".join(report.top_fillers) or "CLEAN_SIGNAL").upper(), (x, y + 50), 0.35, GREY)

    # heat-map strip
    y = 250
    _put(img, "BIOLOGICAL FLUX TRACKING (SESSION TIMELINE)", (pad, y), 0.45, WHITE)
    strip_top, strip_bottom = y + 15, y + 70
    strip_w = width - 2 * pad
    cv2.rectangle(img, (pad, strip_top), (pad + strip_w, strip_bottom), (0, 0, 0), -1)
    n = len(report.heatmap)
    if n:
        seg_w = strip_w / float(n)
        for seg in report.heatmap:
            x0 = pad + int(seg.index * seg_w) + 1
            x1 = pad + int((seg.index + 1) * seg_w) - 1
            cv2.rectangle(img, (x0, strip_top + 4), (max(x0, x1), strip_bottom - 4),
                          TAG_COLORS.get(seg.tag, GREY), -1)
    _put(img, "START: 0.0s", (pad, strip_bottom + 18), 0.35, GREY)
    _put(img, f"DURATION: {s.duration:.1f}s", (pad + strip_w - 130, strip_bottom + 18), 0.35, GREY)

    # advice
    y = strip_bottom + 60
    _put(img, "NEURAL CORE SYNTHESIS ADVICE", (pad, y), 0.45, GREEN)
    cv2.line(img, (pad - 12, y + 10), (pad - 12, height - 40), GREEN, 3)
    for i, line in enumerate(textwrap.wrap(f'"{report.advice}"', width=95)[:7]):
        _put(img, line, (pad, y + 32 + i * 22), 0.5, WHITE)

    return img


def encode_report_png(report: SessionReport) -> bytes:
    ok, buf = cv2.imencode(".png", render_report_card(report))
    if not ok:
        raise RuntimeError("PNG encoding failed")
    return buf.tobytes()


def export_report_image(report: SessionReport, output_path: str) -> str:
    """
    Write the rendered report card to output_path.

    Returns:
        str: Output image path.

    Raises:
        RuntimeError: OpenCV failed to write the file.
    """
    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    if not cv2.imwrite(output_path, render_report_card(report)):
        raise RuntimeError(f"Could not write report image: {output_path}")
    return output_path
