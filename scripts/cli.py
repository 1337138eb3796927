"""
CLI to turn a recorded session (or a simulated one) into a report JSON + PNG.
"""
from __future__ import annotations
import argparse, json, os
import numpy as np
from zenith.config import Settings
from zenith.engine import EngineState, MetricEngine
from zenith.intervention import InterventionPolicy
from zenith.models import SessionData
from zenith.report import build_report
from zenith.session import SessionAggregator
from zenith.visual import export_report_image


def load_session(path: str) -> SessionData:
    with open(path, "r", encoding="utf-8") as f:
        return SessionData.model_validate(json.load(f))


def simulate_session(seconds: int, settings: Settings, seed: int | None = None) -> SessionData:
    """Drive engine + aggregator with synthetic gaze/jitter, one tick per simulated second."""
    rng = np.random.default_rng(seed)
    now = {"t": 0.0}
    agg = SessionAggregator(clock=lambda: now["t"])
    engine = MetricEngine(settings, rng=rng)
    policy = InterventionPolicy(settings.INTERVENTION_THRESHOLD, settings.INTERVENTION_TICKS,
                                settings.INTERVENTION_MESSAGE)
    state = EngineState.initial(settings)
    agg.start()
    for _ in range(max(0, seconds)):
        now["t"] += settings.TICK_INTERVAL
        gaze = bool(rng.random() < 0.7)
        jitter = float(abs(rng.normal(0.004, 0.004)))
        snap, state = engine.step(state, gaze, jitter, agg.elapsed_ms())
        policy.observe(snap.emotion_stability)
        agg.record_tick(snap)
    return agg.stop()


def main():
    p = argparse.ArgumentParser()
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--session", help="Path to a SessionData JSON file")
    src.add_argument("--simulate", type=int, metavar="SECONDS", help="Simulate a session of N seconds")
    p.add_argument("--seed", type=int, default=None, help="Random seed for --simulate")
    p.add_argument("--out", default="output/report.json", help="Path to output JSON")
    p.add_argument("--image", default=None, help="Optional path to a PNG report card")
    p.add_argument("--no-advice", action="store_true", help="Skip the external advice call")
    args = p.parse_args()

    settings = Settings()
    data = load_session(args.session) if args.session else simulate_session(args.simulate, settings, args.seed)
    report = build_report(data, settings, advice="" if args.no_advice else None)
    result = report.model_dump(mode="json")
    print(json.dumps({k: v for k, v in result.items() if k != "session"}, indent=2, ensure_ascii=False))

    # Also write to file
    out_dir = os.path.dirname(args.out)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(result, f, indent=2, ensure_ascii=False)
    print(f"Report written to {args.out}")
    if args.image:
        print(f"Report card written to {export_report_image(report, args.image)}")

if __name__ == "__main__":
    main()
