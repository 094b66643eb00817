from __future__ import annotations

import argparse
import statistics
import time
from dataclasses import dataclass
from typing import List

import numpy as np

from detect_kit import PRESETS, LabelTable, decode, select


@dataclass(frozen=True)
class TimingSummary:
    n: int
    mean_ms: float
    p50_ms: float
    p90_ms: float
    p95_ms: float


def _percentile(sorted_values: List[float], q: float) -> float:
    if not sorted_values:
        raise ValueError("No values provided.")
    if q < 0.0 or q > 100.0:
        raise ValueError("q must be in [0, 100].")
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    # Linear interpolation between closest ranks.
    pos = (q / 100.0) * (len(sorted_values) - 1)
    lo = int(np.floor(pos))
    hi = int(np.ceil(pos))
    if lo == hi:
        return float(sorted_values[lo])
    t = pos - lo
    return float(sorted_values[lo] * (1.0 - t) + sorted_values[hi] * t)


def _summarize_ms(values_s: List[float]) -> TimingSummary:
    ms_sorted = sorted(v * 1000.0 for v in values_s)
    return TimingSummary(
        n=len(ms_sorted),
        mean_ms=float(statistics.fmean(ms_sorted)) if ms_sorted else 0.0,
        p50_ms=_percentile(ms_sorted, 50.0) if ms_sorted else 0.0,
        p90_ms=_percentile(ms_sorted, 90.0) if ms_sorted else 0.0,
        p95_ms=_percentile(ms_sorted, 95.0) if ms_sorted else 0.0,
    )


def _format_summary(label: str, s: TimingSummary) -> str:
    return (
        f"{label}: n={s.n} mean={s.mean_ms:.3f}ms p50={s.p50_ms:.3f}ms "
        f"p90={s.p90_ms:.3f}ms p95={s.p95_ms:.3f}ms"
    )


def _synthetic_buffer(rng: np.random.Generator, size: int, hot_fraction: float) -> np.ndarray:
    buf = rng.random(size, dtype=np.float32) * 0.4
    # Lift a fraction of values so some records clear typical thresholds.
    hot = rng.random(size) < hot_fraction
    buf[hot] += 0.55
    return buf


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Model-free benchmark of decode + select latency on synthetic output buffers."
    )
    parser.add_argument("--layout", default="yolo_tiny_416_two_class", choices=sorted(PRESETS), help="Layout preset.")
    parser.add_argument("--labels", type=int, default=2, help="Number of synthetic labels.")
    parser.add_argument("--conf", type=float, default=0.5, help="Confidence threshold.")
    parser.add_argument("--single-best", action="store_true", help="Reduce to the single most confident box.")
    parser.add_argument("--hot-fraction", type=float, default=0.01, help="Fraction of values pushed above 0.55.")
    parser.add_argument("--repeats", type=int, default=200, help="Timed iterations.")
    parser.add_argument("--warmup", type=int, default=10, help="Untimed warmup iterations.")
    parser.add_argument("--seed", type=int, default=0, help="RNG seed.")
    args = parser.parse_args()

    if args.repeats < 1:
        raise ValueError("--repeats must be >= 1")
    if args.warmup < 0:
        raise ValueError("--warmup must be >= 0")

    layout = PRESETS[args.layout]
    labels = LabelTable(f"class_{i}" for i in range(int(args.labels)))
    rng = np.random.default_rng(int(args.seed))

    t_decode: List[float] = []
    t_select: List[float] = []
    kept: List[int] = []
    for i in range(int(args.warmup) + int(args.repeats)):
        buf = _synthetic_buffer(rng, layout.required_length, float(args.hot_fraction))

        t0 = time.perf_counter()
        candidates = list(decode(buf, layout, labels))
        t1 = time.perf_counter()
        result = select(candidates, float(args.conf), bool(args.single_best))
        t2 = time.perf_counter()

        if i < int(args.warmup):
            continue
        t_decode.append(t1 - t0)
        t_select.append(t2 - t1)
        kept.append(len(result))

    print(_format_summary("decode", _summarize_ms(t_decode)))
    print(_format_summary("select", _summarize_ms(t_select)))
    print(
        f"layout={args.layout} records={layout.record_count} stride={layout.record_stride} "
        f"mean_kept={statistics.fmean(kept):.1f}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
