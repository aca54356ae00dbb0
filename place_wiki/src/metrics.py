"""
Lightweight process-local metrics: counters and latency samples.

Design:
- Counters: a dict of name -> int
- Latency samples: newest first, trimmed to the last `max_samples`
- get_metrics() aggregates counters and computes count/avg/p50 per latency
- MetricsTracer turns pipeline checkpoints into counters
"""

import statistics
import threading
from typing import Any, Dict

from . import tracing

_lock = threading.Lock()
_MEM_COUNTERS: Dict[str, int] = {}
_MEM_LATS: Dict[str, list] = {}


def increment(name: str, amount: int = 1) -> None:
    """Increment a named counter by amount"""
    with _lock:
        _MEM_COUNTERS[name] = _MEM_COUNTERS.get(name, 0) + amount


def observe_latency(name: str, ms: float, max_samples: int = 1000) -> None:
    """Record a latency sample (milliseconds) for a named metric"""
    with _lock:
        samples = _MEM_LATS.setdefault(name, [])
        samples.insert(0, ms)
        if len(samples) > max_samples:
            del samples[max_samples:]


def get_metrics() -> Dict[str, Any]:
    """Return a JSON-serializable dict of counters and latency stats"""
    with _lock:
        out = {"counters": dict(_MEM_COUNTERS), "latencies": {}}
        for name, vals in _MEM_LATS.items():
            if not vals:
                continue
            out['latencies'][name] = {
                'count': len(vals),
                'avg_ms': sum(vals) / len(vals),
                'p50_ms': float(statistics.median(vals)),
            }
    return out


def reset() -> None:
    with _lock:
        _MEM_COUNTERS.clear()
        _MEM_LATS.clear()


class MetricsTracer:
    """Counts pipeline checkpoints: tried/accepted/rejected candidates,
    discarded POIs by reason, and pool sizes."""

    def __call__(self, event: str, **fields: Any) -> None:
        increment(f"trace.{event}")
        if event == tracing.CANDIDATE_REJECTED and fields.get('reason'):
            increment(f"primary.rejected.{fields['reason']}")
        elif event == tracing.POI_DISCARDED and fields.get('reason'):
            increment(f"pool.discarded.{fields['reason']}")
        elif event == tracing.PRIMARY_RESOLVED:
            increment("primary.found" if fields.get('title') else "primary.missing")
        elif event == tracing.POOL_BUILT:
            increment("pool.items", int(fields.get('size') or 0))
            if fields.get('elapsed_ms') is not None:
                observe_latency("pool.build", float(fields['elapsed_ms']))
