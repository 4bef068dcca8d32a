"""
In-process telemetry for briefing jobs and API calls.

Events are written to the log; counters and latency samples stay in memory
so tests (and /health style endpoints) can read them back. Job threads
update them concurrently, hence the lock.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections import defaultdict
from collections.abc import Iterator
from threading import Lock
from typing import Any

logger = logging.getLogger("newsbrief.telemetry")

_COUNTERS: defaultdict[str, int] = defaultdict(int)
_LATENCIES: defaultdict[str, list[float]] = defaultdict(list)
_LOCK = Lock()


def log_event(event_name: str, **fields: Any) -> None:
    """
    Structured log event. Callers pass redacted identifiers only, never secrets.
    """
    logger.info("event=%s %s", event_name, fields)


def counter(name: str, increment: int = 1) -> int:
    with _LOCK:
        _COUNTERS[name] += increment
        value = _COUNTERS[name]
    logger.debug("counter=%s value=%s", name, value)
    return value


def get_counter(name: str) -> int:
    with _LOCK:
        return _COUNTERS.get(name, 0)


@contextlib.contextmanager
def time_block(metric_name: str) -> Iterator[None]:
    """Record wall time of the block under metric_name, even when it raises."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        with _LOCK:
            _LATENCIES[metric_name].append(elapsed_ms)
        logger.debug("timing=%s ms=%.1f", metric_name, elapsed_ms)


def get_latency_stats(metric_name: str) -> dict[str, float]:
    """count / min / max / avg / p95 in milliseconds; zeros when nothing was recorded."""
    with _LOCK:
        samples = sorted(_LATENCIES.get(metric_name, []))
    if not samples:
        return {"count": 0, "min": 0.0, "max": 0.0, "avg": 0.0, "p95": 0.0}

    count = len(samples)
    return {
        "count": count,
        "min": samples[0],
        "max": samples[-1],
        "avg": sum(samples) / count,
        "p95": samples[min(int(count * 0.95), count - 1)],
    }


def reset_telemetry() -> None:
    """Clear counters and latencies (tests)."""
    with _LOCK:
        _COUNTERS.clear()
        _LATENCIES.clear()
