"""Launch pipeline metrics: event outcomes, branch fallbacks, latency.

Counters accumulate during runtime and are read by the stats reporter.
"""

import time
from dataclasses import dataclass, field
from threading import Lock


@dataclass
class BranchMetrics:
    """Metrics for one enrichment branch."""

    runs: int = 0
    failures: int = 0
    timeouts: int = 0
    total_latency_ms: float = 0.0
    max_latency_ms: float = 0.0

    @property
    def avg_latency_ms(self) -> float:
        if self.runs == 0:
            return 0.0
        return self.total_latency_ms / self.runs

    @property
    def failure_pct(self) -> float:
        if self.runs == 0:
            return 0.0
        return self.failures / self.runs * 100


@dataclass
class EventCounters:
    received: int = 0
    dropped: int = 0  # queue full
    skipped: int = 0  # not a launch / tx unavailable
    delivered: int = 0
    partial: int = 0
    sink_errors: int = 0
    latencies_ms: list[float] = field(default_factory=list)


class PipelineMetrics:
    """Metrics accumulator shared by the subscriber callback and workers."""

    _LATENCY_WINDOW = 500

    def __init__(self) -> None:
        self._lock = Lock()
        self._branches: dict[str, BranchMetrics] = {}
        self._events = EventCounters()
        self._start_time: float = time.monotonic()

    def _branch(self, name: str) -> BranchMetrics:
        if name not in self._branches:
            self._branches[name] = BranchMetrics()
        return self._branches[name]

    def record_received(self) -> None:
        with self._lock:
            self._events.received += 1

    def record_dropped(self) -> None:
        with self._lock:
            self._events.dropped += 1

    def record_skipped(self) -> None:
        with self._lock:
            self._events.skipped += 1

    def record_branch(
        self, name: str, latency_ms: float, *, ok: bool, timed_out: bool = False
    ) -> None:
        with self._lock:
            bm = self._branch(name)
            bm.runs += 1
            bm.total_latency_ms += latency_ms
            if latency_ms > bm.max_latency_ms:
                bm.max_latency_ms = latency_ms
            if not ok:
                bm.failures += 1
            if timed_out:
                bm.timeouts += 1

    def record_event(self, latency_ms: float, *, partial: bool, sink_error: bool = False) -> None:
        with self._lock:
            ev = self._events
            if sink_error:
                ev.sink_errors += 1
            else:
                ev.delivered += 1
            if partial:
                ev.partial += 1
            ev.latencies_ms.append(latency_ms)
            if len(ev.latencies_ms) > self._LATENCY_WINDOW:
                del ev.latencies_ms[: -self._LATENCY_WINDOW]

    def get_summary(self) -> dict:
        """Return a snapshot of all metrics."""
        with self._lock:
            ev = self._events
            lat = ev.latencies_ms
            return {
                "uptime_sec": round(time.monotonic() - self._start_time),
                "events": {
                    "received": ev.received,
                    "dropped": ev.dropped,
                    "skipped": ev.skipped,
                    "delivered": ev.delivered,
                    "partial": ev.partial,
                    "sink_errors": ev.sink_errors,
                    "avg_latency_ms": round(sum(lat) / len(lat)) if lat else 0,
                },
                "branches": {
                    name: {
                        "runs": bm.runs,
                        "failures": bm.failures,
                        "timeouts": bm.timeouts,
                        "avg_latency_ms": round(bm.avg_latency_ms),
                        "max_latency_ms": round(bm.max_latency_ms),
                    }
                    for name, bm in self._branches.items()
                },
            }

    def format_stats_line(self) -> str:
        """One-line summary for the stats reporter."""
        with self._lock:
            ev = self._events
            failures = " ".join(
                f"{name}={bm.failures}/{bm.runs}" for name, bm in sorted(self._branches.items())
            )
            return (
                f"received={ev.received} delivered={ev.delivered} "
                f"partial={ev.partial} skipped={ev.skipped} dropped={ev.dropped} "
                f"sink_errors={ev.sink_errors} branch_failures[{failures}]"
            )
