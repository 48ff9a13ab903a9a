"""In-process counters and gauges for entry operations.

Request handlers run on the FastAPI threadpool, so the in-memory sink guards
its maps with a lock. No exporter is wired; `snapshot()` is what tests and
diagnostics read.
"""

from __future__ import annotations

from collections import Counter
from threading import Lock
from typing import Dict, Protocol

from .logging import get_logger

__all__ = [
    "InMemoryMetricsClient",
    "MetricsClient",
    "get_metrics_client",
    "reset_metrics_client",
]

logger = get_logger(__name__)


class MetricsClient(Protocol):  # pragma: no cover - interface only
    def increment(self, metric: str, value: int = 1) -> None: ...

    def gauge(self, metric: str, value: float) -> None: ...


class InMemoryMetricsClient(MetricsClient):
    def __init__(self) -> None:
        self._lock = Lock()
        self.counters: Counter[str] = Counter()
        self.gauges: Dict[str, float] = {}

    def increment(self, metric: str, value: int = 1) -> None:
        with self._lock:
            self.counters[metric] += value
        logger.debug("metrics_increment", extra={"metric": metric, "value": value})

    def gauge(self, metric: str, value: float) -> None:
        with self._lock:
            self.gauges[metric] = value
        logger.debug("metrics_gauge", extra={"metric": metric, "value": value})

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            return {"counters": dict(self.counters), "gauges": dict(self.gauges)}


_shared_client: InMemoryMetricsClient | None = None


def get_metrics_client() -> InMemoryMetricsClient:
    """Process-wide client used when a service is built without one."""

    global _shared_client
    if _shared_client is None:
        _shared_client = InMemoryMetricsClient()
    return _shared_client


def reset_metrics_client() -> None:
    global _shared_client
    _shared_client = None
