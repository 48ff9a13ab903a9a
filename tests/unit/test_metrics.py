"""Tests for the in-process metrics sink."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from backend.app.domain.entries import EntryService, InMemoryEntryStoreGateway
from backend.app.infra.metrics import (
    InMemoryMetricsClient,
    get_metrics_client,
    reset_metrics_client,
)

pytestmark = [pytest.mark.entries]


def test_counters_and_gauges_snapshot():
    client = InMemoryMetricsClient()
    client.increment("entries_create_total")
    client.increment("entries_create_total", 2)
    client.gauge("entries_summary_last_duration_ms", 4)

    assert client.snapshot() == {
        "counters": {"entries_create_total": 3},
        "gauges": {"entries_summary_last_duration_ms": 4},
    }


def test_concurrent_increments_are_not_lost():
    client = InMemoryMetricsClient()

    with ThreadPoolExecutor(max_workers=8) as pool:
        for _ in range(400):
            pool.submit(client.increment, "entries_list_total")

    assert client.counters["entries_list_total"] == 400


def test_service_defaults_to_shared_client():
    reset_metrics_client()
    service = EntryService(InMemoryEntryStoreGateway())

    service.list("alice")

    assert get_metrics_client().counters["entries_list_total"] == 1
    reset_metrics_client()
