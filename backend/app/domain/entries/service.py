"""Entry service orchestrating validation, persistence, and aggregation."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Callable, List, Mapping

from ...infra.logging import get_logger
from ...infra.metrics import MetricsClient, get_metrics_client
from .errors import EntryNotFoundError, EntryValidationError
from .filters import EntryFilters, build_entry_filters
from .gateway import EntryStoreGateway
from .models import Entry, utcnow
from .normalizer import normalize_entry_patch, normalize_new_entry
from .summary import EntrySummary, summarize_entries

logger = get_logger(__name__)


class EntryService:
    """Owner-scoped CRUD + summary operations over an injected EntryStore.

    The service keeps no state between calls; the gateway is the only holder
    of entry records and the only place where atomicity is enforced.
    """

    def __init__(
        self,
        gateway: EntryStoreGateway,
        *,
        metrics: MetricsClient | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._gateway = gateway
        self._metrics = metrics or get_metrics_client()
        self._clock = clock

    @property
    def gateway(self) -> EntryStoreGateway:
        return self._gateway

    # ------------------------------------------------------------------
    # CRUD operations
    # ------------------------------------------------------------------
    def create(self, owner_id: str, fields: Mapping[str, Any]) -> Entry:
        try:
            new_entry = normalize_new_entry(owner_id, fields, now=self._clock())
        except EntryValidationError:
            self._metrics.increment("entries_validation_failed_total")
            raise
        entry = self._gateway.insert(new_entry)
        self._metrics.increment("entries_create_total")
        logger.info(
            "entry_created",
            extra={
                "entry_id": entry.entry_id,
                "owner_id": owner_id,
                "category": entry.category.value,
                "entry_type": entry.entry_type.value,
            },
        )
        return entry

    def list(self, owner_id: str, filters: Mapping[str, Any] | None = None) -> List[Entry]:
        """Return the owner's entries, most recent `date` first.

        `filters` accepts `start_date`/`startDate`, `end_date`/`endDate`,
        `category` and `type`/`entry_type`.
        """

        raw = filters or {}
        try:
            entry_filters = build_entry_filters(
                owner_id,
                start_date=_filter_value(raw, "start_date", "startDate"),
                end_date=_filter_value(raw, "end_date", "endDate"),
                category=_filter_value(raw, "category"),
                entry_type=_filter_value(raw, "type", "entry_type"),
            )
        except EntryValidationError:
            self._metrics.increment("entries_validation_failed_total")
            raise
        entries = self._gateway.find_many(entry_filters)
        self._metrics.increment("entries_list_total")
        logger.debug(
            "entries_listed",
            extra={"owner_id": owner_id, "count": len(entries)},
        )
        return entries

    def get(self, owner_id: str, entry_id: str) -> Entry:
        entry = self._gateway.find_one(entry_id, owner_id)
        if entry is None:
            raise self._not_found(entry_id)
        return entry

    def update(self, owner_id: str, entry_id: str, fields: Mapping[str, Any]) -> Entry:
        """Apply the supplied fields; amount sign follows the resulting type."""

        try:
            patch = normalize_entry_patch(fields)
        except EntryValidationError:
            self._metrics.increment("entries_validation_failed_total")
            raise
        if patch.is_empty:
            return self.get(owner_id, entry_id)
        updated = self._gateway.find_one_and_update(entry_id, owner_id, patch)
        if updated is None:
            raise self._not_found(entry_id)
        self._metrics.increment("entries_update_total")
        logger.info(
            "entry_updated",
            extra={
                "entry_id": entry_id,
                "owner_id": owner_id,
                "amount_rederived": patch.touches_amount,
            },
        )
        return updated

    def delete(self, owner_id: str, entry_id: str) -> Entry:
        removed = self._gateway.find_one_and_delete(entry_id, owner_id)
        if removed is None:
            raise self._not_found(entry_id)
        self._metrics.increment("entries_delete_total")
        logger.info(
            "entry_deleted",
            extra={"entry_id": entry_id, "owner_id": owner_id},
        )
        return removed

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------
    def summary(self, owner_id: str) -> EntrySummary:
        """Totals and category breakdown over all of the owner's entries."""

        start = time.perf_counter()
        entries = self._gateway.find_many(EntryFilters(owner_id=owner_id))
        result = summarize_entries(entries)
        duration_ms = int((time.perf_counter() - start) * 1000)
        self._metrics.increment("entries_summary_total")
        self._metrics.gauge("entries_summary_last_duration_ms", duration_ms)
        logger.info(
            "entry_summary_generated",
            extra={
                "owner_id": owner_id,
                "entries_count": result.entries_count,
                "duration_ms": duration_ms,
            },
        )
        return result

    def _not_found(self, entry_id: str) -> EntryNotFoundError:
        self._metrics.increment("entries_not_found_total")
        return EntryNotFoundError(entry_id)


def _filter_value(raw: Mapping[str, Any], *names: str) -> Any:
    """First non-None value among the snake_case and query-string spellings."""

    for name in names:
        value = raw.get(name)
        if value is not None:
            return value
    return None
