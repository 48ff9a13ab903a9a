"""Tests for owner-scoped listing filters."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from backend.app.domain.entries import (
    Category,
    Entry,
    EntryFilters,
    EntryType,
    EntryValidationError,
    build_entry_filters,
)

pytestmark = [pytest.mark.entries]


def _entry(**overrides) -> Entry:
    stamp = datetime(2026, 1, 1, tzinfo=timezone.utc)
    values = {
        "entry_id": "e-1",
        "owner_id": "owner-1",
        "date": datetime(2026, 1, 15, tzinfo=timezone.utc),
        "description": "Bus pass",
        "category": Category.TRANSPORT,
        "entry_type": EntryType.EXPENSE,
        "amount": -30.0,
        "created_at": stamp,
        "updated_at": stamp,
    }
    values.update(overrides)
    return Entry(**values)


def test_owner_only_filter_matches_every_owned_entry():
    filters = EntryFilters(owner_id="owner-1")

    assert filters.matches(_entry())
    assert not filters.matches(_entry(owner_id="owner-2"))


def test_date_bounds_are_inclusive():
    filters = build_entry_filters(
        "owner-1",
        start_date="2026-01-15T00:00:00Z",
        end_date="2026-01-15T00:00:00Z",
    )

    assert filters.matches(_entry())
    assert not filters.matches(
        _entry(date=datetime(2026, 1, 16, tzinfo=timezone.utc))
    )


def test_inverted_range_matches_nothing():
    filters = build_entry_filters(
        "owner-1", start_date="2026-02-01", end_date="2026-01-01"
    )

    assert not filters.matches(_entry())


def test_category_and_type_filters_combine():
    filters = build_entry_filters("owner-1", category="transport", entry_type="income")

    assert filters.category is Category.TRANSPORT
    assert filters.entry_type is EntryType.INCOME
    assert not filters.matches(_entry())
    assert filters.matches(_entry(entry_type=EntryType.INCOME, amount=30.0))


def test_blank_query_values_mean_no_restriction():
    filters = build_entry_filters(
        "owner-1", start_date="", end_date=None, category="  ", entry_type=None
    )

    assert filters == EntryFilters(owner_id="owner-1")


def test_unknown_filter_values_are_rejected():
    with pytest.raises(EntryValidationError) as excinfo:
        build_entry_filters(
            "owner-1", start_date="not-a-date", category="rent", entry_type="gift"
        )

    assert set(excinfo.value.details["fields"]) == {"startDate", "category", "type"}
