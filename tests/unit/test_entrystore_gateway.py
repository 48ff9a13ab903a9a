"""Tests for the EntryStore gateway implementations."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import NoSuchModuleError
from sqlalchemy.pool import StaticPool

from backend.app.config import EntryStoreConfig, Settings
from backend.app.domain.entries import (
    Category,
    EntryFilters,
    EntryPatch,
    EntryType,
    InMemoryEntryStoreGateway,
    NewEntry,
    PostgresEntryStoreGateway,
    StoreError,
    build_entry_store_gateway,
)
from backend.app.domain.entries import gateway as gateway_module
from tests.helpers.logging import RecordingLogger, assert_extra_contains, find_log

pytestmark = [pytest.mark.entries]

JAN = datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc)
FEB = datetime(2026, 2, 10, 9, 0, tzinfo=timezone.utc)


def _sqlite_engine() -> sa.engine.Engine:
    return sa.create_engine(
        "sqlite+pysqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture(params=["memory", "sql"])
def gateway(request):
    if request.param == "memory":
        store = InMemoryEntryStoreGateway()
    else:
        store = PostgresEntryStoreGateway(_sqlite_engine(), create_schema=True)
    store.open()
    yield store
    store.close()


def _new_entry(
    owner_id: str = "alice",
    *,
    date: datetime = JAN,
    description: str = "Coffee",
    category: Category = Category.FOOD,
    entry_type: EntryType = EntryType.EXPENSE,
    amount: float = -4.5,
) -> NewEntry:
    return NewEntry(
        owner_id=owner_id,
        date=date,
        description=description,
        category=category,
        entry_type=entry_type,
        amount=amount,
    )


def test_insert_assigns_id_and_timestamps(gateway):
    entry = gateway.insert(_new_entry())

    assert entry.entry_id
    assert entry.owner_id == "alice"
    assert entry.category is Category.FOOD
    assert entry.entry_type is EntryType.EXPENSE
    assert entry.amount == -4.5
    assert entry.date == JAN
    assert entry.created_at.tzinfo is not None
    assert entry.created_at == entry.updated_at


def test_find_one_requires_matching_owner(gateway):
    entry = gateway.insert(_new_entry())

    assert gateway.find_one(entry.entry_id, "alice") == entry
    assert gateway.find_one(entry.entry_id, "bob") is None
    assert gateway.find_one("missing", "alice") is None


def test_find_many_orders_by_date_desc_with_stable_ties(gateway):
    first_tie = gateway.insert(_new_entry(description="first", date=JAN))
    newest = gateway.insert(_new_entry(description="newest", date=FEB))
    second_tie = gateway.insert(_new_entry(description="second", date=JAN))
    gateway.insert(_new_entry("bob", date=FEB))

    entries = gateway.find_many(EntryFilters(owner_id="alice"))

    assert [entry.entry_id for entry in entries] == [
        newest.entry_id,
        first_tie.entry_id,
        second_tie.entry_id,
    ]


def test_find_many_applies_every_filter(gateway):
    gateway.insert(_new_entry(date=JAN))
    wanted = gateway.insert(
        _new_entry(
            date=FEB,
            category=Category.SALARY,
            entry_type=EntryType.INCOME,
            amount=100.0,
        )
    )
    gateway.insert(_new_entry(date=FEB))

    entries = gateway.find_many(
        EntryFilters(
            owner_id="alice",
            start_date=FEB,
            end_date=FEB,
            category=Category.SALARY,
            entry_type=EntryType.INCOME,
        )
    )

    assert [entry.entry_id for entry in entries] == [wanted.entry_id]


def test_update_type_only_flips_sign(gateway):
    entry = gateway.insert(_new_entry(amount=-12.0))

    updated = gateway.find_one_and_update(
        entry.entry_id, "alice", EntryPatch(entry_type=EntryType.INCOME)
    )

    assert updated is not None
    assert updated.entry_type is EntryType.INCOME
    assert updated.amount == 12.0
    assert updated.description == "Coffee"


def test_update_amount_only_follows_stored_type(gateway):
    entry = gateway.insert(_new_entry(amount=-12.0))

    updated = gateway.find_one_and_update(
        entry.entry_id, "alice", EntryPatch(amount_magnitude=30.0)
    )

    assert updated is not None
    assert updated.amount == -30.0


def test_update_amount_and_type_together(gateway):
    entry = gateway.insert(_new_entry(amount=-12.0))

    updated = gateway.find_one_and_update(
        entry.entry_id,
        "alice",
        EntryPatch(entry_type=EntryType.INCOME, amount_magnitude=7.0),
    )

    assert updated is not None
    assert updated.amount == 7.0


def test_update_other_fields_keeps_amount(gateway):
    entry = gateway.insert(_new_entry(amount=-12.0))

    updated = gateway.find_one_and_update(
        entry.entry_id,
        "alice",
        EntryPatch(description="Tea", category=Category.OTHER, date=FEB),
    )

    assert updated is not None
    assert (updated.description, updated.category, updated.date) == (
        "Tea",
        Category.OTHER,
        FEB,
    )
    assert updated.amount == -12.0
    assert updated.created_at == entry.created_at
    assert gateway.find_one(entry.entry_id, "alice") == updated


def test_update_and_delete_ignore_other_owners(gateway):
    entry = gateway.insert(_new_entry())

    assert (
        gateway.find_one_and_update(entry.entry_id, "bob", EntryPatch(description="x"))
        is None
    )
    assert gateway.find_one_and_delete(entry.entry_id, "bob") is None
    assert gateway.find_one(entry.entry_id, "alice") == entry


def test_delete_returns_removed_entry(gateway):
    entry = gateway.insert(_new_entry())

    removed = gateway.find_one_and_delete(entry.entry_id, "alice")

    assert removed == entry
    assert gateway.find_one(entry.entry_id, "alice") is None
    assert gateway.find_one_and_delete(entry.entry_id, "alice") is None


def test_ping_reports_connectivity(gateway):
    assert gateway.ping() is True


def test_sql_gateway_ping_fails_for_unreachable_database(tmp_path):
    engine = sa.create_engine(f"sqlite+pysqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
    store = PostgresEntryStoreGateway(engine, create_schema=True)

    assert store.ping() is False
    store.open()
    store.close()


def test_sql_gateway_wraps_driver_errors_in_store_error():
    store = PostgresEntryStoreGateway(_sqlite_engine())

    with pytest.raises(StoreError) as excinfo:
        store.find_many(EntryFilters(owner_id="alice"))

    assert excinfo.value.details == {"operation": "find_many"}
    assert excinfo.value.status_code == 500


def test_sql_gateway_exposes_table():
    store = PostgresEntryStoreGateway(_sqlite_engine())

    assert store.table.name == "entries"
    assert {"seq", "entry_id", "owner_id", "amount"} <= set(store.table.c.keys())


def test_factory_returns_memory_backend():
    settings = Settings(entry_store=EntryStoreConfig(backend="memory"))

    assert isinstance(build_entry_store_gateway(settings), InMemoryEntryStoreGateway)


def test_factory_uses_supplied_engine():
    gateway = build_entry_store_gateway(Settings(), engine=_sqlite_engine())

    assert isinstance(gateway, PostgresEntryStoreGateway)


def test_factory_falls_back_to_memory_when_driver_missing():
    settings = Settings(
        database_url="nosuchdialect://localhost/db",
        entry_store=EntryStoreConfig(backend="postgres", fallback_to_memory=True),
    )

    assert isinstance(build_entry_store_gateway(settings), InMemoryEntryStoreGateway)


def test_factory_raises_without_fallback():
    settings = Settings(database_url="nosuchdialect://localhost/db")

    with pytest.raises(NoSuchModuleError):
        build_entry_store_gateway(settings)


def test_sql_gateway_logs_failed_operation(monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr(gateway_module, "logger", recorder)
    store = PostgresEntryStoreGateway(_sqlite_engine())

    with pytest.raises(StoreError):
        store.find_one("e-1", "alice")

    record = find_log(recorder.records, level="error", message="entry_store_failure")
    assert_extra_contains(record, operation="find_one")
    assert record["exc_info"] is True


def test_open_logs_disconnected_store_as_warning(monkeypatch, tmp_path):
    recorder = RecordingLogger()
    monkeypatch.setattr(gateway_module, "logger", recorder)
    engine = sa.create_engine(f"sqlite+pysqlite:///{tmp_path / 'nope' / 'db.sqlite'}")

    PostgresEntryStoreGateway(engine).open()

    record = find_log(recorder.records, level="warning", message="entry_store_opened")
    assert_extra_contains(record, backend="sqlite", connected=False)
