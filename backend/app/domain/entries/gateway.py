"""EntryStore gateway implementations."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from threading import RLock
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    case,
    delete,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchModuleError, SQLAlchemyError

from ...config import Settings
from ...infra.db import build_engine
from ...infra.logging import get_logger
from .errors import StoreError
from .filters import EntryFilters
from .models import (
    Category,
    Entry,
    EntryPatch,
    EntryType,
    NewEntry,
    ensure_utc,
    utcnow,
)
from .normalizer import signed_amount

__all__ = [
    "EntryStoreGateway",
    "InMemoryEntryStoreGateway",
    "PostgresEntryStoreGateway",
    "build_entries_table",
    "build_entry_store_gateway",
]

logger = get_logger(__name__)


def build_entries_table(metadata: MetaData) -> Table:
    """Declare the `entries` table; `seq` preserves insertion order."""

    return Table(
        "entries",
        metadata,
        Column("seq", Integer, primary_key=True, autoincrement=True),
        Column("entry_id", String(36), nullable=False, unique=True),
        Column("owner_id", String(64), nullable=False),
        Column("date", DateTime(timezone=True), nullable=False),
        Column("description", String(200), nullable=False),
        Column("category", String(32), nullable=False),
        Column("entry_type", String(16), nullable=False),
        Column("amount", Float(), nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("updated_at", DateTime(timezone=True), nullable=False),
        Index("ix_entries_owner_date", "owner_id", "date"),
        Index("ix_entries_owner_type", "owner_id", "entry_type"),
        Index("ix_entries_owner_category", "owner_id", "category"),
    )


class EntryStoreGateway(Protocol):  # pragma: no cover
    """Persistence collaborator consumed by `EntryService`.

    Every lookup and mutation is keyed by both entry id and owner id; a record
    owned by someone else is reported exactly like a missing one (`None`).
    """

    def open(self) -> None: ...

    def close(self) -> None: ...

    def ping(self) -> bool: ...

    def insert(self, new_entry: NewEntry) -> Entry: ...

    def find_many(self, filters: EntryFilters) -> List[Entry]: ...

    def find_one(self, entry_id: str, owner_id: str) -> Optional[Entry]: ...

    def find_one_and_update(
        self, entry_id: str, owner_id: str, patch: EntryPatch
    ) -> Optional[Entry]: ...

    def find_one_and_delete(self, entry_id: str, owner_id: str) -> Optional[Entry]: ...


class InMemoryEntryStoreGateway(EntryStoreGateway):
    """Simple in-memory EntryStore used for local development and tests."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._entries: Dict[str, Entry] = {}

    def open(self) -> None:
        logger.info("entry_store_opened", extra={"backend": "memory"})

    def close(self) -> None:
        logger.info("entry_store_closed", extra={"backend": "memory"})

    def ping(self) -> bool:
        return True

    def insert(self, new_entry: NewEntry) -> Entry:
        timestamp = utcnow()
        record = Entry(
            entry_id=str(uuid4()),
            owner_id=new_entry.owner_id,
            date=new_entry.date,
            description=new_entry.description,
            category=new_entry.category,
            entry_type=new_entry.entry_type,
            amount=new_entry.amount,
            created_at=timestamp,
            updated_at=timestamp,
        )
        with self._lock:
            self._entries[record.entry_id] = record
        return record

    def find_many(self, filters: EntryFilters) -> List[Entry]:
        with self._lock:
            matching = [
                entry for entry in self._entries.values() if filters.matches(entry)
            ]
        # dict order is insertion order and list.sort is stable.
        matching.sort(key=lambda entry: entry.date, reverse=True)
        return matching

    def find_one(self, entry_id: str, owner_id: str) -> Optional[Entry]:
        with self._lock:
            return self._owned(entry_id, owner_id)

    def find_one_and_update(
        self, entry_id: str, owner_id: str, patch: EntryPatch
    ) -> Optional[Entry]:
        with self._lock:
            record = self._owned(entry_id, owner_id)
            if record is None:
                return None
            updated = _apply_patch(record, patch)
            self._entries[entry_id] = updated
            return updated

    def find_one_and_delete(self, entry_id: str, owner_id: str) -> Optional[Entry]:
        with self._lock:
            record = self._owned(entry_id, owner_id)
            if record is None:
                return None
            del self._entries[entry_id]
            return record

    def _owned(self, entry_id: str, owner_id: str) -> Optional[Entry]:
        record = self._entries.get(entry_id)
        if record is None or record.owner_id != owner_id:
            return None
        return record


class PostgresEntryStoreGateway(EntryStoreGateway):
    """SQLAlchemy-backed adapter that persists entries to PostgreSQL."""

    def __init__(
        self,
        engine: Engine,
        *,
        table: Optional[Table] = None,
        create_schema: bool = False,
    ) -> None:
        self._engine = engine
        if table is not None:
            self._entries = table
            self._metadata = table.metadata
        else:
            self._metadata = MetaData()
            self._entries = build_entries_table(self._metadata)
        self._create_schema = create_schema

    @property
    def table(self) -> Table:
        return self._entries

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def open(self) -> None:
        connected = self.ping()
        if connected and self._create_schema:
            with _store_operation("create_schema"):
                self._metadata.create_all(self._engine, tables=[self._entries])
        log = logger.info if connected else logger.warning
        log(
            "entry_store_opened",
            extra={
                "backend": self._engine.dialect.name,
                "connected": connected,
            },
        )

    def close(self) -> None:
        self._engine.dispose()
        logger.info("entry_store_closed", extra={"backend": self._engine.dialect.name})

    def ping(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(select(1))
        except SQLAlchemyError:
            logger.warning("entry_store_ping_failed", exc_info=True)
            return False
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def find_many(self, filters: EntryFilters) -> List[Entry]:
        table = self._entries
        stmt = (
            select(table)
            .where(*self._build_filter_conditions(filters))
            .order_by(table.c.date.desc(), table.c.seq.asc())
        )
        with _store_operation("find_many"):
            with self._engine.begin() as conn:
                rows = conn.execute(stmt).mappings().all()
        return [_row_to_entry(row) for row in rows]

    def find_one(self, entry_id: str, owner_id: str) -> Optional[Entry]:
        stmt = select(self._entries).where(*self._owned(entry_id, owner_id))
        with _store_operation("find_one"):
            with self._engine.begin() as conn:
                row = conn.execute(stmt).mappings().first()
        return _row_to_entry(row) if row is not None else None

    def _build_filter_conditions(self, filters: EntryFilters) -> tuple:
        c = self._entries.c
        conditions: list[Any] = [c.owner_id == filters.owner_id]
        if filters.start_date is not None:
            conditions.append(c.date >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(c.date <= filters.end_date)
        if filters.category is not None:
            conditions.append(c.category == filters.category.value)
        if filters.entry_type is not None:
            conditions.append(c.entry_type == filters.entry_type.value)
        return tuple(conditions)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def insert(self, new_entry: NewEntry) -> Entry:
        timestamp = utcnow()
        stmt = (
            insert(self._entries)
            .values(
                entry_id=str(uuid4()),
                owner_id=new_entry.owner_id,
                date=new_entry.date,
                description=new_entry.description,
                category=new_entry.category.value,
                entry_type=new_entry.entry_type.value,
                amount=new_entry.amount,
                created_at=timestamp,
                updated_at=timestamp,
            )
            .returning(self._entries)
        )
        with _store_operation("insert"):
            with self._engine.begin() as conn:
                row = conn.execute(stmt).mappings().first()
        if row is None:  # pragma: no cover - defensive
            raise StoreError("Entry store insert returned no row")
        return _row_to_entry(row)

    def find_one_and_update(
        self, entry_id: str, owner_id: str, patch: EntryPatch
    ) -> Optional[Entry]:
        stmt = (
            update(self._entries)
            .where(*self._owned(entry_id, owner_id))
            .values(**self._patch_values(patch))
            .returning(self._entries)
        )
        with _store_operation("find_one_and_update"):
            with self._engine.begin() as conn:
                row = conn.execute(stmt).mappings().first()
        return _row_to_entry(row) if row is not None else None

    def find_one_and_delete(self, entry_id: str, owner_id: str) -> Optional[Entry]:
        stmt = (
            delete(self._entries)
            .where(*self._owned(entry_id, owner_id))
            .returning(self._entries)
        )
        with _store_operation("find_one_and_delete"):
            with self._engine.begin() as conn:
                row = conn.execute(stmt).mappings().first()
        return _row_to_entry(row) if row is not None else None

    def _patch_values(self, patch: EntryPatch) -> Dict[str, Any]:
        """Translate a patch into SET clauses.

        The sign of `amount` is resolved inside the UPDATE itself so a single
        statement reads the current type/magnitude and writes the new value.
        """

        c = self._entries.c
        values: Dict[str, Any] = {"updated_at": utcnow()}
        if patch.description is not None:
            values["description"] = patch.description
        if patch.category is not None:
            values["category"] = patch.category.value
        if patch.date is not None:
            values["date"] = patch.date
        if patch.entry_type is not None:
            values["entry_type"] = patch.entry_type.value
        if not patch.touches_amount:
            return values

        if patch.entry_type is not None and patch.amount_magnitude is not None:
            values["amount"] = signed_amount(patch.entry_type, patch.amount_magnitude)
        elif patch.entry_type is not None:
            sign = -1 if patch.entry_type is EntryType.EXPENSE else 1
            values["amount"] = func.abs(c.amount) * sign
        else:
            magnitude = abs(patch.amount_magnitude or 0.0)
            values["amount"] = case(
                (c.entry_type == EntryType.EXPENSE.value, -magnitude),
                else_=magnitude,
            )
        return values

    def _owned(self, entry_id: str, owner_id: str) -> tuple:
        c = self._entries.c
        return (c.entry_id == entry_id, c.owner_id == owner_id)


def build_entry_store_gateway(
    settings: Settings,
    *,
    engine: Optional[Engine] = None,
) -> EntryStoreGateway:
    """Factory that returns the configured EntryStore gateway implementation."""

    store_cfg = settings.entry_store
    if store_cfg.backend == "memory":
        return InMemoryEntryStoreGateway()
    try:
        return PostgresEntryStoreGateway(
            engine or build_engine(settings),
            create_schema=store_cfg.create_schema,
        )
    except (ImportError, NoSuchModuleError, SQLAlchemyError):
        if not store_cfg.fallback_to_memory:
            raise
        logger.warning(
            "postgres_entry_store_unavailable_falling_back",
            exc_info=True,
        )
    return InMemoryEntryStoreGateway()


@contextmanager
def _store_operation(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(
            "entry_store_failure",
            extra={"operation": operation},
            exc_info=True,
        )
        raise StoreError(
            f"Entry store {operation} failed: {exc}",
            details={"operation": operation},
        ) from exc


def _apply_patch(record: Entry, patch: EntryPatch) -> Entry:
    entry_type = patch.entry_type or record.entry_type
    amount = record.amount
    if patch.touches_amount:
        magnitude = (
            patch.amount_magnitude
            if patch.amount_magnitude is not None
            else abs(record.amount)
        )
        amount = signed_amount(entry_type, magnitude)
    return replace(
        record,
        date=patch.date or record.date,
        description=patch.description or record.description,
        category=patch.category or record.category,
        entry_type=entry_type,
        amount=amount,
        updated_at=utcnow(),
    )


def _row_to_entry(row: Mapping[str, Any]) -> Entry:
    return Entry(
        entry_id=row["entry_id"],
        owner_id=row["owner_id"],
        date=ensure_utc(row["date"]),
        description=row["description"],
        category=Category(row["category"]),
        entry_type=EntryType(row["entry_type"]),
        amount=float(row["amount"]),
        created_at=ensure_utc(row["created_at"]),
        updated_at=ensure_utc(row["updated_at"]),
    )
