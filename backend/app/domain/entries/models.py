"""Entry data models for the finance diary store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

__all__ = [
    "Category",
    "Entry",
    "EntryPatch",
    "EntryType",
    "NewEntry",
    "ensure_utc",
    "utcnow",
]


def utcnow() -> datetime:
    """Return timezone-aware UTC timestamp."""

    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Category(str, Enum):
    """Closed set of entry categories."""

    FOOD = "food"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    SALARY = "salary"
    HEALTHCARE = "healthcare"
    SHOPPING = "shopping"
    EDUCATION = "education"
    OTHER = "other"


class EntryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class NewEntry:
    """Canonical, validated entry awaiting persistence (no id or audit fields)."""

    owner_id: str
    date: datetime
    description: str
    category: Category
    entry_type: EntryType
    amount: float


@dataclass(frozen=True)
class EntryPatch:
    """Validated partial update.

    `amount_magnitude` is unsigned; the stored sign is resolved against the
    entry's resulting type when the patch is applied.
    """

    description: Optional[str] = None
    category: Optional[Category] = None
    entry_type: Optional[EntryType] = None
    date: Optional[datetime] = None
    amount_magnitude: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.description,
                self.category,
                self.entry_type,
                self.date,
                self.amount_magnitude,
            )
        )

    @property
    def touches_amount(self) -> bool:
        return self.entry_type is not None or self.amount_magnitude is not None


@dataclass(frozen=True)
class Entry:
    """Represents a stored entry row."""

    entry_id: str
    owner_id: str
    date: datetime
    description: str
    category: Category
    entry_type: EntryType
    amount: float
    created_at: datetime
    updated_at: datetime
