"""Owner-scoped filter predicates for entry listings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .errors import EntryValidationError
from .models import Category, Entry, EntryType
from .normalizer import parse_category, parse_datetime, parse_entry_type

__all__ = ["EntryFilters", "build_entry_filters"]


@dataclass(frozen=True)
class EntryFilters:
    """Normalized filter set for `/api/entries` queries.

    `None` on any optional dimension means "no restriction".
    """

    owner_id: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    category: Optional[Category] = None
    entry_type: Optional[EntryType] = None

    def matches(self, entry: Entry) -> bool:
        if entry.owner_id != self.owner_id:
            return False
        if self.start_date is not None and entry.date < self.start_date:
            return False
        if self.end_date is not None and entry.date > self.end_date:
            return False
        if self.category is not None and entry.category is not self.category:
            return False
        if self.entry_type is not None and entry.entry_type is not self.entry_type:
            return False
        return True


def build_entry_filters(
    owner_id: str,
    *,
    start_date: Any = None,
    end_date: Any = None,
    category: Any = None,
    entry_type: Any = None,
) -> EntryFilters:
    """Parse raw query values; unknown enum values are rejected."""

    errors: Dict[str, str] = {}
    parsed: Dict[str, Any] = {}
    for name, raw, parser in (
        ("startDate", start_date, parse_datetime),
        ("endDate", end_date, parse_datetime),
        ("category", category, parse_category),
        ("type", entry_type, parse_entry_type),
    ):
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            parsed[name] = None
            continue
        try:
            parsed[name] = parser(raw)
        except ValueError as exc:
            errors[name] = str(exc)
    if errors:
        raise EntryValidationError(
            "; ".join(errors.values()), details={"fields": errors}
        )
    return EntryFilters(
        owner_id=owner_id,
        start_date=parsed["startDate"],
        end_date=parsed["endDate"],
        category=parsed["category"],
        entry_type=parsed["type"],
    )
