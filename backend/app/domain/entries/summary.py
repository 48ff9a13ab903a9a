"""Aggregation helpers for `/api/entries/summary/stats`."""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .models import Category, Entry, EntryType

__all__ = ["CategoryTotals", "EntrySummary", "summarize_entries"]


@dataclass(frozen=True)
class CategoryTotals:
    income: float = 0.0
    expense: float = 0.0

    @property
    def total(self) -> float:
        return self.income - self.expense


@dataclass(frozen=True)
class EntrySummary:
    """Totals plus per-category breakdown over a set of entries."""

    total_income: float = 0.0
    total_expenses: float = 0.0
    entries_count: int = 0
    category_breakdown: Dict[Category, CategoryTotals] = field(default_factory=dict)

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expenses

    def to_payload(self) -> dict[str, object]:
        return {
            "totalIncome": self.total_income,
            "totalExpenses": self.total_expenses,
            "balance": self.balance,
            "entriesCount": self.entries_count,
            "categoryBreakdown": {
                category.value: {
                    "income": totals.income,
                    "expense": totals.expense,
                    "total": totals.total,
                }
                for category, totals in self.category_breakdown.items()
            },
        }


def summarize_entries(entries: Iterable[Entry]) -> EntrySummary:
    """Reduce entries in one pass.

    Magnitudes are bucketed per (category, type) and summed with `math.fsum`,
    which is exactly rounded, so the result does not depend on input order.
    """

    magnitudes: Dict[Category, Dict[EntryType, List[float]]] = defaultdict(
        lambda: defaultdict(list)
    )
    count = 0
    for entry in entries:
        magnitudes[entry.category][entry.entry_type].append(abs(entry.amount))
        count += 1

    breakdown = {
        category: CategoryTotals(
            income=math.fsum(by_type.get(EntryType.INCOME, ())),
            expense=math.fsum(by_type.get(EntryType.EXPENSE, ())),
        )
        for category, by_type in sorted(
            magnitudes.items(), key=lambda item: item[0].value
        )
    }
    return EntrySummary(
        total_income=_fsum_type(magnitudes, EntryType.INCOME),
        total_expenses=_fsum_type(magnitudes, EntryType.EXPENSE),
        entries_count=count,
        category_breakdown=breakdown,
    )


def _fsum_type(
    magnitudes: Dict[Category, Dict[EntryType, List[float]]],
    entry_type: EntryType,
) -> float:
    return math.fsum(
        value
        for by_type in magnitudes.values()
        for value in by_type.get(entry_type, ())
    )
