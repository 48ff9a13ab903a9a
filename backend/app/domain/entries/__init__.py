"""Entries domain package."""

from .errors import (
    AuthError,
    EntryNotFoundError,
    EntryServiceError,
    EntryValidationError,
    StoreError,
)
from .filters import EntryFilters, build_entry_filters
from .gateway import (
    EntryStoreGateway,
    InMemoryEntryStoreGateway,
    PostgresEntryStoreGateway,
    build_entries_table,
    build_entry_store_gateway,
)
from .models import Category, Entry, EntryPatch, EntryType, NewEntry
from .normalizer import normalize_entry_patch, normalize_new_entry, signed_amount
from .service import EntryService
from .summary import CategoryTotals, EntrySummary, summarize_entries

__all__ = [
    "AuthError",
    "Category",
    "CategoryTotals",
    "Entry",
    "EntryFilters",
    "EntryNotFoundError",
    "EntryPatch",
    "EntryService",
    "EntryServiceError",
    "EntryStoreGateway",
    "EntrySummary",
    "EntryType",
    "EntryValidationError",
    "InMemoryEntryStoreGateway",
    "NewEntry",
    "PostgresEntryStoreGateway",
    "StoreError",
    "build_entries_table",
    "build_entry_filters",
    "build_entry_store_gateway",
    "normalize_entry_patch",
    "normalize_new_entry",
    "signed_amount",
    "summarize_entries",
]
