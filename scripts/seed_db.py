"""Seed script for the entries table.

Creates a handful of sample entries for one owner so local UIs and API calls
have data to read.
"""

from __future__ import annotations

import argparse
from datetime import datetime, timedelta, timezone
from typing import List

from backend.app.config import load_settings
from backend.app.domain.entries import EntryService, build_entry_store_gateway

DEFAULT_OWNER_ID = "dev-user"


def build_seed_entries(timestamp: datetime) -> List[dict[str, object]]:
    """Return static seed payloads, dated relative to `timestamp`."""

    return [
        {
            "description": "Monthly salary",
            "category": "salary",
            "amount": 3200,
            "type": "income",
            "date": timestamp - timedelta(days=14),
        },
        {
            "description": "Groceries",
            "category": "food",
            "amount": 86.4,
            "type": "expense",
            "date": timestamp - timedelta(days=6),
        },
        {
            "description": "Bus pass",
            "category": "transport",
            "amount": 45,
            "type": "expense",
            "date": timestamp - timedelta(days=3),
        },
        {
            "description": "Electricity bill",
            "category": "utilities",
            "amount": 72.15,
            "type": "expense",
            "date": timestamp - timedelta(days=1),
        },
        {
            "description": "Online course",
            "category": "education",
            "amount": 129,
            "type": "expense",
            "date": timestamp,
        },
    ]


def seed_entries(owner_id: str) -> int:
    settings = load_settings()
    gateway = build_entry_store_gateway(settings)
    gateway.open()
    try:
        service = EntryService(gateway)
        payloads = build_seed_entries(datetime.now(timezone.utc))
        for payload in payloads:
            service.create(owner_id, payload)
    finally:
        gateway.close()
    return len(payloads)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--owner", default=DEFAULT_OWNER_ID, help="Owner id to seed")
    args = parser.parse_args()
    inserted = seed_entries(args.owner)
    print(f"Seeded {inserted} entries for owner '{args.owner}'.")


if __name__ == "__main__":
    main()
