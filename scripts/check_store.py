"""Connectivity check for the configured entry store."""

from __future__ import annotations

import sys

from sqlalchemy import func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from backend.app.config import load_settings
from backend.app.domain.entries.gateway import PostgresEntryStoreGateway
from backend.app.infra.db import build_engine


def main() -> int:
    settings = load_settings()
    url = make_url(settings.database_url)
    print(f"Testing entry store connection: {url.render_as_string(hide_password=True)}")
    engine = build_engine(settings)
    gateway = PostgresEntryStoreGateway(engine)
    if not gateway.ping():
        print("Entry store connection failed; check DATABASE_URL and network access.")
        gateway.close()
        return 1
    try:
        with engine.connect() as conn:
            total = conn.execute(
                select(func.count()).select_from(gateway.table)
            ).scalar_one()
    except SQLAlchemyError as exc:
        print(f"Connected, but the entries table is not readable: {exc}")
        return 1
    finally:
        gateway.close()
    print(f"Connected to {url.database} ({engine.dialect.name}); entries: {total}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
