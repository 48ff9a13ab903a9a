"""Alembic environment for the entries schema.

The database URL comes from the active settings profile (or `DATABASE_URL`),
never from `alembic.ini`.
"""

from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import MetaData

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from backend.app.config import load_settings  # noqa: E402
from backend.app.domain.entries.gateway import build_entries_table  # noqa: E402
from backend.app.infra.db import build_engine  # noqa: E402

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

settings = load_settings()
target_metadata = MetaData()
build_entries_table(target_metadata)

CONFIGURE_OPTIONS = {
    "target_metadata": target_metadata,
    "compare_type": True,
    "version_table": "alembic_version",
}


def run_offline() -> None:
    """Emit SQL to stdout for `alembic upgrade --sql`."""

    context.configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **CONFIGURE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = build_engine(settings)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **CONFIGURE_OPTIONS)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
