"""Database engine helpers."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from ...config import Settings

__all__ = ["build_engine"]


def build_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine for the configured entry store."""

    return create_engine(
        settings.database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,
    )
