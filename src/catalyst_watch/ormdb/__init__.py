"""Database layer: engine, ORM models, repositories and the SQL reference store."""

from .database import (
    Base,
    check_database_health,
    configure_database,
    create_tables,
    get_engine,
    get_session_sync,
)
from .models import AlertHistory, AlertSettingsRecord, CatalystRecord, WatchlistEntry

__all__ = [
    "AlertHistory",
    "AlertSettingsRecord",
    "Base",
    "CatalystRecord",
    "WatchlistEntry",
    "check_database_health",
    "configure_database",
    "create_tables",
    "get_engine",
    "get_session_sync",
]
