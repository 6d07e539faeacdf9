"""Repository classes for data access."""

from .alert_history import AlertHistoryRepository
from .alert_settings import AlertSettingsRepository
from .base import BaseRepository
from .catalyst import CatalystRepository
from .watchlist import WatchlistRepository

__all__ = [
    "AlertHistoryRepository",
    "AlertSettingsRepository",
    "BaseRepository",
    "CatalystRepository",
    "WatchlistRepository",
]
