"""Trading-session predicates used to gate the scheduled revisit scan."""

from datetime import date, datetime, time, timezone
from typing import Iterable, Optional, Protocol
from zoneinfo import ZoneInfo


class MarketClock(Protocol):
    def is_open(self, now: Optional[datetime] = None) -> bool: ...


class USEquityMarketClock:
    """Regular US equity session: Monday to Friday, 09:30 to 16:00 Eastern."""

    OPEN = time(9, 30)
    CLOSE = time(16, 0)

    def __init__(
        self,
        timezone_name: str = "America/New_York",
        holidays: Optional[Iterable[date]] = None,
    ):
        self.tz = ZoneInfo(timezone_name)
        self.holidays = frozenset(holidays or ())

    def is_open(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        local = now.astimezone(self.tz)
        if local.weekday() >= 5 or local.date() in self.holidays:
            return False

        # The closing minute itself still counts as open
        return self.OPEN <= local.time().replace(second=0, microsecond=0) <= self.CLOSE


class AlwaysOpenClock:
    """Clock used for forced, on-demand scans."""

    def is_open(self, now: Optional[datetime] = None) -> bool:
        return True
