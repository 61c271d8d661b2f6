from __future__ import annotations

import datetime
from zoneinfo import ZoneInfo

from quoteservice.schemas.quote import MarketStatus

B3_TIMEZONE = ZoneInfo("America/Sao_Paulo")
SESSION_OPEN = datetime.time(10, 0)
SESSION_CLOSE = datetime.time(17, 0)


def is_market_open(now: datetime.datetime | None = None) -> bool:
    """B3 regular session: Monday to Friday, 10:00-17:00 local time."""
    local = (now or datetime.datetime.now(datetime.UTC)).astimezone(B3_TIMEZONE)
    if local.weekday() >= 5:
        return False
    return SESSION_OPEN <= local.time() < SESSION_CLOSE


def market_status(now: datetime.datetime | None = None) -> MarketStatus:
    now = now or datetime.datetime.now(datetime.UTC)
    is_open = is_market_open(now)
    return MarketStatus(is_open=is_open, status="open" if is_open else "closed", checked_at=now)
