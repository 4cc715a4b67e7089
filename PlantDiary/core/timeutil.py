from __future__ import annotations
import calendar
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterable, List

from PlantDiary.models import YearMonth

# Entries are browsed in Japan Standard Time regardless of where the host runs.
JST = timezone(timedelta(hours=9), name="JST")

# Watermark used when the store holds no entries yet.
MIN_INSTANT = datetime.min.replace(tzinfo=timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken as UTC readings; aware ones are converted."""
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def to_naive_utc(dt: datetime) -> datetime:
    return ensure_utc(dt).replace(tzinfo=None)


def local_day_start(dt: datetime, tz: tzinfo = JST) -> datetime:
    """Midnight of `dt`'s calendar day in `tz`, returned in UTC."""
    local = ensure_utc(dt).astimezone(tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0).astimezone(timezone.utc)


def subtract_months(dt: datetime, months: int) -> datetime:
    """Calendar month subtraction, clamping the day (Mar 31 - 1 month = Feb 28/29)."""
    month_index = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def month_bounds(year: int, month: int, tz: tzinfo = JST):
    """Half-open UTC range covering one calendar month in `tz`."""
    start_local = datetime(year, month, 1, tzinfo=tz)
    next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)
    end_local = datetime(next_year, next_month, 1, tzinfo=tz)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def year_months(timestamps: Iterable[datetime], tz: tzinfo = JST) -> List[YearMonth]:
    """Distinct (year, month) pairs in `tz`, newest first."""
    seen = set()
    for ts in timestamps:
        local = ensure_utc(ts).astimezone(tz)
        seen.add((local.year, local.month))
    return [YearMonth(year=y, month=m) for y, m in sorted(seen, reverse=True)]
