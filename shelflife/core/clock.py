# shelflife/core/clock.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from shelflife.core.settings import settings


def today(tz_name: Optional[str] = None) -> date:
    """
    Data calendaristică curentă (fără oră), sursa lui `today` pentru raport.
    - tz_name / REPORT_TIMEZONE: zonă IANA; dacă lipsește, data locală a host-ului.
    """
    tz_name = (tz_name or settings.REPORT_TIMEZONE or "").strip()
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).date()
    return date.today()
