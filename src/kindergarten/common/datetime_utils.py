from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    if not value:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} phải có dạng YYYY-MM-DD")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} phải có dạng YYYY-MM-DD")


def parse_optional_time(value: Optional[str], field_name: str) -> Optional[time]:
    if not value:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} phải có dạng HH:MM[:SS]")
    try:
        return time.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{field_name} phải có dạng HH:MM[:SS]")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()


def age_in_years(dob: date, *, on: Optional[date] = None) -> int:
    on = on or today_local()
    years = on.year - dob.year
    if (on.month, on.day) < (dob.month, dob.day):
        years -= 1
    return years
