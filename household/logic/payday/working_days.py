"""UK working-day helpers.

Weekends and England & Wales bank holidays are non-working days. The holiday
set starts from the bundled fallback list and can be replaced at startup with
set_bank_holidays() when a fresher source is available.
"""
from datetime import date, timedelta
from typing import Iterable, Set

from household.utilities.constants import UK_BANK_HOLIDAYS

_bank_holidays: Set[date] = {date.fromisoformat(d) for d in UK_BANK_HOLIDAYS}


def set_bank_holidays(dates: Iterable) -> None:
    """Replace the cached bank holiday set (accepts date objects or ISO strings)."""
    global _bank_holidays
    _bank_holidays = {d if isinstance(d, date) else date.fromisoformat(str(d)) for d in dates}


def get_bank_holidays() -> Set[date]:
    return set(_bank_holidays)


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def is_bank_holiday(d: date) -> bool:
    return d in _bank_holidays


def is_working_day(d: date) -> bool:
    return not is_weekend(d) and not is_bank_holiday(d)


def get_previous_working_day(d: date) -> date:
    """Nearest working day strictly before d."""
    cur = d - timedelta(days=1)
    while not is_working_day(cur):
        cur -= timedelta(days=1)
    return cur


def get_next_working_day(d: date) -> date:
    """Nearest working day strictly after d."""
    cur = d + timedelta(days=1)
    while not is_working_day(cur):
        cur += timedelta(days=1)
    return cur


def get_closest_working_day(d: date) -> date:
    """Nearer of the previous and next working day; a tie goes to the previous one."""
    prev = get_previous_working_day(d)
    nxt = get_next_working_day(d)
    if (nxt - d) < (d - prev):
        return nxt
    return prev


def get_monzo_payday_for_month(year: int, month: int) -> date:
    """Early-pay date for a salary due on the 20th.

    Monday, Saturday and Sunday land on the preceding Friday; a bank holiday
    falls back to the previous working day.
    """
    d = date(year, month, 20)
    wd = d.weekday()
    if wd == 0:
        return d - timedelta(days=3)
    if wd == 5:
        return d - timedelta(days=1)
    if wd == 6:
        return d - timedelta(days=2)
    if is_bank_holiday(d):
        return get_previous_working_day(d)
    return d


__all__ = [
    'set_bank_holidays', 'get_bank_holidays', 'is_weekend', 'is_bank_holiday', 'is_working_day',
    'get_previous_working_day', 'get_next_working_day', 'get_closest_working_day',
    'get_monzo_payday_for_month',
]
