"""Shopping week windowing.

A shopping week runs Sunday to the Monday eight days later (9 days
inclusive), so consecutive windows overlap on Sunday and Monday. Any anchor
maps to the window starting on the most recent Sunday: a Sunday starts its
own window and a Monday resolves to the window that started the day before.

Blackout ranges mark days (e.g. away from home) that are excluded from the
active dates of a window.
"""
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Any

from household.utilities.constants import ISO_DATE

WINDOW_DAYS = 9


class Blackout:
    def __init__(self, start_date: date, end_date: date, reason: str = "", id: str = ""):
        if end_date < start_date:
            raise ValueError("Blackout end_date is before start_date")
        self.id = id
        self.start_date = start_date
        self.end_date = end_date
        self.reason = reason

    def covers(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date

    @staticmethod
    def from_dict(data):
        return Blackout(date.fromisoformat(str(data["start_date"])[:10]),
                        date.fromisoformat(str(data["end_date"])[:10]),
                        data.get("reason") or "", data.get("id", ""))

    def to_dict(self):
        return {
            "id": self.id,
            "start_date": self.start_date.strftime(ISO_DATE),
            "end_date": self.end_date.strftime(ISO_DATE),
            "reason": self.reason,
        }


def get_shopping_week_range(anchor: date) -> Dict[str, date]:
    # a Monday resolves to the window that started the day before
    start = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    return {"start": start, "end": start + timedelta(days=WINDOW_DAYS - 1)}


def get_shopping_week_dates(anchor: date) -> List[date]:
    start = get_shopping_week_range(anchor)["start"]
    return [start + timedelta(days=i) for i in range(WINDOW_DAYS)]


def get_shopping_week_date_strings(anchor: date) -> List[str]:
    return [d.strftime(ISO_DATE) for d in get_shopping_week_dates(anchor)]


def format_shopping_week_range(anchor: date) -> str:
    r = get_shopping_week_range(anchor)
    start, end = r["start"], r["end"]
    return f"{start:%a} {start.day} {start:%b} → {end:%a} {end.day} {end:%b %Y}"


def is_date_in_shopping_week(d: date, anchor: date) -> bool:
    r = get_shopping_week_range(anchor)
    return r["start"] <= d <= r["end"]


def get_next_shopping_week(anchor: date) -> date:
    """Start of the following window."""
    return get_shopping_week_range(anchor)["start"] + timedelta(days=7)


def get_previous_shopping_week(anchor: date) -> date:
    return get_shopping_week_range(anchor)["start"] - timedelta(days=7)


def is_current_shopping_week(anchor: date, today: Optional[date] = None) -> bool:
    """Today lies inside anchor's window; on the overlapping Sunday and Monday two windows qualify."""
    return is_date_in_shopping_week(today or date.today(), anchor)


def is_date_blackout(d: date, blackouts: Iterable[Blackout]) -> bool:
    return any(b.covers(d) for b in blackouts)


def get_blackout_reason(d: date, blackouts: Iterable[Blackout]) -> Optional[str]:
    for b in blackouts:
        if b.covers(d):
            return b.reason or None
    return None


def get_active_dates(anchor: date, blackouts: Iterable[Blackout]) -> List[date]:
    blackouts = list(blackouts)
    return [d for d in get_shopping_week_dates(anchor) if not is_date_blackout(d, blackouts)]


def get_smart_week_start(today: Optional[date] = None) -> date:
    """Monday of the current week; on Sunday, the Monday coming up."""
    today = today or date.today()
    if today.weekday() == 6:
        return today + timedelta(days=1)
    return today - timedelta(days=today.weekday())


def describe_shopping_week(anchor: date, blackouts: Iterable[Blackout] = ()) -> Dict[str, Any]:
    blackouts = list(blackouts)
    r = get_shopping_week_range(anchor)
    return {
        "start": r["start"].strftime(ISO_DATE),
        "end": r["end"].strftime(ISO_DATE),
        "label": format_shopping_week_range(anchor),
        "dates": get_shopping_week_date_strings(anchor),
        "active_dates": [d.strftime(ISO_DATE) for d in get_active_dates(anchor, blackouts)],
        "blackout_days": [
            {"date": d.strftime(ISO_DATE), "reason": get_blackout_reason(d, blackouts)}
            for d in get_shopping_week_dates(anchor) if is_date_blackout(d, blackouts)
        ],
        "next_start": get_next_shopping_week(anchor).strftime(ISO_DATE),
        "previous_start": get_previous_shopping_week(anchor).strftime(ISO_DATE),
    }


__all__ = [
    'WINDOW_DAYS', 'Blackout', 'get_shopping_week_range', 'get_shopping_week_dates',
    'get_shopping_week_date_strings', 'format_shopping_week_range', 'is_date_in_shopping_week',
    'get_next_shopping_week', 'get_previous_shopping_week', 'is_current_shopping_week',
    'is_date_blackout', 'get_blackout_reason', 'get_active_dates', 'get_smart_week_start',
    'describe_shopping_week',
]
