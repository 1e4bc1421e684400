"""Bill domain entity: a recurring payment with a due day, frequency and optional active window."""
from datetime import date
from typing import Optional

from household.utilities.constants import ISO_DATE

FREQUENCIES = ("weekly", "fortnightly", "monthly", "quarterly", "biannual", "yearly")


def _parse_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


class Bill:
    def __init__(self, id: str = "", name: str = "", amount: float = 0.0, due_day: int = 1,
                 frequency: str = "monthly", start_date: Optional[date] = None,
                 end_date: Optional[date] = None, is_active: bool = True,
                 category: str = "", user_id: str = ""):
        self.id = id
        self.name = name
        self.amount = float(amount)
        self.due_day = int(due_day)
        self.frequency = frequency
        self.start_date = start_date
        self.end_date = end_date
        self.is_active = is_active
        self.category = category
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"Bill({self.name!r}, {self.amount}, {self.frequency}, day {self.due_day})"

    @staticmethod
    def from_dict(data):
        '''Creates a Bill from a stored row. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        allowed = {"id", "name", "amount", "due_day", "frequency", "start_date",
                   "end_date", "is_active", "category", "user_id"}
        filtered = {k: v for k, v in d.items() if k in allowed and v is not None}
        filtered["start_date"] = _parse_date(d.get("start_date"))
        filtered["end_date"] = _parse_date(d.get("end_date"))
        return Bill(**filtered)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "amount": self.amount,
            "due_day": self.due_day,
            "frequency": self.frequency,
            "start_date": self.start_date.strftime(ISO_DATE) if self.start_date else None,
            "end_date": self.end_date.strftime(ISO_DATE) if self.end_date else None,
            "is_active": self.is_active,
            "category": self.category,
        }
