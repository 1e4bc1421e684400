"""Stock domain entities: consumable items (toiletries, groceries), usage logs and retailer shipping profiles."""
from datetime import date, datetime
from typing import Optional

from household.utilities.constants import ISO_DATE

KINDS = ("toiletry", "grocery")
CATEGORIES = ("body", "hair", "oral", "household", "cleaning", "food", "other")
SIZE_UNITS = ("ml", "g", "units")
STATUSES = ("active", "out_of_stock", "discontinued")


def _as_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.strftime(ISO_DATE) if value else None


class StockItem:
    def __init__(self, id: str = "", name: str = "", kind: str = "toiletry", category: str = "other",
                 total_size: float = 0.0, size_unit: str = "units", cost_per_item: float = 0.0,
                 pack_size: int = 1, usage_rate_per_day: float = 0.0, current_remaining: float = 0.0,
                 status: str = "active", retailer: str = "", notes: Optional[str] = None,
                 full_weight: Optional[float] = None, empty_weight: float = 0.0,
                 current_weight: Optional[float] = None, opened_at: Optional[date] = None,
                 last_weighed_at: Optional[date] = None, finished_at: Optional[date] = None,
                 user_id: str = ""):
        self.id = id
        self.name = name
        self.kind = kind
        self.category = category
        self.total_size = float(total_size)
        self.size_unit = size_unit
        self.cost_per_item = float(cost_per_item)
        self.pack_size = int(pack_size)
        self.usage_rate_per_day = float(usage_rate_per_day)
        self.current_remaining = float(current_remaining)
        self.status = status
        self.retailer = retailer
        self.notes = notes
        self.full_weight = full_weight
        self.empty_weight = float(empty_weight)
        self.current_weight = current_weight
        self.opened_at = opened_at
        self.last_weighed_at = last_weighed_at
        self.finished_at = finished_at
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"StockItem({self.name!r}, {self.current_remaining}/{self.total_size} {self.size_unit})"

    @staticmethod
    def from_dict(data):
        '''Creates a StockItem from a stored row. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        allowed = {"id", "name", "kind", "category", "total_size", "size_unit", "cost_per_item",
                   "pack_size", "usage_rate_per_day", "current_remaining", "status", "retailer",
                   "notes", "full_weight", "empty_weight", "current_weight", "user_id"}
        filtered = {k: v for k, v in d.items() if k in allowed and v is not None}
        for key in ("opened_at", "last_weighed_at", "finished_at"):
            filtered[key] = _as_date(d.get(key))
        return StockItem(**filtered)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "kind": self.kind,
            "category": self.category,
            "total_size": self.total_size,
            "size_unit": self.size_unit,
            "cost_per_item": self.cost_per_item,
            "pack_size": self.pack_size,
            "usage_rate_per_day": self.usage_rate_per_day,
            "current_remaining": self.current_remaining,
            "status": self.status,
            "retailer": self.retailer,
            "notes": self.notes,
            "full_weight": self.full_weight,
            "empty_weight": self.empty_weight,
            "current_weight": self.current_weight,
            "opened_at": _iso(self.opened_at),
            "last_weighed_at": _iso(self.last_weighed_at),
            "finished_at": _iso(self.finished_at),
        }


class UsageLog:
    def __init__(self, logged_date: date, amount_used: float, item_id: str = ""):
        self.logged_date = logged_date
        self.amount_used = float(amount_used)
        self.item_id = item_id

    @staticmethod
    def from_dict(data):
        return UsageLog(_as_date(data.get("logged_date")) or date.today(),
                        data.get("amount_used", 0), data.get("item_id", ""))

    def to_dict(self):
        return {"item_id": self.item_id, "logged_date": _iso(self.logged_date), "amount_used": self.amount_used}


class ShippingProfile:
    """Retailer lead times. cutoff_time is a local "HH:MM" string or None."""

    def __init__(self, retailer: str = "", dispatch_days_min: int = 0, dispatch_days_max: int = 0,
                 delivery_days_min: int = 0, delivery_days_max: int = 0,
                 dispatches_weekends: bool = False, delivers_weekends: bool = False,
                 cutoff_time: Optional[str] = None):
        self.retailer = retailer
        self.dispatch_days_min = int(dispatch_days_min)
        self.dispatch_days_max = int(dispatch_days_max)
        self.delivery_days_min = int(delivery_days_min)
        self.delivery_days_max = int(delivery_days_max)
        self.dispatches_weekends = bool(dispatches_weekends)
        self.delivers_weekends = bool(delivers_weekends)
        self.cutoff_time = cutoff_time or None

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        allowed = {"retailer", "dispatch_days_min", "dispatch_days_max", "delivery_days_min",
                   "delivery_days_max", "dispatches_weekends", "delivers_weekends", "cutoff_time"}
        return ShippingProfile(**{k: v for k, v in d.items() if k in allowed and v is not None})

    def to_dict(self):
        return {
            "retailer": self.retailer,
            "dispatch_days_min": self.dispatch_days_min,
            "dispatch_days_max": self.dispatch_days_max,
            "delivery_days_min": self.delivery_days_min,
            "delivery_days_max": self.delivery_days_max,
            "dispatches_weekends": self.dispatches_weekends,
            "delivers_weekends": self.delivers_weekends,
            "cutoff_time": self.cutoff_time,
        }
